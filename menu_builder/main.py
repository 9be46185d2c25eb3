import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from menu_builder.core.config import CORS_ORIGINS, UPLOADS_DIR
from menu_builder.core.database import Base, engine
from menu_builder.core.errors import register_error_handlers
from menu_builder.core.logging_setup import configure_logging
from menu_builder.core.startup_checks import ensure_schema_at_head, uses_sqlite, validate_database_environment
from menu_builder.middleware.observability import ObservabilityMiddleware
import menu_builder.models  # registers the tables on Base.metadata

from menu_builder.routers.auth import router as auth_router
from menu_builder.routers.companies import router as companies_router
from menu_builder.routers.menu_items import router as menu_items_router
from menu_builder.routers.public_menu import router as public_menu_router

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(
    os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini"))
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Menu Builder API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)

register_error_handlers(app)

_uploads_path = Path(UPLOADS_DIR)
_uploads_path.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(_uploads_path)), name="uploads")


def _startup_tasks() -> None:
    try:
        validate_database_environment()
        if uses_sqlite():
            # local sqlite: create tables directly, migrations are for real databases
            Base.metadata.create_all(bind=engine)
            return
        ensure_schema_at_head(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise


# Routers
app.include_router(auth_router)
app.include_router(companies_router)
app.include_router(menu_items_router)
app.include_router(public_menu_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
