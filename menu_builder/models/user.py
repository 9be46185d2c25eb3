from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from menu_builder.core.database import Base

FREE_TIER = "Free"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    display_name = Column(String(100), nullable=False)

    # Denormalized link kept in sync on company creation; companies.owner_id is authoritative
    company_id = Column(Integer, nullable=True, index=True)
    is_first_login = Column(Boolean, default=True, nullable=False)
    subscription_tier = Column(String(20), default=FREE_TIER, nullable=False)  # Free | Pro

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
