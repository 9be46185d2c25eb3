from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class RequestContext:
    """Identity of the request currently being served, as stamped on log lines."""

    request_id: Optional[str] = None
    user_id: Optional[str] = None
    company_id: Optional[str] = None


_EMPTY = RequestContext()
_CURRENT: ContextVar[RequestContext] = ContextVar("menu_builder_request", default=_EMPTY)


def current_context() -> RequestContext:
    return _CURRENT.get()


def bind_request(request_id: str) -> Token:
    """Start a fresh context for one request; pass the token to ``reset_request``."""
    return _CURRENT.set(RequestContext(request_id=request_id))


def bind_identity(user_id: Optional[int], company_id: Optional[int]) -> None:
    # Only effective from the request task itself; a threadpool worker runs on a copy.
    _CURRENT.set(
        replace(
            _CURRENT.get(),
            user_id=str(user_id) if user_id is not None else None,
            company_id=str(company_id) if company_id is not None else None,
        )
    )


def reset_request(token: Token) -> None:
    _CURRENT.reset(token)
