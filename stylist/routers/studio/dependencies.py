"""FastAPI dependencies shared across stylist endpoints."""

from fastapi import Request

from stylist.services.session import StylistSession


def get_session(request: Request) -> StylistSession:
    """Return the single in-memory session owned by the application."""
    return request.app.state.session
