"""Request-scoped accessors for the objects created in `create_app`."""

from fastapi import Request

from dolmenwood.config import Settings
from dolmenwood.dashboard import Dashboard
from dolmenwood.storage import LocalAuthService


def get_dashboard(request: Request) -> Dashboard:
    return request.app.state.dashboard


def get_auth(request: Request) -> LocalAuthService:
    return request.app.state.auth


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
