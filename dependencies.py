"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Services are built once in the app lifespan and
read back from app.state.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import Depends, Header, Request

from config import AppSettings
from services.auth_service import AuthService
from services.product_service import ProductService
from services.token_service import TokenService


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_product_service(request: Request) -> ProductService:
    return request.app.state.product_service


def get_bearer_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    """Token from the Authorization header, or None if absent or not Bearer."""
    return TokenService.extract_bearer(authorization)


def get_current_claims(
    token: Optional[str] = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> dict[str, Any]:
    """Claims of a valid access token. Raises AuthenticationError (401) otherwise."""
    return auth.authenticate(token)
