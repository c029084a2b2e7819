"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. The objects themselves are built once per app in
create_app's lifespan and stored on app.state.
"""

from __future__ import annotations

from fastapi import Request

from infrastructure.providers.protocol import ProviderDirectory
from services.captcha_service import CaptchaLifecycleService


def get_captcha_service(request: Request) -> CaptchaLifecycleService:
    """Return the captcha lifecycle service from app.state."""
    return request.app.state.captcha_service


def get_provider_directory(request: Request) -> ProviderDirectory:
    """Return the provider directory from app.state."""
    return request.app.state.provider_directory
