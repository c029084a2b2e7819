"""
Response DTOs for the captcha endpoints.

CaptchaResponse: GET  /api/v1/captcha  (200)
SuccessResponse: POST /api/v1/verify and GET /api/v1/check  (200)

Field names match the widget contract exactly (``input`` is the kind of
input box the widget should render).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class CaptchaResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    input: str
    image: str


class SuccessResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
