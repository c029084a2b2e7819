"""
Request DTOs for the captcha endpoints.

Field types are deliberately loose (``Any``): shape checks such as id length
belong to the service so that every malformed body produces the same
``{"err": true}`` response instead of a framework validation error.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class VerifyCaptchaRequest(BaseModel):
    """Request body for POST /api/v1/verify."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Any = None
    input: Any = None
