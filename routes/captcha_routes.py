"""
Captcha endpoints.

GET  /captcha?key=&site=: issue a challenge for a provider
POST /verify            : submit an answer, consuming the challenge
GET  /check?id=         : ask whether a challenge id holds a live proof

Mounted under AppSettings.api_prefix (``/api/v1`` by default). Errors are
raised as AppError subclasses and rendered by errors.register_error_handlers.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from dependencies import get_captcha_service
from schemas.dto.requests.captcha import VerifyCaptchaRequest
from schemas.dto.responses.captcha import CaptchaResponse, SuccessResponse
from schemas.dto.responses.common import ErrorResponse
from services.captcha_service import CaptchaLifecycleService

router = APIRouter(tags=["captcha"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.get("/captcha", response_model=CaptchaResponse, responses=_ERROR_RESPONSES)
async def issue_captcha(
    key: Optional[str] = Query(default=None),
    site: Optional[str] = Query(default=None),
    service: CaptchaLifecycleService = Depends(get_captcha_service),
) -> CaptchaResponse:
    issued = await service.issue(key, site)
    return CaptchaResponse(id=issued.id, input=issued.input_kind, image=issued.image)


@router.post("/verify", response_model=SuccessResponse, responses=_ERROR_RESPONSES)
async def verify_captcha(
    body: VerifyCaptchaRequest,
    service: CaptchaLifecycleService = Depends(get_captcha_service),
) -> SuccessResponse:
    return SuccessResponse(success=await service.verify(body.id, body.input))


@router.get("/check", response_model=SuccessResponse)
async def check_captcha(
    id: Optional[str] = Query(default=None),
    service: CaptchaLifecycleService = Depends(get_captcha_service),
) -> SuccessResponse:
    return SuccessResponse(success=service.check(id))
