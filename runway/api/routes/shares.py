"""
共有API
Zero-Knowledge 暗号化Blobの保存・取得
"""

from fastapi import APIRouter, Depends, HTTPException

from ...core.exceptions import NotFoundError, RunwayException, ValidationError
from ...core.logging import get_logger, log_error
from ...domain.services.share import ShareService
from ..dependencies import get_app_share_service
from ..schemas import (
    CreateShareRequest,
    CreateShareResponse,
    ErrorResponse,
    GetShareResponse,
    to_iso8601,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/shares", tags=["shares"])


def _to_http_exception(error: RunwayException) -> HTTPException:
    """ドメイン例外を HTTP エラーに変換"""
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=400,
            detail={"error": "invalid_request", "message": error.message},
        )

    if isinstance(error, NotFoundError):
        return HTTPException(
            status_code=404,
            detail={"error": "not_found", "message": "Share not found or has expired"},
        )

    log_error(logger, error)
    return HTTPException(
        status_code=500,
        detail={"error": "internal_error", "message": "Internal server error"},
    )


@router.post(
    "",
    status_code=201,
    response_model=CreateShareResponse,
    responses={400: {"model": ErrorResponse}},
)
async def create_share(
    body: CreateShareRequest,
    service: ShareService = Depends(get_app_share_service),
) -> CreateShareResponse:
    """
    共有を作成

    クライアント側で暗号化されたデータをそのまま保存する。
    サーバーは暗号文の内容を知ることはできない（Zero-Knowledge）。
    """
    try:
        record = await service.create_share(body.encrypted_data, body.expires_in)
    except RunwayException as e:
        raise _to_http_exception(e) from e

    return CreateShareResponse(
        id=record.identifier,
        expires_at=to_iso8601(record.expires_at),
    )


@router.get(
    "/{identifier}",
    response_model=GetShareResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_share(
    identifier: str,
    service: ShareService = Depends(get_app_share_service),
) -> GetShareResponse:
    """
    共有を取得

    サーバーは暗号文をそのまま返す。
    復号はクライアント側で行う（鍵はURLフラグメントにあり、サーバーには届かない）。
    """
    try:
        encrypted_data = await service.get_share(identifier)
    except RunwayException as e:
        raise _to_http_exception(e) from e

    return GetShareResponse(encrypted_data=encrypted_data)
