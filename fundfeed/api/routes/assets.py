"""Assets — pre-upload checks for round logos and pitch decks.

Returns the object store key the client should upload to. Bytes never pass
through this service.
"""

from fastapi import APIRouter, Depends

from fundfeed.api.dependencies import get_current_user_id
from fundfeed.config import get_settings
from fundfeed.core.domain_types import AssetKind, UserId
from fundfeed.core.enforce_assets import (
    storage_path, validate_deck_file, validate_logo_file,
)
from fundfeed.schemas.asset import AssetValidationRequest, AssetValidationResponse

router = APIRouter(prefix="/api/v1/assets", tags=["assets"])


@router.post("/validate", response_model=AssetValidationResponse)
async def validate_asset(
    body: AssetValidationRequest,
    user_id: UserId = Depends(get_current_user_id),
):
    settings = get_settings()
    if body.kind == AssetKind.LOGO:
        validate_logo_file(body.content_type, body.size, settings.logo_max_bytes)
    else:
        validate_deck_file(body.content_type, body.size, settings.deck_max_bytes)
    return AssetValidationResponse(
        valid=True, path=storage_path(body.kind, body.round_id, body.filename),
    )
