"""Asset Schemas — pre-upload validation of logo and deck files."""

from pydantic import Field

from fundfeed.core.domain_types import AssetKind
from fundfeed.schemas.base import CamelModel


class AssetValidationRequest(CamelModel):
    kind: AssetKind
    round_id: str = Field(min_length=1, max_length=128)
    filename: str = Field(min_length=1, max_length=255)
    content_type: str = Field(min_length=1, max_length=100)
    size: int = Field(ge=0)


class AssetValidationResponse(CamelModel):
    valid: bool
    path: str
