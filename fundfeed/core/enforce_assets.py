"""Asset Enforcement — type and size rules for logo and pitch deck files.

Invariants:
    - Logo: PNG, JPEG or WEBP, at most LOGO_MAX_BYTES
    - Deck: PDF only, at most DECK_MAX_BYTES
    - Storage paths are {kind}s/{round_id}/{filename}; filename never contains "/"

Design Decisions:
    - Validation only — upload mechanics belong to the object store client
"""

from fundfeed.core.domain_types import AssetKind
from fundfeed.core.errors import FieldValidationError


LOGO_MAX_BYTES: int = 5 * 1024 * 1024
DECK_MAX_BYTES: int = 10 * 1024 * 1024

ALLOWED_LOGO_TYPES: frozenset[str] = frozenset({
    "image/png", "image/jpeg", "image/jpg", "image/webp",
})
ALLOWED_DECK_TYPES: frozenset[str] = frozenset({"application/pdf"})


def validate_logo_file(
    content_type: str, size: int, max_bytes: int = LOGO_MAX_BYTES,
) -> None:
    if content_type not in ALLOWED_LOGO_TYPES:
        raise FieldValidationError(
            "Invalid file type. Allowed types: PNG, JPG, JPEG, WEBP", "logo",
        )
    if size > max_bytes:
        raise FieldValidationError(
            f"File size exceeds {max_bytes // (1024 * 1024)}MB limit", "logo",
        )


def validate_deck_file(
    content_type: str, size: int, max_bytes: int = DECK_MAX_BYTES,
) -> None:
    if content_type not in ALLOWED_DECK_TYPES:
        raise FieldValidationError(
            "Invalid file type. Only PDF files are allowed", "deck",
        )
    if size > max_bytes:
        raise FieldValidationError(
            f"File size exceeds {max_bytes // (1024 * 1024)}MB limit", "deck",
        )


def storage_path(kind: AssetKind, round_id: str, filename: str) -> str:
    """Object store key for an asset. Strips any directory part of filename."""
    name = filename.replace("\\", "/").rsplit("/", 1)[-1].strip()
    if not name:
        raise FieldValidationError("filename is required", "filename")
    return f"{kind.value}s/{round_id}/{name}"
