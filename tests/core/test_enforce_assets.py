"""Asset Enforcement — tests for logo/deck type and size rules.

Tests cover:
    - Allowed logo types pass; others give the logo type message
    - Deck must be PDF
    - Size limits are inclusive
    - storage_path layout and filename sanitizing
"""

import pytest

from fundfeed.core.domain_types import AssetKind
from fundfeed.core.enforce_assets import (
    DECK_MAX_BYTES, LOGO_MAX_BYTES, storage_path,
    validate_deck_file, validate_logo_file,
)
from fundfeed.core.errors import FieldValidationError


@pytest.mark.parametrize("content_type", ["image/png", "image/jpeg", "image/jpg", "image/webp"])
def test_logo_types_accepted(content_type):
    validate_logo_file(content_type, 1024)


def test_logo_gif_rejected():
    with pytest.raises(FieldValidationError) as exc:
        validate_logo_file("image/gif", 1024)
    assert exc.value.message == "Invalid file type. Allowed types: PNG, JPG, JPEG, WEBP"


def test_logo_size_limit_inclusive():
    validate_logo_file("image/png", LOGO_MAX_BYTES)
    with pytest.raises(FieldValidationError) as exc:
        validate_logo_file("image/png", LOGO_MAX_BYTES + 1)
    assert exc.value.message == "File size exceeds 5MB limit"


def test_deck_requires_pdf():
    validate_deck_file("application/pdf", DECK_MAX_BYTES)
    with pytest.raises(FieldValidationError) as exc:
        validate_deck_file("application/vnd.ms-powerpoint", 10)
    assert exc.value.message == "Invalid file type. Only PDF files are allowed"


def test_deck_size_limit():
    with pytest.raises(FieldValidationError) as exc:
        validate_deck_file("application/pdf", DECK_MAX_BYTES + 1)
    assert exc.value.message == "File size exceeds 10MB limit"


def test_custom_max_bytes():
    with pytest.raises(FieldValidationError):
        validate_logo_file("image/png", 2048, max_bytes=1024)


def test_storage_path_layout():
    assert storage_path(AssetKind.LOGO, "r1", "logo.png") == "logos/r1/logo.png"
    assert storage_path(AssetKind.DECK, "r1", "deck.pdf") == "decks/r1/deck.pdf"


def test_storage_path_strips_directories():
    assert storage_path(AssetKind.DECK, "r1", "../../etc/deck.pdf") == "decks/r1/deck.pdf"
    assert storage_path(AssetKind.LOGO, "r1", "C:\\tmp\\a.png") == "logos/r1/a.png"


def test_storage_path_requires_name():
    with pytest.raises(FieldValidationError):
        storage_path(AssetKind.LOGO, "r1", "dir/")
