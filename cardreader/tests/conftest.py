# cardreader/tests/conftest.py
import base64
import json
import sys
from io import BytesIO
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image, PngImagePlugin

# Add project root to sys.path to allow for absolute imports like 'from cardreader.errors import ...'
project_root = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(project_root))

EXIF_IFD_POINTER = 0x8769
USER_COMMENT = 0x9286


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing."""
    logger = MagicMock()
    logger.log_step = MagicMock()
    logger.log_info = MagicMock()
    logger.log_error = MagicMock()
    logger.log_warning = MagicMock()
    return logger


@pytest.fixture
def v1_metadata():
    """Flat, pre-envelope character metadata."""
    return {
        "name": "Aria",
        "description": "A wandering bard.",
        "personality": "Cheerful",
        "scenario": "A roadside inn.",
        "first_mes": "Well met, traveller!",
        "mes_example": "<START>{{user}}: Hi\n{{char}}: Hello!",
        "avatar": "none",
        "tags": ["bard", "fantasy"],
        "create_date": "2023-05-01 @12h 00m 00s 000ms",
        "extensions": {"talkativeness": "0.5", "fav": False,
                       "chub": {"id": 1234, "full_path": "aria", "expressions": None, "related_lorebooks": []}},
    }


@pytest.fixture
def v2_card():
    """chara_card_v2 envelope around nested data."""
    return {
        "spec": "chara_card_v2",
        "spec_version": "2.0",
        "name": "Outer Name",
        "data": {
            "name": "Test Character",
            "description": "A test character for unit testing.",
            "personality": "Helpful and friendly.",
            "scenario": "Testing environment.",
            "first_mes": "Hello! I'm a test character.",
            "mes_example": "",
            "creator_notes": "Created for testing.",
            "system_prompt": "You are a test character.",
            "post_history_instructions": "",
            "tags": ["test", "unit-test"],
            "creator": "Test Suite",
            "character_version": "1.0",
            "alternate_greetings": ["Hi again."],
            "character_book": {"entries": [], "name": ""},
            "extensions": {"depth_prompt": {"prompt": "", "depth": 0, "role": "system"}},
        },
    }


def encode_chara(card) -> str:
    return base64.b64encode(json.dumps(card).encode("utf-8")).decode("ascii")


def make_png(text_chunks=None, color="red") -> bytes:
    """A small PNG with the given tEXt keyword/value pairs."""
    img = Image.new("RGBA", (8, 8), color=color)
    png_info = PngImagePlugin.PngInfo()
    for keyword, value in (text_chunks or {}).items():
        png_info.add_text(keyword, value)
    output = BytesIO()
    img.save(output, format="PNG", pnginfo=png_info)
    return output.getvalue()


def make_webp(user_comment=None) -> bytes:
    """A small WebP whose EXIF UserComment holds user_comment (str = ASCII tag, bytes = UNDEFINED tag)."""
    img = Image.new("RGB", (8, 8), color="green")
    output = BytesIO()
    if user_comment is None:
        img.save(output, format="WEBP")
    else:
        exif = Image.Exif()
        exif[EXIF_IFD_POINTER] = {USER_COMMENT: user_comment}
        img.save(output, format="WEBP", exif=exif)
    return output.getvalue()


def byte_list(text: str, bom: bool = False) -> str:
    raw = text.encode("utf-8")
    if bom:
        raw = b"\xef\xbb\xbf" + raw
    return ",".join(str(b) for b in raw)


@pytest.fixture
def png_with_v1(v1_metadata):
    return make_png({"Software": "tests", "chara": encode_chara(v1_metadata)})


@pytest.fixture
def png_with_v2(v2_card):
    return make_png({"chara": encode_chara(v2_card)})


@pytest.fixture
def png_without_metadata():
    return make_png({"Comment": "just a picture"}, color="blue")
