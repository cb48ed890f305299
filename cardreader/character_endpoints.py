# cardreader/character_endpoints.py
# Upload endpoints for reading character cards out of JSON, PNG and WebP files
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from cardreader.card_extractor import CharacterExtractor
from cardreader.dependencies import get_character_extractor, get_logger, get_settings_manager
from cardreader.error_handlers import handle_card_error
from cardreader.errors import CardReaderError
from cardreader.log_manager import LogManager
from cardreader.models.character_data import Character
from cardreader.models.media_type import VALID_FILE_EXTENSIONS
from cardreader.response_models import (
    AcceptInfo,
    CharacterSummary,
    DataResponse,
    STANDARD_RESPONSES,
    create_data_response,
)
from cardreader.settings_manager import SettingsManager

router = APIRouter(
    prefix="/api",
    tags=["characters"],
    responses={404: {"description": "Not found"}},
)


@router.get("/characters/accept", response_model=DataResponse[AcceptInfo], summary="Accepted card file extensions")
async def get_accepted_extensions():
    """File extension hints for upload pickers."""
    return create_data_response({
        "accept": Character.INPUT_ACCEPT,
        "extensions": VALID_FILE_EXTENSIONS,
    })


@router.post("/characters/extract", response_model=DataResponse[CharacterSummary], responses=STANDARD_RESPONSES, summary="Upload a card and extract its character")
async def extract_character_endpoint(
    file: UploadFile = File(...),
    extractor: CharacterExtractor = Depends(get_character_extractor),
    settings_manager: SettingsManager = Depends(get_settings_manager),
    logger: LogManager = Depends(get_logger)
):
    """Read a character card from an uploaded JSON, PNG or WebP file."""
    logger.log_step(f"POST /api/characters/extract for file: {file.filename} ({file.content_type})")

    max_bytes = settings_manager.get_setting("max_upload_bytes")
    if max_bytes and file.size is not None and file.size > max_bytes:
        logger.log_warning(f"Upload {file.filename} is {file.size} bytes, limit is {max_bytes}")
        raise HTTPException(status_code=413, detail=f"File exceeds the {max_bytes} byte upload limit")

    try:
        character = await extractor.extract_upload(file)
    except CardReaderError as e:
        raise handle_card_error(e) from e

    include_avatar = settings_manager.get_setting("include_fallback_avatar", True)
    return create_data_response(
        character.to_summary(include_fallback_avatar=include_avatar),
        message=f"Extracted character '{character.name}'"
    )
