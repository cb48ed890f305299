# cardreader/dependencies.py
# Dependency providers backed by app.state

from fastapi import HTTPException, Request
from typing import cast

from cardreader.card_extractor import CharacterExtractor
from cardreader.log_manager import LogManager
from cardreader.settings_manager import SettingsManager

def get_logger(request: Request) -> LogManager:
    """Get LogManager instance from app state."""
    logger = cast(LogManager, getattr(request.app.state, "logger", None))
    if logger is None:
        raise HTTPException(status_code=500, detail="Logger not initialized")
    return logger

def get_settings_manager(request: Request) -> SettingsManager:
    """Get SettingsManager instance from app state."""
    settings_manager = cast(SettingsManager, getattr(request.app.state, "settings_manager", None))
    if settings_manager is None:
        raise HTTPException(status_code=500, detail="Settings manager not initialized")
    return settings_manager

def get_character_extractor(request: Request) -> CharacterExtractor:
    """Get CharacterExtractor instance from app state."""
    extractor = cast(CharacterExtractor, getattr(request.app.state, "character_extractor", None))
    if extractor is None:
        raise HTTPException(status_code=500, detail="Character extractor not initialized")
    return extractor
