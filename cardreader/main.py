"""
@file main.py
@description Entry point for the FastAPI application. Builds the app, wires shared state and routes.
@dependencies fastapi, uvicorn
@consumers start scripts, tests
"""
import argparse
import os
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cardreader.card_extractor import CharacterExtractor
from cardreader.character_endpoints import router as character_router
from cardreader.error_handlers import register_exception_handlers
from cardreader.health_endpoints import router as health_router
from cardreader.log_manager import LogManager
from cardreader.settings_manager import SettingsManager, VERSION


def create_app(settings_manager: Optional[SettingsManager] = None,
               logger: Optional[LogManager] = None) -> FastAPI:
    """Build the FastAPI app with logger, settings and extractor on app.state."""
    if settings_manager is None:
        settings_manager = SettingsManager()
    if logger is None:
        logger = LogManager.from_settings(settings_manager)
    if settings_manager.logger is None:
        settings_manager.logger = logger

    app = FastAPI(
        title="CardReader API",
        description="Reads character card metadata embedded in JSON, PNG and WebP files.",
        version=VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.state.logger = logger
    app.state.settings_manager = settings_manager
    app.state.character_extractor = CharacterExtractor(logger)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(character_router)

    logger.log_step(f"CardReader API {VERSION} initialized")
    return app


def main():
    """Main entry point for the application."""
    parser = argparse.ArgumentParser(description="CardReader character card extraction server")
    parser.add_argument("-host", "--host", default="127.0.0.1", help="Host to run the server on")
    parser.add_argument("-port", "--port", type=int, default=9797, help="Port to run the server on")
    parser.add_argument("--batch", action="store_true", help="Extract a directory of cards instead of serving")
    args, remaining = parser.parse_known_args()

    if args.batch:
        from cardreader.batch_extractor import run_batch_extraction
        run_batch_extraction(remaining)
        return

    host = os.environ.get("CARDREADER_HOST", args.host)
    port = int(os.environ.get("CARDREADER_PORT", args.port))

    app = create_app()
    app.state.logger.log_step(f"Starting CardReader server at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
