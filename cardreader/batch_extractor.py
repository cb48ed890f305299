#!/usr/bin/env python3
"""
CardReader Batch Extractor

Reads every character card (.json, .png, .webp) in a directory and writes the
extracted metadata next to it as JSON. A card that fails is reported and
skipped; it never stops the batch.

Usage:
    python -m cardreader.batch_extractor -d /path/to/cards [-o /path/to/output] [-q]

    OR through the server entry point:

    python -m cardreader.main --batch -d /path/to/cards
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

from cardreader.card_extractor import CharacterExtractor
from cardreader.errors import CardReaderError
from cardreader.log_manager import LogManager
from cardreader.models.media_type import VALID_FILE_EXTENSIONS
from cardreader.settings_manager import SettingsManager


def extract_directory(card_dir: Path, output_dir: Path, extractor: CharacterExtractor,
                      logger, quiet_mode: bool = False) -> Dict[str, int]:
    """Extract all cards in card_dir into output_dir. Returns per-outcome counts."""
    logger.log_step(f"Starting batch extraction in: {card_dir}")
    output_dir.mkdir(parents=True, exist_ok=True)

    counts = {"total": 0, "successful": 0, "skipped": 0, "failed": 0}

    for card_path in sorted(card_dir.iterdir()):
        if not card_path.is_file():
            continue
        counts["total"] += 1

        if card_path.suffix.lower() not in VALID_FILE_EXTENSIONS:
            counts["skipped"] += 1
            logger.log_step(f"Skipping {card_path.name}: not a card file")
            continue

        # Never re-read our own output
        if card_path.name.endswith(".card.json"):
            counts["skipped"] += 1
            continue

        try:
            character = extractor.extract_path(card_path)
        except CardReaderError as e:
            counts["failed"] += 1
            logger.log_warning(f"Failed {card_path.name}: {e.message}")
            if not quiet_mode:
                print(f"Error processing {card_path.name}: {e.message}")
            continue

        out_path = output_dir / f"{card_path.stem}.card.json"
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump(character.to_summary(), f, indent=2, ensure_ascii=False)

        counts["successful"] += 1
        if not quiet_mode:
            print(f"Extracted {character.name or card_path.stem}: {out_path}")
        logger.log_step(f"Extracted {card_path.name} -> {out_path}")

    summary = (f"Extraction complete: {counts['successful']} successful, {counts['skipped']} skipped, "
               f"{counts['failed']} failed out of {counts['total']} files")
    logger.log_step(summary)
    if not quiet_mode:
        print("\n" + summary)
    return counts


def run_batch_extraction(argv: Optional[List[str]] = None) -> Dict[str, int]:
    parser = argparse.ArgumentParser(description="CardReader - Batch Character Card Extractor")
    parser.add_argument("-d", "--card-dir", type=str, required=True, help="Directory holding card files")
    parser.add_argument("-o", "--output-dir", type=str, help="Where to write extracted JSON (default: <card-dir>/extracted)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Run in quiet mode (minimal output)")
    args = parser.parse_args(argv)

    card_dir = Path(args.card_dir)
    if not card_dir.is_dir():
        print(f"Error: Card directory not found: {card_dir}")
        sys.exit(1)

    output_dir = Path(args.output_dir) if args.output_dir else card_dir / "extracted"

    settings_manager = SettingsManager()
    logger = LogManager.from_settings(settings_manager)
    logger.log_to_console = logger.log_to_console and not args.quiet
    settings_manager.logger = logger

    return extract_directory(card_dir, output_dir, CharacterExtractor(logger), logger, args.quiet)


if __name__ == "__main__":
    run_batch_extraction()
