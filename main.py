#!/usr/bin/env python3
"""
GeoDraw - Command Line Entry Point

Loads a GeoJSON file into the editing core, applies merge/split edits and
writes the resulting FeatureCollection.

Usage:
    python main.py features.geojson
    python main.py features.geojson --merge a b --merge c d -o out.geojson
    python main.py features.geojson --split m1 --debug
"""

import sys
import json
import logging
import argparse
from PyQt6.QtCore import QCoreApplication

from models.errors import DrawError
from services.draw_api import DrawAPI
from services.settings_manager import get_settings

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False):
    """Configure logging for the application."""
    level = logging.DEBUG if debug else logging.INFO

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # Console handler (stderr, stdout carries the GeoJSON output)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    logger.debug(f"Logging initialized at {'DEBUG' if debug else 'INFO'} level")


def setup_application() -> QCoreApplication:
    """Create the Qt core application that owns the signal machinery."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("GeoDraw")
    app.setApplicationVersion("0.1.0")
    app.setOrganizationName("geodraw")
    return app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='GeoJSON feature editing core')
    parser.add_argument('input', help='GeoJSON file to load')
    parser.add_argument('--output', '-o', help='Write the result here instead of stdout')
    parser.add_argument(
        '--merge', nargs='+', action='append', default=[], metavar='ID',
        help='Merge these features into one Multi* feature (repeatable)'
    )
    parser.add_argument(
        '--split', nargs='+', default=[], metavar='ID',
        help='Split these Multi* features into their parts'
    )
    parser.add_argument('--config', help='Settings file to use instead of the default')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    return parser


def run(args) -> int:
    """Execute one CLI invocation; returns the exit code."""
    settings = get_settings(args.config)
    api = DrawAPI(settings=settings.settings)

    try:
        with open(args.input, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read {args.input}: {e}")
        return 1

    try:
        if isinstance(data, dict) and data.get("type") == "FeatureCollection":
            api.set(data)
        else:
            api.add(data)
        for feature_ids in args.merge:
            api.merge_selected_features(feature_ids)
        if args.split:
            api.split_selected_features(args.split)
    except DrawError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    settings.add_recent_file(args.input)

    output = json.dumps(api.get_all(), indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output + "\n")
        logger.info(f"Wrote {len(api.store.get_all_ids())} features to {args.output}")
    else:
        print(output)
    return 0


def main():
    """Main entry point."""
    args = build_parser().parse_args()

    # Setup logging
    setup_logging(debug=args.debug)

    setup_application()

    sys.exit(run(args))


if __name__ == "__main__":
    main()
