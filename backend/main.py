#!/usr/bin/env python3
"""
Image Relay Server

Accepts raw image uploads on PUT /, relays them to Weibo and answers with
the public image URL. GET / serves a local fallback image.

Reads config.json from the directory this file lives in.

Usage:
    python main.py
"""

import logging
import sys
from pathlib import Path

from image_relay import ConfigLoadError, StartupError, load_config, serve
from image_relay.config import CONFIG_FILENAME

BASE_DIR = Path(__file__).resolve().parent

logger = logging.getLogger("image_relay.main")


def main() -> int:
    """Load configuration and serve. Returns the process exit code."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(BASE_DIR / CONFIG_FILENAME)
        serve(config, BASE_DIR)
    except ConfigLoadError as e:
        logger.critical(f"Failed to load configuration: {e}")
        return 1
    except StartupError as e:
        logger.critical(f"Server failed to start: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
