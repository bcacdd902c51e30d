"""
Relay Configuration

Loads config.json once at startup. The document is decoded structurally:
missing fields fall back to zero values and unknown fields are ignored,
so e.g. a file without "port" loads with port=0 and is rejected later,
when the listener is bound.

Example config.json:
    {
        "cookie": "SUB=...; SUBP=...",
        "image_path": "static/fallback.jpg",
        "referer": "https://weibo.com/",
        "port": 8080
    }
"""

import logging
from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict, SecretStr, ValidationError

from .errors import ConfigLoadError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"


class RelayConfig(BaseModel):
    """Immutable relay settings shared read-only by all handlers."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    cookie: SecretStr = SecretStr("")   # forwarded verbatim as the Cookie header
    image_path: str = ""                # fallback image, relative to the config directory
    referer: str = ""                   # Referer header on fallback responses
    port: int = 0


def load_config(path: Union[str, Path]) -> RelayConfig:
    """
    Read and decode a configuration file.

    Raises:
        ConfigLoadError: if the file cannot be read or is not a JSON object
            of the expected shape.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ConfigLoadError(f"cannot read {path}: {e}") from e

    try:
        config = RelayConfig.model_validate_json(raw)
    except ValidationError as e:
        # Leave input values out of the message; they may hold the cookie
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors(include_input=False, include_url=False)
        )
        raise ConfigLoadError(f"cannot decode {path}: {problems}") from None

    logger.info(f"[Config] Loaded {path.name}")
    return config
