"""
Image Relay Module

Relays image uploads to the Weibo picture API and serves a fallback image.

Features:
- CRC-32 signed uploads with a configured session cookie
- Plain-text public URL responses
- Static fallback image with a configured Referer header
"""

from .app import create_app, serve
from .config import RelayConfig, load_config
from .errors import ConfigLoadError, RelayError, StartupError, UpstreamError
from .routes_fastapi import router
from .uploader import UploadResult, WeiboUploader

__all__ = [
    "create_app",
    "serve",
    "RelayConfig",
    "load_config",
    "RelayError",
    "ConfigLoadError",
    "StartupError",
    "UpstreamError",
    "router",
    "UploadResult",
    "WeiboUploader",
]
