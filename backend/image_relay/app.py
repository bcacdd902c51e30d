"""
Application Assembly

Builds the FastAPI app around a loaded RelayConfig and runs it under
uvicorn on a socket bound up front, so that an unusable port surfaces as
a StartupError instead of a log line from inside the server.
"""

import logging
import socket
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request

from .config import RelayConfig
from .errors import StartupError
from .routes_fastapi import router
from .uploader import WeiboUploader

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"


def create_app(
    config: RelayConfig,
    base_dir: Path,
    uploader: Optional[WeiboUploader] = None,
) -> FastAPI:
    """
    Create the relay application.

    Args:
        config: Loaded configuration, shared read-only by the handlers
        base_dir: Directory the fallback image path is resolved against
        uploader: Upload client; built from the config cookie when omitted
    """
    if uploader is None:
        uploader = WeiboUploader(config.cookie.get_secret_value())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.uploader.close()
        logger.info("[ImageRelay] Upload client closed")

    app = FastAPI(title="Image Relay", lifespan=lifespan)
    app.state.config = config
    app.state.base_dir = Path(base_dir)
    app.state.uploader = uploader

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"[ImageRelay] {request.method} {request.url.path} -> "
            f"{response.status_code} ({elapsed_ms:.1f}ms)"
        )
        return response

    app.include_router(router)
    return app


def bind_socket(host: str, port: int) -> socket.socket:
    """
    Bind a listening TCP socket.

    Raises:
        StartupError: if the port is out of range or cannot be bound.
    """
    # 0 would silently pick an ephemeral port
    if not 1 <= port <= 65535:
        raise StartupError("listen port out of range (1..65535)")

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        raise StartupError(f"cannot bind listener: {e}") from e
    return sock


def serve(config: RelayConfig, base_dir: Path, host: str = DEFAULT_HOST) -> None:
    """
    Bind the configured port and serve until interrupted.

    Raises:
        StartupError: if the listener cannot be created.
    """
    sock = bind_socket(host, config.port)
    app = create_app(config, base_dir)

    # Request lines come from the middleware; keep uvicorn to warnings
    server = uvicorn.Server(uvicorn.Config(app, log_level="warning", access_log=False))
    logger.info("[ImageRelay] Server starting")
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()
