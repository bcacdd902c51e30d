"""
Weibo Upload Client

Forwards raw image bytes to the Weibo picture-upload API and turns the
response into an UploadResult.

Handles:
- CRC-32 signature (`cs` query parameter)
- Session cookie forwarding
- Mapping the JSON response to a public image URL
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from pydantic import BaseModel

from .checksum import crc32
from .errors import UpstreamError

logger = logging.getLogger(__name__)

# ============================================
# Upstream API
# ============================================

UPLOAD_URL = "https://picupload.weibo.com/interface/upload.php"
UPLOAD_ENTITY = "miniblog"
# Required by the API whatever the actual image format is
UPLOAD_CONTENT_TYPE = "image/gif"
IMAGE_URL_TEMPLATE = "https://wx3.sinaimg.cn/large/{pid}"

DEFAULT_TIMEOUT = 30.0


class UploadedPic(BaseModel):
    pid: str = ""


class UploadResponse(BaseModel):
    """Shape of the upload API response: {"pic": {"pid": "..."}}"""
    pic: UploadedPic = UploadedPic()


@dataclass
class UploadResult:
    """Outcome of relaying one upload."""
    pid: Optional[str] = None

    @classmethod
    def ok(cls, pid: str) -> "UploadResult":
        return cls(pid=pid)

    @classmethod
    def failed(cls) -> "UploadResult":
        return cls(pid=None)

    @property
    def success(self) -> bool:
        return bool(self.pid)

    @property
    def url(self) -> Optional[str]:
        """Public CDN URL of the uploaded image, None on failure."""
        if not self.success:
            return None
        return IMAGE_URL_TEMPLATE.format(pid=self.pid)


def parse_upload_response(body: bytes) -> UploadResult:
    """
    Decode an upload API response body.

    Invalid JSON, an unexpected shape and an empty pid all give a failed
    result; the API does not let us tell a rejected cookie apart from any
    other error.
    """
    try:
        parsed = UploadResponse.model_validate_json(body)
    except ValueError:
        # ValidationError is a ValueError; so is a body that is not UTF-8
        logger.warning(f"[WeiboUploader] Undecodable response ({len(body)} bytes)")
        return UploadResult.failed()

    if not parsed.pic.pid:
        return UploadResult.failed()
    return UploadResult.ok(parsed.pic.pid)


class WeiboUploader:
    """
    Relays image bytes to the Weibo upload API.

    One instance is shared by all requests; httpx.AsyncClient is safe for
    concurrent use.

    Usage:
        uploader = WeiboUploader(cookie)
        result = await uploader.upload(image_bytes)
        await uploader.close()
    """

    def __init__(
        self,
        cookie: str,
        timeout: float = DEFAULT_TIMEOUT,
        upload_url: str = UPLOAD_URL,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._cookie = cookie
        self.upload_url = upload_url
        self._owns_client = client is None
        self.http_client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self):
        """Close HTTP client if we created it."""
        if self._owns_client:
            await self.http_client.aclose()

    async def upload(self, body: bytes) -> UploadResult:
        """
        Upload one image.

        The upstream HTTP status is not inspected; only the response body
        decides the outcome.

        Raises:
            UpstreamError: if the request cannot be built (e.g. a cookie that
                is not ASCII) or on connect, timeout or read failures.
        """
        # CRC over a multi-megabyte body is CPU-bound
        checksum = await asyncio.to_thread(crc32, body)

        try:
            request = self.http_client.build_request(
                "POST",
                self.upload_url,
                content=body,
                params={"cs": str(checksum), "ent": UPLOAD_ENTITY},
                headers={
                    "Content-Type": UPLOAD_CONTENT_TYPE,
                    "Cookie": self._cookie,
                },
            )
        except (httpx.InvalidURL, UnicodeEncodeError) as e:
            # The message of a header encoding error may quote the cookie
            raise UpstreamError(f"cannot build upload request: {type(e).__name__}") from None

        try:
            response = await self.http_client.send(request)
        except httpx.HTTPError as e:
            raise UpstreamError(f"upload request failed: {type(e).__name__}: {e}") from e

        logger.debug(f"[WeiboUploader] Upstream status {response.status_code} ({len(response.content)} bytes)")
        return parse_upload_response(response.content)
