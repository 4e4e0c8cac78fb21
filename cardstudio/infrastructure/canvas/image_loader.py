# cardstudio/infrastructure/canvas/image_loader.py
import asyncio
import base64
import binascii
import io
import logging
import os
from typing import Optional

import aiofiles
import aiohttp
from PIL import Image, UnidentifiedImageError

from cardstudio.domain.errors import ImageLoadError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


class ImageLoader:
    """Fetches image bytes from an http(s) URL, a data URI or a local path."""

    def __init__(self, timeout: float = REQUEST_TIMEOUT, session: Optional[aiohttp.ClientSession] = None):
        self.timeout = timeout
        self._session = session

    async def _fetch(self, src: str, session: aiohttp.ClientSession) -> bytes:
        async with session.get(src, timeout=aiohttp.ClientTimeout(total=self.timeout)) as response:
            response.raise_for_status()
            return await response.read()

    async def load_bytes(self, src: str) -> bytes:
        if not src:
            raise ImageLoadError("No image reference given")
        try:
            if src.startswith(("http://", "https://")):
                if self._session is not None:
                    return await self._fetch(src, self._session)
                async with aiohttp.ClientSession() as session:
                    return await self._fetch(src, session)
            if src.startswith("data:image"):
                _, encoded = src.split(",", 1)
                return base64.b64decode(encoded)
            if os.path.isfile(src):
                async with aiofiles.open(src, "rb") as f:
                    return await f.read()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError, binascii.Error) as e:
            logger.warning(f"Failed to load image from '{src[:70]}': {type(e).__name__}")
            raise ImageLoadError(f"Could not load image: {type(e).__name__}") from e
        raise ImageLoadError("Unsupported image reference")

    async def load(self, src: str) -> Image.Image:
        data = await self.load_bytes(src)
        return decode_image(data)


def decode_image(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except Image.DecompressionBombError as e:
        raise ImageLoadError("Image dimensions exceed the decoding limit") from e
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageLoadError("Image data could not be decoded") from e
    return img.convert("RGBA")
