# cardstudio/infrastructure/cloudinary/upload_file.py
import asyncio
import base64
import logging
from concurrent.futures import Executor
from io import BytesIO
from typing import Optional

import cloudinary
import cloudinary.uploader
from PIL import Image

from cardstudio.config.settings import Settings
from cardstudio.domain.compositor import encode_png
from cardstudio.domain.errors import ProviderError

logger = logging.getLogger(__name__)


class CardImageStore:
    """Stores rendered cards on Cloudinary, or inline as a data URI when it is not configured."""

    def __init__(self, settings: Settings, executor: Optional[Executor] = None):
        self.folder = settings.CLOUDINARY_FOLDER
        self.executor = executor
        self.enabled = settings.cloudinary_configured
        if self.enabled:
            cloudinary.config(
                cloud_name=settings.CLOUDINARY_CLOUD_NAME,
                api_key=settings.CLOUDINARY_API_KEY,
                api_secret=settings.CLOUDINARY_API_SECRET,
                secure=True,
            )

    def _upload(self, data: bytes, public_id: str) -> str:
        res = cloudinary.uploader.upload(
            BytesIO(data),
            resource_type="image",
            folder=self.folder,
            public_id=public_id,
            overwrite=True,
            format="png",
            tags=["card"],
        )
        return res["secure_url"]

    async def store(self, img: Image.Image, public_id: str) -> str:
        data = encode_png(img)
        if not self.enabled:
            return "data:image/png;base64," + base64.b64encode(data).decode("ascii")
        loop = asyncio.get_running_loop()
        try:
            url = await loop.run_in_executor(self.executor, self._upload, data, public_id)
        except Exception as e:
            logger.error(f"Cloudinary upload failed for {public_id}: {e}")
            raise ProviderError(f"Card upload failed: {e}") from e
        logger.info(f"Card {public_id} uploaded to Cloudinary")
        return url
