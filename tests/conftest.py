"""Shared pytest fixtures.

Environment variables are set before any `cardstudio` import so the
module-level settings never pick up real credentials.
"""
import base64
import io
import os
import struct
import zlib

for _key in ("GEMINI_API_KEY", "SENDGRID_API_KEY", "NOTIFICATION_EMAIL", "EMAIL_REDIRECT_TO",
             "CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET"):
    os.environ.pop(_key, None)
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test-cardstudio.db"

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from cardstudio.config.settings import Settings
from cardstudio.main import create_app


def measure_by_length(text, font_family, font_size):
    """Deterministic metrics: 10px per character, font size tall."""
    return len(text) * 10.0, float(font_size)


def png_data_uri(size=(8, 8), color=(200, 30, 30, 255)) -> str:
    buf = io.BytesIO()
    Image.new("RGBA", size, color).save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF)


def oversized_png_data_uri(width=20000, height=10000) -> str:
    """A tiny PNG whose header declares more pixels than Pillow will decode."""
    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    data = (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", zlib.compress(b"\x00"))
        + _png_chunk(b"IEND", b"")
    )
    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")


class FakeEmailSender:
    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    async def send(self, message):
        if message.to in self.fail_for:
            raise RuntimeError(f"mailbox unavailable: {message.to}")
        self.sent.append(message)
        return 202


class FakeAI:
    """Stands in for GeminiProvider."""

    def __init__(self, text="A glowing birthday scene", image_error=None, text_error=None, delay=0.0):
        self.text = text
        self.image_error = image_error
        self.text_error = text_error
        self.delay = delay
        self.prompts = []

    async def complete_text(self, prompt, **sampling):
        import asyncio
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.text_error:
            raise self.text_error
        return self.text

    async def generate_image(self, prompt):
        from cardstudio.infrastructure.genai.gemini_client import GeneratedImage
        if self.image_error:
            raise self.image_error
        return GeneratedImage(base64_data="aW1hZ2U=", mime_type="image/png", text="")


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'cardstudio.db'}",
        ENVIRONMENT="test",
        NOTIFICATION_EMAIL="admin@example.com",
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c
