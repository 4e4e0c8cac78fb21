# cardstudio/infrastructure/genai/gemini_client.py
import base64
import logging
from dataclasses import dataclass
from typing import Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from cardstudio.domain.errors import ModelUnavailableError, ProviderError

logger = logging.getLogger(__name__)

_MODEL_MISSING_HINTS = ("not found", "not supported", "is not available", "unsupported")


@dataclass(frozen=True)
class GeneratedImage:
    base64_data: str
    mime_type: str
    text: str = ""


def _translate(e: Exception, model: str) -> ProviderError:
    code = getattr(e, "code", None)
    msg = str(e)
    if code == 404 or any(h in msg.lower() for h in _MODEL_MISSING_HINTS):
        return ModelUnavailableError(f"Model '{model}' unavailable: {msg}")
    return ProviderError(f"Gemini request failed: {msg}")


class GeminiProvider:
    """Async wrapper over the google-genai client for text and image generation."""

    def __init__(self, api_key: str, text_model: str, image_model: str, client: Optional[genai.Client] = None):
        self.text_model = text_model
        self.image_model = image_model
        self.client = client or genai.Client(api_key=api_key)

    async def complete_text(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        top_k: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        config = types.GenerateContentConfig(
            temperature=temperature,
            top_p=top_p,
            top_k=top_k,
            max_output_tokens=max_output_tokens,
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=self.text_model, contents=prompt, config=config,
            )
        except genai_errors.APIError as e:
            raise _translate(e, self.text_model) from e
        return (response.text or "").strip()

    async def generate_image(self, prompt: str) -> GeneratedImage:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.image_model,
                contents=prompt,
                config=types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
            )
        except genai_errors.APIError as e:
            raise _translate(e, self.image_model) from e

        image_data = None
        mime_type = "image/png"
        texts = []
        for candidate in response.candidates or []:
            if not candidate.content:
                continue
            for part in candidate.content.parts or []:
                if part.inline_data and part.inline_data.data and image_data is None:
                    data = part.inline_data.data
                    image_data = data if isinstance(data, str) else base64.b64encode(data).decode("ascii")
                    mime_type = part.inline_data.mime_type or mime_type
                elif part.text:
                    texts.append(part.text)

        if image_data is None:
            raise ProviderError("No image data found in Gemini response")
        logger.info(f"Gemini returned an inline {mime_type} image ({len(image_data)} base64 chars)")
        return GeneratedImage(base64_data=image_data, mime_type=mime_type, text="\n".join(texts).strip())
