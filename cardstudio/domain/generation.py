# cardstudio/domain/generation.py
"""Image and message generation with an AI-first, deterministic-fallback chain.

Both providers' answers are normalised into `GenerationResult`; callers never
need to know which provider produced an image.
"""
import asyncio
import logging
import traceback
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

from cardstudio.domain.errors import GenerationTimeoutError, ModelUnavailableError, ProviderError

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', '%Y-%m-%d %H:%M:%S')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False

Occasion = Literal["birthday", "anniversary", "both"]
Provider = Literal["gemini", "pollinations"]

AI_TIMEOUT_SECONDS = 30.0

MESSAGE_SAMPLING = dict(temperature=0.7, top_k=40, top_p=0.95, max_output_tokens=100)

FALLBACK_MESSAGES = {
    "birthday": "Happy birthday, {name}!\nWishing you a wonderful year ahead!",
    "anniversary": "Happy work anniversary, {name}!\nThank you for your dedication and contributions!",
    "both": "Happy birthday and work anniversary, {name}!\nWhat a special day to celebrate both occasions!",
}

MESSAGE_PROMPTS = {
    "birthday": (
        "Write a warm, personal 2-line birthday message for {name}. "
        "Make it inspiring and uplifting, mentioning having a great year ahead. "
        "Keep each line short and impactful. Don't use emojis."
    ),
    "anniversary": (
        "Write a warm, personal 2-line work anniversary message for {name}. "
        "Make it professional yet warm, mentioning their contributions and growth. "
        "Keep each line short and impactful. Don't use emojis."
    ),
    "both": (
        "Write a warm, personal 2-line message for {name} who is celebrating both their birthday "
        "and work anniversary today. Make it inspiring and mention both occasions. "
        "Keep each line short and impactful. Don't use emojis."
    ),
}


@dataclass(frozen=True)
class ImageRef:
    """Exactly one of `url` / `base64_data` is set."""
    url: Optional[str] = None
    base64_data: Optional[str] = None
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class GenerationResult:
    image: ImageRef
    text: str
    is_ai_generated: bool


def fallback_message(name: str, occasion: Occasion = "birthday") -> str:
    return FALLBACK_MESSAGES.get(occasion, FALLBACK_MESSAGES["birthday"]).format(name=name)


def first_two_lines(text: str) -> str:
    lines = [line for line in (text or "").splitlines() if line.strip()]
    return "\n".join(lines[:2])


class GenerationPipeline:
    def __init__(self, ai, fallback, timeout: float = AI_TIMEOUT_SECONDS):
        # `ai` is None when no credential is configured
        self.ai = ai
        self.fallback = fallback
        self.timeout = timeout

    @property
    def ai_available(self) -> bool:
        return self.ai is not None

    def _fallback_result(self, prompt: str, width: int, height: int, text: str = "") -> GenerationResult:
        url = self.fallback.image_url(prompt, width, height)
        return GenerationResult(image=ImageRef(url=url), text=text, is_ai_generated=False)

    async def _enhance(self, prompt: str) -> str:
        try:
            enhanced = await asyncio.wait_for(self.ai.complete_text(prompt), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise GenerationTimeoutError(f"Operation timed out after {int(self.timeout * 1000)}ms") from e
        if not enhanced:
            raise ProviderError("No text response from Gemini")
        return enhanced

    async def generate(self, prompt: str, width: int, height: int, provider: Provider = "gemini") -> GenerationResult:
        if provider == "pollinations":
            return self._fallback_result(prompt, width, height)

        if self.ai is None:
            logger.warning("Gemini is not configured; using the deterministic image provider")
            return self._fallback_result(prompt, width, height)

        enhanced = None
        try:
            enhanced = await self._enhance(prompt)
            image = await self.ai.generate_image(enhanced)
            logger.info(f"AI image generated for {width}x{height} request")
            return GenerationResult(
                image=ImageRef(base64_data=image.base64_data, mime_type=image.mime_type),
                text=image.text or enhanced,
                is_ai_generated=True,
            )
        except GenerationTimeoutError:
            logger.error(f"Prompt enhancement timed out after {self.timeout}s")
            raise
        except ModelUnavailableError as e:
            logger.warning(f"Gemini model unavailable, falling back: {e}")
        except Exception as e:
            logger.error(f"Gemini generation failed, falling back: {e}\n{traceback.format_exc()}")
        return self._fallback_result(enhanced or prompt, width, height, text=enhanced or "")

    async def generate_message(self, name: str, occasion: Occasion = "birthday") -> Tuple[str, bool]:
        """Two-line celebration message and whether the AI wrote it."""
        if self.ai is None:
            logger.warning("Gemini AI not initialized, using fallback message")
            return fallback_message(name, occasion), False
        try:
            text = await self.ai.complete_text(MESSAGE_PROMPTS[occasion].format(name=name), **MESSAGE_SAMPLING)
        except Exception as e:
            logger.error(f"Error generating celebration message for {name}: {e}", exc_info=True)
            return fallback_message(name, occasion), False
        two_lines = first_two_lines(text)
        if not two_lines:
            return fallback_message(name, occasion), False
        return two_lines, True
