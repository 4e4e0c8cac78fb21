# cardstudio/infrastructure/genai/pollinations.py
import random
from typing import Optional
from urllib.parse import quote, urlencode


class PollinationsProvider:
    """Deterministic image provider: the image URL is synthesized from the prompt.

    Nothing is fetched here; the returned URL is fetched later by whoever
    displays or downloads the image.
    """

    def __init__(self, base_url: str = "https://image.pollinations.ai/prompt/", model: str = "flux",
                 rng: Optional[random.Random] = None):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.model = model
        self.rng = rng or random.Random()

    def image_url(self, prompt: str, width: int, height: int, seed: Optional[int] = None) -> str:
        if seed is None:
            seed = self.rng.randrange(1_000_000)
        params = urlencode({
            "width": width,
            "height": height,
            "seed": seed,
            "model": self.model,
            "nologo": "true",
        })
        return f"{self.base_url}{quote(prompt, safe='')}?{params}"
