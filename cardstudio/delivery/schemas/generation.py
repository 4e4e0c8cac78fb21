from typing import Literal, Optional

from pydantic import Field, PositiveInt

from cardstudio.delivery.schemas.template import CamelModel

DEFAULT_IMAGE_PROMPT = "Create a 3D birthday card with colorful balloons and confetti"


class GenerateImageRequest(CamelModel):
    prompt: str = ""
    width: PositiveInt = Field(default=1080, le=4096)
    height: PositiveInt = Field(default=1080, le=4096)
    provider: Literal["gemini", "pollinations"] = "gemini"


class GenerateImageResponse(CamelModel):
    image_url: Optional[str] = None
    image_data: Optional[str] = None
    mime_type: Optional[str] = None
    generated_text: str = ""
    fallback: bool = False
    is_ai_generated: bool = Field(default=False, alias="isAIGenerated")


class GenerateMessageRequest(CamelModel):
    name: str = ""
    occasion: Literal["birthday", "anniversary", "both"] = "birthday"


class GenerateMessageResponse(CamelModel):
    message: str
    is_ai_generated: bool = Field(alias="isAIGenerated")

