# cardstudio/delivery/api/generation.py
import logging
import traceback

from fastapi import APIRouter, Depends, HTTPException, Request, status

from cardstudio.delivery.schemas.generation import (
    DEFAULT_IMAGE_PROMPT, GenerateImageRequest, GenerateImageResponse,
    GenerateMessageRequest, GenerateMessageResponse,
)
from cardstudio.domain.errors import ConfigurationError, GenerationTimeoutError, ProviderError
from cardstudio.domain.generation import GenerationPipeline

router = APIRouter(tags=["generation"])
logger = logging.getLogger("uvicorn.error")


def get_pipeline(request: Request) -> GenerationPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is not ready. Please try again in a moment.",
        )
    return pipeline


@router.post("/generate-image", response_model=GenerateImageResponse)
async def generate_image(body: GenerateImageRequest, pipeline: GenerationPipeline = Depends(get_pipeline)):
    prompt = body.prompt.strip() or DEFAULT_IMAGE_PROMPT
    try:
        result = await pipeline.generate(prompt, body.width, body.height, body.provider)
    except GenerationTimeoutError as e:
        raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(e))
    except (ProviderError, ConfigurationError) as e:
        logger.error(f"Image generation failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to generate image: {e}")
    except Exception as e:
        logger.error(f"Unexpected error generating image: {e}\n{traceback.format_exc()}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate image")

    return GenerateImageResponse(
        image_url=result.image.url,
        image_data=result.image.base64_data,
        mime_type=result.image.mime_type,
        generated_text=result.text,
        fallback=not result.is_ai_generated,
        is_ai_generated=result.is_ai_generated,
    )


@router.post("/generate-message", response_model=GenerateMessageResponse)
async def generate_message(body: GenerateMessageRequest, pipeline: GenerationPipeline = Depends(get_pipeline)):
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
    message, is_ai = await pipeline.generate_message(name, body.occasion)
    return GenerateMessageResponse(message=message, is_ai_generated=is_ai)


@router.get("/generate-message/status")
async def message_status(pipeline: GenerationPipeline = Depends(get_pipeline)):
    return {"aiStatus": "available" if pipeline.ai_available else "unavailable"}
