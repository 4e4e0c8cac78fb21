# cardstudio/main.py
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from concurrent.futures import ThreadPoolExecutor
from typing import Optional
import logging
import os
import traceback

from cardstudio.config.database import Database
from cardstudio.config.settings import Settings, settings as default_settings
from cardstudio.delivery.api import cards, cron, editor, generation, people, templates
from cardstudio.domain.compositor import CardCompositor
from cardstudio.domain.generation import GenerationPipeline
from cardstudio.domain.template_service import TemplateService
from cardstudio.infrastructure.canvas.fonts import FontBook
from cardstudio.infrastructure.canvas.image_loader import ImageLoader
from cardstudio.infrastructure.canvas.painter import PillowPainter
from cardstudio.infrastructure.cloudinary.upload_file import CardImageStore
from cardstudio.infrastructure.email.sendgrid_sender import SendGridEmailSender
from cardstudio.infrastructure.genai.gemini_client import GeminiProvider
from cardstudio.infrastructure.genai.pollinations import PollinationsProvider

logger = logging.getLogger("uvicorn.error")


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        max_workers = min(4, os.cpu_count() or 1)
        app.state.executor = ThreadPoolExecutor(max_workers=max_workers)
        logger.info(f"Service '{settings.PROJECT_NAME}' starting (mode: {settings.ENVIRONMENT}).")

        app.state.database = Database(settings.DATABASE_URL)
        await app.state.database.init()

        fonts = FontBook(settings.FONTS_DIR)
        compositor = CardCompositor(
            loader=ImageLoader(timeout=settings.IMAGE_FETCH_TIMEOUT_SECONDS),
            painter=PillowPainter(fonts),
            executor=app.state.executor,
        )
        app.state.template_service = TemplateService(compositor, measure=fonts.measure)

        gemini = None
        if settings.ai_available:
            gemini = GeminiProvider(settings.GEMINI_API_KEY, settings.GEMINI_TEXT_MODEL, settings.GEMINI_IMAGE_MODEL)
        else:
            logger.warning("GEMINI_API_KEY not set; image and message generation will use fallbacks")
        app.state.pipeline = GenerationPipeline(
            ai=gemini,
            fallback=PollinationsProvider(settings.POLLINATIONS_BASE_URL, settings.POLLINATIONS_MODEL),
            timeout=settings.AI_TIMEOUT_SECONDS,
        )

        app.state.email_sender = SendGridEmailSender(
            api_key=settings.SENDGRID_API_KEY,
            sender=settings.EMAIL_SENDER,
            executor=app.state.executor,
            redirect_to=settings.EMAIL_REDIRECT_TO,
        )
        app.state.card_store = CardImageStore(settings, executor=app.state.executor)
        logger.info(f"Shared ThreadPoolExecutor created with {max_workers} workers.")
        yield
        logger.info("Shutting down...")
        await app.state.database.dispose()
        app.state.executor.shutdown(wait=True)
        logger.info("Service stopped.")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Greeting-card templates, card rendering, AI image/message generation and daily celebration notifications",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    )
    app.state.settings = settings

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_HOSTS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": _validation_message(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}\n{traceback.format_exc()}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    for module in (people, templates, editor, cards, generation, cron):
        app.include_router(module.router, prefix=settings.API_V1_STR)

    @app.get("/")
    async def root():
        return {"message": settings.PROJECT_NAME, "version": "1.0.0", "status": "ok"}

    @app.get("/health")
    @app.get(f"{settings.API_V1_STR}/health", include_in_schema=False)
    async def health_check(request: Request):
        pipeline = getattr(request.app.state, "pipeline", None)
        ai = pipeline is not None and pipeline.ai_available
        return {"status": "ok", "service": settings.PROJECT_NAME, "aiStatus": "available" if ai else "unavailable"}

    return app


app = create_app()
