# cardstudio/config/settings.py
from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # API
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "CardStudio"

    # CORS
    ALLOWED_HOSTS: List[str] = ["*"]

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./cardstudio.db"

    # Templates
    MAX_TEMPLATE_UPLOAD_BYTES: int = 1024 * 1024
    IMAGE_FETCH_TIMEOUT_SECONDS: int = 30
    FONTS_DIR: str = "fonts"

    # Generative AI (Gemini); no key means the deterministic provider is always used
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_TEXT_MODEL: str = "gemini-2.0-flash"
    GEMINI_IMAGE_MODEL: str = "gemini-2.0-flash-preview-image-generation"
    AI_TIMEOUT_SECONDS: float = 30.0

    # Deterministic image provider
    POLLINATIONS_BASE_URL: str = "https://image.pollinations.ai/prompt/"
    POLLINATIONS_MODEL: str = "flux"

    # Email
    SENDGRID_API_KEY: Optional[str] = None
    EMAIL_SENDER: Optional[str] = None
    NOTIFICATION_EMAIL: Optional[str] = None
    # Test mode: deliver every email here instead of the intended recipient
    EMAIL_REDIRECT_TO: Optional[str] = None

    # Env
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Cloudinary (optional storage for rendered cards)
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_FOLDER: str = "cardstudio-cards"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def ai_available(self) -> bool:
        return bool(self.GEMINI_API_KEY)

    @property
    def cloudinary_configured(self) -> bool:
        return bool(self.CLOUDINARY_CLOUD_NAME and self.CLOUDINARY_API_KEY and self.CLOUDINARY_API_SECRET)

settings = Settings()
