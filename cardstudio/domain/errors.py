# cardstudio/domain/errors.py
class CardStudioError(Exception):
    """Base class for errors raised by the domain and infrastructure layers."""


class NotFoundError(CardStudioError):
    pass


class ValidationError(CardStudioError):
    pass


class ConfigurationError(CardStudioError):
    """A credential or address the operation needs is missing or invalid."""


class ProviderError(CardStudioError):
    """An upstream provider (AI, email, storage) failed."""


class ModelUnavailableError(ProviderError):
    """The requested model does not exist or does not support the call."""


class GenerationTimeoutError(CardStudioError):
    pass


class ImageLoadError(CardStudioError):
    """A background or photo could not be fetched or decoded."""
