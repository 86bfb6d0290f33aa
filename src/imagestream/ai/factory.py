import os
from ..ai.client import StreamingClient
from ..ai.providers.gemini import GeminiProvider
from ..ai.providers.mock import MockProvider
from ..config import AIConfig
from ..errors import MissingCredentialError, ProviderUnavailableError
from ..logging_lib import setup_logger

logger = setup_logger(__name__)


def require_api_key(envvar: str) -> str:
    """Return the credential held in ``envvar``; raise when unset or empty."""
    value = os.environ.get(envvar, '')
    if not value.strip():
        logger.error({'event': 'missing_credential', 'envvar': envvar})
        raise MissingCredentialError(envvar)
    return value


def make_ai_client(cfg: AIConfig, api_key: str | None = None) -> StreamingClient:
    kind = cfg.provider
    logger.info({'event': 'ai_client_make_start', 'provider': kind, 'model': cfg.model})
    if kind == 'mock':
        logger.info({'event': 'ai_client_selected', 'provider': 'mock'})
        return MockProvider(model=cfg.model)
    if kind == 'gemini':
        key = api_key if api_key is not None else require_api_key(cfg.api_key_envvar)
        logger.info({'event': 'ai_client_selected', 'provider': 'gemini'})
        return GeminiProvider(api_key=key, model=cfg.model)
    raise ProviderUnavailableError(f"Unknown AI provider '{kind}'")
