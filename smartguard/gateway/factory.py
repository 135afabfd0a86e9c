# Provider client selection from settings.

import logging

from smartguard.settings import Settings
from .clients.echo_dev_client import EchoDevClient
from .gateway import AIGateway

logger = logging.getLogger(__name__)


def build_model_client(cfg: Settings):
    provider = cfg.provider
    if not cfg.has_api_key and provider != "echo":
        logger.error("API Key not found; AI features will fall back to defaults")

    if provider == "openai":
        from .clients.openai_client import OpenAIClient
        return OpenAIClient(model=cfg.OPENAI_MODEL, image_model=cfg.OPENAI_IMAGE_MODEL, api_key=cfg.OPENAI_API_KEY)
    if provider == "echo":
        return EchoDevClient()
    if provider != "gemini":
        logger.warning("Unknown PROVIDER %r, using gemini", cfg.PROVIDER)

    from .clients.gemini_client import GeminiClient
    return GeminiClient(
        api_key=cfg.API_KEY,
        image_model=cfg.IMAGE_MODEL,
        model=cfg.TEXT_MODEL,
        timeout=cfg.GATEWAY_TIMEOUT_SECONDS,
    )


def build_gateway(cfg: Settings) -> AIGateway:
    return AIGateway(
        model_client=build_model_client(cfg),
        timeout=cfg.GATEWAY_TIMEOUT_SECONDS,
        max_places=cfg.MAX_PLACES,
    )
