"""Database and service wiring for the API.

The Supabase client and the ``Marketplace`` are built once per process and
handed to routes as FastAPI dependencies.
"""

from typing import Annotated

from fastapi import Depends
from supabase import Client, ClientOptions, create_client

from tradeline import Marketplace, MarketplaceConfig
from tradeline.classifier import RemoteClassifier, TextClassifier

from .config import Settings, get_settings
from .logging_config import get_logger

logger = get_logger("tradeline.database")

_supabase_client: Client | None = None
_marketplace: Marketplace | None = None


def get_supabase_client(settings: Settings | None = None) -> Client:
    """Get cached Supabase client."""
    global _supabase_client
    if _supabase_client is None:
        if settings is None:
            settings = get_settings()
        if not settings.supabase_url:
            raise ValueError("SUPABASE_URL must be set when STORAGE_BACKEND=supabase")
        # Prefer new secret key, fall back to legacy service_role_key
        api_key = settings.supabase_secret_key or settings.supabase_service_role_key
        if not api_key:
            raise ValueError("Either SUPABASE_SECRET_KEY or SUPABASE_SERVICE_ROLE_KEY must be set")
        options = ClientOptions(
            postgrest_client_timeout=settings.supabase_timeout,
            storage_client_timeout=settings.supabase_timeout,
        )
        _supabase_client = create_client(settings.supabase_url, api_key, options=options)
    return _supabase_client


def build_classifier(settings: Settings) -> TextClassifier:
    """Build the text classifier named by ``CLASSIFIER_STRATEGY``."""
    if settings.classifier_strategy == "openai":
        from tradeline.models import OpenAIChatModel

        model = OpenAIChatModel(
            settings.openai_model,
            api_key=settings.openai_api_key,
            timeout=settings.classifier_timeout,
        )
    elif settings.classifier_strategy == "anthropic":
        from tradeline.models import AnthropicChatModel

        model = AnthropicChatModel(
            settings.anthropic_model,
            api_key=settings.anthropic_api_key,
            timeout=settings.classifier_timeout,
        )
    else:
        return TextClassifier()

    logger.info(
        f"Classifier | strategy={settings.classifier_strategy} | model={model.model_id} "
        f"| fallback={settings.classifier_fallback}"
    )
    return TextClassifier(
        remote=RemoteClassifier(model), fallback_on_error=settings.classifier_fallback
    )


def build_marketplace(settings: Settings) -> Marketplace:
    config = MarketplaceConfig(
        match_page_size=settings.match_page_size,
        max_page_size=settings.max_page_size,
        default_currency=settings.default_currency,
        classifier_timeout=settings.classifier_timeout,
    )
    classifier = build_classifier(settings)
    if settings.storage_backend == "memory":
        logger.warning("Using in-memory storage; data is lost on restart")
        return Marketplace.in_memory(config, classifier)
    return Marketplace.from_supabase(get_supabase_client(settings), config, classifier)


def get_marketplace(settings: Annotated[Settings, Depends(get_settings)]) -> Marketplace:
    """FastAPI dependency for the marketplace services."""
    global _marketplace
    if _marketplace is None:
        _marketplace = build_marketplace(settings)
    return _marketplace


# Type alias for dependency injection
MarketplaceDep = Annotated[Marketplace, Depends(get_marketplace)]
