"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure
services. The lifespan, the standalone retry worker and the API routes all
resolve their collaborators here, so one process shares one task store, one
retry ledger and one retry scheduler.
"""

from functools import lru_cache

from infrastructure.clock import Clock, SystemClock
from infrastructure.configuration import Settings
from infrastructure.resilience.retry import (
    HandlerRegistry,
    RetryConfig,
    RetryScheduler,
    RetryStore,
    create_retry_store,
)
from infrastructure.tasks import (
    TaskLifecycleManager,
    TaskMaintenance,
    TaskStore,
    create_task_store,
    expire_after,
)
from integrations.shopify import ShopifyGraphQLGateway
from modules.translation import (
    BulkTranslationOrchestrator,
    TranslationMirror,
    TranslationProvider,
    create_translation_mirror,
)
from modules.webhooks.topics import KNOWN_TOPICS


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    Infrastructure packages should use this directly to ensure singleton consistency:
        from infrastructure.services.providers import get_settings
        settings = get_settings()

    Application code should use the DI type alias for testability:
        from infrastructure.services import SettingsDep
        @router.get("/config")
        def get_config(settings: SettingsDep):
            ...

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_clock() -> Clock:
    return SystemClock()


@lru_cache
def get_task_store() -> TaskStore:
    """Get the application-scoped task store selected by TASKS_BACKEND."""
    return create_task_store(get_settings().tasks)


@lru_cache
def get_task_manager() -> TaskLifecycleManager:
    """Get the application-scoped task lifecycle manager."""
    settings = get_settings()
    return TaskLifecycleManager(
        store=get_task_store(),
        clock=get_clock(),
        expiration_policy=expire_after(settings.tasks.expiry_days),
    )


@lru_cache
def get_task_maintenance() -> TaskMaintenance:
    """Get the housekeeping service for task records."""
    return TaskMaintenance(
        store=get_task_store(),
        manager=get_task_manager(),
        stuck_timeout_minutes=get_settings().tasks.stuck_timeout_minutes,
        clock=get_clock(),
    )


@lru_cache
def get_retry_store() -> RetryStore:
    """Get the application-scoped retry ledger selected by RETRY_BACKEND."""
    return create_retry_store(get_settings().retry)


@lru_cache
def get_retry_scheduler() -> RetryScheduler:
    """Get the application-scoped retry scheduler.

    The handler registry only accepts the supported webhook topics. The
    scheduler is not started here; the composition root owns start()/stop().
    """
    return RetryScheduler(
        store=get_retry_store(),
        registry=HandlerRegistry(known_topics=KNOWN_TOPICS),
        config=RetryConfig.from_settings(get_settings().retry),
        clock=get_clock(),
    )


@lru_cache
def get_translation_mirror() -> TranslationMirror:
    """Get the local translation mirror selected by TRANSLATION_MIRROR_BACKEND."""
    settings = get_settings()
    return create_translation_mirror(
        settings.translation.mirror_backend,
        settings.translation.mirror_table_name,
    )


def build_translation_orchestrator(
    shop: str, provider: TranslationProvider
) -> BulkTranslationOrchestrator:
    """Build an orchestrator bound to one shop's content gateway.

    Not cached: the gateway is shop-specific.
    """
    settings = get_settings()
    gateway = ShopifyGraphQLGateway(
        shop=shop,
        access_token=settings.shopify.ACCESS_TOKEN,
        api_version=settings.shopify.API_VERSION,
        timeout=settings.shopify.REQUEST_TIMEOUT_SECONDS,
    )
    return BulkTranslationOrchestrator(
        task_manager=get_task_manager(),
        gateway=gateway,
        provider=provider,
        mirror=get_translation_mirror(),
        short_fields=settings.translation.short_fields,
        long_fields=settings.translation.long_fields,
        max_concurrency=settings.translation.max_concurrency,
        progress_start=settings.tasks.progress_start,
        progress_end=settings.tasks.progress_end,
    )
