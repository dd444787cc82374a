"""Dependency injection setup module.

This module provides centralized service registration for both
FastAPI server and CLI applications.
"""

from loguru import logger

from health_api.services.auth_service import AuthService, get_auth_service
from health_api.services.event_service import EventService, get_event_service
from health_api.services.health_check_service import HealthCheckService, get_health_check_service
from health_api.services.notification_service import NotificationService, get_notification_service
from health_api.services.professional_service import ProfessionalService, get_professional_service
from health_api.services.promotion_service import PromotionService, get_promotion_service
from health_api.services.registry import ServiceRegistry
from health_api.services.repository_service import RepositoryService, get_repository_service
from health_api.services.storage_service import StorageService, get_storage_service


def register_core_services(registry: ServiceRegistry) -> None:
    """Register core services in the service registry.

    Core services are registered as factories because their get_*_service()
    functions already provide singleton behavior via @lru_cache.

    Args:
        registry: Service registry instance to register services in
    """
    logger.debug("Registering core services in DI container")

    registry.register_factory(HealthCheckService, get_health_check_service)
    registry.register_factory(StorageService, get_storage_service)
    registry.register_factory(AuthService, get_auth_service)


def register_app_services(registry: ServiceRegistry) -> None:
    """Register application-specific services in the service registry.

    Args:
        registry: Service registry instance to register services in
    """
    logger.debug("Registering application services in DI container")

    registry.register_factory(EventService, get_event_service)
    registry.register_factory(ProfessionalService, get_professional_service)
    registry.register_factory(NotificationService, get_notification_service)
    registry.register_factory(PromotionService, get_promotion_service)
    registry.register_factory(RepositoryService, get_repository_service)


def register_all_services(registry: ServiceRegistry) -> None:
    """Register all services in the service registry.

    This is a convenience function that registers both core and application services.

    Args:
        registry: Service registry instance to register services in
    """
    register_core_services(registry)
    register_app_services(registry)
