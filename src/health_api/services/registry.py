"""Type-keyed service lookup shared by the API server and the CLI."""

from collections.abc import Callable
from functools import lru_cache
from typing import Any, TypeVar, cast

T = TypeVar("T")
ServiceFactory = Callable[[], T]


class ServiceRegistry:
    """Maps a service class to an instance or to a factory producing one.

    Factories are called on every lookup; the ``get_*_service`` helpers they
    usually point at are already cached, so lookups stay cheap.
    """

    def __init__(self):
        self._instances: dict[type, Any] = {}
        self._factories: dict[type, ServiceFactory[Any]] = {}

    def register_singleton(self, service_type: type[T], instance: T) -> None:
        """Register an existing instance, replacing any earlier registration."""
        self._factories.pop(service_type, None)
        self._instances[service_type] = instance

    def register_factory(self, service_type: type[T], factory: ServiceFactory[T]) -> None:
        """Register a zero-argument callable building the service."""
        self._instances.pop(service_type, None)
        self._factories[service_type] = factory

    def is_registered(self, service_type: type) -> bool:
        return service_type in self._instances or service_type in self._factories

    def get(self, service_type: type[T]) -> T:
        """Get the service registered for ``service_type``.

        Raises:
            KeyError: If the service is not registered
        """
        if service_type in self._instances:
            return cast(T, self._instances[service_type])
        if service_type in self._factories:
            return cast(T, self._factories[service_type]())
        raise KeyError(f"Service {service_type.__name__} not registered")

    def clear(self) -> None:
        self._instances.clear()
        self._factories.clear()


@lru_cache
def get_service_registry() -> ServiceRegistry:
    """Get the process-wide service registry."""
    return ServiceRegistry()
