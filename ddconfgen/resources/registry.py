"""Provider registration and lookup for ddconfgen."""

from __future__ import annotations

import logging
import threading
from importlib.metadata import entry_points
from typing import Dict, List, Optional

from ddconfgen.constants import PROVIDER_ENTRY_POINT_GROUP
from ddconfgen.errors import NotFoundError

from .base import Provider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Registry mapping resource type names to providers.

    A registry is created once at startup and handed to the pipeline.
    Registering a second provider for an already known type replaces the
    first one.

    Usage:
        registry = ProviderRegistry()
        registry.register(ElastiCacheRedisProvider())
        registry.load_entry_points()  # Pick up third-party providers

        provider = registry.get("elasticache_redis")
    """

    def __init__(self):
        self._providers: Dict[str, Provider] = {}
        self._load_errors: Dict[str, str] = {}
        self._lock = threading.RLock()

    @property
    def load_errors(self) -> Dict[str, str]:
        """Return any errors encountered while loading entry points."""
        with self._lock:
            return self._load_errors.copy()

    def register(self, provider: Provider) -> None:
        """Register a provider under its resource type.

        Args:
            provider: Provider instance
        """
        with self._lock:
            previous = self._providers.get(provider.type)
            if previous is not None and previous is not provider:
                logger.warning(
                    f"Replacing provider for resource type {provider.type}: "
                    f"{type(previous).__name__} -> {type(provider).__name__}"
                )
            self._providers[provider.type] = provider
            logger.debug(f"Registered provider: {provider.type}")

    def get(self, resource_type: str) -> Provider:
        """Get the provider for a resource type.

        Raises:
            NotFoundError: If no provider is registered for the type
        """
        with self._lock:
            provider = self._providers.get(resource_type)
        if provider is None:
            raise NotFoundError("provider for resource type", resource_type)
        return provider

    def types(self) -> List[str]:
        """Return all registered resource types, sorted."""
        with self._lock:
            return sorted(self._providers)

    def load_entry_points(self, group: str = PROVIDER_ENTRY_POINT_GROUP) -> int:
        """Register providers advertised through Python entry points.

        Each entry point must resolve to a Provider subclass that can be
        constructed without arguments. Failures are logged and recorded
        in ``load_errors``.

        Args:
            group: Entry point group name

        Returns:
            Number of providers registered
        """
        loaded = 0
        for ep in entry_points(group=group):
            try:
                provider_class = ep.load()
                if not (isinstance(provider_class, type) and issubclass(provider_class, Provider)):
                    logger.warning(f"Entry point {ep.name} is not a valid Provider class")
                    with self._lock:
                        self._load_errors[ep.name] = "not a Provider subclass"
                    continue
                self.register(provider_class())
                loaded += 1
            except Exception as e:
                logger.warning(f"Failed to load provider {ep.name}: {e}")
                with self._lock:
                    self._load_errors[ep.name] = str(e)
        return loaded

    def __contains__(self, resource_type: object) -> bool:
        with self._lock:
            return resource_type in self._providers

    def __len__(self) -> int:
        with self._lock:
            return len(self._providers)

    def __repr__(self) -> str:
        return f"<ProviderRegistry types={self.types()}>"


def default_registry(
    profile: Optional[str] = None,
    load_entry_points: bool = False,
    group: str = PROVIDER_ENTRY_POINT_GROUP,
) -> ProviderRegistry:
    """Build a registry holding the built-in providers.

    Args:
        profile: Named AWS profile for the built-in AWS providers
        load_entry_points: Also register providers from installed entry points
        group: Entry point group to scan

    Returns:
        A new ProviderRegistry
    """
    from .elasticache import ElastiCacheRedisProvider

    registry = ProviderRegistry()
    registry.register(ElastiCacheRedisProvider(profile=profile))
    if load_entry_points:
        registry.load_entry_points(group)
    return registry
