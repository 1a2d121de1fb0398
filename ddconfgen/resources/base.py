"""Core resource types and the provider interface.

Providers discover cloud resources and turn them into Resource records
that templates render. Each concrete provider handles one resource type
(e.g. ``elasticache_redis``) and is looked up through a ProviderRegistry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ddconfgen.errors import ConfigValidationError


@dataclass(frozen=True)
class Resource:
    """A discovered, addressable endpoint.

    Attributes:
        host: Hostname or endpoint address
        port: Port number
        tags: Datadog tags for this endpoint (mapped, or raw when no mapping is configured)
        metadata: Type-specific additional data (e.g. ClusterName, ShardName, IsPrimary)
    """

    host: str
    port: int
    tags: Dict[str, str] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProviderConfig:
    """Configuration handed to a provider for one resource definition.

    Attributes:
        region: Cloud region to discover in
        filters: Provider-specific filters (``tags`` holds tag key/value filters)
        tag_mapping: Output tag key -> source resource tag key
        static_tags: Tags added to every discovered resource
    """

    region: str
    filters: Dict[str, Any] = field(default_factory=dict)
    tag_mapping: Dict[str, str] = field(default_factory=dict)
    static_tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class ResourceTagMapping:
    """A resource returned by tag search, with its tags as a dict."""

    resource_arn: str
    tags: Dict[str, str] = field(default_factory=dict)


def require_mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    """Assert that a dynamic config value is a mapping.

    Raises:
        ConfigValidationError: If the value is not a mapping
    """
    if not isinstance(value, Mapping):
        raise ConfigValidationError(
            f"{field_name} must be a map, got {type(value).__name__}",
            field=field_name,
        )
    return value


def require_str_mapping(value: Any, field_name: str) -> Dict[str, str]:
    """Assert that a dynamic config value is a string-to-string mapping.

    Raises:
        ConfigValidationError: If the value or any of its entries has the wrong type
    """
    mapping = require_mapping(value, field_name)
    for key, item in mapping.items():
        if not isinstance(key, str) or not isinstance(item, str):
            raise ConfigValidationError(
                f"{field_name}.{key} must be a string, got {type(item).__name__}",
                field=f"{field_name}.{key}",
            )
    return dict(mapping)


def map_tags(
    raw_tags: Mapping[str, str],
    tag_mapping: Mapping[str, str],
    static_tags: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Translate raw resource tags into output tags.

    Static tags form the base; every ``output_key -> source_key`` entry of
    the mapping whose source key is present in ``raw_tags`` is then set
    on top. Source keys missing from ``raw_tags`` are omitted.

    Example:
        >>> map_tags({"Environment": "production", "Team": "x"}, {"env": "Environment"})
        {'env': 'production'}
    """
    result: Dict[str, str] = dict(static_tags or {})
    for output_key, source_key in tag_mapping.items():
        if source_key in raw_tags:
            result[output_key] = raw_tags[source_key]
    return result


class Provider(ABC):
    """Base class for resource providers.

    Example implementation:

        class MemcachedProvider(Provider):
            @property
            def type(self) -> str:
                return "elasticache_memcached"

            def discover(self, config: ProviderConfig) -> List[Resource]:
                self.validate_config(config)
                ...
    """

    @property
    @abstractmethod
    def type(self) -> str:
        """Return the resource type handled by this provider."""
        pass

    def validate_config(self, config: ProviderConfig) -> None:
        """Check that a provider configuration is usable.

        The default implementation requires a region, a mapping of
        filters whose ``tags`` entry (if any) is itself a mapping, and
        string-to-string tag mappings.

        Raises:
            ConfigValidationError: If the configuration is invalid
        """
        if not config.region:
            raise ConfigValidationError("region is required", field="region")

        if config.filters is not None:
            filters = require_mapping(config.filters, "filters")
            if "tags" in filters:
                require_mapping(filters["tags"], "filters.tags")

        require_str_mapping(config.tag_mapping or {}, "tag_mapping")
        require_str_mapping(config.static_tags or {}, "tags")

    @abstractmethod
    def discover(self, config: ProviderConfig) -> List[Resource]:
        """Discover resources matching the configuration.

        Args:
            config: Provider configuration for one resource definition

        Returns:
            Discovered resources, in a deterministic order

        Raises:
            ConfigValidationError: If the configuration is invalid
            DiscoveryError: If a cloud API call fails
        """
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} type={self.type}>"
