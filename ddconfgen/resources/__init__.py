"""Resource discovery providers.

Providers turn cloud resources into Resource records. They are looked up
by resource type through a ProviderRegistry; third-party providers can be
advertised through the ``ddconfgen.providers`` entry point group:

    [project.entry-points."ddconfgen.providers"]
    memcached = "ddconfgen_memcached:MemcachedProvider"
"""

from .base import (
    Provider,
    ProviderConfig,
    Resource,
    ResourceTagMapping,
    map_tags,
    require_mapping,
    require_str_mapping,
)
from .registry import ProviderRegistry, default_registry

__all__ = [
    "Provider",
    "ProviderConfig",
    "ProviderRegistry",
    "Resource",
    "ResourceTagMapping",
    "default_registry",
    "map_tags",
    "require_mapping",
    "require_str_mapping",
]
