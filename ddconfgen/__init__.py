"""ddconfgen - Datadog Agent check configuration generator.

A one-shot pipeline that:
- Discovers cache cluster nodes from AWS resource tags (ElastiCache Redis)
- Maps AWS resource tags to Datadog tags
- Renders check configuration files from Jinja2 templates
"""

__version__ = "0.2.0"

from ddconfgen.errors import (
    ConfGenError,
    ConfigValidationError,
    DiscoveryError,
    NotFoundError,
    OutputError,
    TemplateError,
)
from ddconfgen.resources import (
    Provider,
    ProviderConfig,
    ProviderRegistry,
    Resource,
    default_registry,
)

__all__ = [
    "__version__",
    # Errors
    "ConfGenError",
    "ConfigValidationError",
    "DiscoveryError",
    "NotFoundError",
    "OutputError",
    "TemplateError",
    # Resources
    "Provider",
    "ProviderConfig",
    "ProviderRegistry",
    "Resource",
    "default_registry",
]
