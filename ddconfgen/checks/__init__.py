"""Template-free generators for individual Datadog checks."""

from ddconfgen.checks.redisdb import (
    CheckConfig,
    GenerateConfig,
    build_instance,
    build_tags,
    generate_redisdb_config,
    load_check_config,
    run_redisdb_check,
)

__all__ = [
    "CheckConfig",
    "GenerateConfig",
    "build_instance",
    "build_tags",
    "generate_redisdb_config",
    "load_check_config",
    "run_redisdb_check",
]
