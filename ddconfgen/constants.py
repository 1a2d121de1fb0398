"""ddconfgen constants and configuration values."""

# Provider types
ELASTICACHE_REDIS_PROVIDER = "elasticache_redis"

# Resource Groups Tagging API resource type filter
ELASTICACHE_REPLICATION_GROUP_RESOURCE_TYPE = "elasticache:replicationgroup"

# ElastiCache node group member role
PRIMARY_ROLE = "primary"

# Entry point group for third-party providers
PROVIDER_ENTRY_POINT_GROUP = "ddconfgen.providers"

# Logging
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVEL_CHOICES = ["debug", "info", "warning", "error"]

# redisdb check config environment overrides
ENV_REGION = "GENERATE_CONFIG_REGION"
ENV_FIND_TAGS = "GENERATE_CONFIG_FIND_TAGS"
ENV_CHECK_TAGS = "GENERATE_CONFIG_CHECK_TAGS"
ENV_INSTANCE_TEMPLATE = "INSTANCE_TEMPLATE"
ENV_OTHER_CONFIGS = "OTHER_CONFIGS"

# Output files
OUTPUT_DIR_MODE = 0o755
