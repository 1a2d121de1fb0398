"""Datadog ``redisdb`` check configuration, generated without a template.

The check config file looks like:

    generate_config:
      region: ap-northeast-1
      find_tags:          # AWS tags a replication group must carry
        env: production
      check_tags:         # Datadog tag key -> AWS tag key
        env: awsenv
    instance_template:    # base of every instances[] entry
      username: "%%env_REDIS_USERNAME%%"
    init_config: {}       # any other top-level key is copied as-is

With ``check_tags`` of ``env: awsenv`` a node tagged ``awsenv=production``
gets the Datadog tag ``env:production``.

Environment variables override the file:

    GENERATE_CONFIG_REGION      region
    GENERATE_CONFIG_FIND_TAGS   JSON object, replaces find_tags
    GENERATE_CONFIG_CHECK_TAGS  JSON object, replaces check_tags
    INSTANCE_TEMPLATE           JSON value, replaces instance_template
    OTHER_CONFIGS               JSON object, merged into the other keys
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ddconfgen.constants import (
    ELASTICACHE_REDIS_PROVIDER,
    ENV_CHECK_TAGS,
    ENV_FIND_TAGS,
    ENV_INSTANCE_TEMPLATE,
    ENV_OTHER_CONFIGS,
    ENV_REGION,
)
from ddconfgen.errors import ConfigValidationError
from ddconfgen.resources.base import ProviderConfig, Resource, require_mapping, require_str_mapping
from ddconfgen.resources.registry import ProviderRegistry

logger = logging.getLogger(__name__)


class GenerateConfig(BaseModel):
    """Discovery settings of a redisdb check config."""

    find_tags: Dict[str, str] = Field(default_factory=dict)
    check_tags: Dict[str, str] = Field(default_factory=dict)
    region: str = ""

    @field_validator("find_tags", "check_tags", mode="before")
    @classmethod
    def default_dicts(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("region", mode="before")
    @classmethod
    def default_region(cls, v: Any) -> Any:
        return "" if v is None else v


class CheckConfig(BaseModel):
    """A redisdb check config file."""

    generate_config: GenerateConfig = Field(default_factory=GenerateConfig)
    instance_template: Any = None
    other_configs: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_document(cls, data: Mapping[str, Any]) -> "CheckConfig":
        other = {k: v for k, v in data.items() if k not in ("generate_config", "instance_template")}
        try:
            return cls(
                generate_config=data.get("generate_config") or {},
                instance_template=data.get("instance_template"),
                other_configs=other,
            )
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(p) for p in first.get("loc", ()))
            raise ConfigValidationError(
                f"invalid check config: {location}: {first.get('msg')}",
                field=location,
            ) from e


def _load_json_from_env(env_key: str) -> Any:
    """Decode a JSON environment variable; None when unset or empty."""
    value = os.environ.get(env_key, "")
    if not value:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise ConfigValidationError(f"{env_key} is not valid JSON: {e}", field=env_key) from e


def load_check_config(file_path: Optional[Union[str, Path]] = None) -> CheckConfig:
    """Load a redisdb check config from a file and the environment.

    A missing file is not an error: the config then comes from the
    environment alone.

    Raises:
        ConfigValidationError: If the file or an override is invalid, or
            no region is configured
    """
    data: Dict[str, Any] = {}

    if file_path:
        path = Path(file_path)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"Check config {path} not found, using environment only")
        except OSError as e:
            raise ConfigValidationError(f"failed to read check config file: {e}") from e
        else:
            try:
                loaded = yaml.safe_load(content)
            except yaml.YAMLError as e:
                raise ConfigValidationError(f"failed to parse check config: {e}") from e
            if loaded is not None:
                data = dict(require_mapping(loaded, "check config"))

    config = CheckConfig.from_document(data)
    gen = config.generate_config

    region = os.environ.get(ENV_REGION, "")
    if region:
        gen.region = region

    find_tags = _load_json_from_env(ENV_FIND_TAGS)
    if find_tags is not None:
        gen.find_tags = require_str_mapping(find_tags, ENV_FIND_TAGS)

    check_tags = _load_json_from_env(ENV_CHECK_TAGS)
    if check_tags is not None:
        gen.check_tags = require_str_mapping(check_tags, ENV_CHECK_TAGS)

    instance_template = _load_json_from_env(ENV_INSTANCE_TEMPLATE)
    if instance_template is not None:
        config.instance_template = instance_template

    other_configs = _load_json_from_env(ENV_OTHER_CONFIGS)
    if other_configs is not None:
        config.other_configs.update(require_mapping(other_configs, ENV_OTHER_CONFIGS))

    if not gen.region:
        raise ConfigValidationError(
            "region is not specified in config or environment variable",
            field="generate_config.region",
        )

    return config


def build_tags(node: Resource, check_tags: Mapping[str, str], instance: Mapping[str, Any]) -> List[str]:
    """Combine template tags with check tags taken from the node's AWS tags.

    String entries of the instance's ``tags`` list come first, then one
    ``"<check tag>:<value>"`` per check tag whose AWS tag the node carries.
    """
    tags: List[str] = []

    existing = instance.get("tags")
    if isinstance(existing, list):
        tags.extend(tag for tag in existing if isinstance(tag, str))

    for check_tag_key, node_tag_key in check_tags.items():
        if node_tag_key in node.tags:
            tags.append(f"{check_tag_key}:{node.tags[node_tag_key]}")

    return tags


def build_instance(node: Resource, config: CheckConfig) -> Dict[str, Any]:
    """Build one ``instances[]`` entry from the instance template and a node."""
    instance: Dict[str, Any] = {}
    if isinstance(config.instance_template, dict):
        instance.update(config.instance_template)

    instance["host"] = node.host
    instance["port"] = node.port

    tags = build_tags(node, config.generate_config.check_tags, instance)
    if tags:
        instance["tags"] = tags
    else:
        instance.pop("tags", None)

    return instance


def generate_redisdb_config(nodes: List[Resource], config: CheckConfig) -> bytes:
    """Render the redisdb check config YAML for the given nodes."""
    output: Dict[str, Any] = {"init_config": config.other_configs.get("init_config")}
    for key, value in config.other_configs.items():
        if key not in ("init_config", "instances"):
            output[key] = value
    output["instances"] = [build_instance(node, config) for node in nodes]

    return yaml.safe_dump(output, sort_keys=False, default_flow_style=False, allow_unicode=True).encode("utf-8")


def run_redisdb_check(config_path: Optional[Union[str, Path]], registry: ProviderRegistry) -> bytes:
    """Load a check config, discover its Redis nodes and return the check YAML."""
    config = load_check_config(config_path)
    gen = config.generate_config

    provider = registry.get(ELASTICACHE_REDIS_PROVIDER)
    nodes = provider.discover(
        ProviderConfig(region=gen.region, filters={"tags": dict(gen.find_tags)})
    )
    logger.info(f"Generating redisdb check config for {len(nodes)} node(s)")
    return generate_redisdb_config(nodes, config)
