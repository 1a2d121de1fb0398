"""Generation config models and loading.

A generation config lists the resources to discover and the outputs to
render from them:

    version: "1.0"
    resources:
      - name: production_redis
        type: elasticache_redis
        region: ap-northeast-1
        filters:
          tags:
            env: Production
    outputs:
      - template: templates/redis.yaml.j2
        output_file: /etc/datadog-agent/conf.d/redisdb.d/conf.yaml
        data:
          resource_name: production_redis
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ddconfgen.errors import ConfigValidationError
from ddconfgen.resources.base import ProviderConfig

logger = logging.getLogger(__name__)


def _none_to_empty_dict(v: Any) -> Any:
    return {} if v is None else v


def _scalar_to_str(v: Any) -> Any:
    if v is None:
        return ""
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class ResourceDefinition(BaseModel):
    """A resource to discover."""

    name: str = ""
    type: str = ""
    region: str = ""
    filters: Dict[str, Any] = Field(default_factory=dict)
    tag_mapping: Dict[str, str] = Field(default_factory=dict)
    tags: Dict[str, str] = Field(default_factory=dict)

    @field_validator("filters", "tag_mapping", "tags", mode="before")
    @classmethod
    def default_dicts(cls, v: Any) -> Any:
        return _none_to_empty_dict(v)

    @field_validator("name", "type", "region", mode="before")
    @classmethod
    def coerce_strings(cls, v: Any) -> Any:
        return _scalar_to_str(v)

    def to_provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            region=self.region,
            filters=dict(self.filters),
            tag_mapping=dict(self.tag_mapping),
            static_tags=dict(self.tags),
        )


class OutputData(BaseModel):
    """Data an output passes to its template."""

    resource_name: str = ""
    static: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("static", mode="before")
    @classmethod
    def default_static(cls, v: Any) -> Any:
        return _none_to_empty_dict(v)

    @field_validator("resource_name", mode="before")
    @classmethod
    def coerce_resource_name(cls, v: Any) -> Any:
        return _scalar_to_str(v)


class OutputDefinition(BaseModel):
    """A file rendered from a template."""

    template: str = ""
    output_file: str = ""
    data: OutputData = Field(default_factory=OutputData)

    @field_validator("template", "output_file", mode="before")
    @classmethod
    def coerce_strings(cls, v: Any) -> Any:
        return _scalar_to_str(v)

    @field_validator("data", mode="before")
    @classmethod
    def default_data(cls, v: Any) -> Any:
        return {} if v is None else v


class GenConfig(BaseModel):
    """Top-level generation config."""

    version: str = ""
    resources: List[ResourceDefinition] = Field(default_factory=list)
    outputs: List[OutputDefinition] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v: Any) -> Any:
        return _scalar_to_str(v)

    @field_validator("resources", "outputs", mode="before")
    @classmethod
    def default_lists(cls, v: Any) -> Any:
        return [] if v is None else v


def _format_loc(loc) -> str:
    parts: List[str] = []
    for item in loc:
        if isinstance(item, int) and parts:
            parts[-1] = f"{parts[-1]}[{item}]"
        else:
            parts.append(str(item))
    return ".".join(parts)


def parse_gen_config(data: Any) -> GenConfig:
    """Build and validate a GenConfig from already-parsed YAML data.

    Raises:
        ConfigValidationError: If the data is malformed or invalid
    """
    if not isinstance(data, dict):
        raise ConfigValidationError("invalid generation config: document must be a map")

    try:
        cfg = GenConfig.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = _format_loc(first.get("loc", ()))
        raise ConfigValidationError(
            f"invalid generation config: {location}: {first.get('msg')}",
            field=location,
        ) from e

    validate_gen_config(cfg)
    return cfg


def load_gen_config(path: Union[str, Path]) -> GenConfig:
    """Load and validate a generation config file.

    Raises:
        ConfigValidationError: If the file cannot be read, parsed or validated
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigValidationError(f"failed to read generation config file: {e}") from e

    logger.debug(f"Read generation config file {path}")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"failed to parse generation config: {e}") from e

    cfg = parse_gen_config(data)
    logger.debug(
        f"Parsed generation config (resources={len(cfg.resources)}, outputs={len(cfg.outputs)})"
    )
    return cfg


def validate_gen_config(cfg: GenConfig) -> None:
    """Check required fields and cross references.

    Raises:
        ConfigValidationError: On the first problem found
    """
    if not cfg.version:
        raise ConfigValidationError("invalid generation config: version is required", field="version")

    if not cfg.resources:
        raise ConfigValidationError(
            "invalid generation config: at least one resource must be defined", field="resources"
        )

    if not cfg.outputs:
        raise ConfigValidationError(
            "invalid generation config: at least one output must be defined", field="outputs"
        )

    names = set()
    for i, res in enumerate(cfg.resources):
        for attr in ("name", "type", "region"):
            if not getattr(res, attr):
                raise ConfigValidationError(
                    f"invalid generation config: resource[{i}]: {attr} is required",
                    field=f"resources[{i}].{attr}",
                )
        if res.name in names:
            raise ConfigValidationError(
                f"invalid generation config: resource[{i}]: duplicate resource name: {res.name}",
                field=f"resources[{i}].name",
            )
        names.add(res.name)

    for i, out in enumerate(cfg.outputs):
        if not out.template:
            raise ConfigValidationError(
                f"invalid generation config: output[{i}]: template is required",
                field=f"outputs[{i}].template",
            )
        if not out.output_file:
            raise ConfigValidationError(
                f"invalid generation config: output[{i}]: output_file is required",
                field=f"outputs[{i}].output_file",
            )
        if not out.data.resource_name:
            raise ConfigValidationError(
                f"invalid generation config: output[{i}]: data.resource_name is required",
                field=f"outputs[{i}].data.resource_name",
            )
        if out.data.resource_name not in names:
            raise ConfigValidationError(
                f"invalid generation config: output[{i}]: resource_name "
                f"'{out.data.resource_name}' not found in resources",
                field=f"outputs[{i}].data.resource_name",
            )
