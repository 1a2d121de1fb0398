"""Generation pipeline: discover resources, render templates, write files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from ddconfgen.errors import ConfigValidationError, DiscoveryError, NotFoundError
from ddconfgen.genconfig import GenConfig, load_gen_config
from ddconfgen.output import resolve_template_path, write_output
from ddconfgen.renderer import Renderer, TemplateData
from ddconfgen.resources.base import Resource
from ddconfgen.resources.registry import ProviderRegistry

logger = logging.getLogger(__name__)


def discover_all(gen_config: GenConfig, registry: ProviderRegistry) -> Dict[str, List[Resource]]:
    """Discover every resource definition, in config order.

    Returns:
        Resource name -> discovered resources

    Raises:
        NotFoundError: If a definition uses an unregistered provider type
        ConfigValidationError: If a provider rejects its configuration
        DiscoveryError: If a cloud API call fails
    """
    discovered: Dict[str, List[Resource]] = {}
    for definition in gen_config.resources:
        logger.info(
            f"Discovering resource {definition.name} "
            f"(type={definition.type}, region={definition.region})"
        )
        provider = registry.get(definition.type)
        try:
            resources = provider.discover(definition.to_provider_config())
        except ConfigValidationError as e:
            raise ConfigValidationError(
                f"invalid configuration for resource '{definition.name}': {e.message}",
                field=e.field,
            ) from e
        except DiscoveryError as e:
            raise DiscoveryError(
                f"failed to discover resources for '{definition.name}': {e.message}",
                resource_id=e.resource_id,
            ) from e

        discovered[definition.name] = resources
        logger.info(f"Found {len(resources)} resource(s) for {definition.name}")
    return discovered


def render_outputs(
    gen_config: GenConfig,
    config_path: Union[str, Path],
    discovered: Dict[str, List[Resource]],
    renderer: Optional[Renderer] = None,
) -> List[Path]:
    """Render and write every output.

    Returns:
        Paths of the written files, in config order

    Raises:
        NotFoundError: If an output references an undiscovered resource
        TemplateError: If a template cannot be read, parsed or rendered
        OutputError: If a file cannot be written
    """
    renderer = renderer or Renderer()
    written: List[Path] = []

    for output in gen_config.outputs:
        logger.info(f"Rendering template for {output.output_file}")

        resource_name = output.data.resource_name
        if resource_name not in discovered:
            raise NotFoundError(f"resource for output '{output.output_file}'", resource_name)

        template_path = resolve_template_path(output.template, config_path)
        data = TemplateData(resources=discovered[resource_name], static=output.data.static)
        rendered = renderer.render(template_path, data)
        written.append(write_output(output.output_file, rendered))

    return written


def run_generation(
    config_path: Union[str, Path],
    registry: ProviderRegistry,
    renderer: Optional[Renderer] = None,
) -> List[Path]:
    """Load a generation config, discover its resources and write its outputs."""
    logger.info(f"Loading generation configuration {config_path}")
    gen_config = load_gen_config(config_path)

    discovered = discover_all(gen_config, registry)

    logger.info("Generating output files")
    written = render_outputs(gen_config, config_path, discovered, renderer)
    logger.info(f"Done ({len(written)} file(s) written)")
    return written
