"""Jinja2 rendering of check configuration templates.

Templates see two variables:

- ``resources``: list of Resource (``host``, ``port``, ``tags``, ``metadata``)
- ``static``: free-form data from the output definition

Example template:

    init_config:

    instances:
    {%- for resource in resources %}
      - host: {{ resource.host }}
        port: {{ resource.port }}
        tags:
        {%- for key, value in resource.tags.items() %}
          - {{ key }}:{{ value }}
        {%- endfor %}
    {%- endfor %}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import jinja2

from ddconfgen.errors import TemplateExecutionError, TemplateParseError, TemplateReadError
from ddconfgen.resources.base import Resource

logger = logging.getLogger(__name__)


@dataclass
class TemplateData:
    """Data passed to templates."""

    resources: List[Resource] = field(default_factory=list)
    static: Dict[str, Any] = field(default_factory=dict)

    def to_context(self) -> Dict[str, Any]:
        return {"resources": list(self.resources), "static": dict(self.static)}


class Renderer:
    """Renders template files against discovered resources.

    Undefined variables and attributes are errors rather than empty
    strings, and a trailing newline in the template is kept.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self.environment = jinja2.Environment(
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )

    def render(self, template_path: Union[str, Path], data: TemplateData) -> bytes:
        """Render a template file.

        Args:
            template_path: Path to the template file
            data: Template data

        Returns:
            Rendered output as bytes

        Raises:
            TemplateReadError: If the template file cannot be read
            TemplateParseError: If the template has invalid syntax
            TemplateExecutionError: If rendering fails
        """
        path = str(template_path)
        try:
            source = Path(template_path).read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateReadError(f"failed to read template file {path}: {e}", path=path) from e

        logger.debug(f"Rendering template {path} with {len(data.resources)} resource(s)")
        return self.render_string(source, data, name=path)

    def render_string(self, source: str, data: TemplateData, name: Optional[str] = None) -> bytes:
        """Render template source text.

        Raises:
            TemplateParseError: If the template has invalid syntax
            TemplateExecutionError: If rendering fails
        """
        try:
            template = self.environment.from_string(source)
        except jinja2.TemplateSyntaxError as e:
            raise TemplateParseError(
                f"failed to parse template {name or '<string>'} (line {e.lineno}): {e.message}",
                path=name,
            ) from e

        try:
            output = template.render(data.to_context())
        except jinja2.TemplateError as e:
            raise TemplateExecutionError(
                f"failed to execute template {name or '<string>'}: {e}",
                path=name,
            ) from e
        except Exception as e:
            # Errors raised by expressions and filters, e.g. division by zero
            raise TemplateExecutionError(
                f"failed to execute template {name or '<string>'}: {type(e).__name__}: {e}",
                path=name,
            ) from e

        return output.encode(self.encoding)
