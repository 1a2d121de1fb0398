"""Error types raised by the ddconfgen pipeline.

Every failure surfaced to the command line derives from ConfGenError so
the CLI can report it with a single handler.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ConfGenError(Exception):
    """Base exception for ddconfgen errors.

    Usage:
        raise ConfGenError("Something went wrong")
        raise ConfGenError("Invalid input", details={"field": "region"})
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigValidationError(ConfGenError):
    """Raised when a provider or generation config is invalid."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, details=details)
        self.field = field


class DiscoveryError(ConfGenError):
    """Raised when a cloud API call fails during discovery."""

    def __init__(self, message: str, resource_id: Optional[str] = None):
        details = {"resource_id": resource_id} if resource_id else {}
        super().__init__(message, details=details)
        self.resource_id = resource_id


class NotFoundError(ConfGenError):
    """Raised when a provider type or referenced resource is not known."""

    def __init__(self, kind: str, identifier: Optional[str] = None):
        message = f"{kind} not found"
        if identifier:
            message = f"{kind} '{identifier}' not found"
        super().__init__(message, details={"kind": kind, "identifier": identifier})
        self.kind = kind
        self.identifier = identifier


class TemplateError(ConfGenError):
    """Base class for template read, parse and execution failures."""

    stage = "render"

    def __init__(self, message: str, path: Optional[str] = None):
        details = {"path": path, "stage": self.stage} if path else {"stage": self.stage}
        super().__init__(message, details=details)
        self.path = path


class TemplateReadError(TemplateError):
    """The template file could not be read."""

    stage = "read"


class TemplateParseError(TemplateError):
    """The template source is not valid template syntax."""

    stage = "parse"


class TemplateExecutionError(TemplateError):
    """Rendering failed, e.g. an undefined variable was referenced."""

    stage = "execute"


class OutputError(ConfGenError):
    """Raised when a rendered file cannot be written."""

    def __init__(self, message: str, path: Optional[str] = None):
        details = {"path": path} if path else {}
        super().__init__(message, details=details)
        self.path = path
