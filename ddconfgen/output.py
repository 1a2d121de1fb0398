"""Output file handling for rendered check configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from ddconfgen.constants import OUTPUT_DIR_MODE
from ddconfgen.errors import OutputError

logger = logging.getLogger(__name__)


def resolve_template_path(template: str, config_path: Union[str, Path]) -> Path:
    """Resolve a template path relative to the generation config file's directory."""
    path = Path(template)
    if path.is_absolute():
        return path
    return Path(config_path).parent / path


def ensure_dir(path: Path) -> None:
    path.mkdir(mode=OUTPUT_DIR_MODE, parents=True, exist_ok=True)


def write_output(path: Union[str, Path], data: bytes) -> Path:
    """Write rendered bytes verbatim, creating parent directories as needed."""
    out = Path(path)
    try:
        ensure_dir(out.parent)
    except OSError as exc:
        raise OutputError(f"failed to create output directory '{out.parent}': {exc}", path=str(out)) from exc
    try:
        out.write_bytes(data)
    except OSError as exc:
        raise OutputError(f"failed to write output file '{out}': {exc}", path=str(out)) from exc
    logger.info(f"Written output file {out}")
    return out
