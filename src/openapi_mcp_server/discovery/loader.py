"""Discover provider directories and read their OpenAPI documents.

Layout::

    specs/
      petstore/
        specification.yaml   (or .json / .yml)
        config.json          (optional: {"headers": {...}, "baseUrl": "..."})
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import structlog
import yaml
from pydantic import ValidationError

from ..models.schemas import ProviderConfig
from .openapi_parser import ProviderBundle

logger = structlog.get_logger(__name__)

CONFIG_FILENAME = "config.json"

# Tried in order; the first file that parses to a mapping wins.
SPEC_FORMATS: list[tuple[str, Callable[[str], Any]]] = [
    ("specification.json", json.loads),
    ("specification.yaml", yaml.safe_load),
    ("specification.yml", yaml.safe_load),
]


class SpecLoadError(Exception):
    """The specs directory as a whole could not be loaded."""


def load_provider_bundles(specs_dir: str | Path) -> dict[str, ProviderBundle]:
    """Return ``{provider_name: ProviderBundle}`` for every usable provider."""
    specs_path = Path(specs_dir)
    if not specs_path.is_dir():
        raise SpecLoadError(f"{specs_path} is not a directory")

    provider_dirs = sorted(p for p in specs_path.iterdir() if p.is_dir())
    if not provider_dirs:
        raise SpecLoadError(f"No provider directories found in {specs_path}")

    bundles: dict[str, ProviderBundle] = {}
    for provider_dir in provider_dirs:
        name = provider_dir.name
        document = _read_specification(provider_dir)
        if document is None:
            logger.warning("No valid specification file found", provider=name)
            continue

        config = _read_config(provider_dir)
        bundles[name] = ProviderBundle(
            name=name,
            document=document,
            headers=dict(config.headers),
            base_url=config.base_url,
        )
        logger.info(
            "Loaded provider",
            provider=name,
            has_headers=bool(config.headers),
            base_url_override=config.base_url,
        )

    if not bundles:
        raise SpecLoadError(
            "No valid OpenAPI specifications found in provider directories"
        )
    return bundles


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------


def _read_specification(provider_dir: Path) -> dict[str, Any] | None:
    for filename, parse in SPEC_FORMATS:
        path = provider_dir / filename
        if not path.is_file():
            continue
        try:
            document = parse(path.read_text(encoding="utf-8"))
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(
                "Could not parse specification", path=str(path), error=str(e)
            )
            continue
        if isinstance(document, dict):
            return document
        logger.warning("Specification is not a mapping", path=str(path))
    return None


def _read_config(provider_dir: Path) -> ProviderConfig:
    path = provider_dir / CONFIG_FILENAME
    if not path.is_file():
        return ProviderConfig()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return ProviderConfig.model_validate(raw)
    except (OSError, ValueError, ValidationError) as e:
        logger.warning("Ignoring invalid provider config", path=str(path), error=str(e))
        return ProviderConfig()
