"""Template loading from JSON and YAML files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import yaml

from idlekit_core.template import GameTemplate, TemplateValidationError
from idlekit_core.utils.logging import get_logger

logger = get_logger("core.loader")

DEFAULT_TEMPLATE_PATH = Path(__file__).parent / "templates" / "default.yaml"


def read_template_data(path: str | Path) -> Dict[str, Any]:
    """Read raw template data without validating it.

    Raises:
        FileNotFoundError: If the file does not exist
        TemplateValidationError: If the file is not parsable or not a mapping
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Template not found: {file_path}")

    suffix = file_path.suffix.lower()
    with open(file_path, "r", encoding="utf-8") as f:
        try:
            if suffix == ".json":
                data = json.load(f)
            elif suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                raise TemplateValidationError([f"Unsupported template format: {suffix or 'none'}"])
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise TemplateValidationError([f"{file_path.name}: {e}"]) from e

    if not isinstance(data, dict):
        raise TemplateValidationError([f"{file_path.name}: top level must be a mapping"])
    return data


def load_template(path: str | Path) -> GameTemplate:
    """Load and validate a template file."""
    template = GameTemplate.from_dict(read_template_data(path))
    logger.info(f"Loaded template {template.meta.name} v{template.meta.version} from {path}")
    return template


def load_default_template() -> GameTemplate:
    return load_template(DEFAULT_TEMPLATE_PATH)
