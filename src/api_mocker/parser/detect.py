"""Tell OpenAPI and Swagger documents apart from other YAML/JSON files."""

import json
from pathlib import Path

import yaml

SPEC_SUFFIXES = (".yaml", ".yml", ".json")


def detect_format(file_path: Path) -> str:
    """Return 'openapi', 'swagger', or 'unknown' for ``file_path``."""
    suffix = file_path.suffix.lower()
    if suffix not in SPEC_SUFFIXES:
        return "unknown"

    text = file_path.read_text(encoding="utf-8")
    try:
        data = json.loads(text) if suffix == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError):
        return "unknown"

    if not isinstance(data, dict):
        return "unknown"
    if "openapi" in data:
        return "openapi"
    if "swagger" in data:
        return "swagger"
    return "unknown"
