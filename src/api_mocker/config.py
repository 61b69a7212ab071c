"""Runtime configuration for the mock engine.

Values come from an optional YAML file; ``API_MOCKER_SPECS_DIR`` and
``API_MOCKER_DEFAULT_SPEC`` override the file.
"""

import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from api_mocker.errors import ConfigurationError

ENV_SPECS_DIR = "API_MOCKER_SPECS_DIR"
ENV_DEFAULT_SPEC = "API_MOCKER_DEFAULT_SPEC"


class GenerationConfig(BaseModel):
    """Knobs for synthetic data generation."""

    default_collection_size: int = 3
    default_string_length: int = 10
    prefer_examples: bool = True
    additional_properties_count: int = 2
    date_format: str = "%Y-%m-%d"
    max_depth: int = 8
    seed: int | None = None


class MockConfig(BaseModel):
    specs_dir: Path = Path("specs")
    default_spec: str | None = None
    merge_specs: bool = True
    merged_spec_name: str = "merged"
    generation: GenerationConfig = Field(default_factory=GenerationConfig)


def load_config(config_path: Path | str | None = None) -> MockConfig:
    """Load the configuration file, falling back to defaults."""
    data: dict = {}
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")
        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse configuration file: {e}") from e
        if parsed is None:
            parsed = {}
        if not isinstance(parsed, Mapping):
            raise ConfigurationError("Configuration root must be a mapping.")
        data = dict(parsed)
        if isinstance(data.get("specs_dir"), str) and not Path(data["specs_dir"]).is_absolute():
            data["specs_dir"] = path.parent / data["specs_dir"]

    if os.getenv(ENV_SPECS_DIR):
        data["specs_dir"] = os.environ[ENV_SPECS_DIR]
    if os.getenv(ENV_DEFAULT_SPEC):
        data["default_spec"] = os.environ[ENV_DEFAULT_SPEC]

    try:
        return MockConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
