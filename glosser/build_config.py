"""
Build profile: which sink to use, where to write and how gloss lists are built.

A profile is a YAML mapping validated against schemas/build_config_schema.json.
Command-line flags override profile values (see build_book.py).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path

import jsonschema
import yaml

from glosser.assemble_book import AssemblyOptions
from glosser.corpus import GlosserError

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "build_config_schema.json"

DEFAULT_EXTENSIONS = {"html": ".html", "typst": ".typ"}


class BuildConfigError(GlosserError):
    """Build profile is unreadable or does not match the schema."""


@dataclass(frozen=True)
class BuildConfig:
    format: str = "typst"
    output: str | None = None          # default: <sequence stem> + format extension
    running_head: str | None = None    # typst even-page header; default: book title
    unique_per_page: bool = False
    hide_invisible: bool = False
    alphabetize: bool = False
    strict: bool = False               # skipped pages make the build fail

    @property
    def assembly_options(self) -> AssemblyOptions:
        return AssemblyOptions(
            unique_per_page=self.unique_per_page,
            hide_invisible=self.hide_invisible,
            alphabetize=self.alphabetize,
        )

    def output_path(self, sequence_path: str | Path) -> Path:
        if self.output:
            return Path(self.output)
        return Path(sequence_path).with_suffix(DEFAULT_EXTENSIONS[self.format])


def load_schema() -> dict:
    with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


def config_from_dict(data: dict | None) -> BuildConfig:
    """Validate a parsed profile and turn it into a BuildConfig."""
    data = data or {}
    try:
        jsonschema.validate(data, load_schema())
    except jsonschema.ValidationError as e:
        raise BuildConfigError(f"Schema validation error: {e.message}") from e
    return BuildConfig(**data)


def load_config(path: str | Path) -> BuildConfig:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise BuildConfigError(f"Cannot read build profile {path}: {e}") from e
    except yaml.YAMLError as e:
        raise BuildConfigError(f"{path} is not valid YAML: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise BuildConfigError(f"{path}: build profile must be a mapping")
    return config_from_dict(data)


def merge_overrides(config: BuildConfig, **overrides) -> BuildConfig:
    """Return `config` with every override that is not None applied."""
    known = {f.name for f in fields(BuildConfig)}
    values = {f.name: getattr(config, f.name) for f in fields(BuildConfig)}
    for key, value in overrides.items():
        if key not in known:
            raise BuildConfigError(f"unknown build option '{key}'")
        if value is not None:
            values[key] = value
    return config_from_dict({k: v for k, v in values.items() if v is not None})
