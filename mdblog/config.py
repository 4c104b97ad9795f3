from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import NoReturn

import yaml

if sys.version_info >= (3, 11):
    import tomllib as toml
else:
    import tomli as toml


def fail(message: str) -> NoReturn:
    print(message, file=sys.stderr)
    sys.exit(1)


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            fail(f"Invalid TOML in config file {path}: {exc}")
        if not isinstance(data, dict):
            fail(f"TOML config must be a mapping: {path}")
        return data
    if suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            fail(f"Invalid YAML in config file {path}: {exc}")
        if data is None:
            return {}
        if not isinstance(data, dict):
            fail(f"YAML config must be a mapping: {path}")
        return data
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        fail(f"Invalid JSON in config file {path}: {exc}")
    if not isinstance(data, dict):
        fail(f"JSON config must be a mapping: {path}")
    return data

