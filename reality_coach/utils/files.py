"""YAML/JSON data file loading."""

from __future__ import annotations

import json
from pathlib import Path

import yaml


def load_mapping(path: Path | str) -> dict:
    """Load a YAML or JSON file whose top level is a mapping.

    The format is picked from the suffix; unknown suffixes are sniffed
    (JSON if the text starts with ``{``, YAML otherwise).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file cannot be parsed or is not a mapping.
    """
    data_path = Path(path)
    if not data_path.exists():
        raise FileNotFoundError(f"Data file not found: {data_path}")

    raw = data_path.read_text(encoding="utf-8")
    suffix = data_path.suffix.lower()

    if suffix == ".json" or (
        suffix not in {".yaml", ".yml"} and raw.lstrip().startswith("{")
    ):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON file: {data_path}") from e
    else:
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML file: {data_path}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Data file must be a mapping/dict: {data_path}")
    return data
