"""Reading and writing the configuration file."""

from __future__ import annotations

import json
import os
from pathlib import Path

from .structs import Config


def write_config(path: str | os.PathLike[str], config: Config) -> None:
    """Serialise `config` as pretty JSON to the file at `path`."""
    text = json.dumps(config.to_json(), indent=2, ensure_ascii=False)
    Path(path).write_text(text, encoding="utf-8")


def read_config(path: str | os.PathLike[str]) -> Config:
    """Read the config at `path`, creating a default one first if it is missing."""
    path = Path(path)
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        write_config(path, Config())
    with path.open(encoding="utf-8") as handle:
        data = json.load(handle)
    return Config.from_json(data)