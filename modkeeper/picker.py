"""Asking the user for a folder in the terminal."""

from __future__ import annotations

import os
from pathlib import Path


def _ask(default: Path, prompt: str) -> Path | None:
    try:
        answer = input(f"{prompt} [{default}] ")
    except (EOFError, KeyboardInterrupt):
        return None
    return Path(answer) if answer else default


def pick_folder(
    default: str | os.PathLike[str], prompt: str, name: str
) -> Path | None:
    """Ask for a folder, offering `default`; `name` describes what is being picked.

    A `~` component stands for the home directory. Returns the canonical
    path, or None if the user cancelled. A folder that does not exist raises.
    """
    raw = _ask(Path(default), prompt)
    if raw is None:
        return None
    home = Path.home()
    joined = Path(*(home if part == "~" else part for part in raw.parts))
    path = joined.resolve(strict=True)
    print(f"✔ \x1b[01m{name}\x1b[0m · \x1b[32m{path}\x1b[0m")
    return path