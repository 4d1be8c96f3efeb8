"""Reading, extracting and creating modpack zip archives."""

from __future__ import annotations

import os
import zipfile
from pathlib import Path
from typing import IO

_INDEX_NAME = "modrinth.index.json"


def read_file_from_zip(source: str | os.PathLike[str] | IO[bytes], file_name: str) -> str | None:
    """Return the text of `file_name` inside the zip `source`, or None if absent."""
    with zipfile.ZipFile(source) as archive:
        try:
            info = archive.getinfo(file_name)
        except KeyError:
            return None
        return archive.read(info).decode("utf-8")


def zip_extract(archive: str | os.PathLike[str], target: str | os.PathLike[str]) -> None:
    """Extract every entry of `archive` into the directory `target`."""
    target = Path(target)
    target.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(archive) as zipped:
        zipped.extractall(target)


class _Writer:
    """A zip writer that refuses duplicate entry names."""

    def __init__(self, archive: zipfile.ZipFile) -> None:
        self.archive = archive
        self.names: set[str] = set()

    def _claim(self, name: str) -> None:
        if name in self.names:
            raise ValueError(f"Duplicate filename: {name}")
        self.names.add(name)

    def write_text(self, name: str, text: str) -> None:
        self._claim(name)
        self.archive.writestr(name, text.encode("utf-8"))

    def write_file(self, name: str, path: Path) -> None:
        self._claim(name)
        self.archive.write(path, name)

    def write_directory(self, directory: Path) -> None:
        """Add the contents of `directory` with paths relative to it."""
        for root, dirs, files in os.walk(directory):
            dirs.sort()
            root_path = Path(root)
            relative_root = root_path.relative_to(directory)
            if relative_root.parts:
                name = relative_root.as_posix() + "/"
                self._claim(name)
                self.archive.writestr(zipfile.ZipInfo(name), b"")
            for filename in sorted(files):
                self.write_file((relative_root / filename).as_posix(), root_path / filename)


def zip_create_from_directory(
    archive: str | os.PathLike[str], directory: str | os.PathLike[str]
) -> None:
    """Create the zip `archive` holding everything under `directory`."""
    with zipfile.ZipFile(archive, "w", zipfile.ZIP_DEFLATED) as zipped:
        _Writer(zipped).write_directory(Path(directory))


def create(
    output: str | os.PathLike[str],
    metadata: str,
    overrides: str | os.PathLike[str] | None = None,
    additional_mods: str | os.PathLike[str] | None = None,
) -> None:
    """Create a Modrinth modpack at `output`.

    The archive holds `metadata` as its index, the files directly inside
    `additional_mods` under `overrides/`, and the contents of `overrides`.
    """
    with zipfile.ZipFile(output, "w", zipfile.ZIP_DEFLATED) as zipped:
        writer = _Writer(zipped)
        writer.write_text(_INDEX_NAME, metadata)

        if additional_mods is not None:
            for entry in sorted(Path(additional_mods).iterdir()):
                if entry.is_file():
                    resolved = entry.resolve()
                    writer.write_file(f"overrides/{resolved.name}", resolved)

        if overrides is not None:
            writer.write_directory(Path(overrides))