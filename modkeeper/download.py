"""Cleaning an output directory and downloading files into it."""

from __future__ import annotations

import os
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, TypeVar

import requests
from tqdm import tqdm

from .cli import DEFAULT_PARALLEL_TASKS
from .upgrade import DownloadData

T = TypeVar("T")

TICK = "\x1b[32m✔\x1b[0m"
_SIZE_UNITS = ("KB", "MB", "GB", "TB", "PB")


def _style(text: str, code: str) -> str:
    return f"\x1b[{code}m{text}\x1b[0m"


def _format_size(length: int) -> str:
    if length < 1000:
        return f"{length} B"
    value = float(length)
    for unit in _SIZE_UNITS:
        value /= 1000
        if value < 1000 or unit == _SIZE_UNITS[-1]:
            return f"{value:.2f} {unit}"
    raise AssertionError("unreachable")


def find_dupes_by_key(items: list[T], key: Callable[[T], object]) -> list[int]:
    """Sort `items` in place by `key` and return the indices of duplicates.

    An index is returned for every item whose key equals that of the next
    item, in descending order so they can be removed one after another.
    """
    if len(items) < 2:
        return []
    items.sort(key=key)
    keys = [key(item) for item in items]
    dupes = [i for i, (a, b) in enumerate(zip(keys, keys[1:])) if a == b]
    dupes.reverse()
    return dupes


def clean(
    directory: str | os.PathLike[str],
    to_download: Iterable[DownloadData],
    to_install: Iterable[tuple[str, Path]],
) -> tuple[list[DownloadData], list[tuple[str, Path]]]:
    """Prepare `directory` and return what still has to be downloaded and installed.

    Duplicate downloads are dropped with a warning. Files already present
    are not downloaded or installed again; other files are moved to
    `directory/.old`, and `.part` files or files that cannot be moved are deleted.
    """
    directory = Path(directory)
    to_download = list(to_download)
    to_install = [(str(name), Path(path)) for name, path in to_install]

    dupes = find_dupes_by_key(to_download, lambda d: d.filename())
    if dupes:
        removed = [to_download.pop(i).filename() for i in dupes]
        warning = (
            f"Warning: {len(dupes)} duplicate files were found {', '.join(removed)}. "
            "Remove the mod it belongs to"
        )
        print(_style(warning, "1;33"))

    old = directory / ".old"
    old.mkdir(parents=True, exist_ok=True)
    with os.scandir(directory) as entries:
        files = sorted(
            (e for e in entries if e.is_file(follow_symlinks=False)), key=lambda e: e.name
        )
    for entry in files:
        name = entry.name
        path = Path(entry.path)
        download_index = next(
            (i for i, d in enumerate(to_download) if d.filename() == name), None
        )
        if download_index is not None:
            to_download.pop(download_index)
            continue
        install_index = next((i for i, (n, _) in enumerate(to_install) if n == name), None)
        if install_index is not None:
            to_install.pop(install_index)
            continue
        if name.endswith("part"):
            path.unlink()
            continue
        destination = old / name
        try:
            if destination.exists():
                raise FileExistsError(destination)
            shutil.move(str(path), str(destination))
        except OSError:
            path.unlink()
    return to_download, to_install


def read_overrides(directory: str | os.PathLike[str]) -> list[tuple[str, Path]]:
    """The `(name, path)` of every entry of `directory`, or nothing if it is absent."""
    directory = Path(directory)
    if not directory.exists():
        return []
    return [(entry.name, entry) for entry in sorted(directory.iterdir())]


def download(
    output_dir: str | os.PathLike[str],
    to_download: Iterable[DownloadData],
    to_install: Iterable[tuple[str, Path]],
    parallel_tasks: int = DEFAULT_PARALLEL_TASKS,
) -> None:
    """Download `to_download` and copy `to_install` into `output_dir`.

    At most `parallel_tasks` downloads run at once. The first failure is
    raised once every download has finished.
    """
    if parallel_tasks < 1:
        raise ValueError("parallel_tasks must be at least 1")
    output_dir = Path(output_dir)
    to_download = list(to_download)
    lock = threading.Lock()
    session = requests.Session()

    with tqdm(
        total=sum(d.length for d in to_download),
        unit="B",
        unit_scale=True,
        unit_divisor=1000,
        leave=False,
    ) as bar:

        def update(length: int) -> None:
            with lock:
                bar.update(length)

        def fetch(data: DownloadData) -> None:
            length, filename = data.download(session, output_dir, update)
            with lock:
                bar.write(
                    f"{TICK} Downloaded  {_format_size(length):>7}  {_style(filename, '2')}"
                )

        with ThreadPoolExecutor(max_workers=parallel_tasks) as pool:
            futures = [pool.submit(fetch, data) for data in to_download]
        for future in futures:
            future.result()

    for name, path in to_install:
        path = Path(path)
        if path.is_file():
            shutil.copy(path, output_dir / name)
        elif path.is_dir():
            shutil.copytree(path, output_dir / name, dirs_exist_ok=True)
        else:
            raise FileNotFoundError(
                f"Could not determine whether installable is a file or folder: {path}"
            )
        print(f"{TICK} Installed          {_style(str(name), '2')}")