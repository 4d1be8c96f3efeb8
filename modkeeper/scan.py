"""Identifying the mod files in a directory by their hashes."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any, Callable

from .api import Apis, cf_fingerprint, default_apis


def scan(
    dir_path: str | os.PathLike[str],
    hashing_complete: Callable[[], Any] | None = None,
    apis: Apis | None = None,
) -> list[tuple[str, str | None, int | None]]:
    """Identify the JAR files in `dir_path` on Modrinth and CurseForge.

    Returns `(filename, modrinth project id, curseforge mod id)` for each
    distinct JAR file, with `None` where a platform does not know the file.
    `hashing_complete` is called once every file has been read and hashed.
    """
    apis = apis or default_apis()
    filenames: dict[int, str] = {}
    mr_hashes: list[str] = []
    cf_hashes: list[int] = []

    for path in sorted(Path(dir_path).iterdir()):
        if not (path.is_file() and path.suffix.lower() == ".jar"):
            continue
        data = path.read_bytes()
        cf_hash = cf_fingerprint(data)
        # Files already hashed (by fingerprint) are only counted once
        if cf_hash in filenames:
            continue
        filenames[cf_hash] = path.name
        mr_hashes.append(hashlib.sha1(data).hexdigest())
        cf_hashes.append(cf_hash)

    if hashing_complete is not None:
        hashing_complete()

    mr_found = apis.modrinth.version_get_from_multiple_hashes(mr_hashes)
    cf_found = apis.curseforge.get_fingerprint_matches(cf_hashes)

    mr_results = {digest: version["project_id"] for digest, version in mr_found.items()}
    cf_results = dict(
        zip(
            cf_found.get("exactFingerprints") or [],
            (match["id"] for match in cf_found.get("exactMatches") or []),
        )
    )

    return [
        (filenames.pop(cf), mr_results.pop(mr, None), cf_results.pop(cf, None))
        for mr, cf in zip(mr_hashes, cf_hashes)
    ]