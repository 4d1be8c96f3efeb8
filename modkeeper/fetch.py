"""Resolving mods and modpacks to the file that should be downloaded."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable

import requests

from .api import Apis, cache_dir, default_apis
from .check import select_latest
from .config.filters import Filter
from .config.structs import (
    CurseForgeModpack,
    CurseForgeProject,
    GitHubRepository,
    Mod,
    ModpackIdentifier,
    ModrinthModpack,
    ModrinthProject,
    PinnedCurseForgeProject,
    PinnedGitHubRepository,
    PinnedModrinthProject,
)
from .upgrade import (
    DownloadData,
    from_cf_file,
    from_gh_asset,
    from_gh_releases,
    from_mr_version,
)


class FetchError(Exception):
    """The file to download could not be determined."""


class InvalidPinError(FetchError):
    """A pinned identifier is not a valid id."""

    def __init__(self) -> None:
        super().__init__("The pin provided is an invalid identifier")


def _pin(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidPinError()
    if isinstance(value, int):
        return value
    try:
        return int(str(value))
    except ValueError:
        raise InvalidPinError() from None


def fetch_download_file(
    mod: Mod,
    profile_filters: Iterable[Filter],
    apis: Apis | None = None,
) -> DownloadData:
    """Return the file to download for `mod`.

    Pinned mods resolve directly; others pick the latest file passing the
    profile's filters together with the mod's own (or only the mod's own
    when it overrides the profile's).
    """
    apis = apis or default_apis()
    match mod.identifier:
        case PinnedCurseForgeProject(mod_id, pin):
            return from_cf_file(apis.curseforge.get_mod_file(mod_id, _pin(pin)))[1]
        case PinnedModrinthProject(_, pin):
            return from_mr_version(apis.modrinth.version_get(pin))[1]
        case PinnedGitHubRepository(owner, repo, pin):
            return from_gh_asset(apis.github.get_release_asset(owner, repo, _pin(pin)))
        case CurseForgeProject(project_id):
            files = sorted(
                apis.curseforge.get_mod_files(project_id),
                key=lambda f: f.get("fileDate") or "",
                reverse=True,
            )
            candidates = [from_cf_file(f) for f in files]
        case ModrinthProject(project_id):
            candidates = [from_mr_version(v) for v in apis.modrinth.version_list(project_id)]
        case GitHubRepository(owner, repo):
            candidates = from_gh_releases(apis.github.list_releases(owner, repo))
        case other:
            raise TypeError(f"not a mod identifier: {other!r}")

    if mod.override_filters:
        filters = list(mod.filters)
    else:
        filters = [*profile_filters, *mod.filters]
    index = select_latest([metadata for metadata, _ in candidates], filters, apis.modrinth)
    return candidates[index][1]


def download_modpack_file(
    identifier: ModpackIdentifier,
    total: Callable[[int], Any] | None = None,
    update: Callable[[int], Any] | None = None,
    apis: Apis | None = None,
) -> Path:
    """Download the latest file of a modpack into the cache and return its path.

    Nothing is downloaded if the file is already cached. `total` receives the
    file size before a download starts, `update` the length of each chunk.
    """
    apis = apis or default_apis()
    match identifier:
        case CurseForgeModpack(project_id):
            files = apis.curseforge.get_mod_files(project_id)
            if not files:
                raise FetchError(f"The modpack {project_id} has no files")
            _, data = from_cf_file(files[0])
        case ModrinthModpack(project_id):
            versions = apis.modrinth.version_list(project_id)
            if not versions:
                raise FetchError(f"The modpack {project_id} has no versions")
            _, data = from_mr_version(versions[0])
        case other:
            raise TypeError(f"not a modpack identifier: {other!r}")

    directory = cache_dir() / "downloaded"
    modpack_path = directory / data.output
    if not modpack_path.exists():
        directory.mkdir(parents=True, exist_ok=True)
        if total is not None:
            total(data.length)
        data.download(requests.Session(), directory, update)
    return modpack_path