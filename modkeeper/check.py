"""Selecting the best compatible file out of a list using filters."""

from __future__ import annotations

import re
import weakref
from typing import Any, Callable, Iterable

from .api import ApiError, ModrinthApi, default_apis
from .config.filters import (
    Description,
    Filename,
    Filter,
    GameVersionMinor,
    GameVersionStrict,
    ModLoaderAny,
    ModLoaderPrefer,
    ReleaseChannel,
    ReleaseChannelFilter,
    Title,
)


class CheckError(Exception):
    """A compatibility check could not be completed or found nothing."""


class FilterEmptyError(CheckError):
    """One or more filters matched no files at all."""

    def __init__(self, filters: list[str]) -> None:
        self.filters = list(filters)
        super().__init__("The following filter(s) were empty: " + ", ".join(self.filters))


class IntersectFailure(CheckError):
    """No file satisfied all filters together."""

    def __init__(self) -> None:
        super().__init__("Failed to find a compatible combination")


_VERSION_GROUPS: "weakref.WeakKeyDictionary[Any, list[list[str]]]" = weakref.WeakKeyDictionary()

_ALLOWED_CHANNELS = {
    ReleaseChannel.ALPHA: frozenset(ReleaseChannel),
    ReleaseChannel.BETA: frozenset({ReleaseChannel.BETA, ReleaseChannel.RELEASE}),
    ReleaseChannel.RELEASE: frozenset({ReleaseChannel.RELEASE}),
}


def get_version_groups(api: ModrinthApi | None = None) -> list[list[str]]:
    """Groups of release versions considered minor updates of each other.

    A new group starts after every version Modrinth marks as major.
    The result is fetched once per client and then reused.
    """
    if api is None:
        api = default_apis().modrinth
    cached = _VERSION_GROUPS.get(api)
    if cached is not None:
        return cached
    try:
        versions = api.tag_list_game_versions()
    except ApiError as err:
        raise CheckError(str(err)) from err
    groups: list[list[str]] = [[]]
    for version in versions:
        if version.get("version_type") == "release":
            groups[-1].append(version["version"])
            if version.get("major"):
                groups.append([])
    _VERSION_GROUPS[api] = groups
    return groups


def _compile(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as err:
        raise CheckError(f"regex parse error: {err}") from err


def filter_indices(
    filter: Filter,
    indexed_files: Iterable[tuple[int, Any]],
    api: ModrinthApi | None = None,
) -> set[int]:
    """Return the indices of the `(index, metadata)` pairs that pass `filter`."""
    files = list(indexed_files)

    def positions(predicate: Callable[[Any], bool]) -> set[int]:
        return {index for index, meta in files if predicate(meta)}

    match filter:
        case ModLoaderPrefer(loaders):
            for loader in loaders:
                found = positions(lambda meta, wanted=loader: wanted in meta.loaders)
                if found:
                    return found
            return set()
        case ModLoaderAny(loaders):
            return positions(lambda meta: any(l in meta.loaders for l in loaders))
        case GameVersionStrict(versions):
            return positions(lambda meta: any(v in meta.game_versions for v in versions))
        case GameVersionMinor(versions):
            related = [
                version
                for group in get_version_groups(api)
                if any(v in versions for v in group)
                for version in group
            ]
            return positions(lambda meta: any(v in meta.game_versions for v in related))
        case ReleaseChannelFilter(channel):
            allowed = _ALLOWED_CHANNELS[channel]
            return positions(lambda meta: meta.channel in allowed)
        case Filename(pattern):
            regex = _compile(pattern)
            return positions(lambda meta: regex.search(meta.filename) is not None)
        case Title(pattern):
            regex = _compile(pattern)
            return positions(lambda meta: regex.search(meta.title) is not None)
        case Description(pattern):
            regex = _compile(pattern)
            return positions(lambda meta: regex.search(meta.description) is not None)
    raise TypeError(f"not a filter: {filter!r}")


def select_latest(
    download_files: Iterable[Any],
    filters: Iterable[Filter],
    api: ModrinthApi | None = None,
) -> int:
    """Return the index of the most preferred file passing every filter.

    The files are assumed to be ordered by preference (e.g. newest first).
    Mod loader preference filters run last, on the files that passed the rest.
    """
    indexed = list(enumerate(download_files))
    results: list[tuple[Filter, set[int]]] = []
    run_last: list[tuple[Filter, set[int]]] = []

    for flt in filters:
        target = run_last if isinstance(flt, ModLoaderPrefer) else results
        target.append((flt, filter_indices(flt, indexed, api)))

    empty = [str(flt) for flt, indices in results + run_last if not indices]
    if empty:
        raise FilterEmptyError(empty)

    final = set.intersection(*(indices for _, indices in results)) if results else set()
    remaining = [(index, meta) for index, meta in indexed if index in final]

    last = [filter_indices(flt, remaining, api) for flt, _ in run_last]
    if not last:
        raise IntersectFailure()
    chosen = set.intersection(*last)
    if not chosen:
        raise IntersectFailure()
    return min(chosen)