"""Release metadata and downloadable files built from platform responses."""

from __future__ import annotations

import re
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable

import requests

from .api import get_version_file
from .config.filters import ModLoader, ModLoaderParseError, ReleaseChannel, parse_mod_loader
from .config.structs import (
    CurseForgeProject,
    ModIdentifier,
    ModrinthProject,
    PinnedModrinthProject,
)

_CF_RELEASE_TYPES = {
    1: ReleaseChannel.RELEASE,
    2: ReleaseChannel.BETA,
    3: ReleaseChannel.ALPHA,
}
_CF_REQUIRED_DEPENDENCY = 3
_CF_INCOMPATIBLE = 5

_MR_CHANNELS = {
    "release": ReleaseChannel.RELEASE,
    "beta": ReleaseChannel.BETA,
    "alpha": ReleaseChannel.ALPHA,
}

_CHUNK_SIZE = 64 * 1024
_TIMEOUT = 30
_ASSET_SEPARATORS = re.compile(r"[-_+]")


@dataclass
class Metadata:
    """What the filters look at when choosing a file."""

    title: str
    description: str
    filename: str
    channel: ReleaseChannel
    game_versions: list[str] = field(default_factory=list)
    loaders: list[ModLoader] = field(default_factory=list)


class DistributionDeniedError(Exception):
    """The project's developer does not allow third-party downloads."""

    def __init__(self, mod_id: int, file_id: int) -> None:
        super().__init__(
            "The developer of this project has denied third party applications from downloading it"
        )
        self.mod_id = mod_id
        self.file_id = file_id


@dataclass
class DownloadData:
    """A file to download.

    `output` is the path relative to the output directory; usually just the filename.
    """

    download_url: str
    output: Path
    length: int
    dependencies: list[ModIdentifier] = field(default_factory=list)
    conflicts: list[ModIdentifier] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.output = Path(self.output)

    def filename(self) -> str:
        """The final component of the output path."""
        return self.output.name

    def download(
        self,
        session: requests.Session | None = None,
        output_dir: str | Path = ".",
        update: Callable[[int], Any] | None = None,
    ) -> tuple[int, str]:
        """Download the file into `output_dir`.

        `update` is called with the length of every chunk written.
        Returns the expected size of the file and its filename.
        """
        filename = self.filename()
        out_path = Path(output_dir) / self.output
        temp_path = out_path.with_suffix(".part")
        out_path.parent.mkdir(parents=True, exist_ok=True)

        get = session.get if session is not None else requests.get
        with get(self.download_url, stream=True, timeout=_TIMEOUT) as response:
            response.raise_for_status()
            with temp_path.open("ab") as handle:
                for chunk in response.iter_content(_CHUNK_SIZE):
                    if not chunk:
                        continue
                    handle.write(chunk)
                    if update is not None:
                        update(len(chunk))
        temp_path.replace(out_path)
        return self.length, filename


def _loaders(names: Iterable[str]) -> list[ModLoader]:
    found = []
    for name in names:
        try:
            found.append(parse_mod_loader(name))
        except ModLoaderParseError:
            continue
    return found


def from_cf_file(file: Mapping[str, Any]) -> tuple[Metadata, DownloadData]:
    """Build metadata and download data from a CurseForge file."""
    game_versions = list(file.get("gameVersions") or [])
    release_type = file.get("releaseType")
    if release_type not in _CF_RELEASE_TYPES:
        raise ValueError(f"unknown CurseForge release type {release_type!r}")
    metadata = Metadata(
        title=file.get("displayName", ""),
        description="",  # the changelog needs a separate request
        filename=file["fileName"],
        channel=_CF_RELEASE_TYPES[release_type],
        game_versions=game_versions,
        loaders=_loaders(game_versions),
    )
    url = file.get("downloadUrl")
    if url is None:
        raise DistributionDeniedError(file.get("modId"), file.get("id"))
    dependencies = file.get("dependencies") or []
    data = DownloadData(
        download_url=url,
        output=Path(file["fileName"]),
        length=int(file.get("fileLength", 0)),
        dependencies=[
            CurseForgeProject(d["modId"])
            for d in dependencies
            if d.get("relationType") == _CF_REQUIRED_DEPENDENCY
        ],
        conflicts=[
            CurseForgeProject(d["modId"])
            for d in dependencies
            if d.get("relationType") == _CF_INCOMPATIBLE
        ],
    )
    return metadata, data


def _mr_identifiers(dependencies: Iterable[Mapping[str, Any]], kind: str) -> list[ModIdentifier]:
    found: list[ModIdentifier] = []
    for dependency in dependencies:
        if dependency.get("dependency_type") != kind:
            continue
        project_id = dependency.get("project_id")
        version_id = dependency.get("version_id")
        if project_id is None:
            print("Project ID not available", file=sys.stderr)
        elif version_id is not None:
            found.append(PinnedModrinthProject(project_id, version_id))
        else:
            found.append(ModrinthProject(project_id))
    return found


def from_mr_version(version: Mapping[str, Any]) -> tuple[Metadata, DownloadData]:
    """Build metadata and download data from a Modrinth version."""
    primary = get_version_file(dict(version))
    version_type = version.get("version_type")
    if version_type not in _MR_CHANNELS:
        raise ValueError(f"unknown Modrinth version type {version_type!r}")
    metadata = Metadata(
        title=version.get("name", ""),
        description=version.get("changelog") or "",
        filename=primary["filename"],
        channel=_MR_CHANNELS[version_type],
        game_versions=list(version.get("game_versions") or []),
        loaders=_loaders(version.get("loaders") or []),
    )
    dependencies = version.get("dependencies") or []
    data = DownloadData(
        download_url=primary["url"],
        output=Path(primary["filename"]),
        length=int(primary.get("size", 0)),
        dependencies=_mr_identifiers(dependencies, "required"),
        conflicts=_mr_identifiers(dependencies, "incompatible"),
    )
    return metadata, data


def from_modpack_file(file: Any) -> DownloadData:
    """Build download data from a file listed in a Modrinth modpack index.

    Accepts the index's JSON object or an object with `downloads`, `path`
    and `file_size` attributes.
    """
    if isinstance(file, Mapping):
        downloads = file.get("downloads") or []
        path = file["path"]
        size = file["fileSize"]
    else:
        downloads, path, size = file.downloads, file.path, file.file_size
    if not downloads:
        raise ValueError("Download URLs not provided")
    return DownloadData(download_url=str(downloads[0]), output=Path(path), length=int(size))


def _asset_parts(name: str) -> list[str]:
    stem = name
    while stem.endswith(".jar"):
        stem = stem[: -len(".jar")]
    return _ASSET_SEPARATORS.split(stem)


def _strip_mc(part: str) -> str:
    while part.startswith("mc"):
        part = part[len("mc") :]
    return part


def _gh_metadata(release: Mapping[str, Any], asset_name: str) -> Metadata:
    parts = _asset_parts(asset_name)
    return Metadata(
        title=release.get("name") or "",
        description=release.get("body") or "",
        filename=asset_name,
        channel=ReleaseChannel.BETA if release.get("prerelease") else ReleaseChannel.RELEASE,
        game_versions=[_strip_mc(part) for part in parts],
        loaders=_loaders(parts),
    )


def from_gh_asset(asset: Mapping[str, Any]) -> DownloadData:
    """Build download data from a GitHub release asset."""
    return DownloadData(
        download_url=asset["browser_download_url"],
        output=Path(asset["name"]),
        length=int(asset.get("size", 0)),
    )


def from_gh_releases(
    releases: Iterable[Mapping[str, Any]],
) -> list[tuple[Metadata, DownloadData]]:
    """One entry for every asset of every release, in order."""
    return [
        (_gh_metadata(release, asset["name"]), from_gh_asset(asset))
        for release in releases
        for asset in release.get("assets") or []
    ]