"""HTTP clients for Modrinth, CurseForge and GitHub, plus platform helpers."""

from __future__ import annotations

import functools
import json
import os
import struct
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable
from urllib.parse import quote

import platformdirs
import requests

MODRINTH_URL = "https://api.modrinth.com/v2"
CURSEFORGE_URL = "https://api.curseforge.com/v1"
GITHUB_URL = "https://api.github.com"
USER_AGENT = "modkeeper"

_TIMEOUT = 30
_CF_PAGE_SIZE = 50
_MASK = 0xFFFFFFFF
_MURMUR_M = 0x5BD1E995
_WHITESPACE = frozenset(b"\t\n\r ")


class ApiError(Exception):
    """A request to one of the platforms failed.

    `status` holds the HTTP status code when the server answered with one.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


class _Client:
    service = "API"

    def __init__(self, base_url: str, headers: dict[str, str]) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.session.headers.update(headers)

    def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=_TIMEOUT, **kwargs)
        except requests.RequestException as err:
            raise ApiError(f"{self.service}: {err}") from err
        if not response.ok:
            raise ApiError(
                f"{self.service}: HTTP {response.status_code} for {url}",
                status=response.status_code,
            )
        try:
            return response.json()
        except ValueError as err:
            raise ApiError(f"{self.service}: invalid JSON response from {url}") from err


class ModrinthApi(_Client):
    """Client for the Modrinth v2 API. Results are the decoded JSON."""

    service = "Modrinth"

    def __init__(self, base_url: str = MODRINTH_URL, user_agent: str = USER_AGENT) -> None:
        super().__init__(base_url, {"User-Agent": user_agent, "Accept": "application/json"})

    def project_get(self, project_id: str) -> dict[str, Any]:
        return self._call("GET", f"/project/{_segment(project_id)}")

    def project_get_multiple(self, project_ids: Iterable[str]) -> list[dict[str, Any]]:
        ids = json.dumps(list(project_ids), separators=(",", ":"))
        return self._call("GET", "/projects", params={"ids": ids})

    def version_get(self, version_id: str) -> dict[str, Any]:
        return self._call("GET", f"/version/{_segment(version_id)}")

    def version_list(self, project_id: str) -> list[dict[str, Any]]:
        return self._call("GET", f"/project/{_segment(project_id)}/version")

    def version_get_from_multiple_hashes(self, hashes: Iterable[str]) -> dict[str, Any]:
        """Map each SHA-1 hash to the version whose file has it."""
        return self._call(
            "POST", "/version_files", json={"hashes": list(hashes), "algorithm": "sha1"}
        )

    def tag_list_game_versions(self) -> list[dict[str, Any]]:
        return self._call("GET", "/tag/game_version")


class CurseForgeApi(_Client):
    """Client for the CurseForge v1 API. Results are the `data` payloads."""

    service = "CurseForge"

    def __init__(self, api_key: str | None = None, base_url: str = CURSEFORGE_URL) -> None:
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if api_key:
            headers["x-api-key"] = api_key
        super().__init__(base_url, headers)

    def get_mod(self, mod_id: int) -> dict[str, Any]:
        return self._call("GET", f"/mods/{_segment(mod_id)}")["data"]

    def get_mods(self, mod_ids: Iterable[int]) -> list[dict[str, Any]]:
        return self._call("POST", "/mods", json={"modIds": list(mod_ids)})["data"]

    def get_mod_file(self, mod_id: int, file_id: int) -> dict[str, Any]:
        return self._call("GET", f"/mods/{_segment(mod_id)}/files/{_segment(file_id)}")["data"]

    def get_mod_files(self, mod_id: int) -> list[dict[str, Any]]:
        """Return every file of the mod, following the pagination."""
        files: list[dict[str, Any]] = []
        while True:
            page = self._call(
                "GET",
                f"/mods/{_segment(mod_id)}/files",
                params={"index": str(len(files)), "pageSize": str(_CF_PAGE_SIZE)},
            )
            data = page.get("data", [])
            files.extend(data)
            total = page.get("pagination", {}).get("totalCount", 0)
            if not data or len(files) >= total:
                return files

    def get_fingerprint_matches(self, fingerprints: Iterable[int]) -> dict[str, Any]:
        return self._call("POST", "/fingerprints", json={"fingerprints": list(fingerprints)})[
            "data"
        ]


class GitHubApi(_Client):
    """Client for the GitHub REST and GraphQL APIs."""

    service = "GitHub"

    def __init__(self, token: str | None = None, base_url: str = GITHUB_URL) -> None:
        headers = {"User-Agent": USER_AGENT, "Accept": "application/vnd.github+json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        super().__init__(base_url, headers)

    def graphql(self, query: str) -> dict[str, Any]:
        """Run a GraphQL query and return the whole response, errors included."""
        return self._call("POST", "/graphql", json={"query": query})

    def list_releases(self, owner: str, repo: str) -> list[dict[str, Any]]:
        return self._call("GET", f"/repos/{_segment(owner)}/{_segment(repo)}/releases")

    def get_release_asset(self, owner: str, repo: str, asset_id: int) -> dict[str, Any]:
        return self._call(
            "GET",
            f"/repos/{_segment(owner)}/{_segment(repo)}/releases/assets/{_segment(asset_id)}",
        )


@dataclass
class Apis:
    """The three platform clients used together."""

    modrinth: ModrinthApi
    curseforge: CurseForgeApi
    github: GitHubApi


@functools.lru_cache(maxsize=None)
def default_apis() -> Apis:
    """Shared clients configured from CURSEFORGE_API_KEY and GITHUB_TOKEN."""
    return Apis(
        modrinth=ModrinthApi(),
        curseforge=CurseForgeApi(os.environ.get("CURSEFORGE_API_KEY")),
        github=GitHubApi(os.environ.get("GITHUB_TOKEN")),
    )


def cf_fingerprint(data: bytes) -> int:
    """CurseForge's file fingerprint: 32-bit MurmurHash2 (seed 1) of the bytes minus whitespace."""
    buf = bytes(b for b in data if b not in _WHITESPACE)
    length = len(buf)
    h = (1 ^ length) & _MASK
    tail = length & 3
    for (k,) in struct.iter_unpack("<I", buf[: length - tail]):
        k = (k * _MURMUR_M) & _MASK
        k ^= k >> 24
        k = (k * _MURMUR_M) & _MASK
        h = ((h * _MURMUR_M) & _MASK) ^ k
    if tail:
        rest = buf[length - tail :]
        if tail == 3:
            h ^= rest[2] << 16
        if tail >= 2:
            h ^= rest[1] << 8
        h ^= rest[0]
        h = (h * _MURMUR_M) & _MASK
    h ^= h >> 13
    h = (h * _MURMUR_M) & _MASK
    h ^= h >> 15
    return h


def get_version_file(version: dict[str, Any]) -> dict[str, Any]:
    """Return the primary file of a Modrinth version, or its first file."""
    files = version.get("files") or []
    if not files:
        raise ValueError("the version has no files")
    return next((f for f in files if f.get("primary")), files[0])


def minecraft_dir() -> Path:
    """The default Minecraft instance directory for this operating system."""
    if sys.platform == "darwin":
        return Path(platformdirs.user_data_dir()) / "minecraft"
    if sys.platform == "win32":
        return Path(platformdirs.user_data_dir(roaming=True)) / ".minecraft"
    return Path.home() / ".minecraft"


def cache_dir() -> Path:
    """The directory used to cache downloads."""
    return Path(platformdirs.user_cache_dir("modkeeper"))