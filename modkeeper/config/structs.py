"""Profiles, mods, modpacks and the configuration that holds them."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from .filters import (
    Filter,
    GameVersionStrict,
    ModLoader,
    ModLoaderPrefer,
    filter_from_json,
)

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


@dataclass(frozen=True)
class CurseForgeProject:
    project_id: int


@dataclass(frozen=True)
class ModrinthProject:
    project_id: str


@dataclass(frozen=True)
class GitHubRepository:
    owner: str
    repo: str


@dataclass(frozen=True)
class PinnedCurseForgeProject:
    project_id: int
    file_id: int


@dataclass(frozen=True)
class PinnedModrinthProject:
    project_id: str
    version_id: str


@dataclass(frozen=True)
class PinnedGitHubRepository:
    owner: str
    repo: str
    asset_id: int


ModIdentifier = Union[
    CurseForgeProject,
    ModrinthProject,
    GitHubRepository,
    PinnedCurseForgeProject,
    PinnedModrinthProject,
    PinnedGitHubRepository,
]


@dataclass(frozen=True)
class CurseForgeModpack:
    project_id: int


@dataclass(frozen=True)
class ModrinthModpack:
    project_id: str


ModpackIdentifier = Union[CurseForgeModpack, ModrinthModpack]


def _is_i32(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and _I32_MIN <= value <= _I32_MAX


def _is_str_pair(value: Any) -> bool:
    return isinstance(value, list) and len(value) == 2 and all(isinstance(v, str) for v in value)


def identifier_to_json(identifier: ModIdentifier) -> Any:
    """Return the untagged JSON form of a mod identifier."""
    match identifier:
        case CurseForgeProject(project_id):
            return project_id
        case ModrinthProject(project_id):
            return project_id
        case GitHubRepository(owner, repo):
            return [owner, repo]
        case PinnedCurseForgeProject(project_id, file_id):
            return [project_id, file_id]
        case PinnedModrinthProject(project_id, version_id):
            return [project_id, version_id]
        case PinnedGitHubRepository(owner, repo, asset_id):
            return [[owner, repo], asset_id]
    raise TypeError(f"not a mod identifier: {identifier!r}")


def identifier_from_json(data: Any) -> ModIdentifier:
    """Build a mod identifier from its untagged JSON form.

    Shapes are tried in declaration order, so a pair of strings always
    reads back as a GitHub repository.
    """
    if _is_i32(data):
        return CurseForgeProject(data)
    if isinstance(data, str):
        return ModrinthProject(data)
    if _is_str_pair(data):
        return GitHubRepository(data[0], data[1])
    if isinstance(data, list) and len(data) == 2:
        first, second = data
        if _is_i32(first) and _is_i32(second):
            return PinnedCurseForgeProject(first, second)
        if _is_str_pair(first) and _is_i32(second):
            return PinnedGitHubRepository(first[0], first[1], second)
    raise ValueError("data did not match any mod identifier shape")


def modpack_identifier_to_json(identifier: ModpackIdentifier) -> dict[str, Any]:
    """Return the externally tagged JSON form of a modpack identifier."""
    if isinstance(identifier, CurseForgeModpack):
        return {"CurseForgeModpack": identifier.project_id}
    if isinstance(identifier, ModrinthModpack):
        return {"ModrinthModpack": identifier.project_id}
    raise TypeError(f"not a modpack identifier: {identifier!r}")


def modpack_identifier_from_json(data: Any) -> ModpackIdentifier:
    """Build a modpack identifier from its externally tagged JSON form."""
    if not isinstance(data, dict) or len(data) != 1:
        raise ValueError("a modpack identifier must be an object with exactly one key")
    ((tag, value),) = data.items()
    if tag == "CurseForgeModpack" and _is_i32(value):
        return CurseForgeModpack(value)
    if tag == "ModrinthModpack" and isinstance(value, str):
        return ModrinthModpack(value)
    raise ValueError(f"invalid modpack identifier `{tag}`")


def _object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object")
    return data


def _required(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    return data[key]


def _typed(value: Any, key: str, kind: type | tuple[type, ...]) -> Any:
    if not isinstance(value, kind):
        raise ValueError(f"invalid type for field `{key}`")
    return value


def _optional_bool(data: dict[str, Any], key: str) -> bool | None:
    value = data.get(key)
    return None if value is None else _typed(value, key, bool)


def _index(data: dict[str, Any], key: str) -> int:
    value = data.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"invalid type for field `{key}`")
    return value


def _filters(data: dict[str, Any]) -> list[Filter]:
    return [filter_from_json(f) for f in _typed(data.get("filters", []), "filters", list)]


@dataclass
class Mod:
    """A mod tracked by a profile."""

    name: str
    identifier: ModIdentifier
    filters: list[Filter] = field(default_factory=list)
    override_filters: bool = False
    slug: str | None = None
    check_game_version: bool | None = field(default=None, repr=False, compare=False)
    check_mod_loader: bool | None = field(default=None, repr=False, compare=False)

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "identifier": identifier_to_json(self.identifier),
        }
        if self.slug is not None:
            data["slug"] = self.slug
        if self.filters:
            data["filters"] = [f.to_json() for f in self.filters]
        if self.override_filters:
            data["override_filters"] = True
        return data

    @classmethod
    def from_json(cls, data: Any) -> Mod:
        data = _object(data, "a mod")
        slug = data.get("slug")
        return cls(
            name=_typed(_required(data, "name"), "name", str),
            identifier=identifier_from_json(_required(data, "identifier")),
            filters=_filters(data),
            override_filters=_typed(data.get("override_filters", False), "override_filters", bool),
            slug=None if slug is None else _typed(slug, "slug", str),
            check_game_version=_optional_bool(data, "check_game_version"),
            check_mod_loader=_optional_bool(data, "check_mod_loader"),
        )


@dataclass
class Profile:
    """A set of mods installed to one output directory."""

    name: str
    output_dir: Path
    filters: list[Filter] = field(default_factory=list)
    mods: list[Mod] = field(default_factory=list)
    disabled: list[Mod] = field(default_factory=list)

    def push_mod(
        self,
        name: str,
        identifier: ModIdentifier,
        slug: str,
        override_filters: bool,
        filters: list[Filter],
    ) -> None:
        """Append a new mod to the profile."""
        self.mods.append(
            Mod(
                name=name,
                identifier=identifier,
                filters=list(filters),
                override_filters=override_filters,
                slug=slug,
            )
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "output_dir": str(self.output_dir),
            "filters": [f.to_json() for f in self.filters],
            "mods": [m.to_json() for m in self.mods],
            "disabled": [m.to_json() for m in self.disabled],
        }

    @classmethod
    def from_json(cls, data: Any) -> Profile:
        """Read a profile, converting the legacy version/loader fields into filters."""
        data = _object(data, "a profile")
        profile = cls(
            name=_typed(_required(data, "name"), "name", str),
            output_dir=Path(_typed(_required(data, "output_dir"), "output_dir", str)),
            filters=_filters(data),
            mods=[Mod.from_json(m) for m in _typed(_required(data, "mods"), "mods", list)],
            disabled=[
                Mod.from_json(m) for m in _typed(_required(data, "disabled"), "disabled", list)
            ],
        )

        version = data.get("game_version")
        loader = data.get("mod_loader")
        version = None if version is None else _typed(version, "game_version", str)
        loader = None if loader is None else ModLoader(loader)
        if version is not None and loader is not None:
            loaders = [ModLoader.QUILT, ModLoader.FABRIC] if loader is ModLoader.QUILT else [loader]
            profile.filters = [ModLoaderPrefer(loaders), GameVersionStrict([version])]

        for mod in profile.mods:
            if mod.check_game_version is not None or mod.check_mod_loader is not None:
                print(f"WARNING: Check overrides found for {mod.name}", file=sys.stderr)
                print("Migrate to the new filter system if necessary!", file=sys.stderr)
        return profile


def make_profile(
    name: str,
    output_dir: Path | str,
    game_versions: list[str],
    mod_loaders: list[ModLoader],
    mods: list[Mod] | None = None,
    disabled: list[Mod] | None = None,
) -> Profile:
    """Create a profile whose filters prefer `mod_loaders` and require `game_versions`."""
    return Profile(
        name=name,
        output_dir=Path(output_dir),
        filters=[ModLoaderPrefer(list(mod_loaders)), GameVersionStrict(list(game_versions))],
        mods=list(mods or []),
        disabled=list(disabled or []),
    )


@dataclass
class Modpack:
    """A modpack installed to a Minecraft instance directory."""

    name: str
    output_dir: Path
    install_overrides: bool
    identifier: ModpackIdentifier

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "output_dir": str(self.output_dir),
            "install_overrides": self.install_overrides,
            "identifier": modpack_identifier_to_json(self.identifier),
        }

    @classmethod
    def from_json(cls, data: Any) -> Modpack:
        data = _object(data, "a modpack")
        return cls(
            name=_typed(_required(data, "name"), "name", str),
            output_dir=Path(_typed(_required(data, "output_dir"), "output_dir", str)),
            install_overrides=_typed(
                _required(data, "install_overrides"), "install_overrides", bool
            ),
            identifier=modpack_identifier_from_json(_required(data, "identifier")),
        )


@dataclass
class Config:
    """All profiles and modpacks, with the index of the active one of each."""

    active_profile: int = 0
    profiles: list[Profile] = field(default_factory=list)
    active_modpack: int = 0
    modpacks: list[Modpack] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.active_profile:
            data["active_profile"] = self.active_profile
        if self.profiles:
            data["profiles"] = [p.to_json() for p in self.profiles]
        if self.active_modpack:
            data["active_modpack"] = self.active_modpack
        if self.modpacks:
            data["modpacks"] = [m.to_json() for m in self.modpacks]
        return data

    @classmethod
    def from_json(cls, data: Any) -> Config:
        data = _object(data, "the config")
        return cls(
            active_profile=_index(data, "active_profile"),
            profiles=[
                Profile.from_json(p) for p in _typed(data.get("profiles", []), "profiles", list)
            ],
            active_modpack=_index(data, "active_modpack"),
            modpacks=[
                Modpack.from_json(m) for m in _typed(data.get("modpacks", []), "modpacks", list)
            ],
        )