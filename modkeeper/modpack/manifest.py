"""The manifest of a CurseForge modpack."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping


def _require(data: Mapping[str, Any], key: str) -> Any:
    if not isinstance(data, Mapping):
        raise ValueError("expected an object")
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field `{key}`") from None


class ManifestType(enum.Enum):
    """The kind of manifest."""

    MINECRAFT_MODPACK = "minecraftModpack"


@dataclass
class ModpackModLoader:
    """A mod loader the modpack can use."""

    id: str
    primary: bool

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ModpackModLoader":
        return cls(id=_require(data, "id"), primary=bool(_require(data, "primary")))

    def to_json(self) -> dict[str, Any]:
        return {"id": self.id, "primary": self.primary}


@dataclass
class Minecraft:
    """How Minecraft has to be set up for the modpack."""

    version: str
    mod_loaders: list[ModpackModLoader] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Minecraft":
        return cls(
            version=_require(data, "version"),
            mod_loaders=[ModpackModLoader.from_json(l) for l in _require(data, "modLoaders")],
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "modLoaders": [loader.to_json() for loader in self.mod_loaders],
        }


@dataclass
class ModpackFile:
    """A CurseForge file the modpack needs."""

    project_id: int
    file_id: int
    required: bool

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ModpackFile":
        return cls(
            project_id=int(_require(data, "projectID")),
            file_id=int(_require(data, "fileID")),
            required=bool(_require(data, "required")),
        )

    def to_json(self) -> dict[str, Any]:
        return {"projectID": self.project_id, "fileID": self.file_id, "required": self.required}


@dataclass
class Manifest:
    """A CurseForge modpack's `manifest.json`."""

    minecraft: Minecraft
    manifest_type: ManifestType
    manifest_version: int
    name: str
    version: str
    author: str
    files: list[ModpackFile]
    overrides: str

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Manifest":
        return cls(
            minecraft=Minecraft.from_json(_require(data, "minecraft")),
            manifest_type=ManifestType(_require(data, "manifestType")),
            manifest_version=int(_require(data, "manifestVersion")),
            name=_require(data, "name"),
            version=_require(data, "version"),
            author=_require(data, "author"),
            files=[ModpackFile.from_json(f) for f in _require(data, "files")],
            overrides=_require(data, "overrides"),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "minecraft": self.minecraft.to_json(),
            "manifestType": self.manifest_type.value,
            "manifestVersion": self.manifest_version,
            "name": self.name,
            "version": self.version,
            "author": self.author,
            "files": [f.to_json() for f in self.files],
            "overrides": self.overrides,
        }