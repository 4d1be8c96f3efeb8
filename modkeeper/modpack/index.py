"""The index of a Modrinth modpack (`modrinth.index.json`)."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping


def _require(data: Mapping[str, Any], key: str) -> Any:
    if not isinstance(data, Mapping):
        raise ValueError("expected an object")
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field `{key}`") from None


class DependencyID(enum.Enum):
    """Something a launcher has to install for the modpack."""

    MINECRAFT = "minecraft"
    FORGE = "forge"
    NEOFORGE = "neoforge"
    FABRIC_LOADER = "fabric-loader"
    QUILT_LOADER = "quilt-loader"


class Game(enum.Enum):
    """The game a modpack is for."""

    MINECRAFT = "minecraft"


@dataclass
class ModpackFileEnvironment:
    """Whether a file is needed on the client and on the server."""

    client: str
    server: str

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ModpackFileEnvironment":
        return cls(client=_require(data, "client"), server=_require(data, "server"))

    def to_json(self) -> dict[str, Any]:
        return {"client": self.client, "server": self.server}


@dataclass
class IndexFile:
    """A file of the modpack, with where to put it and where to get it."""

    path: Path
    hashes: dict[str, str]
    downloads: list[str]
    file_size: int
    env: ModpackFileEnvironment | None = None

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "IndexFile":
        env = data.get("env") if isinstance(data, Mapping) else None
        return cls(
            path=Path(_require(data, "path")),
            hashes=dict(_require(data, "hashes")),
            downloads=[str(url) for url in _require(data, "downloads")],
            file_size=int(_require(data, "fileSize")),
            env=None if env is None else ModpackFileEnvironment.from_json(env),
        )

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {"path": self.path.as_posix(), "hashes": dict(self.hashes)}
        if self.env is not None:
            data["env"] = self.env.to_json()
        data["downloads"] = list(self.downloads)
        data["fileSize"] = self.file_size
        return data


@dataclass
class ModpackIndex:
    """The metadata of a Modrinth modpack."""

    format_version: int
    game: Game
    version_id: str
    name: str
    files: list[IndexFile] = field(default_factory=list)
    dependencies: dict[DependencyID, str] = field(default_factory=dict)
    summary: str | None = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ModpackIndex":
        return cls(
            format_version=int(_require(data, "formatVersion")),
            game=Game(_require(data, "game")),
            version_id=_require(data, "versionId"),
            name=_require(data, "name"),
            summary=data.get("summary"),
            files=[IndexFile.from_json(f) for f in _require(data, "files")],
            dependencies={
                DependencyID(key): value for key, value in _require(data, "dependencies").items()
            },
        )

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "formatVersion": self.format_version,
            "game": self.game.value,
            "versionId": self.version_id,
            "name": self.name,
        }
        if self.summary is not None:
            data["summary"] = self.summary
        data["files"] = [f.to_json() for f in self.files]
        data["dependencies"] = {key.value: value for key, value in self.dependencies.items()}
        return data