"""Release filters and the mod loader / release channel enums they use."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, ClassVar


class ModLoaderParseError(ValueError):
    """Raised when a string does not name a known mod loader."""

    def __init__(self) -> None:
        super().__init__("The given string is not a recognised mod loader")


class ModLoader(enum.Enum):
    """A Minecraft mod loader."""

    QUILT = "Quilt"
    FABRIC = "Fabric"
    FORGE = "Forge"
    NEOFORGE = "NeoForge"

    def __str__(self) -> str:
        return self.value


_LOADER_NAMES = {
    "quilt": ModLoader.QUILT,
    "fabric": ModLoader.FABRIC,
    "forge": ModLoader.FORGE,
    "neoforge": ModLoader.NEOFORGE,
}


def parse_mod_loader(text: str) -> ModLoader:
    """Parse a mod loader name, ignoring case and surrounding whitespace."""
    try:
        return _LOADER_NAMES[text.strip().lower()]
    except KeyError:
        raise ModLoaderParseError() from None


class ReleaseChannel(enum.Enum):
    """How stable a released file is."""

    RELEASE = "Release"
    BETA = "Beta"
    ALPHA = "Alpha"

    def __str__(self) -> str:
        return self.value


class Filter(ABC):
    """A criterion that selects compatible files out of a list of candidates."""

    tag: ClassVar[str]

    @abstractmethod
    def _encode(self) -> Any:
        """Return the JSON payload stored under the filter's tag."""

    def to_json(self) -> dict[str, Any]:
        """Return the filter as an externally tagged JSON object."""
        return {self.tag: self._encode()}


def _joined(items: list) -> str:
    return ", ".join(str(item) for item in items)


@dataclass
class ModLoaderPrefer(Filter):
    """Prefers files in the order of the given loaders.

    Only works as intended when run last on an already filtered list.
    """

    loaders: list[ModLoader]
    tag: ClassVar[str] = "ModLoaderPrefer"

    def _encode(self) -> list[str]:
        return [loader.value for loader in self.loaders]

    def __str__(self) -> str:
        return f"Mod Loader ({_joined(self.loaders)})"


@dataclass
class ModLoaderAny(Filter):
    """Selects files compatible with any of the given loaders."""

    loaders: list[ModLoader]
    tag: ClassVar[str] = "ModLoaderAny"

    def _encode(self) -> list[str]:
        return [loader.value for loader in self.loaders]

    def __str__(self) -> str:
        return f"Mod Loader Either ({_joined(self.loaders)})"


@dataclass
class GameVersionStrict(Filter):
    """Selects files strictly compatible with the given game versions."""

    versions: list[str]
    tag: ClassVar[str] = "GameVersionStrict"

    def _encode(self) -> list[str]:
        return list(self.versions)

    def __str__(self) -> str:
        return f"Game Version ({_joined(self.versions)})"


@dataclass
class GameVersionMinor(Filter):
    """Selects files compatible with the given versions or their minor siblings."""

    versions: list[str]
    tag: ClassVar[str] = "GameVersionMinor"

    def _encode(self) -> list[str]:
        return list(self.versions)

    def __str__(self) -> str:
        return f"Game Version Minor ({_joined(self.versions)})"


@dataclass
class ReleaseChannelFilter(Filter):
    """Selects files of the given channel or of more stable channels."""

    channel: ReleaseChannel
    tag: ClassVar[str] = "ReleaseChannel"

    def _encode(self) -> str:
        return self.channel.value

    def __str__(self) -> str:
        return f"Release Channel ({self.channel})"


@dataclass
class Filename(Filter):
    """Selects files whose filename matches a regular expression."""

    pattern: str
    tag: ClassVar[str] = "Filename"

    def _encode(self) -> str:
        return self.pattern

    def __str__(self) -> str:
        return f"Filename ({self.pattern})"


@dataclass
class Title(Filter):
    """Selects files whose title matches a regular expression."""

    pattern: str
    tag: ClassVar[str] = "Title"

    def _encode(self) -> str:
        return self.pattern

    def __str__(self) -> str:
        return f"Title ({self.pattern})"


@dataclass
class Description(Filter):
    """Selects files whose description matches a regular expression."""

    pattern: str
    tag: ClassVar[str] = "Description"

    def _encode(self) -> str:
        return self.pattern

    def __str__(self) -> str:
        return f"Description ({self.pattern})"


def _list_of(payload: Any, convert: Callable[[Any], Any]) -> list:
    if not isinstance(payload, list):
        raise ValueError("expected a list")
    return [convert(item) for item in payload]


def _string(payload: Any) -> str:
    if not isinstance(payload, str):
        raise ValueError("expected a string")
    return payload


_DECODERS: dict[str, Callable[[Any], Filter]] = {
    "ModLoaderPrefer": lambda p: ModLoaderPrefer(_list_of(p, ModLoader)),
    "ModLoaderAny": lambda p: ModLoaderAny(_list_of(p, ModLoader)),
    "GameVersionStrict": lambda p: GameVersionStrict(_list_of(p, _string)),
    "GameVersionMinor": lambda p: GameVersionMinor(_list_of(p, _string)),
    "ReleaseChannel": lambda p: ReleaseChannelFilter(ReleaseChannel(p)),
    "Filename": lambda p: Filename(_string(p)),
    "Title": lambda p: Title(_string(p)),
    "Description": lambda p: Description(_string(p)),
}


def filter_from_json(data: Any) -> Filter:
    """Build a filter from its externally tagged JSON form."""
    if not isinstance(data, dict) or len(data) != 1:
        raise ValueError("a filter must be an object with exactly one key")
    ((tag, payload),) = data.items()
    decoder = _DECODERS.get(tag)
    if decoder is None:
        raise ValueError(f"unknown filter variant `{tag}`")
    return decoder(payload)


def game_versions(filters: list[Filter]) -> list[str] | None:
    """Return the version list of the first game version filter, if any."""
    return next(
        (f.versions for f in filters if isinstance(f, (GameVersionStrict, GameVersionMinor))),
        None,
    )


def mod_loader(filters: list[Filter]) -> ModLoader | None:
    """Return the first loader named by any mod loader filter, if any."""
    return next(
        (
            f.loaders[0]
            for f in filters
            if isinstance(f, (ModLoaderPrefer, ModLoaderAny)) and f.loaders
        ),
        None,
    )


def mod_loaders(filters: list[Filter]) -> list[ModLoader] | None:
    """Return the loader list of the first mod loader filter, if any."""
    return next(
        (f.loaders for f in filters if isinstance(f, (ModLoaderPrefer, ModLoaderAny))),
        None,
    )