"""Command-line argument parsing."""

from __future__ import annotations

import argparse
import enum
import os
from dataclasses import dataclass, field
from typing import Sequence

from .config.filters import (
    Description,
    Filename,
    Filter,
    GameVersionMinor,
    GameVersionStrict,
    ModLoader,
    ModLoaderAny,
    ModLoaderParseError,
    ModLoaderPrefer,
    ReleaseChannel,
    ReleaseChannelFilter,
    Title,
    parse_mod_loader,
)

DEFAULT_PARALLEL_TASKS = 50
SHELLS = ("bash", "elvish", "fish", "powershell", "zsh")


class Platform(enum.Enum):
    """The platform mods are preferably added from when scanning."""

    MODRINTH = "modrinth"
    CURSEFORGE = "curseforge"

    def __str__(self) -> str:
        return self.value


_PLATFORM_NAMES = {
    "modrinth": Platform.MODRINTH,
    "mr": Platform.MODRINTH,
    "curseforge": Platform.CURSEFORGE,
    "cf": Platform.CURSEFORGE,
}


def _platform(text: str) -> Platform:
    try:
        return _PLATFORM_NAMES[text.lower()]
    except KeyError:
        raise argparse.ArgumentTypeError(f"invalid platform: {text!r}") from None


def _mod_loader(text: str) -> ModLoader:
    try:
        return parse_mod_loader(text)
    except ModLoaderParseError as err:
        raise argparse.ArgumentTypeError(f"{text!r}: {err}") from None


def _release_channel(text: str) -> ReleaseChannel:
    channels = {channel.name.lower(): channel for channel in ReleaseChannel}
    try:
        return channels[text.lower()]
    except KeyError:
        raise argparse.ArgumentTypeError(f"invalid release channel: {text!r}") from None


def _boolean(text: str) -> bool:
    if text == "true":
        return True
    if text == "false":
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {text!r}")


@dataclass
class FilterArguments:
    """Filters given on the command line when adding mods."""

    override_profile: bool = False
    mod_loader_prefer: list[ModLoader] = field(default_factory=list)
    mod_loader_any: list[ModLoader] = field(default_factory=list)
    game_version_strict: list[str] = field(default_factory=list)
    game_version_minor: list[str] = field(default_factory=list)
    release_channel: ReleaseChannel | None = None
    filename: str | None = None
    title: str | None = None
    description: str | None = None

    @classmethod
    def from_namespace(cls, namespace: argparse.Namespace) -> "FilterArguments":
        """Collect the filter options from parsed arguments."""

        def listed(name: str) -> list:
            return list(getattr(namespace, name, None) or [])

        return cls(
            override_profile=bool(getattr(namespace, "override_profile", False)),
            mod_loader_prefer=listed("mod_loader_prefer"),
            mod_loader_any=listed("mod_loader_any"),
            game_version_strict=listed("game_version_strict"),
            game_version_minor=listed("game_version_minor"),
            release_channel=getattr(namespace, "release_channel", None),
            filename=getattr(namespace, "filename", None),
            title=getattr(namespace, "title", None),
            description=getattr(namespace, "description", None),
        )

    def to_filters(self) -> list[Filter]:
        """The filters these arguments describe, in a fixed order."""
        filters: list[Filter] = []
        if self.mod_loader_prefer:
            filters.append(ModLoaderPrefer(list(self.mod_loader_prefer)))
        if self.mod_loader_any:
            filters.append(ModLoaderAny(list(self.mod_loader_any)))
        if self.game_version_strict:
            filters.append(GameVersionStrict(list(self.game_version_strict)))
        if self.game_version_minor:
            filters.append(GameVersionMinor(list(self.game_version_minor)))
        if self.release_channel is not None:
            filters.append(ReleaseChannelFilter(self.release_channel))
        if self.filename is not None:
            filters.append(Filename(self.filename))
        if self.title is not None:
            filters.append(Title(self.title))
        if self.description is not None:
            filters.append(Description(self.description))
        return filters


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--override-profile", action="store_true")
    loader = parser.add_mutually_exclusive_group()
    loader.add_argument("-l", "--mod-loader-prefer", action="append", type=_mod_loader)
    loader.add_argument("--mod-loader-any", action="append", type=_mod_loader)
    version = parser.add_mutually_exclusive_group()
    version.add_argument("-v", "--game-version-strict", action="append")
    version.add_argument("--game-version-minor", action="append")
    parser.add_argument("-c", "--release-channel", type=_release_channel)
    parser.add_argument("-n", "--filename")
    parser.add_argument("-t", "--title")
    parser.add_argument("-d", "--description")


def _subcommand(subparsers, name: str, dest: str, help: str, aliases: Sequence[str] = ()):
    parser = subparsers.add_parser(name, aliases=list(aliases), help=help, allow_abbrev=False)
    parser.set_defaults(**{dest: name})
    return parser


def _add_modpack_commands(parser: argparse.ArgumentParser) -> None:
    sub = parser.add_subparsers(dest="modpack_command", metavar="COMMAND")
    dest = "modpack_command"

    add = _subcommand(sub, "add", dest, "Add a modpack to the config")
    add.add_argument("identifier")
    add.add_argument("-o", "--output-dir")
    add.add_argument("-i", "--install-overrides", type=_boolean)

    configure = _subcommand(
        sub, "configure", dest, "Configure the current modpack", ("config", "conf")
    )
    configure.add_argument("-o", "--output-dir")
    configure.add_argument("-i", "--install-overrides", type=_boolean)

    delete = _subcommand(sub, "delete", dest, "Delete a modpack", ("remove", "rm"))
    delete.add_argument("modpack_name", nargs="?")
    delete.add_argument("-s", "--switch-to")

    _subcommand(sub, "info", dest, "Show information about the current modpack")
    _subcommand(sub, "list", dest, "List all the modpacks with their data")

    switch = _subcommand(sub, "switch", dest, "Switch between different modpacks")
    switch.add_argument("modpack_name", nargs="?")

    _subcommand(
        sub, "upgrade", dest, "Download and install the latest version of the modpack",
        ("download", "install"),
    )


def _add_profile_commands(parser: argparse.ArgumentParser) -> None:
    sub = parser.add_subparsers(dest="profile_command", metavar="COMMAND")
    dest = "profile_command"

    configure = _subcommand(
        sub, "configure", dest, "Configure the current profile", ("config", "conf")
    )
    configure.add_argument("-v", "--game-versions", action="append", default=[])
    configure.add_argument("-l", "--mod-loaders", action="append", default=[], type=_mod_loader)
    configure.add_argument("-n", "--name")
    configure.add_argument("-o", "--output-dir")

    create = _subcommand(sub, "create", dest, "Create a new profile", ("new",))
    create.add_argument(
        "-i", "--import", "--copy", "--duplicate",
        dest="import_profile", nargs="?", const=True, default=None,
        help="Copy the mods of an existing profile, optionally naming it",
    )
    create.add_argument("-v", "--game-version", action="append", default=[])
    create.add_argument("-m", "--mod-loader", type=_mod_loader)
    create.add_argument("-n", "--name")
    create.add_argument("-o", "--output-dir")

    delete = _subcommand(sub, "delete", dest, "Delete a profile", ("remove", "rm"))
    delete.add_argument("profile_name", nargs="?")
    delete.add_argument("-s", "--switch-to")

    _subcommand(sub, "info", dest, "Show information about the current profile")
    _subcommand(sub, "list", dest, "List all the profiles with their data")

    switch = _subcommand(sub, "switch", dest, "Switch between different profiles")
    switch.add_argument("profile_name", nargs="?")


def build_parser() -> argparse.ArgumentParser:
    """The argument parser for every command and option."""
    parser = argparse.ArgumentParser(
        prog="modkeeper",
        description="Manage Minecraft mods and modpacks from Modrinth, CurseForge and GitHub",
        allow_abbrev=False,
    )
    parser.add_argument("-t", "--threads", type=int)
    parser.add_argument(
        "-p", "--parallel-tasks", type=int, default=DEFAULT_PARALLEL_TASKS,
        help="Maximum number of simultaneous parallel tasks",
    )
    parser.add_argument("--github-token", "--gh", default=os.environ.get("GITHUB_TOKEN"))
    parser.add_argument(
        "--curseforge-api-key", "--cf", default=os.environ.get("CURSEFORGE_API_KEY")
    )
    parser.add_argument("-c", "--config-file", "--config", "--conf")

    sub = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)
    dest = "command"

    add = _subcommand(sub, "add", dest, "Add mods to the profile")
    add.add_argument("identifiers", nargs="+")
    add.add_argument("-f", "--force", "--override", action="store_true")
    add.add_argument("-p", "--pin", "--lock")
    _add_filter_arguments(add)

    scan = _subcommand(sub, "scan", dest, "Scan a directory for mods and add them")
    scan.add_argument("-p", "--platform", type=_platform, default=Platform.MODRINTH)
    scan.add_argument(
        "-d", "--directory", "--dir", "--folder", "--output_directory", "--out_dir"
    )
    scan.add_argument("-f", "--force", "--override", action="store_true")

    complete = _subcommand(sub, "complete", dest, "Print shell auto completions")
    complete.add_argument("shell", choices=SHELLS)

    listing = _subcommand(sub, "list", dest, "List all the mods in the profile", ("mods",))
    listing.add_argument("-v", "--verbose", action="store_true")
    listing.add_argument("-m", "--markdown", "--md", action="store_true")

    modpack = _subcommand(sub, "modpack", dest, "Manage modpacks")
    _add_modpack_commands(modpack)
    _subcommand(sub, "modpacks", dest, "List all the modpacks with their data")

    profile = _subcommand(sub, "profile", dest, "Manage profiles")
    _add_profile_commands(profile)
    _subcommand(sub, "profiles", dest, "List all the profiles with their data")

    remove = _subcommand(sub, "remove", dest, "Remove mods from the profile", ("rm",))
    remove.add_argument("mod_names", nargs="*")

    _subcommand(
        sub, "upgrade", dest, "Download and install the latest compatible mods",
        ("download", "install"),
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse the command line; subcommand aliases are reported by their main name."""
    return build_parser().parse_args(argv)