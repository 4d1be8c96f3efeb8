"""Checking that a project is a modpack that can be added to the config."""

from __future__ import annotations

from typing import Any, Callable

from ..api import ApiError, Apis, default_apis
from ..config.structs import Config, CurseForgeModpack, ModrinthModpack


class ModpackAddError(Exception):
    """A modpack could not be added."""


class ModpackAlreadyAdded(ModpackAddError):
    """The modpack is already in the config."""

    def __init__(self) -> None:
        super().__init__("Modpack is already added to profile")


class ModpackDoesNotExist(ModpackAddError):
    """The modpack could not be found."""

    def __init__(self) -> None:
        super().__init__("The provided modpack does not exist")


class NotAModpack(ModpackAddError):
    """The project is not a modpack."""

    def __init__(self) -> None:
        super().__init__("The project is not a modpack")


def _fetch(request: Callable[[], Any]) -> Any:
    try:
        return request()
    except ApiError as err:
        if err.status == 404:
            raise ModpackDoesNotExist() from err
        raise ModpackAddError(str(err)) from err


def _is_curseforge(identifier: Any, project_id: Any) -> bool:
    match identifier:
        case CurseForgeModpack(existing):
            return existing == project_id
    return False


def _is_modrinth(identifier: Any, project_id: Any) -> bool:
    match identifier:
        case ModrinthModpack(existing):
            return existing == project_id
    return False


def curseforge(config: Config, project_id: int, apis: Apis | None = None) -> dict[str, Any]:
    """Return the CurseForge project `project_id` if it is a new modpack."""
    apis = apis or default_apis()
    project = _fetch(lambda: apis.curseforge.get_mod(project_id))
    if any(
        modpack.name == project["name"] or _is_curseforge(modpack.identifier, project["id"])
        for modpack in config.modpacks
    ):
        raise ModpackAlreadyAdded()
    website = (project.get("links") or {}).get("websiteUrl") or ""
    if "modpacks" not in website:
        raise NotAModpack()
    return project


def modrinth(config: Config, project_id: str, apis: Apis | None = None) -> dict[str, Any]:
    """Return the Modrinth project `project_id` if it is a new modpack."""
    apis = apis or default_apis()
    project = _fetch(lambda: apis.modrinth.project_get(project_id))
    if any(
        modpack.name == project["title"] or _is_modrinth(modpack.identifier, project["id"])
        for modpack in config.modpacks
    ):
        raise ModpackAlreadyAdded()
    if project.get("project_type") != "modpack":
        raise NotAModpack()
    return project