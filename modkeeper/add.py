"""Adding mods from Modrinth, CurseForge and GitHub to a profile."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any, Iterable, Sequence

from .api import ApiError, Apis, default_apis
from .check import CheckError, select_latest
from .config.filters import (
    Filter,
    GameVersionMinor,
    GameVersionStrict,
    ModLoader,
    ModLoaderAny,
    ModLoaderParseError,
    ModLoaderPrefer,
    ReleaseChannel,
    parse_mod_loader,
)
from .config.structs import (
    CurseForgeProject,
    GitHubRepository,
    ModIdentifier,
    ModrinthProject,
    PinnedCurseForgeProject,
    PinnedGitHubRepository,
    PinnedModrinthProject,
    Profile,
)
from .upgrade import DistributionDeniedError, Metadata, from_cf_file, from_gh_releases

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_INTEGER = re.compile(r"[+-]?[0-9]+")
_COMPAT_FILTERS = (GameVersionStrict, GameVersionMinor, ModLoaderAny, ModLoaderPrefer)

# CurseForge's numeric mod loader ids, by the name of the loader they stand for
_CF_LOADERS = {1: "Forge", 4: "Fabric", 5: "Quilt", 6: "NeoForge"}


class AddError(Exception):
    """A project could not be added to the profile."""


class DistributionDenied(AddError):
    """The developer does not allow third-party downloads.

    The mod can still be downloaded by hand into the output directory's
    `user` folder, but then has to be updated by hand too.
    """

    def __init__(self) -> None:
        super().__init__(
            "The developer of this project has denied third party applications from downloading it"
        )


class AlreadyAdded(AddError):
    """The project is already in the profile."""

    def __init__(self) -> None:
        super().__init__("The project has already been added")


class Incompatible(AddError):
    """The project failed the profile's compatibility checks."""

    def __init__(self, reason: CheckError) -> None:
        super().__init__(f"The project is not compatible because {reason}")
        self.reason = reason


class DoesNotExist(AddError):
    """The project could not be found."""

    def __init__(self) -> None:
        super().__init__("The project does not exist")


class NotAMod(AddError):
    """The project is not a mod."""

    def __init__(self) -> None:
        super().__init__("The project is not a mod")


class PlatformError(AddError):
    """A platform reported an error."""

    def __init__(self, platform: str, message: str) -> None:
        super().__init__(f"{platform}: {message}")
        self.platform = platform
        self.message = message


def _platform_error(platform: str, err: Exception) -> PlatformError:
    text = str(err)
    prefix = f"{platform}: "
    if text.startswith(prefix):
        text = text[len(prefix) :]
    return PlatformError(platform, text)


def _ascii_lower(text: str) -> str:
    return "".join(c.lower() if c.isascii() else c for c in text)


def _same_name(a: str, b: str) -> bool:
    return _ascii_lower(a) == _ascii_lower(b)


def _swap_remove(items: list, index: int) -> Any:
    items[index], items[-1] = items[-1], items[index]
    return items.pop()


def _loader_or_none(name: str) -> ModLoader | None:
    try:
        return parse_mod_loader(name)
    except ModLoaderParseError:
        return None


def parse_id(identifier: str) -> ModIdentifier:
    """Classify a user-given identifier.

    A 32-bit integer is a CurseForge project, `owner/repo` a GitHub
    repository, and anything else a Modrinth project id or slug.
    """
    if _INTEGER.fullmatch(identifier) and _I32_MIN <= int(identifier) <= _I32_MAX:
        return CurseForgeProject(int(identifier))
    parts = identifier.split("/")
    if len(parts) == 2:
        return GitHubRepository(parts[0], parts[1])
    return ModrinthProject(identifier)


def _effective_filters(
    profile: Profile, filters: Sequence[Filter], override_profile: bool
) -> list[Filter]:
    return list(profile.filters) if override_profile else [*profile.filters, *filters]


def _require_compatible(files: list[Metadata], filters: list[Filter], apis: Apis) -> None:
    try:
        select_latest(files, filters, apis.modrinth)
    except CheckError as err:
        raise Incompatible(err) from err


def _project_metadata(game_versions: Iterable[str], loaders: Iterable[ModLoader]) -> Metadata:
    return Metadata(
        title="",
        description="",
        filename="",
        channel=ReleaseChannel.RELEASE,
        game_versions=list(game_versions),
        loaders=list(loaders),
    )


def _check_project_compat(
    metadata: Metadata,
    profile: Profile,
    override_profile: bool,
    filters: Sequence[Filter],
    apis: Apis,
) -> None:
    relevant = [
        f
        for f in _effective_filters(profile, filters, override_profile)
        if isinstance(f, _COMPAT_FILTERS)
    ]
    _require_compatible([metadata], relevant, apis)


# --- GitHub ---------------------------------------------------------------


def _ensure_github_new(owner: str, repo: str, profile: Profile) -> None:
    for mod in profile.mods:
        if _same_name(mod.name, repo):
            raise AlreadyAdded()
        if isinstance(mod.identifier, GitHubRepository) and (
            mod.identifier.owner,
            mod.identifier.repo,
        ) == (owner, repo):
            raise AlreadyAdded()


def github(
    repository: tuple[str, str],
    profile: Profile,
    perform_checks: list[Metadata] | None = None,
    override_profile: bool = False,
    filters: Sequence[Filter] = (),
    apis: Apis | None = None,
) -> None:
    """Add the GitHub repository `(owner, repo)` to `profile`.

    When `perform_checks` holds the metadata of the repository's release
    assets, one of them must pass the filters.
    """
    owner, repo = repository
    _ensure_github_new(owner, repo, profile)
    if perform_checks is not None:
        apis = apis or default_apis()
        _require_compatible(
            list(perform_checks), _effective_filters(profile, filters, override_profile), apis
        )
    name = repo.strip()
    profile.push_mod(name, GitHubRepository(owner, repo), name, override_profile, list(filters))


def _graphql_query(repositories: Sequence[tuple[str, str]]) -> str:
    parts = [
        f"_{i}: repository(owner: {json.dumps(owner)}, name: {json.dumps(name)}) {{ "
        "owner { login } name "
        "releases(first: 100) { nodes { name description isPrerelease "
        "releaseAssets(first: 10) { nodes { name } } } } }"
        for i, (owner, name) in enumerate(repositories)
    ]
    return "{" + " ".join(parts) + "}"


def _response_index(key: str) -> int:
    if key.startswith("_") and key[1:].isdigit():
        return int(key[1:])
    raise ValueError("Unexpected response data")


def _graphql_release_metadata(repository: Mapping[str, Any]) -> list[Metadata]:
    releases = [
        {
            "name": release.get("name") or "",
            "body": release.get("description") or "",
            "prerelease": bool(release.get("isPrerelease")),
            "assets": [
                {"name": asset["name"], "browser_download_url": "", "size": 0}
                for asset in (release.get("releaseAssets") or {}).get("nodes") or []
            ],
        }
        for release in (repository.get("releases") or {}).get("nodes") or []
    ]
    return [metadata for metadata, _ in from_gh_releases(releases)]


def _query_github(
    repositories: list[tuple[str, str]], apis: Apis, errors: list[tuple[str, AddError]]
) -> list[tuple[tuple[str, str], list[Metadata]]]:
    if not repositories:
        return []
    try:
        response = apis.github.graphql(_graphql_query(repositories))
    except ApiError as err:
        raise _platform_error("GitHub", err) from err

    for error in response.get("errors") or []:
        owner, name = repositories[_response_index(error["path"][0])]
        reason: AddError
        if error.get("type") == "NOT_FOUND":
            reason = DoesNotExist()
        else:
            reason = PlatformError("GitHub", error.get("message", ""))
        errors.append((f"{owner}/{name}", reason))

    data = response.get("data") or {}
    found = []
    for key in sorted(data, key=_response_index):
        repository = data[key]
        if repository is None:
            continue
        found.append(
            (
                (repository["owner"]["login"], repository["name"]),
                _graphql_release_metadata(repository),
            )
        )
    return found


# --- Modrinth -------------------------------------------------------------


def _ensure_modrinth_addable(project: Mapping[str, Any], profile: Profile) -> None:
    for mod in profile.mods:
        if _same_name(mod.name, project["title"]):
            raise AlreadyAdded()
        if isinstance(mod.identifier, ModrinthProject) and mod.identifier.project_id == project["id"]:
            raise AlreadyAdded()
    if project.get("project_type") != "mod":
        raise NotAMod()


def _modrinth_metadata(project: Mapping[str, Any]) -> Metadata:
    loaders = (_loader_or_none(name) for name in project.get("loaders") or [])
    return _project_metadata(
        project.get("game_versions") or [], (l for l in loaders if l is not None)
    )


def modrinth(
    project: Mapping[str, Any],
    profile: Profile,
    perform_checks: bool = True,
    override_profile: bool = False,
    filters: Sequence[Filter] = (),
    apis: Apis | None = None,
) -> None:
    """Add a Modrinth project to `profile` if it is a new, compatible mod."""
    _ensure_modrinth_addable(project, profile)
    if perform_checks:
        _check_project_compat(
            _modrinth_metadata(project), profile, override_profile, filters, apis or default_apis()
        )
    profile.push_mod(
        project["title"].strip(),
        ModrinthProject(project["id"]),
        project.get("slug") or "",
        override_profile,
        list(filters),
    )


# --- CurseForge -----------------------------------------------------------


def _ensure_curseforge_addable(project: Mapping[str, Any], profile: Profile) -> None:
    for mod in profile.mods:
        if _same_name(mod.name, project["name"]):
            raise AlreadyAdded()
        if (
            isinstance(mod.identifier, (CurseForgeProject, PinnedCurseForgeProject))
            and mod.identifier.project_id == project["id"]
        ):
            raise AlreadyAdded()
    if project.get("allowModDistribution") is False:
        raise DistributionDenied()
    website = (project.get("links") or {}).get("websiteUrl") or ""
    if "mc-mods" not in website:
        raise NotAMod()


def _cf_loader(value: Any) -> ModLoader | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        name = _CF_LOADERS.get(value)
        return None if name is None else parse_mod_loader(name)
    return _loader_or_none(str(value))


def _curseforge_metadata(project: Mapping[str, Any]) -> Metadata:
    indexes = project.get("latestFilesIndexes") or []
    loaders = (_cf_loader(i.get("modLoader")) for i in indexes)
    return _project_metadata(
        (i["gameVersion"] for i in indexes), (l for l in loaders if l is not None)
    )


def curseforge(
    project: Mapping[str, Any],
    profile: Profile,
    perform_checks: bool = True,
    override_profile: bool = False,
    filters: Sequence[Filter] = (),
    apis: Apis | None = None,
) -> None:
    """Add a CurseForge mod to `profile` if it is new, downloadable and compatible."""
    _ensure_curseforge_addable(project, profile)
    if perform_checks:
        _check_project_compat(
            _curseforge_metadata(project),
            profile,
            override_profile,
            filters,
            apis or default_apis(),
        )
    profile.push_mod(
        project["name"].strip(),
        CurseForgeProject(project["id"]),
        project.get("slug") or "",
        override_profile,
        list(filters),
    )


# --- Pinned projects ------------------------------------------------------


def _add_pinned(
    identifier: ModIdentifier,
    profile: Profile,
    override_profile: bool,
    filters: Sequence[Filter],
    apis: Apis,
) -> tuple[str, str]:
    """Add a pinned project and return its display name and error label."""
    match identifier:
        case PinnedCurseForgeProject(mod_id, file_id):
            try:
                project = apis.curseforge.get_mod(mod_id)
                file = apis.curseforge.get_mod_file(mod_id, file_id)
            except ApiError as err:
                raise _platform_error("CurseForge", err) from err
            _ensure_curseforge_addable(project, profile)
            try:
                from_cf_file(file)
            except DistributionDeniedError as err:
                raise DistributionDenied() from err
            profile.push_mod(
                project["name"].strip(),
                identifier,
                project.get("slug") or "",
                override_profile,
                list(filters),
            )
            return project["name"], f"{project['name']} ({project['id']})"
        case PinnedModrinthProject(project_id, version_id):
            try:
                project = apis.modrinth.project_get(project_id)
                version = apis.modrinth.version_get(version_id)
            except ApiError as err:
                raise _platform_error("Modrinth", err) from err
            _ensure_modrinth_addable(project, profile)
            profile.push_mod(
                project["title"].strip(),
                PinnedModrinthProject(project["id"], version["id"]),
                project.get("slug") or "",
                override_profile,
                list(filters),
            )
            return project["title"], f"{project['title']} ({project['id']})"
        case PinnedGitHubRepository(owner, repo, asset_id):
            try:
                apis.github.get_release_asset(owner, repo, asset_id)
            except ApiError as err:
                if err.status == 404:
                    raise DoesNotExist() from err
                raise _platform_error("GitHub", err) from err
            _ensure_github_new(owner, repo, profile)
            name = repo.strip()
            profile.push_mod(name, identifier, name, override_profile, list(filters))
            return f"{owner}/{repo}", f"{owner}/{repo}"
    raise TypeError(f"not a pinned identifier: {identifier!r}")


def _pinned_label(identifier: ModIdentifier) -> str:
    match identifier:
        case PinnedCurseForgeProject(mod_id, _):
            return str(mod_id)
        case PinnedModrinthProject(project_id, _):
            return project_id
        case PinnedGitHubRepository(owner, repo, _):
            return f"{owner}/{repo}"
    return repr(identifier)


# --- Batch add ------------------------------------------------------------


def add(
    profile: Profile,
    identifiers: Iterable[ModIdentifier],
    perform_checks: bool = True,
    override_profile: bool = False,
    filters: Sequence[Filter] = (),
    apis: Apis | None = None,
) -> tuple[list[str], list[tuple[str, AddError]]]:
    """Add the projects in `identifiers` to `profile`.

    Identifiers are grouped by platform and looked up in batches. Returns
    the names of the projects added and, for every project that was not,
    a label with the reason. Failures of whole platform requests raise
    `PlatformError`.
    """
    apis = apis or default_apis()
    filters = list(filters)
    cf_ids: list[int] = []
    mr_ids: list[str] = []
    gh_ids: list[tuple[str, str]] = []
    successes: list[str] = []
    errors: list[tuple[str, AddError]] = []

    for identifier in identifiers:
        match identifier:
            case CurseForgeProject(project_id):
                cf_ids.append(project_id)
            case ModrinthProject(project_id):
                mr_ids.append(project_id)
            case GitHubRepository(owner, repo):
                gh_ids.append((owner, repo))
            case _:
                try:
                    name, _ = _add_pinned(identifier, profile, override_profile, filters, apis)
                except AddError as err:
                    errors.append((_pinned_label(identifier), err))
                else:
                    successes.append(name)

    cf_ids = sorted(set(cf_ids))
    mr_ids = sorted(set(mr_ids))

    try:
        cf_projects = apis.curseforge.get_mods(cf_ids) if cf_ids else []
    except ApiError as err:
        raise _platform_error("CurseForge", err) from err
    try:
        mr_projects = apis.modrinth.project_get_multiple(mr_ids) if mr_ids else []
    except ApiError as err:
        raise _platform_error("Modrinth", err) from err

    gh_repos = _query_github(gh_ids, apis, errors)

    for project in cf_projects:
        position = next((i for i, pid in enumerate(cf_ids) if pid == project["id"]), None)
        if position is not None:
            _swap_remove(cf_ids, position)
        try:
            curseforge(project, profile, perform_checks, override_profile, filters, apis)
        except AddError as err:
            errors.append((f"{project['name']} ({project['id']})", err))
        else:
            successes.append(project["name"])
    errors.extend((str(pid), DoesNotExist()) for pid in cf_ids)

    for project in mr_projects:
        slug = project.get("slug") or ""
        position = next(
            (i for i, pid in enumerate(mr_ids) if pid == project["id"] or _same_name(slug, pid)),
            None,
        )
        if position is not None:
            _swap_remove(mr_ids, position)
        try:
            modrinth(project, profile, perform_checks, override_profile, filters, apis)
        except AddError as err:
            errors.append((f"{project['title']} ({project['id']})", err))
        else:
            successes.append(project["title"])
    errors.extend((pid, DoesNotExist()) for pid in mr_ids)

    for (owner, repo), metadata in gh_repos:
        label = f"{owner}/{repo}"
        try:
            github((owner, repo), profile, metadata, override_profile, filters, apis)
        except AddError as err:
            errors.append((label, err))
        else:
            successes.append(label)

    return successes, errors