from pathlib import Path

import pytest
import requests
import responses

from modkeeper.config.filters import ModLoader, ReleaseChannel
from modkeeper.config.structs import CurseForgeProject, ModrinthProject, PinnedModrinthProject
from modkeeper.upgrade import (
    DistributionDeniedError,
    DownloadData,
    from_cf_file,
    from_gh_asset,
    from_gh_releases,
    from_modpack_file,
    from_mr_version,
)


@pytest.fixture
def rsps():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        yield mock


def cf_file(**overrides):
    data = {
        "id": 200,
        "modId": 10,
        "displayName": "Example 1.0",
        "fileName": "example-1.0.jar",
        "releaseType": 1,
        "gameVersions": ["1.20.1", "Fabric", "Forge"],
        "downloadUrl": "https://cdn.example.com/example-1.0.jar",
        "fileLength": 1234,
        "fileDate": "2024-01-01T00:00:00Z",
        "dependencies": [
            {"modId": 11, "relationType": 3},
            {"modId": 12, "relationType": 5},
            {"modId": 13, "relationType": 2},
        ],
    }
    data.update(overrides)
    return data


def mr_version(**overrides):
    data = {
        "name": "Version 2",
        "changelog": "Fixed things",
        "version_type": "beta",
        "loaders": ["fabric", "quilt", "minecraft"],
        "game_versions": ["1.20.1", "1.20.2"],
        "files": [
            {"filename": "sources.jar", "url": "https://cdn.example.com/sources.jar",
             "size": 10, "primary": False},
            {"filename": "main.jar", "url": "https://cdn.example.com/main.jar",
             "size": 20, "primary": True},
        ],
        "dependencies": [
            {"project_id": "dep1", "version_id": "v1", "dependency_type": "required"},
            {"project_id": "dep2", "version_id": None, "dependency_type": "required"},
            {"project_id": "bad", "version_id": None, "dependency_type": "incompatible"},
            {"project_id": "opt", "version_id": None, "dependency_type": "optional"},
        ],
    }
    data.update(overrides)
    return data


def test_cf_file_metadata():
    metadata, _ = from_cf_file(cf_file())
    assert metadata.title == "Example 1.0"
    assert metadata.description == ""
    assert metadata.filename == "example-1.0.jar"
    assert metadata.channel is ReleaseChannel.RELEASE
    assert metadata.game_versions == ["1.20.1", "Fabric", "Forge"]
    assert metadata.loaders == [ModLoader.FABRIC, ModLoader.FORGE]


def test_cf_file_download_data():
    _, data = from_cf_file(cf_file())
    assert data.download_url == "https://cdn.example.com/example-1.0.jar"
    assert data.output == Path("example-1.0.jar")
    assert data.length == 1234
    assert data.dependencies == [CurseForgeProject(11)]
    assert data.conflicts == [CurseForgeProject(12)]


@pytest.mark.parametrize(
    "release_type, channel",
    [(1, ReleaseChannel.RELEASE), (2, ReleaseChannel.BETA), (3, ReleaseChannel.ALPHA)],
)
def test_cf_release_types(release_type, channel):
    metadata, _ = from_cf_file(cf_file(releaseType=release_type))
    assert metadata.channel is channel


def test_cf_file_without_url_is_denied():
    with pytest.raises(DistributionDeniedError) as info:
        from_cf_file(cf_file(downloadUrl=None))
    assert (info.value.mod_id, info.value.file_id) == (10, 200)
    assert "denied third party applications" in str(info.value)


def test_mr_version_uses_primary_file():
    metadata, data = from_mr_version(mr_version())
    assert metadata.filename == "main.jar"
    assert data.download_url == "https://cdn.example.com/main.jar"
    assert data.length == 20
    assert data.filename() == "main.jar"


def test_mr_version_metadata():
    metadata, _ = from_mr_version(mr_version())
    assert metadata.title == "Version 2"
    assert metadata.description == "Fixed things"
    assert metadata.channel is ReleaseChannel.BETA
    assert metadata.loaders == [ModLoader.FABRIC, ModLoader.QUILT]
    assert metadata.game_versions == ["1.20.1", "1.20.2"]


def test_mr_version_falls_back_to_first_file():
    files = [
        {"filename": "a.jar", "url": "https://cdn.example.com/a.jar", "size": 1, "primary": False},
        {"filename": "b.jar", "url": "https://cdn.example.com/b.jar", "size": 2, "primary": False},
    ]
    metadata, data = from_mr_version(mr_version(files=files, changelog=None))
    assert metadata.filename == "a.jar"
    assert metadata.description == ""
    assert data.download_url == "https://cdn.example.com/a.jar"


def test_mr_version_dependencies_and_conflicts():
    _, data = from_mr_version(mr_version())
    assert data.dependencies == [PinnedModrinthProject("dep1", "v1"), ModrinthProject("dep2")]
    assert data.conflicts == [ModrinthProject("bad")]


def test_mr_dependency_without_project_is_skipped(capsys):
    deps = [{"project_id": None, "version_id": "v9", "dependency_type": "required"}]
    _, data = from_mr_version(mr_version(dependencies=deps))
    assert data.dependencies == []
    assert "Project ID not available" in capsys.readouterr().err


def test_gh_releases_one_entry_per_asset():
    releases = [
        {
            "name": "Release 1",
            "body": None,
            "prerelease": True,
            "assets": [
                {"name": "sodium-fabric-mc1.20.1.jar",
                 "browser_download_url": "https://cdn.example.com/s.jar", "size": 5},
                {"name": "other.zip",
                 "browser_download_url": "https://cdn.example.com/o.zip", "size": 6},
            ],
        },
        {"name": None, "body": "notes", "prerelease": False, "assets": []},
    ]
    entries = from_gh_releases(releases)
    assert len(entries) == 2
    metadata, data = entries[0]
    assert metadata.title == "Release 1"
    assert metadata.description == ""
    assert metadata.channel is ReleaseChannel.BETA
    assert metadata.game_versions == ["sodium", "fabric", "1.20.1"]
    assert metadata.loaders == [ModLoader.FABRIC]
    assert data.download_url == "https://cdn.example.com/s.jar"
    assert data.length == 5
    assert entries[1][0].filename == "other.zip"


def test_gh_asset():
    data = from_gh_asset(
        {"name": "mod.jar", "browser_download_url": "https://cdn.example.com/mod.jar", "size": 7}
    )
    assert data.output == Path("mod.jar")
    assert data.length == 7
    assert data.dependencies == [] and data.conflicts == []


def test_modpack_file_from_json():
    data = from_modpack_file(
        {
            "path": "mods/thing.jar",
            "downloads": ["https://cdn.example.com/1.jar", "https://cdn.example.com/2.jar"],
            "fileSize": 42,
        }
    )
    assert data.download_url == "https://cdn.example.com/1.jar"
    assert data.output == Path("mods/thing.jar")
    assert data.length == 42
    assert data.filename() == "thing.jar"


def test_modpack_file_without_downloads():
    with pytest.raises(ValueError, match="Download URLs not provided"):
        from_modpack_file({"path": "mods/x.jar", "downloads": [], "fileSize": 1})


def test_download_writes_file(rsps, tmp_path):
    url = "https://cdn.example.com/a.jar"
    rsps.add(responses.GET, url, body=b"abcdef")
    data = DownloadData(url, Path("mods/a.jar"), 6)
    updates = []
    result = data.download(requests.Session(), tmp_path, updates.append)
    assert result == (6, "a.jar")
    assert (tmp_path / "mods" / "a.jar").read_bytes() == b"abcdef"
    assert not (tmp_path / "mods" / "a.part").exists()
    assert sum(updates) == 6


def test_download_http_error(rsps, tmp_path):
    url = "https://cdn.example.com/missing.jar"
    rsps.add(responses.GET, url, status=404)
    data = DownloadData(url, Path("missing.jar"), 1)
    with pytest.raises(requests.HTTPError):
        data.download(requests.Session(), tmp_path)
    assert not (tmp_path / "missing.jar").exists()