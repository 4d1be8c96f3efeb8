from dataclasses import dataclass, field

import pytest

from modkeeper.api import ApiError
from modkeeper.check import (
    CheckError,
    FilterEmptyError,
    IntersectFailure,
    filter_indices,
    get_version_groups,
    select_latest,
)
from modkeeper.config.filters import (
    Description,
    Filename,
    GameVersionMinor,
    GameVersionStrict,
    ModLoader,
    ModLoaderAny,
    ModLoaderPrefer,
    ReleaseChannel,
    ReleaseChannelFilter,
    Title,
)


@dataclass
class Meta:
    filename: str
    channel: ReleaseChannel
    game_versions: list
    loaders: list
    title: str = ""
    description: str = ""


class FakeModrinth:
    def __init__(self, versions=None, error=None):
        self.versions = versions or []
        self.error = error
        self.calls = 0

    def tag_list_game_versions(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.versions


TAGS = [
    {"version": "1.20.1", "version_type": "release", "major": False},
    {"version": "23w01a", "version_type": "snapshot", "major": False},
    {"version": "1.20", "version_type": "release", "major": True},
    {"version": "1.19.4", "version_type": "release", "major": False},
]

FILES = [
    Meta("a-fabric-1.20.1.jar", ReleaseChannel.BETA, ["1.20.1"], [ModLoader.FABRIC],
         title="Big update", description="adds things"),
    Meta("b-quilt-1.20.1.jar", ReleaseChannel.RELEASE, ["1.20.1"], [ModLoader.QUILT],
         title="Small fix", description="fixes things"),
    Meta("c-forge-1.19.4.jar", ReleaseChannel.ALPHA, ["1.19.4"], [ModLoader.FORGE]),
    Meta("d-fabric-1.19.4.jar", ReleaseChannel.RELEASE, ["1.19.4"],
         [ModLoader.FABRIC, ModLoader.QUILT]),
]


def indexed():
    return list(enumerate(FILES))


@pytest.mark.parametrize(
    "loaders, expected",
    [
        ([ModLoader.QUILT, ModLoader.FABRIC], {1, 3}),
        ([ModLoader.NEOFORGE, ModLoader.FORGE], {2}),
        ([ModLoader.NEOFORGE], set()),
    ],
)
def test_mod_loader_prefer_uses_first_loader_with_matches(loaders, expected):
    assert filter_indices(ModLoaderPrefer(loaders), indexed()) == expected


def test_mod_loader_any():
    flt = ModLoaderAny([ModLoader.FORGE, ModLoader.QUILT])
    assert filter_indices(flt, indexed()) == {1, 2, 3}


def test_game_version_strict():
    assert filter_indices(GameVersionStrict(["1.19.4"]), indexed()) == {2, 3}


@pytest.mark.parametrize(
    "channel, expected",
    [
        (ReleaseChannel.RELEASE, {1, 3}),
        (ReleaseChannel.BETA, {0, 1, 3}),
        (ReleaseChannel.ALPHA, {0, 1, 2, 3}),
    ],
)
def test_release_channel(channel, expected):
    assert filter_indices(ReleaseChannelFilter(channel), indexed()) == expected


def test_regex_filters():
    assert filter_indices(Filename("fabric"), indexed()) == {0, 3}
    assert filter_indices(Title("^Big"), indexed()) == {0}
    assert filter_indices(Description("fixes"), indexed()) == {1}


def test_original_indices_are_kept():
    pairs = [(5, FILES[0]), (9, FILES[2])]
    assert filter_indices(GameVersionStrict(["1.19.4"]), pairs) == {9}


def test_invalid_regex_raises():
    with pytest.raises(CheckError):
        filter_indices(Filename("("), indexed())


def test_version_groups_split_after_major_and_are_cached():
    api = FakeModrinth(TAGS)
    groups = get_version_groups(api)
    assert groups == [["1.20.1", "1.20"], ["1.19.4"]]
    assert get_version_groups(api) is groups
    assert api.calls == 1


def test_version_groups_api_failure():
    api = FakeModrinth(error=ApiError("Modrinth: down"))
    with pytest.raises(CheckError):
        get_version_groups(api)


def test_game_version_minor_includes_group():
    api = FakeModrinth(TAGS)
    assert filter_indices(GameVersionMinor(["1.20"]), indexed(), api) == {0, 1}
    assert filter_indices(GameVersionMinor(["1.19.4"]), indexed(), api) == {2, 3}


def test_select_latest_prefers_loader_order():
    filters = [
        GameVersionStrict(["1.20.1", "1.19.4"]),
        ModLoaderPrefer([ModLoader.QUILT, ModLoader.FABRIC]),
    ]
    assert select_latest(FILES, filters) == 1


def test_select_latest_intersects_filters():
    filters = [
        ReleaseChannelFilter(ReleaseChannel.RELEASE),
        GameVersionStrict(["1.19.4"]),
        ModLoaderPrefer([ModLoader.FABRIC]),
    ]
    assert select_latest(FILES, filters) == 3


def test_select_latest_falls_back_to_next_loader():
    filters = [
        GameVersionStrict(["1.20.1"]),
        ModLoaderPrefer([ModLoader.FORGE, ModLoader.FABRIC]),
    ]
    assert select_latest(FILES, filters) == 0


def test_select_latest_reports_empty_filters():
    filters = [GameVersionStrict(["1.8"]), ModLoaderPrefer([ModLoader.NEOFORGE])]
    with pytest.raises(FilterEmptyError) as info:
        select_latest(FILES, filters)
    assert info.value.filters == ["Game Version (1.8)", "Mod Loader (NeoForge)"]
    assert str(info.value) == (
        "The following filter(s) were empty: Game Version (1.8), Mod Loader (NeoForge)"
    )


def test_select_latest_without_prefer_filter_fails():
    with pytest.raises(IntersectFailure):
        select_latest(FILES, [GameVersionStrict(["1.20.1"])])


def test_select_latest_disjoint_filters_fail():
    filters = [
        GameVersionStrict(["1.20.1"]),
        Filename("forge"),
        ModLoaderPrefer([ModLoader.FABRIC]),
    ]
    with pytest.raises(IntersectFailure) as info:
        select_latest(FILES, filters)
    assert str(info.value) == "Failed to find a compatible combination"