import pytest

from modkeeper.cli import (
    DEFAULT_PARALLEL_TASKS,
    FilterArguments,
    Platform,
    build_parser,
    parse_args,
)
from modkeeper.config.filters import (
    Filename,
    GameVersionMinor,
    GameVersionStrict,
    ModLoaderAny,
    ModLoaderPrefer,
    ReleaseChannel,
    ReleaseChannelFilter,
    Title,
    parse_mod_loader,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("CURSEFORGE_API_KEY", raising=False)


def test_add_identifiers_and_defaults():
    args = parse_args(["add", "sodium", "owner/repo"])
    assert args.command == "add"
    assert args.identifiers == ["sodium", "owner/repo"]
    assert args.force is False
    assert args.pin is None
    assert args.parallel_tasks == DEFAULT_PARALLEL_TASKS


def test_add_requires_identifier():
    with pytest.raises(SystemExit):
        parse_args(["add"])


def test_subcommand_required():
    with pytest.raises(SystemExit):
        parse_args([])


def test_filter_arguments_to_filters():
    args = parse_args(
        ["add", "x", "-l", "fabric", "-l", "quilt", "-v", "1.20.1", "-c", "beta", "-n", "re"]
    )
    filters = FilterArguments.from_namespace(args).to_filters()
    assert filters == [
        ModLoaderPrefer([parse_mod_loader("fabric"), parse_mod_loader("quilt")]),
        GameVersionStrict(["1.20.1"]),
        ReleaseChannelFilter(ReleaseChannel.BETA),
        Filename("re"),
    ]


def test_filter_order_is_fixed():
    arguments = FilterArguments(
        title="t",
        game_version_minor=["1.19"],
        mod_loader_any=[parse_mod_loader("forge")],
    )
    assert arguments.to_filters() == [
        ModLoaderAny([parse_mod_loader("forge")]),
        GameVersionMinor(["1.19"]),
        Title("t"),
    ]


def test_no_filters_when_none_given():
    args = parse_args(["add", "x"])
    arguments = FilterArguments.from_namespace(args)
    assert arguments.to_filters() == []
    assert arguments.override_profile is False


def test_loader_options_are_exclusive():
    with pytest.raises(SystemExit):
        parse_args(["add", "x", "-l", "fabric", "--mod-loader-any", "forge"])


def test_version_options_are_exclusive():
    with pytest.raises(SystemExit):
        parse_args(["add", "x", "-v", "1.20", "--game-version-minor", "1.19"])


def test_invalid_loader_rejected():
    with pytest.raises(SystemExit):
        parse_args(["add", "x", "-l", "notaloader"])


def test_invalid_release_channel_rejected():
    with pytest.raises(SystemExit):
        parse_args(["add", "x", "-c", "nightly"])


@pytest.mark.parametrize(
    "argv, command",
    [
        (["mods"], "list"),
        (["rm", "a"], "remove"),
        (["install"], "upgrade"),
        (["download"], "upgrade"),
        (["profiles"], "profiles"),
    ],
)
def test_aliases_resolve_to_main_name(argv, command):
    assert parse_args(argv).command == command


def test_modpack_subcommand_optional():
    args = parse_args(["modpack"])
    assert args.command == "modpack"
    assert args.modpack_command is None


def test_modpack_configure_alias_and_bool():
    args = parse_args(["modpack", "conf", "-i", "false", "-o", "/tmp/x"])
    assert args.modpack_command == "configure"
    assert args.install_overrides is False
    assert args.output_dir == "/tmp/x"


def test_modpack_bool_rejects_other_words():
    with pytest.raises(SystemExit):
        parse_args(["modpack", "add", "pack", "-i", "yes"])


@pytest.mark.parametrize(
    "extra, expected",
    [([], None), (["--import"], True), (["--copy", "other"], "other")],
)
def test_profile_create_import(extra, expected):
    args = parse_args(["profile", "new", *extra])
    assert args.profile_command == "create"
    assert args.import_profile == expected


def test_profile_delete_switch_to():
    args = parse_args(["profile", "rm", "old", "-s", "new"])
    assert args.profile_command == "delete"
    assert (args.profile_name, args.switch_to) == ("old", "new")


def test_scan_platform():
    assert parse_args(["scan"]).platform is Platform.MODRINTH
    assert parse_args(["scan", "-p", "cf"]).platform is Platform.CURSEFORGE
    assert str(Platform.CURSEFORGE) == "curseforge"


def test_scan_directory_alias():
    assert parse_args(["scan", "--out_dir", "mods"]).directory == "mods"


def test_remove_accepts_no_names():
    assert parse_args(["remove"]).mod_names == []


def test_environment_tokens(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "token")
    monkeypatch.setenv("CURSEFORGE_API_KEY", "placeholder")
    args = build_parser().parse_args(["upgrade"])
    assert args.github_token == "token"
    assert args.curseforge_api_key == "placeholder"


def test_complete_shell():
    assert parse_args(["complete", "zsh"]).shell == "zsh"
    with pytest.raises(SystemExit):
        parse_args(["complete", "cmd"])