# modkeeper

modkeeper is a Python library that keeps track of the Minecraft mods and
modpacks you use and downloads the right files for them. Mods can come from
Modrinth, CurseForge or GitHub Releases; modpacks from Modrinth or CurseForge.

## What it does

- Keeps a JSON config (`modkeeper.config.io.read_config` / `write_config`) of
  **profiles** (a named set of mods with an output directory and compatibility
  filters) and **modpacks**. Older profiles that store a single game version and
  mod loader are converted to filters when read.
- Adds mods by identifier (`modkeeper.add.parse_id`): a 32-bit integer is a
  CurseForge project ID, `owner/repo` is a GitHub repository, anything else is a
  Modrinth project ID or slug.
- Checks mods against filters (`modkeeper.check.select_latest`): mod loader
  (preferred in order, or any of several), game version (strict, or any version
  in the same minor group as listed by Modrinth), release channel, and regular
  expressions on filename, title or description.
- Picks the newest compatible file for every mod
  (`modkeeper.fetch.fetch_download_file`) and downloads it
  (`modkeeper.download.download`) with a progress bar, moving files that no
  longer belong into an `.old` folder in the output directory
  (`modkeeper.download.clean`).
- Scans a directory of `.jar` files and identifies them on Modrinth and
  CurseForge by their SHA-1 hashes and CurseForge fingerprints
  (`modkeeper.scan.scan`).
- Reads, extracts and builds modpack archives, and describes the
  `modrinth.index.json` and CurseForge `manifest.json` formats.

## Installation

```
pip install .
```

The tests need the `test` extra: `pip install .[test]`, then `pytest`.

## Credentials

`modkeeper.api.default_apis()` builds shared clients that read their
credentials from the environment:

- `GITHUB_TOKEN` – a personal access token, which raises GitHub's rate limit.
- `CURSEFORGE_API_KEY` – a CurseForge API key; CurseForge requests are sent
  without a key if it is not set.

You can also build the clients yourself with `ModrinthApi`, `CurseForgeApi`
and `GitHubApi` and group them in `Apis`.

## Using it

Create a profile and save it to a config file:

```python
from pathlib import Path

from modkeeper.config.filters import parse_mod_loader
from modkeeper.config.io import read_config, write_config
from modkeeper.config.structs import make_profile

config_path = Path("~/.config/modkeeper/config.json").expanduser()
config = read_config(config_path)  # creates an empty config if none exists

profile = make_profile(
    name="Survival",
    output_dir=Path("~/.minecraft/mods").expanduser(),
    game_versions=["1.20.1"],
    mod_loaders=[parse_mod_loader("fabric")],
    mods=[],
    disabled=[],
)
config.profiles.append(profile)
write_config(config_path, config)
```

Add mods to it and report what happened:

```python
from modkeeper.add import add, parse_id
from modkeeper.api import default_apis
from modkeeper.reporting import display_successes_failures

apis = default_apis()
identifiers = [parse_id(text) for text in ["sodium", "238222", "owner/repo"]]

successes, failures = add(
    profile,
    identifiers,
    perform_checks=True,
    override_profile=False,
    filters=[],
    apis=apis,
)
had_errors = display_successes_failures(successes, failures)
write_config(config_path, config)
```

`display_successes_failures` prints the results grouped by reason and returns
`True` if any failure is a real error (mods that were already added only count
as warnings).

Find the newest compatible file for every mod, tidy the output directory and
download. `clean` returns what is still left to download and install:

```python
from modkeeper.download import clean, download, read_overrides
from modkeeper.fetch import fetch_download_file

to_download = [
    fetch_download_file(mod, list(profile.filters), apis) for mod in profile.mods
]
to_install = read_overrides(profile.output_dir / "user")

to_download, to_install = clean(profile.output_dir, to_download, to_install)
download(profile.output_dir, to_download, to_install, parallel_tasks=8)
```

Identify the jars already in a folder:

```python
from modkeeper.scan import scan

for filename, modrinth_id, curseforge_id in scan(
    profile.output_dir, lambda: print("Hashing done"), apis
):
    print(filename, modrinth_id, curseforge_id)
```

## Modpacks

- `modkeeper.modpack.lookup.curseforge` and `modkeeper.modpack.lookup.modrinth`
  check that a project exists, is a modpack and has not been added to the
  config yet, and return the project.
- `modkeeper.fetch.download_modpack_file` downloads the latest modpack archive
  into the cache directory (`modkeeper.api.cache_dir() / "downloaded"`) unless
  it is already there, and returns its path.
- `modkeeper.modpack.archive` reads a file from an archive
  (`read_file_from_zip`), extracts it (`zip_extract`), zips a directory
  (`zip_create_from_directory`) and builds a new Modrinth pack (`create`).
- `modkeeper.modpack.index.ModpackIndex` and
  `modkeeper.modpack.manifest.Manifest` read and write the two pack formats.

## Command-line arguments

`modkeeper.cli.build_parser()` returns an `argparse` parser for the subcommands
`add`, `scan`, `complete`, `list`, `modpack`, `modpacks`, `profile`,
`profiles`, `remove` and `upgrade` with their options, and
`modkeeper.cli.parse_args(argv)` parses a list of arguments with it.
`FilterArguments.from_namespace()` collects the filter options of `add`, and
`FilterArguments.to_filters()` turns them into filter objects.

`modkeeper.picker.pick_folder` asks for a folder in the terminal, expands a
`~` component to the home directory and returns the resolved path.

## What it does not do

- There is no installed command. The argument parser only parses; nothing in
  the package runs the parsed subcommands, and the `complete` subcommand does
  not generate shell completions.
- Folders are picked by typing a path in the terminal; there is no graphical
  folder dialog.