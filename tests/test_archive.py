import io
import zipfile

import pytest

from modkeeper.modpack.archive import (
    create,
    read_file_from_zip,
    zip_create_from_directory,
    zip_extract,
)


def make_zip(entries):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    buffer.seek(0)
    return buffer


def test_read_file_from_zip_present():
    buffer = make_zip({"manifest.json": '{"name": "pack"}'})
    assert read_file_from_zip(buffer, "manifest.json") == '{"name": "pack"}'


def test_read_file_from_zip_absent():
    buffer = make_zip({"other.txt": "x"})
    assert read_file_from_zip(buffer, "manifest.json") is None


def test_read_file_from_zip_not_a_zip():
    with pytest.raises(zipfile.BadZipFile):
        read_file_from_zip(io.BytesIO(b"not a zip file at all"), "manifest.json")


def test_create_from_directory_and_extract_round_trip(tmp_path):
    source = tmp_path / "source"
    (source / "config" / "nested").mkdir(parents=True)
    (source / "top.txt").write_text("top")
    (source / "config" / "nested" / "deep.cfg").write_text("deep")
    archive = tmp_path / "out.zip"

    zip_create_from_directory(archive, source)
    target = tmp_path / "target"
    zip_extract(archive, target)

    assert (target / "top.txt").read_text() == "top"
    assert (target / "config" / "nested" / "deep.cfg").read_text() == "deep"
    with zipfile.ZipFile(archive) as zipped:
        assert "config/nested/deep.cfg" in zipped.namelist()


def test_create_modpack(tmp_path):
    mods = tmp_path / "mods"
    mods.mkdir()
    (mods / "extra.jar").write_bytes(b"jar bytes")
    (mods / "subdir").mkdir()
    overrides = tmp_path / "overrides"
    (overrides / "config").mkdir(parents=True)
    (overrides / "config" / "a.toml").write_text("a = 1")
    output = tmp_path / "pack.mrpack"

    create(output, '{"formatVersion": 1}', overrides, mods)

    assert read_file_from_zip(output, "modrinth.index.json") == '{"formatVersion": 1}'
    with zipfile.ZipFile(output) as zipped:
        names = zipped.namelist()
        assert zipped.read("overrides/extra.jar") == b"jar bytes"
        assert zipped.read("config/a.toml") == b"a = 1"
    assert not any(name.startswith("overrides/subdir") for name in names)


def test_create_index_only(tmp_path):
    output = tmp_path / "pack.mrpack"
    create(output, "{}", None, None)
    with zipfile.ZipFile(output) as zipped:
        assert zipped.namelist() == ["modrinth.index.json"]


def test_create_rejects_duplicate_names(tmp_path):
    overrides = tmp_path / "overrides"
    overrides.mkdir()
    (overrides / "modrinth.index.json").write_text("clash")
    with pytest.raises(ValueError):
        create(tmp_path / "pack.mrpack", "{}", overrides, None)