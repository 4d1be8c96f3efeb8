import pytest
import requests
import responses

from modkeeper.download import clean, download, find_dupes_by_key, read_overrides
from modkeeper.upgrade import DownloadData


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def _data(name, url=None, length=5):
    return DownloadData(
        download_url=url or f"https://cdn.example.com/{name}", output=name, length=length
    )


def test_find_dupes_short_list():
    items = ["only"]
    assert find_dupes_by_key(items, str) == []
    assert items == ["only"]


def test_find_dupes_sorts_and_returns_descending():
    items = ["b", "a", "b", "b"]
    dupes = find_dupes_by_key(items, str)
    assert items == sorted(["b", "a", "b", "b"])
    assert dupes == sorted(dupes, reverse=True)
    assert all(items[i] == items[i + 1] for i in dupes)
    assert len(dupes) == len(items) - len(set(items))


def test_clean_sorts_files(tmp_path):
    (tmp_path / "a.jar").write_bytes(b"a")
    (tmp_path / "b.jar").write_bytes(b"b")
    (tmp_path / "c.jar").write_bytes(b"c")
    (tmp_path / "d.jar.part").write_bytes(b"d")
    (tmp_path / "sub").mkdir()

    remaining_download, remaining_install = clean(
        tmp_path,
        [_data("a.jar"), _data("z.jar")],
        [("b.jar", tmp_path / "elsewhere"), ("y.cfg", tmp_path / "y")],
    )
    assert [d.filename() for d in remaining_download] == ["z.jar"]
    assert [name for name, _ in remaining_install] == ["y.cfg"]
    assert (tmp_path / "a.jar").exists()
    assert (tmp_path / "b.jar").exists()
    assert not (tmp_path / "c.jar").exists()
    assert (tmp_path / ".old" / "c.jar").read_bytes() == b"c"
    assert not (tmp_path / "d.jar.part").exists()
    assert (tmp_path / "sub").is_dir()


def test_clean_deletes_when_old_copy_exists(tmp_path):
    (tmp_path / ".old").mkdir()
    (tmp_path / ".old" / "c.jar").write_bytes(b"previous")
    (tmp_path / "c.jar").write_bytes(b"current")
    clean(tmp_path, [], [])
    assert not (tmp_path / "c.jar").exists()
    assert (tmp_path / ".old" / "c.jar").read_bytes() == b"previous"


def test_clean_drops_duplicates(tmp_path, capsys):
    to_download = [
        _data("a.jar", "https://cdn.example.com/1/a.jar"),
        _data("a.jar", "https://cdn.example.com/2/a.jar"),
        _data("b.jar"),
    ]
    remaining, _ = clean(tmp_path, to_download, [])
    assert sorted(d.filename() for d in remaining) == ["a.jar", "b.jar"]
    assert len(to_download) == 3
    out = capsys.readouterr().out
    assert "1 duplicate files were found a.jar" in out


def test_read_overrides(tmp_path):
    assert read_overrides(tmp_path / "missing") == []
    (tmp_path / "b.txt").write_text("b")
    (tmp_path / "a").mkdir()
    assert read_overrides(tmp_path) == [("a", tmp_path / "a"), ("b.txt", tmp_path / "b.txt")]


def test_download_installs_files_and_directories(tmp_path):
    overrides = tmp_path / "overrides"
    (overrides / "config" / "nested").mkdir(parents=True)
    (overrides / "config" / "nested" / "x.toml").write_text("x = 1")
    (overrides / "options.txt").write_text("opts")
    out = tmp_path / "out"
    out.mkdir()
    (out / "config").mkdir()
    (out / "config" / "keep.txt").write_text("keep")

    download(out, [], read_overrides(overrides))
    assert (out / "options.txt").read_text() == "opts"
    assert (out / "config" / "nested" / "x.toml").read_text() == "x = 1"
    assert (out / "config" / "keep.txt").read_text() == "keep"


def test_download_missing_installable(tmp_path):
    with pytest.raises(FileNotFoundError):
        download(tmp_path, [], [("ghost", tmp_path / "ghost")])


def test_download_rejects_zero_tasks(tmp_path):
    with pytest.raises(ValueError):
        download(tmp_path, [], [], parallel_tasks=0)


def test_download_fetches_files(tmp_path, capsys, mocked):
    mocked.add(responses.GET, "https://cdn.example.com/a.jar", body=b"hello")
    mocked.add(responses.GET, "https://cdn.example.com/b.jar", body=b"world!")
    download(tmp_path, [_data("a.jar"), _data("b.jar", length=6)], [], parallel_tasks=2)
    assert (tmp_path / "a.jar").read_bytes() == b"hello"
    assert (tmp_path / "b.jar").read_bytes() == b"world!"
    assert not list(tmp_path.glob("*.part"))


def test_download_failure_raises(tmp_path, mocked):
    mocked.add(responses.GET, "https://cdn.example.com/a.jar", status=404)
    with pytest.raises(requests.HTTPError):
        download(tmp_path, [_data("a.jar")], [])
    assert not (tmp_path / "a.jar").exists()