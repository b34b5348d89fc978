import os
import zipfile

import pytest

from gofar import util


def test_check_dir_exist(tmp_path):
    util.check_dir_exist(str(tmp_path))
    with pytest.raises(FileNotFoundError):
        util.check_dir_exist(str(tmp_path / "missing"))
    f = tmp_path / "f.txt"
    f.write_text("x")
    with pytest.raises(NotADirectoryError):
        util.check_dir_exist(str(f))


def test_ensure_file_in_directory(tmp_path):
    (tmp_path / "config").write_text("x")
    (tmp_path / "sub").mkdir()
    assert util.ensure_file_in_directory(str(tmp_path), "config") is True
    assert util.ensure_file_in_directory(str(tmp_path), "sub") is False
    assert util.ensure_file_in_directory(str(tmp_path), "nope") is False
    assert util.ensure_file_in_directory(str(tmp_path / "missing"), "config") is False


def test_gopath_helpers(monkeypatch):
    monkeypatch.setenv("GOPATH", os.pathsep.join(["/a", " /b "]))
    assert util.build_gopath_map() == {"/a", "/b"}
    assert util.get_gopath() == "/a"


def test_find_git_config(tmp_path, monkeypatch):
    monkeypatch.setenv("GOPATH", str(tmp_path / "gopath"))
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    (repo / ".git" / "config").write_text("")
    deep = repo / "x" / "y"
    deep.mkdir(parents=True)
    assert util.find_git_config(str(deep)) == str(repo)


def test_find_git_config_stops_at_gopath_src(tmp_path, monkeypatch):
    monkeypatch.setenv("GOPATH", str(tmp_path))
    inner = tmp_path / "src" / "proj"
    inner.mkdir(parents=True)
    with pytest.raises(util.GitNotFoundError):
        util.find_git_config(str(inner))


def test_find_git_config_without_gopath(monkeypatch, tmp_path):
    monkeypatch.delenv("GOPATH", raising=False)
    with pytest.raises(util.GopathNotFoundError):
        util.find_git_config(str(tmp_path))


def test_find_directory(tmp_path):
    (tmp_path / "a" / "b" / "cmd").mkdir(parents=True)
    (tmp_path / "cmd_file").mkdir()
    assert util.find_directory(str(tmp_path), "cmd") == str(tmp_path / "a" / "b" / "cmd")
    with pytest.raises(FileNotFoundError):
        util.find_directory(str(tmp_path), "zzz")


def test_find_directory_skips_files(tmp_path):
    (tmp_path / "cmd").write_text("x")
    with pytest.raises(FileNotFoundError):
        util.find_directory(str(tmp_path), "cmd")


def test_find_sub_directories(tmp_path):
    (tmp_path / "b").mkdir()
    (tmp_path / "a").mkdir()
    (tmp_path / "f").write_text("x")
    assert util.find_sub_directories(str(tmp_path)) == [str(tmp_path / "a"), str(tmp_path / "b")]
    assert util.find_sub_directories(str(tmp_path / "none")) == []


def test_check_file_exist(tmp_path):
    f = tmp_path / "f"
    f.write_text("x")
    util.check_file_exist(str(f))
    with pytest.raises(FileNotFoundError):
        util.check_file_exist(str(tmp_path / "g"))


def test_copy_file(tmp_path):
    src = tmp_path / "s"
    src.write_bytes(b"content")
    dst = tmp_path / "d"
    util.copy_file(str(src), str(dst))
    assert dst.read_bytes() == b"content"


def test_execute_shell(tmp_path):
    assert util.execute_shell(str(tmp_path), "echo hello") == "hello\n"
    with pytest.raises(util.CommandError) as info:
        util.execute_shell(str(tmp_path), "echo bad; exit 3")
    assert info.value.output == "bad\n"
    with pytest.raises(ValueError):
        util.execute_shell(str(tmp_path), "")


def test_execute_command(tmp_path):
    assert util.execute_command(str(tmp_path), "echo  a   b") == "a b\n"
    with pytest.raises(ValueError):
        util.execute_command(str(tmp_path), "")


def test_zip_artifact(tmp_path):
    base = tmp_path / "work"
    (base / "platform" / "linux_amd64").mkdir(parents=True)
    (base / "platform" / "linux_amd64" / "app").write_bytes(b"bin")
    (base / "app.xml").write_text("<x/>")
    out = tmp_path / "a.far"
    util.zip_artifact(str(base), str(out))
    with zipfile.ZipFile(out) as z:
        names = z.namelist()
        assert names == [
            "/",
            "/app.xml",
            "/platform/",
            "/platform/linux_amd64/",
            "/platform/linux_amd64/app",
        ]
        assert z.read("/platform/linux_amd64/app") == b"bin"
        assert (z.getinfo("/platform/linux_amd64/app").external_attr >> 16) == 0o755
        assert (z.getinfo("/app.xml").external_attr >> 16) == 0


def test_ensure_directory(tmp_path):
    target = tmp_path / "x" / "y"
    util.ensure_directory(str(target))
    assert target.is_dir()
    util.ensure_directory(str(target))
    assert target.is_dir()