import os
import zipfile

from gofar.cli import VERSION, build_parser, main

GOOD_GO = (
    "#!/bin/sh\n"
    "while [ $# -gt 0 ]; do\n"
    '  if [ "$1" = "-o" ]; then\n'
    "    shift\n"
    '    echo binary > "$1"\n'
    "  fi\n"
    "  shift\n"
    "done\n"
)


def test_version(capsys):
    assert main(["version"]) == 0
    assert capsys.readouterr().out == f"gofar version {VERSION}\n"


def test_no_process_prints_usage(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert out.startswith("usage: gofar [option] process_name\nusage: gofar version\n")
    assert "fatima process package builder" in out


def test_help_prints_usage(capsys):
    assert main(["-h"]) == 0
    assert "-c    CGO Enable" in capsys.readouterr().out


def test_parser_flags():
    options = build_parser("gofar").parse_args(["-c", "-s", "proc"])
    assert options.cgo_enable is True
    assert options.strip_enable is True
    assert options.args == ["proc"]


def test_parser_defaults():
    options = build_parser("gofar").parse_args(["proc"])
    assert (options.cgo_enable, options.strip_enable) == (False, False)


def test_context_error_reported(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("GOPATH", raising=False)
    monkeypatch.chdir(tmp_path)
    assert main(["proc"]) == 1
    assert capsys.readouterr().err == (
        "packaging error : fail to build context. fail to check git support. "
        "not found GOPATH. (gopath is nil)\n"
    )


def test_full_packaging(tmp_path, monkeypatch, capsys):
    base = tmp_path.resolve()
    bindir = base / "fakebin"
    bindir.mkdir()
    go = bindir / "go"
    go.write_text(GOOD_GO)
    go.chmod(0o755)
    monkeypatch.setenv("PATH", f"{bindir}{os.pathsep}{os.environ.get('PATH', '')}")
    home = base / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    gopath = base / "gopath"
    project = gopath / "src" / "svc"
    project.mkdir(parents=True)
    (project / "svc.json").write_text("{}")
    monkeypatch.setenv("GOPATH", str(gopath))
    monkeypatch.chdir(project)

    assert main(["svc"]) == 0
    out = capsys.readouterr().out
    far = gopath / "far" / "svc" / "svc.far"
    assert "SUCCESS to packaging..." in out
    assert f"Artifact :: {far}" in out
    with zipfile.ZipFile(far) as archive:
        names = archive.namelist()
    assert "/deployment.json" in names
    assert "/svc.json" in names
    assert "/platform/linux_amd64/svc" in names