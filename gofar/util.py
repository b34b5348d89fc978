"""Filesystem, process and archive helpers used by the packager."""

from __future__ import annotations

import os
import re
import shutil
import subprocess
import sys
import time
import zipfile
from collections.abc import Iterator

PLATFORM_DIR_NAME = "platform"
GIT_DIR_NAME = ".git"
GIT_CONFIG_FILE = "config"


class GopathNotFoundError(LookupError):
    """GOPATH is not set."""

    def __init__(self) -> None:
        super().__init__("not found GOPATH. (gopath is nil)")


class GitNotFoundError(LookupError):
    """No git repository was found above a directory."""

    def __init__(self) -> None:
        super().__init__("not found git")


class CommandError(RuntimeError):
    """A command exited with an error; ``output`` holds what it printed."""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output


def check_dir_exist(path: str) -> None:
    """Raise unless ``path`` exists and is a directory."""
    try:
        is_dir = os.path.isdir(path) if os.stat(path) else False
    except FileNotFoundError:
        raise FileNotFoundError(f"not exist dir : {path}") from None
    except OSError as exc:
        raise OSError(f"error checking : {path} ({exc})") from exc
    if not is_dir:
        raise NotADirectoryError("exist but it is not directory")


def ensure_file_in_directory(directory: str, target_filename: str) -> bool:
    """Tell whether ``directory`` directly holds a regular entry named ``target_filename``."""
    try:
        entries = list(os.scandir(directory))
    except OSError as exc:
        print(f"fail to read dir {directory} : {exc}", file=sys.stderr)
        return False
    for entry in entries:
        if entry.name == target_filename:
            if not entry.is_dir(follow_symlinks=False):
                return True
            print(f"{directory} found but it is directory", file=sys.stderr)
            return False
    return False


def build_gopath_map() -> set[str]:
    """Return the set of entries in GOPATH."""
    return {token.strip() for token in os.environ.get("GOPATH", "").split(os.pathsep)}


def get_gopath() -> str:
    """Return the first entry of GOPATH."""
    return os.environ.get("GOPATH", "").split(os.pathsep, 1)[0]


def find_git_config(directory: str) -> str:
    """Walk upwards from ``directory`` to the first directory holding ``.git/config``."""
    if not os.environ.get("GOPATH"):
        raise GopathNotFoundError()
    while True:
        if any(directory == os.path.join(gopath, "src") for gopath in build_gopath_map()):
            raise GitNotFoundError()
        for entry in os.scandir(directory):
            if (
                entry.name == GIT_DIR_NAME
                and entry.is_dir(follow_symlinks=False)
                and ensure_file_in_directory(entry.path, GIT_CONFIG_FILE)
            ):
                return directory
        parent = os.path.dirname(directory)
        if parent == directory:
            raise GitNotFoundError()
        directory = parent


def _sorted_entries(directory: str) -> list[os.DirEntry]:
    return sorted(os.scandir(directory), key=lambda entry: entry.name)


def find_directory(base_dir: str, target_dir: str) -> str:
    """Find a directory named ``target_dir`` below ``base_dir``, shallowest first per level."""
    subdirs = []
    for entry in _sorted_entries(base_dir):
        is_dir = entry.is_dir(follow_symlinks=False)
        if entry.name == target_dir:
            if is_dir:
                return os.path.join(base_dir, target_dir)
            continue
        if is_dir:
            subdirs.append(entry.name)
    for name in subdirs:
        try:
            return find_directory(os.path.join(base_dir, name), target_dir)
        except OSError:
            continue
    raise FileNotFoundError(f"{target_dir} not found")


def find_sub_directories(base_dir: str) -> list[str]:
    """Return the immediate subdirectories of ``base_dir`` in name order."""
    try:
        entries = _sorted_entries(base_dir)
    except OSError as exc:
        print(f"fail to read dir : {exc}", file=sys.stderr)
        return []
    return [
        os.path.join(base_dir, entry.name)
        for entry in entries
        if entry.is_dir(follow_symlinks=False)
    ]


def check_file_exist(path: str) -> None:
    """Raise FileNotFoundError if ``path`` does not exist."""
    try:
        os.stat(path)
    except FileNotFoundError:
        raise FileNotFoundError(f"not exist file : {path}") from None
    except OSError:
        pass


def copy_file(src: str, dst: str) -> None:
    """Copy the contents of ``src`` to ``dst``."""
    print(f"copy : {src}")
    with open(src, "rb") as source, open(dst, "wb") as target:
        shutil.copyfileobj(source, target)
        target.flush()
        os.fsync(target.fileno())


def _run(args: list[str], wd: str) -> str:
    try:
        completed = subprocess.run(
            args,
            cwd=wd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
        )
    except OSError as exc:
        raise CommandError(str(exc)) from exc
    output = completed.stdout.decode(errors="replace")
    if completed.returncode != 0:
        raise CommandError(f"exit status {completed.returncode}", output)
    return output


def execute_command(wd: str, command: str) -> str:
    """Run ``command`` split on whitespace in ``wd``; return combined output."""
    if not command:
        raise ValueError("empty command")
    return _run(re.split(r"\s+", command), wd)


def execute_shell(wd: str, command: str) -> str:
    """Run ``command`` through /bin/sh in ``wd``; return combined output."""
    if not command:
        raise ValueError("empty command")
    return _run(["/bin/sh", "-c", command], wd)


def _walk(path: str) -> Iterator[tuple[str, bool]]:
    is_dir = os.path.isdir(path) and not os.path.islink(path)
    yield path, is_dir
    if is_dir:
        for name in sorted(os.listdir(path)):
            yield from _walk(os.path.join(path, name))


def zip_artifact(base_dir: str, artifact_file: str) -> None:
    """Zip the tree under ``base_dir`` into ``artifact_file`` with names rooted at '/'."""
    files = list(_walk(base_dir))
    with zipfile.ZipFile(artifact_file, "w", zipfile.ZIP_DEFLATED) as archive:
        for path, is_dir in files:
            if len(path) == len(base_dir):
                name = ""
            else:
                name = "/" + path[len(base_dir) + 1 :].replace(os.sep, "/")
            if is_dir:
                name += "/"
            info = zipfile.ZipInfo(name, time.localtime()[:6])
            info.compress_type = zipfile.ZIP_DEFLATED
            if name.startswith(f"/{PLATFORM_DIR_NAME}"):
                info.external_attr = 0o755 << 16
            if is_dir:
                archive.writestr(info, b"")
            else:
                with open(path, "rb") as source, archive.open(info, "w") as target:
                    shutil.copyfileobj(source, target)


def ensure_directory(directory: str) -> None:
    """Create ``directory`` and its parents if it does not exist."""
    if not os.path.exists(directory):
        os.makedirs(directory, mode=0o755, exist_ok=True)