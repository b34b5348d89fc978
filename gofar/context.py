"""Build context: locating the project, compiling binaries and packing the artifact."""

from __future__ import annotations

import json
import os
import shutil
import sys
import tempfile
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from gofar.git import read_git_info
from gofar.platform import BuildPlatformConfig, PlatformItem, load_platform
from gofar.util import (
    PLATFORM_DIR_NAME,
    CommandError,
    GitNotFoundError,
    build_gopath_map,
    check_dir_exist,
    check_file_exist,
    copy_file,
    ensure_directory,
    execute_shell,
    find_directory,
    find_git_config,
    find_sub_directories,
    get_gopath,
    zip_artifact,
)

RESOURCE_DIR_NAME = "resources"
CMD_DIR_NAME = "cmd"
PROC_TYPE_GENERAL = "GENERAL"
PROC_TYPE_UI = "USER_INTERACTIVE"
INCLUDE_SUFFIXES = ("properties", "xml", "json", "yaml", "sh", "yml")

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
_RULE = "-" * 50


class PackagingError(Exception):
    """Building or packing the artifact failed."""


@dataclass(frozen=True)
class CmdRecord:
    """A directory holding the main package of one binary."""

    path: str

    def binary_name(self) -> str:
        return os.path.basename(self.path)

    def main_source_path(self) -> str:
        return os.path.join(self.path, f"{self.binary_name()}.go")


@dataclass(frozen=True)
class BinCompileRequest:
    """Everything needed to compile one binary for one platform."""

    target_dir: str
    bin_source_path: str
    bin_name: str
    os: str
    arch: str
    build_cgo_link: str = ""

    @property
    def target_bin(self) -> str:
        return os.path.join(self.target_dir, self.bin_name)

    def build_command(self, cgo_enable: bool, strip_enable: bool) -> str:
        """Return the shell command line that compiles this binary."""
        command = f"GOOS={self.os} GOARCH={self.arch} go build -o {self.target_bin}"
        if cgo_enable:
            if self.build_cgo_link:
                command = f"CC={self.build_cgo_link} {command}"
            command = f"CGO_ENABLED=1 {command}"
            if strip_enable:
                command = f"{command} -ldflags='-s -w'"
        return command


def create_compile_request(
    platform: PlatformItem, cmd_record: CmdRecord, working_dir: str, cgo_link: str
) -> BinCompileRequest:
    return BinCompileRequest(
        target_dir=os.path.join(working_dir, PLATFORM_DIR_NAME, platform.directory_name()),
        bin_source_path=cmd_record.path,
        bin_name=cmd_record.binary_name(),
        os=platform.os,
        arch=platform.arch,
        build_cgo_link=cgo_link,
    )


def compile_binary(request: BinCompileRequest, cgo_enable: bool, strip_enable: bool) -> None:
    """Compile one binary; raise PackagingError on any failure or compiler output."""
    try:
        os.makedirs(request.target_dir, mode=0o744, exist_ok=True)
    except OSError as exc:
        raise PackagingError(
            f"fail to prepare platform dir {request.target_dir} : {exc}"
        ) from exc

    command = request.build_command(cgo_enable, strip_enable)
    print(command)
    try:
        out = execute_shell(request.bin_source_path, command)
    except CommandError as exc:
        raise PackagingError(f"fail to execute command : {exc}\n{exc.output}") from exc
    if out:
        raise PackagingError(
            f"fail to build binary {os.path.basename(request.target_dir)} : "
            f"{request.bin_name}\n{out}"
        )
    try:
        os.chmod(request.target_bin, 0o755)
    except OSError:
        pass


def find_resource_from_directory(base_dir: str) -> list[str]:
    """Collect resource files below ``base_dir``, skipping hidden entries."""
    try:
        entries = sorted(os.scandir(base_dir), key=lambda entry: entry.name)
    except OSError as exc:
        raise PackagingError(f"findResourceFromDirectory error : {exc}\n") from exc

    found: list[str] = []
    for entry in entries:
        if entry.name.startswith("."):
            continue
        path = os.path.join(base_dir, entry.name)
        if entry.is_dir(follow_symlinks=False):
            found.extend(find_resource_from_directory(path))
        elif entry.name.endswith(INCLUDE_SUFFIXES):
            found.append(path)
    return found


@dataclass
class BuildContext:
    """What to build, where from, and for which platforms."""

    expose_process_name: str
    project_base_dir: str = ""
    resource_dir: str = ""
    process_list: list[CmdRecord] = field(default_factory=list)
    git_support: bool = False
    cgo_enable: bool = False
    strip_enable: bool = False
    platforms: BuildPlatformConfig = field(default_factory=BuildPlatformConfig)
    proc_type: str = PROC_TYPE_GENERAL
    far_path: str = ""

    def summary(self) -> str:
        lines = [
            _RULE,
            f"project base dir : {self.project_base_dir}",
            f"resource dir : {self.resource_dir}",
            f"expose process name : {self.expose_process_name}",
        ]
        if self.process_list:
            names = ",".join(record.binary_name() for record in self.process_list)
            lines.append(f"binary : {names}")
        else:
            lines.append(f"binary process : {self.expose_process_name}")
        lines.append(_RULE)
        return "\n".join(lines) + "\n"

    def print_summary(self) -> str:
        """Write the summary to standard output and return it."""
        text = self.summary()
        sys.stdout.write(text)
        sys.stdout.flush()
        return text

    def packaging(self) -> str:
        """Build everything into a temporary directory and pack it; return the artifact path."""
        try:
            working_dir = tempfile.mkdtemp(prefix=self.expose_process_name)
        except OSError as exc:
            raise PackagingError(f"fail to create tmp dir : {exc}") from exc

        print(f"working directory : {working_dir}")
        try:
            self.prepare_binary(working_dir)
            self.prepare_resource(working_dir)
            self.create_deployment(working_dir)
            self._compress(working_dir)
        finally:
            shutil.rmtree(working_dir, ignore_errors=True)

        print(f"\nSUCCESS to packaging...\nArtifact :: {self.far_path}\n")
        return self.far_path

    def _compress(self, working_dir: str) -> None:
        far_dir = os.path.join(get_gopath(), "far", self.expose_process_name)
        print(f"\n>> compress to {far_dir}")
        try:
            ensure_directory(far_dir)
        except OSError as exc:
            raise PackagingError(f"fail to prepare far dir : {exc}") from exc

        self.far_path = os.path.join(far_dir, f"{self.expose_process_name}.far")
        try:
            zip_artifact(working_dir, self.far_path)
        except OSError as exc:
            raise PackagingError(f"fail to compress : {exc}") from exc

    def create_deployment(self, working_dir: str) -> dict[str, Any]:
        """Write deployment.json into ``working_dir`` and return its content."""
        build: dict[str, Any] = {
            "time": f"{time.strftime(_TIME_FORMAT)} {time.strftime('%Z')}",
        }
        try:
            user = execute_shell(".", "whoami")
        except (CommandError, ValueError) as exc:
            print(f"whoami error : {exc}", file=sys.stderr)
            user = "unknown"
        build["user"] = user.strip()
        if self.git_support:
            git_info = read_git_info(self.project_base_dir)
            if git_info.valid:
                build["git"] = git_info.to_dict()

        deployment = {
            "process": self.expose_process_name,
            "process_type": self.proc_type,
            "build": build,
        }
        path = os.path.join(working_dir, "deployment.json")
        try:
            with open(path, "w", encoding="utf-8") as stream:
                json.dump(deployment, stream, sort_keys=True, separators=(",", ":"))
        except OSError as exc:
            raise PackagingError(f"fail to write deployment.json : {exc}") from exc
        return deployment

    def prepare_resource(self, working_dir: str) -> None:
        """Copy resources into ``working_dir`` and detect an interactive process."""
        if self.resource_dir:
            self._load_resource_from_designated_dir(working_dir)
        else:
            self._load_resource_from_project(working_dir)

        ui_xml = os.path.join(working_dir, f"{self.expose_process_name}.ui.xml")
        try:
            check_file_exist(ui_xml)
        except FileNotFoundError:
            return
        self.proc_type = PROC_TYPE_UI

    def _load_resource_from_designated_dir(self, working_dir: str) -> None:
        print("\n>> copying resources...")
        try:
            out = execute_shell(self.resource_dir, f"cp -r * {working_dir}")
        except (CommandError, OSError) as exc:
            output = getattr(exc, "output", "")
            raise PackagingError(f"fail to execute command : {exc}\n{output}\n") from exc
        if out:
            raise PackagingError(f"fail to copy resources\n{out}\n")
        print("resources directory copied...")

    def _load_resource_from_project(self, working_dir: str) -> None:
        resources = find_resource_from_directory(self.project_base_dir)
        for source in resources:
            target = os.path.join(working_dir, os.path.basename(source))
            try:
                copy_file(source, target)
            except OSError as exc:
                raise PackagingError(f"fail to copy resource {source} : {exc}") from exc
            if target.endswith(".sh"):
                os.chmod(target, 0o755)
        print(f"total {len(resources)} resource files copied...")

    def prepare_binary(self, working_dir: str) -> None:
        """Compile every binary, locally first and then for the other platforms."""
        if not self.process_list:
            raise PackagingError("not found target process list")

        for record in self.process_list:
            name = record.binary_name()
            print(f"\n>> compiling {name}...")

            local = create_compile_request(
                self.platforms.local_platform(), record, working_dir, ""
            )
            try:
                compile_binary(local, self.cgo_enable, self.strip_enable)
            except PackagingError as exc:
                print(exc)
                raise PackagingError(f"fail to prepare binary {name}") from exc

            requests = [
                create_compile_request(platform, record, working_dir, platform.cc)
                for platform in self.platforms.additional_platforms()
            ]
            if not requests:
                continue
            failures = []
            with ThreadPoolExecutor(max_workers=len(requests)) as pool:
                futures = [
                    pool.submit(compile_binary, request, self.cgo_enable, self.strip_enable)
                    for request in requests
                ]
                for future in futures:
                    try:
                        future.result()
                    except PackagingError as exc:
                        print(exc)
                        failures.append(exc)
            if failures:
                raise PackagingError(f"fail to prepare binary {name}") from failures[0]


def determine_project_base_dir(process_name: str, cwd: str) -> tuple[str, bool]:
    """Return the project base directory and whether it is a git work tree."""
    try:
        return find_git_config(cwd), True
    except GitNotFoundError:
        pass
    except (LookupError, OSError) as exc:
        raise PackagingError(f"fail to check git support. {exc}") from exc

    for gopath in sorted(build_gopath_map()):
        try:
            return find_directory(os.path.join(gopath, "src"), process_name), False
        except OSError:
            continue
    raise PackagingError("cannot find project base directory")


def determine_resource_dir(project_base_dir: str) -> str:
    """Return the project's resources directory, or '' if there is none."""
    resource_dir = os.path.join(project_base_dir, RESOURCE_DIR_NAME)
    try:
        check_dir_exist(resource_dir)
    except OSError:
        return ""
    return resource_dir


def determine_cmd_list(project_base_dir: str) -> list[CmdRecord]:
    """One record per directory under ``cmd``, or the project itself without one."""
    try:
        cmd_dir = find_directory(project_base_dir, CMD_DIR_NAME)
    except OSError:
        return [CmdRecord(project_base_dir)]
    return [CmdRecord(path) for path in find_sub_directories(cmd_dir)]


def new_build_context(
    process_name: str, cgo_enable: bool = False, strip_enable: bool = False
) -> BuildContext:
    """Discover the project for ``process_name`` from the current directory."""
    platforms = load_platform()
    try:
        base_dir, git_support = determine_project_base_dir(process_name, os.getcwd())
    except PackagingError as exc:
        raise PackagingError(f"fail to build context. {exc}") from exc

    return BuildContext(
        expose_process_name=process_name,
        project_base_dir=base_dir,
        resource_dir=determine_resource_dir(base_dir),
        process_list=determine_cmd_list(base_dir),
        git_support=git_support,
        cgo_enable=cgo_enable,
        strip_enable=strip_enable,
        platforms=platforms,
    )