"""Build target platforms and their YAML configuration file."""

from __future__ import annotations

import os
import platform as _platform
from dataclasses import dataclass, field
from pathlib import Path

import yaml

CONFIG_DIR = ".fatima"
CONFIG_PLATFORM_FILE = "gofar.yaml"

_HEADER = (
    "---\n"
    "# if you want to check platform support list, use below command\n"
    "# $ go tool dist list\n"
    "# \n"
)

_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}


def local_goos() -> str:
    """Return the Go name of the running operating system."""
    return _platform.system().lower() or "linux"


def local_goarch() -> str:
    """Return the Go name of the running machine architecture."""
    machine = _platform.machine().lower()
    return _ARCH_ALIASES.get(machine, machine)


@dataclass(frozen=True)
class PlatformItem:
    """One target os/arch pair, with an optional C compiler."""

    os: str
    arch: str
    cc: str = ""

    def directory_name(self) -> str:
        """Return the ``os_arch`` directory name for this platform."""
        return f"{self.os}_{self.arch}"

    def to_dict(self) -> dict[str, str]:
        data = {"os": self.os, "arch": self.arch}
        if self.cc:
            data["cc"] = self.cc
        return data


@dataclass
class BuildPlatformConfig:
    """The list of platforms to build for."""

    platforms: list[PlatformItem] = field(default_factory=list)

    def local_platform(self) -> PlatformItem:
        return PlatformItem(local_goos(), local_goarch())

    def additional_platforms(self) -> list[PlatformItem]:
        """Configured platforms other than the local one."""
        goos, goarch = local_goos(), local_goarch()
        return [p for p in self.platforms if not (p.os == goos and p.arch == goarch)]

    def to_yaml(self) -> str:
        body = yaml.safe_dump(
            {"platform_list": [p.to_dict() for p in self.platforms]},
            sort_keys=False,
            indent=2,
        )
        return _HEADER + body

    @classmethod
    def from_yaml(cls, text: str) -> BuildPlatformConfig:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid gofar platform yaml file : {exc}") from exc
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("invalid gofar platform yaml file : not a mapping")
        items = data.get("platform_list") or []
        if not isinstance(items, list):
            raise ValueError("invalid gofar platform yaml file : platform_list is not a list")
        platforms = []
        for item in items:
            if not isinstance(item, dict):
                raise ValueError("invalid gofar platform yaml file : bad platform entry")
            platforms.append(
                PlatformItem(
                    str(item.get("os") or ""),
                    str(item.get("arch") or ""),
                    str(item.get("cc") or ""),
                )
            )
        return cls(platforms)


def default_build_platform_config() -> BuildPlatformConfig:
    """linux/amd64 and linux/arm64, plus the local platform when it is not linux."""
    platforms = [PlatformItem("linux", "amd64"), PlatformItem("linux", "arm64")]
    if local_goos() != "linux":
        platforms.append(PlatformItem(local_goos(), local_goarch()))
    return BuildPlatformConfig(platforms)


def prepare_default_platform_file(home_dir: str | os.PathLike | None = None) -> Path:
    """Write the default platform file under ``home_dir`` and return its path."""
    config_dir = Path(home_dir if home_dir is not None else Path.home()) / CONFIG_DIR
    try:
        config_dir.mkdir(mode=0o744)
    except FileExistsError:
        pass
    path = config_dir / CONFIG_PLATFORM_FILE
    path.write_text(default_build_platform_config().to_yaml())
    return path


def load_platform(home_dir: str | os.PathLike | None = None) -> BuildPlatformConfig:
    """Load the platform file, creating the default one first if it cannot be read."""
    base = Path(home_dir if home_dir is not None else Path.home())
    path = base / CONFIG_DIR / CONFIG_PLATFORM_FILE
    try:
        text = path.read_text()
    except OSError:
        prepare_default_platform_file(base)
        try:
            text = path.read_text()
        except OSError as exc:
            raise OSError(f"fail to read platform config : {exc}") from exc
    return BuildPlatformConfig.from_yaml(text)