# model.py
from __future__ import annotations

import platform as _host
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


DEFAULT_OUTPUT_TEMPLATE = "{dir}-{os}-{arch}"

# platform.machine() values -> GOARCH
_HOST_ARCHES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}


@dataclass(frozen=True, order=True)
class Platform:
    """A target OS/arch pair, e.g. linux/amd64."""
    os: str
    arch: str

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"

    @classmethod
    def parse(cls, text: str) -> Platform:
        parts = text.split("/")
        if len(parts) != 2 or not all(parts):
            raise ValueError(
                f'platform should be of the form "<os>/<arch>" (e.g. "linux/amd64"), got {text!r}'
            )
        return cls(os=parts[0], arch=parts[1])


def host_os() -> str:
    return _host.system().lower()


def host_arch() -> str:
    machine = _host.machine().lower()
    return _HOST_ARCHES.get(machine, machine)


@dataclass(frozen=True)
class JobID:
    """Identity of one scheduled build: which package for which platform."""
    platform: Platform
    package: str

    def __str__(self) -> str:
        return f"{self.package} ({self.platform})"


class Phase(str, Enum):
    START = "start"
    SUCCESS = "success"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Status:
    """A single progress message sent from the scheduler/workers to the UI."""
    id: JobID
    phase: Phase
    data: str = ""


@dataclass
class BuildParams:
    """
    The full build request.

    os/arch may be left empty, in which case they default to the host
    platform (see platforms()).
    """
    packages: List[str] = field(default_factory=lambda: ["."])
    os: List[str] = field(default_factory=list)
    arch: List[str] = field(default_factory=list)

    skip_platforms: List[Platform] = field(default_factory=list)

    output_template: str = DEFAULT_OUTPUT_TEMPLATE

    ldflags: str = ""
    platform_ldflags: Dict[Platform, str] = field(default_factory=dict)
    gcflags: str = ""
    platform_gcflags: Dict[Platform, str] = field(default_factory=dict)
    asmflags: str = ""
    platform_asmflags: Dict[Platform, str] = field(default_factory=dict)

    tags: List[str] = field(default_factory=list)
    mod_mode: str = ""
    rebuild: bool = False
    race: bool = False
    cgo: bool = False

    parallelism: int = 1

    # post-processing of each produced binary
    shasum: Optional[str] = None       # "sha1" | "sha256"
    archive: Optional[str] = None      # "zip" | "tar.gz"

    def platforms(self) -> List[Platform]:
        """
        Every platform in the matrix. Includes platforms listed in
        skip_platforms; those are filtered out at scheduling time.
        """
        os_values = list(self.os) or [host_os()]
        arch_values = list(self.arch) or [host_arch()]
        return [Platform(os=o, arch=a) for o in os_values for a in arch_values]


@dataclass(frozen=True)
class BuildOptions:
    """Fully resolved inputs for a single `go build` invocation."""
    id: JobID
    output: str
    ldflags: str = ""
    gcflags: str = ""
    asmflags: str = ""
    tags: tuple[str, ...] = ()
    mod_mode: str = ""
    rebuild: bool = False
    race: bool = False
    cgo: bool = False
    shasum: Optional[str] = None
    archive: Optional[str] = None

    @property
    def platform(self) -> Platform:
        return self.id.platform

    @property
    def package(self) -> str:
        return self.id.package
