"""Pytest fixtures for crossbuild tests."""

from __future__ import annotations

from typing import Dict, List

import pytest

from crossbuild.errors import ExecutionError
from crossbuild.model import BuildOptions, JobID, Platform
from crossbuild.module import Module
from crossbuild.ui.console import Console, set_console


class FakeModule(Module):
    """
    Module double: package patterns resolve from a dict, and every executed
    command is recorded instead of run.
    """

    def __init__(self, packages: Dict[str, List[str]] | None = None, fail_with: ExecutionError | None = None):
        super().__init__(".")
        self.packages = {".": ["example.com/app"]} if packages is None else packages
        self.fail_with = fail_with
        self.cmds: List[tuple[list[str], dict]] = []

    def resolve_packages(self, *patterns: str) -> List[str]:
        out: List[str] = []
        for pat in patterns:
            if pat not in self.packages:
                raise ExecutionError(cmd="go list", exit_code=1, stderr=f"missing packages definition for {pat!r}")
            out.extend(self.packages[pat])
        return out

    def execute(self, args, env=None) -> str:
        self.cmds.append((list(args), dict(env or {})))
        if self.fail_with is not None:
            raise self.fail_with
        return ""


@pytest.fixture(autouse=True)
def quiet_console():
    """Fresh, non-debug console for every test."""
    set_console(Console(debug=False))
    yield


@pytest.fixture
def fake_module():
    return FakeModule


@pytest.fixture
def make_options():
    def _make(package: str = "example.com/app", os: str = "linux", arch: str = "amd64", **kw) -> BuildOptions:
        job = JobID(platform=Platform(os=os, arch=arch), package=package)
        kw.setdefault("output", f"output/{package.rsplit('/', 1)[-1]}-{os}-{arch}")
        return BuildOptions(id=job, **kw)

    return _make


class FakeClock:
    """Deterministic stand-in for time.monotonic."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
