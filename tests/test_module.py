"""Tests for crossbuild.module."""

from pathlib import Path
from unittest.mock import patch

import pytest

from crossbuild.errors import ExecutionError
from crossbuild.module import Module, Package

GO_LIST_OUTPUT = "\n".join(
    [
        "main|github.com/abc/def/foo",
        "other|github.com/abc/def/foo/other",
        "this line is broken",
        "main|github.com/abc/def/foo/tool",
        "",
    ]
)


def _completed(returncode: int = 0, stdout: str = "", stderr: str = ""):
    return type("R", (), {"returncode": returncode, "stdout": stdout, "stderr": stderr})()


class TestModuleExecute:
    def test_runs_in_module_dir(self, tmp_path: Path) -> None:
        with patch("crossbuild.module.subprocess.run") as m_run:
            m_run.return_value = _completed(stdout="ok\n")
            out = Module(tmp_path).execute(["go", "version"])
        assert out == "ok\n"
        assert m_run.call_args.kwargs["cwd"] == str(tmp_path)
        assert m_run.call_args.kwargs["capture_output"] is True

    def test_failure_raises_with_stderr(self, tmp_path: Path) -> None:
        with patch("crossbuild.module.subprocess.run") as m_run:
            m_run.return_value = _completed(returncode=2, stderr="boom\n")
            with pytest.raises(ExecutionError) as exc_info:
                Module(tmp_path).execute(["go", "build", "./..."])
        err = exc_info.value
        assert err.exit_code == 2
        assert err.stderr == "boom\n"
        assert "boom" in str(err)
        assert "go build ./..." in str(err)


class TestResolvePackages:
    def test_lists_with_name_and_import_path(self) -> None:
        with patch("crossbuild.module.subprocess.run") as m_run:
            m_run.return_value = _completed(stdout=GO_LIST_OUTPUT)
            pkgs = Module(".").list_packages("./foo/...")
        (cmd,) = m_run.call_args[0]
        assert cmd == ["go", "list", "-f", "{{.Name}}|{{.ImportPath}}", "./foo/..."]
        assert pkgs == [
            Package("main", "github.com/abc/def/foo"),
            Package("other", "github.com/abc/def/foo/other"),
            Package("main", "github.com/abc/def/foo/tool"),
        ]

    def test_only_main_packages_are_buildable(self) -> None:
        with patch("crossbuild.module.subprocess.run") as m_run:
            m_run.return_value = _completed(stdout=GO_LIST_OUTPUT)
            paths = Module(".").resolve_packages("./foo/...", "./bar/...")
        assert paths == ["github.com/abc/def/foo", "github.com/abc/def/foo/tool"]
        (cmd,) = m_run.call_args[0]
        assert cmd[-2:] == ["./foo/...", "./bar/..."]

    def test_go_list_failure_propagates(self) -> None:
        with patch("crossbuild.module.subprocess.run") as m_run:
            m_run.return_value = _completed(returncode=1, stderr="no Go files in /x\n")
            with pytest.raises(ExecutionError, match="no Go files"):
                Module(".").resolve_packages(".")
