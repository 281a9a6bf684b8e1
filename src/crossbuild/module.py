# module.py
# Thin wrapper around the Go toolchain for one module directory.
# Everything that shells out to `go` goes through Module.execute so that
# failures consistently carry their stderr.

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .errors import ExecutionError
from .ui.console import get_console


@dataclass(frozen=True)
class Package:
    name: str
    import_path: str


class Module:
    """A Go module checked out at `path`."""

    def __init__(self, path: str | Path = "."):
        self.path = Path(path)

    def execute(self, args: Sequence[str], env: Optional[Dict[str, str]] = None) -> str:
        """
        Run a command inside the module directory and return its stdout.

        Raises:
            ExecutionError: the command exited non-zero (stderr is preserved)
        """
        proc = subprocess.run(
            list(args),
            cwd=str(self.path),
            env=env,
            text=True,
            capture_output=True,
        )
        if proc.returncode != 0:
            raise ExecutionError(
                cmd=shlex.join(args),
                exit_code=proc.returncode,
                stderr=proc.stderr or "",
            )
        return proc.stdout or ""

    def list_packages(self, *patterns: str) -> List[Package]:
        """
        Every package matched by the patterns. Patterns can be relative paths,
        import paths or use the "..." wildcard.
        """
        output = self.execute(
            ["go", "list", "-f", "{{.Name}}|{{.ImportPath}}", *patterns],
            env=os.environ.copy(),
        )

        packages: List[Package] = []
        for line in output.splitlines():
            if not line:
                continue
            name, sep, import_path = line.partition("|")
            if not sep:
                get_console().print_debug(f"Bad line reading packages: {line}")
                continue
            packages.append(Package(name=name, import_path=import_path))
        return packages

    def resolve_packages(self, *patterns: str) -> List[str]:
        """Import paths of the `main` packages (i.e. buildable binaries) only."""
        return [p.import_path for p in self.list_packages(*patterns) if p.name == "main"]
