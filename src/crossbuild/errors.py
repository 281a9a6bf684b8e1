# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class ConfigError(Exception):
    """
    A problem with the build request itself (bad template, unreadable config,
    unresolvable packages, ...). Raised before any job is dispatched.
    """
    message: str
    details: Dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [self.message]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class ExecutionError(Exception):
    """A subprocess exited unsuccessfully; keeps its stderr for classification."""
    cmd: str
    exit_code: int
    stderr: str = ""

    def __str__(self) -> str:
        head = f"{self.cmd!r} exited with status {self.exit_code}"
        if self.stderr:
            return f"{head}\n{self.stderr.rstrip()}"
        return head
