"""Live, in-place progress display for a running build matrix."""

from __future__ import annotations

import queue
import sys
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, TextIO

import click

from ..model import JobID, Phase, Status


@dataclass
class BuildState:
    phase: Optional[Phase] = None
    error: str = ""
    line: int = 0
    start_time: float = 0.0


@dataclass(frozen=True)
class BuildError:
    id: JobID
    error: str


def format_elapsed(seconds: float) -> str:
    return f"{seconds:.1f}s"


class ProgressUI:
    """
    Owns the terminal while a matrix runs.

    Every job gets one line, appended the first time the job is seen. Later
    updates rewrite only the status part of that line, in place, using ANSI
    cursor movement. Only one thread may call update(); everyone else talks
    to the UI by putting Status messages on a queue (see consume()).
    """

    def __init__(self, stream: Optional[TextIO] = None, clock=time.monotonic):
        self.stream = stream if stream is not None else sys.stdout
        self.clock = clock
        self.build_states: Dict[JobID, BuildState] = {}
        self.num_lines = 0

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def consume(self, statuses: "queue.Queue[Optional[Status]]") -> None:
        """Apply updates until a None sentinel arrives."""
        while True:
            status = statuses.get()
            if status is None:
                break
            self.update(status)

    def update(self, status: Status) -> None:
        state = self.build_states.get(status.id)
        if state is None:
            state = BuildState(line=self.num_lines)
            self.num_lines += 1
            self._write(self.line_prefix(status.id) + "\n")
        state.phase = status.phase

        if status.phase is Phase.START:
            state.start_time = self.clock()
            text = click.style("building", fg="cyan")
        elif status.phase is Phase.SUCCESS:
            elapsed = format_elapsed(self.clock() - state.start_time)
            text = f"{click.style('finished', fg='green')} ({elapsed})"
        elif status.phase is Phase.ERROR:
            state.error = status.data
            elapsed = format_elapsed(self.clock() - state.start_time)
            text = f"{click.style('errored', fg='red')}  ({elapsed})"
        else:
            text = f"{click.style('skipped', fg='yellow')}  ({status.data})"

        self.build_states[status.id] = state
        self.set_status_text(status.id, state.line, text)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    @staticmethod
    def line_prefix(job: JobID) -> str:
        return f"--> {str(job.platform):>15}: {job.package} ... "

    def set_status_text(self, job: JobID, line: int, text: str) -> None:
        # the cursor always sits on the empty line below the last job line
        lines_away = self.num_lines - line
        prefix_len = len(self.line_prefix(job))
        self._write(
            f"\x1b[{lines_away}A"   # up to the job's line
            f"\x1b[{prefix_len}C"   # past the prefix
            "\x1b[K"                # clear the old status
            f"{text}"
            f"\x1b[{lines_away}B\r"  # back to the bottom, column 0
        )

    def _write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def errors(self) -> List[BuildError]:
        """Errored jobs, in the order their lines were printed."""
        failed = [(s.line, job, s.error) for job, s in self.build_states.items() if s.phase is Phase.ERROR]
        failed.sort(key=lambda t: t[0])
        return [BuildError(id=job, error=err) for _line, job, err in failed]

    def print_result(self) -> None:
        build_errors = self.errors()
        if not build_errors:
            return

        word = "error" if len(build_errors) == 1 else "errors"
        header = click.style(f"{len(build_errors)} {word} occurred:", bold=True)
        self._write(f"\n{header}\n\n")

        for err in build_errors:
            self._write(f"--> {str(err.id.platform):>15}: {err.id.package}: {err.error}\n\n")
