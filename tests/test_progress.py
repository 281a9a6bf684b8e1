"""Tests for crossbuild.ui.progress."""

import io
import queue

from crossbuild.model import JobID, Phase, Platform, Status
from crossbuild.ui.progress import ProgressUI

A = JobID(Platform("linux", "amd64"), "a")
B = JobID(Platform("windows", "amd64"), "b")
C = JobID(Platform("darwin", "arm64"), "c")

CYAN, GREEN, RED, YELLOW, BOLD, RESET = (
    "\x1b[36m",
    "\x1b[32m",
    "\x1b[31m",
    "\x1b[33m",
    "\x1b[1m",
    "\x1b[0m",
)


def _redraw(lines_away: int, prefix: str, text: str) -> str:
    return f"\x1b[{lines_away}A\x1b[{len(prefix)}C\x1b[K{text}\x1b[{lines_away}B\r"


def _ui(clock) -> tuple[ProgressUI, io.StringIO]:
    out = io.StringIO()
    return ProgressUI(stream=out, clock=clock), out


class TestLinePrefix:
    def test_platform_right_aligned_to_15(self) -> None:
        assert ProgressUI.line_prefix(A) == "-->     linux/amd64: a ... "
        assert len(ProgressUI.line_prefix(A)) == 27


class TestUpdate:
    def test_first_sight_prints_prefix_then_redraws_same_line(self, clock) -> None:
        ui, out = _ui(clock)
        ui.update(Status(A, Phase.START))

        prefix = ProgressUI.line_prefix(A)
        assert out.getvalue() == prefix + "\n" + _redraw(1, prefix, f"{CYAN}building{RESET}")
        assert ui.num_lines == 1
        assert ui.build_states[A].line == 0

    def test_out_of_order_update_moves_up_by_distance_from_bottom(self, clock) -> None:
        ui, out = _ui(clock)
        ui.update(Status(A, Phase.START))
        ui.update(Status(B, Phase.START))
        ui.update(Status(C, Phase.START))
        out.truncate(0)
        out.seek(0)

        clock.advance(2.5)
        ui.update(Status(A, Phase.SUCCESS))

        prefix = ProgressUI.line_prefix(A)
        assert out.getvalue() == _redraw(3, prefix, f"{GREEN}finished{RESET} (2.5s)")
        assert ui.num_lines == 3

    def test_error_keeps_detail_and_shows_elapsed(self, clock) -> None:
        ui, out = _ui(clock)
        ui.update(Status(A, Phase.START))
        ui.update(Status(B, Phase.START))
        out.truncate(0)
        out.seek(0)

        clock.advance(1.0)
        ui.update(Status(B, Phase.ERROR, "undefined: foo"))

        prefix = ProgressUI.line_prefix(B)
        assert out.getvalue() == _redraw(1, prefix, f"{RED}errored{RESET}  (1.0s)")
        assert ui.build_states[B].error == "undefined: foo"
        assert ui.build_states[B].phase is Phase.ERROR

    def test_skipped_shows_reason(self, clock) -> None:
        ui, out = _ui(clock)
        ui.update(Status(C, Phase.SKIPPED, "included in skip_platforms"))

        prefix = ProgressUI.line_prefix(C)
        assert out.getvalue() == prefix + "\n" + _redraw(
            1, prefix, f"{YELLOW}skipped{RESET}  (included in skip_platforms)"
        )

    def test_line_is_assigned_once(self, clock) -> None:
        ui, _out = _ui(clock)
        ui.update(Status(A, Phase.START))
        ui.update(Status(B, Phase.START))
        ui.update(Status(A, Phase.SUCCESS))
        assert ui.build_states[A].line == 0
        assert ui.build_states[B].line == 1
        assert ui.num_lines == 2


class TestConsume:
    def test_stops_at_sentinel(self, clock) -> None:
        ui, _out = _ui(clock)
        q = queue.Queue()
        q.put(Status(A, Phase.START))
        q.put(Status(A, Phase.SUCCESS))
        q.put(None)
        q.put(Status(B, Phase.START))

        ui.consume(q)

        assert list(ui.build_states) == [A]
        assert q.get_nowait() == Status(B, Phase.START)


class TestPrintResult:
    def test_nothing_printed_without_errors(self, clock) -> None:
        ui, out = _ui(clock)
        ui.update(Status(A, Phase.START))
        ui.update(Status(A, Phase.SUCCESS))
        ui.update(Status(B, Phase.SKIPPED, "unsupported platform"))
        before = out.getvalue()

        ui.print_result()

        assert out.getvalue() == before
        assert ui.errors() == []

    def test_errors_listed_in_line_order_not_completion_order(self, clock) -> None:
        ui, out = _ui(clock)
        for job in (A, B, C):
            ui.update(Status(job, Phase.START))
        ui.update(Status(C, Phase.ERROR, "c broke"))
        ui.update(Status(B, Phase.SUCCESS))
        ui.update(Status(A, Phase.ERROR, "a broke"))
        out.truncate(0)
        out.seek(0)

        ui.print_result()

        assert out.getvalue() == (
            f"\n{BOLD}2 errors occurred:{RESET}\n\n"
            "-->     linux/amd64: a: a broke\n\n"
            "-->    darwin/arm64: c: c broke\n\n"
        )
        assert [e.id for e in ui.errors()] == [A, C]

    def test_singular_header(self, clock) -> None:
        ui, out = _ui(clock)
        ui.update(Status(A, Phase.START))
        ui.update(Status(A, Phase.ERROR, "x"))
        ui.print_result()
        assert f"{BOLD}1 error occurred:{RESET}" in out.getvalue()
