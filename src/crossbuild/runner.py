# runner.py
from __future__ import annotations

import functools
import queue
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, TextIO

from .errors import ConfigError, ExecutionError
from .executor import build_single
from .matrix import expand_matrix, resolve_job, split_skipped, validate_output_template
from .model import BuildParams, JobID, Status
from .module import Module
from .scheduler import Execute, effective_parallelism, schedule
from .ui.console import get_console
from .ui.progress import BuildError, ProgressUI


DEFAULT_OUTPUT_DIR = "./output"


@dataclass
class BuildResult:
    """What a run produced. Per-job failures live here, not in exceptions."""
    output_dir: Path
    jobs: List[JobID] = field(default_factory=list)
    skipped: List[JobID] = field(default_factory=list)
    errors: List[BuildError] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.errors)


# ----------------------------------------------------------------------
# Planning
# ----------------------------------------------------------------------

def locate_packages(module: Module, params: BuildParams) -> List[str]:
    patterns = params.packages or ["."]
    try:
        return module.resolve_packages(*patterns)
    except ExecutionError as e:
        raise ConfigError("failed to locate packages", {"reason": str(e)}) from e
    except FileNotFoundError as e:
        raise ConfigError("go command not found", {"hint": "Install Go or fix PATH."}) from e


def plan(module: Module, params: BuildParams) -> tuple[List[JobID], List[JobID]]:
    """
    Resolve packages and expand the matrix.

    Returns (to_run, skipped); len(to_run) + len(skipped) is the full,
    pre-filter matrix size.
    """
    validate_output_template(params.output_template)
    packages = locate_packages(module, params)
    jobs = expand_matrix(packages, params.platforms())
    return split_skipped(jobs, params.skip_platforms)


def prepare_output_dir(output_dir: str | Path) -> Path:
    out = Path(output_dir).expanduser().resolve()
    try:
        out.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"failed to create output directory: {out}", {"reason": str(e)}) from e
    return out


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def run_build(
    params: BuildParams,
    module: Module,
    *,
    output_dir: str | Path = DEFAULT_OUTPUT_DIR,
    execute: Optional[Execute] = None,
    stream: Optional[TextIO] = None,
) -> BuildResult:
    """
    Build every (package, platform) pair of the matrix.

    The progress display runs on its own thread and is the only code that
    writes progress to `stream`; workers only send it Status messages.

    Raises:
        ConfigError: the request itself is unusable. Nothing has been built.
    """
    console = get_console()

    to_run, skipped = plan(module, params)
    out = prepare_output_dir(output_dir)
    if execute is None:
        execute = functools.partial(build_single, module)

    console.print_run_started(
        module=str(module.path),
        job_count=len(to_run) + len(skipped),
        skipped_count=len(skipped),
        parallelism=effective_parallelism(params.parallelism, len(to_run)),
    )

    options = [resolve_job(params, job, out) for job in to_run]

    statuses: "queue.Queue[Optional[Status]]" = queue.Queue()
    ui = ProgressUI(stream=stream)
    ui_thread = threading.Thread(target=ui.consume, args=(statuses,), name="crossbuild-ui")
    ui_thread.start()

    try:
        schedule(options, skipped, execute, statuses, parallelism=params.parallelism)
    finally:
        statuses.put(None)
        ui_thread.join()

    ui.print_result()
    console.print_debug(f"{len(ui.build_states)} job line(s) rendered")

    return BuildResult(output_dir=out, jobs=to_run, skipped=skipped, errors=ui.errors())
