# scheduler.py
from __future__ import annotations

import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Sequence

from .model import BuildOptions, JobID, Phase, Status


Execute = Callable[[BuildOptions], Status]

SKIP_REASON = "included in skip_platforms"


def effective_parallelism(configured: Optional[int], job_count: int) -> int:
    """min(configured or 1, job_count)"""
    parallelism = configured if configured and configured > 0 else 1
    return min(parallelism, job_count)


def _run_one(
    execute: Execute,
    opts: BuildOptions,
    statuses: "queue.Queue[Optional[Status]]",
    tokens: threading.Semaphore,
) -> None:
    try:
        try:
            status = execute(opts)
        except Exception as e:
            # unexpected failures are still just this job's error
            status = Status(id=opts.id, phase=Phase.ERROR, data=f"{type(e).__name__}: {e}")
        statuses.put(status)
    finally:
        tokens.release()


def schedule(
    jobs: Sequence[BuildOptions],
    skipped: Sequence[JobID],
    execute: Execute,
    statuses: "queue.Queue[Optional[Status]]",
    parallelism: Optional[int] = 1,
) -> int:
    """
    Run every job through `execute`, at most `parallelism` at a time, and put
    every resulting Status on `statuses`.

    - skipped jobs are reported first and never reach a worker
    - a job's START is queued before its worker is submitted
    - dispatch blocks while the pool is saturated
    - failures are reported, never raised; nothing is cancelled

    Returns the effective parallelism. Does not close the queue.
    """
    for job in skipped:
        statuses.put(Status(id=job, phase=Phase.SKIPPED, data=SKIP_REASON))

    limit = effective_parallelism(parallelism, len(jobs))
    if limit == 0:
        return 0

    tokens = threading.Semaphore(limit)
    with ThreadPoolExecutor(max_workers=limit, thread_name_prefix="crossbuild") as pool:
        for opts in jobs:
            tokens.acquire()
            statuses.put(Status(id=opts.id, phase=Phase.START))
            pool.submit(_run_one, execute, opts, statuses, tokens)
        # leaving the block waits for every worker

    return limit
