# executor.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Tuple

from .archive import archive_binary
from .checksum import compute_shasum
from .errors import ExecutionError
from .model import BuildOptions, Phase, Status
from .module import Module


# Printed by cmd/go when GOOS/GOARCH is not a supported combination.
UNSUPPORTED_PLATFORM_SIGNATURE = "cmd/go: unsupported GOOS/GOARCH pair"


def is_unsupported_platform(stderr: str) -> bool:
    """
    True if a failed build only failed because the toolchain does not know
    the target platform.

    NOTE: this is a plain substring match on go's wording and will silently
    stop matching if that message ever changes.
    """
    return UNSUPPORTED_PLATFORM_SIGNATURE in (stderr or "")


def build_command(opts: BuildOptions) -> Tuple[List[str], Dict[str, str]]:
    """Returns (argv, env) for one `go build` invocation."""
    args = ["go", "build", "-o", opts.output]
    if opts.rebuild:
        args.append("-a")
    if opts.mod_mode:
        args.extend(["-mod", opts.mod_mode])
    if opts.race:
        args.append("-race")
    if opts.tags:
        args.extend(["-tags", ",".join(opts.tags)])
    if opts.ldflags:
        args.extend(["-ldflags", opts.ldflags])
    if opts.gcflags:
        args.extend(["-gcflags", opts.gcflags])
    if opts.asmflags:
        args.extend(["-asmflags", opts.asmflags])
    args.append(opts.package)

    env = os.environ.copy()
    env.update(
        {
            "GOOS": opts.platform.os,
            "GOARCH": opts.platform.arch,
            "CGO_ENABLED": "1" if opts.cgo else "0",
        }
    )
    return args, env


def _post_process(opts: BuildOptions) -> Path:
    artifact = Path(opts.output)
    if opts.archive:
        artifact = archive_binary(artifact, opts.archive)
    if opts.shasum:
        compute_shasum(artifact, opts.shasum)
    return artifact


def build_single(module: Module, opts: BuildOptions) -> Status:
    """
    Build one (package, platform) pair and classify the outcome.

    Never raises for build failures: the result is always a terminal Status,
    so it is safe to call from many worker threads at once.
    """
    args, env = build_command(opts)
    try:
        module.execute(args, env=env)
    except ExecutionError as e:
        if is_unsupported_platform(e.stderr):
            return Status(id=opts.id, phase=Phase.SKIPPED, data="unsupported platform")
        return Status(id=opts.id, phase=Phase.ERROR, data=str(e))
    except FileNotFoundError:
        return Status(
            id=opts.id,
            phase=Phase.ERROR,
            data="go command not found. Install Go or fix PATH.",
        )

    try:
        _post_process(opts)
    except (OSError, ValueError) as e:
        return Status(id=opts.id, phase=Phase.ERROR, data=str(e))

    return Status(id=opts.id, phase=Phase.SUCCESS)
