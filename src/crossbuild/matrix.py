# matrix.py
from __future__ import annotations

import posixpath
import string
from pathlib import Path, PurePath
from typing import Dict, Iterable, List, Sequence, Tuple

from .errors import ConfigError
from .model import BuildOptions, BuildParams, JobID, Platform


TEMPLATE_FIELDS = ("dir", "os", "arch")


# ---------------------------------------------------------------------
# Expansion
# ---------------------------------------------------------------------

def expand_matrix(packages: Sequence[str], platforms: Sequence[Platform]) -> List[JobID]:
    """
    Cartesian product of packages x platforms, package-major.

    Example:
        expand_matrix(["a", "b"], [linux/amd64, darwin/arm64])
        -> a linux/amd64, a darwin/arm64, b linux/amd64, b darwin/arm64
    """
    return [JobID(platform=p, package=pkg) for pkg in packages for p in platforms]


def split_skipped(
    jobs: Iterable[JobID],
    skip_platforms: Iterable[Platform],
) -> Tuple[List[JobID], List[JobID]]:
    """
    Returns (to_run, skipped). A skip entry matches on (os, arch) only, so it
    applies to every package. Relative order is preserved in both lists.
    """
    skip = set(skip_platforms)
    to_run: List[JobID] = []
    skipped: List[JobID] = []
    for j in jobs:
        (skipped if j.platform in skip else to_run).append(j)
    return to_run, skipped


# ---------------------------------------------------------------------
# Per-job resolution
# ---------------------------------------------------------------------

def validate_output_template(template: str) -> None:
    """Reject templates that would fail to render for any job."""
    if not template:
        raise ConfigError("invalid output template: template is empty")
    try:
        parsed = list(string.Formatter().parse(template))
    except ValueError as e:
        raise ConfigError(f"invalid output template: {e}", {"template": template}) from e

    for _literal, field_name, _spec, _conv in parsed:
        if field_name is None:
            continue
        if field_name not in TEMPLATE_FIELDS:
            raise ConfigError(
                f"invalid output template: unknown field {{{field_name}}}",
                {"template": template, "allowed": ", ".join(f"{{{f}}}" for f in TEMPLATE_FIELDS)},
            )

    # format specs and conversions only fail when rendered
    try:
        rendered = template.format(dir="app", os="linux", arch="amd64")
    except (ValueError, KeyError, IndexError) as e:
        raise ConfigError(f"invalid output template: {e}", {"template": template}) from e

    path = PurePath(rendered)
    if path.is_absolute() or rendered.startswith(("/", "\\")) or ".." in path.parts:
        raise ConfigError(
            "invalid output template: must stay inside the output directory",
            {"template": template},
        )


def binary_name(template: str, job: JobID) -> str:
    name = template.format(
        dir=posixpath.basename(job.package.rstrip("/")),
        os=job.platform.os,
        arch=job.platform.arch,
    )
    if job.platform.os == "windows":
        name += ".exe"
    return name


def value_or_override(value: str, overrides: Dict[Platform, str], platform: Platform) -> str:
    if platform in overrides:
        return overrides[platform]
    return value


def resolve_job(params: BuildParams, job: JobID, output_dir: str | Path) -> BuildOptions:
    """Merge global settings with any exact-platform override for one job."""
    p = job.platform
    return BuildOptions(
        id=job,
        output=str(Path(output_dir) / binary_name(params.output_template, job)),
        ldflags=value_or_override(params.ldflags, params.platform_ldflags, p),
        gcflags=value_or_override(params.gcflags, params.platform_gcflags, p),
        asmflags=value_or_override(params.asmflags, params.platform_asmflags, p),
        tags=tuple(params.tags),
        mod_mode=params.mod_mode,
        rebuild=params.rebuild,
        race=params.race,
        cgo=params.cgo,
        shasum=params.shasum,
        archive=params.archive,
    )
