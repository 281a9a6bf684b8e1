# cli.py
from __future__ import annotations

import sys
from typing import Optional

import click

from crossbuild.config import (
    load_params,
    parse_archive,
    parse_platform,
    parse_shasum,
    with_overrides,
)
from crossbuild.errors import ConfigError
from crossbuild.model import BuildParams
from crossbuild.module import Module
from crossbuild.runner import DEFAULT_OUTPUT_DIR, plan, run_build
from crossbuild.scheduler import SKIP_REASON
from crossbuild.ui.console import Console, get_console, set_console


def _platforms(ctx, param, values):
    try:
        return [parse_platform(param.name, v) for v in values]
    except ConfigError as e:
        raise click.BadParameter(str(e)) from e


def _platform_overrides(ctx, param, values):
    out = {}
    for v in values:
        key, sep, flags = v.partition("=")
        if not sep:
            raise click.BadParameter(f"expected <os>/<arch>=<flags>, got {v!r}")
        try:
            out[parse_platform(param.name, key)] = flags
        except ConfigError as e:
            raise click.BadParameter(str(e)) from e
    return out


def _split_csv(values) -> list[str]:
    out: list[str] = []
    for v in values:
        out.extend(x for x in v.split(",") if x)
    return out


def matrix_options(fn):
    """Options shared by `build` and `plan`."""
    decorators = [
        click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
                     help="JSON build config; command-line options override it"),
        click.option("--module-dir", default=".", show_default=True, envvar="CROSSBUILD_MODULE_DIR",
                     help="Directory of the Go module to build"),
        click.option("-p", "--package", "packages", multiple=True,
                     help="Package pattern to build (repeatable, default: .)"),
        click.option("--os", "os_values", multiple=True,
                     help="Target OS (repeatable or comma-separated, default: host)"),
        click.option("--arch", "arch_values", multiple=True,
                     help="Target arch (repeatable or comma-separated, default: host)"),
        click.option("--skip-platform", "skip_platforms", multiple=True, callback=_platforms,
                     help="Platform to leave out, as <os>/<arch> (repeatable)"),
    ]
    for d in reversed(decorators):
        fn = d(fn)
    return fn


def _load(config_path: Optional[str], **overrides) -> BuildParams:
    params = load_params(config_path) if config_path else BuildParams()
    return with_overrides(params, **overrides)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """crossbuild: cross-compile Go packages for a matrix of platforms."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@matrix_options
@click.option("-o", "--output-template", default=None,
              help="Binary name template, fields {dir} {os} {arch} (default: {dir}-{os}-{arch})")
@click.option("--output-dir", default=DEFAULT_OUTPUT_DIR, show_default=True, envvar="CROSSBUILD_OUTPUT_DIR",
              help="Directory for built artifacts")
@click.option("--ldflags", default=None, help="Flags passed to go build -ldflags")
@click.option("--platform-ldflags", multiple=True, callback=_platform_overrides,
              help="Per-platform -ldflags, as <os>/<arch>=<flags> (repeatable)")
@click.option("--gcflags", default=None, help="Flags passed to go build -gcflags")
@click.option("--platform-gcflags", multiple=True, callback=_platform_overrides,
              help="Per-platform -gcflags, as <os>/<arch>=<flags> (repeatable)")
@click.option("--asmflags", default=None, help="Flags passed to go build -asmflags")
@click.option("--platform-asmflags", multiple=True, callback=_platform_overrides,
              help="Per-platform -asmflags, as <os>/<arch>=<flags> (repeatable)")
@click.option("--tags", multiple=True, help="Build tags (repeatable or comma-separated)")
@click.option("--mod", "mod_mode", default=None, help="Module download mode (-mod)")
@click.option("--rebuild/--no-rebuild", default=None, help="Force rebuilding of packages (-a)")
@click.option("--race/--no-race", default=None, help="Enable the race detector")
@click.option("--cgo/--no-cgo", default=None, help="Set CGO_ENABLED=1")
@click.option("-j", "--parallelism", type=click.IntRange(min=1), default=None, envvar="CROSSBUILD_PARALLELISM",
              help="Number of builds to run at once (default: 1)")
@click.option("--shasum", default=None, type=click.Choice(["sha1", "sha256"]),
              help="Write a checksum file next to each artifact")
@click.option("--archive", default=None, type=click.Choice(["zip", "tar.gz"]),
              help="Archive each binary")
@click.pass_context
def build(ctx, config_path, module_dir, packages, os_values, arch_values, skip_platforms,
          output_template, output_dir, ldflags, platform_ldflags, gcflags, platform_gcflags,
          asmflags, platform_asmflags, tags, mod_mode, rebuild, race, cgo, parallelism,
          shasum, archive):
    """Build every package for every platform of the matrix."""
    console = get_console()

    try:
        params = _load(
            config_path,
            packages=packages,
            os=_split_csv(os_values),
            arch=_split_csv(arch_values),
            skip_platforms=skip_platforms,
            output_template=output_template,
            ldflags=ldflags,
            platform_ldflags=platform_ldflags,
            gcflags=gcflags,
            platform_gcflags=platform_gcflags,
            asmflags=asmflags,
            platform_asmflags=platform_asmflags,
            tags=_split_csv(tags),
            mod_mode=mod_mode,
            rebuild=rebuild,
            race=race,
            cgo=cgo,
            parallelism=parallelism,
            shasum=parse_shasum(shasum) if shasum else None,
            archive=parse_archive(archive) if archive else None,
        )
        result = run_build(params, Module(module_dir), output_dir=output_dir)
    except ConfigError as e:
        console.print_error(
            "Invalid build configuration",
            e.message,
            details=[f"{k}: {v}" for k, v in e.details.items()],
        )
        sys.exit(1)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    console.print_artifacts(str(result.output_dir))
    if result.failed:
        sys.exit(1)


@cli.command(name="plan")
@matrix_options
@click.pass_context
def plan_cmd(ctx, config_path, module_dir, packages, os_values, arch_values, skip_platforms):
    """Show the build matrix without building anything."""
    console = get_console()

    try:
        params = _load(
            config_path,
            packages=packages,
            os=_split_csv(os_values),
            arch=_split_csv(arch_values),
            skip_platforms=skip_platforms,
        )
        to_run, skipped = plan(Module(module_dir), params)
    except ConfigError as e:
        console.print_error(
            "Invalid build configuration",
            e.message,
            details=[f"{k}: {v}" for k, v in e.details.items()],
        )
        sys.exit(1)

    console.print_header(f"Build matrix ({len(to_run) + len(skipped)} builds)")
    skipped_set = set(skipped)
    for job in sorted(to_run + skipped, key=lambda j: (j.package, j.platform)):
        if job in skipped_set:
            console.print_plan_job_skipped(job.package, str(job.platform), SKIP_REASON)
        else:
            console.print_plan_job(job.package, str(job.platform))


if __name__ == "__main__":
    cli()
