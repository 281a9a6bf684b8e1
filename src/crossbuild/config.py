# config.py
# Loading a build request from a JSON file. Keys mirror the CLI options:
#
#   {
#     "package": ["./cmd/..."],            # string or list
#     "os": ["linux", "darwin"],           # string or list
#     "arch": "amd64",                     # string or list
#     "skip_platforms": ["darwin/386"],
#     "output_template": "{dir}-{os}-{arch}",
#     "ldflags": "-s -w",
#     "platform_ldflags": {"windows/amd64": "-H windowsgui"},
#     "tags": ["netgo"], "mod": "vendor",
#     "rebuild": false, "race": false, "cgo": false,
#     "parallelism": 4,
#     "shasum": true,                      # true (= sha1), "sha1" or "sha256"
#     "archive": "tar.gz"                  # "zip" or "tar.gz"
#   }

from __future__ import annotations

import json
from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from .archive import ARCHIVERS
from .checksum import HASHERS
from .errors import ConfigError
from .model import BuildParams, Platform


_KEYS = {
    "package",
    "os",
    "arch",
    "skip_platforms",
    "output_template",
    "ldflags",
    "platform_ldflags",
    "gcflags",
    "platform_gcflags",
    "asmflags",
    "platform_asmflags",
    "tags",
    "mod",
    "rebuild",
    "race",
    "cgo",
    "parallelism",
    "shasum",
    "archive",
}


def _one_or_many(key: str, value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"{key}: must be either a string or a list of strings")


def parse_platform(key: str, value: Any) -> Platform:
    if not isinstance(value, str):
        raise ConfigError(f"{key}: platform must be a string")
    try:
        return Platform.parse(value)
    except ValueError as e:
        raise ConfigError(f"{key}: {e}") from e


def _platform_map(key: str, value: Any) -> Dict[Platform, str]:
    if not isinstance(value, dict):
        raise ConfigError(f"{key}: must be an object keyed by \"<os>/<arch>\"")
    out: Dict[Platform, str] = {}
    for k, v in value.items():
        if not isinstance(v, str):
            raise ConfigError(f"{key}[{k}]: must be a string")
        out[parse_platform(key, k)] = v
    return out


def _string(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{key}: must be a string")
    return value


def _bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{key}: must be a boolean")
    return value


def parse_shasum(value: Any) -> Optional[str]:
    """true -> sha1, false/"" -> disabled, otherwise an algorithm name."""
    if isinstance(value, bool):
        return "sha1" if value else None
    if isinstance(value, str):
        if not value:
            return None
        if value not in HASHERS:
            raise ConfigError(f"invalid shasum algorithm: {value}", {"allowed": ", ".join(HASHERS)})
        return value
    raise ConfigError("shasum: must be either a bool or a string")


def parse_archive(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if not isinstance(value, str) or value not in ARCHIVERS:
        raise ConfigError(f"invalid archive format: {value}", {"allowed": ", ".join(ARCHIVERS)})
    return value


def parse_parallelism(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError("parallelism: must be an integer")
    return value


def params_from_dict(data: Dict[str, Any]) -> BuildParams:
    if not isinstance(data, dict):
        raise ConfigError("config must be a JSON object")
    unknown = sorted(set(data) - _KEYS)
    if unknown:
        raise ConfigError(f"unknown config key(s): {', '.join(unknown)}")

    params = BuildParams()
    if "package" in data:
        params.packages = _one_or_many("package", data["package"])
    if "os" in data:
        params.os = _one_or_many("os", data["os"])
    if "arch" in data:
        params.arch = _one_or_many("arch", data["arch"])
    if "skip_platforms" in data:
        skip = data["skip_platforms"]
        if not isinstance(skip, list):
            raise ConfigError("skip_platforms: must be a list of \"<os>/<arch>\" strings")
        params.skip_platforms = [parse_platform("skip_platforms", s) for s in skip]
    if "output_template" in data:
        params.output_template = _string("output_template", data["output_template"])

    for flag in ("ldflags", "gcflags", "asmflags"):
        if flag in data:
            setattr(params, flag, _string(flag, data[flag]))
        per_platform = f"platform_{flag}"
        if per_platform in data:
            setattr(params, per_platform, _platform_map(per_platform, data[per_platform]))

    if "tags" in data:
        params.tags = _one_or_many("tags", data["tags"])
    if "mod" in data:
        params.mod_mode = _string("mod", data["mod"])
    for flag in ("rebuild", "race", "cgo"):
        if flag in data:
            setattr(params, flag, _bool(flag, data[flag]))

    if "parallelism" in data:
        params.parallelism = parse_parallelism(data["parallelism"])
    if "shasum" in data:
        params.shasum = parse_shasum(data["shasum"])
    if "archive" in data:
        params.archive = parse_archive(data["archive"])

    return params


def load_params(path: str | Path) -> BuildParams:
    """
    Load a BuildParams from a JSON file.

    Raises:
        ConfigError: file missing/unreadable, not JSON, or invalid values
    """
    cfg_path = Path(path).expanduser()
    try:
        text = cfg_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"could not read config file: {cfg_path}", {"reason": str(e)}) from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"config file is not valid JSON: {cfg_path}", {"reason": str(e)}) from e
    return params_from_dict(data)


def with_overrides(params: BuildParams, **overrides: Any) -> BuildParams:
    """
    Return a copy with every override that is not None / empty applied.
    Used to layer CLI options over a config file.
    """
    names = {f.name for f in fields(BuildParams)}
    changes = {}
    for k, v in overrides.items():
        if k not in names:
            raise TypeError(f"unknown BuildParams field: {k}")
        if v is None or (isinstance(v, (list, tuple, dict)) and not v):
            continue
        changes[k] = list(v) if isinstance(v, tuple) else v
    return replace(params, **changes)
