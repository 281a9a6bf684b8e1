from .model import BuildOptions, BuildParams, JobID, Phase, Platform, Status
from .module import Module
from .runner import BuildResult, run_build
from .errors import ConfigError, ExecutionError

__all__ = [
    "BuildOptions",
    "BuildParams",
    "JobID",
    "Phase",
    "Platform",
    "Status",
    "Module",
    "BuildResult",
    "run_build",
    "ConfigError",
    "ExecutionError",
]
