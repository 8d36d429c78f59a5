"""Error taxonomy shared by the resolution and orchestration layers."""

from __future__ import annotations

from pathlib import Path


class PipelineError(Exception):
    """Base class for every failure the pipeline reports as fatal."""


class ConfigError(PipelineError, ValueError):
    """System configuration document is missing or malformed."""


class ParameterError(PipelineError, ValueError):
    """Parameter document is malformed or a mode-required field is missing."""


class PathResolutionError(PipelineError, ValueError):
    """Genome selector is invalid or a reference key is absent from config."""


class JobIOError(PipelineError, OSError):
    """Project directory creation or job log write failed."""


class StageExecutionError(PipelineError, RuntimeError):
    def __init__(self, stage: str, returncode: int, log_path: Path | None) -> None:
        self.stage = stage
        self.returncode = returncode
        self.log_path = log_path
        msg = f"stage {stage} failed (exit={returncode})"
        if log_path is not None:
            msg += f". Please check this file: {log_path}"
        super().__init__(msg)
