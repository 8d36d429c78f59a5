"""Reproducibility log written into the project directory before any stage runs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pipeline.io.files import write_json_once
from pipeline.io.validate import SCHEMAS_ROOT, load_schema, validate_obj
from processes.config.loader import Configuration
from processes.errors import JobIOError
from processes.job.models import Argument, JobDescriptor
from processes.reporter import Reporter


def job_log_document(
    arg: Argument, config: Configuration, descriptor: JobDescriptor
) -> dict[str, Any]:
    return {
        "arg": arg.model_dump(mode="json"),
        "config": dict(config),
        "param": descriptor.model_dump(mode="json"),
    }


def write_job_log(
    arg: Argument,
    config: Configuration,
    descriptor: JobDescriptor,
    *,
    reporter: Reporter | None = None,
) -> Path:
    """Write ``{arg, config, param}`` to ``descriptor.log``.

    The log is written exactly once; an existing file is an error, as is any
    OS failure. Both surface as JobIOError.
    """
    reporter = reporter or Reporter.quiet()
    doc = job_log_document(arg, config, descriptor)
    validate_obj(load_schema(SCHEMAS_ROOT / "job_log.schema.yaml"), doc)

    path = Path(descriptor.log)
    try:
        write_json_once(path, doc)
    except FileExistsError as e:
        raise JobIOError(f"Job log already exists, refusing to rewrite: {path}") from e
    except (OSError, TypeError, ValueError) as e:
        raise JobIOError(f"Failed to write job log {path}: {e}") from e
    reporter.info("job log written to %s", path)
    return path


def read_job_log(path: Path) -> dict[str, Any]:
    return dict(json.loads(path.read_text(encoding="utf-8")))
