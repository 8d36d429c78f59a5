from __future__ import annotations

import hashlib
import json
import os
import shutil
import time
from datetime import datetime, timezone
from pathlib import Path

from pipeline.io.files import ensure_dir
from processes.errors import JobIOError
from processes.job.models import BffFiles, JobDescriptor, References, StagePaths, Tools
from processes.orchestrator.stages import STAGE_ORDER, STAGE_SPECS, Stage
from processes.params.resolver import JobDraft
from processes.reporter import Reporter

LOG_NAME = "log.json"


def _mint_job_id(seed_material: str) -> str:
    """Job id in the form YYYYMMDD_HHMMSS_<shorthash>."""
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    material = f"{seed_material}|{os.getpid()}|{time.time_ns()}"
    short = hashlib.sha256(material.encode("utf-8")).hexdigest()[:8]
    return f"{ts}_{short}"


def _abspath(value: str) -> str:
    return str(Path(value).expanduser().resolve())


def _abs_executable(value: str) -> str:
    # Bare command names are looked up on PATH; unknown names are kept as-is.
    if os.sep in value or value.startswith(("~", ".")):
        return _abspath(value)
    found = shutil.which(value)
    return str(Path(found).resolve()) if found else value


def _bff_paths(draft: JobDraft) -> BffFiles:
    base = Path(draft.bff.metadatadir).expanduser().resolve()
    files = {
        name: str(base / value)
        for name, value in draft.bff.model_dump().items()
        if name != "metadatadir"
    }
    return BffFiles(metadatadir=str(base), **files)


def build(
    draft: JobDraft,
    *,
    job_id: str | None = None,
    create_dir: bool = True,
    reporter: Reporter | None = None,
) -> JobDescriptor:
    """Turn a merged draft into the final JobDescriptor.

    Creates ``<projectdir>_<job_id>`` (idempotent) unless ``create_dir`` is
    False. Raises JobIOError if the directory cannot be created.
    """
    reporter = reporter or Reporter.quiet()
    if job_id is None:
        seed = json.dumps(draft.model_dump(mode="json"), sort_keys=True)
        job_id = _mint_job_id(seed)

    projectdir = Path(f"{draft.projectdir}_{job_id}").expanduser().resolve()
    if create_dir:
        try:
            ensure_dir(projectdir)
        except OSError as e:
            raise JobIOError(f"Cannot create project directory {projectdir}: {e}") from e
        reporter.info("project directory %s", projectdir)

    workdirs = {s.value: str(projectdir / STAGE_SPECS[s].workdir) for s in STAGE_ORDER}
    bff = _bff_paths(draft)
    if draft.pipeline[Stage.VCF2BFF]:
        # bff2html / bff2mongodb consume what vcf2bff writes
        gvvcfjson = str(Path(workdirs["vcf2bff"]) / Path(bff.genomicVariationsVcf).name)
    else:
        gvvcfjson = bff.genomicVariationsVcf

    programs = {
        name: _abspath(path)
        for name, path in draft.programs.model_dump().items()
        if path is not None
    }
    tools = {
        name: _abs_executable(value)
        for name, value in draft.tools.model_dump().items()
        if value is not None
    }

    return JobDescriptor(
        jobid=job_id,
        mode=draft.mode,
        projectdir=str(projectdir),
        log=str(projectdir / LOG_NAME),
        inputfile=_abspath(draft.inputfile) if draft.inputfile else None,
        genome=draft.genome,
        datasetid=draft.datasetid,
        zip=draft.zip,
        ncpu=draft.ncpu,
        tmpdir=_abspath(draft.tmpdir),
        mem=draft.mem,
        dbnsfpset=draft.dbnsfpset,
        mongodburi=draft.mongodburi,
        references=References(
            **{k: _abspath(v) for k, v in draft.references.model_dump().items()}
        ),
        bff=bff,
        gvvcfjson=gvvcfjson,
        pipeline=draft.pipeline,
        programs=StagePaths(**programs),
        workdirs=StagePaths(**workdirs),
        tools=Tools(**tools),
    )
