"""Stage runners: how one stage of a job is executed as an external program."""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from pipeline.io.files import ensure_dir
from processes.job.models import JobDescriptor
from processes.orchestrator.stages import Stage, log_name, script_name
from processes.reporter import Reporter


class StageRunner(Protocol):
    def invoke(self, stage: Stage, descriptor: JobDescriptor) -> int:
        """Run ``stage`` to completion and return its exit status."""
        ...

    def log_path(self, stage: Stage, descriptor: JobDescriptor) -> Path | None:
        ...


EnvBuilder = Callable[[JobDescriptor], dict[str, str]]


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _common_env(d: JobDescriptor) -> dict[str, str]:
    return {
        "JOBID": d.jobid,
        "PROJECTDIR": d.projectdir,
        "DATASETID": d.datasetid,
        "GENOME": d.genome,
        "NCPU": str(d.ncpu),
        "TMPDIR": d.tmpdir,
        "ZIP": _flag(d.zip),
        "GVVCFJSON": d.gvvcfjson,
    }


def _vcf2bff_env(d: JobDescriptor) -> dict[str, str]:
    env = {
        "INPUTFILE": d.inputfile or "",
        "FASTA": d.references.fasta,
        "CLINVAR": d.references.clinvar,
        "COSMIC": d.references.cosmic,
        "DBNSFP": d.references.dbnsfp,
        "DBNSFPSET": d.dbnsfpset,
        "MEM": d.mem,
    }
    for name in ("bcftools", "snpeff", "snpsift", "java"):
        env[name.upper()] = getattr(d.tools, name) or ""
    return env


def _bff2html_env(d: JobDescriptor) -> dict[str, str]:
    return {"BROWSERDIR": d.workdirs.bff2html or ""}


def _bff2mongodb_env(d: JobDescriptor) -> dict[str, str]:
    env = {"MONGODBURI": d.mongodburi or ""}
    for name in ("mongoimport", "mongostat", "mongosh"):
        env[name.upper()] = getattr(d.tools, name) or ""
    for name, path in d.bff.model_dump().items():
        env[name.upper()] = path
    return env


STAGE_ENV: dict[Stage, EnvBuilder] = {
    Stage.VCF2BFF: _vcf2bff_env,
    Stage.BFF2HTML: _bff2html_env,
    Stage.BFF2MONGODB: _bff2mongodb_env,
}

if set(STAGE_ENV) != set(Stage):  # pragma: no cover - guards edits to the table above
    raise RuntimeError("STAGE_ENV must cover every Stage")


def stage_env(stage: Stage, descriptor: JobDescriptor) -> dict[str, str]:
    return {**_common_env(descriptor), **STAGE_ENV[stage](descriptor)}


def render_script(stage: Stage, descriptor: JobDescriptor) -> str:
    """Shell script that exports the stage variables and runs its program."""
    program = descriptor.programs[stage]
    if program is None:
        raise ValueError(f"no program configured for stage {stage.value}")
    lines = [
        "#!/usr/bin/env bash",
        f"# {stage.value} for job {descriptor.jobid}",
        "set -eu",
    ]
    for key, value in sorted(stage_env(stage, descriptor).items()):
        lines.append(f"export {key}={shlex.quote(value)}")
    lines.append(f"cd {shlex.quote(str(descriptor.workdirs[stage]))}")
    lines.append(f"exec {shlex.quote(descriptor.tools.bash)} {shlex.quote(program)}")
    return "\n".join(lines) + "\n"


class ScriptStageRunner:
    """Runs each stage as ``bash run_<stage>.sh`` inside the stage work dir.

    Output of the stage goes to ``run_<stage>.log`` next to the script, so a
    failed job can be inspected and the script re-run by hand.
    """

    def __init__(self, reporter: Reporter | None = None) -> None:
        self._reporter = reporter or Reporter.quiet()

    def log_path(self, stage: Stage, descriptor: JobDescriptor) -> Path:
        return Path(str(descriptor.workdirs[stage])) / log_name(stage)

    def invoke(self, stage: Stage, descriptor: JobDescriptor) -> int:
        workdir = Path(str(descriptor.workdirs[stage]))
        ensure_dir(workdir)
        script = workdir / script_name(stage)
        script.write_text(render_script(stage, descriptor), encoding="utf-8")
        script.chmod(0o755)

        log = self.log_path(stage, descriptor)
        self._reporter.debug("running %s (log: %s)", script, log)
        with log.open("w", encoding="utf-8") as out:
            result = subprocess.run(
                [descriptor.tools.bash, str(script)],
                cwd=workdir,
                stdout=out,
                stderr=subprocess.STDOUT,
                check=False,
            )
        return result.returncode
