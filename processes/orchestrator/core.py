from __future__ import annotations

"""Core orchestration logic: resolve a job, record it, run its stages."""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from processes.config.loader import Configuration, default_config_path, load_config
from processes.errors import StageExecutionError
from processes.job.context import build
from processes.job.log import write_job_log
from processes.job.models import Argument, JobDescriptor
from processes.orchestrator.runner import ScriptStageRunner, StageRunner
from processes.orchestrator.stages import STAGE_ORDER, Stage
from processes.params.resolver import load_params, merge
from processes.reporter import Reporter


class RunState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class StageResult:
    name: str
    returncode: int
    log_path: Path | None
    duration_ms: int


@dataclass
class PipelineRun:
    jobid: str
    projectdir: str
    stages: list[StageResult] = field(default_factory=list)
    elapsed_s: float = 0.0

    @property
    def executed(self) -> list[str]:
        return [s.name for s in self.stages]


class PipelineOrchestrator:
    """Runs the enabled stages of one job in fixed order, halting on failure.

    An orchestrator instance drives exactly one run: once it has left
    ``PENDING`` it cannot be started again.
    """

    def __init__(self, runner: StageRunner, reporter: Reporter | None = None) -> None:
        self._runner = runner
        self._reporter = reporter or Reporter.quiet()
        self.state = RunState.PENDING
        self.current: Stage | None = None

    @staticmethod
    def plan(descriptor: JobDescriptor) -> list[Stage]:
        return [s for s in STAGE_ORDER if descriptor.pipeline[s]]

    def run(self, descriptor: JobDescriptor) -> PipelineRun:
        if self.state is not RunState.PENDING:
            raise RuntimeError(f"orchestrator already used (state={self.state.value})")

        start = time.time()
        result = PipelineRun(jobid=descriptor.jobid, projectdir=descriptor.projectdir)
        for stage in self.plan(descriptor):
            self.state = RunState.RUNNING
            self.current = stage
            self._reporter.info("running stage %s", stage.value)
            stage_start = time.time()
            log_path = self._runner.log_path(stage, descriptor)
            try:
                rc = self._runner.invoke(stage, descriptor)
            except OSError as e:
                self.state = RunState.FAILED
                raise StageExecutionError(stage.value, 127, log_path) from e
            except BaseException:
                self.state = RunState.FAILED
                raise
            duration_ms = int((time.time() - stage_start) * 1000)
            result.stages.append(StageResult(stage.value, rc, log_path, duration_ms))
            if rc != 0:
                self.state = RunState.FAILED
                raise StageExecutionError(stage.value, rc, log_path)
            self._reporter.info("stage %s completed in %dms", stage.value, duration_ms)

        self.current = None
        self.state = RunState.COMPLETED
        result.elapsed_s = time.time() - start
        return result


def resolve_job(
    arg: Argument,
    *,
    reporter: Reporter | None = None,
    job_id: str | None = None,
) -> tuple[Configuration, JobDescriptor]:
    """Load config and parameters, merge them with ``arg`` and build the job.

    No project directory is created in ``info`` mode.
    """
    reporter = reporter or Reporter.quiet()
    config_path = Path(arg.configfile) if arg.configfile else default_config_path()
    config = load_config(config_path, reporter=reporter.child("config"))
    params = load_params(
        Path(arg.paramfile) if arg.paramfile else None, reporter=reporter.child("params")
    )
    draft = merge(config, params, arg, reporter=reporter.child("params"))
    descriptor = build(
        draft,
        job_id=job_id,
        create_dir=arg.mode != "info",
        reporter=reporter.child("job"),
    )
    return config, descriptor


def run_job(
    arg: Argument,
    *,
    runner: StageRunner | None = None,
    reporter: Reporter | None = None,
    job_id: str | None = None,
) -> dict[str, Any]:
    """Resolve, log and run one job end-to-end.

    Raises the first error encountered; in that case no later step runs.
    """
    reporter = reporter or Reporter.quiet()
    config, descriptor = resolve_job(arg, reporter=reporter, job_id=job_id)
    plan = PipelineOrchestrator.plan(descriptor)

    if arg.mode == "info":
        return {
            "jobid": descriptor.jobid,
            "plan": [s.value for s in plan],
            "descriptor": descriptor.model_dump(mode="json"),
        }

    write_job_log(arg, config, descriptor, reporter=reporter.child("job"))
    orchestrator = PipelineOrchestrator(
        runner or ScriptStageRunner(reporter.child("runner")),
        reporter.child("orchestrator"),
    )
    run = orchestrator.run(descriptor)
    return {
        "jobid": run.jobid,
        "projectdir": run.projectdir,
        "log": descriptor.log,
        "stages": run.executed,
        "elapsed_s": run.elapsed_s,
    }
