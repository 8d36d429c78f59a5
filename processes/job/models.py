from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from processes.orchestrator.stages import STAGE_ORDER, Stage

Mode = Literal["info", "vcf", "mongodb", "full"]
GenomeName = Literal["hg19", "hg38", "hs37"]

METADATA_DOCUMENTS = (
    "analyses",
    "biosamples",
    "cohorts",
    "datasets",
    "individuals",
    "runs",
)


class _Frozen(BaseModel):  # type: ignore[misc]
    model_config = ConfigDict(frozen=True, extra="forbid")


class BffFiles(_Frozen):
    metadatadir: str
    analyses: str
    biosamples: str
    cohorts: str
    datasets: str
    individuals: str
    runs: str
    genomicVariationsVcf: str


class PipelineFlags(_Frozen):
    vcf2bff: bool = False
    bff2html: bool = False
    bff2mongodb: bool = False

    def __getitem__(self, stage: Stage | str) -> bool:
        name = stage.value if isinstance(stage, Stage) else str(stage)
        return bool(getattr(self, Stage(name).value))

    def enabled(self) -> list[Stage]:
        """Enabled stages in execution order."""
        return [s for s in STAGE_ORDER if self[s]]


class StagePaths(_Frozen):
    vcf2bff: str | None = None
    bff2html: str | None = None
    bff2mongodb: str | None = None

    def __getitem__(self, stage: Stage) -> str | None:
        return getattr(self, stage.value)


class References(_Frozen):
    clinvar: str
    cosmic: str
    dbnsfp: str
    fasta: str


class Tools(_Frozen):
    bash: str = "bash"
    bcftools: str | None = None
    snpeff: str | None = None
    snpsift: str | None = None
    java: str | None = None
    mongoimport: str | None = None
    mongostat: str | None = None
    mongosh: str | None = None


class Argument(_Frozen):
    """Values taken from the command line."""

    mode: Mode
    inputfile: str | None = None
    configfile: str | None = None
    paramfile: str | None = None
    ncpu: int | None = Field(default=None, ge=1)
    debug: int = Field(default=0, ge=0, le=5)
    verbose: bool = False
    overrides: tuple[str, ...] = ()


class JobDescriptor(_Frozen):
    """Fully resolved, immutable record driving one pipeline invocation.

    Every path is absolute. Stages read from this record only.
    """

    jobid: str
    mode: Mode
    projectdir: str
    log: str
    inputfile: str | None
    genome: GenomeName
    datasetid: str
    zip: bool
    ncpu: int
    tmpdir: str
    mem: str
    dbnsfpset: str
    mongodburi: str | None
    references: References
    bff: BffFiles
    gvvcfjson: str
    pipeline: PipelineFlags
    programs: StagePaths
    workdirs: StagePaths
    tools: Tools
