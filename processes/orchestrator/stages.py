"""Closed set of pipeline stages and their static properties."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Stage(Enum):
    VCF2BFF = "vcf2bff"
    BFF2HTML = "bff2html"
    BFF2MONGODB = "bff2mongodb"


@dataclass(frozen=True)
class StageSpec:
    rank: int
    program_key: str  # configuration key naming the stage program
    workdir: str  # subdirectory of the project directory


STAGE_SPECS: dict[Stage, StageSpec] = {
    Stage.VCF2BFF: StageSpec(rank=1, program_key="bash4bff", workdir="vcf"),
    Stage.BFF2HTML: StageSpec(rank=2, program_key="bash4html", workdir="browser"),
    Stage.BFF2MONGODB: StageSpec(rank=3, program_key="bash4mongodb", workdir="mongodb"),
}

if set(STAGE_SPECS) != set(Stage):  # pragma: no cover - guards edits to the table above
    raise RuntimeError("STAGE_SPECS must cover every Stage")

STAGE_ORDER: tuple[Stage, ...] = tuple(sorted(Stage, key=lambda s: STAGE_SPECS[s].rank))

# Stages each CLI mode is allowed to run.
MODE_STAGES: dict[str, frozenset[Stage]] = {
    "info": frozenset(),
    "vcf": frozenset({Stage.VCF2BFF, Stage.BFF2HTML}),
    "mongodb": frozenset({Stage.BFF2MONGODB}),
    "full": frozenset(Stage),
}

# Modes that require an input VCF.
INPUT_MODES = frozenset({"vcf", "full"})


def log_name(stage: Stage) -> str:
    return f"run_{stage.value}.log"


def script_name(stage: Stage) -> str:
    return f"run_{stage.value}.sh"
