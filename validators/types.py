"""Types for reference-genome resolution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Genome(Enum):
    """Reference assemblies a job may be annotated against."""

    HG19 = "hg19"
    HG38 = "hg38"
    HS37 = "hs37"


class Artifact(Enum):
    """Per-genome reference artifacts the annotation stage consumes."""

    CLINVAR = "clinvar"
    COSMIC = "cosmic"
    DBNSFP = "dbnsfp"
    FASTA = "fasta"


@dataclass(frozen=True)
class ReferenceSet:
    """Reference file paths resolved for one genome."""

    genome: Genome
    clinvar: str
    cosmic: str
    dbnsfp: str
    fasta: str

    def as_dict(self) -> dict[str, str]:
        return {
            "clinvar": self.clinvar,
            "cosmic": self.cosmic,
            "dbnsfp": self.dbnsfp,
            "fasta": self.fasta,
        }


# Configuration key for every (genome, artifact) pair.
REFERENCE_KEYS: dict[tuple[Genome, Artifact], str] = {
    (Genome.HG19, Artifact.CLINVAR): "hg19clinvar",
    (Genome.HG19, Artifact.COSMIC): "hg19cosmic",
    (Genome.HG19, Artifact.DBNSFP): "hg19dbnsfp",
    (Genome.HG19, Artifact.FASTA): "hg19fasta",
    (Genome.HG38, Artifact.CLINVAR): "hg38clinvar",
    (Genome.HG38, Artifact.COSMIC): "hg38cosmic",
    (Genome.HG38, Artifact.DBNSFP): "hg38dbnsfp",
    (Genome.HG38, Artifact.FASTA): "hg38fasta",
    (Genome.HS37, Artifact.CLINVAR): "hs37clinvar",
    (Genome.HS37, Artifact.COSMIC): "hs37cosmic",
    (Genome.HS37, Artifact.DBNSFP): "hs37dbnsfp",
    (Genome.HS37, Artifact.FASTA): "hs37fasta",
}

missing_pairs = {(g, a) for g in Genome for a in Artifact} - set(REFERENCE_KEYS)
if missing_pairs:  # pragma: no cover - guards edits to the table above
    raise RuntimeError(f"REFERENCE_KEYS incomplete: {sorted(str(p) for p in missing_pairs)}")
del missing_pairs
