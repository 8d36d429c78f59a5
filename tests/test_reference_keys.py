from __future__ import annotations

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from processes.errors import PathResolutionError
from validators import (
    REFERENCE_KEYS,
    Artifact,
    Genome,
    parse_genome,
    reference_key,
    resolve_references,
)

GENOMES = ("hg19", "hg38", "hs37")
ARTIFACTS = ("clinvar", "cosmic", "dbnsfp", "fasta")


def reference_entries() -> dict[str, str]:
    return {f"{g}{a}": f"/refs/{g}/{a}.gz" for g in GENOMES for a in ARTIFACTS}


def test_table_covers_every_pair():
    assert len(REFERENCE_KEYS) == len(Genome) * len(Artifact)
    assert REFERENCE_KEYS[(Genome.HG38, Artifact.DBNSFP)] == "hg38dbnsfp"


@given(st.sampled_from(list(Genome)), st.sampled_from(list(Artifact)))
@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
def test_resolved_reference_is_config_value(genome: Genome, artifact: Artifact):
    config = reference_entries()
    refs = resolve_references(config, genome)
    key = f"{genome.value}{artifact.value}"
    assert reference_key(genome, artifact) == key
    assert getattr(refs, artifact.value) == config[key]


@pytest.mark.parametrize("value", ["hg18", "HG19", "", None, "grch38"])
def test_invalid_genome(value):
    with pytest.raises(PathResolutionError, match="Invalid genome"):
        parse_genome(value)


def test_missing_keys_are_all_reported():
    config = reference_entries()
    del config["hg19fasta"]
    config["hg19cosmic"] = ""
    with pytest.raises(PathResolutionError) as ei:
        resolve_references(config, Genome.HG19)
    assert "hg19fasta" in str(ei.value)
    assert "hg19cosmic" in str(ei.value)


def test_other_genomes_unaffected_by_missing_key():
    config = reference_entries()
    del config["hg19fasta"]
    assert resolve_references(config, Genome.HG38).fasta == "/refs/hg38/fasta.gz"
