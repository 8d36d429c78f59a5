"""Genome selector and reference-key resolution against a configuration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from processes.errors import PathResolutionError

from .types import REFERENCE_KEYS, Artifact, Genome, ReferenceSet


def parse_genome(value: Any) -> Genome:
    """Return the :class:`Genome` for ``value`` or raise PathResolutionError."""
    try:
        return Genome(str(value))
    except ValueError as e:
        allowed = ", ".join(g.value for g in Genome)
        raise PathResolutionError(
            f"Invalid genome {value!r}; expected one of: {allowed}"
        ) from e


def reference_key(genome: Genome, artifact: Artifact) -> str:
    return REFERENCE_KEYS[(genome, artifact)]


def missing_reference_keys(config: Mapping[str, Any], genome: Genome) -> list[str]:
    """Configuration keys for ``genome`` that are absent or empty."""
    return [
        reference_key(genome, artifact)
        for artifact in Artifact
        if config.get(reference_key(genome, artifact)) in (None, "")
    ]


def resolve_references(config: Mapping[str, Any], genome: Genome) -> ReferenceSet:
    """Look up every reference artifact for ``genome``.

    Pure function with no I/O. Fails with PathResolutionError listing every
    missing key, not only the first one.
    """
    missing = missing_reference_keys(config, genome)
    if missing:
        raise PathResolutionError(
            f"Configuration lacks reference key(s) for genome {genome.value}: "
            f"{', '.join(missing)}"
        )
    values = {a.value: str(config[reference_key(genome, a)]) for a in Artifact}
    return ReferenceSet(genome=genome, **values)
