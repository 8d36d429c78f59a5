"""Reference-genome validation module."""

from .reference_keys import (
    missing_reference_keys,
    parse_genome,
    reference_key,
    resolve_references,
)
from .types import REFERENCE_KEYS, Artifact, Genome, ReferenceSet

__all__ = [
    "parse_genome",
    "reference_key",
    "missing_reference_keys",
    "resolve_references",
    "Genome",
    "Artifact",
    "ReferenceSet",
    "REFERENCE_KEYS",
]
