from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import date
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pipeline.io.files import read_document
from pipeline.io.validate import SCHEMAS_ROOT, load_schema, schema_errors
from processes.errors import ConfigError
from processes.reporter import Reporter
from validators import Genome, missing_reference_keys

REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG = REPO_ROOT / "pipeline" / "defaults" / "config.yaml"

Configuration = Mapping[str, Any]


def _plain(value: Any) -> Any:
    # YAML timestamps and sets have no JSON form; the job log must match memory.
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted((_plain(v) for v in value), key=str)
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def default_config_path() -> Path:
    """``$BEACON_CONFIG`` if set, otherwise the shipped defaults."""
    override = os.environ.get("BEACON_CONFIG")
    return Path(override) if override else DEFAULT_CONFIG


def load_config(path: Path, *, reporter: Reporter | None = None) -> Configuration:
    """Load the system configuration document at ``path``.

    Returns a read-only mapping. Unknown keys are kept as-is. Genomes whose
    reference keys are incomplete only produce an advisory here; the job's
    selected genome is checked when parameters are merged.
    """
    reporter = reporter or Reporter.quiet()
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")
    try:
        raw = read_document(path)
    except Exception as e:
        raise ConfigError(f"Failed to parse config {path}: {e}") from e
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(
            f"Configuration {path} must be a mapping, got {type(raw).__name__}"
        )

    problems = schema_errors(load_schema(SCHEMAS_ROOT / "config.schema.yaml"), raw)
    if problems:
        raise ConfigError(f"Invalid configuration {path}: " + "; ".join(problems))

    for genome in Genome:
        missing = missing_reference_keys(raw, genome)
        if missing:
            reporter.warn(
                "config %s: genome %s unavailable (missing %s)",
                path,
                genome.value,
                ", ".join(missing),
            )

    reporter.debug("loaded %d configuration keys from %s", len(raw), path)
    return MappingProxyType({str(k): _plain(v) for k, v in raw.items()})
