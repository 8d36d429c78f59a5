from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict

from pipeline.io.files import read_document
from pipeline.io.validate import SCHEMAS_ROOT, load_schema, schema_errors
from processes.config.loader import Configuration
from processes.errors import ParameterError, PathResolutionError
from processes.job.models import (
    Argument,
    BffFiles,
    GenomeName,
    Mode,
    PipelineFlags,
    References,
    StagePaths,
    Tools,
)
from processes.orchestrator.stages import (
    INPUT_MODES,
    MODE_STAGES,
    STAGE_ORDER,
    STAGE_SPECS,
    Stage,
)
from processes.reporter import Reporter
from validators import parse_genome, resolve_references

REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_PARAMS = REPO_ROOT / "pipeline" / "defaults" / "param.yaml"

Parameters = Mapping[str, Any]

# Scalar parameters, resolved CLI > parameter file > configuration > built-in.
SCALAR_KEYS = (
    "datasetid",
    "genome",
    "projectdir",
    "zip",
    "ncpu",
    "tmpdir",
    "mem",
    "dbnsfpset",
    "inputfile",
)
# Scalars the system configuration may provide a site-wide value for.
CONFIG_DEFAULTABLE = frozenset({"genome", "projectdir", "ncpu", "tmpdir", "mem", "dbnsfpset"})
NESTED_KEYS = ("bff", "pipeline")
DBNSFP_SETS = ("all", "ega")


class JobDraft(BaseModel):  # type: ignore[misc]
    """Merged values for one job before it owns a project directory."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: Mode
    inputfile: str | None
    genome: GenomeName
    datasetid: str
    projectdir: str
    zip: bool
    ncpu: int
    tmpdir: str
    mem: str
    dbnsfpset: str
    mongodburi: str | None
    references: References
    bff: BffFiles
    pipeline: PipelineFlags
    programs: StagePaths
    tools: Tools


def _coerce_scalar(val: str) -> int | float | bool | str:
    lower = val.lower()
    if lower in ("true", "false"):
        return lower == "true"
    try:
        if "." in val:
            return float(val)
        return int(val)
    except ValueError:
        return val


def parse_overrides(items: Sequence[str] | None) -> dict[str, Any]:
    """Turn ``key=value`` / ``section.key=value`` strings into a nested dict."""
    out: dict[str, Any] = {}
    for item in items or ():
        if "=" not in item:
            raise ParameterError(f"Override {item!r} must look like key=value")
        k, v = item.split("=", 1)
        section, _, sub = k.strip().partition(".")
        value = _coerce_scalar(v.strip())
        if sub:
            out.setdefault(section, {})[sub] = value
        else:
            out[section] = value
    return out


def _read_params(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ParameterError(f"Parameter file not found: {path}")
    try:
        raw = read_document(path)
    except Exception as e:
        raise ParameterError(f"Failed to parse parameter file {path}: {e}") from e
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ParameterError(
            f"Parameter file {path} must be a mapping, got {type(raw).__name__}"
        )
    problems = schema_errors(load_schema(SCHEMAS_ROOT / "param.schema.yaml"), raw)
    if problems:
        raise ParameterError(f"Invalid parameter file {path}: " + "; ".join(problems))
    return raw


def load_params(path: Path | None, *, reporter: Reporter | None = None) -> Parameters:
    """Load the per-job parameter document; ``None`` means no document."""
    reporter = reporter or Reporter.quiet()
    if path is None:
        return MappingProxyType({})
    raw = _read_params(path)
    known = set(SCALAR_KEYS) | set(NESTED_KEYS)
    for key in sorted(set(raw) - known):
        reporter.debug("parameter %r is not used by the orchestrator; ignored", key)
    return MappingProxyType(raw)


def load_default_params() -> Parameters:
    return MappingProxyType(_read_params(DEFAULT_PARAMS))


def _pick(key: str, *layers: Mapping[str, Any]) -> Any:
    for layer in layers:
        value = layer.get(key)
        if value is not None:
            return value
    return None


def _merge_layers(
    config: Configuration,
    params: Parameters,
    cli: Mapping[str, Any],
    defaults: Parameters,
) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    site = {k: v for k, v in config.items() if k in CONFIG_DEFAULTABLE}
    for key in SCALAR_KEYS:
        merged[key] = _pick(key, cli, params, site, defaults)
    for key in NESTED_KEYS:
        layers = [
            layer.get(key) if isinstance(layer.get(key), Mapping) else {}
            for layer in (cli, params, defaults)
        ]
        subkeys = [k for layer in reversed(layers) for k in layer]
        merged[key] = {k: _pick(k, *layers) for k in dict.fromkeys(subkeys)}
    return merged


def _required_key(config: Configuration, key: str, stage: Stage) -> str:
    value = config.get(key)
    if value in (None, ""):
        raise PathResolutionError(
            f"Configuration lacks key {key!r} required by stage {stage.value}"
        )
    return str(value)


def merge(
    config: Configuration,
    params: Parameters,
    arg: Argument,
    *,
    reporter: Reporter | None = None,
) -> JobDraft:
    """Merge configuration, parameters and CLI arguments into a JobDraft.

    Pure function: reads the filesystem only to check that the input file
    exists. Raises ParameterError, PathResolutionError.
    """
    reporter = reporter or Reporter.quiet()

    cli = parse_overrides(arg.overrides)
    for key in sorted(set(cli) - set(SCALAR_KEYS) - set(NESTED_KEYS)):
        reporter.warn("override %r does not match any parameter; ignored", key)
    if arg.inputfile is not None:
        cli["inputfile"] = arg.inputfile
    if arg.ncpu is not None:
        cli["ncpu"] = arg.ncpu

    merged = _merge_layers(config, params, cli, load_default_params())
    problems = schema_errors(
        load_schema(SCHEMAS_ROOT / "param.schema.yaml"),
        {k: v for k, v in merged.items() if v is not None},
    )
    if problems:
        raise ParameterError("Invalid parameters: " + "; ".join(problems))

    genome = parse_genome(merged["genome"])
    refs = resolve_references(config, genome)

    ncpu = merged["ncpu"]
    if not isinstance(ncpu, int) or isinstance(ncpu, bool) or ncpu < 1:
        raise ParameterError(f"ncpu must be a positive integer, got {ncpu!r}")
    if merged["dbnsfpset"] not in DBNSFP_SETS:
        raise ParameterError(
            f"dbnsfpset must be one of {', '.join(DBNSFP_SETS)}, got {merged['dbnsfpset']!r}"
        )

    requested = PipelineFlags(**merged["pipeline"])
    allowed = MODE_STAGES[arg.mode]
    for stage in requested.enabled():
        if stage not in allowed:
            reporter.warn("stage %s is not run in mode %s; skipped", stage.value, arg.mode)
    pipeline = PipelineFlags(
        **{s.value: requested[s] and s in allowed for s in STAGE_ORDER}
    )

    inputfile = merged["inputfile"]
    if arg.mode in INPUT_MODES:
        if not inputfile:
            raise ParameterError(f"Mode {arg.mode} requires an input file (-i)")
        if not Path(inputfile).is_file():
            raise ParameterError(f"Input file does not exist: {inputfile}")
        if not str(inputfile).endswith(".vcf.gz"):
            reporter.warn("input file %s does not end in .vcf.gz", inputfile)

    programs = StagePaths(
        **{
            s.value: _required_key(config, STAGE_SPECS[s].program_key, s)
            for s in pipeline.enabled()
        }
    )
    mongodburi = config.get("mongodburi")
    if pipeline[Stage.BFF2MONGODB]:
        mongodburi = _required_key(config, "mongodburi", Stage.BFF2MONGODB)

    tools = Tools(
        **{
            name: str(config[name])
            for name in Tools.model_fields
            if config.get(name) not in (None, "")
        }
    )

    return JobDraft(
        mode=arg.mode,
        inputfile=str(inputfile) if inputfile else None,
        genome=genome.value,
        datasetid=str(merged["datasetid"]),
        projectdir=str(merged["projectdir"]),
        zip=bool(merged["zip"]),
        ncpu=ncpu,
        tmpdir=str(merged["tmpdir"]),
        mem=str(merged["mem"]),
        dbnsfpset=str(merged["dbnsfpset"]),
        mongodburi=str(mongodburi) if mongodburi else None,
        references=References(**refs.as_dict()),
        bff=BffFiles(**{k: str(v) for k, v in merged["bff"].items()}),
        pipeline=pipeline,
        programs=programs,
        tools=tools,
    )
