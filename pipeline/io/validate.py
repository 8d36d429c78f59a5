from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from jsonschema.validators import Draft202012Validator as Validator

SCHEMAS_ROOT = Path(__file__).resolve().parents[1] / "schemas"


def load_schema(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        schema = yaml.safe_load(f)
    Validator.check_schema(schema)
    return schema


def schema_errors(schema: dict[str, Any], obj: Any) -> list[str]:
    """Human-readable messages for every violation, ordered by location."""
    errors = sorted(Validator(schema).iter_errors(obj), key=lambda e: list(e.path))
    out: list[str] = []
    for err in errors:
        where = ".".join(str(p) for p in err.path) or "<root>"
        out.append(f"{where}: {err.message}")
    return out


def validate_obj(schema: dict[str, Any], obj: Any) -> None:
    Validator(schema).validate(obj)
