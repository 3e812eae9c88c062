"""JSON rendering of engine results for the CLI."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any

import typer
from pydantic import BaseModel


def to_jsonable(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    return obj


def echo_json(obj: Any) -> None:
    typer.echo(json.dumps(to_jsonable(obj), indent=2))


def read_snapshot(path: Path) -> dict[str, Any]:
    """Load a JSON snapshot file; exit 1 if it is missing or malformed."""
    try:
        with open(path) as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        typer.echo(f"Cannot read snapshot {path}: {e}", err=True)
        raise typer.Exit(1)
