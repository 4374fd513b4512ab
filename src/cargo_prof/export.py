from __future__ import annotations

import json
from typing import Any

import attrs
import yaml
from jsonschema import Draft202012Validator

from .model import BYTES, Summary

SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"


def summary_schema(record_type: type, *, human: bool) -> dict[str, Any]:
    """JSON Schema for one summary record: every declared field required, nothing else allowed."""
    properties: dict[str, Any] = {}
    for f in attrs.fields(record_type):
        if f.type in ("float", float):
            properties[f.name] = {"type": "number"}
        elif human and f.metadata.get(BYTES):
            properties[f.name] = {"type": "string", "pattern": r"^-?\d+(GB|MB|KB|B)( \d+(MB|KB|B))*$"}
        else:
            properties[f.name] = {"type": "integer"}
    return {
        "$schema": SCHEMA_DIALECT,
        "title": record_type.__name__ + ("Human" if human else ""),
        "type": "object",
        "properties": properties,
        "required": [f.name for f in attrs.fields(record_type)],
        "additionalProperties": False,
    }


def validate_summary(data: dict[str, Any], record_type: type, *, human: bool) -> None:
    Draft202012Validator(summary_schema(record_type, human=human)).validate(data)


def machine_dict(record: Summary) -> dict[str, Any]:
    data = record.to_dict()
    validate_summary(data, type(record), human=False)
    return data


def human_dict(record: Summary) -> dict[str, Any]:
    data = record.to_human_dict()
    validate_summary(data, type(record), human=True)
    return data


def render_json(record: Summary) -> str:
    return json.dumps(machine_dict(record))


def render_yaml(record: Summary) -> str:
    return yaml.safe_dump(human_dict(record), sort_keys=False)


def render(record: Summary, *, as_json: bool) -> str:
    return render_json(record) if as_json else render_yaml(record)
