"""
Schema-validation helpers for files imported from disk.

Usage (inside other modules):
    from novelfactory.utils.validate import validate_bundle, validate_settings
    validate_bundle(data)      # raises jsonschema.ValidationError on failure
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources as pkg
from typing import Any, Dict

import jsonschema


# ─── internal helper ─────────────────────────────────────────────────────
def _maybe_unwrap(obj: Any, key: str) -> Any:
    """
    Hand-edited exports sometimes wrap the real payload:

        {"novelfactory": { ... }}

    Accept that pattern and unwrap it.  Otherwise return the object as-is.
    """
    if isinstance(obj, dict) and len(obj) == 1 and key not in obj:
        (inner,) = obj.values()
        if isinstance(inner, dict) and key in inner:
            return inner
    return obj


@lru_cache(maxsize=None)
def _load_schema(name: str) -> Dict[str, Any]:
    text = pkg.files("novelfactory.schemas").joinpath(name).read_text(encoding="utf-8")
    return json.loads(text)


# ─── public API ──────────────────────────────────────────────────────────
def validate_bundle(data: Any) -> Dict[str, Any]:
    data = _maybe_unwrap(data, "projects")
    jsonschema.validate(data, _load_schema("project_bundle.schema.json"))
    return data


def validate_settings(data: Any) -> Dict[str, Any]:
    data = _maybe_unwrap(data, "aiSettings")
    jsonschema.validate(data, _load_schema("settings.schema.json"))
    return data
