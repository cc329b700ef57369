"""Deterministic JSON and YAML rendering for manifests and reports."""

import json
from enum import Enum
from typing import Any
from pathlib import Path

import yaml

from ..core.errors import SerializationError


def to_json_string(obj: Any, indent: int = 2) -> str:
    """Convert object to JSON string with sorted keys."""
    try:
        return json.dumps(
            obj,
            indent=indent,
            sort_keys=True,
            default=_json_serializer,
            ensure_ascii=False,
        )
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Failed to encode object to JSON: {e}") from e


def to_yaml_string(obj: Any) -> str:
    """Convert object to a YAML document with sorted keys."""
    try:
        # Round-trip through JSON so enums, paths and models become plain data
        plain = json.loads(to_json_string(obj))
        return yaml.safe_dump(plain, sort_keys=True, default_flow_style=False)
    except yaml.YAMLError as e:
        raise SerializationError(f"Failed to encode object to YAML: {e}") from e


def to_yaml_documents(objs: Any) -> str:
    """Render several objects as one multi-document YAML stream."""
    return "---\n".join(to_yaml_string(obj) for obj in objs)


def _json_serializer(obj: Any) -> Any:
    """Custom JSON serializer for special types."""
    if isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, Path):
        return str(obj)
    elif hasattr(obj, "model_dump"):
        # Pydantic v2 BaseModel
        return obj.model_dump(mode="json")
    elif hasattr(obj, "to_manifest"):
        return obj.to_manifest()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
