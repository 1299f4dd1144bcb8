from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path


def to_jsonable(obj):
    """Convert report aggregates to JSON-serializable structures.

    Handles:
    - Basic types (str, int, float, bool, None)
    - Enums (by value)
    - datetime/date (ISO-8601)
    - Paths (as strings)
    - Collections (list, tuple, set, dict)
    - Dataclasses and Pydantic models

    Args:
        obj: Any Python object

    Returns:
        A JSON-serializable version of the object
    """
    if isinstance(obj, Enum):
        return to_jsonable(obj.value)
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(item) for item in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted(to_jsonable(item) for item in obj)
    if isinstance(obj, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in obj.items()}
    if is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(asdict(obj))
    if hasattr(obj, "model_dump"):
        return to_jsonable(obj.model_dump())
    return str(obj)
