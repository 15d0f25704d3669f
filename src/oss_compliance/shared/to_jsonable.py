from collections.abc import Mapping
from dataclasses import fields, is_dataclass
from datetime import datetime
from pathlib import Path


def to_jsonable(obj, exclude=frozenset()):
    """Convert various Python objects to JSON-serializable format.

    Handles:
    - Basic types (str, int, float, bool, None)
    - Collections (list, tuple, set, mappings)
    - Dataclasses (fields only; computed properties are not included)
    - Pydantic models
    - Paths and datetimes
    - Objects with __dict__

    Args:
        obj: Any Python object
        exclude: Field/key names dropped at every nesting level

    Returns:
        A JSON-serializable version of the object
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    elif isinstance(obj, (bytes, bytearray)):
        return obj.hex()
    elif isinstance(obj, Path):
        return str(obj)
    elif isinstance(obj, datetime):
        return obj.isoformat()
    elif isinstance(obj, (list, tuple, set, frozenset)):
        return [to_jsonable(item, exclude) for item in obj]
    elif isinstance(obj, Mapping):
        return {str(k): to_jsonable(v, exclude) for k, v in obj.items() if k not in exclude}
    elif is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: to_jsonable(getattr(obj, f.name), exclude)
            for f in fields(obj)
            if f.name not in exclude
        }
    elif hasattr(obj, 'model_dump'):  # Pydantic v2
        return to_jsonable(obj.model_dump(), exclude)
    elif hasattr(obj, '__dict__'):
        return to_jsonable(vars(obj), exclude)
    else:
        return str(obj)
