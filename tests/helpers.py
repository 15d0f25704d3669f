import base64
import json
from pathlib import Path


def mark_by_dir(items, base_dir, marker):
    base = Path(base_dir).resolve()
    for item in items:
        # pytest 7/8: item.path is a Path; older versions only have item.fspath
        p = getattr(item, "path", None)
        p = Path(p) if p is not None else Path(str(getattr(item, "fspath")))
        try:
            p.resolve().relative_to(base)
        except ValueError:
            continue
        item.add_marker(marker)


def contents_envelope(text: str, name: str = "file") -> str:
    """Body of a GitHub contents-API response for a file."""
    return json.dumps({
        "name": name,
        "path": name,
        "type": "file",
        "encoding": "base64",
        "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
    })


def listing(*names: str) -> list[dict]:
    """Root listing entries as returned by GET /repos/{o}/{r}/contents."""
    return [{"name": n, "path": n, "type": "file", "size": 10} for n in names]
