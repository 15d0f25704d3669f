from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from oss_compliance.core.domain.models import LicenseCheck, ValidationResult
from oss_compliance.shared.to_jsonable import to_jsonable


def test_primitives():
    assert to_jsonable(None) is None
    assert to_jsonable("x") == "x"
    assert to_jsonable(3) == 3
    assert to_jsonable(True) is True


def test_collections():
    assert to_jsonable((1, "a")) == [1, "a"]
    assert to_jsonable({"k": (1, 2)}) == {"k": [1, 2]}
    assert sorted(to_jsonable({3, 1})) == [1, 3]


def test_path_datetime_bytes():
    assert to_jsonable(Path("/tmp/x")) == str(Path("/tmp/x"))
    assert to_jsonable(datetime(2024, 1, 2, tzinfo=timezone.utc)) == "2024-01-02T00:00:00+00:00"
    assert to_jsonable(b"\x01\xff") == "01ff"


def test_dataclass_with_nested_dataclass():
    result = ValidationResult(
        exists=True,
        message="License file found in repository",
        status="success",
        location="repo",
        license_check=LicenseCheck(True, "Copyright 2024 GitHub, Inc.", "MIT", "GitHub, Inc"),
    )

    data = to_jsonable(result)

    assert data["license_check"] == {
        "is_valid": True,
        "message": "Copyright 2024 GitHub, Inc.",
        "license_name": "MIT",
        "copyright_holder": "GitHub, Inc",
    }
    assert data["security_features"] is None


def test_exclude_applies_at_every_level():
    @dataclass
    class Holder:
        keep: int
        raw_sbom_data: dict

    data = to_jsonable({"a": Holder(1, {"big": 1}), "raw_sbom_data": 2}, exclude=frozenset({"raw_sbom_data"}))

    assert data == {"a": {"keep": 1}}


def test_plain_object_uses_dict():
    class Plain:
        def __init__(self):
            self.x = 1

    assert to_jsonable(Plain()) == {"x": 1}
