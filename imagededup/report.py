"""Data model and JSON persistence for hash databases and duplicate reports."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1
_USIZE_MAX = 2**64 - 1


class ImageDedupError(Exception):
    """Raised when a database or report cannot be read, parsed or written."""


def _field(data: dict[str, Any], *names: str) -> Any:
    for name in names:
        if name in data:
            return data[name]
    raise ImageDedupError(f"missing field `{names[0]}`")


def _require_mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ImageDedupError(f"expected an object for {what}, got {type(data).__name__}")
    return data


def _as_str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ImageDedupError(f"field `{name}` must be a string")
    return value


def _as_uint(value: Any, name: str, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ImageDedupError(f"field `{name}` must be a non-negative integer")
    if not 0 <= value <= maximum:
        raise ImageDedupError(f"field `{name}` is out of range: {value}")
    return value


def _as_list(value: Any, name: str) -> list[Any]:
    if not isinstance(value, list):
        raise ImageDedupError(f"field `{name}` must be an array")
    return value


def _read_json(path: Path, what: str) -> Any:
    if not path.exists():
        raise ImageDedupError(f"{what} does not exist: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ImageDedupError(f"failed to read {path}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ImageDedupError(f"invalid JSON in {path}: {exc}") from exc


@dataclass
class DuplicateFile:
    """One file in a duplicate group and its distance to the group's representative."""

    path: str
    hash: str
    distance_from_representative: int

    @classmethod
    def from_dict(cls, data: Any) -> DuplicateFile:
        data = _require_mapping(data, "duplicate file")
        return cls(
            path=_as_str(_field(data, "path"), "path"),
            hash=_as_str(_field(data, "hash"), "hash"),
            distance_from_representative=_as_uint(
                _field(data, "distance_from_representative", "distance_from_first"),
                "distance_from_representative",
                _U32_MAX,
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "hash": self.hash,
            "distance_from_representative": self.distance_from_representative,
        }


@dataclass
class DuplicateGroup:
    """A set of files whose hashes lie within the threshold of a representative."""

    group_id: int
    representative_file: str
    files: list[DuplicateFile] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> DuplicateGroup:
        data = _require_mapping(data, "duplicate group")
        return cls(
            group_id=_as_uint(_field(data, "group_id"), "group_id", _USIZE_MAX),
            representative_file=_as_str(
                _field(data, "representative_file"), "representative_file"
            ),
            files=[
                DuplicateFile.from_dict(item)
                for item in _as_list(_field(data, "files"), "files")
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "group_id": self.group_id,
            "representative_file": self.representative_file,
            "files": [f.to_dict() for f in self.files],
        }


@dataclass
class DuplicatesReport:
    """The result of a duplicate search: all groups found at a given threshold."""

    total_groups: int
    total_duplicates: int
    threshold: int
    groups: list[DuplicateGroup] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> DuplicatesReport:
        data = _require_mapping(data, "duplicates report")
        return cls(
            total_groups=_as_uint(_field(data, "total_groups"), "total_groups", _USIZE_MAX),
            total_duplicates=_as_uint(
                _field(data, "total_duplicates"), "total_duplicates", _USIZE_MAX
            ),
            threshold=_as_uint(_field(data, "threshold"), "threshold", _U32_MAX),
            groups=[
                DuplicateGroup.from_dict(item)
                for item in _as_list(_field(data, "groups"), "groups")
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_groups": self.total_groups,
            "total_duplicates": self.total_duplicates,
            "threshold": self.threshold,
            "groups": [g.to_dict() for g in self.groups],
        }


@dataclass
class HashEntry:
    """The perceptual hash of one scanned image."""

    file_path: str
    hash: str
    hash_bits: int
    metadata: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> HashEntry:
        data = _require_mapping(data, "hash entry")
        return cls(
            file_path=_as_str(_field(data, "file_path"), "file_path"),
            hash=_as_str(_field(data, "hash"), "hash"),
            hash_bits=_as_uint(_field(data, "hash_bits"), "hash_bits", _U64_MAX),
            metadata=data.get("metadata"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "hash": self.hash,
            "hash_bits": self.hash_bits,
            "metadata": self.metadata,
        }


@dataclass
class HashDatabase:
    """A hash database in either the current object form or the legacy array form."""

    entries: list[HashEntry] = field(default_factory=list)
    scan_info: Any = None
    legacy: bool = False

    @classmethod
    def from_json(cls, data: Any) -> HashDatabase:
        """Build from parsed JSON: an object with `images` and `scan_info`, or a bare array."""
        if isinstance(data, dict):
            if "images" not in data:
                raise ImageDedupError("missing field `images`")
            if "scan_info" not in data:
                raise ImageDedupError("missing field `scan_info`")
            images = _as_list(data["images"], "images")
            return cls(
                entries=[HashEntry.from_dict(item) for item in images],
                scan_info=data["scan_info"],
                legacy=False,
            )
        if isinstance(data, list):
            return cls(entries=[HashEntry.from_dict(item) for item in data], legacy=True)
        raise ImageDedupError("data did not match any known hash database format")

    def has_valid_scan_info(self) -> bool:
        """True when scan information is present and is a JSON object."""
        return isinstance(self.scan_info, dict)


def load_hash_database(path: str | Path) -> HashDatabase:
    """Read a hash database file in either supported format."""
    return HashDatabase.from_json(_read_json(Path(path), "Hash database file"))


def read_duplicates_report(path: str | Path) -> DuplicatesReport:
    """Read a duplicates report written by the duplicate search."""
    return DuplicatesReport.from_dict(_read_json(Path(path), "Duplicates report file"))


def write_duplicates_report(report: DuplicatesReport, path: str | Path) -> None:
    """Write a report as indented JSON, creating parent directories as needed."""
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            json.dumps(report.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
        )
    except OSError as exc:
        raise ImageDedupError(f"failed to write {target}: {exc}") from exc