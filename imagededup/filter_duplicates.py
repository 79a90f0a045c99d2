"""Filtering of duplicate groups by a minimum hash distance."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import groupby
from operator import attrgetter
from pathlib import Path
from typing import Any, Iterable

from imagededup.report import (
    DuplicateGroup,
    ImageDedupError,
    _as_list,
    _as_uint,
    _field,
    _require_mapping,
    read_duplicates_report,
)

_U32_MAX = 2**32 - 1
_USIZE_MAX = 2**64 - 1


@dataclass
class FilteredReport:
    """Duplicate groups that contain at least one file at or beyond a distance."""

    original_threshold: int
    filter_threshold: int
    filtered_groups: int
    filtered_duplicates: int
    groups: list[DuplicateGroup] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> FilteredReport:
        data = _require_mapping(data, "filtered report")
        return cls(
            original_threshold=_as_uint(
                _field(data, "original_threshold"), "original_threshold", _U32_MAX
            ),
            filter_threshold=_as_uint(
                _field(data, "filter_threshold"), "filter_threshold", _U32_MAX
            ),
            filtered_groups=_as_uint(
                _field(data, "filtered_groups"), "filtered_groups", _USIZE_MAX
            ),
            filtered_duplicates=_as_uint(
                _field(data, "filtered_duplicates"), "filtered_duplicates", _USIZE_MAX
            ),
            groups=[
                DuplicateGroup.from_dict(item)
                for item in _as_list(_field(data, "groups"), "groups")
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "original_threshold": self.original_threshold,
            "filter_threshold": self.filter_threshold,
            "filtered_groups": self.filtered_groups,
            "filtered_duplicates": self.filtered_duplicates,
            "groups": [g.to_dict() for g in self.groups],
        }


def filter_groups(groups: Iterable[DuplicateGroup], min_distance: int) -> list[DuplicateGroup]:
    """Keep groups with a file at least `min_distance` from the representative.

    Within a kept group only files at that distance or beyond remain, plus files
    at distance 0; files are sorted by path and repeated paths dropped.
    """
    kept: list[DuplicateGroup] = []
    for group in groups:
        candidates = sorted(
            (
                f
                for f in group.files
                if f.distance_from_representative >= min_distance
                or f.distance_from_representative == 0
            ),
            key=attrgetter("path"),
        )
        unique = [next(same) for _, same in groupby(candidates, key=attrgetter("path"))]
        if len(unique) > 1 and len(group.files) > 1 and any(
            f.distance_from_representative >= min_distance for f in unique
        ):
            kept.append(
                DuplicateGroup(
                    group_id=group.group_id,
                    representative_file=group.representative_file,
                    files=unique,
                )
            )
    return kept


def execute_filter_duplicates(input_json: str | Path, min_distance: int) -> FilteredReport:
    """Read a duplicates report, filter it by distance and print the result."""
    input_path = Path(input_json)
    if not input_path.exists():
        raise ImageDedupError(f"Input JSON file does not exist: {input_path}")

    print("Duplicate filter")
    print(f"Input file: {input_path}")
    print(f"Minimum hash distance: {min_distance}")

    report = read_duplicates_report(input_path)
    print(
        f"Original report: {report.total_groups} groups, "
        f"{report.total_duplicates} duplicate files (threshold: {report.threshold})"
    )

    groups = filter_groups(report.groups, min_distance)
    filtered = FilteredReport(
        original_threshold=report.threshold,
        filter_threshold=min_distance,
        filtered_groups=len(groups),
        filtered_duplicates=sum(max(len(g.files) - 1, 0) for g in groups),
        groups=groups,
    )

    print("\nFiltering complete!")
    print(f"   - Groups after filtering: {filtered.filtered_groups}")
    print(f"   - Duplicate files after filtering: {filtered.filtered_duplicates}")

    if filtered.filtered_groups:
        print(f"\nFiltered groups (distance {min_distance} or more):")
        for group in filtered.groups:
            print(f"\n  Group {group.group_id} ({len(group.files)} files):")
            for file in group.files:
                print(f"    - {file.path} (distance: {file.distance_from_representative})")
    else:
        print("\nNo groups match the given distance condition")

    return filtered