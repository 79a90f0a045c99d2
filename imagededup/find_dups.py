"""Grouping of perceptually similar images from a hash database."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Sequence

from imagededup.report import (
    DuplicateFile,
    DuplicateGroup,
    DuplicatesReport,
    HashEntry,
    ImageDedupError,
    load_hash_database,
    write_duplicates_report,
)

_SAMPLE_GROUPS = 3


def hamming_distance(hash1: int, hash2: int) -> int:
    """Number of differing bits between two hash values."""
    return (hash1 ^ hash2).bit_count()


def group_duplicates(entries: Sequence[HashEntry], threshold: int) -> list[DuplicateGroup]:
    """Group entries whose hash lies within `threshold` bits of a representative.

    Each unassigned entry, in order, becomes the representative of a new group
    that collects every other unassigned entry within the threshold. Groups
    holding a single file are dropped; group ids are consecutive from zero.
    """
    if threshold < 0:
        raise ValueError(f"threshold must be non-negative, got {threshold}")

    assigned: set[int] = set()
    groups: list[DuplicateGroup] = []

    for index, base in enumerate(entries):
        if index in assigned:
            continue
        assigned.add(index)
        files = [DuplicateFile(base.file_path, base.hash, 0)]

        for other_index, entry in enumerate(entries):
            if other_index in assigned:
                continue
            distance = hamming_distance(base.hash_bits, entry.hash_bits)
            if distance <= threshold:
                files.append(DuplicateFile(entry.file_path, entry.hash, distance))
                assigned.add(other_index)

        if len(files) > 1:
            groups.append(
                DuplicateGroup(
                    group_id=len(groups),
                    representative_file=base.file_path,
                    files=files,
                )
            )

    return groups


def _print_samples(groups: Iterable[DuplicateGroup]) -> None:
    print(f"\nDuplicate examples (first {_SAMPLE_GROUPS} groups):")
    for number, group in enumerate(groups, start=1):
        if number > _SAMPLE_GROUPS:
            break
        print(f"\n  Group {number} ({len(group.files)} files):")
        for file in group.files:
            print(f"    - {file.path} (distance: {file.distance_from_representative})")


def execute_find_dups(
    hash_database: str | Path, output: str | Path, threshold: int
) -> DuplicatesReport:
    """Find duplicate images in a hash database and write the report to `output`."""
    database_path = Path(hash_database)
    output_path = Path(output)

    if not database_path.exists():
        raise ImageDedupError(f"Hash database file does not exist: {database_path}")

    print("Image deduplication - find-dups")
    print(f"Hash database: {database_path}")
    print(f"Output file: {output_path}")
    print(f"Similarity threshold: {threshold} (Hamming distance)")

    database = load_hash_database(database_path)
    if database.legacy:
        print("Warning: hash database is in the legacy format")
    elif database.has_valid_scan_info():
        info = database.scan_info
        if "algorithm" in info:
            print(f"Hash algorithm: {json.dumps(info['algorithm'], ensure_ascii=False)}")
        if "total_files" in info:
            print(
                f"Files in original scan: {json.dumps(info['total_files'], ensure_ascii=False)}"
            )

    print(f"Loaded {len(database.entries)} hash entries")

    groups = group_duplicates(database.entries, threshold)
    report = DuplicatesReport(
        total_groups=len(groups),
        total_duplicates=sum(len(g.files) - 1 for g in groups),
        threshold=threshold,
        groups=groups,
    )
    write_duplicates_report(report, output_path)

    print("\nAnalysis complete!")
    print(f"   - Duplicate groups: {report.total_groups}")
    print(f"   - Duplicate files: {report.total_duplicates}")
    print(f"Report saved to {output_path}")

    if report.total_groups:
        _print_samples(report.groups)

    return report