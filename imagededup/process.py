"""Moving or deleting the redundant files of duplicate groups."""

from __future__ import annotations

import enum
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Mapping

from imagededup.report import (
    DuplicateFile,
    DuplicateGroup,
    ImageDedupError,
    load_hash_database,
    read_duplicates_report,
)

_U64_MAX = 2**64 - 1


class ProcessAction(enum.Enum):
    """What to do with the files that are not kept."""

    MOVE = "move"
    DELETE = "delete"

    @property
    def verb(self) -> str:
        return "moved" if self is ProcessAction.MOVE else "PERMANENTLY DELETED"


@dataclass
class ProcessSummary:
    """Outcome of processing a duplicate list."""

    planned: int = 0
    success_count: int = 0
    error_count: int = 0
    cancelled: bool = False


def confirm_action(
    action: ProcessAction | str,
    total_files: int,
    prompt: Callable[[str], str] | None = None,
) -> bool:
    """Ask the user to confirm; only an answer of "y" (any case) confirms."""
    ask = input if prompt is None else prompt
    chosen = ProcessAction(action)
    try:
        answer = ask(f"{total_files} files will be {chosen.verb}. Continue? [y/N]: ")
    except EOFError:
        answer = ""
    return answer.strip().lower() == "y"


def load_file_sizes(scan_database_path: str | Path) -> dict[str, int]:
    """Map file paths to the `file_size` recorded in a hash database's metadata."""
    database = load_hash_database(scan_database_path)
    sizes: dict[str, int] = {}
    for entry in database.entries:
        metadata = entry.metadata
        if not isinstance(metadata, dict):
            continue
        size = metadata.get("file_size")
        if isinstance(size, bool) or not isinstance(size, int):
            continue
        if 0 <= size <= _U64_MAX:
            sizes[entry.file_path] = size
    return sizes


def find_largest_file(group: DuplicateGroup, file_sizes: Mapping[str, int]) -> str:
    """Path of the largest file in the group; on ties the last one wins, unknown sizes count as 0."""
    if not group.files:
        raise ImageDedupError(f"Duplicate group {group.group_id} has no files")
    largest = group.files[0]
    best = file_sizes.get(largest.path, 0)
    for candidate in group.files[1:]:
        size = file_sizes.get(candidate.path, 0)
        if size >= best:
            largest, best = candidate, size
    return largest.path


def _file_to_keep(group: DuplicateGroup, file_sizes: Mapping[str, int]) -> str:
    if file_sizes:
        return find_largest_file(group, file_sizes)
    if group.representative_file:
        return group.representative_file
    if group.files:
        return group.files[0].path
    raise ImageDedupError(f"Duplicate group {group.group_id} has no files")


def select_files_to_process(
    groups: Iterable[DuplicateGroup], file_sizes: Mapping[str, int]
) -> list[tuple[int, DuplicateFile, str]]:
    """List (group id, file, kept path) for every file that is not the one kept.

    With size information the largest file of each group is kept; otherwise
    the representative file, or the first file when no representative is set.
    """
    selected: list[tuple[int, DuplicateFile, str]] = []
    for group in groups:
        keep = _file_to_keep(group, file_sizes)
        selected.extend((group.group_id, f, keep) for f in group.files if f.path != keep)
    return selected


def _load_sizes_or_fallback(scan_database: str | Path | None) -> dict[str, int]:
    if scan_database is None:
        print("No file size information - keeping each group's representative file")
        return {}
    try:
        sizes = load_file_sizes(scan_database)
    except (ImageDedupError, OSError) as exc:
        print(f"Warning: failed to read scan database: {exc}")
        print("   Keeping each group's representative (first found) file")
        return {}
    print("Loaded file size information from the scan database")
    return sizes


def execute_process(
    duplicate_list: str | Path,
    action: ProcessAction | str = ProcessAction.MOVE,
    dest: str | Path = "./duplicates",
    no_confirm: bool = False,
    scan_database: str | Path | None = None,
) -> ProcessSummary:
    """Move or delete every duplicate except the file kept in each group."""
    list_path = Path(duplicate_list)
    chosen = ProcessAction(action)
    dest_path = Path(dest)

    if not list_path.exists():
        raise ImageDedupError(f"Duplicate list file does not exist: {list_path}")

    print("Image deduplication - process")
    print(f"Duplicate list: {list_path}")
    print(f"Action: {chosen.name.capitalize()}")
    if chosen is ProcessAction.MOVE:
        print(f"Destination directory: {dest_path}")

    report = read_duplicates_report(list_path)
    if report.total_groups == 0:
        print("No duplicate files to process.")
        return ProcessSummary()

    file_sizes = _load_sizes_or_fallback(scan_database)

    print("\nDuplicate information:")
    print(f"   - Groups: {report.total_groups}")
    print(f"   - Duplicate files: {report.total_duplicates}")

    to_process = select_files_to_process(report.groups, file_sizes)
    print(f"   - Files to process: {len(to_process)} (one file kept per group)")

    summary = ProcessSummary(planned=len(to_process))
    if not no_confirm and not confirm_action(chosen, len(to_process)):
        print("Processing cancelled.")
        summary.cancelled = True
        return summary

    try:
        if chosen is ProcessAction.MOVE:
            dest_path.mkdir(parents=True, exist_ok=True)

        for group_id, file, _kept in to_process:
            source = Path(file.path)
            if chosen is ProcessAction.MOVE:
                if source.name in ("", ".."):
                    raise ImageDedupError(f"Invalid filename: {file.path}")
                subdir = dest_path / f"group_{group_id}"
                subdir.mkdir(parents=True, exist_ok=True)
                target = subdir / source.name
                try:
                    os.rename(source, target)
                except OSError as exc:
                    print(f"Error: {source} - {exc}", file=sys.stderr)
                    summary.error_count += 1
                    continue
                print(f"Moved: {source} -> {target}")
            else:
                try:
                    os.remove(source)
                except OSError as exc:
                    print(f"Error: {source} - {exc}", file=sys.stderr)
                    summary.error_count += 1
                    continue
                print(f"Deleted: {source}")
            summary.success_count += 1
    except OSError as exc:
        raise ImageDedupError(f"failed to prepare destination: {exc}") from exc

    print("\nProcessing complete!")
    print(f"   - Succeeded: {summary.success_count} files")
    if summary.error_count:
        print(f"   - Errors: {summary.error_count} files")
    return summary