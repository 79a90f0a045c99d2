"""Runs the project's test, lint and coverage checks one after another."""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path
from typing import Sequence

CHECKS: tuple[tuple[str, str], ...] = (
    ("python -m pytest", "Running tests"),
    ("python -m ruff check .", "Running linter"),
    ("python -m pytest --cov --cov-report=html", "Measuring test coverage"),
)


class CheckFailed(Exception):
    """A check command could not be started or exited unsuccessfully."""

    def __init__(self, command: str, detail: str, started: bool = True) -> None:
        super().__init__(f"{command}: {detail}")
        self.command = command
        self.detail = detail
        self.started = started


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def run_checks(cwd: str | Path | None = None) -> list[tuple[str, str]]:
    """Run every check in `cwd`; return (command, stdout) pairs, stop at the first failure."""
    workdir = Path.cwd() if cwd is None else Path(cwd)
    outputs: list[tuple[str, str]] = []
    for command, description in CHECKS:
        print(f"=== {description} ===")
        try:
            completed = subprocess.run(command, shell=True, cwd=workdir, capture_output=True)
        except OSError as exc:
            raise CheckFailed(command, str(exc), started=False) from exc
        if completed.returncode != 0:
            raise CheckFailed(command, _decode(completed.stderr))
        stdout = _decode(completed.stdout)
        print(stdout)
        outputs.append((command, stdout))
    return outputs


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: run all checks in the current directory."""
    parser = argparse.ArgumentParser(description="Run tests, linting and coverage checks.")
    parser.parse_args(argv)

    try:
        cwd = Path.cwd()
    except OSError as exc:
        print(f"Cannot determine the current directory: {exc}", file=sys.stderr)
        return 1

    try:
        run_checks(cwd)
    except CheckFailed as exc:
        if exc.started:
            print(f"Error executing {exc.command}: {exc.detail}", file=sys.stderr)
        else:
            print(f"Failed to execute {exc.command}: {exc.detail}", file=sys.stderr)
        return 1

    print("All checks completed!")
    return 0