# imagededup

Command-line tools for working with a database of perceptual image hashes.
They group similar images, narrow the groups down by hash distance, and move
or delete the redundant copies.

## Installation

```
pip install .
```

To install the test requirements as well:

```
pip install ".[test]"
```

## Hash database format

The input to `find-dups` is a JSON file in one of two forms:

- an object with the keys `images` (a list of entries) and `scan_info`
  (usually an object; its `algorithm` and `total_files` are printed when
  present), or
- a bare list of entries. This is the older form, and a warning is printed
  when it is read.

Each entry holds `file_path`, `hash`, `hash_bits` (an unsigned 64-bit integer)
and an optional `metadata` object.

## Usage

All commands print their progress to standard output. If a file is missing or
a file is invalid, the command prints `Error: ...` to standard error and exits
with status 1. `imagededup --version` prints the version.

### Find duplicates

```
imagededup find-dups hashes.json --output duplicates.json --threshold 5
```

Every file defaults to the value shown above (`hashes.json`,
`duplicates.json`), and the threshold defaults to 5. The entries are taken in
order. Each entry that is not yet in a group becomes the representative of a
new group. That group takes in every other ungrouped entry whose `hash_bits`
lie within the threshold Hamming distance of the representative. Groups with
only one file are dropped. The report is written as indented JSON, and any
missing parent directories of the output path are created. The command also
prints the first three groups as examples.

### Filter by distance

```
imagededup filter-duplicates duplicates.json --min-distance 3
```

This keeps only the groups that hold at least one file at `--min-distance`
(default 3) or more from the representative. Within those groups it keeps
only such files, plus any files at distance 0. Files are sorted by path and
repeated paths are removed. The result is printed and no file is written.
The report reader also accepts `distance_from_first` as another name for
`distance_from_representative`.

### Move or delete redundant copies

```
imagededup process duplicates.json --action move --dest ./duplicates
imagededup process duplicates.json --action delete --no-confirm
```

In each group, the representative file is kept. If a group has no
representative, its first file is kept instead. With `move`, every other file
goes to `<dest>/group_<id>/<file name>`. With `delete`, every other file is
removed. Unless `--no-confirm` is given, you are asked to confirm first, and
only an answer of `y` goes ahead. A file that cannot be moved or deleted is
reported and counted as an error, and the remaining files are still
processed.

## Library use

```python
from imagededup.find_dups import execute_find_dups, group_duplicates, hamming_distance
from imagededup.filter_duplicates import execute_filter_duplicates, filter_groups
from imagededup.process import ProcessAction, execute_process
from imagededup.report import load_hash_database, read_duplicates_report

report = execute_find_dups("hashes.json", "duplicates.json", 5)   # DuplicatesReport
filtered = execute_filter_duplicates("duplicates.json", 3)        # FilteredReport
summary = execute_process("duplicates.json", ProcessAction.MOVE, "./duplicates", True, None)
print(summary.success_count, summary.error_count)                 # ProcessSummary
```

`execute_process` can also take a scan database path as its last argument.
It then keeps the largest file in each group instead of the representative,
using the `file_size` recorded in each entry's metadata. Files without a size
count as 0, and if two files are the same size the later one is kept. If the
scan database cannot be read, a warning is printed and the representative is
kept as usual. The command line does not offer this option.

Errors in reading, parsing or writing databases and reports are raised as
`imagededup.report.ImageDedupError`.

## What this package does not do

The package does not scan directories and does not compute perceptual hashes.
The hash database has to be produced by some other tool.

## Development checks

```
imagededup-check
```

This runs three commands in the current directory, one after another:
`python -m pytest`, then `python -m ruff check .`, then
`python -m pytest --cov --cov-report=html`. It prints the output of each
command. It stops with exit status 1 at the first command that fails or
cannot be started. The `ruff` and `pytest-cov` tools must be installed
separately.