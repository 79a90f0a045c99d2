import io
import json

import pytest

from imagededup.process import (
    ProcessAction,
    ProcessSummary,
    confirm_action,
    execute_process,
    find_largest_file,
    load_file_sizes,
    select_files_to_process,
)
from imagededup.report import (
    DuplicateFile,
    DuplicateGroup,
    DuplicatesReport,
    ImageDedupError,
    write_duplicates_report,
)


def _write_report(path, groups):
    report = DuplicatesReport(
        total_groups=len(groups),
        total_duplicates=sum(max(len(g.files) - 1, 0) for g in groups),
        threshold=5,
        groups=groups,
    )
    write_duplicates_report(report, path)


def _group(group_id, representative, files):
    return DuplicateGroup(
        group_id=group_id,
        representative_file=str(representative),
        files=[DuplicateFile(str(p), h, d) for p, h, d in files],
    )


def test_process_nonexistent_duplicate_list(tmp_path):
    with pytest.raises(ImageDedupError, match="does not exist"):
        execute_process(tmp_path / "nonexistent.json", ProcessAction.MOVE, tmp_path / "d", True)


def test_process_empty_duplicate_list(tmp_path):
    dup_list = tmp_path / "duplicates.json"
    _write_report(dup_list, [])
    summary = execute_process(dup_list, ProcessAction.MOVE, tmp_path / "moved", True)
    assert summary == ProcessSummary()
    assert not (tmp_path / "moved").exists()


def test_process_move_action(tmp_path):
    dup_list = tmp_path / "duplicates.json"
    dest = tmp_path / "moved"
    file1 = tmp_path / "image1.jpg"
    file2 = tmp_path / "image2.jpg"
    file1.write_text("test content 1")
    file2.write_text("test content 2")
    _write_report(dup_list, [_group(0, file1, [(file1, "hash1", 0), (file2, "hash2", 3)])])

    summary = execute_process(dup_list, ProcessAction.MOVE, dest, True)

    assert summary.success_count == 1
    assert summary.error_count == 0
    assert file1.exists()
    assert not file2.exists()
    assert (dest / "group_0" / "image2.jpg").exists()


def test_process_delete_action(tmp_path):
    dup_list = tmp_path / "duplicates.json"
    file1 = tmp_path / "image1.jpg"
    file2 = tmp_path / "image2.jpg"
    file1.write_text("test content 1")
    file2.write_text("test content 2")
    _write_report(dup_list, [_group(0, file1, [(file1, "hash1", 0), (file2, "hash2", 3)])])

    summary = execute_process(dup_list, "delete", "", True)

    assert summary.success_count == 1
    assert file1.exists()
    assert not file2.exists()


def test_process_multiple_groups(tmp_path):
    dup_list = tmp_path / "duplicates.json"
    dest = tmp_path / "moved"
    files = []
    for i in range(1, 7):
        path = tmp_path / f"image{i}.jpg"
        path.write_text(f"test content {i}")
        files.append(path)

    groups = [
        _group(
            0,
            files[0],
            [(files[0], "hash1", 0), (files[1], "hash2", 2), (files[2], "hash3", 3)],
        ),
        _group(1, files[3], [(files[3], "hash4", 0), (files[4], "hash5", 1)]),
    ]
    _write_report(dup_list, groups)

    summary = execute_process(dup_list, ProcessAction.MOVE, dest, True)

    assert summary.success_count == 3
    assert files[0].exists()
    assert files[3].exists()
    assert not files[1].exists()
    assert not files[2].exists()
    assert not files[4].exists()
    assert (dest / "group_0" / "image2.jpg").exists()
    assert (dest / "group_0" / "image3.jpg").exists()
    assert (dest / "group_1" / "image5.jpg").exists()


def test_process_with_missing_source_file(tmp_path):
    dup_list = tmp_path / "duplicates.json"
    file1 = tmp_path / "image1.jpg"
    file2 = tmp_path / "image2.jpg"
    file1.write_text("test content 1")
    _write_report(dup_list, [_group(0, file1, [(file1, "hash1", 0), (file2, "hash2", 3)])])

    summary = execute_process(dup_list, ProcessAction.MOVE, tmp_path / "moved", True)

    assert summary.error_count == 1
    assert summary.success_count == 0
    assert file1.exists()


def test_process_invalid_json(tmp_path):
    dup_list = tmp_path / "duplicates.json"
    dup_list.write_text("invalid json content")
    with pytest.raises(ImageDedupError):
        execute_process(dup_list, ProcessAction.MOVE, tmp_path / "moved", True)


def test_process_action_values():
    assert ProcessAction("move") is ProcessAction.MOVE
    assert ProcessAction("delete") is ProcessAction.DELETE
    assert "Move" in repr(ProcessAction.MOVE).title()
    assert "Delete" in repr(ProcessAction.DELETE).title()


def test_process_with_representative_file(tmp_path):
    dup_list = tmp_path / "duplicates.json"
    dest = tmp_path / "moved"
    file1 = tmp_path / "small.jpg"
    file2 = tmp_path / "large.jpg"
    file3 = tmp_path / "medium.jpg"
    file1.write_text("s")
    file2.write_text("large content")
    file3.write_text("medium")
    _write_report(
        dup_list,
        [_group(0, file2, [(file1, "hash1", 0), (file2, "hash2", 1), (file3, "hash3", 2)])],
    )

    summary = execute_process(dup_list, ProcessAction.MOVE, dest, True)

    assert summary.success_count == 2
    assert file2.exists()
    assert not file1.exists()
    assert not file3.exists()
    assert (dest / "group_0" / "small.jpg").exists()
    assert (dest / "group_0" / "medium.jpg").exists()


def test_process_with_file_size_database(tmp_path):
    dup_list = tmp_path / "duplicates.json"
    scan_db = tmp_path / "scan.json"
    dest = tmp_path / "moved"
    file1 = tmp_path / "small.jpg"
    file2 = tmp_path / "large.jpg"
    file3 = tmp_path / "medium.jpg"
    file1.write_text("s")
    file2.write_text("large content")
    file3.write_text("medium")

    scan_data = {
        "images": [
            {"file_path": str(file1), "hash": "hash1", "hash_bits": 12345,
             "metadata": {"file_size": 1}},
            {"file_path": str(file2), "hash": "hash2", "hash_bits": 67890,
             "metadata": {"file_size": 13}},
            {"file_path": str(file3), "hash": "hash3", "hash_bits": 11111,
             "metadata": {"file_size": 6}},
        ],
        "scan_info": {},
    }
    scan_db.write_text(json.dumps(scan_data))
    _write_report(
        dup_list,
        [_group(0, file1, [(file1, "hash1", 0), (file2, "hash2", 1), (file3, "hash3", 2)])],
    )

    summary = execute_process(dup_list, ProcessAction.MOVE, dest, True, scan_db)

    assert summary.success_count == 2
    assert file2.exists()
    assert not file1.exists()
    assert not file3.exists()
    assert (dest / "group_0" / "small.jpg").exists()
    assert (dest / "group_0" / "medium.jpg").exists()


def test_process_backward_compatibility(tmp_path):
    dup_list = tmp_path / "duplicates.json"
    dest = tmp_path / "moved"
    file1 = tmp_path / "first.jpg"
    file2 = tmp_path / "second.jpg"
    file1.write_text("test1")
    file2.write_text("test2")
    report = {
        "total_groups": 1,
        "total_duplicates": 1,
        "threshold": 5,
        "groups": [
            {
                "group_id": 0,
                "representative_file": str(file1),
                "files": [
                    {"path": str(file1), "hash": "hash1", "distance_from_representative": 0},
                    {"path": str(file2), "hash": "hash2", "distance_from_representative": 1},
                ],
            }
        ],
    }
    dup_list.write_text(json.dumps(report))

    summary = execute_process(dup_list, ProcessAction.MOVE, dest, True)

    assert summary.success_count == 1
    assert summary.error_count == 0
    assert file1.exists()
    assert not file2.exists()
    assert (dest / "group_0" / "second.jpg").exists()


def test_process_unreadable_scan_database_falls_back(tmp_path):
    dup_list = tmp_path / "duplicates.json"
    file1 = tmp_path / "a.jpg"
    file2 = tmp_path / "b.jpg"
    file1.write_text("a")
    file2.write_text("bbbbbbbb")
    _write_report(dup_list, [_group(0, file1, [(file1, "h1", 0), (file2, "h2", 1)])])

    summary = execute_process(dup_list, ProcessAction.DELETE, "", True, tmp_path / "missing.json")

    assert summary.success_count == 1
    assert file1.exists()
    assert not file2.exists()


def test_process_cancelled_by_user(tmp_path, monkeypatch):
    dup_list = tmp_path / "duplicates.json"
    file1 = tmp_path / "image1.jpg"
    file2 = tmp_path / "image2.jpg"
    file1.write_text("1")
    file2.write_text("2")
    _write_report(dup_list, [_group(0, file1, [(file1, "h1", 0), (file2, "h2", 3)])])
    monkeypatch.setattr("sys.stdin", io.StringIO("n\n"))

    summary = execute_process(dup_list, ProcessAction.DELETE, "", False)

    assert summary.cancelled is True
    assert summary.planned == 1
    assert file2.exists()


def test_process_confirmed_by_user(tmp_path, monkeypatch):
    dup_list = tmp_path / "duplicates.json"
    file1 = tmp_path / "image1.jpg"
    file2 = tmp_path / "image2.jpg"
    file1.write_text("1")
    file2.write_text("2")
    _write_report(dup_list, [_group(0, file1, [(file1, "h1", 0), (file2, "h2", 3)])])
    monkeypatch.setattr("sys.stdin", io.StringIO("Y\n"))

    summary = execute_process(dup_list, ProcessAction.DELETE, "", False)

    assert summary.cancelled is False
    assert summary.success_count == 1
    assert not file2.exists()


@pytest.mark.parametrize(
    ("answer", "expected"),
    [("y", True), (" Y \n", True), ("n", False), ("", False), ("yes", False)],
)
def test_confirm_action_answers(answer, expected):
    assert confirm_action(ProcessAction.MOVE, 3, lambda _msg: answer) is expected


def test_confirm_action_prompt_mentions_action():
    messages = []

    def prompt(message):
        messages.append(message)
        return "n"

    assert confirm_action(ProcessAction.DELETE, 7, prompt) is False
    assert confirm_action("move", 2, prompt) is False
    assert len(messages) == 2
    assert "7" in messages[0] and "PERMANENTLY DELETED" in messages[0]
    assert "2" in messages[1] and "moved" in messages[1]


def test_confirm_action_end_of_input():
    def prompt(_message):
        raise EOFError

    assert confirm_action(ProcessAction.MOVE, 1, prompt) is False


def test_load_file_sizes_skips_missing_and_invalid(tmp_path):
    db = tmp_path / "db.json"
    db.write_text(json.dumps([
        {"file_path": "a.jpg", "hash": "h", "hash_bits": 1, "metadata": {"file_size": 10}},
        {"file_path": "b.jpg", "hash": "h", "hash_bits": 2, "metadata": None},
        {"file_path": "c.jpg", "hash": "h", "hash_bits": 3, "metadata": {"file_size": "big"}},
        {"file_path": "d.jpg", "hash": "h", "hash_bits": 4, "metadata": {"file_size": -1}},
        {"file_path": "e.jpg", "hash": "h", "hash_bits": 5},
    ]))
    assert load_file_sizes(db) == {"a.jpg": 10}


def test_find_largest_file_prefers_largest():
    group = _group(0, "a", [("a", "h", 0), ("b", "h", 1), ("c", "h", 2)])
    assert find_largest_file(group, {"a": 1, "b": 13, "c": 6}) == "b"


def test_find_largest_file_ties_pick_last():
    group = _group(0, "a", [("a", "h", 0), ("b", "h", 1), ("c", "h", 2)])
    assert find_largest_file(group, {"a": 5, "b": 5}) == "b"
    assert find_largest_file(group, {"x": 5}) == "c"


def test_find_largest_file_empty_group():
    with pytest.raises(ImageDedupError):
        find_largest_file(DuplicateGroup(3, "", []), {"a": 1})


def test_select_files_without_representative_uses_first():
    group = _group(4, "", [("a", "h", 0), ("b", "h", 1)])
    selected = select_files_to_process([group], {})
    assert [(gid, f.path, keep) for gid, f, keep in selected] == [(4, "b", "a")]


def test_select_files_keeps_one_per_group():
    groups = [
        _group(0, "a", [("a", "h", 0), ("b", "h", 1), ("c", "h", 2)]),
        _group(1, "d", [("d", "h", 0), ("e", "h", 1)]),
    ]
    selected = select_files_to_process(groups, {})
    assert [f.path for _, f, _ in selected] == ["b", "c", "e"]
    assert all(f.path != keep for _, f, keep in selected)