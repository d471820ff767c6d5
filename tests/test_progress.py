from repobee_desk.models import OperationResult
from repobee_desk.progress import (
    ProgressCoalescer,
    StreamState,
    progress_message,
    progress_payload,
)


def test_progress_lines_collapse_between_permanent_lines() -> None:
    coalescer = ProgressCoalescer()
    coalescer.extend(["[PROGRESS] step 1", "[PROGRESS] step 2", "starting phase two", "[PROGRESS] step 3"])
    coalescer.finish(OperationResult(True, "done"))

    assert coalescer.lines == [
        "(progress) step 2",
        "starting phase two",
        "(progress) step 3",
        "done",
    ]
    assert coalescer.state is StreamState.NO_TRANSIENT


def test_permanent_lines_are_never_rewritten() -> None:
    coalescer = ProgressCoalescer()
    coalescer.push("Fetching students...")
    coalescer.push("[PROGRESS] 10/40")
    coalescer.push("[PROGRESS] 40/40")
    coalescer.push("Fetched 40 students")
    coalescer.push("[PROGRESS] Writing YAML")

    assert coalescer.lines == [
        "Fetching students...",
        "(progress) 40/40",
        "Fetched 40 students",
        "(progress) Writing YAML",
    ]
    assert coalescer.state is StreamState.TRANSIENT


def test_payload_leading_whitespace_is_trimmed() -> None:
    assert progress_payload("[PROGRESS]    50%") == "50%"
    assert progress_payload("[PROGRESS]x") == "x"
    assert progress_payload("note: [PROGRESS] 1") is None
    assert progress_payload(progress_message("Cloning team-3")) == "Cloning team-3"


def test_finish_appends_details_and_keeps_transient_line() -> None:
    coalescer = ProgressCoalescer()
    coalescer.push("[PROGRESS] 3/3")
    coalescer.finish(OperationResult(False, "✗ Failed", "team-2: repository exists"))

    assert coalescer.lines == ["(progress) 3/3", "✗ Failed", "team-2: repository exists"]
    coalescer.push("[PROGRESS] again")
    assert coalescer.lines[-1] == "(progress) again"
    assert len(coalescer.lines) == 4


def test_clear_resets_transcript_and_state() -> None:
    coalescer = ProgressCoalescer()
    coalescer.push("[PROGRESS] busy")
    coalescer.clear()

    assert coalescer.lines == []
    assert coalescer.state is StreamState.NO_TRANSIENT
    coalescer.push("[PROGRESS] fresh")
    assert coalescer.text == "(progress) fresh"
