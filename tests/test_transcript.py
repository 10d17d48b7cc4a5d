from __future__ import annotations

import io
from datetime import datetime
from pathlib import Path

from repo_batch.transcript import Transcript, log_file_name


def test_log_file_name_is_timestamped() -> None:
    assert log_file_name(datetime(2026, 1, 2, 3, 4, 5)) == "repo_batch_20260102_030405.log"


def test_transcript_writes_console_and_file(tmp_path: Path) -> None:
    console = io.StringIO()
    transcript = Transcript.for_run(tmp_path / "logs", console=console, now=datetime(2026, 1, 2, 3, 4, 5))

    transcript.marker("processing target 1/1: repo")
    transcript.output("100% done\n")
    # Visible in the file before the transcript is closed.
    partial = transcript.log_file.read_text(encoding="utf-8")
    transcript.close()

    assert transcript.log_file == tmp_path / "logs" / "repo_batch_20260102_030405.log"
    assert "==> processing target 1/1: repo" in partial
    assert "100% done" in partial
    assert console.getvalue() == "==> processing target 1/1: repo\n100% done\n"


def test_transcript_appends(tmp_path: Path) -> None:
    log_file = tmp_path / "run.log"
    log_file.write_text("earlier\n", encoding="utf-8")

    with Transcript(console=io.StringIO(), log_file=log_file) as transcript:
        transcript.output("later")

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "earlier"
    assert lines[1].endswith("later")


def test_transcript_without_file(tmp_path: Path) -> None:
    console = io.StringIO()
    with Transcript.for_run(None, console=console) as transcript:
        transcript.warning("counts differ")

    assert transcript.log_file is None
    assert console.getvalue() == "!!! counts differ\n"
