from pathlib import Path
import textwrap

import pytest

from repo_batch.errors import ConfigurationError, ResponseLoadError
from repo_batch.models import ResponseOrigin
from repo_batch.responses import ResponseLoader, load_responses


def write_responses(path: Path, body: str) -> Path:
    path.write_text(textwrap.dedent(body).strip(), encoding="utf-8")
    return path


def test_loader_reads_list_form(tmp_path: Path) -> None:
    path = write_responses(
        tmp_path / "responses.yaml",
        """
        responses:
          - prompt: "Enter email:"
            response: a@b.com
          - prompt: "Proceed?"
            response: yes
        """,
    )

    entries = ResponseLoader(path).load()

    assert [(entry.prompt, entry.response) for entry in entries] == [
        ("Enter email:", "a@b.com"),
        ("Proceed?", "y"),
    ]
    assert all(entry.origin is ResponseOrigin.PRELOADED for entry in entries)


def test_loader_reads_mapping_form(tmp_path: Path) -> None:
    path = write_responses(
        tmp_path / "responses.yml",
        """
        responses:
          "Branch:": main
          "Retries:": 3
          "Message:":
        """,
    )

    entries = load_responses(path)

    assert [(entry.prompt, entry.response) for entry in entries] == [
        ("Branch:", "main"),
        ("Retries:", "3"),
        ("Message:", ""),
    ]


def test_loader_handles_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_responses(path) == []


def test_loader_reports_validation_error(tmp_path: Path) -> None:
    path = write_responses(
        tmp_path / "broken.yaml",
        """
        responses:
          - prompt: "  "
            response: x
        """,
    )

    with pytest.raises(ResponseLoadError):
        ResponseLoader(path).load()


def test_loader_reports_yaml_error(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("responses: [unclosed", encoding="utf-8")

    with pytest.raises(ResponseLoadError):
        load_responses(path)


def test_loader_missing_file_is_a_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_responses(tmp_path / "missing.yaml")
