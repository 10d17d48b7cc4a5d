from __future__ import annotations

import io
import os
from pathlib import Path

import pytest

from conftest import make_repo, write_script
from repo_batch.errors import OperationNotExecutableError, OperationNotFoundError
from repo_batch.models import RepositoryTarget
from repo_batch.operation import OperationRunner, parse_ask_line, sanitize_environment, working_directory
from repo_batch.operation.runner import FakeOperationRunner, OperationResult
from repo_batch.transcript import Transcript


class StubProvider:
    def __init__(self, answers: dict[str, str] | None = None) -> None:
        self.answers = answers or {}
        self.calls: list[tuple[str, str | None]] = []

    def resolve(self, prompt: str, default: str | None = None) -> str:
        self.calls.append((prompt, default))
        return self.answers.get(prompt, default or "")


class InterruptingProvider:
    def resolve(self, prompt: str, default: str | None = None) -> str:
        raise KeyboardInterrupt


@pytest.fixture
def target(tmp_path: Path) -> RepositoryTarget:
    return RepositoryTarget.from_path(make_repo(tmp_path, "repo"))


def test_runner_captures_output_and_exit_code(bin_dir: Path, target: RepositoryTarget) -> None:
    script = write_script(bin_dir / "op", "echo out\necho err >&2\nexit 3\n")
    console = io.StringIO()

    result = OperationRunner(script).run(target, StubProvider(), Transcript(console=console))

    assert result.returncode == 3
    assert not result.ok
    assert result.output == ("out", "err")
    assert "out\nerr\n" in console.getvalue()


def test_runner_runs_inside_target_and_restores_cwd(bin_dir: Path, target: RepositoryTarget) -> None:
    script = write_script(bin_dir / "op", "pwd\n")
    before = Path.cwd()

    result = OperationRunner(script).run(target, StubProvider())

    assert result.ok
    assert Path(result.output[0]).resolve() == target.path
    assert Path.cwd() == before


def test_runner_restores_cwd_when_spawn_fails(bin_dir: Path, target: RepositoryTarget) -> None:
    script = bin_dir / "noshebang"
    script.write_text("echo hi\n", encoding="utf-8")
    script.chmod(0o755)
    before = Path.cwd()

    with pytest.raises(OSError):
        OperationRunner(script).run(target, StubProvider())

    assert Path.cwd() == before


def test_runner_answers_prompts(bin_dir: Path, target: RepositoryTarget) -> None:
    script = write_script(
        bin_dir / "op",
        """
        printf '::ask::Enter email:\\n'
        read email
        printf '::ask::Branch:\\tmain\\n' >&2
        read branch
        echo "email=$email branch=$branch"
        """,
    )
    provider = StubProvider({"Enter email:": "a@b.com"})

    result = OperationRunner(script).run(target, provider)

    assert result.ok
    assert provider.calls == [("Enter email:", None), ("Branch:", "main")]
    assert result.output == ("email=a@b.com branch=main",)


def test_runner_reports_skip(bin_dir: Path, target: RepositoryTarget) -> None:
    script = write_script(bin_dir / "op", "echo '::skip::already clean'\n")

    result = OperationRunner(script).run(target, StubProvider())

    assert result.ok
    assert result.skip_reason == "already clean"
    assert result.output == ()


def test_runner_answers_prompt_without_newline(bin_dir: Path, target: RepositoryTarget) -> None:
    script = write_script(
        bin_dir / "op",
        """
        printf 'Commit message? '
        read msg
        echo "got=$msg"
        """,
    )
    provider = StubProvider({"Commit message?": "hello"})
    console = io.StringIO()

    result = OperationRunner(script, prompt_idle_timeout=0.2).run(
        target, provider, Transcript(console=console)
    )

    assert result.ok
    assert provider.calls == [("Commit message?", None)]
    assert result.output == ("got=hello",)
    assert "prompt: Commit message?" in console.getvalue()


def test_runner_keeps_unterminated_output_at_exit(bin_dir: Path, target: RepositoryTarget) -> None:
    script = write_script(bin_dir / "op", "echo first\nprintf 'no newline'\n")
    provider = StubProvider()

    result = OperationRunner(script).run(target, provider)

    assert result.ok
    assert result.output == ("first", "no newline")
    assert provider.calls == []


def test_runner_passes_arguments_and_environment(bin_dir: Path, target: RepositoryTarget) -> None:
    script = write_script(bin_dir / "op", 'echo "$@"\necho "$REPO_BATCH_TARGET_NAME"\n')

    result = OperationRunner(script, args=["--prune", "yes"]).run(target, StubProvider())

    assert result.output == ("--prune yes", "repo")


def test_runner_terminates_operation_on_interrupt(bin_dir: Path, target: RepositoryTarget) -> None:
    script = write_script(bin_dir / "op", "echo started\nprintf '::ask::Go?\\n'\nread x\nsleep 30\n")
    before = Path.cwd()

    result = OperationRunner(script, terminate_timeout=2.0).run(target, InterruptingProvider())

    assert result.interrupted
    assert not result.ok
    assert result.returncode is not None
    assert result.output == ("started",)
    assert Path.cwd() == before


def test_runner_not_found(tmp_path: Path) -> None:
    with pytest.raises(OperationNotFoundError):
        OperationRunner(tmp_path / "missing")


def test_runner_rejects_directory(tmp_path: Path) -> None:
    with pytest.raises(OperationNotFoundError):
        OperationRunner(tmp_path)


def test_runner_not_executable(bin_dir: Path) -> None:
    script = write_script(bin_dir / "op", "exit 0\n", executable=False)

    with pytest.raises(OperationNotExecutableError):
        OperationRunner(script)


def test_runner_can_make_operation_executable(bin_dir: Path) -> None:
    script = write_script(bin_dir / "op", "exit 0\n", executable=False)

    runner = OperationRunner(script, make_executable=True)

    assert os.access(runner.executable, os.X_OK)


def test_runner_resolves_relative_path(bin_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    write_script(bin_dir / "op", "exit 0\n")
    monkeypatch.chdir(bin_dir)

    runner = OperationRunner("./op")

    assert runner.executable == (bin_dir / "op").resolve()


def test_runner_finds_operation_on_path(bin_dir: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    write_script(bin_dir / "repo-op", "exit 0\n")
    monkeypatch.setenv("PATH", str(bin_dir) + os.pathsep + os.environ.get("PATH", ""))
    monkeypatch.chdir(tmp_path)

    runner = OperationRunner("repo-op")

    assert runner.executable == (bin_dir / "repo-op").resolve()


def test_fake_operation_runner_records_invocations(target: RepositoryTarget) -> None:
    fake = FakeOperationRunner([OperationResult(args=("op",), returncode=4)])

    result = fake.run(target, StubProvider())

    assert result.returncode == 4
    assert fake.invocations == [target]


def test_parse_ask_line() -> None:
    assert parse_ask_line("::ask::Enter email:", "::ask::") == ("Enter email:", None)
    assert parse_ask_line("::ask::Branch:\tmain", "::ask::") == ("Branch:", "main")
    assert parse_ask_line("::ask::Branch:\t", "::ask::") == ("Branch:", None)


def test_sanitize_environment_strips_virtualenv(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYTHONPATH", "value")
    env = sanitize_environment({"EXTRA": "1"})
    assert "PYTHONPATH" not in env
    assert env["EXTRA"] == "1"


def test_working_directory_restores_on_error(tmp_path: Path) -> None:
    before = Path.cwd()

    with pytest.raises(RuntimeError):
        with working_directory(tmp_path):
            assert Path.cwd() == tmp_path.resolve()
            raise RuntimeError("boom")

    assert Path.cwd() == before
