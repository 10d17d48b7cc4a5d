"""Runner for the per-repository operation."""

from __future__ import annotations

import codecs
import logging
import os
import select
import shutil
import stat
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from ..errors import OperationNotExecutableError, OperationNotFoundError
from ..models import RepositoryTarget
from ..prompts import InputProvider
from ..transcript import Transcript
from .utils import sanitize_environment, working_directory

logger = logging.getLogger(__name__)

DEFAULT_SKIP_REASON = "nothing to do"
_READ_SIZE = 4096


@dataclass(slots=True)
class OperationResult:
    """Holds the outcome of one operation invocation."""

    args: tuple[str, ...]
    returncode: int | None
    output: tuple[str, ...] = ()
    skip_reason: str | None = None
    interrupted: bool = False

    @property
    def ok(self) -> bool:
        return not self.interrupted and self.returncode == 0


def parse_ask_line(line: str, prefix: str) -> tuple[str, str | None]:
    """Split ``<prefix><prompt>[\\t<default>]`` into prompt and default."""

    body = line[len(prefix):]
    if "\t" in body:
        prompt, default = body.split("\t", 1)
        return prompt, default or None
    return body, None


class OperationRunner:
    """Execute the operation inside each target, routing its prompts through an input provider.

    The operation's stderr is merged into stdout and consumed in chunks.
    Lines starting with ``ask_prefix`` are prompts whose answers are written
    back to the operation's stdin; a line starting with ``skip_prefix`` marks
    the target as having nothing to do. Unterminated output followed by
    ``prompt_idle_timeout`` seconds of silence is treated as a plain prompt
    (``printf 'Name? '; read name``) and answered the same way.
    """

    def __init__(
        self,
        executable: Path | str,
        *,
        args: Sequence[str] = (),
        ask_prefix: str = "::ask::",
        skip_prefix: str = "::skip::",
        terminate_timeout: float = 5.0,
        prompt_idle_timeout: float = 0.5,
        make_executable: bool = False,
    ) -> None:
        self._executable_path = self._resolve_executable(executable, make_executable)
        self._args = tuple(args)
        self._ask_prefix = ask_prefix
        self._skip_prefix = skip_prefix
        self._terminate_timeout = terminate_timeout
        self._prompt_idle_timeout = prompt_idle_timeout

    @staticmethod
    def _resolve_executable(explicit: Path | str, make_executable: bool) -> Path:
        candidate = Path(explicit).expanduser()
        if not candidate.exists() and candidate.name == str(explicit):
            located = shutil.which(str(explicit))
            if located is not None:
                candidate = Path(located)

        if not candidate.exists() or not candidate.is_file():
            raise OperationNotFoundError(f"Operation not found at {candidate}")

        if not os.access(candidate, os.X_OK):
            if not make_executable:
                raise OperationNotExecutableError(f"Operation is not executable: {candidate}")
            mode = candidate.stat().st_mode
            try:
                candidate.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            except OSError as exc:
                raise OperationNotExecutableError(
                    f"Failed to make {candidate} executable: {exc}"
                ) from exc
            if not os.access(candidate, os.X_OK):
                raise OperationNotExecutableError(f"Operation is not executable: {candidate}")
            logger.info("Made operation executable", extra={"operation": str(candidate)})

        # Absolute, since the operation runs from inside each target.
        return candidate.resolve()

    @property
    def executable(self) -> Path:
        return self._executable_path

    @property
    def args(self) -> tuple[str, ...]:
        return self._args

    def environment_for(self, target: RepositoryTarget) -> dict[str, str]:
        return sanitize_environment(
            {
                "REPO_BATCH_TARGET_NAME": target.name,
                "REPO_BATCH_TARGET_PATH": str(target.path),
                "REPO_BATCH_ASK_PREFIX": self._ask_prefix,
                "REPO_BATCH_SKIP_PREFIX": self._skip_prefix,
            }
        )

    def run(
        self,
        target: RepositoryTarget,
        provider: InputProvider,
        transcript: Transcript | None = None,
    ) -> OperationResult:
        """Run the operation in ``target`` and wait for it to exit.

        Raises ``OSError`` when the process cannot be spawned. A keyboard
        interrupt while the operation is running terminates it and is
        reported through ``OperationResult.interrupted``.
        """

        cmd = (str(self._executable_path), *self._args)
        with working_directory(target.path):
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                bufsize=0,
                env=self.environment_for(target),
            )
            output: list[str] = []
            try:
                skip_reason = self._pump(process, provider, transcript, output)
                returncode = process.wait()
            except KeyboardInterrupt:
                self._terminate(process)
                return OperationResult(
                    args=cmd,
                    returncode=process.returncode,
                    output=tuple(output),
                    interrupted=True,
                )
            except Exception:
                self._terminate(process)
                raise
            finally:
                for stream in (process.stdin, process.stdout):
                    if stream is not None:
                        try:
                            stream.close()
                        except BrokenPipeError:
                            pass

        return OperationResult(
            args=cmd,
            returncode=returncode,
            output=tuple(output),
            skip_reason=skip_reason,
        )

    def _pump(
        self,
        process: subprocess.Popen,
        provider: InputProvider,
        transcript: Transcript | None,
        output: list[str],
    ) -> str | None:
        """Consume operation output until EOF; return the last skip reason seen."""

        assert process.stdout is not None
        fd = process.stdout.fileno()
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        pending = ""
        skip_reason: str | None = None

        while True:
            ready, _, _ = select.select([fd], [], [], self._prompt_idle_timeout)
            if not ready:
                # Silence after an unterminated line: the operation is waiting on input.
                if pending.strip() and process.poll() is None:
                    self._answer(process, provider, transcript, pending.rstrip())
                    pending = ""
                continue

            chunk = os.read(fd, _READ_SIZE)
            if not chunk:
                break
            pending += decoder.decode(chunk)
            while "\n" in pending:
                line, pending = pending.split("\n", 1)
                skip_reason = self._handle_line(
                    line.rstrip("\r"), process, provider, transcript, output, skip_reason
                )

        pending += decoder.decode(b"", final=True)
        if pending:
            skip_reason = self._handle_line(
                pending.rstrip("\r"), process, provider, transcript, output, skip_reason
            )
        return skip_reason

    def _handle_line(
        self,
        line: str,
        process: subprocess.Popen,
        provider: InputProvider,
        transcript: Transcript | None,
        output: list[str],
        skip_reason: str | None,
    ) -> str | None:
        if line.startswith(self._ask_prefix):
            self._answer(process, provider, transcript, line)
        elif line.startswith(self._skip_prefix):
            skip_reason = line[len(self._skip_prefix):].strip() or DEFAULT_SKIP_REASON
            if transcript is not None:
                transcript.marker(f"operation reported nothing to do: {skip_reason}")
        else:
            output.append(line)
            if transcript is not None:
                transcript.output(line)
        return skip_reason

    def _answer(
        self,
        process: subprocess.Popen,
        provider: InputProvider,
        transcript: Transcript | None,
        text: str,
    ) -> None:
        if text.startswith(self._ask_prefix):
            prompt, default = parse_ask_line(text, self._ask_prefix)
        else:
            prompt, default = text, None
        if transcript is not None:
            transcript.marker(f"prompt: {prompt}")
        self._reply(process, provider.resolve(prompt, default))

    @staticmethod
    def _reply(process: subprocess.Popen, answer: str) -> None:
        assert process.stdin is not None
        try:
            process.stdin.write((answer + "\n").encode("utf-8"))
            process.stdin.flush()
        except BrokenPipeError:
            logger.warning("Operation closed its input before the answer was delivered")

    def _terminate(self, process: subprocess.Popen) -> None:
        if process.poll() is not None:
            return
        process.terminate()
        try:
            process.wait(timeout=self._terminate_timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Operation ignored terminate; killing", extra={"pid": process.pid})
            process.kill()
            process.wait()


class FakeOperationRunner(OperationRunner):
    """Test double that returns scripted results instead of spawning processes."""

    def __init__(self, results: Iterable[OperationResult | BaseException] | None = None) -> None:  # type: ignore[override]
        self._results = list(results or [])
        self._invocations: list[RepositoryTarget] = []
        self._executable_path = Path("/tmp/fake-operation")
        self._args = ()
        self._ask_prefix = "::ask::"
        self._skip_prefix = "::skip::"
        self._terminate_timeout = 0.1
        self._prompt_idle_timeout = 0.1

    def run(  # type: ignore[override]
        self,
        target: RepositoryTarget,
        provider: InputProvider,
        transcript: Transcript | None = None,
    ) -> OperationResult:
        self._invocations.append(target)
        if self._results:
            result = self._results.pop(0)
            if isinstance(result, BaseException):
                raise result
            return result
        return OperationResult(args=(str(self._executable_path),), returncode=0)

    @property
    def invocations(self) -> list[RepositoryTarget]:
        return self._invocations


__all__ = [
    "DEFAULT_SKIP_REASON",
    "FakeOperationRunner",
    "OperationResult",
    "OperationRunner",
    "parse_ask_line",
]
