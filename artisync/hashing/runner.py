"""Process launching for hash worker jobs."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class ProcessResult:
    """Exit status and captured output of a finished process."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class ProcessRunner(Protocol):
    """Runs an executable to completion and captures its output."""

    def run(
        self,
        args: Sequence[str],
        *,
        input: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ProcessResult: ...


class SubprocessRunner:
    """ProcessRunner backed by :func:`subprocess.run`.

    A process that outlives ``timeout`` is killed and reported with
    ``timed_out=True`` instead of raising.
    """

    def run(
        self,
        args: Sequence[str],
        *,
        input: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        try:
            completed = subprocess.run(
                list(args),
                input=input,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            return ProcessResult(
                returncode=-1,
                stdout=_decode(e.stdout),
                stderr=_decode(e.stderr),
                timed_out=True,
            )
        except OSError as e:
            return ProcessResult(returncode=-1, stderr=str(e))

        return ProcessResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


def _decode(output: bytes | str | None) -> str:
    # TimeoutExpired carries bytes even in text mode
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output
