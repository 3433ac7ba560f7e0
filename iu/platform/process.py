"""Subprocess execution with cooperative cancellation.

All process spawning goes through this module. Waiting is done on the
child's completion with a short timeout, checking a CancelToken between
waits. A cancelled wait returns promptly but never kills the child:
cleanup belongs to the caller.

Usage:
    runner = DefaultCommandRunner()
    proc = runner.run(["mv", src, dst], cancel=token)
    if proc.returncode != 0:
        print(proc.stderr)
"""

from __future__ import annotations

import subprocess
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Protocol

from iu.core.config import DEFAULT_POLL_INTERVAL
from iu.core.result import Err, Ok, Result

__all__ = [
    "CANCELLED_RETURNCODE",
    "CancelToken",
    "CommandRunner",
    "DefaultCommandRunner",
    "ProcessError",
    "run_checked",
    "spawn_detached",
    "stream_lines",
]

# Return code reported when the wait was abandoned through a CancelToken
CANCELLED_RETURNCODE = -2


class CancelToken:
    """Cooperative cancellation signal, safe to set from another thread."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code (-1 if it could not start, CANCELLED_RETURNCODE
            if the wait was cancelled).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @classmethod
    def from_completed(cls, proc: subprocess.CompletedProcess[str]) -> ProcessError:
        args = proc.args if isinstance(proc.args, (list, tuple)) else [proc.args]
        return cls(
            command=tuple(str(a) for a in args),
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )

    @property
    def cancelled(self) -> bool:
        return self.returncode == CANCELLED_RETURNCODE

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        detail = self.stderr.strip()
        if detail:
            return f"{cmd_str} failed (exit {self.returncode}): {detail}"
        return f"{cmd_str} failed (exit {self.returncode})"


class CommandRunner(Protocol):
    """Protocol for running commands.

    Given a program and its arguments, returns the exit code and the
    captured stdout/stderr. A non-zero exit code is failure.
    """

    def run(
        self,
        args: list[str] | str,
        *,
        capture: bool = True,
        cwd: Path | None = None,
        cancel: CancelToken | None = None,
    ) -> subprocess.CompletedProcess[str]: ...


def _cancelled(args: list[str] | str) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args, CANCELLED_RETURNCODE, "", "cancelled")


class DefaultCommandRunner:
    """Command runner backed by subprocess.Popen."""

    def __init__(self, *, poll_interval: float = DEFAULT_POLL_INTERVAL) -> None:
        self._poll_interval = poll_interval

    def run(
        self,
        args: list[str] | str,
        *,
        capture: bool = True,
        cwd: Path | None = None,
        cancel: CancelToken | None = None,
    ) -> subprocess.CompletedProcess[str]:
        if cancel is not None and cancel.cancelled:
            return _cancelled(args)

        pipe = subprocess.PIPE if capture else None
        try:
            proc = subprocess.Popen(
                args,
                stdout=pipe,
                stderr=pipe,
                text=True,
                cwd=str(cwd) if cwd else None,
            )
        except OSError as e:
            return subprocess.CompletedProcess(args, -1, "", str(e))

        while True:
            try:
                stdout, stderr = proc.communicate(timeout=self._poll_interval)
            except subprocess.TimeoutExpired:
                # Retrying communicate() after a timeout loses no output
                if cancel is not None and cancel.cancelled:
                    return _cancelled(args)
                continue
            return subprocess.CompletedProcess(args, proc.returncode, stdout or "", stderr or "")


def run_checked(
    runner: CommandRunner,
    args: list[str] | str,
    *,
    cwd: Path | None = None,
    cancel: CancelToken | None = None,
) -> Result[str, ProcessError]:
    """Run a command and return stdout, or the error on non-zero exit."""
    proc = runner.run(args, cwd=cwd, cancel=cancel)
    if proc.returncode != 0:
        return Err(ProcessError.from_completed(proc))
    return Ok(proc.stdout or "")


def _pump(pipe: IO[str], sink: Callable[[str], None]) -> None:
    with pipe:
        for line in pipe:
            sink(line.rstrip("\r\n"))


def stream_lines(
    args: list[str],
    *,
    on_stdout: Callable[[str], None],
    on_stderr: Callable[[str], None],
    cancel: CancelToken | None = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> Result[int, ProcessError]:
    """Run a command, forwarding each output line as it arrives.

    Returns the exit code of the child (any value, zero or not). Err only if
    the process could not start or the wait was cancelled.
    """
    try:
        proc = subprocess.Popen(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            bufsize=1,
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(args), returncode=-1, stdout="", stderr=str(e)))

    assert proc.stdout is not None and proc.stderr is not None
    readers = [
        threading.Thread(target=_pump, args=(proc.stdout, on_stdout), daemon=True),
        threading.Thread(target=_pump, args=(proc.stderr, on_stderr), daemon=True),
    ]
    for reader in readers:
        reader.start()

    while True:
        try:
            returncode = proc.wait(timeout=poll_interval)
            break
        except subprocess.TimeoutExpired:
            if cancel is not None and cancel.cancelled:
                return Err(
                    ProcessError(
                        command=tuple(args),
                        returncode=CANCELLED_RETURNCODE,
                        stdout="",
                        stderr="cancelled",
                    )
                )

    # Let stdout and stderr flush
    for reader in readers:
        reader.join()
    return Ok(returncode)


def spawn_detached(args: list[str]) -> Result[int, ProcessError]:
    """Start a process in its own session without waiting for it.

    Returns the pid of the child.
    """
    try:
        proc = subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(args), returncode=-1, stdout="", stderr=str(e)))
    return Ok(proc.pid)
