"""Test doubles shared by the install and platform tests."""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path

from iu.platform.process import CancelToken

Handler = Callable[[list[str] | str], subprocess.CompletedProcess[str] | None]


class FakeRunner:
    """Records commands instead of running them.

    A handler may return a CompletedProcess for a command; otherwise the
    command succeeds with the configured returncode and output.
    """

    def __init__(
        self,
        *,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        handler: Handler | None = None,
    ) -> None:
        self.calls: list[list[str] | str] = []
        self._returncode = returncode
        self._stdout = stdout
        self._stderr = stderr
        self._handler = handler

    def run(
        self,
        args: list[str] | str,
        *,
        capture: bool = True,
        cwd: Path | None = None,
        cancel: CancelToken | None = None,
    ) -> subprocess.CompletedProcess[str]:
        self.calls.append(args)
        if self._handler is not None:
            proc = self._handler(args)
            if proc is not None:
                return proc
        return subprocess.CompletedProcess(args, self._returncode, self._stdout, self._stderr)
