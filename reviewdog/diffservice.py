"""Sources of the diff that check results are filtered by."""

from __future__ import annotations

import subprocess
import threading
from typing import Optional, Sequence


class DiffString:
    """A diff given up front as text."""

    def __init__(self, diff: str | bytes, strip: int) -> None:
        self._data = diff.encode("utf-8") if isinstance(diff, str) else bytes(diff)
        self.strip = strip

    def diff(self) -> bytes:
        """Return the diff."""
        return self._data


class DiffCmd:
    """A diff produced by running a command.

    The command runs at most once; its output is cached and shared between
    callers, including concurrent ones.
    """

    def __init__(self, cmd: Sequence[str], strip: int) -> None:
        self.cmd = list(cmd)
        self.strip = strip
        self._out: Optional[bytes] = None
        self._lock = threading.Lock()

    def diff(self) -> bytes:
        """Return the command's output.

        A non-zero exit status is an error only when there is no output,
        since ``git diff`` exits with 1 when differences exist.
        """
        with self._lock:
            if self._out is not None:
                return self._out
            proc = subprocess.run(self.cmd, capture_output=True, check=False)
            if proc.returncode != 0 and not proc.stdout:
                raise subprocess.CalledProcessError(
                    proc.returncode, self.cmd, proc.stdout, proc.stderr
                )
            self._out = proc.stdout
            return self._out