"""Comment services that write check results to text streams.

A comment is any object with ``check_result`` (having ``path``, ``lnum``,
``col`` and ``lines``), ``tool_name`` and ``body`` attributes.
"""

from __future__ import annotations

from typing import Any, TextIO


class MultiCommentService:
    """Posts each comment to every wrapped service in turn."""

    def __init__(self, *services: Any) -> None:
        self.services = list(services)

    def post(self, comment: Any) -> None:
        """Post to every service; stop at the first one that raises."""
        for service in self.services:
            service.post(comment)

    def flush(self) -> None:
        """Flush every service that supports flushing."""
        for service in self.services:
            flush = getattr(service, "flush", None)
            if callable(flush):
                flush()


class RawCommentWriter:
    """Writes the original lines of each check result, unformatted."""

    def __init__(self, writer: TextIO) -> None:
        self._writer = writer

    def post(self, comment: Any) -> None:
        """Write the comment's original output lines."""
        print("\n".join(comment.check_result.lines), file=self._writer)


class UnifiedCommentWriter:
    """Writes each comment in one of the unified formats.

    ``<file>: [<tool>] <message>``, ``<file>:<lnum>: [<tool>] <message>`` or
    ``<file>:<lnum>:<col>: [<tool>] <message>``; the message may span lines.
    """

    def __init__(self, writer: TextIO) -> None:
        self._writer = writer

    def post(self, comment: Any) -> None:
        """Write the comment in the unified format."""
        result = comment.check_result
        location = result.path
        if result.lnum > 0:
            location += f":{result.lnum}"
            if result.col > 0:
                location += f":{result.col}"
        print(f"{location}: [{comment.tool_name}] {comment.body}", file=self._writer)