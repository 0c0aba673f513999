"""Parsing of unified diffs, including git's extended headers."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from itertools import islice
from typing import IO, Optional, Union

TOKEN_DIFF_GIT = "diff --git"
TOKEN_OLD_FILE = "---"
TOKEN_NEW_FILE = "+++"
TOKEN_START_HUNK = "@@"
TOKEN_UNCHANGED_LINE = " "
TOKEN_ADDED_LINE = "+"
TOKEN_DELETED_LINE = "-"
TOKEN_NO_NEWLINE_AT_EOF = "\\"

MAX_LINE_LENGTH = 4096

Source = Union[str, bytes, IO[str], IO[bytes]]


class DiffParseError(ValueError):
    """Base class of errors raised while parsing a diff."""


class NoNewFileError(DiffParseError):
    """An old-file header was not followed by a new-file header."""

    def __init__(self) -> None:
        super().__init__("no expected new file line")


class NoHunksError(DiffParseError):
    """A file diff had no hunks where they were expected."""

    def __init__(self) -> None:
        super().__init__("no expected hunks")


class InvalidHunkRangeError(DiffParseError):
    """A hunk header line could not be parsed."""

    def __init__(self, invalid: str) -> None:
        super().__init__(f"invalid hunk range: {invalid}")
        self.invalid = invalid


class LineType(enum.IntEnum):
    """Kind of a line inside a hunk."""

    UNCHANGED = 0
    ADDED = 1
    DELETED = 2


@dataclass
class Line:
    """A single line of a hunk.

    ``lnum_diff`` is the position of the line counted from the first hunk
    header of the file; ``lnum_old``/``lnum_new`` are 0 where not applicable.
    """

    type: LineType
    content: str
    lnum_diff: int = 0
    lnum_old: int = 0
    lnum_new: int = 0


@dataclass
class Hunk:
    """A change hunk of a file diff."""

    start_line_old: int
    line_length_old: int
    start_line_new: int
    line_length_new: int
    section: str = ""
    lines: list[Line] = field(default_factory=list)


@dataclass
class FileDiff:
    """The unified diff of a single file."""

    path_old: str = ""
    path_new: str = ""
    time_old: str = ""
    time_new: str = ""
    hunks: list[Hunk] = field(default_factory=list)
    extended: list[str] = field(default_factory=list)


@dataclass
class HunkRange:
    """The parsed contents of a ``@@ -l,s +l,s @@ section`` line."""

    lold: int
    sold: int
    lnew: int
    snew: int
    section: str = ""


class LineReader:
    """Reads a diff line by line with lookahead.

    Lines longer than ``max_line_length`` characters are truncated; the
    remainder of such a line is consumed and dropped.
    """

    def __init__(self, source: Source, max_line_length: int = MAX_LINE_LENGTH) -> None:
        if hasattr(source, "read"):
            source = source.read()
        if isinstance(source, (bytes, bytearray)):
            source = bytes(source).decode("utf-8", "surrogateescape")
        self._text: str = source
        self._pos = 0
        self.max_line_length = max_line_length

    def peek(self, n: int) -> Optional[str]:
        """Return the next ``n`` characters without consuming them, or None
        if fewer than ``n`` remain."""
        chunk = self._text[self._pos:self._pos + n]
        return chunk if len(chunk) == n else None

    def readline(self) -> str:
        """Consume and return the next line without its line ending.

        Raises EOFError when nothing is left to read.
        """
        if self._pos >= len(self._text):
            raise EOFError("end of diff input")
        end = self._text.find("\n", self._pos)
        if end == -1:
            line = self._text[self._pos:]
            self._pos = len(self._text)
        else:
            line = self._text[self._pos:end]
            self._pos = end + 1
            if line.endswith("\r"):
                line = line[:-1]
        return line[:self.max_line_length]


def parse_multi_file(source: Source) -> list[FileDiff]:
    """Parse a diff that may cover several files.

    Parsing stops quietly at the first file diff that cannot be parsed.
    """
    parser = FileParser(LineReader(source))
    diffs: list[FileDiff] = []
    while True:
        try:
            fd = parser.parse()
        except DiffParseError:
            break
        if fd is None:
            break
        diffs.append(fd)
    return diffs


def parse_file(source: Source) -> Optional[FileDiff]:
    """Parse the diff of a single file; None if the input holds none."""
    return FileParser(LineReader(source)).parse()


class FileParser:
    """Parses one file diff at a time from a LineReader."""

    def __init__(self, reader: LineReader) -> None:
        self.reader = reader

    def parse(self) -> Optional[FileDiff]:
        """Parse the next file diff, or return None at the end of input."""
        reader = self.reader
        fd = FileDiff(extended=parse_extended_header(reader))
        head = reader.peek(len(TOKEN_OLD_FILE))
        if head is None:
            return fd if fd.extended else None
        if head.startswith(TOKEN_OLD_FILE):
            fd.path_old, fd.time_old = parse_file_header(reader.readline())
            nxt = reader.peek(len(TOKEN_NEW_FILE))
            if nxt is None or not nxt.startswith(TOKEN_NEW_FILE):
                raise NoNewFileError()
            fd.path_new, fd.time_new = parse_file_header(reader.readline())
        fd.hunks = self._parse_hunks()
        return fd

    def _parse_hunks(self) -> list[Hunk]:
        reader = self.reader
        head = reader.peek(len(TOKEN_OLD_FILE))
        if head is None:
            raise NoHunksError()
        if not head.startswith(TOKEN_START_HUNK):
            head = reader.peek(len(TOKEN_DIFF_GIT))
            if head is not None and head.startswith(TOKEN_DIFF_GIT):
                # A git diff may hold a file diff without hunks, e.g. a
                # deleted empty file.
                return []
            raise NoHunksError()
        hunk_parser = HunkParser(reader)
        hunks: list[Hunk] = []
        while (hunk := hunk_parser.parse()) is not None:
            hunks.append(hunk)
        return hunks


class HunkParser:
    """Parses consecutive hunks, numbering lines across them."""

    def __init__(self, reader: LineReader, lnumdiff: int = 0) -> None:
        self.reader = reader
        self.lnumdiff = lnumdiff

    def parse(self) -> Optional[Hunk]:
        """Parse the next hunk, or return None if no hunk header follows."""
        reader = self.reader
        head = reader.peek(len(TOKEN_START_HUNK))
        if head is None or not head.startswith(TOKEN_START_HUNK):
            return None
        hr = parse_hunk_range(reader.readline())
        hunk = Hunk(
            start_line_old=hr.lold,
            line_length_old=hr.sold,
            start_line_new=hr.lnew,
            line_length_new=hr.snew,
            section=hr.section,
        )
        lold, lnew = hr.lold, hr.lnew
        while not self._done(lold, lnew, hr):
            token = reader.peek(1)
            if token is None:
                break
            if token in (TOKEN_UNCHANGED_LINE, TOKEN_ADDED_LINE, TOKEN_DELETED_LINE):
                self.lnumdiff += 1
                content = reader.readline()[len(token):]
                if token == TOKEN_UNCHANGED_LINE:
                    line = Line(LineType.UNCHANGED, content, self.lnumdiff, lold, lnew)
                    lold += 1
                    lnew += 1
                elif token == TOKEN_ADDED_LINE:
                    line = Line(LineType.ADDED, content, self.lnumdiff, 0, lnew)
                    lnew += 1
                else:
                    line = Line(LineType.DELETED, content, self.lnumdiff, lold, 0)
                    lold += 1
                hunk.lines.append(line)
            elif token == TOKEN_NO_NEWLINE_AT_EOF:
                reader.readline()
            else:
                break
        # The next hunk header takes a position of its own.
        self.lnumdiff += 1
        return hunk

    def _done(self, lold: int, lnew: int, hr: HunkRange) -> bool:
        end = lold >= hr.lold + hr.sold and lnew >= hr.lnew + hr.snew
        token = self.reader.peek(1)
        return token is None or (token != TOKEN_NO_NEWLINE_AT_EOF and end)


def parse_file_header(line: str) -> tuple[str, str]:
    """Split a ``---``/``+++`` header line into filename and timestamp."""
    rest = line[len(TOKEN_OLD_FILE) + 1:]
    name, tab, timestamp = rest.rpartition("\t")
    if not tab:
        return unquote_c_style(rest), ""
    return unquote_c_style(name), timestamp


_ESCAPES = {
    ord("a"): 0x07,
    ord("b"): 0x08,
    ord("t"): 0x09,
    ord("n"): 0x0A,
    ord("v"): 0x0B,
    ord("f"): 0x0C,
    ord("r"): 0x0D,
    ord('"'): ord('"'),
    ord("\\"): ord("\\"),
}
_DIGITS = frozenset(b"0123456789")
_OCTAL_DIGITS = frozenset(b"01234567")


def unquote_c_style(text: str) -> str:
    """Undo git's C-style quoting of a file name, if it is quoted."""
    if not text.startswith('"'):
        return text
    if text.endswith('"'):
        text = text[:-1]
    if text.startswith('"'):
        text = text[1:]

    out = bytearray()
    it = iter(text.encode("utf-8", "surrogateescape"))
    for ch in it:
        if ch != ord("\\"):
            out.append(ch)
            continue
        esc = next(it, None)
        if esc is None:
            break
        if esc in _ESCAPES:
            out.append(_ESCAPES[esc])
        elif esc in _DIGITS:
            chunk = bytes([esc]) + bytes(islice(it, 2))
            if len(chunk) < 3:
                out += chunk
                break
            value = int(chunk, 8) if set(chunk) <= _OCTAL_DIGITS else 256
            if value > 0xFF:
                out += chunk
            else:
                out.append(value)
        else:
            out.append(esc)
    return out.decode("utf-8", "surrogateescape")


def parse_extended_header(reader: LineReader) -> list[str]:
    """Read git's extended header lines starting with ``diff --git``."""
    head = reader.peek(len(TOKEN_DIFF_GIT))
    if head is None or not head.startswith(TOKEN_DIFF_GIT):
        return []
    lines = [reader.readline()]
    while True:
        head = reader.peek(len(TOKEN_DIFF_GIT))
        if head is None or head.startswith(TOKEN_OLD_FILE) or head.startswith(TOKEN_DIFF_GIT):
            break
        lines.append(reader.readline())
    return lines


def parse_hunk_range(rangeline: str) -> HunkRange:
    """Parse ``@@ -lold[,sold] +lnew[,snew] @@[ section]``."""
    parts = rangeline.split(" ", 4)
    if len(parts) < 4 or parts[0] != "@@" or parts[3] != "@@":
        raise InvalidHunkRangeError(rangeline)
    old, new = parts[1], parts[2]
    if not old.startswith("-") or not new.startswith("+"):
        raise InvalidHunkRangeError(rangeline)
    try:
        lold, sold = parse_ls(old[1:])
        lnew, snew = parse_ls(new[1:])
    except ValueError:
        raise InvalidHunkRangeError(rangeline) from None
    section = parts[4] if len(parts) == 5 else ""
    return HunkRange(lold, sold, lnew, snew, section)


_INT_RE = re.compile(r"[+-]?[0-9]+")


def _atoi(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    return int(text)


def parse_ls(ls: str) -> tuple[int, int]:
    """Parse ``l[,s]``; the size defaults to 1."""
    start, comma, size = ls.partition(",")
    return _atoi(start), (_atoi(size) if comma else 1)