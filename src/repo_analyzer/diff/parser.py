"""Turn unified diff text into per-file change records.

Only added and removed lines are recorded. Line numbers refer to the new
side of the diff: the counter starts at the hunk's declared new start and
advances on every line except removals, so a removed line shares its number
with the line that follows it.
"""

import re
from typing import Callable, Iterator, Optional, Sequence

from ..logging_config import get_logger
from ..models import Change, ChangeType, CodeDifference, OptimizationSuggestion

logger = get_logger(__name__)

PatchAdvisor = Callable[[str], Sequence[OptimizationSuggestion]]

_FILE_HEADER_RE = re.compile(r"^diff --git ", re.MULTILINE)
_HEADER_NEW_PATH_RE = re.compile(r' ("b/(?:[^"\\]|\\.)*"|b/.+)$')
_NEW_FILE_RE = re.compile(r"^\+\+\+ (.+?)\s*$", re.MULTILINE)
_HUNK_RE = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,\d+)? @@")
_OCTAL_RE = re.compile(r"[0-7]{1,3}")

# Escapes git writes inside a quoted path (core.quotePath)
_C_ESCAPES = {"a": 7, "b": 8, "t": 9, "n": 10, "v": 11, "f": 12, "r": 13, '"': 34, "\\": 92}

_NO_NEWLINE_MARKER = "\\ No newline at end of file"


def parse_diff(
    diff_text: str, patch_advisor: Optional[PatchAdvisor] = None
) -> list[CodeDifference]:
    """Parse ``git diff`` output into one CodeDifference per changed file.

    Args:
        diff_text: Unified diff with ``diff --git`` file headers
        patch_advisor: Optional callable returning suggestions for a line of
            added or removed code; their messages become ``Change.suggestion``

    Returns:
        Files in diff order; files without any added or removed line are omitted
    """
    differences = []
    for segment in _file_segments(diff_text):
        path = _segment_path(segment)
        if path is None:
            logger.debug("Skipping diff segment without a file path")
            continue

        changes = []
        for start, body in _hunks(segment):
            changes.extend(_parse_hunk(start, body, patch_advisor))

        if changes:
            differences.append(CodeDifference(file=path, changes=changes))
    return differences


def changed_paths(diff_text: str) -> list[str]:
    """New-side paths of every file segment, in diff order."""
    paths = []
    for segment in _file_segments(diff_text):
        path = _segment_path(segment)
        if path is not None:
            paths.append(path)
    return paths


def _file_segments(diff_text: str) -> Iterator[str]:
    # Text before the first header (commit message, stat block) is dropped
    for segment in _FILE_HEADER_RE.split(diff_text)[1:]:
        if segment.strip():
            yield segment


def _segment_path(segment: str) -> Optional[str]:
    header_end = segment.find("\n@@")
    header = segment if header_end == -1 else segment[:header_end]

    match = _NEW_FILE_RE.search(header)
    if match:
        path = _strip_new_prefix(unquote_path(match.group(1)))
        if path != "/dev/null":
            return path

    first_line = header.splitlines()[0] if header else ""
    match = _HEADER_NEW_PATH_RE.search(first_line)
    return _strip_new_prefix(unquote_path(match.group(1))) if match else None


def _strip_new_prefix(path: str) -> str:
    return path[2:] if path.startswith("b/") else path


def unquote_path(text: str) -> str:
    """Decode a path git wrote as a C-style quoted string.

    Paths with non-ASCII bytes or control characters appear as
    ``"b/na\\303\\257ve.js"``; octal escapes are UTF-8 bytes. Unquoted text
    is returned unchanged.
    """
    if len(text) < 2 or not (text.startswith('"') and text.endswith('"')):
        return text

    body = text[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        char = body[i]
        if char != "\\" or i + 1 == len(body):
            out.extend(char.encode("utf-8"))
            i += 1
            continue
        octal = _OCTAL_RE.match(body, i + 1)
        if octal:
            out.append(int(octal.group(), 8) & 0xFF)
            i = octal.end()
        else:
            escaped = body[i + 1]
            if escaped in _C_ESCAPES:
                out.append(_C_ESCAPES[escaped])
            else:
                out.extend(escaped.encode("utf-8"))
            i += 2
    return out.decode("utf-8", errors="replace")


def _hunks(segment: str) -> Iterator[tuple[int, list[str]]]:
    """Yield (new_start, body_lines) per hunk. Unparseable markers are skipped."""
    start: Optional[int] = None
    body: list[str] = []
    in_hunk = False

    for line in segment.split("\n"):
        if line.startswith("@@"):
            if in_hunk and start is not None:
                yield start, body
            match = _HUNK_RE.match(line)
            start = int(match.group(1)) if match else None
            if start is None:
                logger.debug("Skipping hunk with unparseable marker: %s", line)
            body = []
            in_hunk = True
        elif in_hunk:
            body.append(line)

    if in_hunk and start is not None:
        yield start, body


def _parse_hunk(
    start: int, body: list[str], patch_advisor: Optional[PatchAdvisor]
) -> list[Change]:
    changes = []
    line_number = start

    # The split leaves an empty string after the final newline
    while body and body[-1] == "":
        body = body[:-1]

    for line in body:
        if line.startswith(_NO_NEWLINE_MARKER):
            continue
        if line.startswith("+"):
            changes.append(_change(ChangeType.ADD, line_number, line[1:], patch_advisor))
            line_number += 1
        elif line.startswith("-"):
            changes.append(_change(ChangeType.REMOVE, line_number, line[1:], patch_advisor))
        else:
            line_number += 1
    return changes


def _change(
    change_type: ChangeType, line_number: int, content: str, patch_advisor: Optional[PatchAdvisor]
) -> Change:
    suggestion = None
    if patch_advisor is not None:
        messages = [s.message for s in patch_advisor(content)]
        suggestion = "\n".join(messages) if messages else None
    return Change(type=change_type, line_number=line_number, content=content, suggestion=suggestion)
