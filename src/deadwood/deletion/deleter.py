"""Remove function source ranges from files.

Line numbers always refer to the file as it was backed up. A file's
content after any set of deletions is derived from its original bytes by
removing the union of the deleted ranges, bottom-up, so earlier removals
never shift later ones.
"""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from typing import Iterable, Union

from ..exceptions import FileSystemError
from ..graph.models import FunctionInfo

LineRange = tuple[int, int]


def merge_ranges(ranges: Iterable[LineRange]) -> list[LineRange]:
    """Merge overlapping or adjacent 1-based inclusive ranges, ascending."""
    merged: list[LineRange] = []
    for start, end in sorted(ranges):
        if merged and start <= merged[-1][1] + 1:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def remove_line_ranges(
    data: bytes, ranges: Iterable[LineRange], path: Union[str, Path] = ""
) -> bytes:
    """Drop whole lines in ``ranges`` from ``data``, keeping every other byte.

    Raises:
        FileSystemError: If a range does not fit the file
    """
    lines = data.splitlines(keepends=True)
    for start, end in reversed(merge_ranges(ranges)):
        if start < 1 or end < start or end > len(lines):
            raise FileSystemError(
                path, f"line range {start}-{end} does not fit a {len(lines)}-line file"
            )
        del lines[start - 1 : end]
    return b"".join(lines)


def ranges_by_file(functions: Iterable[FunctionInfo], resolve) -> dict[str, list[LineRange]]:
    """Group function line ranges by resolved file path."""
    grouped: dict[str, list[LineRange]] = defaultdict(list)
    for fn in functions:
        grouped[str(resolve(fn.file_path))].append((fn.start_line, fn.end_line))
    return dict(grouped)
