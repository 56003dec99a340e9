"""Include Directive Parser for WGSL modules.

This module provides the IncludeDirectiveParser class for extracting include
directives from WGSL source text. Two equivalent grammars are recognized:

    & include "path";            (line form, also ``// & include 'path'``)
    /* & include "path" */       (block form)

A directive is anchored at the start of the text, after a newline, or after
a ``}`` or ``;``.
"""

from __future__ import annotations

import re
from typing import Literal

from wgsl_modules.include_directive import IncludeDirective

# Groups: 1 anchor, 2 whitespace after the anchor, 3 path, 4 terminator
LINE_INCLUDE_PATTERN = re.compile(
    r"""(\n|}|;|^)(\s*)(?://)?\s*&\s*include\s+(?:"|')(.+?)(?:"|')\s*(;|\n)""",
    re.ASCII,
)

# Same groups; the terminator group is always empty
BLOCK_INCLUDE_PATTERN = re.compile(
    r"""(\n|}|;|^)(\s*)/\*\s*&\s*include\s+(?:"|')(.+?)(?:"|')\s*;?\s*\*/()""",
    re.ASCII,
)

INCLUDE_PATTERNS: tuple[tuple[Literal["line", "block"], re.Pattern[str]], ...] = (
    ("line", LINE_INCLUDE_PATTERN),
    ("block", BLOCK_INCLUDE_PATTERN),
)


class IncludeDirectiveParser:
    """Parser for extracting include directives from WGSL source.

    Directives that do not match either grammar, such as ones with an
    unterminated quote, are left alone as ordinary text.
    """

    def extract_includes(self, content: str) -> list[IncludeDirective]:
        """Extract include directives from WGSL content.

        Args:
            content: The source text to scan.

        Returns:
            The directives of both grammars, ordered by ascending start offset.
        """
        directives: list[IncludeDirective] = []
        line_starts = self._build_line_index(content)

        for form, pattern in INCLUDE_PATTERNS:
            pos = 0
            while (match := pattern.search(content, pos)) is not None:
                anchor, indent, path, terminator = match.groups()

                start = match.start() + len(anchor)
                if anchor in ("}", ";"):
                    start += len(indent)
                end = match.end() - (1 if terminator == "\n" else 0)

                line, character = self._offset_to_position(start, line_starts)
                end_line, end_character = self._offset_to_position(end, line_starts)

                directives.append(
                    IncludeDirective(
                        form=form,
                        path=path,
                        start=start,
                        end=end,
                        line=line,
                        character=character,
                        end_line=end_line,
                        end_character=end_character,
                    )
                )

                # The terminator may anchor the next directive
                pos = match.end() - len(terminator)

        directives.sort(key=lambda directive: directive.start)
        return directives

    def _build_line_index(self, content: str) -> list[int]:
        """Build an index of line start positions.

        Args:
            content: The source content.

        Returns:
            A list where index i contains the character offset of line i.
        """
        line_starts = [0]
        for i, char in enumerate(content):
            if char == "\n":
                line_starts.append(i + 1)
        return line_starts

    def _offset_to_position(self, offset: int, line_starts: list[int]) -> tuple[int, int]:
        """Convert a character offset to line and column.

        Args:
            offset: The character offset in the content.
            line_starts: The line start index from _build_line_index.

        Returns:
            A tuple of (line, character) where both are 0-indexed.
        """
        low, high = 0, len(line_starts) - 1
        while low < high:
            mid = (low + high + 1) // 2
            if line_starts[mid] <= offset:
                low = mid
            else:
                high = mid - 1

        return low, offset - line_starts[low]


def scan_includes(content: str) -> list[IncludeDirective]:
    """Extract the include directives of ``content`` in source order."""
    return IncludeDirectiveParser().extract_includes(content)
