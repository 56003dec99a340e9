"""Include Directive data model for WGSL module includes.

This module provides the IncludeDirective dataclass that represents include
directives (``& include "path"`` and ``/* & include "path" */``) in WGSL
source code, supporting splicing in the resolver and links in the editor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from lsprotocol import types


@dataclass(frozen=True)
class IncludeDirective:
    """Represents a WGSL module include directive.

    This immutable dataclass holds the referenced path and the span of the
    whole directive in the original source text. The span is replaced by the
    included module's flattened code during resolution.

    Attributes:
        form: Grammar the directive was written in ("line" or "block")
        path: The path exactly as written between the quotes
        start: Offset of the first character of the directive
        end: Offset one past the last character of the directive
        line: Starting line number (0-indexed)
        character: Starting character position
        end_line: Ending line number (0-indexed)
        end_character: Ending character position
    """

    form: Literal["line", "block"]
    path: str
    start: int
    end: int
    line: int
    character: int
    end_line: int
    end_character: int

    @property
    def source_range(self) -> range:
        """The half-open offset range of the directive in the source."""
        return range(self.start, self.end)

    def contains(self, line: int, character: int) -> bool:
        """Check whether a 0-indexed line/character position lies on the directive."""
        if (line, character) < (self.line, self.character):
            return False
        return (line, character) <= (self.end_line, self.end_character)

    def to_range(self) -> types.Range:
        """Convert this directive's span to an LSP Range object."""
        from lsprotocol import types

        return types.Range(
            start=types.Position(line=self.line, character=self.character),
            end=types.Position(line=self.end_line, character=self.end_character),
        )
