"""Hierarchical parser for indentation-structured device configuration.

Converts raw IOS-XR style text into an ordered tree of Block/Statement
nodes. Knows nothing about interfaces or VLANs and never fails: malformed
indentation degrades into flatter trees.
"""
import logging

from .schema import Block, Node, Statement

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64

# Printed at the parent's indentation but part of the block they close.
TRAILING_CLOSERS = frozenset({"end-set", "end-policy"})


def get_indent(line: str) -> int:
    """Count leading spaces."""
    return len(line) - len(line.lstrip(" "))


def is_significant(line: str) -> bool:
    """Blank lines and ``!`` comments produce no node."""
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith("!")


def normalize_indent(text: str) -> str:
    """
    Strip the indentation shared by every non-blank line.

    Line numbering is preserved, so errors still point at the right line
    of the input text.
    """
    lines = [line.rstrip() for line in text.splitlines()]
    indents = [get_indent(line) for line in lines if line.strip()]
    common = min(indents, default=0)

    return "\n".join(line[min(common, get_indent(line)):] for line in lines)


class _OpenBlock:
    """A block whose children are still being collected."""

    __slots__ = ("name", "line", "indent", "children")

    def __init__(self, name: str, line: int, indent: int):
        self.name = name
        self.line = line
        self.indent = indent
        self.children: list[Node] = []

    def freeze(self) -> Block:
        return Block(name=self.name, children=tuple(self.children), line=self.line)


class ConfigParser:
    """Parse indented configuration text into a node tree."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Initialize parser.

        Args:
            max_depth: Deepest block nesting kept; deeper lines are
                flattened into the deepest permitted block
        """
        self.max_depth = max(1, max_depth)

    def parse(self, text: str) -> tuple[Node, ...]:
        """
        Parse configuration text.

        A line becomes a Block when the next significant line is indented
        deeper; its children run until indentation returns to its own level
        or shallower. Everything else becomes a Statement.

        Args:
            text: Raw configuration text

        Returns:
            Top-level nodes in source order
        """
        lines = [
            (number, get_indent(raw), raw.strip())
            for number, raw in enumerate(text.splitlines(), start=1)
            if is_significant(raw)
        ]

        root: list[Node] = []
        stack: list[_OpenBlock] = []
        flattened = 0

        for index, (line_no, indent, stripped) in enumerate(lines):
            closing = sum(1 for b in stack if b.indent >= indent)
            if closing:
                if stripped in TRAILING_CLOSERS:
                    # Belongs to the innermost block it closes
                    stack[-1].children.append(Statement(stripped, line_no))
                    self._close(stack, root, closing)
                    continue
                self._close(stack, root, closing)

            parent = stack[-1].children if stack else root
            next_indent = lines[index + 1][1] if index + 1 < len(lines) else -1

            if next_indent > indent:
                if len(stack) < self.max_depth:
                    stack.append(_OpenBlock(stripped, line_no, indent))
                    continue
                flattened += 1

            parent.append(Statement(stripped, line_no))

        self._close(stack, root, len(stack))

        if flattened:
            logger.warning(
                f"Nesting deeper than {self.max_depth} levels flattened "
                f"({flattened} lines)"
            )

        return tuple(root)

    def _close(self, stack: list[_OpenBlock], root: list[Node], count: int) -> None:
        """Pop ``count`` open blocks, attaching each to its parent."""
        for _ in range(count):
            block = stack.pop().freeze()
            parent = stack[-1].children if stack else root
            parent.append(block)
