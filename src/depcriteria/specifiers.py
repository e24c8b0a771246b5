"""Import specifier extraction using tree-sitter.

Collects the module specifier of every static ``import`` declaration in a
JavaScript or TypeScript file:

    import React from 'react';          -> "react"
    import type { User } from './types'; -> "./types"
    import './styles';                  -> "./styles"

Dynamic ``import()`` calls, ``require()`` and ``import x = require()`` are
not import declarations and are ignored.

Example:
    >>> extract_specifiers("import a from './a';\\nimport b from './a';", "x.ts")
    {'./a'}
"""

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, List, Set

import tree_sitter_typescript as ts_typescript
from tree_sitter import Language, Parser

from .errors import ParseFailure

if TYPE_CHECKING:
    from tree_sitter import Node

logger = logging.getLogger(__name__)

TYPESCRIPT_EXTENSIONS = {".ts", ".mts", ".cts"}

SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}
_HEX_ESCAPE_RE = re.compile(r"\\(?:u\{([0-9a-fA-F]+)\}|u([0-9a-fA-F]{4})|x([0-9a-fA-F]{2}))")


def get_language(file_path: str) -> Language:
    """Pick the tree-sitter grammar for a file from its extension.

    Plain TypeScript uses the ``typescript`` grammar, because ``<T>value``
    type assertions are ambiguous with JSX. Everything else, JavaScript
    included, gets ``tsx``: it accepts JSX and type annotations alike.
    """
    ext = Path(file_path).suffix.lower()
    if ext in TYPESCRIPT_EXTENSIONS:
        return Language(ts_typescript.language_typescript())
    return Language(ts_typescript.language_tsx())


def _decode_escape(text: str) -> str:
    """Decode one JavaScript escape sequence (``\\n``, ``\\x41``, ``\\u0062``, ``\\u{1F600}``)."""
    match = _HEX_ESCAPE_RE.fullmatch(text)
    if match:
        return chr(int(next(g for g in match.groups() if g), 16))
    char = text[1:]
    if char in ("\n", "\r\n", "\r", "\u2028", "\u2029"):
        # Line continuation
        return ""
    return SIMPLE_ESCAPES.get(char, char)


def _string_value(node: "Node", source: bytes) -> str:
    """Cooked value of a string literal node: fragments joined, escapes decoded."""
    parts = []
    for child in node.children:
        text = source[child.start_byte : child.end_byte].decode("utf-8")
        if child.type == "string_fragment":
            parts.append(text)
        elif child.type == "escape_sequence":
            parts.append(_decode_escape(text))
    # Recombine \uD83D\uDE00-style surrogate pairs
    return "".join(parts).encode("utf-16", "surrogatepass").decode("utf-16")


def collect_import_nodes(root: "Node") -> List["Node"]:
    """Return every ``import_statement`` node in the tree, in document order."""
    found = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "import_statement":
            found.append(node)
            continue
        stack.extend(reversed(node.children))
    return found


def extract_specifiers(source: str, file_path: str) -> Set[str]:
    """Extract the distinct import specifiers from source text.

    Args:
        source: File contents.
        file_path: Path of the file, used for grammar selection and messages.

    Returns:
        Set of specifier strings.

    Raises:
        ParseFailure: If the source contains syntax errors.
    """
    data = source.encode("utf-8")
    parser = Parser(get_language(file_path))
    tree = parser.parse(data)

    if tree.root_node.has_error:
        raise ParseFailure(file_path, "syntax error")

    specifiers = set()
    for node in collect_import_nodes(tree.root_node):
        source_node = node.child_by_field_name("source")
        if source_node is None:
            continue
        specifiers.add(_string_value(source_node, data))

    logger.debug("Found %d import specifier(s) in %s", len(specifiers), file_path)
    return specifiers


def extract_file_specifiers(file_path: str) -> Set[str]:
    """Read a file and extract its import specifiers."""
    try:
        source = Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseFailure(file_path, str(e)) from e
    return extract_specifiers(source, file_path)
