"""
Layout directive injection.

Ensures a description carries exactly one ``rankdir`` directive, placed
immediately before the closing delimiter.
"""

import logging
import re
from typing import Optional

from .dot_parser import GraphDescription, RawStatement, parse_description
from .exceptions import LayoutDirectiveConflict

logger = logging.getLogger(__name__)

RANKDIRS = ("LR", "RL", "TB", "BT")
DEFAULT_RANKDIR = "LR"
DIRECTIVE_INDENT = "    "

_RANKDIR_WORD_RE = re.compile(r"(?<!\w)rankdir(?!\w)", re.IGNORECASE)


def _directive_re(rankdir: str) -> "re.Pattern[str]":
    return re.compile(rf"^\s*rankdir\s*=\s*{rankdir}\s*;?\s*$")


def find_layout_directive(
    description: GraphDescription, rankdir: str = DEFAULT_RANKDIR
) -> Optional[RawStatement]:
    """
    Find the directive this module would have injected.

    Returns:
        The directive statement, or None if there is no rankdir at all

    Raises:
        LayoutDirectiveConflict: If a rankdir exists in any other form
            (different direction, quoted value, graph attribute list) or
            more than once
    """
    expected = _directive_re(rankdir)
    found: Optional[RawStatement] = None
    for statement in description.statements:
        if not isinstance(statement, RawStatement):
            continue
        if not _RANKDIR_WORD_RE.search(statement.line):
            continue
        if not expected.match(statement.line):
            raise LayoutDirectiveConflict(
                f"Unexpected layout directive: {statement.line.strip()!r}",
                {"line": statement.line, "expected": f"rankdir = {rankdir}"},
            )
        if found is not None:
            raise LayoutDirectiveConflict(
                "Layout directive appears more than once",
                {"line": statement.line},
            )
        found = statement
    return found


def inject_layout_directive(
    text: str, rankdir: str = DEFAULT_RANKDIR, label_suffix: Optional[str] = None
) -> str:
    """
    Insert ``rankdir = <rankdir>`` before the closing delimiter.

    Calling this on a description that already has the directive is a
    no-op. A directive in an unexpected form is reported as a warning and
    the description is returned unchanged.

    Args:
        text: Description text
        rankdir: One of ``LR``, ``RL``, ``TB``, ``BT``
        label_suffix: Start-marker suffix used in the node labels, if any

    Returns:
        Description text with exactly one layout directive

    Raises:
        ValueError: If ``rankdir`` is not a Graphviz rank direction
        GraphDescriptionError: If the text is not a valid description
    """
    if rankdir not in RANKDIRS:
        raise ValueError(f"rankdir must be one of {', '.join(RANKDIRS)}, got {rankdir!r}")

    description = parse_description(text, label_suffix)
    try:
        existing = find_layout_directive(description, rankdir)
    except LayoutDirectiveConflict as e:
        logger.warning("Skipping layout directive injection: %s", e)
        return text

    if existing is not None:
        logger.debug("Layout directive already present")
        return text

    header = description.header
    newline = header[len(header.rstrip("\r\n")):] or "\n"
    position = description.footer_span[0]
    description.statements.append(
        RawStatement(
            line=f"{DIRECTIVE_INDENT}rankdir = {rankdir}",
            newline=newline,
            span=(position, position),
        )
    )
    return description.to_text()
