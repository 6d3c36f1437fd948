"""
Graph description parser for automaton engine output.

The engine serializes an automaton as a small, fixed subset of the DOT
language: a ``digraph {`` header, one statement per line, and a closing
``}``. This module splits that text into discrete statements so callers can
rewrite individual node statements without touching anything else.

Only the engine's subset is understood. Node statements look like::

    0 [ label = "0" ]

and edge statements like::

    0 -> 1 [ label = "a" ]

Node lookup is done on the bracketed attribute fragment with the label
digits delimited by quotes, so state ``1`` never matches state ``10`` and
an edge labelled ``"1"`` is never mistaken for a node. A label is the bare
state id, optionally followed by the start-marker suffix the caller names;
``"1a"`` is not a state label.

Example:
    >>> desc = parse_description('digraph {\\n    0 [ label = "0" ]\\n}\\n')
    >>> find_node(desc, 0).attrs_span
    (16, 31)
"""

import logging
import re
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .exceptions import AnnotationCoverageError, GraphDescriptionError

logger = logging.getLogger(__name__)

HEADER_RE = re.compile(r"^\s*(?:strict\s+)?digraph\s*(?:\w+\s*)?\{\s*$")
FOOTER_RE = re.compile(r"^\s*\}\s*$")
NODE_RE = re.compile(
    r"^(?P<prefix>[ \t]*(?P<node>\d+)[ \t]*)(?P<attrs>\[[^\[\]]*\])(?P<suffix>[ \t]*;?[ \t]*)$"
)
EDGE_RE = re.compile(
    r"^[ \t]*(?P<source>\d+)[ \t]*->[ \t]*(?P<target>\d+)(?:[ \t]*\[.*\])?[ \t]*;?[ \t]*$"
)
ATTR_RE = re.compile(r'(?P<key>[A-Za-z_]\w*)\s*=\s*(?P<value>"(?:[^"\\]|\\.)*"|[^\s\]"]+)')

LABEL_FRAGMENT = (
    r'\[[^\[\]"]*?(?<!\w)label\s*=\s*"(?P<digits>\d+)(?P<suffix>{suffix})?"[^\[\]]*\]'
)

# The digit run must be closed by the quote, or by the start-marker suffix
# when the caller names one.
LABEL_FRAGMENT_RE = re.compile(LABEL_FRAGMENT.format(suffix="(?!)"))


@lru_cache(maxsize=None)
def _label_fragment_re(label_suffix: Optional[str]) -> "re.Pattern[str]":
    if not label_suffix:
        return LABEL_FRAGMENT_RE
    return re.compile(LABEL_FRAGMENT.format(suffix=re.escape(label_suffix)))


Attribute = Tuple[str, str]
Span = Tuple[int, int]


def format_attributes(attributes: List[Attribute]) -> str:
    """Format an attribute list the way the engine writes it."""
    if not attributes:
        return "[ ]"
    return "[ " + " ".join(f"{key} = {value}" for key, value in attributes) + " ]"


@dataclass(frozen=True)
class NodeStatement:
    """A node declaration, e.g. ``0 [ label = "0" ]``."""

    state_id: int
    node: str
    line: str
    newline: str
    span: Span
    attrs_span: Span
    attributes: List[Attribute] = field(default_factory=list)
    label_suffix: Optional[str] = None

    def get(self, key: str) -> Optional[str]:
        for attr_key, value in self.attributes:
            if attr_key == key:
                return value
        return None

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def with_attributes(self, attributes: List[Attribute]) -> "NodeStatement":
        """
        Return a copy of this statement with its attribute list replaced.

        Everything outside the bracketed fragment (indentation, node name,
        trailing semicolon) is kept as written. The returned statement keeps
        the original spans so it can still be related to the source text.
        """
        start = self.attrs_span[0] - self.span[0]
        end = self.attrs_span[1] - self.span[0]
        line = self.line[:start] + format_attributes(attributes) + self.line[end:]
        return replace(self, line=line, attributes=list(attributes))


@dataclass(frozen=True)
class EdgeStatement:
    """An edge declaration, kept verbatim."""

    source: int
    target: int
    line: str
    newline: str
    span: Span


@dataclass(frozen=True)
class RawStatement:
    """Any other line between the header and the closing delimiter."""

    line: str
    newline: str
    span: Span


Statement = Union[NodeStatement, EdgeStatement, RawStatement]


@dataclass
class GraphDescription:
    """
    A parsed engine description.

    ``leading`` and ``trailing`` hold the text before the header line and
    after the closing delimiter line (normally empty and ``""``).
    """

    text: str
    leading: str
    header: str
    statements: List[Statement]
    footer: str
    footer_span: Span
    trailing: str

    def nodes(self) -> Iterator[NodeStatement]:
        for statement in self.statements:
            if isinstance(statement, NodeStatement):
                yield statement

    def edges(self) -> Iterator[EdgeStatement]:
        for statement in self.statements:
            if isinstance(statement, EdgeStatement):
                yield statement

    def node_index(self) -> Dict[int, NodeStatement]:
        return {node.state_id: node for node in self.nodes()}

    def to_text(self) -> str:
        """Rebuild the description text from its statements."""
        parts = [self.leading, self.header]
        parts.extend(statement.line + statement.newline for statement in self.statements)
        parts.append(self.footer)
        parts.append(self.trailing)
        return "".join(parts)


def _split_newline(line: str) -> Tuple[str, str]:
    stripped = line.rstrip("\r\n")
    return stripped, line[len(stripped):]


def _parse_node(
    line: str, newline: str, offset: int, label_suffix: Optional[str] = None
) -> Optional[NodeStatement]:
    match = NODE_RE.match(line)
    if not match:
        return None

    fragment = match.group("attrs")
    label = _label_fragment_re(label_suffix).fullmatch(fragment)
    if not label:
        raise GraphDescriptionError(
            f"Node statement without a numeric label: {line.strip()!r}",
            {"line": line},
        )

    attrs_start = offset + match.start("attrs")
    return NodeStatement(
        state_id=int(label.group("digits")),
        node=match.group("node"),
        line=line,
        newline=newline,
        span=(offset, offset + len(line)),
        attrs_span=(attrs_start, attrs_start + len(fragment)),
        attributes=[(m.group("key"), m.group("value")) for m in ATTR_RE.finditer(fragment)],
        label_suffix=label.group("suffix"),
    )


def _check_state_ids(statements: List[Statement]) -> None:
    """Enforce unique, contiguous state ids starting at 0."""
    seen: Dict[int, NodeStatement] = {}
    for statement in statements:
        if not isinstance(statement, NodeStatement):
            continue
        if statement.state_id in seen:
            raise GraphDescriptionError(
                f"Duplicate node statement for state {statement.state_id}",
                {"state_id": statement.state_id},
            )
        seen[statement.state_id] = statement

    if sorted(seen) != list(range(len(seen))):
        raise GraphDescriptionError(
            "State ids must be contiguous and start at 0",
            {"state_ids": sorted(seen)},
        )


def parse_description(text: str, label_suffix: Optional[str] = None) -> GraphDescription:
    """
    Parse an engine description into discrete statements.

    Args:
        text: Raw description text as emitted by the engine
        label_suffix: Start-marker suffix allowed after the label digits;
            without one, labels must be the bare state id

    Returns:
        GraphDescription holding header, statements and closing delimiter

    Raises:
        GraphDescriptionError: If the header or closing delimiter is missing,
            a node label is not a state id (plus ``label_suffix``), or
            state ids are duplicated or not contiguous from 0
    """
    if not isinstance(text, str):
        raise GraphDescriptionError(
            f"Description must be text, got {type(text).__name__}"
        )

    lines = text.splitlines(keepends=True)
    offsets = []
    position = 0
    for line in lines:
        offsets.append(position)
        position += len(line)

    content = [i for i, line in enumerate(lines) if line.strip()]
    if not content or not HEADER_RE.match(lines[content[0]]):
        raise GraphDescriptionError("Description has no 'digraph {' header line")
    if len(content) < 2 or not FOOTER_RE.match(lines[content[-1]]):
        raise GraphDescriptionError("Description has no closing '}' line")

    header_index, footer_index = content[0], content[-1]

    statements: List[Statement] = []
    for index in range(header_index + 1, footer_index):
        line, newline = _split_newline(lines[index])
        offset = offsets[index]
        span = (offset, offset + len(line))

        node = _parse_node(line, newline, offset, label_suffix)
        if node is not None:
            statements.append(node)
            continue

        edge = EDGE_RE.match(line)
        if edge:
            statements.append(
                EdgeStatement(
                    source=int(edge.group("source")),
                    target=int(edge.group("target")),
                    line=line,
                    newline=newline,
                    span=span,
                )
            )
            continue

        statements.append(RawStatement(line=line, newline=newline, span=span))

    _check_state_ids(statements)

    footer_offset = offsets[footer_index]
    description = GraphDescription(
        text=text,
        leading="".join(lines[:header_index]),
        header=lines[header_index],
        statements=statements,
        footer=lines[footer_index],
        footer_span=(footer_offset, footer_offset + len(lines[footer_index])),
        trailing="".join(lines[footer_index + 1:]),
    )
    logger.debug(
        "Parsed description: %d nodes, %d edges",
        sum(1 for _ in description.nodes()),
        sum(1 for _ in description.edges()),
    )
    return description


def find_node(
    description: GraphDescription, state_id: int, role: Optional[str] = None
) -> NodeStatement:
    """
    Locate the node statement whose label encodes ``state_id``.

    Args:
        description: Parsed description
        state_id: State identifier to look up
        role: Optional role name used in the error message

    Returns:
        The matching NodeStatement (its ``attrs_span`` points into
        ``description.text``)

    Raises:
        AnnotationCoverageError: If no node statement carries that label
    """
    for node in description.nodes():
        if node.state_id == state_id:
            return node
    raise AnnotationCoverageError(state_id, role)


def locate_label(text: str, state_id: int, label_suffix: Optional[str] = None) -> Span:
    """
    Return the span of the attribute list of the node labelled ``state_id``.

    Raises:
        AnnotationCoverageError: If the state has no node statement
        GraphDescriptionError: If the text is not a valid description
    """
    return find_node(parse_description(text, label_suffix), state_id).attrs_span
