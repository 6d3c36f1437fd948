"""
Role markers for automaton states.

A state's role (start, accepting, both, plain) is encoded on its node
statement as a marker. Two encodings are supported:

- ``MarkerStyle.SHAPE``: the role is carried entirely by the node shape.
  Start states get ``Mcircle``, accepting states ``doublecircle``, states
  that are both get ``Mcircle`` drawn with two peripheries, everything else
  an explicit ``circle``.
- ``MarkerStyle.LABEL_SUFFIX``: the accepting role is carried by the shape
  (``doublecircle`` / ``circle``) and the start role by a suffix appended to
  the label text, e.g. ``label = "0 ▸"``.

In both encodings the ``shape`` attribute is what marks a node as already
annotated.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from .dot_parser import NodeStatement

MARKER_KEY = "shape"

Attribute = Tuple[str, str]


class StateRole(str, Enum):
    """Role of a state within one annotation run."""

    START = "start"
    ACCEPTING = "accepting"
    START_AND_ACCEPTING = "start_and_accepting"
    PLAIN = "plain"

    @classmethod
    def of(cls, is_start: bool, is_accepting: bool) -> "StateRole":
        if is_start and is_accepting:
            return cls.START_AND_ACCEPTING
        if is_start:
            return cls.START
        if is_accepting:
            return cls.ACCEPTING
        return cls.PLAIN

    @property
    def is_start(self) -> bool:
        return self in (StateRole.START, StateRole.START_AND_ACCEPTING)

    @property
    def is_accepting(self) -> bool:
        return self in (StateRole.ACCEPTING, StateRole.START_AND_ACCEPTING)


class MarkerStyle(str, Enum):
    """How the start role is presented."""

    SHAPE = "shape"
    LABEL_SUFFIX = "label_suffix"


def check_label_suffix(suffix: str) -> str:
    """
    Validate a start-marker label suffix.

    The suffix is written inside a quoted label on a single node line, so
    it must not begin with a digit, close the quote, escape, open or close
    an attribute list, or break the line.

    Raises:
        ValueError: If the suffix cannot be embedded in a node label
    """
    if not suffix or suffix[0].isdigit():
        raise ValueError("start_suffix must be non-empty and not start with a digit")
    bad = sorted({char for char in suffix if char in '"\\[]'})
    if bad:
        raise ValueError(f"start_suffix must not contain {' '.join(bad)}")
    if len((suffix + ".").splitlines()) > 1:
        raise ValueError("start_suffix must not contain line breaks")
    return suffix


def _set(attributes: List[Attribute], key: str, value: str) -> List[Attribute]:
    for index, (attr_key, _) in enumerate(attributes):
        if attr_key == key:
            attributes[index] = (key, value)
            return attributes
    attributes.append((key, value))
    return attributes


@dataclass(frozen=True)
class RoleMarkers:
    """
    Marker glyphs for each role under one encoding.

    Attributes:
        style: Marker encoding
        start_shape: Shape for start states (SHAPE style)
        accepting_shape: Double-outline shape for accepting states
        plain_shape: Explicit default shape for every other state
        start_suffix: Label suffix for start states (LABEL_SUFFIX style)
    """

    style: MarkerStyle = MarkerStyle.SHAPE
    start_shape: str = "Mcircle"
    accepting_shape: str = "doublecircle"
    plain_shape: str = "circle"
    start_suffix: str = " ▸"

    def __post_init__(self):
        check_label_suffix(self.start_suffix)

    def is_marked(self, node: NodeStatement) -> bool:
        """Whether the node already carries a role marker."""
        return node.has(MARKER_KEY)

    def attributes_for(self, node: NodeStatement, role: StateRole) -> List[Attribute]:
        """Return the node's attribute list with the marker for ``role`` applied."""
        attributes = list(node.attributes)

        if self.style is MarkerStyle.SHAPE:
            if role is StateRole.START_AND_ACCEPTING:
                _set(attributes, MARKER_KEY, self.start_shape)
                _set(attributes, "peripheries", "2")
            elif role is StateRole.START:
                _set(attributes, MARKER_KEY, self.start_shape)
            elif role is StateRole.ACCEPTING:
                _set(attributes, MARKER_KEY, self.accepting_shape)
            else:
                _set(attributes, MARKER_KEY, self.plain_shape)
            return attributes

        if role.is_start:
            _set(attributes, "label", f'"{node.state_id}{self.start_suffix}"')
        shape = self.accepting_shape if role.is_accepting else self.plain_shape
        return _set(attributes, MARKER_KEY, shape)
