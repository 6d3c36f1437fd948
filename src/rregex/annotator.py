"""
State annotator: marks start, accepting and plain states on a description.

Example:
    >>> text = 'digraph {\\n    0 [ label = "0" ]\\n}\\n'
    >>> print(annotate(text, start=0, accepting={0}), end="")
    digraph {
        0 [ label = "0" shape = Mcircle peripheries = 2 ]
    }
"""

import logging
from typing import Dict, Iterable, Optional, Set

from .dot_parser import NodeStatement, find_node, parse_description
from .exceptions import AnnotationCoverageError, GraphDescriptionError
from .markers import RoleMarkers, StateRole

logger = logging.getLogger(__name__)


def _check_state_id(value, what: str) -> int:
    # bool is an int subclass but never a valid state id
    if isinstance(value, bool) or not isinstance(value, int):
        raise GraphDescriptionError(
            f"{what} state id must be an integer, got {value!r}",
            {"state_id": repr(value)},
        )
    if value < 0:
        raise GraphDescriptionError(
            f"{what} state id must be non-negative, got {value}",
            {"state_id": value},
        )
    return value


def classify_states(
    state_ids: Iterable[int], start: int, accepting: Set[int]
) -> Dict[int, StateRole]:
    """Compute the role of every state id in ``state_ids``."""
    return {
        state_id: StateRole.of(state_id == start, state_id in accepting)
        for state_id in state_ids
    }


class StateAnnotator:
    """
    Rewrites node statements so each one carries exactly one role marker.

    Nodes that already carry a marker are left as they are, which makes
    annotation idempotent: annotating an annotated description returns it
    unchanged.

    Args:
        markers: Marker encoding to apply (defaults to ``RoleMarkers()``)
    """

    def __init__(self, markers: Optional[RoleMarkers] = None):
        self.markers = markers or RoleMarkers()

    def annotate(self, text: str, start: int, accepting: Iterable[int]) -> str:
        """
        Annotate a description.

        Args:
            text: Engine description (raw or already annotated)
            start: Start state id
            accepting: Accepting state ids; duplicates and order are ignored

        Returns:
            The annotated description text

        Raises:
            AnnotationCoverageError: If the start id or an accepting id has
                no node statement
            GraphDescriptionError: If the text is malformed or an id is not
                a non-negative integer
        """
        start = _check_state_id(start, "start")
        accepting_ids = {_check_state_id(state_id, "accepting") for state_id in accepting}

        description = parse_description(text, self.markers.start_suffix)

        requested = [(start, "start")]
        requested.extend((state_id, "accepting") for state_id in sorted(accepting_ids))
        for state_id, role in requested:
            try:
                find_node(description, state_id, role)
            except AnnotationCoverageError as e:
                logger.error("Annotation coverage failure: %s", e)
                raise

        roles = classify_states(description.node_index(), start, accepting_ids)

        rewritten = 0
        statements = []
        for statement in description.statements:
            if isinstance(statement, NodeStatement) and not self.markers.is_marked(statement):
                role = roles[statement.state_id]
                statement = statement.with_attributes(
                    self.markers.attributes_for(statement, role)
                )
                rewritten += 1
            statements.append(statement)
        description.statements = statements

        logger.debug(
            "Annotated %d of %d nodes (start=%d, accepting=%s)",
            rewritten,
            len(roles),
            start,
            sorted(accepting_ids),
        )
        return description.to_text()


def annotate(
    text: str,
    start: int,
    accepting: Iterable[int],
    markers: Optional[RoleMarkers] = None,
) -> str:
    """Annotate ``text`` with role markers. See ``StateAnnotator.annotate``."""
    return StateAnnotator(markers).annotate(text, start, accepting)
