"""
Automaton engine backed by pyformlang.

pyformlang does the regex parsing, epsilon removal, determinization and
minimization. This module only wraps each stage in a handle and serializes
the minimized DFA into the engine description format, numbering states
breadth-first from the start state (outgoing edges visited in symbol
order), so the start state is always ``0``.

Example:
    >>> import asyncio
    >>> from rregex.pipeline import convert_regex
    >>> graph = asyncio.run(convert_regex("b*", engine=PyformlangEngine()))
    >>> graph.start, graph.accepting
    (0, frozenset({0}))
"""

import logging
from collections import deque
from typing import Any, Dict, Hashable, List, Set, Tuple

import networkx as nx
from pyformlang.regular_expression import PythonRegex

from .engine import AutomatonEngine, DfaHandle, EnfaHandle, GraphHandle, NfaHandle
from .exceptions import EngineResourceError, RegexSyntaxError

logger = logging.getLogger(__name__)


def _escape_label(value: Any) -> str:
    return str(value).replace("\\", "\\\\").replace('"', '\\"')


def _number_states(graph: nx.MultiDiGraph, start: Hashable) -> Dict[Hashable, int]:
    order = {start: 0}
    queue = deque([start])
    while queue:
        node = queue.popleft()
        successors = sorted(
            ((str(data.get("label", "")), target) for _, target, data in graph.out_edges(node, data=True)),
            key=lambda item: item[0],
        )
        for _, target in successors:
            if target not in order:
                order[target] = len(order)
                queue.append(target)

    for node in sorted(graph.nodes, key=str):
        if node not in order:
            order[node] = len(order)
    return order


def serialize_dfa(graph: nx.MultiDiGraph) -> Tuple[str, int, Set[int]]:
    """
    Serialize a DFA graph into the engine description format.

    A graph with no states (the empty language) is written as a single
    non-accepting start state.

    Args:
        graph: DFA as produced by pyformlang's ``to_networkx()``; nodes carry
            ``is_start`` / ``is_final`` flags and edges a ``label``

    Returns:
        Tuple of (description text, start id, accepting ids)

    Raises:
        EngineResourceError: If a non-empty graph does not have exactly one
            start state
    """
    # pyformlang adds unflagged "starting_*" nodes as drawing hints
    graph = graph.subgraph(node for node, data in graph.nodes(data=True) if "is_final" in data)
    if graph.number_of_nodes() == 0:
        # minimize() drops every state of an empty language; keep a dead start
        logger.debug("Minimized DFA has no states; emitting a single dead start state")
        graph = nx.MultiDiGraph()
        graph.add_node("dead", is_start=True, is_final=False)

    starts = [node for node, data in graph.nodes(data=True) if data.get("is_start")]
    if len(starts) != 1:
        raise EngineResourceError(
            f"Minimized DFA must have exactly one start state, found {len(starts)}"
        )

    order = _number_states(graph, starts[0])
    accepting = {order[node] for node, data in graph.nodes(data=True) if data.get("is_final")}

    lines: List[str] = ["digraph {"]
    for index in sorted(order.values()):
        lines.append(f'    {index} [ label = "{index}" ]')

    edges = sorted(
        (order[source], str(data.get("label", "")), order[target])
        for source, target, data in graph.edges(data=True)
    )
    for source, label, target in edges:
        lines.append(f'    {source} -> {target} [ label = "{_escape_label(label)}" ]')
    lines.append("}")

    return "\n".join(lines) + "\n", 0, accepting


class PyformlangGraphHandle(GraphHandle):
    def __init__(self, text: str, start: int, accepting: Set[int]):
        super().__init__()
        self._text = text
        self._start = start
        self._accepting = frozenset(accepting)

    def dot_description(self) -> str:
        self._ensure_live()
        return self._text

    def start_state(self) -> int:
        self._ensure_live()
        return self._start

    def accepting_states(self) -> Set[int]:
        self._ensure_live()
        return set(self._accepting)


class PyformlangDfaHandle(DfaHandle):
    def __init__(self, dfa):
        super().__init__()
        self._dfa = dfa

    async def graph_representation(self) -> GraphHandle:
        self._ensure_live()
        text, start, accepting = serialize_dfa(self._dfa.to_networkx())
        return PyformlangGraphHandle(text, start, accepting)

    def _close(self) -> None:
        self._dfa = None


class PyformlangNfaHandle(NfaHandle):
    def __init__(self, nfa):
        super().__init__()
        self._nfa = nfa

    async def minimized_dfa(self) -> DfaHandle:
        self._ensure_live()
        return PyformlangDfaHandle(self._nfa.to_deterministic().minimize())

    def _close(self) -> None:
        self._nfa = None


class PyformlangEnfaHandle(EnfaHandle):
    def __init__(self, enfa):
        super().__init__()
        self._enfa = enfa

    async def convert_to_nfa(self) -> NfaHandle:
        self._ensure_live()
        return PyformlangNfaHandle(self._enfa.remove_epsilon_transitions())

    def _close(self) -> None:
        self._enfa = None


class PyformlangEngine(AutomatonEngine):
    """Engine compiling Python-style regexes with pyformlang."""

    async def build_epsilon_nfa(self, source: str) -> EnfaHandle:
        if not isinstance(source, str):
            raise RegexSyntaxError(repr(source), "Regex source must be a string")
        if not source:
            raise RegexSyntaxError(source, "Invalid regex: empty expression")

        try:
            enfa = PythonRegex(source).to_epsilon_nfa()
        except Exception as e:
            raise RegexSyntaxError(source, f"Invalid regex {source!r}: {e}") from e

        logger.debug("Built epsilon-NFA for %r with %d states", source, len(enfa.states))
        return PyformlangEnfaHandle(enfa)
