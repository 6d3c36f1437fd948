"""
Shared fixtures for rregex tests.

Provides a scripted implementation of the AutomatonEngine ABC
(ScriptedEngine) that returns canned descriptions and can be told to fail at
any stage, so pipeline behaviour can be tested without pyformlang.
"""

from typing import List, Optional, Set

import pytest

from rregex.engine import AutomatonEngine, DfaHandle, EnfaHandle, GraphHandle, NfaHandle
from rregex.exceptions import RegexSyntaxError


# =============================================================================
# CANNED ENGINE OUTPUT
# =============================================================================

B_STAR_DOT = """digraph {
    0 [ label = "0" ]
    0 -> 0 [ label = "b" ]
}
"""

A_OR_B_STAR_DOT = """digraph {
    0 [ label = "0" ]
    1 [ label = "1" ]
    2 [ label = "2" ]
    0 -> 1 [ label = "a" ]
    0 -> 2 [ label = "b" ]
    2 -> 2 [ label = "b" ]
}
"""

# regex -> (description, start, accepting)
CANNED = {
    "b*": (B_STAR_DOT, 0, {0}),
    "a|b*": (A_OR_B_STAR_DOT, 0, {1, 2}),
}


# =============================================================================
# SCRIPTED ENGINE
# =============================================================================

class EngineCrash(Exception):
    """Uncategorized failure raised by the scripted engine."""


class _Tracked:
    """Mixin recording lifecycle events into the engine's shared log."""

    def _track(self, engine: "ScriptedEngine"):
        self.engine = engine
        self.close_count = 0
        engine.handles.append(self)
        engine.log.append(f"acquire:{self.kind}")

    def _close(self):
        self.close_count += 1
        self.engine.log.append(f"release:{self.kind}")
        if self.kind in self.engine.fail_release:
            raise OSError(f"cannot free {self.kind}")


class ScriptedGraphHandle(_Tracked, GraphHandle):
    def __init__(self, engine, text, start, accepting):
        GraphHandle.__init__(self)
        self._track(engine)
        self._text, self._start, self._accepting = text, start, accepting

    def dot_description(self) -> str:
        self._ensure_live()
        if self.engine.fail_at == "read":
            raise EngineCrash("description unavailable")
        return self._text

    def start_state(self) -> int:
        self._ensure_live()
        return self._start

    def accepting_states(self) -> Set[int]:
        self._ensure_live()
        return set(self._accepting)


class ScriptedDfaHandle(_Tracked, DfaHandle):
    def __init__(self, engine):
        DfaHandle.__init__(self)
        self._track(engine)

    async def graph_representation(self) -> GraphHandle:
        self._ensure_live()
        if self.engine.fail_at == "graph":
            raise EngineCrash("graph extraction failed")
        return ScriptedGraphHandle(self.engine, *self.engine.output)


class ScriptedNfaHandle(_Tracked, NfaHandle):
    def __init__(self, engine):
        NfaHandle.__init__(self)
        self._track(engine)

    async def minimized_dfa(self) -> DfaHandle:
        self._ensure_live()
        if self.engine.fail_at == "dfa":
            raise EngineCrash("minimization failed")
        return ScriptedDfaHandle(self.engine)


class ScriptedEnfaHandle(_Tracked, EnfaHandle):
    def __init__(self, engine):
        EnfaHandle.__init__(self)
        self._track(engine)

    async def convert_to_nfa(self) -> NfaHandle:
        self._ensure_live()
        if self.engine.fail_at == "nfa":
            raise EngineCrash("epsilon removal failed")
        return ScriptedNfaHandle(self.engine)


class ScriptedEngine(AutomatonEngine):
    """
    Engine returning canned output.

    Args:
        output: (description, start, accepting) returned by the graph handle;
            looked up in CANNED by regex when omitted
        fail_at: One of "build", "nfa", "dfa", "graph", "read"
        fail_release: Handle kinds whose release should fail
    """

    def __init__(self, output=None, fail_at: Optional[str] = None, fail_release=()):
        self.output = output
        self.fail_at = fail_at
        self.fail_release = set(fail_release)
        self.handles: List[_Tracked] = []
        self.log: List[str] = []

    async def build_epsilon_nfa(self, source: str) -> EnfaHandle:
        if self.fail_at == "build" or (self.output is None and source not in CANNED):
            raise RegexSyntaxError(source, f"Invalid regex {source!r}")
        if self.output is None:
            self.output = CANNED[source]
        return ScriptedEnfaHandle(self)


@pytest.fixture
def scripted_engine():
    """Factory for ScriptedEngine instances."""
    return ScriptedEngine
