"""
Automaton engine interface.

The engine compiles a regex into an epsilon-NFA, reduces it to an NFA,
minimizes it into a DFA and serializes the DFA as a graph description.
Each stage hands back an explicitly releasable handle owned by the caller.

Handles enforce their own lifetime: using a handle after ``release()`` or
releasing it twice raises ``EngineResourceError``. ``HandleScope`` ties the
handles of one conversion together so they are all released exactly once,
in reverse acquisition order, whatever way the conversion ends.

Implementations subclass the ABCs below; see ``PyformlangEngine`` for the
default one.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Set, TypeVar

from .exceptions import EngineResourceError

logger = logging.getLogger(__name__)


class EngineHandle(ABC):
    """Base class for engine-owned resources."""

    kind = "engine"

    def __init__(self):
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def _ensure_live(self) -> None:
        if self._released:
            raise EngineResourceError(f"{self.kind} handle used after release")

    def _close(self) -> None:
        """Free engine-side resources. Subclasses override as needed."""

    def release(self) -> None:
        """
        Release the handle.

        Raises:
            EngineResourceError: If the handle was already released or the
                engine failed to free it
        """
        if self._released:
            raise EngineResourceError(f"{self.kind} handle released twice")
        self._released = True
        try:
            self._close()
        except EngineResourceError:
            raise
        except Exception as e:
            raise EngineResourceError(f"Failed to release {self.kind} handle: {e}") from e

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self._released:
            self.release()
        return False


class GraphHandle(EngineHandle):
    """Serialized DFA: description text plus role metadata."""

    kind = "graph"

    @abstractmethod
    def dot_description(self) -> str:
        ...

    @abstractmethod
    def start_state(self) -> int:
        ...

    @abstractmethod
    def accepting_states(self) -> Set[int]:
        ...


class DfaHandle(EngineHandle):
    kind = "DFA"

    @abstractmethod
    async def graph_representation(self) -> GraphHandle:
        ...


class NfaHandle(EngineHandle):
    kind = "NFA"

    @abstractmethod
    async def minimized_dfa(self) -> DfaHandle:
        ...


class EnfaHandle(EngineHandle):
    kind = "epsilon-NFA"

    @abstractmethod
    async def convert_to_nfa(self) -> NfaHandle:
        ...


class AutomatonEngine(ABC):
    """Entry point of an automaton engine."""

    @abstractmethod
    async def build_epsilon_nfa(self, source: str) -> EnfaHandle:
        """
        Compile ``source`` into an epsilon-NFA.

        Raises:
            RegexSyntaxError: If the regex is malformed or unsupported
        """


H = TypeVar("H", bound=EngineHandle)


class HandleScope:
    """
    Owns the engine handles acquired during one conversion.

    Usage:
        with HandleScope() as scope:
            enfa = scope.acquire(await engine.build_epsilon_nfa("a*"))
            nfa = scope.acquire(await enfa.convert_to_nfa())
        # both released here, nfa first

    On a clean exit a release failure raises ``EngineResourceError``. When
    the block is already failing, release failures are logged and the
    original error propagates.
    """

    def __init__(self):
        self._handles: List[EngineHandle] = []

    @property
    def handles(self) -> List[EngineHandle]:
        return list(self._handles)

    def acquire(self, handle: Optional[H]) -> H:
        if not isinstance(handle, EngineHandle):
            raise EngineResourceError(
                f"Engine returned {type(handle).__name__} instead of a handle"
            )
        if handle.released:
            raise EngineResourceError(f"Engine returned a released {handle.kind} handle")
        self._handles.append(handle)
        logger.debug("Acquired %s handle", handle.kind)
        return handle

    def release_all(self) -> List[EngineResourceError]:
        """Release every owned handle, newest first; return the failures."""
        failures: List[EngineResourceError] = []
        while self._handles:
            handle = self._handles.pop()
            try:
                handle.release()
                logger.debug("Released %s handle", handle.kind)
            except EngineResourceError as e:
                logger.error("Handle release failed: %s", e)
                failures.append(e)
        return failures

    def __enter__(self) -> "HandleScope":
        return self

    def __exit__(self, exc_type, exc, tb):
        failures = self.release_all()
        if failures and exc is None:
            raise EngineResourceError(
                f"Failed to release {len(failures)} engine handle(s)",
                {"errors": [str(failure) for failure in failures]},
            ) from failures[0]
        return False
