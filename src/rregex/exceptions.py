"""
Core Exception Classes for rregex.

Every failure surfaced by the conversion pipeline is one of the classes
below. Each carries a ``kind`` slug so callers (and ``ErrorInfo``) can
categorize an error without inspecting its message.

Design Principle:
    exceptions.py (BASE - zero dependencies)
        ^
    dot_parser.py / annotator.py / layout.py (CORE)
        ^
    pipeline.py / pyformlang_engine.py / cli.py (EXTENSIONS)
"""

from typing import Any, Dict, Optional


class RRegexError(Exception):
    """
    Base class for all categorized rregex errors.

    Attributes:
        kind: Stable category slug (e.g. ``"regex_syntax"``).
        details: Optional structured context for the error.
    """

    kind = "rregex_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RegexSyntaxError(RRegexError):
    """Raised by the engine when a regex cannot be compiled into an epsilon-NFA."""

    kind = "regex_syntax"

    def __init__(self, source: str, message: str):
        super().__init__(message, {"source": source})
        self.source = source


class EngineResourceError(RRegexError):
    """Raised when an engine handle cannot be acquired, used or released."""

    kind = "engine_resource"


class AnnotationCoverageError(RRegexError):
    """Raised when a requested state id has no node statement in the description."""

    kind = "annotation_coverage"

    def __init__(self, state_id: int, role: Optional[str] = None):
        what = f"{role} state" if role else "state"
        super().__init__(
            f"No node statement found for {what} {state_id}",
            {"state_id": state_id, "role": role},
        )
        self.state_id = state_id
        self.role = role


class LayoutDirectiveConflict(RRegexError):
    """
    Raised when a rank-direction directive exists in an unexpected form.

    This error is recovered from: the injector logs it and leaves the
    description untouched.
    """

    kind = "layout_conflict"


class GraphDescriptionError(RRegexError):
    """Raised when a description does not follow the engine's fixed format."""

    kind = "graph_description"


class RenderError(RRegexError):
    """Raised when Graphviz fails to draw a description."""

    kind = "render"
