"""
Conversion pipeline: regex source to annotated graph description.

Drives the automaton engine through its stages, then runs the parser,
annotator and layout injector over the extracted description::

    IDLE -> BUILDING_ENFA -> CONVERTING_TO_NFA -> MINIMIZING
         -> EXTRACTING_GRAPH -> ANNOTATING -> DONE

Any stage can move to FAILED. Every engine handle acquired along the way is
released exactly once before the invocation ends, on both terminal states.

Each ``ConversionPipeline`` object serves exactly one invocation and owns
its handles; nothing is shared between invocations.

Example:
    >>> graph = convert_regex_sync("a|b*")
    >>> "rankdir = LR" in graph.description
    True
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, FrozenSet, Iterable, Optional

from .annotator import StateAnnotator
from .engine import AutomatonEngine, HandleScope
from .errors import ConversionResult, create_error_info
from .exceptions import EngineResourceError, RRegexError
from .layout import inject_layout_directive
from .pyformlang_engine import PyformlangEngine
from .settings import AnnotationSettings

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    """Stage of one conversion invocation."""

    IDLE = "idle"
    BUILDING_ENFA = "building_enfa"
    CONVERTING_TO_NFA = "converting_to_nfa"
    MINIMIZING = "minimizing"
    EXTRACTING_GRAPH = "extracting_graph"
    ANNOTATING = "annotating"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class AnnotatedGraph:
    """Render-ready description plus the metadata it was annotated with."""

    description: str
    start: int
    accepting: FrozenSet[int]
    width: Optional[int] = None


def annotate_description(
    text: str,
    start: int,
    accepting: Iterable[int],
    settings: Optional[AnnotationSettings] = None,
) -> str:
    """
    Run the annotator and layout injector over an existing description.

    Raises:
        AnnotationCoverageError: If a requested state has no node statement
        GraphDescriptionError: If the description is malformed
    """
    settings = settings or AnnotationSettings.default()
    annotated = StateAnnotator(settings.markers()).annotate(text, start, accepting)
    return inject_layout_directive(annotated, settings.rankdir, settings.start_suffix)


class ConversionPipeline:
    """
    One regex-to-description conversion.

    Args:
        engine: Automaton engine to drive
        settings: Annotation settings (defaults to ``AnnotationSettings()``)
    """

    def __init__(
        self,
        engine: AutomatonEngine,
        settings: Optional[AnnotationSettings] = None,
    ):
        self.engine = engine
        self.settings = settings or AnnotationSettings.default()
        self.stage = PipelineStage.IDLE
        self.failed_stage: Optional[PipelineStage] = None

    def _advance(self, stage: PipelineStage) -> None:
        logger.debug("Pipeline stage: %s -> %s", self.stage.value, stage.value)
        self.stage = stage

    def _engine_error(self, error: Exception) -> EngineResourceError:
        return EngineResourceError(
            f"Engine failed while {self.stage.value.replace('_', ' ')}: {error}",
            {"stage": self.stage.value, "cause": type(error).__name__},
        )

    async def _call(self, step: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        try:
            return await step(*args)
        except RRegexError:
            raise
        except Exception as e:
            raise self._engine_error(e) from e

    def _read(self, getter: Callable[[], Any]) -> Any:
        try:
            return getter()
        except RRegexError:
            raise
        except Exception as e:
            raise self._engine_error(e) from e

    async def run(self, source: str) -> AnnotatedGraph:
        """
        Convert ``source`` into an annotated description.

        Returns:
            AnnotatedGraph with the final description

        Raises:
            RegexSyntaxError: If the engine rejects the regex
            EngineResourceError: If a handle cannot be acquired, used or released
            AnnotationCoverageError: If the engine's metadata names a state
                missing from its description
            GraphDescriptionError: If the engine's description is malformed
        """
        if self.stage is not PipelineStage.IDLE:
            raise RuntimeError("ConversionPipeline objects run exactly once")

        try:
            with HandleScope() as scope:
                self._advance(PipelineStage.BUILDING_ENFA)
                enfa = scope.acquire(await self._call(self.engine.build_epsilon_nfa, source))

                self._advance(PipelineStage.CONVERTING_TO_NFA)
                nfa = scope.acquire(await self._call(enfa.convert_to_nfa))

                self._advance(PipelineStage.MINIMIZING)
                dfa = scope.acquire(await self._call(nfa.minimized_dfa))

                self._advance(PipelineStage.EXTRACTING_GRAPH)
                graph = scope.acquire(await self._call(dfa.graph_representation))
                text = self._read(graph.dot_description)
                start = self._read(graph.start_state)
                accepting = self._read(lambda: frozenset(graph.accepting_states()))

                self._advance(PipelineStage.ANNOTATING)
                description = annotate_description(text, start, accepting, self.settings)
        except RRegexError as e:
            self.failed_stage = self.stage
            self._advance(PipelineStage.FAILED)
            logger.info(
                "Conversion of %r failed at %s: %s", source, self.failed_stage.value, e
            )
            raise

        self._advance(PipelineStage.DONE)
        return AnnotatedGraph(
            description=description,
            start=start,
            accepting=accepting,
            width=self.settings.width,
        )


async def convert_regex(
    source: str,
    engine: Optional[AutomatonEngine] = None,
    settings: Optional[AnnotationSettings] = None,
) -> AnnotatedGraph:
    """Convert a regex into an annotated description. See ``ConversionPipeline.run``."""
    pipeline = ConversionPipeline(engine or PyformlangEngine(), settings)
    return await pipeline.run(source)


def convert_regex_sync(
    source: str,
    engine: Optional[AutomatonEngine] = None,
    settings: Optional[AnnotationSettings] = None,
) -> AnnotatedGraph:
    """Blocking wrapper around ``convert_regex`` for callers without a loop."""
    return asyncio.run(convert_regex(source, engine, settings))


async def convert_regex_result(
    source: str,
    engine: Optional[AutomatonEngine] = None,
    settings: Optional[AnnotationSettings] = None,
) -> ConversionResult:
    """
    Convert a regex, returning the outcome instead of raising.

    Categorized errors become ``ConversionResult.error``; anything else
    propagates.
    """
    pipeline = ConversionPipeline(engine or PyformlangEngine(), settings)
    try:
        graph = await pipeline.run(source)
    except RRegexError as e:
        stage = pipeline.failed_stage.value if pipeline.failed_stage else None
        return ConversionResult(source=source, error=create_error_info(e, stage))

    return ConversionResult(
        source=source,
        description=graph.description,
        start=graph.start,
        accepting=sorted(graph.accepting),
        width=graph.width,
    )
