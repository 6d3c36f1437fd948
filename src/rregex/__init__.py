from .exceptions import (
    RRegexError,
    RegexSyntaxError,
    EngineResourceError,
    AnnotationCoverageError,
    LayoutDirectiveConflict,
    GraphDescriptionError,
    RenderError,
)

# Parser, annotator and layout injector
from .dot_parser import (
    GraphDescription,
    NodeStatement,
    EdgeStatement,
    RawStatement,
    parse_description,
    find_node,
    locate_label,
)
from .markers import MarkerStyle, RoleMarkers, StateRole
from .annotator import StateAnnotator, annotate, classify_states
from .layout import inject_layout_directive, find_layout_directive

# Engine interface
from .engine import (
    AutomatonEngine,
    EngineHandle,
    EnfaHandle,
    NfaHandle,
    DfaHandle,
    GraphHandle,
    HandleScope,
)
from .pyformlang_engine import PyformlangEngine

# Orchestration
from .settings import AnnotationSettings, load_settings
from .errors import ErrorInfo, ConversionResult, create_error_info
from .pipeline import (
    AnnotatedGraph,
    ConversionPipeline,
    PipelineStage,
    annotate_description,
    convert_regex,
    convert_regex_sync,
    convert_regex_result,
)

__version__ = "0.3.0"
__all__ = [
    "RRegexError",
    "RegexSyntaxError",
    "EngineResourceError",
    "AnnotationCoverageError",
    "LayoutDirectiveConflict",
    "GraphDescriptionError",
    "RenderError",
    "GraphDescription",
    "NodeStatement",
    "EdgeStatement",
    "RawStatement",
    "parse_description",
    "find_node",
    "locate_label",
    "MarkerStyle",
    "RoleMarkers",
    "StateRole",
    "StateAnnotator",
    "annotate",
    "classify_states",
    "inject_layout_directive",
    "find_layout_directive",
    "AutomatonEngine",
    "EngineHandle",
    "EnfaHandle",
    "NfaHandle",
    "DfaHandle",
    "GraphHandle",
    "HandleScope",
    "PyformlangEngine",
    "AnnotationSettings",
    "load_settings",
    "ErrorInfo",
    "ConversionResult",
    "create_error_info",
    "AnnotatedGraph",
    "ConversionPipeline",
    "PipelineStage",
    "annotate_description",
    "convert_regex",
    "convert_regex_sync",
    "convert_regex_result",
]
