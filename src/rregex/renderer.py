"""
Rendering glue for annotated descriptions.

Drawing is Graphviz's job; this module only hands the description to it
through pydot, applying the caller's layout width hint. ``render`` needs
the Graphviz ``dot`` executable on PATH; ``validate_description`` does not.
"""

import logging
from typing import Optional, Union

import pydot

from .dot_parser import parse_description
from .exceptions import GraphDescriptionError, RenderError
from .pipeline import AnnotatedGraph

logger = logging.getLogger(__name__)

# Graphviz sizes are in inches
SCREEN_DPI = 96
FORMATS = ("svg", "png", "pdf", "dot")


def load_graph(text: str) -> pydot.Dot:
    """
    Parse a description with pydot.

    Raises:
        GraphDescriptionError: If pydot cannot parse the text
    """
    try:
        graphs = pydot.graph_from_dot_data(text)
    except Exception as e:
        raise GraphDescriptionError(f"Failed to parse description: {e}") from e

    if not graphs:
        raise GraphDescriptionError("No graph found in description")
    return graphs[0]


def validate_description(text: str, label_suffix: Optional[str] = None) -> None:
    """
    Check that an annotated description is safe to hand to a renderer.

    Raises:
        GraphDescriptionError: If the text is malformed, a node repeats an
            attribute, or pydot cannot parse it
    """
    description = parse_description(text, label_suffix)
    for node in description.nodes():
        keys = [key for key, _ in node.attributes]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            raise GraphDescriptionError(
                f"Node {node.state_id} repeats attributes: {', '.join(duplicates)}",
                {"state_id": node.state_id, "attributes": duplicates},
            )
    load_graph(text)


def render(
    graph: Union[AnnotatedGraph, str],
    fmt: str = "svg",
    width: Optional[int] = None,
) -> bytes:
    """
    Render a description with Graphviz.

    Args:
        graph: AnnotatedGraph or description text
        fmt: Output format (svg, png, pdf, dot)
        width: Layout width hint in pixels; falls back to the graph's own hint

    Returns:
        Rendered bytes

    Raises:
        ValueError: If the format is not supported
        GraphDescriptionError: If the description cannot be parsed
        RenderError: If Graphviz fails
    """
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported format {fmt!r}; choose one of {', '.join(FORMATS)}")

    if isinstance(graph, AnnotatedGraph):
        text = graph.description
        width = width if width is not None else graph.width
    else:
        text = graph

    dot_graph = load_graph(text)
    if width:
        dot_graph.set("size", f'"{width / SCREEN_DPI:.2f}"')

    try:
        output = dot_graph.create(prog="dot", format=fmt)
    except Exception as e:
        raise RenderError(f"Graphviz failed to render {fmt}: {e}") from e

    logger.debug("Rendered %d bytes of %s", len(output), fmt)
    return output
