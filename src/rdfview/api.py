"""Main rdfview entry points.

:func:`fetch_view` runs one view over a set of selected items and
returns a :class:`FetchResult`; :func:`get_view` finds a view by builtin
name, builtin URI, or viewer name in a configuration graph.
"""

from __future__ import annotations

from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field
from rdflib import Graph, URIRef

from rdfview.errors import ViewConfigError
from rdfview.loader import find_viewers, view_from_spec
from rdfview.prefixes import STANDARD_PREFIXES
from rdfview.shortnames import ShortnameService
from rdfview.sources import Source
from rdfview.times import Times
from rdfview.view import State, View, get_builtin, get_builtin_by_name

__all__ = [
    "FetchResult",
    "fetch_view",
    "get_view",
    "new_output_graph",
]


class FetchResult(BaseModel):
    """Outcome of fetching one view."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    query: str = Field(..., description="Representative query text, for logging")
    view_type: str = Field(..., description="Strategy the view ran with")
    root_count: int = Field(..., ge=0, description="Number of selected items")
    triple_count: int = Field(..., ge=0, description="Triples in the output graph")
    query_count: int = Field(0, ge=0, description="View queries synthesized")
    query_size: int = Field(0, ge=0, description="Total characters of view query text")
    duration_ms: int = Field(0, ge=0)
    graph: Graph = Field(..., description="The merged output graph", exclude=True)


def new_output_graph(prefixes: Optional[dict[str, str]] = None) -> Graph:
    """An empty output graph with the standard prefixes bound."""
    graph = Graph()
    for prefix, ns in {**STANDARD_PREFIXES, **(prefixes or {})}.items():
        graph.bind(prefix, ns, override=True)
    return graph


def fetch_view(
    view: View,
    roots: Iterable[str],
    sources: list[Source],
    *,
    select: Optional[str] = "",
    graph: Optional[Graph] = None,
    times: Optional[Times] = None,
) -> FetchResult:
    """Fetch *view* of *roots* from *sources*.

    Args:
        view: The view to run
        roots: URIs of the selected items
        sources: Sources to query, in order
        select: Text of the SELECT that chose *roots*; enables nested queries
        graph: Output graph to merge into (a fresh one if omitted)
        times: Instrumentation sink (a fresh one if omitted)

    Returns:
        FetchResult with the representative query and the output graph
    """
    graph = graph if graph is not None else new_output_graph()
    times = times if times is not None else Times()
    state = State(select, [URIRef(r) for r in roots], graph, list(sources))

    query = view.fetch_descriptions(times, state)

    return FetchResult(
        query=query,
        view_type=view.type.value,
        root_count=len(state.roots),
        triple_count=len(graph),
        query_count=times.view_query_count,
        query_size=times.view_query_size,
        duration_ms=times.elapsed_ms(),
        graph=graph,
    )


def get_view(
    name: str,
    config: Optional[Graph] = None,
    shortnames: Optional[ShortnameService] = None,
) -> View:
    """Find a view by builtin name or URI, or by viewer name/URI in *config*.

    Raises:
        ViewConfigError: If no such view exists
    """
    view = get_builtin_by_name(name) or get_builtin(name)
    if view is not None:
        return view
    if config is not None:
        viewers = find_viewers(config)
        viewer = viewers.get(name)
        if viewer is None and URIRef(name) in viewers.values():
            viewer = URIRef(name)
        if viewer is not None:
            return view_from_spec(config, viewer, shortnames)
    raise ViewConfigError(f"no viewer named {name!r}")
