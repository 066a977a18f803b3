"""Build views from declarative viewer descriptions in RDF.

A viewer is described with the Linked Data API vocabulary::

    @prefix api:  <http://purl.org/linked-data/api/vocab#> .
    @prefix elda: <http://www.epimorphics.com/vocabularies/lda#> .

    ex:bookViewer a api:Viewer ;
        api:name "books" ;
        api:property rdfs:label, ( dct:creator foaf:name ) ;
        api:properties "isbn, publisher.name" ;
        api:include api:basicViewer ;
        elda:describeThreshold 50 .

``api:property`` values are single properties or RDF lists (one chain
each), ``api:properties`` holds comma-separated dotted short names, and
``api:include`` pulls in the chains and settings of other viewers.
Builtin viewers (``api:basicViewer`` and friends) are answered as the
shared, read-only prototypes.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rdflib import RDF, Graph, Literal, URIRef
from rdflib.term import Node

from rdfview.errors import RDFFileError, ViewConfigError
from rdfview.shortnames import ShortnameService
from rdfview.view import View, get_builtin
from rdfview.vocab import API, ELDA

logger = logging.getLogger(__name__)


def load_config_graph(*paths: str | Path) -> Graph:
    """Parse one or more RDF configuration files into a graph."""
    graph = Graph()
    for path in paths:
        try:
            graph.parse(str(path))
        except Exception as e:
            raise RDFFileError(f"Could not load viewer configuration from {path}: {e}") from e
    return graph


def find_viewers(graph: Graph) -> dict[str, URIRef]:
    """Map viewer names (``api:name`` or the URI) to viewer resources."""
    viewers: dict[str, URIRef] = {}
    for viewer in graph.subjects(RDF.type, API.Viewer):
        if not isinstance(viewer, URIRef):
            continue
        name = graph.value(viewer, API.name)
        viewers[str(name) if name is not None else str(viewer)] = viewer
    return viewers


def view_from_spec(
    graph: Graph,
    viewer: Node,
    shortnames: ShortnameService | None = None,
) -> View:
    """Build the view described by *viewer* in *graph*."""
    if shortnames is None:
        shortnames = ShortnameService.from_graph(graph)
    return _build(graph, viewer, shortnames, ())


def _build(graph: Graph, viewer: Node, shortnames: ShortnameService, seen: tuple[Node, ...]) -> View:
    builtin = get_builtin(viewer) if isinstance(viewer, URIRef) else None
    if builtin is not None:
        return builtin
    if viewer in seen:
        raise ViewConfigError(f"viewer {viewer.n3()} includes itself")
    seen = seen + (viewer,)

    name = graph.value(viewer, API.name)
    view = View(str(name) if name is not None else _local_name(viewer))

    for included in graph.objects(viewer, API.include):
        view.add_from(_build(graph, included, shortnames, seen))

    for spec in graph.objects(viewer, API.property):
        view.add_view_from_rdf_list(spec, graph, shortnames)

    for props in graph.objects(viewer, API.properties):
        for prop in str(props).split(","):
            if prop.strip():
                view.add_view_from_parameter_value(prop.strip(), shortnames)

    threshold = graph.value(viewer, ELDA.describeThreshold)
    if threshold is not None:
        view.set_describe_threshold(_as_int(threshold, viewer))

    label = graph.value(viewer, ELDA.describeAllLabel)
    if label is not None:
        view.set_describe_label(str(label))

    logger.debug("Loaded viewer %s: %s", viewer, view)
    return view


def _as_int(value: Node, viewer: Node) -> int:
    try:
        return int(value.toPython() if isinstance(value, Literal) else value)
    except (TypeError, ValueError) as e:
        raise ViewConfigError(
            f"elda:describeThreshold of {viewer.n3()} is not an integer: {value}"
        ) from e


def _local_name(node: Node) -> str:
    text = str(node)
    if "#" in text:
        return text.split("#")[-1]
    return text.rstrip("/").rsplit("/", 1)[-1]
