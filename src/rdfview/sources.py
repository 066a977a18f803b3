"""Pluggable triple sources that views run their queries against.

A source executes CONSTRUCT and DESCRIBE queries and answers an
:class:`rdflib.Graph`.  It also says whether it can evaluate a query
that embeds an outer ``SELECT`` as a nested subquery; a view only uses
nested subqueries when every one of its sources can.

Errors raised while executing a query are the source's own and are not
caught by the view layer.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable

from rdflib import Graph

from rdfview.config import Config
from rdfview.errors import RDFFileError
from rdfview.sparql_helper import SparqlHelper

logger = logging.getLogger(__name__)


class Source(ABC):
    """A place that can answer CONSTRUCT and DESCRIBE queries."""

    name: str = "source"

    def supports_nested_select(self) -> bool:
        return False

    @abstractmethod
    def execute_construct(self, query: str) -> Graph:
        """Run a CONSTRUCT query and answer the constructed triples."""

    @abstractmethod
    def execute_describe(self, query: str) -> Graph:
        """Run a DESCRIBE query and answer the description triples."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


def all_support_nested_select(sources: Iterable[Source]) -> bool:
    """True iff every source can evaluate nested SELECT subqueries."""
    return all(source.supports_nested_select() for source in sources)


class GraphSource(Source):
    """A source backed by an in-memory RDFLib graph."""

    def __init__(self, graph: Graph, name: str = "local", nested_select: bool = True):
        self.graph = graph
        self.name = name
        self.nested_select = nested_select

    @classmethod
    def from_files(cls, *paths: str, name: str | None = None) -> GraphSource:
        """Load RDF files (format guessed from the extension) into one source."""
        graph = Graph()
        for path in paths:
            try:
                graph.parse(path)
            except Exception as e:
                raise RDFFileError(f"Could not load RDF data from {path}: {e}") from e
            logger.debug("Loaded %s (%d triples so far)", path, len(graph))
        return cls(graph, name=name or ",".join(paths))

    def supports_nested_select(self) -> bool:
        return self.nested_select

    def execute_construct(self, query: str) -> Graph:
        return self._run(query)

    def execute_describe(self, query: str) -> Graph:
        return self._run(query)

    def _run(self, query: str) -> Graph:
        result = self.graph.query(query)
        out = Graph()
        if result.graph is not None:
            out += result.graph
        return out


class SparqlEndpointSource(Source):
    """A source that forwards queries to a remote SPARQL endpoint."""

    def __init__(
        self,
        endpoint_url: str,
        *,
        nested_select: bool = True,
        use_post: bool = False,
        timeout: float | None = None,
        max_retries: int | None = None,
    ):
        self.name = endpoint_url
        self.nested_select = nested_select
        self.helper = SparqlHelper(
            endpoint_url,
            use_post=use_post,
            timeout=Config.SPARQL_TIMEOUT if timeout is None else timeout,
            max_retries=Config.SPARQL_MAX_RETRIES if max_retries is None else max_retries,
        )

    def supports_nested_select(self) -> bool:
        return self.nested_select

    def execute_construct(self, query: str) -> Graph:
        return self.helper.construct_graph(query)

    def execute_describe(self, query: str) -> Graph:
        return self.helper.describe_graph(query)

    def close(self) -> None:
        self.helper.close()
