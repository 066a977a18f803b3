"""Namespace prefix bookkeeping for generated queries.

:class:`PrefixLogger` renders URIs as ``prefix:local`` whenever the
output graph's namespace manager knows a matching namespace, remembers
which prefixes it actually used, and writes just those as a ``PREFIX``
block in front of the query.
"""

from __future__ import annotations

import re

from rdflib import BNode, Graph, Literal, URIRef, Variable
from rdflib.term import Node

STANDARD_PREFIXES: dict[str, str] = {
    "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
    "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
    "owl": "http://www.w3.org/2002/07/owl#",
    "xsd": "http://www.w3.org/2001/XMLSchema#",
    "skos": "http://www.w3.org/2004/02/skos/core#",
    "dc": "http://purl.org/dc/elements/1.1/",
    "dcterms": "http://purl.org/dc/terms/",
    "foaf": "http://xmlns.com/foaf/0.1/",
}

# Conservative subset of SPARQL's PN_LOCAL
_SAFE_LOCAL = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-]*$")


class PrefixLogger:
    """Presents URIs compactly and records the prefixes it used."""

    def __init__(self, graph: Graph | None = None, prefixes: dict[str, str] | None = None):
        self.namespaces: dict[str, str] = {}
        if graph is not None:
            for prefix, ns in graph.namespace_manager.namespaces():
                if prefix:
                    self.namespaces[prefix] = str(ns)
        if prefixes:
            self.namespaces.update(prefixes)
        self.seen: dict[str, str] = {}

    def present(self, uri: str) -> str:
        """Answer *uri* as a prefixed name if possible, else as ``<uri>``."""
        best: tuple[str, str] | None = None
        for prefix, ns in self.namespaces.items():
            if uri.startswith(ns) and (best is None or len(ns) > len(best[1])):
                local = uri[len(ns):]
                if _SAFE_LOCAL.match(local):
                    best = (prefix, ns)
        if best is None:
            return f"<{uri}>"
        prefix, ns = best
        self.seen[prefix] = ns
        return f"{prefix}:{uri[len(ns):]}"

    def present_term(self, term: Node) -> str:
        """Render an RDF term for use inside a query."""
        if isinstance(term, Variable):
            return term.n3()
        if isinstance(term, URIRef):
            return self.present(str(term))
        if isinstance(term, (Literal, BNode)):
            return term.n3()
        raise TypeError(f"cannot present {term!r} in a query")

    def write_prefixes(self, out: list[str]) -> list[str]:
        """Append one ``PREFIX`` line per used prefix to *out*."""
        for prefix in sorted(self.seen):
            out.append(f"PREFIX {prefix}: <{self.seen[prefix]}>\n")
        return out

    def prefix_block(self) -> str:
        return "".join(self.write_prefixes([]))
