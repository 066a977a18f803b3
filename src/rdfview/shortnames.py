"""Property short-name resolution.

Views are usually written with short names (``label``), CURIEs
(``foaf:name``) or dotted chains of them (``creator.name``).  The
:class:`ShortnameService` turns these into full property URIs.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Sequence

import yaml
from rdflib import BNode, Graph, Literal, URIRef
from rdflib.term import Node

from rdfview.errors import UnknownShortnameError
from rdfview.prefixes import STANDARD_PREFIXES
from rdfview.vocab import API

logger = logging.getLogger(__name__)

# Chain segments: either <...> (which may itself contain dots) or a dot-free run
_SEGMENT = re.compile(r"<[^>]*>|[^.]+")


def split_dotted(dotted: str) -> list[str]:
    """Split ``a.b.<http://x.org/c>`` into its segments."""
    return [seg.strip() for seg in _SEGMENT.findall(dotted) if seg.strip()]


def expand_curie(curie: str, prefixes: dict[str, str]) -> str | None:
    """Expand ``prefix:local`` using *prefixes*, or answer None."""
    if ":" not in curie:
        return None
    pfx, local = curie.split(":", 1)
    ns = prefixes.get(pfx)
    return f"{ns}{local}" if ns else None


class ShortnameService:
    """Maps short names and CURIEs to property URIs."""

    def __init__(
        self,
        shortnames: dict[str, str] | None = None,
        prefixes: dict[str, str] | None = None,
    ):
        self.shortnames: dict[str, URIRef] = {
            name: URIRef(uri) for name, uri in (shortnames or {}).items()
        }
        self.prefixes: dict[str, str] = dict(STANDARD_PREFIXES)
        if prefixes:
            self.prefixes.update(prefixes)

    @classmethod
    def from_yaml(cls, path: str | Path) -> ShortnameService:
        """Load a service from a YAML file with ``prefixes`` and ``shortnames`` maps."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        service = cls(data.get("shortnames") or {}, data.get("prefixes") or {})
        logger.debug(
            "Loaded %d short names and %d prefixes from %s",
            len(service.shortnames), len(service.prefixes), path,
        )
        return service

    @classmethod
    def from_graph(cls, graph: Graph) -> ShortnameService:
        """Collect ``api:label`` short names and the graph's bound prefixes."""
        prefixes = {
            prefix: str(ns)
            for prefix, ns in graph.namespace_manager.namespaces()
            if prefix
        }
        shortnames = {
            str(label): str(prop)
            for prop, label in graph.subject_objects(API.label)
            if isinstance(prop, URIRef)
        }
        return cls(shortnames, prefixes)

    def add(self, name: str, uri: str) -> None:
        self.shortnames[name] = URIRef(uri)

    def expand(self, name: str) -> URIRef:
        """Resolve a single short name, CURIE or URI."""
        name = name.strip()
        if name in self.shortnames:
            return self.shortnames[name]
        if name.startswith("<") and name.endswith(">"):
            return URIRef(name[1:-1])
        if name.startswith(("http://", "https://", "urn:")):
            return URIRef(name)
        expanded = expand_curie(name, self.prefixes)
        if expanded is not None:
            return URIRef(expanded)
        raise UnknownShortnameError(name)

    def expand_properties(self, dotted: str) -> list[URIRef]:
        """Resolve every segment of a dotted property chain."""
        segments = split_dotted(dotted)
        if not segments:
            raise UnknownShortnameError(dotted)
        return [self.expand(seg) for seg in segments]

    def resolve_terms(self, terms: Iterable[Node | str]) -> list[URIRef]:
        """Resolve an ordered list of RDF terms (from an RDF list)."""
        resolved = []
        for term in terms:
            if isinstance(term, URIRef):
                resolved.append(term)
            elif isinstance(term, BNode):
                raise UnknownShortnameError(term.n3())
            elif isinstance(term, (Literal, str)):
                resolved.append(self.expand(str(term)))
            else:
                raise UnknownShortnameError(repr(term))
        return resolved

    def resolve(self, spec: str | Sequence[Node | str]) -> list[URIRef]:
        """Resolve a dotted name or an ordered list of terms into a chain."""
        if isinstance(spec, URIRef):
            return [spec]
        if isinstance(spec, str):
            return self.expand_properties(spec)
        return self.resolve_terms(spec)
