"""rdfview: fetch views of RDF resources with generated SPARQL.

Main modules:
- view: View, the strategy selection and CONSTRUCT/DESCRIBE synthesis
- chains: property chains and the pattern trees built from them
- sources: pluggable triple sources (local graphs, SPARQL endpoints)
- loader: views from declarative api:Viewer descriptions
- api: fetch_view and get_view convenience functions
"""

from .api import FetchResult, fetch_view, get_view
from .chains import PropertyChain
from .errors import BrokenError, RDFViewError, ViewUsageError
from .shortnames import ShortnameService
from .sources import GraphSource, Source, SparqlEndpointSource
from .times import Times
from .version import VERSION
from .view import ALL, BASIC, DESCRIBE, State, View, ViewType, get_builtin

__all__ = [
    "ALL",
    "BASIC",
    "DESCRIBE",
    "VERSION",
    "BrokenError",
    "FetchResult",
    "GraphSource",
    "PropertyChain",
    "RDFViewError",
    "ShortnameService",
    "Source",
    "SparqlEndpointSource",
    "State",
    "Times",
    "View",
    "ViewType",
    "ViewUsageError",
    "fetch_view",
    "get_builtin",
    "get_view",
]
