"""Exception hierarchy for rdfview.

Two families matter to callers:

* :class:`BrokenError` signals a bug or an upstream contract violation
  (an impossible view type, a nested query without ``SELECT``, a write
  to a shared builtin view).  Retrying will not help.
* Source failures (:class:`~rdfview.sparql_helper.SparqlHelperError`
  and whatever a local graph raises) are passed through untouched so
  they stay distinguishable from the above.
"""


class RDFViewError(Exception):
    """Base exception for rdfview errors."""

    pass


class BrokenError(RDFViewError):
    """Raised when an internal invariant does not hold."""

    pass


class ViewUsageError(BrokenError, ValueError):
    """Raised when a view is used in a way its contract forbids."""

    pass


class UnknownShortnameError(RDFViewError, KeyError):
    """Raised when a property short name cannot be resolved."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown property short name: {self.name!r}"


class ViewConfigError(RDFViewError):
    """Raised when a declarative viewer description is malformed."""

    pass


class RDFFileError(RDFViewError):
    """Raised when an RDF data or configuration file cannot be loaded."""

    pass
