"""
SPARQL Helper - HTTP client for remote SPARQL endpoints.

This module is the SPARQL client behind
:class:`~rdfview.sources.SparqlEndpointSource`. It handles:
- Automatic GET → POST fallback for endpoints that require POST
- Exponential backoff retry logic for transient failures
- CONSTRUCT and DESCRIBE queries returning RDFLib graphs
- HTML error detection in responses

Usage:
    from rdfview.sparql_helper import SparqlHelper

    with SparqlHelper("https://sparql.example.org/") as helper:
        graph = helper.construct_graph("CONSTRUCT { ?s ?p ?o } WHERE { ?s ?p ?o } LIMIT 10")
        described = helper.describe_graph("DESCRIBE <http://example.org/thing>")
"""

from __future__ import annotations

import logging
import secrets
import time
from typing import Any, Literal

import requests
from rdflib import Graph

from rdfview.version import VERSION

logger = logging.getLogger(__name__)

QueryType = Literal["CONSTRUCT", "DESCRIBE"]


class SparqlHelperError(Exception):
    """Base exception for SPARQL helper errors."""

    pass


class EndpointError(SparqlHelperError):
    """Raised when the endpoint returns an error."""

    pass


class QueryError(SparqlHelperError):
    """Raised when the endpoint rejects the query itself."""

    pass


class MimeTypes:
    """Standard MIME types for SPARQL protocol."""

    # CONSTRUCT/DESCRIBE results (RDF formats)
    TURTLE = "text/turtle"
    N3 = "text/n3"
    NTRIPLES = "application/n-triples"
    RDFXML = "application/rdf+xml"
    JSONLD = "application/ld+json"

    GRAPH_ACCEPT = f"{TURTLE}, {N3};q=0.9, {NTRIPLES};q=0.8, {RDFXML};q=0.7"

    # Response content type -> rdflib parser name
    RDFLIB_FORMATS = {
        TURTLE: "turtle",
        N3: "n3",
        NTRIPLES: "nt",
        "text/plain": "nt",
        RDFXML: "xml",
        JSONLD: "json-ld",
    }


class SparqlHelper:
    """
    SPARQL query executor with automatic fallback and retry logic.

    Attributes:
        endpoint_url: The SPARQL endpoint URL
        use_post: If True, always use POST method (skip GET attempt)
        max_retries: Maximum number of attempts per query
        initial_backoff: Initial backoff delay in seconds
        max_backoff: Maximum backoff delay in seconds
        timeout: Request timeout in seconds
    """

    # HTML markers that indicate an error response instead of RDF
    HTML_MARKERS = ("<!DOCTYPE", "<html", "<HTML", "<!doctype")

    # HTTP status codes that warrant a retry
    RETRY_STATUS_CODES = (500, 502, 503, 504, 429)

    def __init__(
        self,
        endpoint_url: str,
        *,
        use_post: bool = False,
        max_retries: int = 3,
        initial_backoff: float = 1.0,
        max_backoff: float = 30.0,
        timeout: float = 60.0,
    ) -> None:
        self.endpoint_url = endpoint_url.rstrip("/")
        self.use_post = use_post
        self.max_retries = max(1, max_retries)
        self.initial_backoff = initial_backoff
        self.max_backoff = max_backoff
        self.timeout = timeout

        # Track if we've detected this endpoint requires POST
        self._requires_post = use_post

        self._session = requests.Session()

        logger.debug(f"SparqlHelper initialized for {self.endpoint_url}")

    def construct_graph(self, query: str) -> Graph:
        """
        Execute a CONSTRUCT query and return an RDFLib Graph.

        Raises:
            EndpointError: If the endpoint fails after all retries
            QueryError: If the endpoint rejects the query
        """
        return self._graph(query, "CONSTRUCT")

    def describe_graph(self, query: str) -> Graph:
        """
        Execute a DESCRIBE query and return an RDFLib Graph.

        Raises:
            EndpointError: If the endpoint fails after all retries
            QueryError: If the endpoint rejects the query
        """
        return self._graph(query, "DESCRIBE")

    def _graph(self, query: str, query_type: QueryType) -> Graph:
        body, content_type = self._execute(query, MimeTypes.GRAPH_ACCEPT, query_type)
        graph = Graph()
        if not body.strip():
            return graph
        rdf_format = MimeTypes.RDFLIB_FORMATS.get(content_type, "turtle")
        try:
            graph.parse(data=body, format=rdf_format)
        except Exception as e:
            raise EndpointError(
                f"Could not parse {query_type} result as {rdf_format}: {e}"
            ) from e
        logger.debug(f"{query_type} returned {len(graph)} triples from {self.endpoint_url}")
        return graph

    def _execute(self, query: str, accept: str, query_type: QueryType) -> tuple[str, str]:
        """
        Execute a SPARQL query with automatic GET/POST fallback and retry.

        Returns:
            Response body and its (parameter-free) content type

        Raises:
            EndpointError: If query fails after all retries
            QueryError: If the endpoint answers 400
        """
        use_post = self._requires_post
        attempt = 0

        while attempt < self.max_retries:
            attempt += 1
            try:
                if use_post:
                    logger.debug(f"Executing {query_type} with POST")
                    response = self._post_query(query, accept)
                else:
                    logger.debug(f"Executing {query_type} with GET")
                    response = self._get_query(query, accept)

                if self._is_html_response(response.text):
                    if not use_post:
                        logger.debug("GET returned HTML, switching to POST")
                        self._requires_post = use_post = True
                        attempt -= 1
                        continue
                    raise EndpointError("Endpoint returned HTML error even with POST")

                content_type = response.headers.get("content-type", "")
                return response.text, content_type.split(";")[0].strip().lower()

            except requests.exceptions.HTTPError as e:
                status_code = e.response.status_code if e.response is not None else 0

                if not use_post and status_code in (405, 414):
                    logger.debug(f"GET returned {status_code}, switching to POST")
                    self._requires_post = use_post = True
                    attempt -= 1
                    continue

                if status_code == 400:
                    raise QueryError(f"Endpoint rejected {query_type} query: {e}") from e

                if status_code in self.RETRY_STATUS_CODES:
                    self._handle_retry(attempt, query_type, e)
                    continue

                raise EndpointError(f"HTTP {status_code}: {e}") from e

            except requests.exceptions.RequestException as e:
                self._handle_retry(attempt, query_type, e)

        raise EndpointError(f"{query_type} failed after {self.max_retries} attempts")

    def _headers(self, accept: str) -> dict[str, str]:
        return {
            "Accept": accept,
            "User-Agent": f"rdfview/{VERSION} (SPARQL client)",
        }

    def _get_query(self, query: str, accept: str) -> requests.Response:
        response = self._session.get(
            self.endpoint_url,
            params={"query": query},
            headers=self._headers(accept),
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response

    def _post_query(self, query: str, accept: str) -> requests.Response:
        """Form-encoded POST as per the SPARQL protocol."""
        headers = self._headers(accept)
        headers["Content-Type"] = "application/x-www-form-urlencoded"
        response = self._session.post(
            self.endpoint_url,
            data={"query": query},
            headers=headers,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response

    def _handle_retry(self, attempt: int, query_type: str, error: Exception) -> None:
        """
        Sleep with exponential backoff, or give up.

        Raises:
            EndpointError: If max retries exceeded
        """
        logger.warning(f"Query attempt {attempt}/{self.max_retries} failed: {error}")

        if attempt >= self.max_retries:
            logger.error(f"{query_type} failed after {self.max_retries} tries")
            raise EndpointError(
                f"Query failed after {self.max_retries} attempts: {error}"
            ) from error

        backoff = min(self.initial_backoff * (2 ** (attempt - 1)), self.max_backoff)
        jitter = secrets.randbelow(int(backoff * 0.1 * 1000) + 1) / 1000
        sleep_time = backoff + jitter

        logger.info(f"Retrying in {sleep_time:.1f}s (attempt {attempt + 1}/{self.max_retries})")
        time.sleep(sleep_time)

    def _is_html_response(self, content: str) -> bool:
        """Check if content appears to be HTML (error page) instead of RDF."""
        if not content:
            return False
        stripped = content.strip()
        return any(stripped.startswith(marker) for marker in self.HTML_MARKERS)

    def close(self) -> None:
        """Close the underlying requests session."""
        self._session.close()

    def __enter__(self) -> SparqlHelper:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        url = self.endpoint_url
        return f"SparqlHelper({url!r}, use_post={self._requires_post})"
