"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import os

from rdflib.namespace import RDFS


class Config:
    """Default settings for view synthesis and endpoint access."""

    # Above this many roots a nested-select DESCRIBE is used (if allowed)
    DESCRIBE_THRESHOLD = int(os.getenv("RDFVIEW_DESCRIBE_THRESHOLD", "100"))

    # Fixed-size DESCRIBE batching; off unless explicitly enabled
    SLICE_DESCRIBES = os.getenv("RDFVIEW_SLICE_DESCRIBES", "0") == "1"
    DESCRIBE_CHUNK_SIZE = int(os.getenv("RDFVIEW_DESCRIBE_CHUNK_SIZE", "1000"))

    # Predicate copied for every referenced object by labelled describes
    LABEL_PROPERTY = os.getenv("RDFVIEW_LABEL_PROPERTY", str(RDFS.label))

    # SPARQL endpoint client defaults
    SPARQL_TIMEOUT = float(os.getenv("RDFVIEW_SPARQL_TIMEOUT", "60"))
    SPARQL_MAX_RETRIES = int(os.getenv("RDFVIEW_SPARQL_MAX_RETRIES", "3"))


class TestConfig(Config):
    """Configuration overrides for testing."""

    TESTING = True
    SPARQL_TIMEOUT = 5.0
    SPARQL_MAX_RETRIES = 1
