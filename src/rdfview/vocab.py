"""Vocabulary terms used by viewer configurations."""

from __future__ import annotations

from rdflib import Namespace

#: Linked Data API vocabulary
API = Namespace("http://purl.org/linked-data/api/vocab#")

#: ELDA extensions to the Linked Data API vocabulary
ELDA = Namespace("http://www.epimorphics.com/vocabularies/lda#")

# Builtin viewers
BASIC_VIEWER = API.basicViewer
DESCRIBE_VIEWER = API.describeViewer
LABELLED_DESCRIBE_VIEWER = API.labelledDescribeViewer
