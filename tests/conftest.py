"""Shared fixtures for rdfview tests."""

from __future__ import annotations

import pytest
from rdflib import BNode, Graph, Literal, Namespace
from rdflib.namespace import FOAF, RDF, RDFS

from rdfview.sources import Source
from rdfview.times import Times

EX = Namespace("http://ex/")


class RecordingSource(Source):
    """A source that records every query and answers canned graphs."""

    def __init__(
        self,
        construct_result: Graph | None = None,
        describe_result: Graph | None = None,
        nested_select: bool = False,
        name: str = "recording",
    ):
        self.construct_result = construct_result if construct_result is not None else Graph()
        self.describe_result = describe_result if describe_result is not None else Graph()
        self.nested_select = nested_select
        self.name = name
        self.constructs: list[str] = []
        self.describes: list[str] = []

    def supports_nested_select(self) -> bool:
        return self.nested_select

    def execute_construct(self, query: str) -> Graph:
        self.constructs.append(query)
        out = Graph()
        out += self.construct_result
        return out

    def execute_describe(self, query: str) -> Graph:
        self.describes.append(query)
        out = Graph()
        out += self.describe_result
        return out


@pytest.fixture
def books_graph():
    """Two books with authors, plus unrelated data."""
    g = Graph()
    g.add((EX.b1, RDF.type, EX.Book))
    g.add((EX.b1, RDFS.label, Literal("Alpha")))
    g.add((EX.b1, EX.creator, EX.p1))
    g.add((EX.b2, RDF.type, EX.Book))
    g.add((EX.b2, RDFS.label, Literal("Beta")))
    g.add((EX.b2, EX.creator, EX.p2))
    g.add((EX.b2, EX.creator, BNode()))
    g.add((EX.p1, FOAF.name, Literal("Ann")))
    g.add((EX.p1, RDFS.label, Literal("Ann (person)")))
    g.add((EX.p2, FOAF.name, Literal("Bob")))
    g.add((EX.m1, RDF.type, EX.Magazine))
    g.add((EX.m1, RDFS.label, Literal("Gamma")))
    return g


@pytest.fixture
def times():
    return Times()


@pytest.fixture
def recording_source():
    return RecordingSource()
