"""Tests for ShortnameService."""

from __future__ import annotations

import pytest
import yaml
from rdflib import BNode, Graph, Literal, URIRef
from rdflib.namespace import FOAF, RDFS

from rdfview.errors import UnknownShortnameError
from rdfview.shortnames import ShortnameService, split_dotted
from rdfview.vocab import API

from conftest import EX


@pytest.fixture
def sns():
    return ShortnameService({"label": str(RDFS.label), "creator": str(EX.creator)}, {"ex": str(EX)})


class TestExpand:
    def test_short_name(self, sns):
        assert sns.expand("label") == RDFS.label

    def test_curie(self, sns):
        assert sns.expand("ex:thing") == EX.thing

    def test_standard_prefix(self, sns):
        assert sns.expand("foaf:name") == FOAF.name

    def test_full_uri(self, sns):
        assert sns.expand("http://ex/p") == EX.p

    def test_bracketed_uri(self, sns):
        assert sns.expand("<http://ex/p>") == EX.p

    def test_unknown(self, sns):
        with pytest.raises(UnknownShortnameError) as info:
            sns.expand("nope")
        assert info.value.name == "nope"

    def test_unknown_is_key_error(self, sns):
        with pytest.raises(KeyError):
            sns.expand("nope:thing")


class TestDotted:
    def test_dotted_chain(self, sns):
        assert sns.expand_properties("creator.foaf:name") == [EX.creator, FOAF.name]

    def test_bracketed_segment_with_dots(self, sns):
        assert sns.expand_properties("creator.<http://a.b/c>") == [EX.creator, URIRef("http://a.b/c")]

    def test_split_dotted(self):
        assert split_dotted(" a . b ") == ["a", "b"]

    def test_empty_rejected(self, sns):
        with pytest.raises(UnknownShortnameError):
            sns.expand_properties("")

    def test_fails_before_partial_result(self, sns):
        with pytest.raises(UnknownShortnameError):
            sns.resolve("creator.unknown")


class TestResolveTerms:
    def test_mixed_terms(self, sns):
        assert sns.resolve([EX.creator, Literal("label")]) == [EX.creator, RDFS.label]

    def test_blank_node_rejected(self, sns):
        with pytest.raises(UnknownShortnameError):
            sns.resolve([BNode()])

    def test_uri_is_single_property(self, sns):
        assert sns.resolve(EX["a.b"]) == [EX["a.b"]]


class TestLoading:
    def test_from_yaml(self, tmp_path):
        path = tmp_path / "names.yaml"
        path.write_text(yaml.safe_dump({
            "prefixes": {"bk": "http://books.example/"},
            "shortnames": {"title": "http://purl.org/dc/terms/title"},
        }))
        service = ShortnameService.from_yaml(path)
        assert str(service.expand("title")) == "http://purl.org/dc/terms/title"
        assert str(service.expand("bk:isbn")) == "http://books.example/isbn"
        assert "rdfs" in service.prefixes

    def test_from_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert ShortnameService.from_yaml(path).shortnames == {}

    def test_from_graph(self):
        g = Graph()
        g.bind("ex", str(EX))
        g.add((EX.creator, API.label, Literal("author")))
        service = ShortnameService.from_graph(g)
        assert service.expand("author") == EX.creator
        assert service.expand("ex:thing") == EX.thing

    def test_add(self, sns):
        sns.add("made", str(EX.maker))
        assert sns.expand("made") == EX.maker
