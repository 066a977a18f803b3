"""Tests for View construction, mutation and the builtin registry."""

from __future__ import annotations

import pytest
from rdflib import BNode, Graph, Literal, URIRef
from rdflib.collection import Collection
from rdflib.namespace import FOAF, RDF, RDFS, SKOS

from rdfview.chains import PropertyChain
from rdfview.errors import BrokenError, ViewConfigError, ViewUsageError
from rdfview.shortnames import ShortnameService
from rdfview.view import (
    ALL,
    BASIC,
    DESCRIBE,
    View,
    ViewType,
    builtin_views,
    get_builtin,
    get_builtin_by_name,
)
from rdfview.vocab import API

from conftest import EX

P1 = PropertyChain(EX.p1)
P2 = PropertyChain(EX.p2)


@pytest.fixture
def sns():
    return ShortnameService({"label": str(RDFS.label), "name": str(FOAF.name)}, {"ex": str(EX)})


class TestBuiltins:
    """Test the builtin registry."""

    def test_lookup_by_uri(self):
        assert get_builtin(API.basicViewer) is BASIC
        assert get_builtin(API.describeViewer) is DESCRIBE
        assert get_builtin(API.labelledDescribeViewer) is ALL

    def test_lookup_by_string_uri(self):
        assert get_builtin(str(API.basicViewer)) is BASIC

    def test_unknown_is_none(self):
        assert get_builtin("http://ex/noSuchViewer") is None

    def test_lookup_by_name(self):
        assert get_builtin_by_name("basic") is BASIC
        assert get_builtin_by_name("description") is DESCRIBE
        assert get_builtin_by_name("all") is ALL
        assert get_builtin_by_name("other") is None

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            builtin_views()[EX.mine] = View()  # type: ignore[index]

    def test_builtin_types(self):
        assert ALL.type is ViewType.ALL
        assert BASIC.type is ViewType.CHAINS
        assert DESCRIBE.type is ViewType.DESCRIBE

    def test_basic_chains(self):
        assert BASIC.chains() == {PropertyChain(RDF.type), PropertyChain(RDFS.label)}

    def test_builtins_are_frozen(self):
        for view in (ALL, BASIC, DESCRIBE):
            assert view.frozen


class TestFrozenViews:
    """Every mutation of a shared builtin is a usage error."""

    MUTATIONS = {
        "parameter": lambda v, sns: v.add_view_from_parameter_value("label", sns),
        "rdf_list": lambda v, sns: v.add_view_from_rdf_list(RDFS.label, Graph(), sns),
        "add_from": lambda v, sns: v.add_from(View()),
        "describe_label": lambda v, sns: v.set_describe_label(str(SKOS.prefLabel)),
        "threshold": lambda v, sns: v.set_describe_threshold(5),
    }

    @pytest.mark.parametrize("view", [ALL, BASIC, DESCRIBE], ids=["all", "basic", "describe"])
    @pytest.mark.parametrize("mutation", sorted(MUTATIONS))
    def test_mutation_rejected(self, view, mutation, sns):
        before = (view.type, view.chain_list(), view.label_property_uri, view.describe_threshold)
        with pytest.raises(ViewUsageError):
            self.MUTATIONS[mutation](view, sns)
        after = (view.type, view.chain_list(), view.label_property_uri, view.describe_threshold)
        assert before == after

    def test_usage_error_is_broken(self):
        with pytest.raises(BrokenError):
            ALL.add_from(BASIC)

    def test_repeated_attempts_still_fail(self, sns):
        for _ in range(3):
            with pytest.raises(ViewUsageError):
                BASIC.add_view_from_parameter_value("label", sns)


class TestCopy:
    """Test View.copy()."""

    def test_copy_basic_is_mutable_and_independent(self, sns):
        copy = BASIC.copy()
        assert not copy.frozen
        assert copy == BASIC
        copy.add_view_from_parameter_value("name", sns)
        assert len(copy.chain_list()) == 3
        assert len(BASIC.chain_list()) == 2

    def test_copy_keeps_settings(self):
        view = View("mine", ViewType.CHAINS, [P1])
        view.set_describe_threshold(7)
        copy = view.copy()
        assert copy.describe_threshold == 7
        assert copy.label_property_uri == view.label_property_uri
        assert copy.chains() == view.chains()

    def test_copy_drops_name(self):
        assert BASIC.copy().name is None

    def test_copy_of_all_stays_all(self):
        assert ALL.copy().type is ViewType.ALL

    def test_copy_of_describe_stays_describe(self):
        copy = DESCRIBE.copy()
        assert copy.type is ViewType.DESCRIBE
        assert copy == DESCRIBE

    def test_copy_with_chains_becomes_chains(self, sns):
        view = View()
        view.add_view_from_parameter_value("label", sns)
        assert view.type is ViewType.DESCRIBE
        assert view.copy().type is ViewType.CHAINS

    def test_copy_of_labelled_view_keeps_label(self):
        view = View("mine", ViewType.CHAINS, [P1])
        view.set_describe_label(str(SKOS.prefLabel))
        copy = view.copy()
        assert copy.type is ViewType.ALL
        assert copy.label_property_uri == str(SKOS.prefLabel)

    def test_mutating_original_leaves_copy(self, sns):
        view = View("mine", ViewType.CHAINS, [P1])
        copy = view.copy()
        view.add_view_from_parameter_value("name", sns)
        assert copy.chain_list() == (P1,)


class TestMutation:
    """Test the chain-adding operations."""

    def test_add_from_none(self):
        with pytest.raises(ViewUsageError):
            View().add_from(None)

    def test_add_from_none_is_value_error(self):
        with pytest.raises(ValueError):
            View("mine").add_from(None)

    def test_add_from_copies_settings(self):
        source = View("src", ViewType.CHAINS, [P1])
        source.set_describe_threshold(3)
        target = View().add_from(source)
        assert target.type is ViewType.CHAINS
        assert target.describe_threshold == 3
        assert target.chain_list() == (P1,)

    def test_add_from_all_promotes(self):
        view = View("mine", ViewType.CHAINS, [P1]).add_from(ALL)
        assert view.type is ViewType.ALL

    def test_all_is_never_demoted(self, sns):
        view = View("mine", ViewType.CHAINS, [P1])
        view.set_describe_label(str(RDFS.label))
        view.add_from(BASIC)
        view.add_view_from_rdf_list(EX.p2, Graph(), sns)
        assert view.type is ViewType.ALL

    def test_set_describe_label(self):
        view = View()
        view.set_describe_label(str(SKOS.prefLabel))
        assert view.type is ViewType.ALL
        assert view.label_property_uri == str(SKOS.prefLabel)

    def test_parameter_value_dotted(self, sns):
        view = View("mine")
        view.add_view_from_parameter_value("ex:creator.name", sns)
        assert view.chain_list() == (PropertyChain([EX.creator, FOAF.name]),)

    def test_parameter_value_keeps_type(self, sns):
        view = View()
        view.add_view_from_parameter_value("label", sns)
        assert view.type is ViewType.DESCRIBE

    def test_rdf_list_spec(self, sns):
        g = Graph()
        head = BNode()
        Collection(g, head, [EX.creator, FOAF.name])
        view = View().add_view_from_rdf_list(head, g, sns)
        assert view.type is ViewType.CHAINS
        assert view.chain_list() == (PropertyChain([EX.creator, FOAF.name]),)

    def test_rdf_list_with_short_names(self, sns):
        g = Graph()
        head = BNode()
        Collection(g, head, [EX.creator, Literal("name")])
        view = View().add_view_from_rdf_list(head, g, sns)
        assert view.chain_list() == (PropertyChain([EX.creator, FOAF.name]),)

    def test_single_property_spec(self, sns):
        view = View().add_view_from_rdf_list(RDFS.label, Graph(), sns)
        assert view.chain_list() == (PropertyChain(RDFS.label),)

    def test_empty_list_rejected(self, sns):
        with pytest.raises(ViewConfigError):
            View().add_view_from_rdf_list(RDF.nil, Graph(), sns)

    def test_blank_node_spec_rejected(self, sns):
        with pytest.raises(ViewConfigError):
            View().add_view_from_rdf_list(BNode(), Graph(), sns)


class TestEquality:
    """Equality is order sensitive; chains() is a set."""

    def test_same_order_equal(self):
        assert View("a", ViewType.CHAINS, [P1, P2]) == View("b", ViewType.CHAINS, [P1, P2])

    def test_other_order_not_equal(self):
        assert View("a", ViewType.CHAINS, [P1, P2]) != View("a", ViewType.CHAINS, [P2, P1])

    def test_type_matters(self):
        assert View("a", ViewType.CHAINS, [P1]) != View("a", ViewType.ALL, [P1])

    def test_chains_set_ignores_order_and_duplicates(self):
        view = View("a", ViewType.CHAINS, [P2, P1, P2])
        assert view.chains() == frozenset({P1, P2})
        assert view.chain_list() == (P2, P1, P2)

    def test_duplicates_matter_for_equality(self):
        assert View("a", ViewType.CHAINS, [P1]) != View("a", ViewType.CHAINS, [P1, P1])

    def test_not_equal_to_other_types(self):
        assert View() != "DESCRIBE"

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(View())

    def test_str_lists_chains(self):
        text = str(View("a", ViewType.CHAINS, [P1, P2]))
        assert text.startswith("CHAINS")
        assert str(URIRef(EX.p1)) in text


class TestDefaults:
    def test_default_view_is_describe(self):
        assert View().type is ViewType.DESCRIBE

    def test_named_view_is_chains(self):
        assert View("mine").type is ViewType.CHAINS

    def test_default_settings(self):
        view = View()
        assert view.describe_threshold == 100
        assert view.label_property_uri == str(RDFS.label)
