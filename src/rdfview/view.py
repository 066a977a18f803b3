"""Views: which properties of the selected items get fetched.

A :class:`View` is a strategy tag plus an ordered list of
:class:`~rdfview.chains.PropertyChain`.  Given the request
:class:`State` (the selected root items, the sources and the output
graph) :meth:`View.fetch_descriptions` synthesizes SPARQL and merges
every source's answer into the output graph:

* ``CHAINS`` - one CONSTRUCT following the property chains.
* ``DESCRIBE`` - a DESCRIBE of the roots.  The chain CONSTRUCT is also
  run, but its triples are not kept.
* ``ALL`` - DESCRIBE plus chains, then a label for every resource the
  result mentions.

When every source supports nested subqueries and the request carries
the text of the SELECT that picked the roots, that SELECT is embedded
in the generated query instead of enumerating the roots.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from rdflib import Graph, Literal, URIRef, Variable
from rdflib.collection import Collection
from rdflib.namespace import RDF, RDFS
from rdflib.term import Node

from rdfview.chains import ChainTree, ChainTrees, PropertyChain, VarSupply
from rdfview.config import Config
from rdfview.errors import BrokenError, ViewConfigError, ViewUsageError
from rdfview.prefixes import PrefixLogger
from rdfview.shortnames import ShortnameService
from rdfview.sources import Source, all_support_nested_select
from rdfview.times import Times
from rdfview.vocab import BASIC_VIEWER, DESCRIBE_VIEWER, LABELLED_DESCRIBE_VIEWER

logger = logging.getLogger(__name__)

SHOW_ALL = "all"
SHOW_BASIC = "basic"
SHOW_DESCRIPTION = "description"

EMPTY_CONSTRUCT = "CONSTRUCT {} WHERE {}"
EMPTY_DESCRIBE = "DESCRIBE ?item WHERE {}"

#: Variable the nested SELECT must project for the selected items
ITEM = Variable("item")

SELECT = re.compile("SELECT", re.IGNORECASE)


class ViewType(enum.Enum):
    DESCRIBE = "describe"
    ALL = "all"
    CHAINS = "chains"


@dataclass
class State:
    """Everything one fetch needs; lives for a single request."""

    select: str | None
    roots: list[URIRef]
    graph: Graph
    sources: list[Source]
    vars: VarSupply = field(default_factory=VarSupply)

    def use_nested_select(self) -> bool:
        return bool(self.select) and all_support_nested_select(self.sources)


def split_select(select: str) -> tuple[str, str]:
    """Split *select* into its prologue and the text from ``SELECT`` on."""
    m = SELECT.search(select)
    if m is None:
        raise BrokenError("No SELECT in nested query.")
    return select[: m.start()], select[m.start():]


def chunkify(
    roots: Sequence[URIRef],
    slice_describes: bool | None = None,
    chunk_size: int | None = None,
) -> list[list[URIRef]]:
    """Partition *roots* for DESCRIBE; a single chunk unless slicing is on."""
    if slice_describes is None:
        slice_describes = Config.SLICE_DESCRIBES
    if chunk_size is None:
        chunk_size = Config.DESCRIBE_CHUNK_SIZE
    if not slice_describes:
        return [list(roots)]
    chunk_size = max(1, chunk_size)
    result = [list(roots[i:i + chunk_size]) for i in range(0, len(roots), chunk_size)]
    if len(result) > 1:
        logger.debug(f"large DESCRIBE: {len(result)} chunks of size {chunk_size}")
    return result


def _execute(sources: Iterable[Source], query: str, into: Graph, describe: bool = False) -> None:
    for source in sources:
        if describe:
            into += source.execute_describe(query)
        else:
            into += source.execute_construct(query)


def _nest(selection: str) -> str:
    return "  {" + selection.replace("\n", "\n    ") + "\n  }\n"


class View:
    """A specification of which properties of result items to fetch."""

    def __init__(
        self,
        name: str | None = None,
        view_type: ViewType | None = None,
        chains: Iterable[PropertyChain] = (),
    ):
        if view_type is None:
            view_type = ViewType.CHAINS if name is not None else ViewType.DESCRIBE
        self._name = name
        self._type = view_type
        self._chains: list[PropertyChain] | tuple[PropertyChain, ...] = list(chains)
        self._label_property_uri = Config.LABEL_PROPERTY
        self._describe_threshold = Config.DESCRIBE_THRESHOLD
        self._frozen = False

    # -- accessors -----------------------------------------------------

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def type(self) -> ViewType:
        return self._type

    @property
    def label_property_uri(self) -> str:
        return self._label_property_uri

    @property
    def describe_threshold(self) -> int:
        return self._describe_threshold

    @property
    def frozen(self) -> bool:
        return self._frozen

    def chains(self) -> frozenset[PropertyChain]:
        """The distinct chains of this view, in no particular order."""
        return frozenset(self._chains)

    def chain_list(self) -> tuple[PropertyChain, ...]:
        """The chains of this view, in order, duplicates included."""
        return tuple(self._chains)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, View):
            return NotImplemented
        return self._type == other._type and list(self._chains) == list(other._chains)

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return f"{self._type.name} [" + ",\n  ".join(str(c) for c in self._chains) + "]"

    def __repr__(self) -> str:
        return f"View(name={self._name!r}, type={self._type.name}, chains={len(self._chains)})"

    # -- construction and mutation ---------------------------------------

    def freeze(self) -> View:
        """Make this view read-only and answer it."""
        self._chains = tuple(self._chains)
        self._frozen = True
        return self

    def _check_mutable(self) -> None:
        if self._frozen:
            raise ViewUsageError(f"the view {self._name or self._type.name} cannot be updated.")

    def copy(self) -> View:
        """A mutable view doing the same fetching, independent of this one."""
        return View(None, self._type).add_from(self)

    def set_describe_label(self, label_property_uri: str) -> None:
        """Use *label_property_uri* for object labels; the view becomes ALL."""
        self._check_mutable()
        self._type = ViewType.ALL
        self._label_property_uri = str(label_property_uri)

    def set_describe_threshold(self, threshold: int) -> None:
        self._check_mutable()
        self._describe_threshold = int(threshold)

    def add_view_from_rdf_list(
        self,
        spec: Node,
        graph: Graph,
        shortnames: ShortnameService | None = None,
    ) -> View:
        """Add the chain described by *spec*: an RDF list or a single property."""
        self._check_mutable()
        shortnames = shortnames or ShortnameService()
        if spec == RDF.nil or (spec, RDF.first, None) in graph:
            properties = shortnames.resolve(list(Collection(graph, spec)))
            if not properties:
                raise ViewConfigError("empty property list in view specification")
            self._chains.append(PropertyChain(properties))
        elif isinstance(spec, URIRef):
            self._chains.append(PropertyChain(spec))
        elif isinstance(spec, Literal):
            self._chains.append(PropertyChain(shortnames.resolve(str(spec))))
        else:
            raise ViewConfigError(f"cannot make a property chain from {spec.n3()}")
        self._promote_to_chains()
        return self

    def add_view_from_parameter_value(self, prop: str, shortnames: ShortnameService) -> View:
        """Add the chain named by the (possibly dotted) property name *prop*."""
        self._check_mutable()
        self._chains.append(PropertyChain(shortnames.expand_properties(prop)))
        return self

    def add_from(self, other: View | None) -> View:
        """Add all chains and settings of *other* to this view."""
        if other is None:
            raise ViewUsageError("add_from does not accept None views")
        self._check_mutable()
        self._chains.extend(other._chains)
        self._label_property_uri = other._label_property_uri
        self._describe_threshold = other._describe_threshold
        self._promote_to_chains()
        if other._type is ViewType.ALL:
            self._type = ViewType.ALL
        return self

    def _promote_to_chains(self) -> None:
        # ALL is never demoted
        if self._chains and self._type is not ViewType.ALL:
            self._type = ViewType.CHAINS

    # -- fetching --------------------------------------------------------

    def fetch_descriptions(self, times: Times, state: State) -> str:
        """Fetch this view of ``state.roots`` into ``state.graph``; answer the query."""
        view_type = self._type
        if view_type is ViewType.DESCRIBE:
            # chain triples are fetched but not kept
            details_query = self._fetch_by_given_property_chains(state, self._chains, Graph())
            describe_query = self._fetch_untimed_by_describe(state)
            times.record_query_size(details_query)
            times.record_query_size(describe_query)
            return describe_query

        if view_type is ViewType.ALL:
            details_query = self._fetch_untimed_by_describe(state)
            chains_query = self._fetch_by_given_property_chains(state, self._chains, state.graph)
            labels_query = self._add_all_object_labels(state)
            times.record_query_size(details_query)
            times.record_query_size(chains_query)
            if labels_query is not None:
                times.record_query_size(labels_query)
            return details_query

        if view_type is ViewType.CHAINS:
            details_query = self._fetch_by_given_property_chains(state, self._chains, state.graph)
            times.record_query_size(details_query)
            return details_query

        raise BrokenError(f"unknown view type {view_type}")

    def _fetch_by_given_property_chains(
        self, state: State, chains: Sequence[PropertyChain], into: Graph
    ) -> str:
        if not chains:
            return EMPTY_CONSTRUCT
        if state.use_nested_select():
            return self._fetch_chains_by_nested_select(state, chains, into)
        return self._fetch_chains_by_repeated_clauses(state, chains, into)

    def _fetch_chains_by_repeated_clauses(
        self, state: State, chains: Sequence[PropertyChain], into: Graph
    ) -> str:
        if not state.roots:
            return EMPTY_CONSTRUCT
        trees = ChainTrees()
        for root in dict.fromkeys(state.roots):
            trees.add_all(ChainTree.make(URIRef(root), state, chains))

        pl = PrefixLogger(state.graph)
        construct = ["CONSTRUCT {"]
        trees.render_triples(construct, pl)
        construct.append("\n} WHERE {\n")
        trees.render_where(construct, pl, "")
        construct.append("\n}")

        query = pl.prefix_block() + "".join(construct)
        logger.debug(f"chain CONSTRUCT over {len(trees)} roots:\n{query}")
        _execute(state.sources, query, into)
        return query

    def _fetch_chains_by_nested_select(
        self, state: State, chains: Sequence[PropertyChain], into: Graph
    ) -> str:
        select_prefixes, selection = split_select(state.select)
        trees = ChainTree.make(ITEM, state, chains)

        pl = PrefixLogger(state.graph)
        construct = ["CONSTRUCT {"]
        trees.render_triples(construct, pl)
        construct.append("\n} WHERE {\n")
        construct.append(_nest(selection))
        trees.render_where(construct, pl, "")
        construct.append("\n}")

        query = select_prefixes + pl.prefix_block() + "".join(construct)
        logger.debug(f"nested chain CONSTRUCT:\n{query}")
        _execute(state.sources, query, into)
        return query

    def _fetch_untimed_by_describe(self, state: State) -> str:
        if state.use_nested_select() and len(state.roots) > self._describe_threshold:
            return self._describe_by_nested_select(state)
        return self._describe_by_selected_items(state, state.roots)

    def _describe_by_selected_items(self, state: State, roots: Sequence[URIRef]) -> str:
        query = EMPTY_DESCRIBE
        for chunk in chunkify(roots):
            items = list(dict.fromkeys(chunk))
            if not items:
                continue
            pl = PrefixLogger(state.graph)
            describe = "DESCRIBE" + "".join(f"\n  {pl.present(str(r))}" for r in items)
            query = pl.prefix_block() + describe
            logger.debug(f"DESCRIBE of {len(items)} items")
            _execute(state.sources, query, state.graph, describe=True)
        return query

    def _describe_by_nested_select(self, state: State) -> str:
        select_prefixes, selection = split_select(state.select)
        describe = f"DESCRIBE {ITEM.n3()}\nWHERE {{\n" + _nest(selection) + "}"
        query = select_prefixes + describe
        logger.debug(f"nested DESCRIBE for {len(state.roots)} items")
        _execute(state.sources, query, state.graph, describe=True)
        return query

    def _add_all_object_labels(self, state: State) -> str | None:
        """Copy the label of every URI object in the output graph from the sources."""
        objects = sorted(
            {o for o in state.graph.objects() if isinstance(o, URIRef)}
        )
        if not objects:
            logger.debug("no URI objects to label")
            return None
        label = URIRef(self._label_property_uri).n3()
        values = "".join(f"\n    {o.n3()}" for o in objects)
        query = (
            f"CONSTRUCT {{ ?x {label} ?l }}\n"
            f"WHERE {{\n"
            f"  VALUES ?x {{{values}\n  }}\n"
            f"  ?x {label} ?l .\n"
            f"}}\n"
        )
        logger.debug(f"labelling {len(objects)} objects")
        _execute(state.sources, query, state.graph)
        return query


# -- builtin views ---------------------------------------------------------

BASIC_CHAINS = (PropertyChain(RDF.type), PropertyChain(RDFS.label))

#: View that does DESCRIBE plus labels of all objects
ALL = View(SHOW_ALL, ViewType.ALL).freeze()

#: View that fetches rdf:type and rdfs:label
BASIC = View(SHOW_BASIC, ViewType.CHAINS, BASIC_CHAINS).freeze()

#: View that does DESCRIBE
DESCRIBE = View(SHOW_DESCRIPTION, ViewType.DESCRIBE).freeze()

_BUILTINS: Mapping[URIRef, View] = MappingProxyType({
    BASIC_VIEWER: BASIC,
    DESCRIBE_VIEWER: DESCRIBE,
    LABELLED_DESCRIBE_VIEWER: ALL,
})

_BUILTINS_BY_NAME: Mapping[str, View] = MappingProxyType({
    SHOW_BASIC: BASIC,
    SHOW_DESCRIPTION: DESCRIBE,
    SHOW_ALL: ALL,
})


def get_builtin(uri: str) -> View | None:
    """The builtin view for viewer *uri*, or None if there isn't one."""
    return _BUILTINS.get(URIRef(uri))


def get_builtin_by_name(name: str) -> View | None:
    return _BUILTINS_BY_NAME.get(name)


def builtin_views() -> Mapping[URIRef, View]:
    return _BUILTINS
