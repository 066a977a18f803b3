"""Property chains and the pattern trees built from them.

A :class:`PropertyChain` is a multi-hop path such as
``dct:creator . foaf:name``.  :class:`ChainTree` merges any number of
chains hanging off one root term into a trie, so that chains sharing a
prefix share the corresponding triple patterns, and renders it as
CONSTRUCT template triples and a WHERE clause.

WHERE-clause shape: sibling branches are joined with ``UNION`` (no
cross product between unrelated properties), and every hop after the
first sits in an ``OPTIONAL`` so a partially matching chain still
contributes its leading triples.
"""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING, Iterable, Iterator, Sequence

from rdflib import URIRef, Variable
from rdflib.term import Node

from rdfview.prefixes import PrefixLogger

if TYPE_CHECKING:
    from rdfview.view import State


class PropertyChain:
    """An immutable, ordered sequence of property URIs."""

    __slots__ = ("_properties",)

    def __init__(self, properties: str | Iterable[str]):
        if isinstance(properties, str):
            properties = [properties]
        self._properties: tuple[URIRef, ...] = tuple(URIRef(p) for p in properties)

    @property
    def properties(self) -> tuple[URIRef, ...]:
        return self._properties

    def __iter__(self) -> Iterator[URIRef]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PropertyChain):
            return NotImplemented
        return self._properties == other._properties

    def __hash__(self) -> int:
        return hash(self._properties)

    def __repr__(self) -> str:
        return f"PropertyChain([{', '.join(str(p) for p in self._properties)}])"

    def __str__(self) -> str:
        return ".".join(str(p) for p in self._properties)


class VarSupply:
    """Hands out fresh query variables, unique within one request."""

    def __init__(self, prefix: str = "_cv"):
        self.prefix = prefix
        self._counter = itertools.count()

    def fresh(self) -> Variable:
        return Variable(f"{self.prefix}{next(self._counter)}")


class ChainTree:
    """A subject term and the merged property branches below it."""

    def __init__(self, subject: Node):
        self.subject = subject
        # predicate -> subtree rooted at the object variable
        self.branches: dict[URIRef, ChainTree] = {}

    @classmethod
    def make(cls, root: Node, state: State, chains: Sequence[PropertyChain]) -> ChainTrees:
        """Build the merged tree for *chains* hanging off *root*."""
        tree = cls(root)
        for chain in chains:
            tree._add(chain.properties, state)
        trees = ChainTrees()
        trees.append(tree)
        return trees

    def _add(self, properties: Sequence[URIRef], state: State) -> None:
        if not properties:
            return
        head, rest = properties[0], properties[1:]
        child = self.branches.get(head)
        if child is None:
            child = ChainTree(state.vars.fresh())
            self.branches[head] = child
        child._add(rest, state)

    def render_triples(self, out: list[str], pl: PrefixLogger) -> None:
        s = pl.present_term(self.subject)
        for predicate, child in self.branches.items():
            p = pl.present_term(predicate)
            o = pl.present_term(child.subject)
            out.append(f"\n  {s} {p} {o} .")
            child.render_triples(out, pl)

    def where_blocks(self, pl: PrefixLogger, indent: str) -> list[str]:
        """One group pattern per outgoing branch, ready to be UNIONed."""
        blocks = []
        s = pl.present_term(self.subject)
        for predicate, child in self.branches.items():
            p = pl.present_term(predicate)
            o = pl.present_term(child.subject)
            if not child.branches:
                blocks.append(f"{indent}{{ {s} {p} {o} . }}")
                continue
            inner = _union(child.where_blocks(pl, indent + "    "), indent + "    ")
            blocks.append(
                f"{indent}{{ {s} {p} {o} .\n"
                f"{indent}  OPTIONAL {{\n{inner}\n{indent}  }}\n"
                f"{indent}}}"
            )
        return blocks


class ChainTrees(list):
    """A collection of chain trees rendered together."""

    def add_all(self, trees: Iterable[ChainTree]) -> None:
        self.extend(trees)

    def render_triples(self, out: list[str], pl: PrefixLogger) -> None:
        for tree in self:
            tree.render_triples(out, pl)

    def render_where(self, out: list[str], pl: PrefixLogger, indent: str) -> None:
        blocks: list[str] = []
        for tree in self:
            blocks.extend(tree.where_blocks(pl, indent + "  "))
        if blocks:
            out.append(_union(blocks, indent + "  "))


def _union(blocks: list[str], indent: str) -> str:
    return f"\n{indent}UNION\n".join(blocks)
