"""Command line interface for :mod:`rdfview`."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .api import fetch_view, get_view, new_output_graph
from .errors import BrokenError, RDFViewError
from .loader import find_viewers, load_config_graph
from .shortnames import ShortnameService
from .sources import GraphSource, Source, SparqlEndpointSource
from .sparql_helper import SparqlHelperError
from .view import builtin_views

__all__ = [
    "main",
]

EXIT_CONFIG = 1
EXIT_SOURCE = 2
EXIT_BROKEN = 3


@click.group()
@click.version_option(package_name="rdfview")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    r"""rdfview - fetch views of RDF resources with generated SPARQL.

    A view says which properties (and property chains) of a set of
    selected resources to fetch. rdfview turns it into CONSTRUCT or
    DESCRIBE queries, runs them against local RDF files and/or SPARQL
    endpoints, and merges the answers into one graph.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            force=True,
        )
        logging.getLogger("rdfview").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s", force=True)


@main.command()
@click.option("--root", "roots", multiple=True, help="URI of a selected resource")
@click.option(
    "--roots-file",
    type=click.Path(exists=True, dir_okay=False),
    help="File with one root URI per line",
)
@click.option("--endpoint", "endpoints", multiple=True, help="SPARQL endpoint URL")
@click.option(
    "--data",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Local RDF file to query",
)
@click.option("--viewer", default="basic", show_default=True,
              help="Builtin view (basic, description, all), viewer URI, or viewer name")
@click.option("--config", "config_files", multiple=True,
              type=click.Path(exists=True, dir_okay=False),
              help="RDF file with api:Viewer descriptions")
@click.option("--property", "properties", multiple=True,
              help="Extra (dotted) property chain to fetch")
@click.option("--shortnames", type=click.Path(exists=True, dir_okay=False),
              help="YAML file with prefixes and short names")
@click.option("--select", "select_file", type=click.Path(exists=True, dir_okay=False),
              help="File holding the SELECT that chose the roots (enables nested queries)")
@click.option("--describe-threshold", type=int, help="Root count above which DESCRIBE nests")
@click.option("--label-property", help="Label predicate; makes the view a labelled describe")
@click.option("--no-nested", is_flag=True, help="Never embed the SELECT as a subquery")
@click.option("--format", "rdf_format", default="turtle", show_default=True,
              help="Output serialization")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file")
@click.option("--show-query", is_flag=True, help="Print the generated query to stderr")
def fetch(
    roots: tuple[str, ...],
    roots_file: Optional[str],
    endpoints: tuple[str, ...],
    data: tuple[str, ...],
    viewer: str,
    config_files: tuple[str, ...],
    properties: tuple[str, ...],
    shortnames: Optional[str],
    select_file: Optional[str],
    describe_threshold: Optional[int],
    label_property: Optional[str],
    no_nested: bool,
    rdf_format: str,
    output: Optional[str],
    show_query: bool,
) -> None:
    """Fetch a view of the given roots and print the merged graph.

    Example:
      rdfview fetch --data books.ttl --root http://example.org/b1 --property creator.name
    """
    all_roots = list(roots)
    if roots_file:
        lines = Path(roots_file).read_text(encoding="utf-8").splitlines()
        all_roots.extend(line.strip() for line in lines if line.strip())

    if not endpoints and not data:
        raise click.UsageError("give at least one --endpoint or --data source")

    sources: list[Source] = [
        SparqlEndpointSource(url, nested_select=not no_nested) for url in endpoints
    ]

    try:
        if data:
            local = GraphSource.from_files(*data)
            local.nested_select = not no_nested
            sources.append(local)

        config = load_config_graph(*config_files) if config_files else None
        if shortnames:
            sns = ShortnameService.from_yaml(shortnames)
        elif config is not None:
            sns = ShortnameService.from_graph(config)
        else:
            sns = ShortnameService()

        view = get_view(viewer, config, sns).copy()
        for prop in properties:
            view.add_view_from_parameter_value(prop, sns)
        if describe_threshold is not None:
            view.set_describe_threshold(describe_threshold)
        if label_property:
            view.set_describe_label(sns.expand(label_property))

        select = Path(select_file).read_text(encoding="utf-8") if select_file else ""
        result = fetch_view(
            view, all_roots, sources, select=select, graph=new_output_graph(sns.prefixes)
        )
    except BrokenError as e:
        click.echo(f"Internal error: {e}", err=True)
        sys.exit(EXIT_BROKEN)
    except SparqlHelperError as e:
        click.echo(f"Source failure: {e}", err=True)
        sys.exit(EXIT_SOURCE)
    except RDFViewError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG)
    finally:
        for source in sources:
            if isinstance(source, SparqlEndpointSource):
                source.close()

    if show_query:
        click.echo(result.query, err=True)

    serialized = result.graph.serialize(format=rdf_format)
    if output:
        Path(output).write_text(serialized, encoding="utf-8")
        click.echo(
            f"Wrote {result.triple_count} triples ({result.query_count} queries) to {output}",
            err=True,
        )
    else:
        click.echo(serialized)


@main.command(name="builtins")
def list_builtins() -> None:
    """List the builtin views."""
    for uri, view in builtin_views().items():
        click.echo(f"{view.name:<12} {view.type.value:<9} {uri}")


@main.command(name="viewers")
@click.argument("config_files", nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False))
def list_viewers(config_files: tuple[str, ...]) -> None:
    """List the viewers described in configuration files."""
    try:
        graph = load_config_graph(*config_files)
        for name, uri in sorted(find_viewers(graph).items()):
            view = get_view(name, graph)
            click.echo(f"{name}\t{view.type.value}\t{len(view.chain_list())} chains\t{uri}")
    except RDFViewError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG)


if __name__ == "__main__":
    main()
