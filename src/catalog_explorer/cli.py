"""
Typer-powered CLI for exploring the dataset catalog locally.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich import print
from rich.table import Table

from .config import settings
from .graph_view import GraphFilter, concept_categories, filtered_view, graph_stats
from .loader import CatalogLoader, DataLoadError
from .models import MatchStage, NodeType, SearchResult
from .search import SearchService

app = typer.Typer(add_completion=False, help="Dataset catalog explorer CLI")
state = {"loader": CatalogLoader()}


@app.callback()
def main(
    data_dir: Optional[Path] = typer.Option(None, help="Directory holding the JSON feeds"),
    category: Optional[str] = typer.Option(None, help="Catalog category, e.g. transmission"),
) -> None:
    if data_dir is not None or category is not None:
        state["loader"] = CatalogLoader(data_dir=data_dir, category=category)


def _service() -> SearchService:
    try:
        snapshot = state["loader"].load()
    except DataLoadError as exc:
        print(f"[red]Could not load catalog: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    return SearchService(snapshot)


def _show(results: List[SearchResult]) -> None:
    if not results:
        print("[yellow]No datasets found.[/yellow]")
        return
    table = Table("Rank", "Dataset", "Relevance", "Stage", "Method", "Reason")
    for idx, result in enumerate(results, start=1):
        table.add_row(
            str(idx),
            result.dataset_name,
            f"{result.relevance:.0%}",
            result.stage.value if result.stage else "",
            result.method,
            result.match_reason,
        )
    print(f"Found {len(results)} datasets")
    print(table)


@app.command()
def keyword(
    term: str,
    threshold: float = typer.Option(settings.keyword_threshold, help="Minimum relevance"),
):
    """
    Rank datasets matched by a single keyword.
    """
    term = term.strip()
    if not term:
        raise typer.BadParameter("keyword must not be empty")
    _show(_service().search_by_keyword(term, threshold))


@app.command()
def concept(label: str):
    """
    List datasets reachable through a concept's keywords.
    """
    service = _service()
    node = service.find_concept(label)
    if node is None:
        print(f"[yellow]Unknown concept: {label}[/yellow]")
        raise typer.Exit(code=1)
    _show(service.search_by_concept(node))


@app.command()
def situation(name: Optional[str] = typer.Argument(None)):
    """
    Run a curated situation, or list them when no name is given.
    """
    service = _service()
    if name is None:
        table = Table("Situation", "Description", "Concepts")
        for item in service.snapshot.situations:
            table.add_row(item.name, item.description, ", ".join(item.concepts))
        print(table)
        return
    found = service.find_situation(name)
    if found is None:
        print(f"[yellow]Unknown situation: {name}[/yellow]")
        raise typer.Exit(code=1)
    _show(service.search_by_situation(found))


@app.command()
def faq(question: Optional[str] = typer.Argument(None)):
    """
    Show the datasets recommended for an FAQ question, or list the questions.
    """
    service = _service()
    if question is None:
        table = Table("Category", "Question", "Datasets")
        for category in service.snapshot.faq:
            for entry in category.questions:
                table.add_row(category.category, entry.question, str(len(entry.related_datasets)))
        print(table)
        return
    entry = service.find_faq_question(question)
    if entry is None:
        print(f"[yellow]Unknown question: {question}[/yellow]")
        raise typer.Exit(code=1)
    if entry.answer_hint:
        print(f"[blue]{entry.answer_hint}[/blue]")
    _show(service.resolve_faq(entry.related_datasets, entry.question))


@app.command()
def related(node_id: str):
    """
    Datasets in the neighbourhood of a graph node.
    """
    datasets = _service().related_nodes(node_id)
    if not datasets:
        print("[yellow]No datasets found.[/yellow]")
        return
    table = Table("Dataset ID", "Label", "Stage", "Category")
    for node in datasets:
        table.add_row(node.id, node.label, node.stage.value if node.stage else "", node.category)
    print(table)


@app.command()
def concepts():
    """
    Browsable concepts grouped by category.
    """
    grouped = _service().concepts_by_category()
    if not grouped:
        print("[yellow]No concepts lead to any dataset.[/yellow]")
        return
    for category, nodes in grouped.items():
        table = Table("Concept", "ID", title=f"{category or 'uncategorised'} ({len(nodes)})")
        for node in nodes:
            table.add_row(node.label, node.id)
        print(table)


@app.command()
def stats(
    search: str = typer.Option("", help="Label substring"),
    node_type: Optional[NodeType] = typer.Option(None, "--type", help="Node type"),
    stage: Optional[MatchStage] = typer.Option(None, help="Matching stage"),
    category: Optional[str] = typer.Option(None, help="Concept category"),
):
    """
    Knowledge-graph counts, optionally for a filtered view.
    """
    graph = _service().snapshot.graph
    counts = graph_stats(graph)
    table = Table("Nodes", "Links", "Concepts", "Keywords", "Datasets")
    table.add_row(
        str(counts.nodes),
        str(counts.links),
        str(counts.concepts),
        str(counts.keywords),
        str(counts.datasets),
    )
    print(table)
    print(f"Categories: {', '.join(concept_categories(graph))}")
    graph_filter = GraphFilter(search_term=search, node_type=node_type, stage=stage, category=category)
    if graph_filter != GraphFilter():
        view = filtered_view(graph, graph_filter)
        print(f"Visible: {view.number_of_nodes()} nodes, {view.number_of_edges()} links")


if __name__ == "__main__":
    app()
