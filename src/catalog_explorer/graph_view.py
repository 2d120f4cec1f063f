"""
Adapter between the knowledge graph and a renderer.

The search core works on flat node and link lists; anything that draws the
graph gets a NetworkX view built here instead.
"""
from __future__ import annotations

from typing import List, Optional

import networkx as nx
from pydantic import BaseModel

from .models import GraphNode, KnowledgeGraph, MatchStage, NodeType


class GraphStats(BaseModel):
    nodes: int
    links: int
    concepts: int
    keywords: int
    datasets: int


class GraphFilter(BaseModel):
    search_term: str = ""
    node_type: Optional[NodeType] = None
    stage: Optional[MatchStage] = None
    category: Optional[str] = None

    def matches(self, node: GraphNode) -> bool:
        if self.node_type is not None and node.type != self.node_type:
            return False
        if self.stage is not None and node.stage != self.stage:
            return False
        if self.search_term and self.search_term.lower() not in node.label.lower():
            return False
        if self.category is not None:
            # a category view keeps its concepts and every keyword
            if node.type == NodeType.CONCEPT:
                return node.category == self.category
            return node.type == NodeType.KEYWORD
        return True


def to_networkx(graph: KnowledgeGraph) -> nx.DiGraph:
    g = nx.DiGraph()
    for node in graph.nodes:
        if node.id not in g:
            g.add_node(node.id, **node.model_dump())
    for link in graph.links:
        if link.source in g and link.target in g:
            g.add_edge(link.source, link.target, type=link.type, stage=link.stage)
    return g


def graph_stats(graph: KnowledgeGraph) -> GraphStats:
    types = [node.type for node in graph.nodes]
    return GraphStats(
        nodes=len(graph.nodes),
        links=len(graph.links),
        concepts=types.count(NodeType.CONCEPT),
        keywords=types.count(NodeType.KEYWORD),
        datasets=types.count(NodeType.DATASET),
    )


def concept_categories(graph: KnowledgeGraph) -> List[str]:
    categories: List[str] = []
    for node in graph.nodes:
        if node.type == NodeType.CONCEPT and node.category not in categories:
            categories.append(node.category)
    return categories


def filtered_view(graph: KnowledgeGraph, graph_filter: GraphFilter) -> nx.DiGraph:
    """
    Subgraph of visible nodes; links survive only when both ends are visible.
    """
    g = to_networkx(graph)
    visible = [node.id for node in graph.nodes if node.id in g and graph_filter.matches(node)]
    return g.subgraph(visible).copy()
