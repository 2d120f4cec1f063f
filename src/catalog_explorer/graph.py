"""
Neighbourhood resolution over the flat node and link arrays of the knowledge graph.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .models import KEYWORD_TO_CONCEPT, GraphLink, GraphNode, NodeType


def _index(nodes: Sequence[GraphNode]) -> Dict[str, GraphNode]:
    # first occurrence wins if a feed repeats an id
    by_id: Dict[str, GraphNode] = {}
    for node in nodes:
        by_id.setdefault(node.id, node)
    return by_id


def _stage_allows(link: GraphLink, keyword: GraphNode) -> bool:
    return link.stage is None or link.stage_key == keyword.stage_key


def related_nodes(
    node_id: str,
    node_type: NodeType | str,
    nodes: Sequence[GraphNode],
    links: Sequence[GraphLink],
) -> List[GraphNode]:
    """
    Return the dataset nodes related to `node_id`, deduplicated by id in discovery order.

    Datasets are their own neighbourhood. Concepts reach datasets over one hop
    in either direction. Keywords reach datasets through their concepts and
    through direct links, but only over links tagged with the keyword's own
    stage (or untagged), so one matching phase never leaks into another
    through a shared concept.
    """
    by_id = _index(nodes)
    node = by_id.get(node_id)
    if node is None:
        return []
    node_type = NodeType(node_type)

    datasets: List[GraphNode] = []
    seen = set()

    def add(candidate: Optional[GraphNode]) -> None:
        if candidate is None or candidate.type != NodeType.DATASET:
            return
        if candidate.id in seen:
            return
        seen.add(candidate.id)
        datasets.append(candidate)

    if node_type == NodeType.DATASET:
        add(node)
        return datasets

    if node_type == NodeType.CONCEPT:
        for link in links:
            other = link.other_end(node_id)
            if other is not None:
                add(by_id.get(other))
        return datasets

    concept_ids = set()
    for link in links:
        other = link.other_end(node_id)
        if other is None:
            continue
        neighbor = by_id.get(other)
        if neighbor is not None and neighbor.type == NodeType.CONCEPT:
            concept_ids.add(neighbor.id)

    for link in links:
        if not _stage_allows(link, node):
            continue
        if link.source in concept_ids:
            add(by_id.get(link.target))
        if link.target in concept_ids:
            add(by_id.get(link.source))

    # keywords may also point straight at a dataset
    for link in links:
        if not _stage_allows(link, node):
            continue
        other = link.other_end(node_id)
        if other is not None:
            add(by_id.get(other))

    return datasets


def keyword_text(node_id: str, prefix: str) -> str:
    if prefix and node_id.startswith(prefix):
        return node_id[len(prefix):]
    return node_id


def concept_by_label(label: str, nodes: Sequence[GraphNode]) -> Optional[GraphNode]:
    for node in nodes:
        if node.type == NodeType.CONCEPT and node.label == label:
            return node
    return None


def keyword_nodes_for_concept(
    concept_id: str,
    nodes: Sequence[GraphNode],
    links: Sequence[GraphLink],
) -> List[GraphNode]:
    """
    Keyword nodes joined to a concept by a keyword_to_concept link, whichever way it points.
    """
    by_id = _index(nodes)
    keywords: List[GraphNode] = []
    seen = set()
    for link in links:
        if link.type != KEYWORD_TO_CONCEPT:
            continue
        other = link.other_end(concept_id)
        if other is None or other in seen:
            continue
        candidate = by_id.get(other)
        if candidate is not None and candidate.type == NodeType.KEYWORD:
            seen.add(other)
            keywords.append(candidate)
    return keywords
