"""
Search utilities for keyword, concept, situation and FAQ discovery.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

from .config import settings
from .graph import concept_by_label, keyword_nodes_for_concept, keyword_text, related_nodes
from .loader import CatalogSnapshot
from .logger import get_logger
from .models import (
    FAQQuestion,
    GraphNode,
    MatchRecord,
    MatchStage,
    NodeType,
    SearchResult,
    Situation,
)
from .scoring import relevance_score

logger = get_logger(__name__)

DEFAULT_METHOD = "keyword-match"
FAQ_METHOD = "faq-recommendation"


def _ranked(results: Iterable[SearchResult]) -> List[SearchResult]:
    # sorted() is stable, so ties keep discovery order
    return sorted(results, key=lambda r: r.relevance, reverse=True)


class SearchService:
    def __init__(self, snapshot: CatalogSnapshot) -> None:
        self.snapshot = snapshot
        self._records_by_keyword: Optional[Dict[str, List[MatchRecord]]] = None

    def use_snapshot(self, snapshot: CatalogSnapshot) -> None:
        """
        Swap in a new data snapshot and drop every index derived from the old one.
        """
        if snapshot.version != self.snapshot.version:
            logger.info(
                "snapshot replaced",
                extra={"old_version": self.snapshot.version, "new_version": snapshot.version},
            )
        self.snapshot = snapshot
        self._records_by_keyword = None

    def _records_for(self, keyword: str) -> List[MatchRecord]:
        if self._records_by_keyword is None:
            index: Dict[str, List[MatchRecord]] = defaultdict(list)
            for record in self.snapshot.records:
                index[record.keyword].append(record)
            self._records_by_keyword = dict(index)
        return self._records_by_keyword.get(keyword, [])

    def search_by_keyword(self, keyword: str, threshold: float = 0.0) -> List[SearchResult]:
        groups: Dict[str, List[MatchRecord]] = {}
        for record in self._records_for(keyword):
            groups.setdefault(record.dataset_name, []).append(record)

        results: List[SearchResult] = []
        for dataset_name, records in groups.items():
            relevance = relevance_score(records)
            if relevance < threshold:
                continue
            first = records[0]
            results.append(
                SearchResult(
                    dataset_name=dataset_name,
                    relevance=relevance,
                    stage=first.match_stage or MatchStage.UNKNOWN,
                    method=first.match_method or DEFAULT_METHOD,
                    keywords=list(dict.fromkeys(r.keyword for r in records)),
                    match_reason=first.match_reason or "",
                )
            )
        logger.debug(
            "keyword search",
            extra={"keyword": keyword, "threshold": threshold, "results": len(results)},
        )
        return _ranked(results)

    def _search_concepts(
        self,
        concepts: Sequence[GraphNode],
        threshold: float,
        method: str,
    ) -> List[SearchResult]:
        graph = self.snapshot.graph
        results: List[SearchResult] = []
        seen = set()
        for concept in concepts:
            for keyword_node in keyword_nodes_for_concept(concept.id, graph.nodes, graph.links):
                keyword = keyword_text(keyword_node.id, settings.keyword_prefix)
                for result in self.search_by_keyword(keyword, threshold):
                    if result.dataset_name in seen:
                        continue
                    seen.add(result.dataset_name)
                    results.append(
                        result.model_copy(
                            update={"method": method, "match_reason": f"via concept: {concept.label}"}
                        )
                    )
        return _ranked(results)

    def search_by_concept(self, concept: GraphNode) -> List[SearchResult]:
        results = self._search_concepts(
            [concept], settings.concept_threshold, f"concept: {concept.label}"
        )
        logger.debug("concept search", extra={"concept": concept.id, "results": len(results)})
        return results

    def search_by_situation(self, situation: Situation) -> List[SearchResult]:
        nodes = self.snapshot.graph.nodes
        concepts: List[GraphNode] = []
        for name in situation.concepts:
            concept = concept_by_label(name, nodes)
            if concept is None:
                logger.debug(
                    "situation concept not in graph",
                    extra={"situation": situation.name, "concept": name},
                )
                continue
            concepts.append(concept)
        results = self._search_concepts(
            concepts, settings.situation_threshold, f"situation: {situation.name}"
        )
        logger.debug(
            "situation search", extra={"situation": situation.name, "results": len(results)}
        )
        return results

    def resolve_faq(self, dataset_names: Sequence[str], question: str) -> List[SearchResult]:
        return [
            SearchResult(
                dataset_name=name,
                relevance=1.0,
                method=FAQ_METHOD,
                match_reason=f"related question: {question}",
            )
            for name in dataset_names
        ]

    def related_nodes(self, node_id: str) -> List[GraphNode]:
        """
        Dataset neighbourhood of a node in the snapshot graph, using the node's own type.
        """
        graph = self.snapshot.graph
        node = next((n for n in graph.nodes if n.id == node_id), None)
        if node is None:
            return []
        return related_nodes(node.id, node.type, graph.nodes, graph.links)

    def find_concept(self, label: str) -> Optional[GraphNode]:
        return concept_by_label(label, self.snapshot.graph.nodes)

    def find_situation(self, name: str) -> Optional[Situation]:
        return next((s for s in self.snapshot.situations if s.name == name), None)

    def find_faq_question(self, question: str) -> Optional[FAQQuestion]:
        for category in self.snapshot.faq:
            for entry in category.questions:
                if entry.question == question:
                    return entry
        return None

    def browsable_concepts(self) -> List[GraphNode]:
        """
        Concepts with at least one keyword that finds a dataset.
        """
        graph = self.snapshot.graph
        browsable: List[GraphNode] = []
        for node in graph.nodes:
            if node.type != NodeType.CONCEPT:
                continue
            keywords = keyword_nodes_for_concept(node.id, graph.nodes, graph.links)
            if any(
                self.search_by_keyword(keyword_text(k.id, settings.keyword_prefix), 0.0)
                for k in keywords
            ):
                browsable.append(node)
        return browsable

    def concepts_by_category(self) -> Dict[str, List[GraphNode]]:
        grouped: Dict[str, List[GraphNode]] = {}
        for concept in self.browsable_concepts():
            grouped.setdefault(concept.category, []).append(concept)
        return grouped
