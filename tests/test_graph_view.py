from catalog_explorer.graph_view import (
    GraphFilter,
    concept_categories,
    filtered_view,
    graph_stats,
    to_networkx,
)
from catalog_explorer.models import GraphNode, KnowledgeGraph, MatchStage, NodeType


def test_stats(snapshot):
    stats = graph_stats(snapshot.graph)
    assert (stats.nodes, stats.links) == (7, 5)
    assert (stats.concepts, stats.keywords, stats.datasets) == (3, 2, 2)


def test_to_networkx_keeps_attributes(snapshot):
    g = to_networkx(snapshot.graph)
    assert g.number_of_nodes() == 7
    assert g.number_of_edges() == 5
    assert g.nodes["keyword_feeder"]["stage"] is MatchStage.STAGE1
    assert g.edges["keyword_feeder", "concept_grid"]["type"] == "keyword_to_concept"


def test_to_networkx_drops_dangling_links(snapshot):
    graph = KnowledgeGraph(
        nodes=snapshot.graph.nodes,
        links=list(snapshot.graph.links) + [{"source": "keyword_feeder", "target": "ghost"}],
    )
    assert to_networkx(graph).number_of_edges() == 5


def test_categories_in_first_seen_order(snapshot):
    assert concept_categories(snapshot.graph) == ["Facilities", "Management"]


def test_filter_by_type_and_stage(snapshot):
    view = filtered_view(snapshot.graph, GraphFilter(node_type=NodeType.KEYWORD, stage=MatchStage.STAGE2))
    assert list(view.nodes) == ["keyword_outage"]


def test_search_term_is_case_insensitive(snapshot):
    view = filtered_view(snapshot.graph, GraphFilter(search_term="MAP"))
    assert list(view.nodes) == ["ds_feeder_map"]


def test_category_view_keeps_keywords(snapshot):
    view = filtered_view(snapshot.graph, GraphFilter(category="Facilities"))
    assert set(view.nodes) == {"concept_grid", "concept_empty", "keyword_feeder", "keyword_outage"}
    assert list(view.edges) == [("keyword_feeder", "concept_grid")]


def test_filter_matches_single_node():
    node = GraphNode(id="concept_x", label="Substation", type=NodeType.CONCEPT, category="Facilities")
    assert GraphFilter().matches(node)
    assert GraphFilter(search_term="station").matches(node)
    assert not GraphFilter(node_type=NodeType.DATASET).matches(node)
    assert not GraphFilter(category="Management").matches(node)
