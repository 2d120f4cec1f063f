import json

import pytest

from catalog_explorer.loader import build_snapshot
from catalog_explorer.search import SearchService


@pytest.fixture
def matching_feed():
    return {
        "matching_results": [
            {"keyword": "substation", "datasetName": "X", "matchStage": "Stage1", "relevanceScore": 10},
            {"keyword": "k", "datasetName": "A", "matchStage": "Stage1", "relevanceScore": 9},
            {"keyword": "k", "datasetName": "B", "matchStage": "Stage1", "relevanceScore": 4},
            {
                "keyword": "feeder",
                "datasetName": "Feeder Map",
                "matchStage": "Stage2",
                "relevanceScore": 8,
                "matchMethod": "semantic",
                "matchReason": "feeder topology",
            },
            {"keyword": "feeder", "datasetName": "Outage Log", "matchStage": "Stage3", "relevanceScore": 6},
            {"keyword": "feeder", "datasetName": "Feeder Map", "matchStage": "Stage1", "relevanceScore": 10},
            {"keyword": "outage", "datasetName": "Outage Log", "matchStage": "Stage1", "relevanceScore": 9},
            {"keyword": "outage", "datasetName": "Feeder Map", "matchStage": "Stage3", "relevanceScore": 5},
        ]
    }


@pytest.fixture
def graph_feed():
    return {
        "nodes": [
            {"id": "concept_grid", "label": "Grid", "type": "concept", "category": "Facilities"},
            {"id": "concept_empty", "label": "Empty", "type": "concept", "category": "Facilities"},
            {"id": "concept_ops", "label": "Operations", "type": "concept", "category": "Management"},
            {"id": "keyword_feeder", "label": "feeder", "type": "keyword", "stage": "Stage1"},
            {"id": "keyword_outage", "label": "outage", "type": "keyword", "stage": "Stage2"},
            {"id": "ds_feeder_map", "label": "Feeder Map", "type": "dataset", "stage": "Stage1"},
            {"id": "ds_outage_log", "label": "Outage Log", "type": "dataset", "stage": "Stage2"},
        ],
        "links": [
            {"source": "keyword_feeder", "target": "concept_grid", "type": "keyword_to_concept", "stage": "Stage1"},
            {"source": "concept_ops", "target": "keyword_outage", "type": "keyword_to_concept"},
            {"source": "concept_grid", "target": "ds_feeder_map", "type": "concept_to_dataset", "stage": "Stage1"},
            {"source": "ds_outage_log", "target": "concept_grid", "type": "concept_to_dataset", "stage": "Stage2"},
            {"source": "concept_ops", "target": "ds_outage_log", "type": "concept_to_dataset"},
        ],
    }


@pytest.fixture
def situations_feed():
    return {
        "situations": [
            {
                "name": "Reliability review",
                "description": "Find outage and feeder data",
                "concepts": ["Grid", "Operations", "Not In Graph"],
            },
            {"name": "Nothing", "description": "No resolvable concepts", "concepts": ["Not In Graph"]},
        ]
    }


@pytest.fixture
def faq_feed():
    return {
        "faq_categories": [
            {
                "category": "Outages",
                "description": "Power interruptions",
                "questions": [
                    {
                        "question": "Where did outages happen?",
                        "related_datasets": ["Outage Log", "Feeder Map"],
                        "keywords": ["outage"],
                        "answer_hint": "Start from the outage log",
                    }
                ],
            }
        ]
    }


@pytest.fixture
def snapshot(matching_feed, graph_feed, situations_feed, faq_feed):
    return build_snapshot(matching_feed, graph_feed, situations_feed, faq_feed, category="transmission")


@pytest.fixture
def service(snapshot):
    return SearchService(snapshot)


@pytest.fixture
def data_dir(tmp_path, matching_feed, graph_feed, situations_feed, faq_feed):
    """Write the feeds the way the transmission catalog ships them."""
    files = {
        "transmission_matching_results.json": matching_feed,
        "transmission_knowledge_graph.json": graph_feed,
        "situations.json": situations_feed,
        "faq.json": faq_feed,
    }
    for name, payload in files.items():
        (tmp_path / name).write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return tmp_path
