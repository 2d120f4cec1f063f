"""
Relevance scoring for a group of match records sharing one (keyword, dataset) pair.
"""
from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from .models import MatchRecord, MatchStage

# A record without a stage counts as a third-stage match.
DEFAULT_STAGE = MatchStage.STAGE3


def stage_weight(stage: Optional[MatchStage]) -> float:
    return (stage or DEFAULT_STAGE).weight


def relevance_score(records: Sequence[MatchRecord]) -> float:
    """
    Mean of stage weight times normalised score (relevanceScore / 10), capped at 1.0.
    """
    if not records:
        raise ValueError("Cannot score an empty record group")
    weights = np.array([stage_weight(r.match_stage) for r in records], dtype=np.float64)
    scores = np.array([r.relevance_score for r in records], dtype=np.float64) / 10.0
    aggregate = float(np.mean(weights * scores))
    return min(aggregate, 1.0)
