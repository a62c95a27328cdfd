"""
Endpoints for a logged-in player viewing their own career
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from clubhouse.config import settings
from clubhouse.auth.utils import get_current_player, Principal
from clubhouse.engine.stats_aggregator import StatsAggregator
from clubhouse.api.deps import get_aggregator
from clubhouse.api.schemas import DetailedStatsResponse, StatRowResponse

router = APIRouter(prefix="/me", tags=["Player"])


@router.get("/detailed-stats", response_model=DetailedStatsResponse)
def my_detailed_stats(
    player: Principal = Depends(get_current_player),
    aggregator: StatsAggregator = Depends(get_aggregator),
):
    return aggregator.detailed(player.subject_id, club_id=player.club_id, recent_limit=settings.RECENT_MATCHES_LIMIT)


@router.get("/history", response_model=List[StatRowResponse])
def my_history(
    limit: Optional[int] = Query(None, ge=1),
    player: Principal = Depends(get_current_player),
    aggregator: StatsAggregator = Depends(get_aggregator),
):
    rows = aggregator.history(player.subject_id, club_id=player.club_id, limit=limit)
    return [row.to_dict() for row in rows]
