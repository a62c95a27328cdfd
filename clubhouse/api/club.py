"""
Club overview endpoint
"""
from fastapi import APIRouter, Depends

from clubhouse.auth.utils import get_current_admin, Principal
from clubhouse.engine.stats_aggregator import StatsAggregator
from clubhouse.api.deps import get_aggregator
from clubhouse.api.schemas import ClubSummaryResponse

router = APIRouter(prefix="/club", tags=["Club"])


@router.get("/summary", response_model=ClubSummaryResponse)
def club_summary(
    admin: Principal = Depends(get_current_admin),
    aggregator: StatsAggregator = Depends(get_aggregator),
):
    """Player and match counts plus the date of the latest match"""
    return aggregator.club_summary(admin.club_id)
