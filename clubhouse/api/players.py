"""
Roster and player statistics endpoints (club administrators)
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional

from clubhouse.config import settings
from clubhouse.auth.utils import get_current_admin, Principal
from clubhouse.gateway import PersistenceGateway
from clubhouse.engine.stats_aggregator import StatsAggregator, METRICS
from clubhouse.api.deps import get_gateway, get_aggregator
from clubhouse.api.schemas import (
    PlayerCreate, PlayerRename, PlayerResponse, CareerStatsResponse,
    DetailedStatsResponse, StatRowResponse,
)

router = APIRouter(prefix="/players", tags=["Players"])


@router.get("", response_model=List[PlayerResponse])
def list_players(
    admin: Principal = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """All players in the admin's club, by name"""
    return gateway.list_players(admin.club_id)


@router.post("", response_model=PlayerResponse, status_code=201)
def create_player(
    request: PlayerCreate,
    admin: Principal = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    return gateway.insert_player(admin.club_id, request.name.strip())


@router.put("/{player_id}", response_model=PlayerResponse)
def rename_player(
    player_id: str,
    request: PlayerRename,
    admin: Principal = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """Rename a player. Man-of-the-match credits follow the new name."""
    return gateway.update_player_name(player_id, request.name.strip(), club_id=admin.club_id)


@router.delete("/{player_id}")
def delete_player(
    player_id: str,
    admin: Principal = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """Delete a player and all of their match rows"""
    gateway.delete_player(player_id, club_id=admin.club_id)
    return {"message": "Player deleted successfully"}


@router.get("/stats/all", response_model=List[CareerStatsResponse])
def all_player_stats(
    include_inactive: bool = False,
    admin: Principal = Depends(get_current_admin),
    aggregator: StatsAggregator = Depends(get_aggregator),
):
    """Career stats for players with at least one match (or everyone, with include_inactive)"""
    stats = aggregator.all_players(admin.club_id, include_inactive=include_inactive)
    return [s.to_dict() for s in stats]


@router.get("/stats/top", response_model=List[CareerStatsResponse])
def top_performers(
    metric: str = "total_runs",
    admin: Principal = Depends(get_current_admin),
    aggregator: StatsAggregator = Depends(get_aggregator),
):
    """Every player tied for the club lead in a metric"""
    if metric not in METRICS:
        raise HTTPException(status_code=400, detail=f"Unknown metric '{metric}'")
    return [s.to_dict() for s in aggregator.top_performers(admin.club_id, metric)]


@router.get("/stats/{player_id}", response_model=CareerStatsResponse)
def player_stats(
    player_id: str,
    admin: Principal = Depends(get_current_admin),
    aggregator: StatsAggregator = Depends(get_aggregator),
):
    return aggregator.per_player(player_id, club_id=admin.club_id).to_dict()


@router.get("/{player_id}/history", response_model=List[StatRowResponse])
def player_history(
    player_id: str,
    limit: Optional[int] = Query(None, ge=1),
    admin: Principal = Depends(get_current_admin),
    aggregator: StatsAggregator = Depends(get_aggregator),
):
    """A player's matches, most recent first"""
    rows = aggregator.history(player_id, club_id=admin.club_id, limit=limit)
    return [row.to_dict() for row in rows]


@router.get("/{player_id}/detailed-stats", response_model=DetailedStatsResponse)
def player_detailed_stats(
    player_id: str,
    admin: Principal = Depends(get_current_admin),
    aggregator: StatsAggregator = Depends(get_aggregator),
):
    return aggregator.detailed(player_id, club_id=admin.club_id, recent_limit=settings.RECENT_MATCHES_LIMIT)
