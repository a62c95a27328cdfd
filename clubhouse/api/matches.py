"""
Match endpoints - live scoring, saving and the stored match history
"""
from dataclasses import dataclass
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Dict

from clubhouse.config import settings
from clubhouse.database import get_db
from clubhouse.auth.utils import get_current_admin, Principal
from clubhouse.gateway import PersistenceGateway
from clubhouse.match_state import MatchState
from clubhouse.engine import MatchBuilder, InningsEngine, OutcomeResolver, MatchRecorder
from clubhouse.engine.scoresheet import score_scoresheet
from clubhouse.engine.stats_aggregator import StatsAggregator
from clubhouse.api.deps import get_gateway, get_aggregator
from clubhouse.api.schemas import (
    MatchConfigRequest, PlayerScoreRequest, ScoresheetRequest, MatchStateResponse,
    SavedMatchResponse, MatchResponse, StatRowResponse,
)

router = APIRouter(prefix="/matches", tags=["Matches"])


@dataclass
class LiveMatch:
    club_id: str
    state: MatchState


# In-memory store for matches being scored, keyed by match id.
# One operator scores a match. Entries are removed once the match is saved.
active_matches: Dict[str, LiveMatch] = {}


def _get_live(match_id: str, admin: Principal) -> LiveMatch:
    live = active_matches.get(match_id)
    if not live or live.club_id != admin.club_id:
        raise HTTPException(status_code=404, detail="Active match session not found")
    return live


def _engine(live: LiveMatch, db: Session) -> InningsEngine:
    """Engine that saves the match the moment it completes"""
    def persist(state: MatchState):
        # Keep the finished state first so a failed save can be retried
        live.state = state
        MatchRecorder(PersistenceGateway(db)).save(state, live.club_id)
        active_matches.pop(state.match_id, None)

    return InningsEngine(resolver=OutcomeResolver(settings.MOM_WICKET_WEIGHT), on_complete=persist)


def _state_response(state: MatchState, engine: InningsEngine) -> MatchStateResponse:
    data = state.to_dict()
    data["innings_complete"] = engine.is_innings_complete(state)
    data["completion_reason"] = None if state.is_completed else engine.completion_reason(state)
    return MatchStateResponse(**data)


# ---- Live scoring ----

@router.post("/live", response_model=MatchStateResponse, status_code=201)
def start_live_match(
    request: MatchConfigRequest,
    admin: Principal = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway),
    db: Session = Depends(get_db),
):
    """Set up a match for scoring"""
    config = request.to_config(lambda pid: gateway.roster_player(pid, admin.club_id))
    if config.match_id in active_matches:
        raise HTTPException(status_code=409, detail="Match is already being scored")

    state = MatchBuilder.build(config)
    live = LiveMatch(club_id=admin.club_id, state=state)
    active_matches[config.match_id] = live
    return _state_response(state, _engine(live, db))


@router.get("/live/{match_id}", response_model=MatchStateResponse)
def get_live_match(match_id: str, admin: Principal = Depends(get_current_admin), db: Session = Depends(get_db)):
    live = _get_live(match_id, admin)
    return _state_response(live.state, _engine(live, db))


@router.put("/live/{match_id}/players/{player_id}", response_model=MatchStateResponse)
def update_live_player(
    match_id: str,
    player_id: str,
    request: PlayerScoreRequest,
    admin: Principal = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Set a batting player's counters. Reaching the target finishes and saves the match."""
    live = _get_live(match_id, admin)
    engine = _engine(live, db)
    live.state = engine.update_players(live.state, {player_id: request.model_dump(exclude_none=True)})
    return _state_response(live.state, engine)


@router.post("/live/{match_id}/advance", response_model=MatchStateResponse)
def advance_live_match(match_id: str, admin: Principal = Depends(get_current_admin), db: Session = Depends(get_db)):
    """Close the current innings"""
    live = _get_live(match_id, admin)
    engine = _engine(live, db)
    live.state = engine.advance(live.state)
    return _state_response(live.state, engine)


@router.post("/live/{match_id}/save", response_model=SavedMatchResponse)
def save_live_match(
    match_id: str,
    admin: Principal = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """Save (or retry saving) a completed match"""
    live = active_matches.get(match_id)
    if not live or live.club_id != admin.club_id:
        # Saved matches leave the live store
        return SavedMatchResponse(id=gateway.get_match(match_id, club_id=admin.club_id).id)

    saved_id = MatchRecorder(gateway).save(live.state, live.club_id)
    active_matches.pop(match_id, None)
    return SavedMatchResponse(id=saved_id)


@router.delete("/live/{match_id}")
def discard_live_match(match_id: str, admin: Principal = Depends(get_current_admin)):
    _get_live(match_id, admin)
    del active_matches[match_id]
    return {"message": "Match discarded"}


# ---- Stored matches ----

@router.get("", response_model=List[MatchResponse])
def list_matches(admin: Principal = Depends(get_current_admin), gateway: PersistenceGateway = Depends(get_gateway)):
    return gateway.list_matches(admin.club_id)


@router.post("", response_model=SavedMatchResponse, status_code=201)
def save_scoresheet(
    request: ScoresheetRequest,
    admin: Principal = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """
    Save a fully scored match. The result is worked out here, and re-sending
    the same match id returns the stored match instead of a duplicate.
    """
    config = request.config.to_config(lambda pid: gateway.roster_player(pid, admin.club_id))
    scores = request.score_map()
    engine = InningsEngine(resolver=OutcomeResolver(settings.MOM_WICKET_WEIGHT))
    state = score_scoresheet(config, scores, engine)
    return SavedMatchResponse(id=MatchRecorder(gateway).save(state, admin.club_id))


@router.get("/{match_id}", response_model=MatchResponse)
def get_match(match_id: str, admin: Principal = Depends(get_current_admin), gateway: PersistenceGateway = Depends(get_gateway)):
    return gateway.get_match(match_id, club_id=admin.club_id)


@router.get("/{match_id}/stats", response_model=List[StatRowResponse])
def get_match_stats(match_id: str, admin: Principal = Depends(get_current_admin), gateway: PersistenceGateway = Depends(get_gateway)):
    """Per-player rows for one match"""
    return [row.to_dict() for row in gateway.list_match_player_stats(match_id, club_id=admin.club_id)]


@router.get("/{match_id}/reconcile")
def reconcile_match(match_id: str, admin: Principal = Depends(get_current_admin), aggregator: StatsAggregator = Depends(get_aggregator)):
    """Check that the per-player rows add up to the recorded team totals"""
    aggregator.reconcile_match(match_id, club_id=admin.club_id)
    return {"id": match_id, "consistent": True}


@router.delete("/{match_id}")
def delete_match(match_id: str, admin: Principal = Depends(get_current_admin), gateway: PersistenceGateway = Depends(get_gateway)):
    gateway.delete_match(match_id, club_id=admin.club_id)
    return {"message": "Match deleted successfully"}
