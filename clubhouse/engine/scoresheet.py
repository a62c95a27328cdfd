"""
Scoresheet replay - runs a fully scored match through the engine in one go
"""
from typing import Dict, Optional

from clubhouse.match_state import MatchConfig, MatchState
from clubhouse.engine.match_builder import MatchBuilder
from clubhouse.engine.innings_engine import InningsEngine
from clubhouse.exceptions import UnknownPlayerError


def score_scoresheet(config: MatchConfig, scores: Dict[str, dict], engine: Optional[InningsEngine] = None) -> MatchState:
    """
    Build the match, enter the first batting side's counters, close the
    innings, enter the chasing side's counters and finish the match.

    scores maps player id to counters (runs, wickets, ones..sixes). Players
    left out stay on zero. The result always comes from the engine, never
    from the caller.
    """
    engine = engine or InningsEngine()
    state = MatchBuilder.build(config)

    roster = {e.player_id for e in state.all_entries}
    for player_id in scores:
        if player_id not in roster:
            raise UnknownPlayerError(player_id)

    first_ids = {e.player_id for e in state.first_innings.entries}
    state = engine.update_players(state, {pid: v for pid, v in scores.items() if pid in first_ids})
    state = engine.advance(state)

    state = engine.update_players(state, {pid: v for pid, v in scores.items() if pid not in first_ids})
    if not state.is_completed:
        state = engine.advance(state)
    return state
