"""
Match Recorder - flattens a completed MatchState into stored rows
"""
import logging
from typing import List, Tuple

from clubhouse.match_state import MatchState, TeamInnings, BOUNDARY_FIELDS
from clubhouse.models.match import Match, MatchPlayerStat
from clubhouse.gateway import PersistenceGateway
from clubhouse.exceptions import ValidationError

logger = logging.getLogger(__name__)


class MatchRecorder:
    """
    Persists completed matches through the gateway.

    The match id from the config is the idempotency key, so saving the same
    finished state again (say after a failed attempt) never writes a second match.
    """

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    @staticmethod
    def flatten(state: MatchState, club_id: str) -> Tuple[Match, List[MatchPlayerStat]]:
        """One Match record plus one stat row per participating player"""
        if not state.is_completed:
            raise ValidationError(
                f"Match {state.match_id} is not completed",
                errors=[{"field": "is_completed", "message": "Only completed matches can be saved"}],
            )

        config = state.config
        team_a = state.team_a_innings
        team_b = state.team_b_innings
        match = Match(
            id=state.match_id,
            club_id=club_id,
            team_a_name=config.team_a_name,
            team_b_name=config.team_b_name,
            overs=config.overs,
            toss_winner=config.toss_winner,
            toss_decision=config.toss_decision,
            team_a_score=team_a.total_runs,
            team_a_wickets=team_a.total_wickets,
            team_b_score=team_b.total_runs,
            team_b_wickets=team_b.total_wickets,
            winner=state.winner,
            man_of_match=state.man_of_match_name,
            man_of_match_player_id=state.man_of_match,
            match_date=state.match_date,
            is_completed=True,
        )

        rows = MatchRecorder._rows(state.match_id, club_id, team_a) + MatchRecorder._rows(state.match_id, club_id, team_b)
        return match, rows

    @staticmethod
    def _rows(match_id: str, club_id: str, innings: TeamInnings) -> List[MatchPlayerStat]:
        return [
            MatchPlayerStat(
                match_id=match_id,
                player_id=entry.player_id,
                club_id=club_id,
                team=innings.team_name,
                runs=entry.runs,
                wickets=entry.wickets,
                **{name: getattr(entry, name) for name in BOUNDARY_FIELDS},
            )
            for entry in innings.entries
        ]

    def save(self, state: MatchState, club_id: str) -> str:
        """
        Persist a completed match. Marks the state as persisted only after the
        write commits; a PersistenceFailure leaves it unmarked for a retry.
        """
        if state.is_persisted:
            logger.debug("Match %s already persisted", state.match_id)
            return state.match_id

        match, rows = self.flatten(state, club_id)
        match_id = self.gateway.insert_match_with_stats(match, rows)
        state.is_persisted = True
        return match_id
