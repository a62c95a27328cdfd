"""
Outcome Resolver - winner and man of the match for a finished match
"""
from dataclasses import dataclass

from clubhouse.match_state import MatchState, TIE
from clubhouse.exceptions import InningsNotClosedError


@dataclass(frozen=True)
class Outcome:
    """Result to stamp onto a completed MatchState"""
    winner: str  # team name or TIE
    man_of_match: str  # player id
    man_of_match_name: str


class OutcomeResolver:
    """
    Decides the winner and man of the match once both innings are closed.
    Never mutates the state it is given.
    """

    def __init__(self, wicket_weight: int = 1):
        # Performance score is runs + wicket_weight * wickets
        self.wicket_weight = wicket_weight

    def resolve(self, state: MatchState) -> Outcome:
        if state.innings_number != 2:
            raise InningsNotClosedError(
                "Outcome requested before the second innings",
                errors=[{"field": "innings_number", "message": "Second innings has not started"}],
            )

        team_a = state.team_a_innings
        team_b = state.team_b_innings
        if team_a.total_runs > team_b.total_runs:
            winner = team_a.team_name
        elif team_b.total_runs > team_a.total_runs:
            winner = team_b.team_name
        else:
            winner = TIE

        # Strictly greater, so the first player in team A then team B order keeps ties
        best = None
        best_score = -1
        for entry in state.all_entries:
            score = entry.runs + self.wicket_weight * entry.wickets
            if score > best_score:
                best_score = score
                best = entry

        return Outcome(
            winner=winner,
            man_of_match=best.player_id,
            man_of_match_name=best.name,
        )
