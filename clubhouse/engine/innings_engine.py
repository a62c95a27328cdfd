"""
Innings Engine - scores player counters and moves a match through its innings
"""
import copy
import logging
from typing import Callable, Optional, Dict

from clubhouse.match_state import MatchState, BOUNDARY_FIELDS
from clubhouse.engine.outcome_resolver import OutcomeResolver
from clubhouse.exceptions import ValidationError, MatchCompletedError, UnknownPlayerError

logger = logging.getLogger(__name__)

ALL_OUT = "all_out"
OVERS_EXHAUSTED = "overs_exhausted"
TARGET_REACHED = "target_reached"

COUNTER_FIELDS = ("runs", "wickets") + BOUNDARY_FIELDS


class InningsEngine:
    """
    Advances a MatchState through innings 1 -> innings 2 -> completion.

    Every operation returns a new state; the state passed in is left untouched,
    so a rejected update never leaves a half-applied change behind.

    on_complete is called with the finished state exactly once per match, at
    the moment it becomes completed (target reached or explicit advance).
    """

    def __init__(
        self,
        resolver: Optional[OutcomeResolver] = None,
        on_complete: Optional[Callable[[MatchState], None]] = None,
    ):
        self.resolver = resolver or OutcomeResolver()
        self.on_complete = on_complete

    def update_player(self, state: MatchState, player_id: str, runs: int, wickets: int, **boundaries) -> MatchState:
        """Set a batting player's run/wicket (and optional boundary) counters"""
        return self.update_players(state, {player_id: {"runs": runs, "wickets": wickets, **boundaries}})

    def update_players(self, state: MatchState, updates: Dict[str, dict]) -> MatchState:
        """
        Set counters for several batting players at once. Values replace the
        current counters. The target check runs once, after every update is
        applied, so a whole innings can be entered in one step.
        """
        if state.is_completed:
            raise MatchCompletedError(
                f"Match {state.match_id} is already completed",
                errors=[{"field": "match", "message": "Match is already completed"}],
            )

        batting = state.batting_innings
        cleaned = {}
        for player_id, values in updates.items():
            unknown = sorted(set(values) - set(COUNTER_FIELDS))
            if unknown:
                raise ValidationError(
                    f"Unknown counters: {', '.join(unknown)}",
                    errors=[{"field": name, "message": "Unknown counter"} for name in unknown],
                )
            if batting.get(player_id) is None:
                raise UnknownPlayerError(player_id, batting.team_name)
            cleaned[player_id] = {name: self._clamp(name, value) for name, value in values.items()}

        new_state = copy.deepcopy(state)
        for player_id, counters in cleaned.items():
            entry = new_state.batting_innings.get(player_id)
            for name, value in counters.items():
                setattr(entry, name, value)

        if new_state.innings_number == 2 and self._target_reached(new_state):
            logger.info(
                "%s reached the target of %d in match %s",
                new_state.batting_innings.team_name, new_state.target, new_state.match_id,
            )
            self._complete(new_state)

        return new_state

    def completion_reason(self, state: MatchState) -> Optional[str]:
        """Why the current innings is over, or None while it is still in play"""
        innings = state.batting_innings
        if state.innings_number == 2 and self._target_reached(state):
            return TARGET_REACHED
        # The last batter cannot be out alone
        if innings.total_wickets >= innings.roster_size - 1:
            return ALL_OUT
        if innings.balls_used >= state.config.overs * 6:
            return OVERS_EXHAUSTED
        return None

    def is_innings_complete(self, state: MatchState) -> bool:
        if state.is_completed:
            return True
        return self.completion_reason(state) is not None

    def advance(self, state: MatchState) -> MatchState:
        """
        Close the current innings. Innings 1 hands over to the chasing side,
        innings 2 finishes the match. Early advancement is allowed.
        """
        if state.is_completed:
            logger.debug("Match %s already completed, advance ignored", state.match_id)
            return state

        new_state = copy.deepcopy(state)
        if new_state.innings_number == 1:
            first = new_state.first_innings
            new_state.innings_number = 2
            new_state.target = first.total_runs + 1
            logger.info(
                "First innings closed in match %s: %s %s, %s need %d",
                new_state.match_id, first.team_name, first.score_display,
                new_state.second_innings.team_name, new_state.target,
            )
        else:
            self._complete(new_state)

        return new_state

    def _complete(self, state: MatchState):
        outcome = self.resolver.resolve(state)
        state.winner = outcome.winner
        state.man_of_match = outcome.man_of_match
        state.man_of_match_name = outcome.man_of_match_name
        state.is_completed = True
        logger.info(
            "Match %s completed: %s %s, %s %s, winner %s, man of the match %s",
            state.match_id,
            state.team_a_innings.team_name, state.team_a_innings.score_display,
            state.team_b_innings.team_name, state.team_b_innings.score_display,
            state.winner, state.man_of_match_name,
        )
        if self.on_complete:
            self.on_complete(state)

    @staticmethod
    def _target_reached(state: MatchState) -> bool:
        return state.target is not None and state.batting_innings.total_runs >= state.target

    @staticmethod
    def _clamp(name: str, value) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(
                f"{name} must be a whole number, got {value!r}",
                errors=[{"field": name, "message": "Must be a whole number"}],
            )
        return max(0, value)
