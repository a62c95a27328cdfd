"""
Match Builder - turns a validated configuration into a fresh match state
"""
import logging

from clubhouse.match_state import MatchConfig, MatchState, TeamInnings, PlayerEntry
from clubhouse.exceptions import ValidationError
from clubhouse.validators.match_config_validator import MatchConfigValidator

logger = logging.getLogger(__name__)


class MatchBuilder:
    """Builds the initial MatchState for a configured match. No side effects."""

    @staticmethod
    def build(config: MatchConfig) -> MatchState:
        result = MatchConfigValidator.validate(config)
        if not result["valid"]:
            raise ValidationError("Invalid match configuration", errors=result["errors"])

        state = MatchState(
            config=config,
            team_a_innings=MatchBuilder._zeroed_innings(config.team_a_name, config.team_a_players),
            team_b_innings=MatchBuilder._zeroed_innings(config.team_b_name, config.team_b_players),
        )
        logger.debug(
            "Built match %s: %s (%d) vs %s (%d), %d overs, %s bats first",
            config.match_id, config.team_a_name, len(config.team_a_players),
            config.team_b_name, len(config.team_b_players), config.overs,
            config.first_batting_team,
        )
        return state

    @staticmethod
    def _zeroed_innings(team_name: str, players) -> TeamInnings:
        return TeamInnings(
            team_name=team_name,
            entries=[PlayerEntry(player_id=p.id, name=p.name) for p in players],
        )
