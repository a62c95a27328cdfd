from clubhouse.models.club import Club
from clubhouse.models.player import Player
from clubhouse.models.match import Match, MatchPlayerStat

__all__ = [
    "Club",
    "Player",
    "Match",
    "MatchPlayerStat",
]
