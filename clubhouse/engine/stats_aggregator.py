"""
Stats Aggregator - career metrics derived from the stored match history

Nothing here is persisted. Every figure is recomputed from the stat rows on
each call, and the output for an unchanged history is always identical.
"""
import enum
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, List, Iterable

from clubhouse.gateway import PersistenceGateway, StatRow
from clubhouse.exceptions import AggregationInputInconsistency, ValidationError


class MomAttribution(enum.Enum):
    NAME = "name"  # man_of_match column holds the player's name
    ID = "id"      # man_of_match_player_id column


def _fixed(numerator: int, denominator: int, places: int) -> str:
    """
    numerator / denominator rounded half-up to a fixed number of places.

    The quotient is exact, so halves always round up: 107/40 gives "2.68",
    where rounding the binary float 2.675 would give "2.67".
    """
    quantum = Decimal(1).scaleb(-places)
    value = (Decimal(numerator) / Decimal(denominator)).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{value:.{places}f}"


@dataclass
class Boundaries:
    """Scoring shot breakdown"""
    ones: int = 0
    twos: int = 0
    threes: int = 0
    fours: int = 0
    sixes: int = 0

    def to_dict(self) -> dict:
        return {
            "ones": self.ones,
            "twos": self.twos,
            "threes": self.threes,
            "fours": self.fours,
            "sixes": self.sixes,
        }


@dataclass
class PlayerCareerStats:
    """A player's aggregated record across every match they played"""
    player_id: str
    name: str
    total_matches: int = 0
    total_runs: int = 0
    total_wickets: int = 0
    total_wins: int = 0
    man_of_match_count: int = 0
    boundaries: Boundaries = field(default_factory=Boundaries)

    @property
    def batting_average(self) -> str:
        if self.total_matches == 0:
            return "0.00"
        return _fixed(self.total_runs, self.total_matches, 2)

    @property
    def bowling_average(self) -> str:
        # Runs per wicket from the player's own counters
        if self.total_wickets == 0:
            return "N/A"
        return _fixed(self.total_runs, self.total_wickets, 2)

    @property
    def win_percentage(self) -> str:
        if self.total_matches == 0:
            return "0.0%"
        return f"{_fixed(100 * self.total_wins, self.total_matches, 1)}%"

    def to_dict(self) -> dict:
        return {
            "player": {"id": self.player_id, "name": self.name},
            "total_matches": self.total_matches,
            "total_runs": self.total_runs,
            "total_wickets": self.total_wickets,
            "total_wins": self.total_wins,
            "man_of_match_count": self.man_of_match_count,
            "batting_average": self.batting_average,
            "bowling_average": self.bowling_average,
            "win_percentage": self.win_percentage,
            "boundaries": self.boundaries.to_dict(),
        }


METRICS = {
    "total_runs": lambda s: s.total_runs,
    "total_wickets": lambda s: s.total_wickets,
    "total_matches": lambda s: s.total_matches,
    "total_wins": lambda s: s.total_wins,
    "man_of_match_count": lambda s: s.man_of_match_count,
    "ones": lambda s: s.boundaries.ones,
    "twos": lambda s: s.boundaries.twos,
    "threes": lambda s: s.boundaries.threes,
    "fours": lambda s: s.boundaries.fours,
    "sixes": lambda s: s.boundaries.sixes,
}


class StatsAggregator:
    """
    Answers career-stat queries for one player, a club's players, or the
    whole platform, reading through the persistence gateway.
    """

    def __init__(self, gateway: PersistenceGateway, attribution: MomAttribution = MomAttribution.NAME):
        self.gateway = gateway
        self.attribution = attribution

    def per_player(self, player_id: str, club_id: Optional[str] = None) -> PlayerCareerStats:
        player = self.gateway.get_player(player_id, club_id)
        rows = self.gateway.list_match_player_stats_by_player(player.id)
        self.check_totals(rows)
        return self.fold(player.id, player.name, rows)

    def fold(self, player_id: str, name: str, rows: Iterable[StatRow]) -> PlayerCareerStats:
        """Combine one player's stat rows into career totals"""
        stats = PlayerCareerStats(player_id=player_id, name=name)
        match_ids = set()
        for row in rows:
            if row.team not in (row.team_a_name, row.team_b_name):
                raise AggregationInputInconsistency(
                    f"Stat row {row.id} is for team '{row.team}', which did not play match {row.match_id}",
                    match_id=row.match_id,
                )
            match_ids.add(row.match_id)
            stats.total_runs += row.runs
            stats.total_wickets += row.wickets
            stats.boundaries.ones += row.ones
            stats.boundaries.twos += row.twos
            stats.boundaries.threes += row.threes
            stats.boundaries.fours += row.fours
            stats.boundaries.sixes += row.sixes
            if row.winner == row.team:
                stats.total_wins += 1
            if self._is_man_of_match(row, player_id, name):
                stats.man_of_match_count += 1

        # Distinct matches, so a duplicated row can never count a match twice
        stats.total_matches = len(match_ids)
        return stats

    def _is_man_of_match(self, row: StatRow, player_id: str, name: str) -> bool:
        if self.attribution == MomAttribution.ID:
            return row.man_of_match_player_id is not None and row.man_of_match_player_id == player_id
        return row.man_of_match is not None and row.man_of_match == name

    def all_players(self, club_id: str, include_inactive: bool = False) -> List[PlayerCareerStats]:
        """
        Career stats for every player in a club, most runs first.

        Players with no recorded matches are left out unless include_inactive
        is set, in which case they appear with zero totals.
        """
        rows_by_player = [
            (player, self.gateway.list_match_player_stats_by_player(player.id))
            for player in self.gateway.list_players(club_id)
        ]
        self.check_totals([row for _, rows in rows_by_player for row in rows])

        results = []
        for player, rows in rows_by_player:
            if not rows and not include_inactive:
                continue
            results.append(self.fold(player.id, player.name, rows))

        results.sort(key=lambda s: (-s.total_runs, s.name, s.player_id))
        return results

    def top_performers(self, club_id: str, metric: str = "total_runs") -> List[PlayerCareerStats]:
        """
        Every player sharing the club's best value for a metric. Players on
        zero are never top performers, so an empty list means nobody has scored.
        """
        if metric not in METRICS:
            raise ValueError(f"Unknown metric '{metric}'. Choose from: {', '.join(METRICS)}")

        value_of = METRICS[metric]
        stats = self.all_players(club_id)
        best = max((value_of(s) for s in stats), default=0)
        if best <= 0:
            return []
        leaders = [s for s in stats if value_of(s) == best]
        return sorted(leaders, key=lambda s: (s.name, s.player_id))

    def history(self, player_id: str, club_id: Optional[str] = None, limit: Optional[int] = None) -> List[StatRow]:
        """A player's match rows, most recent first"""
        if limit is not None and limit < 1:
            raise ValidationError(
                f"limit must be at least 1, got {limit}",
                errors=[{"field": "limit", "message": "Must be at least 1"}],
            )
        player = self.gateway.get_player(player_id, club_id)
        rows = self.gateway.list_match_player_stats_by_player(player.id)
        self.check_totals(rows)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def detailed(self, player_id: str, club_id: Optional[str] = None, recent_limit: int = 5) -> dict:
        """Career stats plus the most recent matches"""
        player = self.gateway.get_player(player_id, club_id)
        rows = self.gateway.list_match_player_stats_by_player(player.id)
        self.check_totals(rows)
        data = self.fold(player.id, player.name, rows).to_dict()
        data["recent_matches"] = [row.to_dict() for row in rows[:recent_limit]]
        return data

    def check_totals(self, rows: List[StatRow]):
        """
        Stored rows for a team may never add up to more than the total recorded
        on their match. Deleting a player removes their rows, so sums can only
        fall short; reconcile_match checks for an exact match.
        """
        recorded = {}
        for row in rows:
            recorded[row.match_id] = {
                row.team_a_name: (row.team_a_score, row.team_a_wickets),
                row.team_b_name: (row.team_b_score, row.team_b_wickets),
            }

        for (match_id, team), (runs, wickets) in sorted(self.gateway.team_totals(list(recorded)).items()):
            totals = recorded[match_id].get(team)
            if totals is None:
                raise AggregationInputInconsistency(
                    f"Stat rows for team '{team}', which did not play match {match_id}",
                    match_id=match_id,
                )
            if runs > totals[0] or wickets > totals[1]:
                raise AggregationInputInconsistency(
                    f"{team} rows add up to {runs}/{wickets} but match {match_id} records {totals[0]}/{totals[1]}",
                    match_id=match_id,
                )

    def reconcile_match(self, match_id: str, club_id: Optional[str] = None) -> bool:
        """Check that a match's stat rows add up to its recorded team totals"""
        match = self.gateway.get_match(match_id, club_id)
        rows = self.gateway.list_match_player_stats(match.id)

        totals = {
            match.team_a_name: [0, 0],
            match.team_b_name: [0, 0],
        }
        for row in rows:
            if row.team not in totals:
                raise AggregationInputInconsistency(
                    f"Stat row {row.id} is for team '{row.team}', which did not play match {match.id}",
                    match_id=match.id,
                )
            totals[row.team][0] += row.runs
            totals[row.team][1] += row.wickets

        recorded = {
            match.team_a_name: [match.team_a_score, match.team_a_wickets],
            match.team_b_name: [match.team_b_score, match.team_b_wickets],
        }
        for team, (runs, wickets) in totals.items():
            if [runs, wickets] != recorded[team]:
                raise AggregationInputInconsistency(
                    f"{team} rows add up to {runs}/{wickets} but match {match.id} records "
                    f"{recorded[team][0]}/{recorded[team][1]}",
                    match_id=match.id,
                )
        return True

    def club_summary(self, club_id: str) -> dict:
        club = self.gateway.get_club(club_id)
        last = self.gateway.last_match_date(club.id)
        return {
            "club": {"id": club.id, "name": club.name},
            "player_count": self.gateway.count_players(club.id),
            "match_count": self.gateway.count_matches(club.id),
            "last_activity": last.isoformat() if last else None,
        }

    def platform_summary(self, recent: int = 5) -> dict:
        clubs = self.gateway.list_clubs()
        return {
            "total_clubs": len(clubs),
            "total_players": self.gateway.count_players(),
            "total_matches": self.gateway.count_matches(),
            "recent_clubs": [
                {"id": c.id, "name": c.name, "created_at": c.created_at.isoformat()}
                for c in clubs[:recent]
            ],
        }
