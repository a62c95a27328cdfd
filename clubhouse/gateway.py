"""
Persistence Gateway - the relational store behind rosters, matches and stat rows
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, List, Dict, Tuple

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from clubhouse.models.club import Club
from clubhouse.models.player import Player
from clubhouse.models.match import Match, MatchPlayerStat
from clubhouse.match_state import RosterPlayer
from clubhouse.exceptions import (
    ClubNotFoundError, PlayerNotFoundError, MatchNotFoundError,
    DuplicatePlayerError, PersistenceFailure,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatRow:
    """A MatchPlayerStat row joined with the parent match fields the stats need"""
    id: str
    match_id: str
    player_id: str
    player_name: str
    team: str
    runs: int
    wickets: int
    ones: int
    twos: int
    threes: int
    fours: int
    sixes: int
    # Parent match
    winner: Optional[str]
    man_of_match: Optional[str]
    man_of_match_player_id: Optional[str]
    match_date: date
    team_a_name: str
    team_b_name: str
    team_a_score: int
    team_a_wickets: int
    team_b_score: int
    team_b_wickets: int
    overs: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "match_id": self.match_id,
            "player_id": self.player_id,
            "player_name": self.player_name,
            "team": self.team,
            "runs": self.runs,
            "wickets": self.wickets,
            "ones": self.ones,
            "twos": self.twos,
            "threes": self.threes,
            "fours": self.fours,
            "sixes": self.sixes,
            "match": {
                "id": self.match_id,
                "team_a_name": self.team_a_name,
                "team_b_name": self.team_b_name,
                "team_a_score": self.team_a_score,
                "team_a_wickets": self.team_a_wickets,
                "team_b_score": self.team_b_score,
                "team_b_wickets": self.team_b_wickets,
                "winner": self.winner,
                "man_of_match": self.man_of_match,
                "match_date": self.match_date.isoformat(),
                "overs": self.overs,
            },
        }


def _to_stat_row(stat: MatchPlayerStat, match: Match, player_name: str) -> StatRow:
    return StatRow(
        id=stat.id,
        match_id=stat.match_id,
        player_id=stat.player_id,
        player_name=player_name,
        team=stat.team,
        runs=stat.runs,
        wickets=stat.wickets,
        ones=stat.ones,
        twos=stat.twos,
        threes=stat.threes,
        fours=stat.fours,
        sixes=stat.sixes,
        winner=match.winner,
        man_of_match=match.man_of_match,
        man_of_match_player_id=match.man_of_match_player_id,
        match_date=match.match_date,
        team_a_name=match.team_a_name,
        team_b_name=match.team_b_name,
        team_a_score=match.team_a_score,
        team_a_wickets=match.team_a_wickets,
        team_b_score=match.team_b_score,
        team_b_wickets=match.team_b_wickets,
        overs=match.overs,
    )


class PersistenceGateway:
    """
    Store access for one session. Club scoping is applied whenever a club_id
    is passed; records from another club are reported as not found.
    """

    def __init__(self, session: Session):
        self.session = session

    # ---- Clubs ----

    def create_club(self, name: str) -> Club:
        club = Club(name=name)
        self._commit(club, f"create club '{name}'")
        logger.info("Created club %s (%s)", club.name, club.id)
        return club

    def get_club(self, club_id: str) -> Club:
        club = self.session.get(Club, club_id)
        if not club:
            raise ClubNotFoundError(f"Club {club_id} not found")
        return club

    def get_club_by_name(self, name: str) -> Club:
        club = self.session.query(Club).filter_by(name=name).first()
        if not club:
            raise ClubNotFoundError(f"Club '{name}' not found")
        return club

    def list_clubs(self) -> List[Club]:
        return self.session.query(Club).order_by(Club.created_at.desc(), Club.name).all()

    # ---- Players ----

    def insert_player(self, club_id: str, name: str) -> Player:
        self.get_club(club_id)
        player = Player(club_id=club_id, name=name)
        self.session.add(player)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise DuplicatePlayerError(f"Player '{name}' already exists in this club") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to insert player '%s': %s", name, exc)
            raise PersistenceFailure(f"Could not save player '{name}'") from exc
        logger.info("Added player %s (%s) to club %s", player.name, player.id, club_id)
        return player

    def get_player(self, player_id: str, club_id: Optional[str] = None) -> Player:
        player = self.session.get(Player, player_id)
        if not player or (club_id is not None and player.club_id != club_id):
            raise PlayerNotFoundError(f"Player {player_id} not found")
        return player

    def roster_player(self, player_id: str, club_id: str) -> RosterPlayer:
        """Snapshot of a club player for a match roster"""
        player = self.get_player(player_id, club_id)
        return RosterPlayer(id=player.id, name=player.name)

    def list_players(self, club_id: str) -> List[Player]:
        return (
            self.session.query(Player)
            .filter_by(club_id=club_id)
            .order_by(Player.name)
            .all()
        )

    def update_player_name(self, player_id: str, new_name: str, club_id: Optional[str] = None) -> Player:
        """
        Rename a player. Man of the match is stored by name, so the club's
        matches that credit this player are rewritten in the same transaction.
        """
        player = self.get_player(player_id, club_id)
        old_name = player.name
        if old_name == new_name:
            return player

        player.name = new_name
        try:
            self.session.execute(
                update(Match)
                .where(
                    Match.club_id == player.club_id,
                    Match.man_of_match_player_id == player.id,
                    Match.man_of_match == old_name,
                )
                .values(man_of_match=new_name)
            )
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise DuplicatePlayerError(f"A player named '{new_name}' already exists in this club") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to rename player %s: %s", player_id, exc)
            raise PersistenceFailure(f"Could not rename player {player_id}") from exc
        logger.info("Renamed player %s from '%s' to '%s'", player_id, old_name, new_name)
        return player

    def delete_player(self, player_id: str, club_id: Optional[str] = None):
        """Delete a player and every stat row it has. Irreversible."""
        player = self.get_player(player_id, club_id)
        self.session.delete(player)
        self._commit(None, f"delete player {player_id}")
        logger.info("Deleted player %s (%s)", player.name, player_id)

    def count_players(self, club_id: Optional[str] = None) -> int:
        query = self.session.query(func.count(Player.id))
        if club_id is not None:
            query = query.filter(Player.club_id == club_id)
        return query.scalar() or 0

    # ---- Matches ----

    def insert_match_with_stats(self, match: Match, stat_rows: List[MatchPlayerStat]) -> str:
        """
        Write a completed match and its per-player rows in one transaction.

        Idempotent on match.id: re-submitting an already saved match returns
        its id without writing anything.
        """
        existing = self.session.get(Match, match.id)
        if existing:
            return self._existing_match_id(existing, match)

        self.session.add(match)
        self.session.add_all(stat_rows)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            # A concurrent save of the same match may have won the race
            existing = self.session.get(Match, match.id)
            if existing:
                return self._existing_match_id(existing, match)
            logger.error("Match %s rejected by the store: %s", match.id, exc)
            raise PersistenceFailure(f"Could not save match {match.id}") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Match %s save rolled back: %s", match.id, exc)
            raise PersistenceFailure(f"Could not save match {match.id}") from exc

        logger.info("Saved match %s with %d player rows", match.id, len(stat_rows))
        return match.id

    def _existing_match_id(self, existing: Match, submitted: Match) -> str:
        if existing.club_id != submitted.club_id:
            raise PersistenceFailure(f"Match id {submitted.id} is already in use")
        logger.info("Match %s already saved, skipping duplicate write", existing.id)
        return existing.id

    def get_match(self, match_id: str, club_id: Optional[str] = None) -> Match:
        match = self.session.get(Match, match_id)
        if not match or (club_id is not None and match.club_id != club_id):
            raise MatchNotFoundError(f"Match {match_id} not found")
        return match

    def list_matches(self, club_id: str) -> List[Match]:
        return (
            self.session.query(Match)
            .filter_by(club_id=club_id)
            .order_by(Match.created_at.desc(), Match.id)
            .all()
        )

    def delete_match(self, match_id: str, club_id: Optional[str] = None):
        """Delete a match together with its stat rows"""
        match = self.get_match(match_id, club_id)
        self.session.delete(match)
        self._commit(None, f"delete match {match_id}")
        logger.info("Deleted match %s", match_id)

    def count_matches(self, club_id: Optional[str] = None) -> int:
        query = self.session.query(func.count(Match.id))
        if club_id is not None:
            query = query.filter(Match.club_id == club_id)
        return query.scalar() or 0

    def last_match_date(self, club_id: str) -> Optional[date]:
        return (
            self.session.query(func.max(Match.match_date))
            .filter(Match.club_id == club_id)
            .scalar()
        )

    # ---- Stat rows ----

    def list_match_player_stats(self, match_id: str, club_id: Optional[str] = None) -> List[StatRow]:
        match = self.get_match(match_id, club_id)
        results = (
            self.session.query(MatchPlayerStat, Player.name)
            .join(Player, MatchPlayerStat.player_id == Player.id)
            .filter(MatchPlayerStat.match_id == match.id)
            .order_by(MatchPlayerStat.team, Player.name, MatchPlayerStat.id)
            .all()
        )
        return [_to_stat_row(stat, match, name) for stat, name in results]

    def list_match_player_stats_by_player(self, player_id: str) -> List[StatRow]:
        """A player's rows, most recent match first"""
        results = (
            self.session.query(MatchPlayerStat, Match, Player.name)
            .join(Match, MatchPlayerStat.match_id == Match.id)
            .join(Player, MatchPlayerStat.player_id == Player.id)
            .filter(
                MatchPlayerStat.player_id == player_id,
                # Only rows inside the player's own club
                Match.club_id == Player.club_id,
            )
            .order_by(Match.match_date.desc(), Match.created_at.desc(), Match.id)
            .all()
        )
        return [_to_stat_row(stat, match, name) for stat, match, name in results]

    def team_totals(self, match_ids: List[str]) -> Dict[Tuple[str, str], Tuple[int, int]]:
        """(match_id, team) -> (runs, wickets) summed over the stored stat rows"""
        if not match_ids:
            return {}
        results = (
            self.session.query(
                MatchPlayerStat.match_id,
                MatchPlayerStat.team,
                func.sum(MatchPlayerStat.runs),
                func.sum(MatchPlayerStat.wickets),
            )
            .filter(MatchPlayerStat.match_id.in_(match_ids))
            .group_by(MatchPlayerStat.match_id, MatchPlayerStat.team)
            .all()
        )
        return {(match_id, team): (runs or 0, wickets or 0) for match_id, team, runs, wickets in results}

    def _commit(self, record, action: str):
        if record is not None:
            self.session.add(record)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to %s: %s", action, exc)
            raise PersistenceFailure(f"Could not {action}") from exc
