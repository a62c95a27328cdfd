#!/usr/bin/env python3
"""
CLI for running a Clubhouse database from the terminal
"""
import logging
from pathlib import Path

import click
from pydantic import ValidationError as SchemaError
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from clubhouse.config import settings
from clubhouse.database import init_db, get_session
from clubhouse.logging_config import setup_logging
from clubhouse.gateway import PersistenceGateway
from clubhouse.engine import InningsEngine, OutcomeResolver, MatchRecorder, StatsAggregator
from clubhouse.engine.stats_aggregator import MomAttribution, METRICS
from clubhouse.engine.scoresheet import score_scoresheet
from clubhouse.exceptions import ClubhouseError, ValidationError
from clubhouse.api.schemas import ScoresheetRequest

console = Console()


@click.group()
@click.option("--verbose", is_flag=True, help="Log debug output to the console")
def cli(verbose: bool):
    """Clubhouse - Cricket club scoring and statistics"""
    setup_logging(settings.LOG_DIR or None, logging.DEBUG if verbose else logging.WARNING)


def _gateway() -> PersistenceGateway:
    return PersistenceGateway(get_session())


def _aggregator(gateway: PersistenceGateway) -> StatsAggregator:
    return StatsAggregator(gateway, MomAttribution(settings.MOM_ATTRIBUTION))


def _fail(exc: ClubhouseError):
    console.print(f"[red]{exc}[/red]")
    if isinstance(exc, ValidationError):
        for error in exc.errors:
            console.print(f"  [red]{error['field']}: {error['message']}[/red]")
    raise SystemExit(1)


@cli.command()
def init():
    """Initialize the database"""
    console.print("[yellow]Initializing database...[/yellow]")
    init_db()
    console.print("[green]Database initialized successfully![/green]")


@cli.command()
@click.argument("name")
def create_club(name: str):
    """Register a new club"""
    init_db()
    gateway = _gateway()
    try:
        club = gateway.create_club(name)
        console.print(f"[green]Created club {club.name}[/green] ({club.id})")
    except ClubhouseError as exc:
        _fail(exc)
    finally:
        gateway.session.close()


@cli.command()
@click.option("--club", "club_name", required=True, help="Club name")
@click.argument("name")
def add_player(club_name: str, name: str):
    """Add a player to a club roster"""
    gateway = _gateway()
    try:
        club = gateway.get_club_by_name(club_name)
        player = gateway.insert_player(club.id, name.strip())
        console.print(f"[green]Added {player.name}[/green] ({player.id})")
    except ClubhouseError as exc:
        _fail(exc)
    finally:
        gateway.session.close()


@cli.command()
@click.option("--club", "club_name", required=True, help="Club name")
def list_players(club_name: str):
    """List a club's players"""
    gateway = _gateway()
    try:
        club = gateway.get_club_by_name(club_name)
        players = gateway.list_players(club.id)
        if not players:
            console.print("[red]No players found. Run 'add-player' first.[/red]")
            return

        table = Table(title=f"{club.name} ({len(players)} players)")
        table.add_column("ID")
        table.add_column("Name", style="cyan")
        for player in players:
            table.add_row(player.id, player.name)
        console.print(table)
    except ClubhouseError as exc:
        _fail(exc)
    finally:
        gateway.session.close()


@cli.command()
@click.option("--club", "club_name", required=True, help="Club name")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def record_match(club_name: str, file: Path):
    """Score and save a match from a JSON scoresheet"""
    try:
        request = ScoresheetRequest.model_validate_json(file.read_text())
    except SchemaError as exc:
        console.print(f"[red]Invalid scoresheet {file}:[/red]\n{exc}")
        raise SystemExit(1)

    gateway = _gateway()
    try:
        club = gateway.get_club_by_name(club_name)
        config = request.config.to_config(lambda pid: gateway.roster_player(pid, club.id))
        scores = request.score_map()

        engine = InningsEngine(resolver=OutcomeResolver(settings.MOM_WICKET_WEIGHT))
        state = score_scoresheet(config, scores, engine)
        match_id = MatchRecorder(gateway).save(state, club.id)
    except ClubhouseError as exc:
        _fail(exc)
    finally:
        gateway.session.close()

    console.print(Panel("[bold]Match Result[/bold]"))
    console.print(f"[cyan]{state.team_a_innings.team_name}:[/cyan] {state.team_a_innings.score_display}")
    console.print(f"[magenta]{state.team_b_innings.team_name}:[/magenta] {state.team_b_innings.score_display}")
    console.print(f"\n[bold green]Winner: {state.winner}[/bold green]")
    console.print(f"[bold]Man of the match: {state.man_of_match_name}[/bold]")
    console.print(f"Saved as {match_id}")


@cli.command()
@click.option("--club", "club_name", required=True, help="Club name")
@click.option("--all", "include_inactive", is_flag=True, help="Include players without matches")
def stats(club_name: str, include_inactive: bool):
    """Career stats for every player in a club"""
    gateway = _gateway()
    try:
        club = gateway.get_club_by_name(club_name)
        rows = _aggregator(gateway).all_players(club.id, include_inactive=include_inactive)
    except ClubhouseError as exc:
        _fail(exc)
    finally:
        gateway.session.close()

    if not rows:
        console.print("[red]No matches recorded yet.[/red]")
        return

    table = Table(title=f"{club_name} Career Stats")
    table.add_column("Name", style="cyan")
    table.add_column("M", justify="right")
    table.add_column("R", justify="right")
    table.add_column("W", justify="right")
    table.add_column("Bat Avg", justify="right")
    table.add_column("Bowl Avg", justify="right")
    table.add_column("Win %", justify="right", style="green")
    table.add_column("MoM", justify="right")
    table.add_column("4s", justify="right")
    table.add_column("6s", justify="right")

    for s in rows:
        table.add_row(
            s.name,
            str(s.total_matches),
            str(s.total_runs),
            str(s.total_wickets),
            s.batting_average,
            s.bowling_average,
            s.win_percentage,
            str(s.man_of_match_count),
            str(s.boundaries.fours),
            str(s.boundaries.sixes),
        )

    console.print(table)


@cli.command()
@click.option("--club", "club_name", required=True, help="Club name")
@click.option("--metric", default="total_runs", type=click.Choice(list(METRICS)), help="Metric to rank by")
def top(club_name: str, metric: str):
    """Show the club's leader(s) for a metric"""
    gateway = _gateway()
    try:
        club = gateway.get_club_by_name(club_name)
        leaders = _aggregator(gateway).top_performers(club.id, metric)
    except ClubhouseError as exc:
        _fail(exc)
    finally:
        gateway.session.close()

    if not leaders:
        console.print(f"[yellow]Nobody has any {metric} yet.[/yellow]")
        return

    for s in leaders:
        console.print(f"[bold cyan]{s.name}[/bold cyan] - {metric}: {METRICS[metric](s)}")


@cli.command()
@click.argument("player_id")
@click.option("--limit", default=None, type=click.IntRange(min=1), help="Most recent matches only")
def history(player_id: str, limit: int):
    """A player's match-by-match record"""
    gateway = _gateway()
    try:
        aggregator = _aggregator(gateway)
        career = aggregator.per_player(player_id)
        rows = aggregator.history(player_id, limit=limit)
    except ClubhouseError as exc:
        _fail(exc)
    finally:
        gateway.session.close()

    console.print(Panel(
        f"[bold]{career.name}[/bold]  {career.total_matches} matches, {career.total_runs} runs, "
        f"{career.total_wickets} wickets, avg {career.batting_average}, win {career.win_percentage}"
    ))

    table = Table(title="Matches")
    table.add_column("Date")
    table.add_column("Team", style="cyan")
    table.add_column("Opponent")
    table.add_column("R", justify="right")
    table.add_column("W", justify="right")
    table.add_column("Result")

    for row in rows:
        opponent = row.team_b_name if row.team == row.team_a_name else row.team_a_name
        if row.winner == row.team:
            result = "[green]Won[/green]"
        elif row.winner == opponent:
            result = "[red]Lost[/red]"
        else:
            result = "Tied"
        table.add_row(row.match_date.isoformat(), row.team, opponent, str(row.runs), str(row.wickets), result)

    console.print(table)


@cli.command()
@click.option("--club", "club_name", required=True, help="Club name")
@click.argument("match_id")
def check_match(club_name: str, match_id: str):
    """Check that a match's player rows add up to its team totals"""
    gateway = _gateway()
    try:
        club = gateway.get_club_by_name(club_name)
        _aggregator(gateway).reconcile_match(match_id, club_id=club.id)
    except ClubhouseError as exc:
        _fail(exc)
    finally:
        gateway.session.close()

    console.print(f"[green]Match {match_id} is consistent[/green]")


@cli.command()
def platform_stats():
    """Totals across every club"""
    gateway = _gateway()
    try:
        summary = _aggregator(gateway).platform_summary()
    finally:
        gateway.session.close()

    console.print(Panel("[bold]Platform[/bold]"))
    console.print(f"[cyan]Clubs:[/cyan] {summary['total_clubs']}")
    console.print(f"[cyan]Players:[/cyan] {summary['total_players']}")
    console.print(f"[cyan]Matches:[/cyan] {summary['total_matches']}")

    if summary["recent_clubs"]:
        console.print("\n[bold]Newest clubs:[/bold]")
        for club in summary["recent_clubs"]:
            console.print(f"  {club['name']} ({club['created_at'][:10]})")


if __name__ == "__main__":
    cli()
