#!/usr/bin/env python3
"""
ATS Pick'em Management CLI

This script provides command-line management functionality for the
Against The Spread pick'em application.
"""

import json
import logging

import click
import requests
from flask import current_app
from flask.cli import FlaskGroup, with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from ats_pickem import create_app, db
from ats_pickem.models import BOWL_SCOPE, TeamAlias
from ats_pickem.providers.cfbd import CollegeFootballDataProvider
from ats_pickem.seeds.team_aliases import build_alias_groups, seed_team_aliases
from ats_pickem.services.game_service import (
    GameCatalog,
    bowl_lines_from_external,
    lines_from_external,
)
from ats_pickem.services.result_service import ResultService
from ats_pickem.services.scheduler_service import sync_results_for_scope
from ats_pickem.services.standings import StandingsService
from ats_pickem.services.team_names import TeamNameNormalizer
from ats_pickem.utils.timezone_utils import format_kickoff


@click.group(cls=FlaskGroup, create_app=create_app)
def cli():
    """ATS Pick'em Management CLI"""
    pass


def _normalizer():
    return TeamNameNormalizer(current_app.extensions["alias_cache"])


def _provider():
    if not current_app.config.get("CFBD_API_KEY"):
        raise click.ClickException("CFBD_API_KEY is not configured")
    return CollegeFootballDataProvider.from_config(current_app.config)


def _scope(week, bowl):
    if bowl:
        return BOWL_SCOPE
    if week is None:
        raise click.UsageError("Pass a week number or --bowl")
    return week


# Database Commands
@cli.group("db")
def db_cmd():
    """Database management commands"""
    pass


@db_cmd.command("init")
@with_appcontext
def init_db():
    """Create all database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error initializing database: {str(e)}")
        logging.error(f"Database init failed: {e}")


# Team Alias Commands
@cli.group()
def aliases():
    """Team alias management commands"""
    pass


@aliases.command()
@click.option(
    "--mapping",
    type=click.File("r"),
    help="JSON file mapping team names to team ids, used instead of the defaults",
)
@with_appcontext
def seed(mapping):
    """Load the default team alias table, or one built from a name mapping"""
    groups = None
    if mapping is not None:
        try:
            name_to_team_id = json.load(mapping)
        except json.JSONDecodeError as e:
            raise click.ClickException(f"Invalid mapping file: {e}")
        if not isinstance(name_to_team_id, dict):
            raise click.ClickException("Mapping file must hold a JSON object")
        groups = build_alias_groups(name_to_team_id)
        click.echo(f"Grouped {len(name_to_team_id)} names into {len(groups)} teams")

    try:
        created, updated = seed_team_aliases(groups)
        _normalizer().refresh()
        click.echo(f"✅ Seeded team aliases: {created} created, {updated} updated")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error seeding aliases: {str(e)}")
        logging.error(f"Alias seed failed - SQL error: {e}")


@aliases.command()
@with_appcontext
def refresh():
    """Reload the in-memory alias cache"""
    try:
        _normalizer().refresh()
        click.echo("✅ Team alias cache refreshed")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database error refreshing aliases: {str(e)}")
        logging.error(f"Alias refresh failed - SQL error: {e}")


@aliases.command("add")
@click.argument("alias")
@click.argument("canonical_name")
@with_appcontext
def add_alias(alias, canonical_name):
    """Map ALIAS to CANONICAL_NAME"""
    try:
        row = _normalizer().add_alias(alias, canonical_name)
        click.echo(f"✅ '{row.alias}' -> '{row.canonical_name}'")
    except ValueError as e:
        click.echo(f"❌ {str(e)}")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database error adding alias: {str(e)}")
        logging.error(f"Alias add failed - SQL error: {e}")


@aliases.command("list")
@click.option("--canonical", help="Only aliases of this canonical name")
@with_appcontext
def list_aliases(canonical):
    """List team aliases"""
    query = TeamAlias.query.order_by(TeamAlias.canonical_name, TeamAlias.alias)
    if canonical:
        query = query.filter(TeamAlias.canonical_name == canonical)

    rows = query.all()
    if not rows:
        click.echo("No aliases found.")
        return

    click.echo("Aliases:")
    for row in rows:
        click.echo(f"  {row.alias} -> {row.canonical_name}")


# Data Sync Commands
@cli.group()
def sync():
    """Data synchronization commands"""
    pass


@sync.command()
@click.argument("year", type=int)
@click.argument("week", type=int)
@with_appcontext
def lines(year, week):
    """Sync weekly games and lines from CFBD"""
    try:
        click.echo(f"Syncing lines for {year} week {week}...")
        external_lines = _provider().get_weekly_lines(year, week)
        count = GameCatalog(_normalizer()).sync_from_source(
            year, week, lines_from_external(external_lines)
        )
        click.echo(f"✅ Synced {count} games for {year} week {week}")
    except (SQLAlchemyError, requests.exceptions.RequestException) as e:
        db.session.rollback()
        click.echo(f"❌ Error syncing lines: {str(e)}")
        logging.error(f"Line sync failed: {e}")


@sync.command()
@click.argument("year", type=int)
@with_appcontext
def bowls(year):
    """Sync bowl games and lines from CFBD"""
    try:
        click.echo(f"Syncing bowl lines for {year}...")
        external_lines = _provider().get_bowl_lines(year)
        count = GameCatalog(_normalizer()).sync_from_source(
            year, BOWL_SCOPE, bowl_lines_from_external(external_lines)
        )
        click.echo(f"✅ Synced {count} bowl games for {year}")
    except (SQLAlchemyError, requests.exceptions.RequestException) as e:
        db.session.rollback()
        click.echo(f"❌ Error syncing bowl lines: {str(e)}")
        logging.error(f"Bowl line sync failed: {e}")


@sync.command()
@click.argument("year", type=int)
@click.argument("week", type=int, required=False)
@click.option("--bowl", is_flag=True, help="Sync bowl results instead of a week")
@with_appcontext
def results(year, week, bowl):
    """Pull final scores from CFBD and enter them"""
    scope = _scope(week, bowl)
    try:
        click.echo(f"Syncing results for {year} {scope}...")
        match_result, bulk_result = sync_results_for_scope(
            _provider(),
            _normalizer(),
            year,
            scope,
            current_app.config.get("SYSTEM_USER_ID", "results-sync"),
        )
        click.echo(
            f"✅ {bulk_result.entered} results entered, "
            f"{match_result.already_resolved_count} already resolved, "
            f"{match_result.skipped_incomplete_count} not final"
        )
        for unmatched in match_result.unmatched:
            click.echo(
                f"  ⚠️  {unmatched.away_team} at {unmatched.home_team}: {unmatched.reason}"
            )
        for failed in bulk_result.failed:
            click.echo(f"  ❌ Game {failed.item_ref}: {failed.reason}")
    except (SQLAlchemyError, requests.exceptions.RequestException) as e:
        db.session.rollback()
        click.echo(f"❌ Error syncing results: {str(e)}")
        logging.error(f"Result sync failed: {e}")


# Result Commands
@cli.group("results")
def results_cmd():
    """Result entry commands"""
    pass


@results_cmd.command("enter")
@click.argument("game_id", type=int)
@click.argument("favorite_score", type=int)
@click.argument("underdog_score", type=int)
@click.option("--bowl", is_flag=True, help="GAME_ID is a bowl game")
@click.option("--by", "entered_by", default="cli", help="Who entered the result")
@with_appcontext
def enter_result(game_id, favorite_score, underdog_score, bowl, entered_by):
    """Enter the final score for one game"""
    try:
        game = ResultService().enter_result(
            game_id,
            favorite_score,
            underdog_score,
            entered_by,
            scope=BOWL_SCOPE if bowl else None,
        )
    except ValueError as e:
        click.echo(f"❌ {str(e)}")
        return
    except SQLAlchemyError as e:
        click.echo(f"❌ Database error entering result: {str(e)}")
        logging.error(f"Result entry failed - SQL error: {e}")
        return

    if game is None:
        click.echo(f"❌ Game {game_id} not found!")
        return

    outcome = "Push" if game.is_push else f"{game.spread_winner_name} covers"
    click.echo(
        f"✅ {game.favorite_name} {favorite_score} - {game.underdog_name} "
        f"{underdog_score} ({game.line:+g}): {outcome}"
    )


# Standings Commands
@cli.group()
def standings():
    """Leaderboard commands"""
    pass


@standings.command("week")
@click.argument("year", type=int)
@click.argument("week", type=int)
@with_appcontext
def week_standings(year, week):
    """Show the weekly leaderboard"""
    entries = StandingsService().weekly_standings(year, week)
    if not entries:
        click.echo("No results yet.")
        return

    click.echo(f"Week {week} standings ({year}):")
    for rank, e in enumerate(entries, start=1):
        click.echo(
            f"  {rank}. {e.display_name}: {e.wins:g}-{e.losses}-{e.pushes} ({e.win_percentage}%)"
        )


@standings.command("season")
@click.argument("year", type=int)
@with_appcontext
def season_standings(year):
    """Show the season leaderboard"""
    entries = StandingsService().season_standings(year)
    if not entries:
        click.echo("No results yet.")
        return

    click.echo(f"Season standings ({year}):")
    for rank, e in enumerate(entries, start=1):
        click.echo(
            f"  {rank}. {e.display_name}: {e.total_wins:g}-{e.total_losses}-{e.total_pushes} "
            f"({e.win_percentage}%), {e.weeks_played} weeks, {e.perfect_weeks} perfect"
        )


@standings.command("bowls")
@click.argument("year", type=int)
@with_appcontext
def bowl_standings(year):
    """Show the bowl confidence leaderboard"""
    entries = StandingsService().bowl_standings(year)
    if not entries:
        click.echo("No bowl picks yet.")
        return

    click.echo(f"Bowl standings ({year}):")
    for rank, e in enumerate(entries, start=1):
        click.echo(
            f"  {rank}. {e.display_name}: {e.spread_points}/{e.max_possible_points} pts, "
            f"{e.spread_wins}-{e.spread_losses}-{e.spread_pushes} ATS, "
            f"{e.outright_wins} outright ({e.games_completed}/{e.total_games} final)"
        )


@cli.command()
@click.argument("year", type=int)
@click.argument("week", type=int, required=False)
@click.option("--bowl", is_flag=True, help="List bowl games")
@with_appcontext
def games(year, week, bowl):
    """List games with lines, kickoffs and results"""
    scope = _scope(week, bowl)
    catalog_games = GameCatalog().get_games_for(year, scope)
    if not catalog_games:
        click.echo("No games found.")
        return

    for game in catalog_games:
        status = "🔒" if game.is_locked() else "🟢"
        if game.has_result:
            result = (
                f"{game.favorite_score}-{game.underdog_score} "
                f"({'push' if game.is_push else game.spread_winner_name})"
            )
        else:
            result = format_kickoff(game.kickoff_time)
        click.echo(
            f"  {status} [{game.id}] {game.favorite_name} {game.line:+g} vs "
            f"{game.underdog_name}: {result}"
        )


if __name__ == "__main__":
    cli()
