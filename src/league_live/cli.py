#!/usr/bin/env python3
"""
Command-line interface for League Live.

Usage:
    league-live init              # Apply schema migrations
    league-live init --force      # Re-apply every migration
    league-live status            # Schema version and table counts
    league-live serve --reload    # Run the API with uvicorn
    league-live seed-demo         # Two teams, a few players and a game
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta, timezone

from dotenv import load_dotenv

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("league_live.cli")


def get_db():
    """Create the async pool from settings (not yet opened)."""
    from .core.config import get_settings
    from .pg_async import AsyncPostgresDB

    settings = get_settings()
    return AsyncPostgresDB(
        settings.db_url or None,
        min_pool_size=settings.database_pool_min_size,
        max_pool_size=settings.database_pool_size,
        pool_timeout=settings.database_pool_timeout,
    )


async def cmd_init_async(args: argparse.Namespace) -> int:
    from .schema import run_migrations

    db = get_db()
    await db.initialize()
    try:
        logger.info("Initializing league database...")
        applied = await run_migrations(db, force=args.force)
        logger.info("Database initialized (%d migrations applied)", applied)
        return 0
    finally:
        await db.close()


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize the database with schema."""
    try:
        return asyncio.run(cmd_init_async(args))
    except Exception as e:
        logger.error("Failed to initialize database: %s", e)
        return 1


async def cmd_status_async(args: argparse.Namespace) -> int:
    from .schema import get_schema_version, get_table_counts

    db = get_db()
    await db.initialize()
    try:
        version = await get_schema_version(db)
        if version is None:
            logger.info("Database is not initialized; run `league-live init`")
            return 1

        counts = await get_table_counts(db)

        print("\nLeague Database Status")
        print("=" * 50)
        print(f"Schema Version: {version}")
        print()
        print("Table Counts:")
        for table, count in sorted(counts.items()):
            print(f"  {table}: {count:,}")
        return 0
    finally:
        await db.close()


def cmd_status(args: argparse.Namespace) -> int:
    """Show database status."""
    try:
        return asyncio.run(cmd_status_async(args))
    except Exception as e:
        logger.error("Failed to get status: %s", e)
        return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the API server."""
    import uvicorn

    from .core.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "league_live.api.main:app",
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


async def cmd_seed_demo_async(args: argparse.Namespace) -> int:
    from .core.types import Sport
    from .models import GameCreate, PlayerIn, TeamIn
    from .repositories import PostgresPlayerRepository, PostgresTeamRepository
    from .services import GameLifecycleService

    db = get_db()
    await db.initialize()
    try:
        teams = PostgresTeamRepository(db)
        players = PostgresPlayerRepository(db)

        team_ids = []
        for team_name, roster in (
            ("Red Hawks", ("Alice", "Carla", "Erin")),
            ("Blue Sharks", ("Bob", "Dmitri", "Femi")),
        ):
            team_id = await teams.create(TeamIn(name=team_name))
            player_ids = [await players.create(PlayerIn(name=name, team_id=team_id)) for name in roster]
            await teams.update(team_id, TeamIn(name=team_name, leader_id=player_ids[0]))
            team_ids.append(team_id)
            print(f"Team {team_name} (id {team_id}): players {player_ids}")

        # No broadcast channel outside the server
        games = GameLifecycleService(db)
        game_id = await games.create_game(
            GameCreate(
                sport=Sport(args.sport),
                scheduled_time=datetime.now(tz=timezone.utc) + timedelta(hours=1),
                team1_id=team_ids[0],
                team2_id=team_ids[1],
            )
        )
        print(f"Game {game_id} ({args.sport}) scheduled between teams {team_ids[0]} and {team_ids[1]}")
        return 0
    finally:
        await db.close()


def cmd_seed_demo(args: argparse.Namespace) -> int:
    """Seed a small demo league."""
    try:
        return asyncio.run(cmd_seed_demo_async(args))
    except Exception as e:
        logger.error("Failed to seed demo data: %s", e)
        return 1


def main() -> int:
    """Main entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="League Live CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Initialize the database")
    init_parser.add_argument("--force", action="store_true", help="Re-apply all migrations")

    # status command
    subparsers.add_parser("status", help="Show database status")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", help="Bind address (default: API_HOST)")
    serve_parser.add_argument("--port", type=int, help="Port (default: API_PORT)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # seed-demo command
    seed_parser = subparsers.add_parser("seed-demo", help="Seed two teams, six players and a game")
    seed_parser.add_argument(
        "--sport",
        type=str.upper,
        choices=["FOOTBALL", "BASKETBALL", "CRICKET"],
        default="FOOTBALL",
        help="Sport of the demo game (default: FOOTBALL)",
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "init": cmd_init,
        "status": cmd_status,
        "serve": cmd_serve,
        "seed-demo": cmd_seed_demo,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        return cmd_func(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
