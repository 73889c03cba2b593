#!/usr/bin/env python3
"""
Main CLI for the portfolio analytics engine.
Usage: python cli.py recommend TICKER
"""

import argparse
import json
import logging
import os
import sys
from datetime import date, timedelta
from pathlib import Path

from dateutil import parser as date_parser
from dotenv import load_dotenv

from analysis.projection_service import ProjectionError, project
from analysis.recommendation_service import RecommendationError, analyze_symbol, get_recommendation
from ingestion.transforms.validators import ValidationError, validate_account_row, validate_shares
from pipeline.daily_prices_dag import DailyPricesConfig, PipelineError, run_daily_prices
from storage.loaders import get_connection, init_database, load_account, upsert_account, upsert_holding

load_dotenv()


def _parse_date(value: str) -> date:
    """Parse a date argument; accepts ISO and common written forms."""
    return date_parser.parse(value).date()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Technical analysis, recommendations and retirement projections',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py fetch AAPL --days 730
  python cli.py recommend AAPL
  python cli.py account add 1 "Ada Lovelace" 1985-12-10
  python cli.py holding set 1 AAPL 25
  python cli.py project 1 --target-age 65
        """
    )
    parser.add_argument('--db-path',
                        default=os.getenv('RESEARCH_DB_PATH', './data/portfolio.db'),
                        help='Path to SQLite database (default: $RESEARCH_DB_PATH or ./data/portfolio.db)')

    commands = parser.add_subparsers(dest='command', required=True)

    fetch = commands.add_parser('fetch', help='Download daily prices into the database')
    fetch.add_argument('ticker')
    fetch.add_argument('--days', type=int, default=None,
                       help='Calendar days to fetch (default: $PRICE_LOOKBACK_DAYS or 730)')

    analyze = commands.add_parser('analyze', help='Print technical indicators as JSON')
    analyze.add_argument('ticker')

    recommend = commands.add_parser('recommend', help='Print BUY/SELL/HOLD recommendation as JSON')
    recommend.add_argument('ticker')

    projection = commands.add_parser('project', help='Project a portfolio to a target age')
    projection.add_argument('user_id', type=int)
    projection.add_argument('--target-age', type=int,
                            default=int(os.getenv('DEFAULT_TARGET_AGE', '65')))
    projection.add_argument('--as-of', type=_parse_date, default=None,
                            help='Reference date (YYYY-MM-DD, default: today)')

    account = commands.add_parser('account', help='Manage accounts')
    account_commands = account.add_subparsers(dest='account_command', required=True)
    account_add = account_commands.add_parser('add', help='Create or update an account')
    account_add.add_argument('user_id', type=int)
    account_add.add_argument('name')
    account_add.add_argument('birth_date', type=_parse_date)

    holding = commands.add_parser('holding', help='Manage holdings')
    holding_commands = holding.add_subparsers(dest='holding_command', required=True)
    holding_set = holding_commands.add_parser('set', help='Set shares held (0 removes)')
    holding_set.add_argument('user_id', type=int)
    holding_set.add_argument('ticker')
    holding_set.add_argument('shares', type=float)

    return parser


def main(argv=None, conn=None) -> int:
    """Main CLI entry point."""
    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'WARNING').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    args = build_parser().parse_args(argv)

    if conn is None:
        Path(args.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = get_connection(args.db_path)
    init_database(conn)

    try:
        return _dispatch(args, conn)
    except (RecommendationError, ProjectionError, PipelineError, ValidationError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


def _dispatch(args: argparse.Namespace, conn) -> int:
    if args.command == 'fetch':
        start_date = None
        if args.days is not None:
            start_date = date.today() - timedelta(days=args.days)
        config = DailyPricesConfig(ticker=args.ticker, start_date=start_date)
        result = run_daily_prices(config, conn)
        _print_json(result)
        return 0 if result['status'] == 'completed' else 1

    if args.command == 'analyze':
        _print_json(analyze_symbol(conn, args.ticker).to_dict())
        return 0

    if args.command == 'recommend':
        _print_json(get_recommendation(conn, args.ticker).to_dict())
        return 0

    if args.command == 'project':
        result = project(conn, args.user_id, target_age=args.target_age, as_of=args.as_of)
        _print_json(result.to_dict())
        return 0

    if args.command == 'account':
        row = {'user_id': args.user_id, 'name': args.name, 'birth_date': args.birth_date}
        validate_account_row(row)
        created = upsert_account(conn, row)
        print(f"{'Created' if created else 'Updated'} account {args.user_id}")
        return 0

    if args.command == 'holding':
        validate_shares(args.shares)
        if load_account(conn, args.user_id) is None:
            raise ValidationError(f"User {args.user_id} not found")
        upsert_holding(conn, args.user_id, args.ticker.upper(), args.shares)
        print(f"Set {args.ticker.upper()} holding for user {args.user_id} to {args.shares:g} shares")
        return 0

    return 1


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, default=str))


if __name__ == '__main__':
    sys.exit(main())
