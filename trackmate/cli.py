"""
Trackmate command line

Usage:
    trackmate init-db
    trackmate serve --host 0.0.0.0 --port 8000
    trackmate issue-token USER_ID
    trackmate revoke-token TOKEN
    trackmate import-laps laps.csv --user USER_ID --track TRACK_ID --car CAR_ID [--public]
    trackmate export-laps out.csv --user USER_ID

Every command accepts --database-url and --log-level, overriding the
TRACKMATE_* environment variables.
"""

import argparse
import logging
import sys

from .auth import TokenVerifier
from .config import load_settings
from .database import DatabaseManager, TrackmateRepository
from .errors import NotFoundError, TrackmateError
from .export import CSVExporter
from .importers import CSVImporter
from .laps import LapService
from .log import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='trackmate',
        description='Lap times and leaderboards for track-day drivers'
    )
    parser.add_argument('--database-url', help='SQLAlchemy database URL')
    parser.add_argument('--log-level', help='Logging level (default INFO)')

    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('init-db', help='Create the database schema')

    serve = sub.add_parser('serve', help='Run the HTTP API')
    serve.add_argument('--host', default='127.0.0.1')
    serve.add_argument('--port', type=int, default=8000)

    token = sub.add_parser('issue-token', help='Issue a bearer token for a user')
    token.add_argument('user_id')

    revoke = sub.add_parser('revoke-token', help='Revoke a bearer token')
    revoke.add_argument('token')

    imp = sub.add_parser('import-laps', help='Import laps from a CSV file')
    imp.add_argument('csv_path')
    imp.add_argument('--user', required=True, help='Owner user id')
    imp.add_argument('--track', required=True, help='Track id')
    imp.add_argument('--car', required=True, help='Car id')
    imp.add_argument('--public', action='store_true', help='Mark imported laps public')
    imp.add_argument('--label', help='Session label')

    exp = sub.add_parser('export-laps', help="Export a driver's laps to CSV")
    exp.add_argument('output')
    exp.add_argument('--user', required=True, help='Owner user id')

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_settings().with_overrides(
        database_url=args.database_url,
        log_level=args.log_level.upper() if args.log_level else None
    )
    configure_logging(settings.log_level)

    db_manager = DatabaseManager(settings.database_url, echo=settings.sql_echo)
    db_manager.initialize()
    repository = TrackmateRepository(db_manager)

    try:
        if args.command == 'init-db':
            print(f"Database ready: {db_manager.get_statistics()}")

        elif args.command == 'serve':
            import uvicorn
            from .api import create_app

            uvicorn.run(create_app(settings, db_manager), host=args.host, port=args.port)

        elif args.command == 'issue-token':
            print(TokenVerifier(repository).issue_token(args.user_id))

        elif args.command == 'revoke-token':
            if not TokenVerifier(repository).revoke_token(args.token):
                raise NotFoundError('Token not found.')
            print('Token revoked')

        elif args.command == 'import-laps':
            importer = CSVImporter(LapService(repository))
            laps = importer.import_lap_csv(
                args.csv_path, args.user, args.track, args.car,
                is_public=args.public, session_label=args.label
            )
            print(f"Imported {len(laps)} laps")

        elif args.command == 'export-laps':
            path = CSVExporter(repository).export_laps(args.user, args.output)
            print(f"Exported laps to {path}")

    except (TrackmateError, FileNotFoundError) as e:
        logger.error("[CLI] %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        db_manager.close()

    return 0


if __name__ == '__main__':
    sys.exit(main())
