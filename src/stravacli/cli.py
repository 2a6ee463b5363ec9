#!/usr/bin/env python3
"""
Command-line tool for working with Strava activities in bulk.

Usage:
    stravacli auth --client_id ID --client_secret SECRET
    stravacli download -t TOKEN --out activities.csv
    stravacli update -t TOKEN --orig activities.csv --updated edited.csv --dryrun
"""

import argparse
import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional

from .auth import authenticate
from .client import StravaClient
from .config import load_settings, resolve_access_token
from .constants import DAY_FORMAT, DEFAULT_AUTH_PORT, FIRST_DATA_ROW
from .credentials import save_access_token
from .csvio import ACTIVITY_SCHEMA, MANUAL_SCHEMA, UPLOAD_SCHEMA
from .exceptions import ConfigurationError, StravaCliError
from .sync import (
    create_activities,
    download_activities,
    print_header,
    update_activities,
    upload_activities,
    upload_manual_activities,
)

__all__ = ["build_parser", "main"]

ACTIVITY_HEADER_HELP = """Print out the required header for the .csv file for create.

Data Columns:
ID: Leave blank for new activities; filled in by create when --out is given.
Start: The start time. Required. Looks like YYYY-MM-DDTHH:mm:ssZ, e.g. 2019-02-22T18:53:46Z.
Type: The activity type, e.g. "Run" or "Ride".
Name: The activity name. Required.
Description: Description of the activity.
Duration (seconds): The elapsed time, in seconds. Can't be changed by update.
Distance: The distance, in meters. Can't be changed by update.
Private?: Must be "false"; Strava doesn't allow setting it here.
Commute?: "false" or "true". Defaults to "false".
Trainer?: "false" or "true". Defaults to "false".
"""

UPLOAD_HEADER_HELP = """Print out the required header for the .csv file for upload.

Data Columns:
External ID: An external ID for the activity; OK to leave blank.
Activity Type: The activity type. Required. See https://developers.strava.com/docs/reference/#api-models-ActivityType.
Name: The activity name. Required.
Description: Description of the activity.
Commute?: "false" or "true". Defaults to "false".
Trainer?: "false" or "true". Defaults to "false".
File Type: One of "fit", "tcx" or "gpx"; add ".gz" (e.g. "gpx.gz") if the file is gzipped.
Filename: Relative path to the data file.
"""

MANUAL_HEADER_HELP = """Print out the required header for the .csv file for uploadmanual.

Data Columns:
Start: The start time. Required. Looks like YYYY-MM-DDTHH:mm:ssZ, e.g. 2019-02-22T18:53:46Z.
Activity Type: The activity type. Required. See https://developers.strava.com/docs/reference/#api-models-ActivityType.
Name: The activity name. Required.
Description: Description of the activity.
Workout Type: 0=default/none. For Ride: 11=Race, 12=Workout; for Run: 1=Race, 2=Long Run, 3=Workout.
Duration: The elapsed time, in seconds.
Distance: The distance, in meters.
Commute?: "false" or "true". Defaults to "false".
Trainer?: "false" or "true". Defaults to "false".
"""


def _day(value: str) -> datetime:
    try:
        return datetime.strptime(value, DAY_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date {value!r} (should be YYYY-MM-DD)") from e


def _add_token(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-t",
        "--access_token",
        help="Strava access token; use the auth command to get one (or set STRAVA_ACCESS_TOKEN)",
    )


def _add_batch_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--dryrun", action="store_true", help="do a dry run: print out proposed changes")
    p.add_argument(
        "--start_row",
        type=int,
        default=FIRST_DATA_ROW,
        help=f"row of the .csv file to start at; row 1 is the header (default: {FIRST_DATA_ROW})",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="stravacli", description="A command-line tool for working with Strava activities."
    )
    parser.add_argument("--debug", action="store_true", help="enable verbose debug logging")
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    p = sub.add_parser("auth", help="Get a Strava access token")
    p.add_argument("--client_id", required=True, help="Strava client ID from https://www.strava.com/settings/api")
    p.add_argument(
        "--client_secret", required=True, help="Strava client secret from https://www.strava.com/settings/api"
    )
    p.add_argument("--port", type=int, default=DEFAULT_AUTH_PORT, help="port to run local server on")
    p.add_argument("--read_only", action="store_true", help="get a read-only token")
    p.add_argument("--save", action="store_true", help="save the token to .env as STRAVA_ACCESS_TOKEN")

    p = sub.add_parser("download", help="Download Strava activities")
    _add_token(p)
    p.add_argument("--out", help="output filename, or leave empty to output to stdout")
    p.add_argument("--max", type=int, default=0, help="maximum # of activities to download (0 or less means no limit)")
    p.add_argument("--before", type=_day, help="only download activities before this date (YYYY-MM-DD)")
    p.add_argument("--after", type=_day, help="only download activities after this date (YYYY-MM-DD)")

    p = sub.add_parser("create", help="Upload new Strava activities")
    _add_token(p)
    p.add_argument("--in", dest="in_file", required=True, help=".csv with activities to upload")
    p.add_argument("--out", help=".csv with IDs filled in for successful uploads")
    _add_batch_flags(p)

    p = sub.add_parser("update", help="Upload modified Strava activities")
    _add_token(p)
    p.add_argument("--orig", required=True, help="original .csv file from download")
    p.add_argument("--updated", required=True, help=".csv with modifications")
    p.add_argument("--out", help="write the updated .csv here, with IDs of created activities")
    _add_batch_flags(p)

    p = sub.add_parser("upload", help="Upload new Strava activities from data files")
    _add_token(p)
    p.add_argument("--in", dest="in_file", required=True, help=".csv with activities to upload")
    _add_batch_flags(p)

    p = sub.add_parser("uploadmanual", help="Upload new manual Strava activities")
    _add_token(p)
    p.add_argument("--in", dest="in_file", required=True, help=".csv with activities to upload")
    _add_batch_flags(p)

    for name, text in (
        ("createheader", ACTIVITY_HEADER_HELP),
        ("uploadheader", UPLOAD_HEADER_HELP),
        ("uploadmanualheader", MANUAL_HEADER_HELP),
    ):
        sub.add_parser(
            name,
            help=text.splitlines()[0],
            description=text,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

    return parser


def _client(args, settings, required: bool = True) -> Optional[StravaClient]:
    """Client for the command; dry runs may go without a token."""
    try:
        token = resolve_access_token(args.access_token)
    except ConfigurationError:
        if required:
            raise
        return None
    return StravaClient(token, settings)


def _run(args) -> None:
    headers = {
        "createheader": ACTIVITY_SCHEMA,
        "uploadheader": UPLOAD_SCHEMA,
        "uploadmanualheader": MANUAL_SCHEMA,
    }
    if args.command in headers:
        print_header(headers[args.command])
        return

    settings = load_settings()

    if args.command == "auth":
        token = authenticate(args.client_id, args.client_secret, args.port, args.read_only, settings)
        athlete = token.get("athlete") or {}
        if athlete:
            print(f"Hello, {athlete.get('firstname', '')} {athlete.get('lastname', '')}!")
        print(f"Your Strava access token is: {token['access_token']}")
        if args.save:
            save_access_token(token["access_token"])
        return

    if args.command == "download":
        download_activities(
            _client(args, settings), args.out, args.max, before=args.before, after=args.after
        )
        return

    client = _client(args, settings, required=not args.dryrun)
    if args.command == "create":
        create_activities(client, args.in_file, args.out, args.dryrun, args.start_row)
    elif args.command == "update":
        update_activities(client, args.orig, args.updated, args.out, args.dryrun, args.start_row)
    elif args.command == "upload":
        upload_activities(client, args.in_file, args.dryrun, args.start_row)
    elif args.command == "uploadmanual":
        upload_manual_activities(client, args.in_file, args.dryrun, args.start_row)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command-line tool."""
    args = build_parser().parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="DEBUG: %(name)s: %(message)s", stream=sys.stderr)

    try:
        _run(args)
    except StravaCliError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
