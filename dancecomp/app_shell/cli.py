import argparse
import logging
import sys
from pathlib import Path

import yaml

from dancecomp.adapters.sqlite.migrator import SQLiteMigrator
from dancecomp.components.entry_fees import EntryFeeInput, calculate_entry_fee
from dancecomp.components.fee_schedule import load_schedule_from_record
from dancecomp.components.group_shares import allocate_shares
from dancecomp.components.scoring import classify_medal
from dancecomp.domain.entities import DancerRegistrationState, FeeSchedule
from dancecomp.domain.errors import EngineError
from dancecomp.domain.money import format_amount
from dancecomp.rules.loader import load_rules
from dancecomp.rules.models import DEFAULT_RULES, Rules

logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"
DB_PATH = "dancecomp.db"
MIGRATIONS_DIR = "migrations"


def get_rules(path: str | None) -> Rules:
    """Explicit paths must exist; the default path falls back to built-in rules."""
    if path is not None:
        return load_rules(Path(path))
    if Path(RULES_PATH).exists():
        return load_rules(Path(RULES_PATH))
    logger.info("No %s found; using default rules", RULES_PATH)
    return DEFAULT_RULES


def load_schedule_file(path: str) -> FeeSchedule:
    schedule_path = Path(path)
    if not schedule_path.exists():
        raise FileNotFoundError(f"Fee schedule file not found: {schedule_path}")
    data = yaml.safe_load(schedule_path.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Fee schedule file must contain a mapping: {schedule_path}")
    return load_schedule_from_record(data)


def handle_quote(rules: Rules, args: argparse.Namespace) -> None:
    schedule = load_schedule_file(args.schedule)
    participants = tuple(f"dancer-{i + 1}" for i in range(args.participants))
    states = {}
    if args.registered:
        states = {
            pid: DancerRegistrationState(
                dancer_id=pid, event_id="quote", registration_charged=True
            )
            for pid in participants
        }

    breakdown = calculate_entry_fee(
        EntryFeeInput(
            event_id="quote",
            owner_id=participants[0] if participants else "",
            participant_ids=participants,
        ),
        schedule,
        states,
        args.prior_solos,
        rules=rules,
    )
    total = format_amount(
        breakdown.total_fee,
        breakdown.currency,
        rules.currency.symbols,
        rules.currency.minor_units,
    )
    print(breakdown.breakdown)
    print(breakdown.registration_breakdown)
    print(f"Total: {total}")
    for warning in breakdown.warnings:
        print(f"Warning: {warning.message}")


def handle_shares(rules: Rules, args: argparse.Namespace) -> None:
    output = allocate_shares(
        args.fee,
        args.participants,
        args.owner,
        minor_units=rules.currency.minor_units,
    )
    for share in output.shares:
        marker = " (main contestant)" if share.is_main_contestant else ""
        print(f"{share.dancer_id}: {share.share}{marker}")
    print(f"Total: {output.total}")


def handle_medal(args: argparse.Namespace) -> None:
    print(classify_medal(args.total).value)


def handle_migrate(args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(args.db, args.migrations_dir).run_migrations()
    print(f"Applied {len(applied)} migration(s).")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Dance competition fee engine CLI")
    parser.add_argument("--rules", help=f"Rules file (default: {RULES_PATH} if present)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # quote
    quote_parser = subparsers.add_parser("quote", help="Price a new entry")
    quote_parser.add_argument("schedule", help="YAML file with the event fee schedule")
    quote_parser.add_argument(
        "--participants", type=int, default=1, help="Number of dancers (default 1)"
    )
    quote_parser.add_argument(
        "--prior-solos", type=int, default=0, help="Solos the dancer already has"
    )
    quote_parser.add_argument(
        "--registered",
        action="store_true",
        help="Dancers have already been charged the registration fee",
    )

    # shares
    shares_parser = subparsers.add_parser("shares", help="Split an entry fee")
    shares_parser.add_argument("fee", help="Calculated entry fee, e.g. 221.00")
    shares_parser.add_argument("participants", nargs="+", help="Participant ids in order")
    shares_parser.add_argument("--owner", help="Main contestant id")

    # medal
    medal_parser = subparsers.add_parser("medal", help="Classify a score total")
    medal_parser.add_argument("total", help="Total out of 100")

    # migrate
    migrate_parser = subparsers.add_parser("migrate", help="Apply SQLite migrations")
    migrate_parser.add_argument("--db", default=DB_PATH, help=f"Database path (default {DB_PATH})")
    migrate_parser.add_argument(
        "--migrations-dir", default=MIGRATIONS_DIR, help="Directory of .sql migrations"
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)

    try:
        if args.command == "medal":
            handle_medal(args)
        elif args.command == "migrate":
            handle_migrate(args)
        else:
            rules = get_rules(args.rules)
            if args.command == "quote":
                handle_quote(rules, args)
            elif args.command == "shares":
                handle_shares(rules, args)
    except (EngineError, FileNotFoundError, ValueError, RuntimeError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
