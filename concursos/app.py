import argparse
import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from . import __version__
from .config import Settings
from .database import init_database
from .directory import CandidateDirectory, ContestDirectory
from .env import load_env
from .errors import ConcursosError, ConflictError, InfrastructureError, ValidationError
from .logger import StructuredLogger, get_logger
from .matching import MatchingEngine
from .normalize import get_normalizer
from .retry import RetryError, exponential_backoff, is_transient_error
from .schema import validate_candidate, validate_contest
from .store import Store


class Services:
    """Collaborators wired for one CLI invocation."""

    def __init__(self, store: Store, settings: Settings, logger: StructuredLogger):
        self.store = store
        self.settings = settings
        self.logger = logger
        self.candidates = CandidateDirectory(store, logger=logger)
        self.contests = ContestDirectory(store, logger=logger)
        self.engine = MatchingEngine(
            store,
            normalizer=get_normalizer(settings.profession_match),
            logger=logger,
        )


def split_list(raw: Optional[str]) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()] if raw else []


def parse_position(raw: str) -> Dict[str, Any]:
    """Parse 'Profession' or 'Profession:N' into a position payload."""
    profession, sep, count = raw.rpartition(":")
    if sep and count.strip().isdigit():
        return {"profession": profession.strip(), "vacancies": int(count)}
    return {"profession": raw.strip(), "vacancies": 1}


def _print_records(records: List[Any], as_json: bool, render: Callable[[Any], None], empty: str) -> None:
    if as_json:
        print(json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False))
        return
    if not records:
        print(empty)
        return
    for record in records:
        render(record)
        print()


def _render_candidate(candidate) -> None:
    print(f"ID: {candidate.id}")
    print(f"  Name: {candidate.name}")
    print(f"  CPF: {candidate.cpf}")
    print(f"  Professions: {', '.join(candidate.professions)}")


def _render_contest(contest) -> None:
    print(f"ID: {contest.id}")
    print(f"  Agency: {contest.agency}")
    print(f"  Edital: {contest.edital}")
    print(f"  Code: {contest.code}")
    print("  Positions:")
    for position in contest.positions:
        print(f"    - {position.profession} ({position.vacancies})")


def cmd_init(args: argparse.Namespace, services: Services) -> None:
    init_database(services.store.db_path)
    print(f"Database ready: {services.store.db_path}")


def cmd_candidate_add(args: argparse.Namespace, services: Services) -> None:
    candidate = services.candidates.add({
        "name": args.name,
        "cpf": args.cpf,
        "professions": split_list(args.professions),
    })
    if args.json:
        print(json.dumps(candidate.to_dict(), ensure_ascii=False))
    else:
        print(f"Candidate created: {candidate.id}")


def cmd_candidate_list(args: argparse.Namespace, services: Services) -> None:
    _print_records(services.candidates.list(), args.json, _render_candidate, "No candidates registered.")


def cmd_candidate_remove(args: argparse.Namespace, services: Services) -> None:
    services.candidates.remove(args.id)
    print(f"Candidate removed: {args.id}")


def cmd_contest_add(args: argparse.Namespace, services: Services) -> None:
    contest = services.contests.add({
        "agency": args.agency,
        "edital": args.edital,
        "code": args.code,
        "positions": [parse_position(p) for p in args.position or []],
    })
    if args.json:
        print(json.dumps(contest.to_dict(), ensure_ascii=False))
    else:
        print(f"Contest created: {contest.id}")


def cmd_contest_list(args: argparse.Namespace, services: Services) -> None:
    _print_records(services.contests.list(), args.json, _render_contest, "No contests registered.")


def cmd_contest_remove(args: argparse.Namespace, services: Services) -> None:
    services.contests.remove(args.id)
    print(f"Contest removed: {args.id}")


def cmd_match_candidate(args: argparse.Namespace, services: Services) -> None:
    contests = services.engine.find_contests_for_candidate(args.cpf)
    _print_records(contests, args.json, _render_contest, "No compatible contests.")


def cmd_match_contest(args: argparse.Namespace, services: Services) -> None:
    candidates = services.engine.find_candidates_for_contest(args.code)
    _print_records(candidates, args.json, _render_candidate, "No compatible candidates.")


def import_records(data: Dict[str, Any], services: Services, dry_run: bool = False) -> Dict[str, int]:
    """
    Load candidates and contests from a parsed JSON document.

    Invalid and duplicate records are skipped and counted, not fatal.

    Returns:
        Counters: imported, skipped, invalid
    """
    counts = {"imported": 0, "skipped": 0, "invalid": 0}
    sections = [
        ("candidates", services.candidates, validate_candidate),
        ("contests", services.contests, validate_contest),
    ]
    for section, directory, validate in sections:
        records = data.get(section)
        if records is None:
            continue
        if not isinstance(records, list):
            raise SystemExit(f"'{section}' must be a list")
        seen = set()
        for record in records:
            if dry_run:
                if validate(record):
                    counts["invalid"] += 1
                    continue
                key = getattr(directory.build(record), directory.kind.__unique_key__)
                if key in seen or directory.store.query_by_unique_key(directory.kind, key) is not None:
                    print(f"[skip] {directory.kind.__name__} with key '{directory.log_key(key)}' already exists")
                    counts["skipped"] += 1
                else:
                    seen.add(key)
                    counts["imported"] += 1
                continue
            try:
                directory.add(record)
                counts["imported"] += 1
            except ValidationError as e:
                print(f"[invalid] {section}: {e}")
                counts["invalid"] += 1
            except ConflictError as e:
                print(f"[skip] {e}")
                counts["skipped"] += 1
    return counts


def cmd_import(args: argparse.Namespace, services: Services) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SystemExit(f"Invalid JSON in {input_path}: {e}")
    if not isinstance(data, dict):
        raise SystemExit("Import file must hold an object with 'candidates' and/or 'contests'")

    counts = import_records(data, services, dry_run=args.dry_run)
    prefix = "[DRY RUN] " if args.dry_run else ""
    print(f"{prefix}Done. imported={counts['imported']} skipped={counts['skipped']} invalid={counts['invalid']}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="concursos", description="Candidate and public contest registry with profession matching")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db", help="Path to SQLite database (default: CONCURSOS_DB_PATH or data/concursos.db)")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")

    subparsers = parser.add_subparsers(dest="command")

    ini = subparsers.add_parser("init", help="Create the database tables")
    ini.set_defaults(func=cmd_init)

    cand = subparsers.add_parser("candidate", help="Manage candidates")
    cand_sub = cand.add_subparsers(dest="action", required=True)
    c_add = cand_sub.add_parser("add", help="Register a candidate")
    c_add.add_argument("--name", required=True, help="Full name")
    c_add.add_argument("--cpf", required=True, help="Tax identifier (unique)")
    c_add.add_argument("--professions", required=True, help="Comma-separated professions")
    c_add.set_defaults(func=cmd_candidate_add)
    c_list = cand_sub.add_parser("list", help="List candidates")
    c_list.set_defaults(func=cmd_candidate_list)
    c_rm = cand_sub.add_parser("remove", help="Remove a candidate by id")
    c_rm.add_argument("id", type=int, help="Candidate id")
    c_rm.set_defaults(func=cmd_candidate_remove)

    cont = subparsers.add_parser("contest", help="Manage contests")
    cont_sub = cont.add_subparsers(dest="action", required=True)
    t_add = cont_sub.add_parser("add", help="Register a contest")
    t_add.add_argument("--agency", required=True, help="Issuing agency (orgao)")
    t_add.add_argument("--edital", required=True, help="Edital reference, e.g. 9/2016")
    t_add.add_argument("--code", required=True, help="Contest code (unique)")
    t_add.add_argument("--position", action="append", help="Position as 'Profession' or 'Profession:VACANCIES' (repeatable)")
    t_add.set_defaults(func=cmd_contest_add)
    t_list = cont_sub.add_parser("list", help="List contests")
    t_list.set_defaults(func=cmd_contest_list)
    t_rm = cont_sub.add_parser("remove", help="Remove a contest by id")
    t_rm.add_argument("id", type=int, help="Contest id")
    t_rm.set_defaults(func=cmd_contest_remove)

    mat = subparsers.add_parser("match", help="Find compatible contests or candidates")
    mat_sub = mat.add_subparsers(dest="target", required=True)
    m_cand = mat_sub.add_parser("candidate", help="Contests compatible with a candidate")
    m_cand.add_argument("--cpf", required=True, help="Candidate CPF")
    m_cand.set_defaults(func=cmd_match_candidate)
    m_cont = mat_sub.add_parser("contest", help="Candidates compatible with a contest")
    m_cont.add_argument("--code", required=True, help="Contest code")
    m_cont.set_defaults(func=cmd_match_contest)

    imp = subparsers.add_parser("import", help="Bulk load candidates and contests from JSON")
    imp.add_argument("--input", required=True, help="JSON file with 'candidates' and 'contests' arrays")
    imp.add_argument("--dry-run", action="store_true", help="Validate without writing")
    imp.set_defaults(func=cmd_import)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    # Load .env if present (CONCURSOS_DB_PATH, CONCURSOS_PROFESSION_MATCH, etc.)
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        settings = Settings.from_env()
    except ValueError as e:
        raise SystemExit(f"Configuration error: {e}")

    logger = get_logger(
        level=settings.log_level,
        log_dir=settings.log_dir,
        enable_file=settings.log_dir is not None,
    )
    store = Store(Path(args.db) if args.db else settings.db_path)
    services = Services(store, settings, logger)

    def on_retry(attempt: int, error: Exception, delay: float) -> None:
        logger.warning(f"Store unavailable, retrying in {delay:.1f}s", attempt=attempt, error=str(error))

    run = exponential_backoff(
        max_retries=settings.retries,
        base_delay=0.5,
        max_delay=5.0,
        exceptions=(InfrastructureError,),
        should_retry=is_transient_error,
        on_retry=on_retry,
    )(args.func)

    try:
        run(args, services)
    except (RetryError, InfrastructureError) as e:
        logger.error("Store failure", error=str(e))
        raise SystemExit(f"Store failure: {e}")
    except ConcursosError as e:
        raise SystemExit(str(e))
    finally:
        store.dispose()


if __name__ == "__main__":
    main()
