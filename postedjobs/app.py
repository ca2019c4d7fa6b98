import argparse
import json
import re
from pathlib import Path

from . import __version__
from .config import StoreConfig
from .filters import filter_unposted
from .logger import get_logger
from .maintenance import diagnose, remove_matching
from .store import PostedJobsStore


def _open_store(args: argparse.Namespace) -> PostedJobsStore:
    data_dir = Path(args.data_dir) if args.data_dir else None
    return PostedJobsStore.open(StoreConfig.from_env(data_dir))


def cmd_check(args: argparse.Namespace) -> None:
    store = _open_store(args)
    ids = [args.id, *(args.legacy_id or [])]
    posted = store.has_been_posted_any(ids, args.posted_date)
    print(f"Job: {args.id}")
    print(f"Status: {'posted' if posted else 'new'}")


def cmd_mark(args: argparse.Namespace) -> None:
    store = _open_store(args)
    added = sum(1 for job_id in args.id if store.insert(job_id))
    result = store.save()
    print(f"Marked: {added} new, {len(args.id) - added} already present")
    if result.triggered:
        print(f"Archived: {result.archived} to {result.month}" + (f" (failed: {result.error})" if result.error else ""))
    print(f"Active: {len(store)}")


def cmd_find(args: argparse.Namespace) -> None:
    store = _open_store(args)
    if store.contains(args.id):
        print(f"{args.id}: active")
        return
    months_back = args.months_back or store.config.lookback_months
    month = store.archive.find_across_recent_months(args.id, months_back)
    if month:
        print(f"{args.id}: archived in {month}")
    else:
        print(f"{args.id}: not found (searched {months_back} month(s))")


def cmd_filter(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        jobs = json.load(f)
    if not isinstance(jobs, list):
        raise SystemExit(f"Expected a JSON array of jobs in {input_path}")

    store = _open_store(args)
    unposted = filter_unposted(jobs, store, check_legacy=not args.no_legacy)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w", encoding="utf-8") as f:
            json.dump(unposted, f, indent=2, ensure_ascii=False)
        print(f"Wrote {len(unposted)} unposted jobs to {output_path}")
    else:
        print(json.dumps(unposted, indent=2, ensure_ascii=False))
    get_logger().log_metrics_summary()


def cmd_stats(args: argparse.Namespace) -> None:
    store = _open_store(args)
    stats = store.stats()
    print(f"Active store: {stats['active_path']}")
    print(f"  Identifiers: {stats['active']} ({stats['capacity_pct']}% of {stats['max_entries']})")
    print(f"  Archive threshold: {stats['archive_threshold']}")
    if stats["partitions"]:
        print(f"Archive partitions ({stats['archive_dir']}):")
        for month, size in stats["partitions"].items():
            print(f"  {month}: {size}")
    else:
        print("No archive partitions.")
    findings = diagnose(store)
    if findings:
        print("Findings:")
        for finding in findings:
            print(f" - [{finding['priority']}] {finding['issue']}")
            print(f"   {finding['action']}")


def cmd_remove(args: argparse.Namespace) -> None:
    try:
        pattern = re.compile(args.pattern, re.IGNORECASE)
    except re.error as e:
        raise SystemExit(f"Invalid pattern: {e}")
    store = _open_store(args)
    report = remove_matching(store, pattern, execute=args.execute, backup=not args.no_backup)
    if not report.matched:
        print("No identifiers match.")
        return
    print(f"Matched {len(report.matched)} identifier(s):")
    for job_id in report.matched:
        print(f" - {job_id}")
    if report.executed:
        print(f"Removed {len(report.removed)}. Active: {len(store)}")
        if report.backup_path:
            print(f"Backup: {report.backup_path}")
    else:
        print("Dry run. Use --execute to remove.")


def _add_data_dir(p: argparse.ArgumentParser) -> None:
    p.add_argument("--data-dir", help="Store directory (default: $POSTEDJOBS_DATA_DIR or data/)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="postedjobs", description="Posted jobs dedup and archive store")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")

    chk = subparsers.add_parser("check", help="Check whether a job identifier was already posted")
    chk.add_argument("--id", required=True, help="Job identifier")
    chk.add_argument("--legacy-id", action="append", help="Additional identifier in an older format (repeatable)")
    chk.add_argument("--posted-date", help="Source-reported posting date (ISO-8601)")
    _add_data_dir(chk)
    chk.set_defaults(func=cmd_check)

    mrk = subparsers.add_parser("mark", help="Mark job identifiers as posted and save")
    mrk.add_argument("--id", required=True, action="append", help="Job identifier (repeatable)")
    _add_data_dir(mrk)
    mrk.set_defaults(func=cmd_mark)

    fnd = subparsers.add_parser("find", help="Locate an identifier in the active set or recent archives")
    fnd.add_argument("--id", required=True, help="Job identifier")
    fnd.add_argument("--months-back", type=int, default=None, help="Archive months to search (default: configured look-back)")
    _add_data_dir(fnd)
    fnd.set_defaults(func=cmd_find)

    flt = subparsers.add_parser("filter", help="Print jobs from a JSON array that have not been posted")
    flt.add_argument("--input", required=True, help="Path to JSON array of job records")
    flt.add_argument("--output", help="Write unposted jobs here instead of stdout")
    flt.add_argument("--no-legacy", action="store_true", help="Skip legacy identifier checks")
    _add_data_dir(flt)
    flt.set_defaults(func=cmd_filter)

    sts = subparsers.add_parser("stats", help="Show store size, partitions and health findings")
    _add_data_dir(sts)
    sts.set_defaults(func=cmd_stats)

    rmv = subparsers.add_parser("remove", help="Remove identifiers matching a regex (dry run by default)")
    rmv.add_argument("--pattern", required=True, help="Case-insensitive regex matched against identifiers")
    rmv.add_argument("--execute", action="store_true", help="Actually remove and save")
    rmv.add_argument("--no-backup", action="store_true", help="Skip writing posted_jobs_backup.json")
    _add_data_dir(rmv)
    rmv.set_defaults(func=cmd_remove)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
