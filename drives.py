"""
drives: prints Windows drive and volume information.

Reports every drive letter Windows knows about, or a single one, as an aligned
table or as a JSON-shaped document. Network mappings and drive substitutions
(see the `subst` command) are shown alongside the volumes.
"""

import argparse
import logging
import sys
from typing import Callable, Iterable

from console import configure_logging, write, write_error
from drive_info import DriveKind, DriveRecord, DriveSources, RawFacts, build_drive_record, parse_drive_argument
from report import NoRootPolicy, render_human, render_structured


PROGRAM_NAME = "drives"
PROGRAM_VERSION = "3.0.0"
PROGRAM_DATE = "2026-10-19"
PROGRAM_URL = "https://github.com/hollasch/drives"
VERSION_LINE = f"{PROGRAM_NAME} v{PROGRAM_VERSION} | {PROGRAM_DATE} | {PROGRAM_URL}"

LOG_LEVEL = logging.WARNING


def drive_letter(value: str) -> str:
    letter = parse_drive_argument(value)
    if letter is None:
        raise argparse.ArgumentTypeError(f"unexpected argument ({value})")
    return letter


def parse_args(argv: list[str]|None = None) -> argparse.Namespace:
    if argv is None:
        argv = sys.argv[1:]
    argv = ["--help" if token == "/?" else token for token in argv]

    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="Print Windows drive and volume information.",
        epilog="This program also prints all network mappings and drive substitutions "
               "(see the 'subst' command).",
    )
    parser.add_argument("drive", nargs="?", type=drive_letter,
                        help="optional drive letter for a single drive report (colon optional)")
    parser.add_argument("--version", action="version", version=VERSION_LINE,
                        help="print program version")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="print free and total space (only affects the human format)")
    parser.add_argument("-j", "--json", "-p", "--parseable", dest="json", action="store_true",
                        help="print results in machine-parseable (JSON) format")
    parser.add_argument("-f", "--flags", action="store_true",
                        help="list file system capabilities under each drive (human format)")
    parser.add_argument("-d", "--diagnose", action="store_true",
                        help="report drives that are enumerated but have no root directory")
    parser.add_argument("--debug", action="store_true",
                        help="log every failed volume query to stderr")
    return parser.parse_args(argv)


def collect_drive_records(letters: Iterable[str], sources: DriveSources,
                          query: Callable[[str, DriveSources], RawFacts]) -> list[DriveRecord]:
    """Queries and builds one record per letter, in the given order."""
    return [build_drive_record(letter, query(letter, sources)) for letter in letters]


def main(argv: list[str]|None = None, adapter=None) -> int:
    args = parse_args(argv)
    configure_logging(PROGRAM_NAME, logging.DEBUG if args.debug else LOG_LEVEL)

    if adapter is None:
        import get_volumes as adapter

    sources = adapter.get_drive_sources()
    letters = sources.letters

    if args.drive:
        if not sources.is_valid(args.drive):
            write_error(PROGRAM_NAME, f"No volume present at drive {args.drive}:.")
            return 1
        letters = (args.drive,)

    records = collect_drive_records(letters, sources, adapter.query_drive)
    no_root = NoRootPolicy.DIAGNOSE if args.diagnose else NoRootPolicy.SKIP

    if args.drive and no_root is NoRootPolicy.SKIP and records[0].kind is DriveKind.NO_ROOT_DIRECTORY:
        write_error(PROGRAM_NAME, f"No volume present at drive {args.drive}:.")
        return 1

    if args.json:
        write(render_structured(records, no_root=no_root))
    else:
        write(render_human(records, verbose=args.verbose, show_flags=args.flags, no_root=no_root))
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
