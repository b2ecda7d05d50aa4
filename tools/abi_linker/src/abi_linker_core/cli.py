from __future__ import annotations

import argparse
import sys

from .config import config_from_args
from .errors import AbiLinkerError
from .orchestration import link_and_dump


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="abi_linker",
        description="Link per-source ABI dumps into one library ABI dump, keeping only exported declarations.",
    )
    parser.add_argument("dump_files", nargs="+", metavar="DUMP", help="Per-translation-unit ABI dump JSON files.")
    parser.add_argument("-o", dest="output", required=True, help="Write the linked ABI dump to path.")
    parser.add_argument(
        "-I",
        dest="export_dirs",
        action="append",
        default=[],
        metavar="DIR",
        help="Exported include directory; declarations from other headers are dropped (repeatable).",
    )
    parser.add_argument("-v", dest="version_script", help="Version script listing exported symbols.")
    parser.add_argument("--api", default="", help="Target API level used while reading the version script.")
    parser.add_argument("--arch", default="", help="Target architecture used while reading the version script.")
    parser.add_argument("--no-filter", action="store_true", help="Ignore -I directories and keep declarations from every header.")
    parser.add_argument(
        "--use-version-script",
        action="store_true",
        help="Use the version script instead of the shared object to select exported functions and variables.",
    )
    parser.add_argument("-so", dest="so_file", required=True, help="Path to the shared object built from the dumps.")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)
    try:
        config = config_from_args(args)
        result = link_and_dump(config)
    except AbiLinkerError as exc:
        print(f"abi_linker error: [{exc.stage}] {exc}", file=sys.stderr)
        return 1
    print(result.summary(), file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
