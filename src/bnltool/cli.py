"""Command line interface for bnltool."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .api import (
    CreateOptions,
    ExtractOptions,
    apply_mod,
    create_bnl,
    diff_bnl_files,
    extract_bnls,
    inspect_bnl_file,
    list_assets,
    load_bnl,
    type_summary,
)
from .archive.errors import BnlError
from .config import load_config
from .logging import configure_logging, step
from .reporting import (
    REPORTER_CHOICES,
    PlainReporter,
    create_reporter,
    get_reporter,
    set_reporter,
    set_verbosity,
)


def _extract_cmd(args: argparse.Namespace) -> int:
    results = extract_bnls(
        ExtractOptions(
            bnl_files=args.bnl_files,
            output_dir=args.output_dir,
            config=args.config_obj,
        )
    )
    for r in results:
        step(f"{r.archive} -> {r.output_dir} ({r.assets_written} assets)")
    return 0


def _create_cmd(args: argparse.Namespace) -> int:
    result = create_bnl(
        CreateOptions(
            asset_dirs=args.asset_dirs,
            output_file=args.output_file,
            config=args.config_obj,
        )
    )
    step(f"wrote {result.output_file} ({result.bytes_written} bytes)")
    return 0


def _list_cmd(args: argparse.Namespace) -> int:
    bnl = load_bnl(args.bnl_path, args.config_obj)
    assets = list_assets(bnl, args.type_filter, args.alphabetical)
    rep = get_reporter()
    rep.flush()
    for raw in assets:
        print(raw.name)
    if args.summary:
        print(f"{len(assets)} assets found.")
        if not args.type_filter:
            types = type_summary(assets)
            print(f"{len(types)} Asset types: {' '.join(types)}")
    rep.summary("list", file=args.bnl_path.name, listed=len(assets), total=len(bnl))
    return 0


def _diff_cmd(args: argparse.Namespace) -> int:
    result = diff_bnl_files(
        args.left,
        args.right,
        names_only=args.names_only,
        ignore_order=args.ignore_order,
        config=args.config_obj,
    )
    rep = get_reporter()
    rep.section("Diff results")
    diff_count = result["summary"]["count"]
    rep.summary(
        "diff", count=diff_count, left=args.left.name, right=args.right.name
    )
    rep.flush()
    # Full machine-readable diff on stdout
    print(json.dumps(result, indent=2, sort_keys=True))
    return 1 if diff_count else 0


def _inspect_cmd(args: argparse.Namespace) -> int:
    info, issues = inspect_bnl_file(args.bnl_path, args.config_obj)
    rep = get_reporter()
    rep.flush()
    if args.json:
        print(json.dumps({**info, "issues": issues}, indent=2, sort_keys=True))
    else:
        header = info["header"]
        print(
            f"{args.bnl_path}: {header['file_count']} assets, "
            f"flags=0x{header['flags']:02x}, "
            f"compressed={info['compressed_size']} "
            f"decompressed={info['decompressed_size']}"
        )
        for name, loc in header["sections"].items():
            print(f"  {name:<13} offset={loc['offset']:<10} size={loc['size']}")
        for rec in info.get("records", []):
            print(
                f"  [{rec['index']:>4}] {rec['type_label']:<15} {rec['name']} "
                f"desc={rec['descriptor_ptr']}+{rec['descriptor_size']} "
                f"res={rec['resource_size']}"
            )
    for issue in issues:
        rep.warning(issue)
    rep.summary("inspect", file=args.bnl_path.name, issues=len(issues))
    return 1 if issues else 0


def _apply_mod_cmd(args: argparse.Namespace) -> int:
    result = apply_mod(
        args.bnl_path, args.mod_dir, args.output_file, args.config_obj
    )
    for aid in result.skipped:
        get_reporter().warning(f"Override {aid} matches no asset")
    step(f"applied {result.applied}/{result.overrides} overrides")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bnltool", description="Read, write and modify BNL archives"
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (repeatable)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=list(REPORTER_CHOICES),
        default="plain",
        help="Select reporter backend: plain (default), rich, json (JSONL events), silent",
    )
    p.add_argument(
        "--config",
        type=Path,
        help="YAML or JSON configuration file",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    x = sub.add_parser("extract", help="Extract one or more BNL files")
    x.add_argument("bnl_files", nargs="+", type=Path, metavar="BNL_FILE")
    x.add_argument(
        "-d",
        dest="output_dir",
        type=Path,
        default=Path("./out"),
        help="Output directory (default: ./out)",
    )
    x.set_defaults(func=_extract_cmd)

    c = sub.add_parser(
        "create", help="Create a BNL file from extracted asset directories"
    )
    c.add_argument("asset_dirs", nargs="+", type=Path, metavar="ASSET_DIR")
    c.add_argument(
        "-o", dest="output_file", type=Path, required=True, metavar="FILE"
    )
    c.set_defaults(func=_create_cmd)

    ls = sub.add_parser("list", help="List the contents of a BNL file")
    ls.add_argument("bnl_path", type=Path, metavar="BNL_FILE")
    ls.add_argument(
        "-t", dest="type_filter", help="Only list assets of this type"
    )
    ls.add_argument(
        "-a",
        dest="alphabetical",
        action="store_true",
        help="Order by type name instead of type code",
    )
    ls.add_argument(
        "-s", dest="summary", action="store_true", help="Print a summary"
    )
    ls.set_defaults(func=_list_cmd)

    d = sub.add_parser("diff", help="Diff two BNL files")
    d.add_argument("left", type=Path)
    d.add_argument("right", type=Path)
    d.add_argument(
        "-n",
        dest="names_only",
        action="store_true",
        help="Compare asset names only, not their contents",
    )
    d.add_argument(
        "-a",
        dest="ignore_order",
        action="store_true",
        help="Do not require assets to be in the same order",
    )
    d.set_defaults(func=_diff_cmd)

    i = sub.add_parser("inspect", help="Inspect and validate archive structure")
    i.add_argument("bnl_path", type=Path, metavar="BNL_FILE")
    i.add_argument("--json", action="store_true", help="Emit JSON")
    i.set_defaults(func=_inspect_cmd)

    m = sub.add_parser("apply-mod", help="Apply a mod directory to a BNL file")
    m.add_argument("bnl_path", type=Path, metavar="BNL_FILE")
    m.add_argument("mod_dir", type=Path, metavar="MOD_DIR")
    m.add_argument(
        "-o", dest="output_file", type=Path, required=True, metavar="FILE"
    )
    m.set_defaults(func=_apply_mod_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.reporter == "rich" and not sys.stderr.isatty():
        # Fall back quietly to plain if no TTY
        set_reporter(PlainReporter())
    else:
        set_reporter(create_reporter(args.reporter))
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    rep = get_reporter()
    try:
        args.config_obj = load_config(args.config)
        return args.func(args)
    except BnlError as exc:
        rep.error(str(exc), code=exc.code)
        return 1
    except OSError as exc:
        rep.error(str(exc))
        return 1
    finally:
        rep.flush()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
