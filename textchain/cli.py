from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence

from chainkit import ALLOWED_UNRESOLVED_POLICIES


def _split_order(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="textchain", add_help=True)
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Apply the configured pipeline to input values")
    run.add_argument("--config", dest="config_path", default=None, help="Path to a YAML config file")
    run.add_argument(
        "--order",
        type=_split_order,
        default=None,
        help="Comma-separated transform ids (overrides pipeline.order)",
    )
    run.add_argument(
        "--on-unresolved",
        choices=ALLOWED_UNRESOLVED_POLICIES,
        default=None,
        help="Unresolved transform id policy (overrides pipeline.on_unresolved)",
    )
    run.add_argument("values", nargs="*", help="Input values (default: one per stdin line)")

    list_transforms = sub.add_parser("list-transforms", help="List available transforms")
    list_transforms.add_argument("--json", action="store_true", help="Print JSON rows")

    return parser


def list_transforms(*, as_json: bool = False) -> None:
    from .transforms.registry import get_transform_registry

    rows = get_transform_registry().describe()
    if as_json:
        print(json.dumps(list(rows), indent=2))
        return
    width = max((len(row["transform_id"]) for row in rows), default=0)
    for row in rows:
        print(f"{row['transform_id']:<{width}}  {row['doc'] or ''}".rstrip())


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)

    if args.command == "run":
        from .app.run import main as run_main

        return int(
            run_main(
                args.values or None,
                config_path=args.config_path,
                order=args.order,
                on_unresolved=args.on_unresolved,
            )
        )

    if args.command == "list-transforms":
        list_transforms(as_json=args.json)
        return 0

    raise AssertionError(f"Unhandled command: {args.command}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
