#!/usr/bin/env python3
"""Attach a post to a series, or detach it with --clear."""

from __future__ import annotations

import argparse
import sys

from folio.database import SessionLocal
from folio.services.series_service import SeriesService
from folio.store import Store, StoreError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("post_id")
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument("--title", help="series title")
    action.add_argument("--clear", action="store_true", help="leave the series")
    parser.add_argument("--slug", default=None, help="explicit series slug")
    parser.add_argument("--position", type=int, default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    with SessionLocal() as session:
        service = SeriesService(Store(session))
        try:
            if args.clear:
                membership = service.save_series_for_post(args.post_id, None)
            else:
                membership = service.upsert_series_membership(
                    args.post_id, args.title, args.slug, args.position
                )
        except StoreError as exc:
            print(f"❌ Failed to update series: {exc}", file=sys.stderr)
            return 1

    if args.clear:
        print(f"✅ {args.post_id} is not in a series")
        return 0
    if membership is None:
        print(
            f"❌ Series unchanged: {args.title!r} has no usable title or slug, "
            "or the series table is missing",
            file=sys.stderr,
        )
        return 1
    print(
        f"✅ {args.post_id} → {membership.series_title} "
        f"({membership.series_slug}, position={membership.position})"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
