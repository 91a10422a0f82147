#!/usr/bin/env python3
"""Delete a post together with its series membership."""

from __future__ import annotations

import argparse
import sys

from folio.database import SessionLocal
from folio.services.post_service import PostService
from folio.store import Store, StoreError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("post_id")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    with SessionLocal() as session:
        try:
            deleted = PostService(Store(session)).delete_post(args.post_id)
        except StoreError as exc:
            print(f"❌ Failed to delete post: {exc}", file=sys.stderr)
            return 1

    if not deleted:
        print(f"❌ No post with id {args.post_id}", file=sys.stderr)
        return 1
    print(f"✅ Deleted {args.post_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
