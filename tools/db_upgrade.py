#!/usr/bin/env python3
"""Migrate the folio database (posts, post_series_items) with Alembic."""

from __future__ import annotations

import argparse
from pathlib import Path

from alembic.config import Config
from sqlalchemy.engine import Connection

from alembic import command

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def build_config(connection: Connection | None = None) -> Config:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    if connection is not None:
        cfg.attributes["connection"] = connection
    return cfg


def upgrade(revision: str = "head", connection: Connection | None = None) -> None:
    command.upgrade(build_config(connection), revision)


def downgrade(revision: str, connection: Connection | None = None) -> None:
    command.downgrade(build_config(connection), revision)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("revision", nargs="?", default="head")
    parser.add_argument(
        "--down", action="store_true", help="downgrade to REVISION instead"
    )
    args = parser.parse_args(argv)
    if args.down:
        downgrade(args.revision)
    else:
        upgrade(args.revision)


if __name__ == "__main__":
    main()
