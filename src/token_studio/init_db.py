"""Create all tables on the configured database (development convenience)."""
from __future__ import annotations

import argparse

from token_studio.db.session import create_tables, drop_tables


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create the Token Studio tables")
    parser.add_argument(
        "--drop-tables",
        action="store_true",
        help="Drop every table before creating them again.",
    )
    args = parser.parse_args(argv)

    if args.drop_tables:
        drop_tables()
        print("Dropped all tables.")
    create_tables()
    print("Database initialized.")


if __name__ == "__main__":
    main()
