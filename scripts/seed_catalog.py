"""Seed the default tool catalog and manage roles out of band."""

from __future__ import annotations

import argparse
import logging
import sys
from contextlib import suppress

from toolhub.catalog import DEFAULT_TOOLS
from toolhub.db import database, models
from toolhub.db.repositories import tools as tools_repo
from toolhub.db.repositories import users as users_repo


logger = logging.getLogger("toolhub.scripts.seed_catalog")


# Access SessionLocal dynamically so test fixtures that rebind the
# sessionmaker are respected.
SessionLocal = lambda: database.SessionLocal()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the ToolHub tool catalog")
    parser.add_argument(
        "--deactivate",
        metavar="SLUG",
        action="append",
        default=[],
        help="Mark a tool inactive (repeatable). Existing grants are kept.",
    )
    parser.add_argument(
        "--activate",
        metavar="SLUG",
        action="append",
        default=[],
        help="Mark a tool active again (repeatable)",
    )
    parser.add_argument(
        "--promote",
        metavar="EMAIL",
        help="Give an existing user the admin role",
    )
    parser.add_argument(
        "--skip-defaults",
        action="store_true",
        help="Do not insert missing default tools",
    )
    return parser.parse_args(argv)


def seed_default_tools(session) -> int:
    """Insert default tools whose slug is missing; returns how many were created."""
    created = 0
    for entry in DEFAULT_TOOLS:
        if tools_repo.get_tool_by_slug_any_state(session, entry["slug"]) is not None:
            continue
        tools_repo.create_tool(session, **entry)
        created += 1
        logger.info("Seeded tool %s", entry["slug"])
    return created


def set_active(session, slug: str, is_active: bool) -> bool:
    tool = tools_repo.set_tool_active(session, slug, is_active)
    if tool is None:
        logger.warning("No tool with slug %s", slug)
        return False
    logger.info("Tool %s is_active=%s", slug, is_active)
    return True


def promote(session, email: str) -> bool:
    user = users_repo.get_user_by_email(session, email.strip().lower())
    if user is None:
        logger.warning("No user with email %s", email)
        return False
    users_repo.set_user_role(session, user.id, models.ROLE_ADMIN)
    logger.info("Promoted %s to admin", user.email)
    return True


def run(args: argparse.Namespace) -> int:
    session = SessionLocal()
    failures = 0
    try:
        if not args.skip_defaults:
            created = seed_default_tools(session)
            print(f"Seeded {created} new tools ({len(DEFAULT_TOOLS)} defaults).")
        for slug in args.deactivate:
            failures += 0 if set_active(session, slug, False) else 1
        for slug in args.activate:
            failures += 0 if set_active(session, slug, True) else 1
        if args.promote:
            if promote(session, args.promote):
                print(f"{args.promote} is now an admin.")
            else:
                print(f"No user found for {args.promote}.", file=sys.stderr)
                failures += 1
        return 1 if failures else 0
    finally:
        with suppress(Exception):
            session.close()


def main(argv: list[str] | None = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return run(parse_args(argv))


if __name__ == "__main__":  # pragma: no cover - manual execution path
    sys.exit(main())
