"""
prepbank command line.

Usage:
    prepbank upload question questions.csv
    prepbank upload recommendation recs.csv --faculty-name "Dr. A. Sharma"
    prepbank template resource -o resources.csv
    prepbank init-db
    prepbank whoami someone@pilani.bits-pilani.ac.in --provider google
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from prepbank.core.config import settings
from prepbank.core.constants import AuthProvider, UploadKind
from prepbank.core.logging import get_logger, setup_logging
from prepbank.db.session import init_models, make_engine, make_session_factory, session_scope
from prepbank.pipeline.engine import UploadEngine
from prepbank.processing.templates import render_template
from prepbank.services.access import AccessDeniedError, resolve_role
from prepbank.services.sql_collaborators import SqlCollaborators

logger = get_logger(__name__)

KINDS = [k.value for k in UploadKind]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="prepbank", description="Bulk CSV uploads for the prep bank.")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL)
    sub = parser.add_subparsers(dest="command", required=True)

    upload = sub.add_parser("upload", help="Upload a CSV file")
    upload.add_argument("kind", choices=KINDS)
    upload.add_argument("path", type=Path)
    upload.add_argument("--faculty-name", default=None)

    template = sub.add_parser("template", help="Write the CSV template for a kind")
    template.add_argument("kind", choices=KINDS)
    template.add_argument("-o", "--output", type=Path, default=None)

    sub.add_parser("init-db", help="Create missing tables")

    whoami = sub.add_parser("whoami", help="Show the role an email signs in with")
    whoami.add_argument("email")
    whoami.add_argument("--provider", choices=[p.value for p in AuthProvider], default=None)

    return parser


async def _upload(args: argparse.Namespace) -> int:
    engine = make_engine(args.database_url)
    try:
        await init_models(engine)
        # SQLite takes one writer at a time.
        writes = 1 if engine.url.get_backend_name() == "sqlite" else None
        store = SqlCollaborators(make_session_factory(engine), max_concurrent_writes=writes)
        known = await store.load_known_companies() if args.kind == UploadKind.QUESTION else []
        result = await UploadEngine().run(
            args.kind,
            args.path,
            collaborators=store.as_collaborators(),
            known_companies=known,
            faculty_name=args.faculty_name,
        )
    finally:
        await engine.dispose()

    print(json.dumps(result.report.model_dump(), indent=2))
    return 1 if result.report.failed_count else 0


async def _init_db(args: argparse.Namespace) -> int:
    engine = make_engine(args.database_url)
    try:
        await init_models(engine)
    finally:
        await engine.dispose()
    print("Tables created.")
    return 0


async def _whoami(args: argparse.Namespace) -> int:
    engine = make_engine(args.database_url)
    try:
        await init_models(engine)
        async with session_scope(make_session_factory(engine)) as db:
            role = await resolve_role(db, args.email, args.provider)
    except AccessDeniedError as exc:
        print(f"Access denied: {exc}", file=sys.stderr)
        return 2
    finally:
        await engine.dispose()
    print(role.value)
    return 0


def _template(args: argparse.Namespace) -> int:
    filename, content = render_template(args.kind)
    target = args.output or Path(filename)
    target.write_text(content, encoding="utf-8")
    print(f"Template written to {target}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, json=settings.LOG_JSON)

    try:
        if args.command == "template":
            return _template(args)
        if args.command == "upload":
            return asyncio.run(_upload(args))
        if args.command == "init-db":
            return asyncio.run(_init_db(args))
        if args.command == "whoami":
            return asyncio.run(_whoami(args))
    except Exception as exc:
        logger.error("Command failed", command=args.command, error=str(exc))
        return 1
    return 1
