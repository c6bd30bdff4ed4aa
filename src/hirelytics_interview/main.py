"""
Main entry point for the Hirelytics interview orchestrator.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from hirelytics_interview.config import get_settings
from hirelytics_interview.db import (
    InMemorySessionStore,
    SessionStore,
    SqlAlchemySessionStore,
    create_session_factory,
    init_db,
)
from hirelytics_interview.io.text_interface import TextInterface
from hirelytics_interview.models.llm_client import LLMClient
from hirelytics_interview.orchestrator.errors import PersistenceError
from hirelytics_interview.orchestrator.interview_orchestrator import InterviewOrchestrator
from hirelytics_interview.orchestrator.schemas import ApplicationRecord


def setup_logging() -> None:
    """Configure application logging."""
    settings = get_settings()
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="hirelytics-interview",
        description="Run an AI interview session for a job application in the terminal.",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy async connection string (defaults to DATABASE_URL setting)",
    )
    parser.add_argument(
        "--in-memory",
        action="store_true",
        help="Keep sessions in memory instead of a database (requires --application-file)",
    )
    parser.add_argument(
        "--application-file",
        type=Path,
        default=None,
        help="JSON application record to seed into the store if it does not exist",
    )
    parser.add_argument(
        "--uuid",
        default=None,
        help="Application UUID (defaults to the uuid in --application-file)",
    )
    parser.add_argument(
        "--restart",
        action="store_true",
        help="Discard any existing interview session and start over",
    )
    return parser


def load_application(path: Path) -> ApplicationRecord:
    """
    Load an application record from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValidationError: If the file is not a valid application record.
    """
    return ApplicationRecord.model_validate_json(path.read_text(encoding="utf-8"))


async def seed_application(store: SessionStore, record: ApplicationRecord) -> None:
    """Insert an application unless one with the same uuid exists."""
    if await store.get_application(record.uuid) is None:
        await store.create_application(record)


async def run_interview(argv: list[str] | None = None) -> int:
    """
    Run an interactive interview session.

    This is the main async entry point that initializes all components
    and runs the interview loop.

    Returns:
        Process exit code.
    """
    settings = get_settings()
    logger = logging.getLogger(__name__)
    args = build_parser().parse_args(argv)

    record: ApplicationRecord | None = None
    if args.application_file is not None:
        try:
            record = load_application(args.application_file)
        except (OSError, ValidationError) as e:
            logger.error(f"Could not load application file {args.application_file}: {e}")
            return 2

    uuid = args.uuid or (record.uuid if record else None)
    if not uuid:
        logger.error("An application uuid is required (--uuid or --application-file)")
        return 2

    engine = None
    store: SessionStore
    if args.in_memory:
        if record is None:
            logger.error("--in-memory requires --application-file")
            return 2
        store = InMemorySessionStore()
    else:
        database_url = args.database_url or settings.database_url
        engine, session_factory = create_session_factory(database_url, echo=settings.debug)
        await init_db(engine)
        store = SqlAlchemySessionStore(session_factory)

    logger.info("Initializing Hirelytics interview orchestrator...")
    logger.debug(f"Using LLM: {settings.llm_provider}/{settings.llm_model_name}")

    orchestrator = InterviewOrchestrator(store=store, llm_client=LLMClient(), settings=settings)
    try:
        if record is not None:
            await seed_application(store, record)
        interface = TextInterface(orchestrator, uuid=uuid, force_restart=args.restart)
        logger.info(f"Starting interview session {uuid}...")
        completed = await interface.run()
    except PersistenceError as e:
        logger.error(f"Store error: {e}")
        return 1
    finally:
        await orchestrator.close()
        if engine is not None:
            await engine.dispose()

    return 0 if completed else 1


def main() -> None:
    """Main entry point for the application."""
    setup_logging()

    try:
        sys.exit(asyncio.run(run_interview(sys.argv[1:])))
    except KeyboardInterrupt:
        print("\nInterview session terminated by user.")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
