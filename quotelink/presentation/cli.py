import argparse
import asyncio
import logging
import subprocess
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import httpx

from quotelink.config.settings import settings
from quotelink.container import configure_container, container
from quotelink.core.exceptions import QuoteLinkError
from quotelink.core.models.review import DEFAULT_SECTIONS, REVIEW_OPTIONS, ReviewMode
from quotelink.core.services.document_service import DocumentService
from quotelink.core.services.fragment_store import FragmentStore
from quotelink.core.services.locator import locate
from quotelink.core.services.reader_session import ReaderSessionFactory
from quotelink.core.services.review_service import ReviewService
from quotelink.infrastructure.exporters import feedback_to_docx, plan_to_docx
from quotelink.infrastructure.visual import LoggingVisualLayer

logger = logging.getLogger(__name__)


def ensure_ollama_model() -> bool:
    """Ensure Ollama model is available.

    Returns:
        True if model ready, False otherwise.
    """
    model = settings.llm_model
    base_url = settings.llm_base_url.replace("/v1", "")

    logger.info(f"Checking Ollama model: {model}")

    for attempt in range(30):
        try:
            resp = httpx.get(f"{base_url}/api/tags", timeout=5)
            if resp.status_code == 200:
                models = [m["name"] for m in resp.json().get("models", [])]
                if any(model in m for m in models):
                    logger.info(f"Model {model} is ready")
                    return True

                logger.info(f"Pulling model {model}...")
                pull_resp = httpx.post(
                    f"{base_url}/api/pull",
                    json={"name": model},
                    timeout=600,  # Model pull can take a while
                )
                if pull_resp.status_code == 200:
                    logger.info(f"Model {model} pulled successfully")
                    return True
                logger.error(f"Failed to pull model: {pull_resp.text}")
            else:
                logger.info(f"Ollama answered {resp.status_code} ({attempt + 1}/30)")
        except httpx.HTTPError:
            logger.info(f"Waiting for Ollama... ({attempt + 1}/30)")
        time.sleep(2)

    logger.error("Ollama not available")
    return False


def cmd_startup(args: argparse.Namespace) -> int:
    """Check the model, then run the chat UI."""
    logger.info("Starting quotelink...")

    if not ensure_ollama_model():
        return 1

    logger.info("Starting Chainlit...")
    app_path = Path(__file__).parent / "chainlit_app.py"
    return subprocess.run(
        [
            sys.executable,
            "-m",
            "chainlit",
            "run",
            str(app_path),
            "--host",
            settings.chainlit_host,
            "--port",
            str(settings.chainlit_port),
        ]
    ).returncode


async def _locate(args: argparse.Namespace) -> int:
    store = FragmentStore()
    document = await container.resolve(DocumentService).load(args.file, store)
    location = locate(args.quote, store)
    if location is None:
        print(f"Not found in {document.name}")
        return 1
    fragments = store.get_page(location.page_number)[
        location.first_fragment : location.last_fragment + 1
    ]
    print(
        f"Page {location.page_number}, fragments "
        f"{location.first_fragment}-{location.last_fragment}: "
        f"{''.join(f.text for f in fragments)!r}"
    )
    return 0


async def _ask(args: argparse.Namespace) -> int:
    visual = LoggingVisualLayer()
    session = container.resolve(ReaderSessionFactory).create(visual)
    await session.load(args.file)
    message = await session.ask(args.question)
    await session.highlights.join()
    if message is None:
        return 1

    print(message.text)
    if message.quote:
        location = session.highlights.location
        where = f"page {location.page_number}" if location else "not found in document"
        print(f'\n> "{message.quote}" ({where})')
    return 0


async def _review(args: argparse.Namespace) -> int:
    mode = ReviewMode(args.mode)
    store = FragmentStore()
    await container.resolve(DocumentService).load(args.file, store)

    feedback = await container.resolve(ReviewService).review(
        store.document_text(),
        mode,
        args.section or DEFAULT_SECTIONS[mode],
        devils_advocate=args.devils_advocate,
    )
    print(feedback)
    if args.output:
        Path(args.output).write_bytes(feedback_to_docx(feedback))
        logger.info(f"Saved feedback to {args.output}")
    return 0


async def _plan(args: argparse.Namespace) -> int:
    plan = await container.resolve(ReviewService).generate_plan(
        args.topic, devils_advocate=args.devils_advocate
    )
    print(plan.model_dump_json(by_alias=True, indent=2))
    if args.output:
        Path(args.output).write_bytes(plan_to_docx(plan))
        logger.info(f"Saved plan to {args.output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quotelink",
        description="Ask questions about a document and locate the supporting quotes.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    startup = subparsers.add_parser("startup", help="Check the model and run the chat UI.")
    startup.set_defaults(handler=cmd_startup)

    locate_cmd = subparsers.add_parser("locate", help="Find a quote in a document.")
    locate_cmd.add_argument("file", type=Path)
    locate_cmd.add_argument("quote")
    locate_cmd.set_defaults(handler=lambda a: asyncio.run(_locate(a)))

    ask = subparsers.add_parser("ask", help="Ask a question about a document.")
    ask.add_argument("file", type=Path)
    ask.add_argument("question")
    ask.set_defaults(handler=lambda a: asyncio.run(_ask(a)))

    all_sections = sorted({key for options in REVIEW_OPTIONS.values() for key in options})
    review = subparsers.add_parser("review", help="Review a thesis or manuscript.")
    review.add_argument("file", type=Path)
    review.add_argument("--mode", choices=[m.value for m in ReviewMode], default="thesis")
    review.add_argument("--section", action="append", choices=all_sections)
    review.add_argument("--devils-advocate", action="store_true")
    review.add_argument("--output", help="Write feedback to a .docx file.")
    review.set_defaults(handler=lambda a: asyncio.run(_review(a)))

    plan = subparsers.add_parser("plan", help="Generate a research plan for a topic.")
    plan.add_argument("topic")
    plan.add_argument("--devils-advocate", action="store_true")
    plan.add_argument("--output", help="Write the plan to a .docx file.")
    plan.set_defaults(handler=lambda a: asyncio.run(_plan(a)))

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    logging.basicConfig(level=settings.log_level, format="%(message)s")
    args = build_parser().parse_args(argv)
    configure_container(settings)

    try:
        return args.handler(args)
    except QuoteLinkError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
