import logging
import sys
from pathlib import Path
from typing import Sequence

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import chainlit as cl

from quotelink.config.settings import settings
from quotelink.container import configure_container, container
from quotelink.core.exceptions import QuoteLinkError
from quotelink.core.models.chat import ChatMessage
from quotelink.core.models.document import Fragment, Location
from quotelink.core.models.review import DEFAULT_SECTIONS, ReviewMode
from quotelink.core.services.reader_session import ReaderSession, ReaderSessionFactory
from quotelink.core.services.review_service import ReviewService
from quotelink.infrastructure.exporters import feedback_to_docx, plan_to_docx

logger = logging.getLogger(__name__)

configure_container(settings)

_ACCEPTED_TYPES = [
    "application/pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
]

_HELP = (
    "Ask anything about the document. Commands:\n"
    "- `/review thesis` or `/review manuscript` for structured feedback\n"
    "- `/challenge thesis` or `/challenge manuscript` for a devil's-advocate review\n"
    "- `/plan <topic>` to generate a research plan\n"
    "- `/upload` to load another document"
)


class ChainlitVisualLayer:
    """Shows the quoted passage next to the PDF page it comes from."""

    def __init__(self):
        self._path: str | None = None
        self._name = "document"
        self._page: int | None = None
        self._mark: cl.Message | None = None

    def show_document(self, path: str | None, name: str) -> None:
        self._path = path
        self._name = name
        self._page = None

    async def scroll_into_view(self, page_number: int) -> None:
        self._page = page_number

    async def apply_highlight(
        self, location: Location, fragments: Sequence[Fragment]
    ) -> None:
        passage = "".join(f.text for f in fragments).strip()
        elements = []
        if self._path is not None:
            elements.append(
                cl.Pdf(
                    name=self._name,
                    display="side",
                    path=self._path,
                    page=self._page or location.page_number,
                )
            )
        self._mark = cl.Message(
            content=f"> {passage}\n\nPage {location.page_number} of {self._name}",
            elements=elements,
        )
        await self._mark.send()

    async def clear_highlight(self) -> None:
        if self._mark is not None:
            await self._mark.remove()
            self._mark = None


def _session() -> ReaderSession:
    return cl.user_session.get("session")


async def _ask_for_document() -> None:
    files = None
    while files is None:
        files = await cl.AskFileMessage(
            content="Upload a PDF, .docx or .txt document to begin your Q&A session.",
            accept=_ACCEPTED_TYPES,
            max_size_mb=settings.max_upload_mb,
        ).send()

    upload = files[0]
    visual: ChainlitVisualLayer = cl.user_session.get("visual")
    is_pdf = upload.name.lower().endswith(".pdf")
    visual.show_document(upload.path if is_pdf else None, upload.name)

    try:
        document = await _session().load(upload.path, name=upload.name)
    except QuoteLinkError as e:
        await cl.Message(content=f"Could not load the document: {e}").send()
        return

    greeting = _session().history.messages[-1].text
    await cl.Message(
        content=f"**{document.name}** ({document.page_count} pages). {greeting}\n\n{_HELP}"
    ).send()


async def _send_answer(message: ChatMessage) -> None:
    actions = []
    content = message.text
    if message.quote:
        content += f"\n\n> {message.quote}"
        actions.append(
            cl.Action(
                name="show_quote",
                payload={"quote": message.quote},
                label="Show in document",
            )
        )
    await cl.Message(content=content, actions=actions).send()


async def _run_review(mode: ReviewMode, devils_advocate: bool) -> None:
    session = _session()
    if session.document is None:
        await cl.Message(content="Please upload a document first.").send()
        return

    review_service = container.resolve(ReviewService)
    msg = cl.Message(content="")
    await msg.send()

    feedback = ""
    try:
        async for token in review_service.stream_review(
            session.document.text,
            mode,
            DEFAULT_SECTIONS[mode],
            devils_advocate=devils_advocate,
        ):
            feedback += token
            await msg.stream_token(token)
    except QuoteLinkError as e:
        error_text = f"\n\nFailed to get review. Please try again. Error: {e}"
        await msg.stream_token(error_text)
        await msg.update()
        return

    msg.elements = [
        cl.File(
            name=f"{mode.value}-review-feedback.docx",
            content=feedback_to_docx(feedback),
            display="inline",
        )
    ]
    await msg.update()


async def _run_plan(topic: str) -> None:
    review_service = container.resolve(ReviewService)
    try:
        plan = await review_service.generate_plan(topic)
    except QuoteLinkError as e:
        await cl.Message(content=str(e)).send()
        return

    lines = [f"## {plan.title}", plan.abstract, "", "**Research questions**"]
    lines += [f"- {q}" for q in plan.research_questions]
    for stage in plan.methodology_flowchart:
        lines.append(f"\n**Stage {stage.stage}: {stage.title}**")
        for step in stage.steps:
            lines.append(f"- {step.title}: {step.details}")
            if step.has_theorem:
                lines.append(f"  - Supporting principle: {step.theorem.name}")

    await cl.Message(
        content="\n".join(lines),
        elements=[
            cl.File(name="research-plan.docx", content=plan_to_docx(plan), display="inline")
        ],
    ).send()


@cl.on_chat_start
async def start():
    visual = ChainlitVisualLayer()
    session = container.resolve(ReaderSessionFactory).create(visual)
    cl.user_session.set("visual", visual)
    cl.user_session.set("session", session)

    await _ask_for_document()


@cl.on_message
async def main(message: cl.Message):
    text = message.content.strip()
    command, _, argument = text.partition(" ")

    if command == "/upload":
        await _ask_for_document()
        return
    if command in ("/review", "/challenge"):
        try:
            mode = ReviewMode(argument.strip() or "thesis")
        except ValueError:
            await cl.Message(content=_HELP).send()
            return
        await _run_review(mode, devils_advocate=command == "/challenge")
        return
    if command == "/plan":
        await _run_plan(argument)
        return

    try:
        answer = await _session().ask(text)
    except QuoteLinkError as e:
        await cl.Message(content=str(e)).send()
        return

    # None: a newer question superseded this one.
    if answer is not None:
        await _send_answer(answer)


@cl.action_callback("show_quote")
async def on_show_quote(action: cl.Action):
    _session().focus_quote(action.payload["quote"])
