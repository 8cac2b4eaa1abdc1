"""Shared fakes for the visual layer and the generator."""

import json
from typing import Sequence
from unittest.mock import AsyncMock, MagicMock

import pytest

from quotelink.core.models.document import Fragment, Location
from quotelink.core.services.fragment_store import FragmentStore


class RecordingVisualLayer:
    """Visual layer that records every command it receives."""

    def __init__(self):
        self.commands: list[tuple] = []

    async def scroll_into_view(self, page_number: int) -> None:
        self.commands.append(("scroll", page_number))

    async def apply_highlight(
        self, location: Location, fragments: Sequence[Fragment]
    ) -> None:
        self.commands.append(("highlight", location, "".join(f.text for f in fragments)))

    async def clear_highlight(self) -> None:
        self.commands.append(("clear",))

    @property
    def highlights(self) -> list[tuple]:
        return [c for c in self.commands if c[0] == "highlight"]

    @property
    def visible_highlight(self) -> tuple | None:
        """Highlight left on screen after replaying all commands."""
        visible = None
        for command in self.commands:
            if command[0] == "highlight":
                visible = command
            elif command[0] == "clear":
                visible = None
        return visible


def make_store(*pages: list[str]) -> FragmentStore:
    """Store with every page indexed from plain fragment texts."""
    store = FragmentStore(len(pages))
    for number, fragments in enumerate(pages, 1):
        store.index_page(number, fragments)
    return store


def grounded(answer: str, quote: str | None = "") -> str:
    return json.dumps({"answer": answer, "quote": quote})


@pytest.fixture
def visual():
    return RecordingVisualLayer()


@pytest.fixture
def llm():
    client = MagicMock()
    client.generate = AsyncMock(return_value=grounded("An answer."))
    return client
