"""Tests for the dependency container."""

import pytest

from quotelink.config.settings import Settings
from quotelink.container import Container, configure_container, container
from quotelink.core.protocols.llm import LLMProtocol
from quotelink.core.services.reader_session import ReaderSessionFactory
from quotelink.core.services.review_service import ReviewService
from quotelink.infrastructure.llm.ollama_client import OllamaClient


@pytest.fixture
def configured():
    yield configure_container(Settings(llm_model="test-model", scroll_settle_delay=0.0))
    container.reset()


class TestContainer:
    """Tests for Container."""

    def test_unregistered(self):
        with pytest.raises(KeyError):
            Container().resolve(ReviewService)

    def test_singleton(self):
        c = Container()
        c.register(list, list, singleton=True)
        assert c.resolve(list) is c.resolve(list)

    def test_transient(self):
        c = Container()
        c.register(list, list)
        assert c.resolve(list) is not c.resolve(list)


class TestConfigureContainer:
    """Tests for configure_container."""

    def test_shared_generator(self, configured):
        """Services should share one generator client."""
        llm = configured.resolve(LLMProtocol)

        assert isinstance(llm, OllamaClient)
        assert configured.resolve(ReviewService)._llm is llm
        assert configured.resolve(ReaderSessionFactory)._llm is llm

    def test_sessions_per_visual_layer(self, configured):
        factory = configured.resolve(ReaderSessionFactory)
        assert factory is configured.resolve(ReaderSessionFactory)
        assert factory._scroll_settle_delay == 0.0
