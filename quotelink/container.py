import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        if singleton:
            self._singleton_flags.add(interface)

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance

    def reset(self) -> None:
        """Reset singletons (for testing)."""
        self._singletons.clear()


container = Container()


def configure_container(settings: Settings) -> Container:
    """Configure container with all dependencies.

    Sessions are per user: resolve ReaderSessionFactory and create one
    session per visual layer.

    Args:
        settings: Application settings.

    Returns:
        Configured container.
    """
    from .core.protocols.llm import LLMProtocol
    from .core.services.document_service import DocumentService
    from .core.services.reader_session import ReaderSessionFactory
    from .core.services.review_service import ReviewService
    from .infrastructure.llm.ollama_client import OllamaClient

    container.register(
        LLMProtocol,
        lambda: OllamaClient(
            base_url=settings.llm_base_url,
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        ),
        singleton=True,
    )

    container.register(DocumentService, DocumentService, singleton=True)

    container.register(
        ReviewService,
        lambda: ReviewService(
            llm=container.resolve(LLMProtocol),
            timeout=settings.llm_timeout,
        ),
        singleton=True,
    )

    container.register(
        ReaderSessionFactory,
        lambda: ReaderSessionFactory(
            llm=container.resolve(LLMProtocol),
            documents=container.resolve(DocumentService),
            scroll_settle_delay=settings.scroll_settle_delay,
            llm_timeout=settings.llm_timeout,
        ),
        singleton=True,
    )

    logger.info("Container configured")
    return container
