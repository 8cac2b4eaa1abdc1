"""Review service - document reviews and research plans."""

import asyncio
import logging
from typing import AsyncIterator, Sequence

from pydantic import ValidationError

from ..exceptions import GenerationError, InvalidRequestError, MalformedResponseError
from ..models.review import REVIEW_OPTIONS, ResearchPlan, ReviewMode
from ..protocols.llm import LLMProtocol

logger = logging.getLogger(__name__)

THESIS_REVIEW_PROMPT = """As an expert design thesis reviewer, analyze the following thesis text. Provide a detailed review covering these selected areas:
{sections}
Structure your feedback clearly with markdown formatting.
---
{document_text}
---"""

MANUSCRIPT_REVIEW_PROMPT = """As an expert peer reviewer for a high-impact journal, provide a critical review of the following manuscript draft. Focus on the selected areas below.
{sections}
Structure your feedback clearly, using markdown for headings.
---
{document_text}
---"""

THESIS_DEVILS_ADVOCATE = (
    'You are now in "Devil\'s Advocate" mode. Act as a skeptical, highly critical, but '
    "fair professor. Your goal is to challenge the author's assumptions, methodology, and "
    "conclusions to strengthen their work. Frame your feedback as probing questions and "
    "critical observations.\n"
)

MANUSCRIPT_DEVILS_ADVOCATE = (
    'You are now in "Devil\'s Advocate" mode, acting as \'Reviewer #2\'. You are known for '
    "your rigorous, skeptical reviews for top-tier journals. Find every potential flaw, weak "
    "argument, or methodological ambiguity. Your tone should be professionally critical.\n"
)

PLAN_DEVILS_ADVOCATE = """**Devil's Advocate Mode Active:** Scrutinize every assumption. For each methodological step, identify the weakest point and propose a more robust alternative. Challenge the novelty of the research questions. The goal is a pressure-tested, highly defensible plan.
"""

PLAN_PROMPT = """{devils_advocate}Act as an expert research strategist. Based on the topic "{topic}", generate a comprehensive research plan. The output MUST be a JSON object matching the provided schema.

The plan must include:
1. A compelling title and a structured abstract.
2. A brief introduction establishing the research gap.
3. 2-3 specific research questions.
4. A methodology flowchart with sequential stages. Steps that can occur in parallel should be in the same stage.
5. For quantitative analysis steps, if applicable, include a relevant mathematical theorem or principle (e.g., Central Limit Theorem, Bayes' Theorem) that underpins the method.
6. A clear statement of the expected contribution and potential limitations."""

_REVIEW_TEMPLATES = {
    ReviewMode.THESIS: (THESIS_REVIEW_PROMPT, THESIS_DEVILS_ADVOCATE),
    ReviewMode.MANUSCRIPT: (MANUSCRIPT_REVIEW_PROMPT, MANUSCRIPT_DEVILS_ADVOCATE),
}


class ReviewService:
    """Generates reviews of a document and research plans for a topic."""

    def __init__(self, llm: LLMProtocol, timeout: float | None = 120.0):
        """Initialize review service.

        Args:
            llm: Generative service.
            timeout: Seconds to wait for a plan. None waits forever.
        """
        self._llm = llm
        self._timeout = timeout

    def build_review_prompt(
        self,
        document_text: str,
        mode: ReviewMode,
        sections: Sequence[str],
        devils_advocate: bool = False,
    ) -> str:
        """Build the review prompt for the selected focus areas.

        Raises:
            InvalidRequestError: Missing document, no sections or an unknown
                section key.
        """
        if not document_text.strip():
            raise InvalidRequestError("Please upload a document first.")
        if not sections:
            raise InvalidRequestError("Please select at least one review focus area.")

        options = REVIEW_OPTIONS[mode]
        unknown = [key for key in sections if key not in options]
        if unknown:
            raise InvalidRequestError(
                f"Unknown {mode.value} review sections: {', '.join(unknown)}"
            )

        template, persona = _REVIEW_TEMPLATES[mode]
        prompt = template.format(
            sections="\n\n".join(options[key].prompt for key in sections),
            document_text=document_text,
        )
        return persona + prompt if devils_advocate else prompt

    async def stream_review(
        self,
        document_text: str,
        mode: ReviewMode,
        sections: Sequence[str],
        devils_advocate: bool = False,
    ) -> AsyncIterator[str]:
        """Stream review feedback tokens."""
        prompt = self.build_review_prompt(document_text, mode, sections, devils_advocate)
        logger.info(
            f"Review: mode={mode.value}, sections={list(sections)}, "
            f"devils_advocate={devils_advocate}"
        )
        async for token in self._llm.chat_stream(prompt):
            yield token

    async def review(
        self,
        document_text: str,
        mode: ReviewMode,
        sections: Sequence[str],
        devils_advocate: bool = False,
    ) -> str:
        """Collect the full review feedback."""
        tokens = []
        async for token in self.stream_review(
            document_text, mode, sections, devils_advocate
        ):
            tokens.append(token)
        return "".join(tokens)

    def build_plan_prompt(self, topic: str, devils_advocate: bool = False) -> str:
        if not topic.strip():
            raise InvalidRequestError("Please enter a research topic.")
        return PLAN_PROMPT.format(
            devils_advocate=PLAN_DEVILS_ADVOCATE if devils_advocate else "",
            topic=topic.strip(),
        )

    async def generate_plan(self, topic: str, devils_advocate: bool = False) -> ResearchPlan:
        """Generate a research plan for a topic.

        Raises:
            InvalidRequestError: Empty topic.
            GenerationError: The generator failed or timed out.
            MalformedResponseError: The plan did not match the schema.
        """
        prompt = self.build_plan_prompt(topic, devils_advocate)
        try:
            raw = await asyncio.wait_for(
                self._llm.generate(
                    prompt,
                    schema=ResearchPlan.model_json_schema(by_alias=True),
                    schema_name="research_plan",
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise GenerationError("The model did not respond in time.") from e

        try:
            plan = ResearchPlan.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Malformed research plan: {e.error_count()} validation errors")
            raise MalformedResponseError(
                "The generated plan was not in the correct format. Please try again."
            ) from e

        logger.info(
            f"Plan '{plan.title[:50]}': {len(plan.methodology_flowchart)} stages"
        )
        return plan
