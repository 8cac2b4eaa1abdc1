"""Review and research plan domain models."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ReviewMode(Enum):
    """Kind of document review."""
    THESIS = "thesis"
    MANUSCRIPT = "manuscript"


@dataclass(frozen=True)
class ReviewOption:
    """Selectable review focus area."""
    label: str
    prompt: str


THESIS_REVIEW_OPTIONS: dict[str, ReviewOption] = {
    "statement_clarity": ReviewOption(
        label="Clarity of Thesis Statement",
        prompt=(
            "**Clarity of Thesis Statement:** Assess the clarity and focus of the central "
            "research question or thesis statement. Is it well-defined, arguable, and "
            "appropriately scoped?"
        ),
    ),
    "intro": ReviewOption(
        label="Abstract & Introduction",
        prompt=(
            "**Abstract and Introduction:** Critique the abstract and introduction. Does the "
            "abstract accurately summarize the work? Does the introduction effectively grab "
            "attention, provide background, and outline the structure?"
        ),
    ),
    "literature": ReviewOption(
        label="Depth of Literature",
        prompt=(
            "**Depth of Literature:** Evaluate how well the text is situated within existing "
            "research. Are the references relevant and sufficient? Is there a critical "
            "engagement with the literature?"
        ),
    ),
    "soundness": ReviewOption(
        label="Scientific Soundness",
        prompt=(
            "**Scientific Soundness:** Assess the methodology, arguments, and evidence. Is the "
            "reasoning logical? Are claims well-supported? Is the research design appropriate?"
        ),
    ),
    "structure": ReviewOption(
        label="Argument Structure & Flow",
        prompt=(
            "**Argument Structure & Flow:** Evaluate the logical flow and coherence of the "
            "text. Is the argument easy to follow? Are transitions between sections smooth? "
            "Does the narrative build convincingly?"
        ),
    ),
    "contribution": ReviewOption(
        label="Contribution to Knowledge",
        prompt=(
            "**Contribution to Knowledge:** Determine the originality and significance of the "
            "work. What new insights, methods, or findings does it offer to the field?"
        ),
    ),
    "gaps": ReviewOption(
        label="Research Gaps",
        prompt=(
            "**Research Gaps:** Identify any potential gaps in the research or areas for "
            "future investigation that the text reveals or fails to address."
        ),
    ),
    "conclusion": ReviewOption(
        label="Conclusion & Future Work",
        prompt=(
            "**Conclusion and Future Work:** Analyze the conclusion. Does it effectively "
            "summarize findings? Does it convincingly state the contribution? Are suggestions "
            "for future work thoughtful and relevant?"
        ),
    ),
}

MANUSCRIPT_REVIEW_OPTIONS: dict[str, ReviewOption] = {
    "title_abstract": ReviewOption(
        label="Title & Abstract",
        prompt=(
            "**Title & Abstract:** Assess the title's impact and the abstract's accuracy in "
            "summarizing the work for a journal audience."
        ),
    ),
    "introduction": ReviewOption(
        label="Introduction",
        prompt=(
            "**Introduction:** Evaluate if the introduction clearly states the research "
            "problem, establishes a gap in current knowledge, and presents a compelling "
            "hypothesis or objective."
        ),
    ),
    "methods": ReviewOption(
        label="Methods",
        prompt=(
            "**Methods:** Critique the methodology for clarity, appropriateness, and "
            "replicability. Is there enough detail for another researcher to reproduce the "
            "experiments?"
        ),
    ),
    "results": ReviewOption(
        label="Results",
        prompt=(
            "**Results:** Analyze the presentation of results. Are they clear, logical, and "
            "well-supported by data, figures, and tables? Is there any interpretation in the "
            "results section?"
        ),
    ),
    "discussion": ReviewOption(
        label="Discussion",
        prompt=(
            "**Discussion:** Assess how well the discussion interprets the results, relates "
            "them to existing literature, addresses limitations, and articulates the study's "
            "significance and contribution."
        ),
    ),
    "impact_novelty": ReviewOption(
        label="Impact & Novelty",
        prompt=(
            "**Impact & Novelty:** Determine the originality and potential impact of the "
            "work. Does it offer significant new insights that would interest a broad "
            "scientific audience?"
        ),
    ),
    "clarity_style": ReviewOption(
        label="Clarity & Writing Style",
        prompt=(
            "**Clarity & Writing Style:** Evaluate the manuscript's overall readability, "
            "conciseness, and adherence to academic writing conventions. Is the language "
            "precise and professional?"
        ),
    ),
    "journal_fit": ReviewOption(
        label="Journal Fit & Storytelling",
        prompt=(
            "**Journal Fit & Storytelling:** Assess the overall narrative. Does the "
            "manuscript tell a coherent and compelling story? Is it suitable for a "
            "high-impact journal in its field?"
        ),
    ),
}

REVIEW_OPTIONS: dict[ReviewMode, dict[str, ReviewOption]] = {
    ReviewMode.THESIS: THESIS_REVIEW_OPTIONS,
    ReviewMode.MANUSCRIPT: MANUSCRIPT_REVIEW_OPTIONS,
}

DEFAULT_SECTIONS: dict[ReviewMode, list[str]] = {
    ReviewMode.THESIS: ["literature", "soundness", "contribution", "gaps"],
    ReviewMode.MANUSCRIPT: ["introduction", "methods", "results", "discussion"],
}


class _PlanModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Theorem(_PlanModel):
    """Mathematical principle underpinning a methodology step."""
    name: str
    explanation: str


class MethodologyStep(_PlanModel):
    id: str
    title: str
    details: str
    # Absent for qualitative steps.
    theorem: Optional[Theorem] = None

    @property
    def has_theorem(self) -> bool:
        return self.theorem is not None


class MethodologyStage(_PlanModel):
    """Group of steps that can run in parallel."""
    stage: int
    title: str
    steps: list[MethodologyStep]


class ResearchPlan(_PlanModel):
    """Generated research plan."""
    title: str
    abstract: str
    introduction: str
    research_questions: list[str]
    methodology_flowchart: list[MethodologyStage]
    contribution: str
    limitations: str
