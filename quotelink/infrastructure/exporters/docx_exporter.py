import io

from docx import Document

from quotelink.core.models.review import ResearchPlan


def _to_bytes(doc) -> bytes:
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def feedback_to_docx(feedback: str) -> bytes:
    """Review feedback, one paragraph per line; **spans** become bold runs."""
    doc = Document()
    for line in feedback.split("\n"):
        paragraph = doc.add_paragraph()
        for i, part in enumerate(line.split("**")):
            if part:
                paragraph.add_run(part).bold = i % 2 == 1
    return _to_bytes(doc)


def plan_to_docx(plan: ResearchPlan) -> bytes:
    doc = Document()
    doc.add_heading(plan.title, level=0)

    doc.add_heading("Abstract", level=1)
    doc.add_paragraph(plan.abstract)
    doc.add_heading("Introduction", level=1)
    doc.add_paragraph(plan.introduction)

    doc.add_heading("Research Questions", level=1)
    for question in plan.research_questions:
        doc.add_paragraph(question, style="List Bullet")

    doc.add_heading("Methodology", level=1)
    for stage in plan.methodology_flowchart:
        doc.add_heading(f"Stage {stage.stage}: {stage.title}", level=2)
        for step in stage.steps:
            doc.add_heading(step.title, level=3)
            doc.add_paragraph(step.details)
            if step.has_theorem:
                principle = doc.add_paragraph()
                principle.add_run("Supporting Principle: ").bold = True
                principle.add_run(step.theorem.name)
                doc.add_paragraph(step.theorem.explanation)

    doc.add_heading("Expected Contribution", level=1)
    doc.add_paragraph(plan.contribution)
    doc.add_heading("Potential Limitations", level=1)
    doc.add_paragraph(plan.limitations)
    return _to_bytes(doc)
