"""Ready-made deck outlines for common presentation types.

Each builder returns a :class:`~slidepack.presentation.Presentation` of
title-and-content slides framed by a centered title slide, so callers can
keep adding slides or settings before saving::

    from slidepack.templates import ProposalContent, business_proposal

    pres = business_proposal("Q4 Budget", "Finance", ProposalContent(
        executive_summary=["Costs are flat"],
        timeline=[("Phase 1", "Weeks 1-2")],
    ))
    pres.save("proposal.pptx")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .presentation import Presentation
from .shapes import Shape, ShapeType
from .slides import Slide, SlideLayout

logger = logging.getLogger(__name__)

QUESTIONS_TITLE = "Questions?"

# subtitle box of the 4:3 title slide
SUBTITLE_BOX = (1371600, 3886200, 6400800, 1752600)


@dataclass
class ProposalContent:
    """Content of a business proposal.

    Attributes:
        executive_summary: Key points for the summary slide.
        problem: Problem statement bullets.
        solution: Proposed solution bullets.
        timeline: (phase, description) pairs.
        budget: (item, amount) pairs.
        next_steps: Follow-up actions.
    """
    executive_summary: list[str] = field(default_factory=lambda: ["Add executive summary points"])
    problem: list[str] = field(default_factory=lambda: ["Define the problem"])
    solution: list[str] = field(default_factory=lambda: ["Present your solution"])
    timeline: list[tuple[str, str]] = field(default_factory=lambda: [("Phase 1", "Description")])
    budget: list[tuple[str, str]] = field(default_factory=lambda: [("Item", "Amount")])
    next_steps: list[str] = field(default_factory=lambda: ["Define next steps"])


@dataclass
class TrainingContent:
    """Content of a training deck; each module becomes its own slide."""
    objectives: list[str] = field(default_factory=lambda: ["Learning objective 1"])
    modules: list[tuple[str, list[str]]] = field(default_factory=lambda: [("Module 1", ["Topic 1", "Topic 2"])])
    exercises: list[str] = field(default_factory=lambda: ["Practice exercise"])
    summary: list[str] = field(default_factory=lambda: ["Key takeaway"])


@dataclass
class StatusContent:
    """Content of a status report. Empty ``blocked`` or ``metrics`` drop their slide."""
    summary: list[str] = field(default_factory=lambda: ["High-level status"])
    completed: list[str] = field(default_factory=lambda: ["Completed item"])
    in_progress: list[str] = field(default_factory=lambda: ["In progress item"])
    blocked: list[str] = field(default_factory=lambda: ["Blocked item"])
    next_week: list[str] = field(default_factory=lambda: ["Planned item"])
    metrics: list[tuple[str, str]] = field(default_factory=lambda: [("Metric", "Value")])


@dataclass
class TechnicalContent:
    """Content of a technical overview. Empty ``api_examples`` drops the API slide."""
    overview: list[str] = field(default_factory=lambda: ["System overview"])
    architecture: list[str] = field(default_factory=lambda: ["Architecture description"])
    components: list[tuple[str, list[str]]] = field(default_factory=lambda: [("Component", ["Feature 1"])])
    api_examples: list[tuple[str, str]] = field(default_factory=lambda: [("Method", "Description")])
    best_practices: list[str] = field(default_factory=lambda: ["Best practice"])


def _title_slide(title: str, subtitle: Optional[str] = None) -> Slide:
    slide = Slide(title=title, layout=SlideLayout.CENTERED_TITLE)
    if not subtitle:
        return slide
    return slide.add_shape(Shape(ShapeType.RECTANGLE, *SUBTITLE_BOX).with_text(subtitle).with_name("Subtitle"))


def _bullet_slide(title: str, bullets: Iterable[str]) -> Slide:
    return Slide(title=title).add_bullets([str(b) for b in bullets])


def _pairs(pairs: Iterable[tuple[str, str]], separator: str = ": ") -> list[str]:
    return [f"{key}{separator}{value}" for key, value in pairs]


def _presentation(title: str, author: Optional[str], slides: list[Slide], kind: str) -> Presentation:
    pres = Presentation(title=title, slides=tuple(slides))
    if author:
        pres = pres.with_author(author)
    logger.info(f"Built {kind} '{title}' with {len(slides)} slides")
    return pres


def business_proposal(title: str, author: str, content: Optional[ProposalContent] = None) -> Presentation:
    """Title, agenda, summary, problem, solution, timeline, budget, next steps and Q&A.

    Args:
        title: Deck title, also shown on the title slide.
        author: Shown under the title and recorded as the document author.
        content: Slide content; placeholder text when omitted.
    """
    content = content or ProposalContent()
    slides = [
        _title_slide(title, author),
        _bullet_slide("Agenda", [
            "Executive Summary",
            "Problem Statement",
            "Proposed Solution",
            "Timeline & Budget",
            "Next Steps",
        ]),
        _bullet_slide("Executive Summary", content.executive_summary),
        _bullet_slide("Problem Statement", content.problem),
        _bullet_slide("Proposed Solution", content.solution),
        _bullet_slide("Timeline", _pairs(content.timeline)),
        _bullet_slide("Budget", _pairs(content.budget)),
        _bullet_slide("Next Steps", content.next_steps),
        _title_slide(QUESTIONS_TITLE, "Discussion and Q&A"),
    ]
    return _presentation(title, author, slides, "business proposal")


def training_material(title: str, author: str, content: Optional[TrainingContent] = None) -> Presentation:
    """Title, objectives, one slide per module, exercises, summary and Q&A."""
    content = content or TrainingContent()
    slides = [_title_slide(title, author), _bullet_slide("Learning Objectives", content.objectives)]
    slides.extend(_bullet_slide(name, topics) for name, topics in content.modules)
    slides += [
        _bullet_slide("Exercises", content.exercises),
        _bullet_slide("Summary", content.summary),
        _title_slide(QUESTIONS_TITLE),
    ]
    return _presentation(title, author, slides, "training deck")


def status_report(title: str, date: str, content: Optional[StatusContent] = None) -> Presentation:
    """Title, summary, completed, in progress, blocked, next week and metrics.

    Args:
        title: Deck title.
        date: Reporting date, shown under the title.
        content: Slide content; placeholder text when omitted.
    """
    content = content or StatusContent()
    slides = [
        _title_slide(title, date),
        _bullet_slide("Executive Summary", content.summary),
        _bullet_slide("Completed ✓", content.completed),
        _bullet_slide("In Progress", content.in_progress),
    ]
    if content.blocked:
        slides.append(_bullet_slide("Blocked / Risks", content.blocked))
    slides.append(_bullet_slide("Next Week", content.next_week))
    if content.metrics:
        slides.append(_bullet_slide("Key Metrics", _pairs(content.metrics)))
    return _presentation(title, None, slides, "status report")


def technical_doc(title: str, version: str, content: Optional[TechnicalContent] = None) -> Presentation:
    """Title, overview, architecture, one slide per component, API reference and best practices."""
    content = content or TechnicalContent()
    slides = [
        _title_slide(title, f"Version {version}"),
        _bullet_slide("Overview", content.overview),
        _bullet_slide("Architecture", content.architecture),
    ]
    slides.extend(_bullet_slide(name, features) for name, features in content.components)
    if content.api_examples:
        slides.append(_bullet_slide("API Reference", _pairs(content.api_examples, " - ")))
    slides.append(_bullet_slide("Best Practices", content.best_practices))
    return _presentation(title, None, slides, "technical overview")


def simple(title: str, slides: Sequence[tuple[str, Sequence[str]]]) -> Presentation:
    """One title-and-content slide per (title, bullets) pair."""
    return _presentation(title, None, [_bullet_slide(name, bullets) for name, bullets in slides], "deck")
