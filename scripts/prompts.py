#!/usr/bin/env python3
"""
Review Prompts
XML-structured prompts for the overview and the detailed review.

Templates are looked up by review depth. Each template owns an ordered
section table; the Overview and Changes sections are always shown, every
analytical section is collapsed inside <details> in the posted comment.
To add a depth, add a ReviewDepth member, a TemplateId and a TEMPLATES entry.
"""
from enum import Enum
from typing import Dict, NamedTuple, Tuple, Union

from changeset import ChangeSetSummary
from config_constants import DEFAULT_REVIEW_DEPTH

OVERVIEW_TITLE = "🤖 AI Review Teammate - Change Overview"
REVIEW_TITLE = "🤖 AI Review Teammate - Detailed Review"


class ReviewDepth(Enum):
    BASIC = "basic"
    COMPREHENSIVE = "comprehensive"
    EXPERT = "expert"


class TemplateId(Enum):
    BASIC = "basic"
    COMPREHENSIVE = "comprehensive"
    EXPERT = "expert"


class PromptPair(NamedTuple):
    system_prompt: str
    task_prompt: str


class ReviewSection(NamedTuple):
    key: str
    title: str
    guidance: str
    collapsed: bool


class ReviewTemplate(NamedTuple):
    template_id: TemplateId
    label: str
    context: str
    detail_level: str
    sections: Tuple[ReviewSection, ...]
    instructions: Tuple[str, ...]

    @property
    def visible_sections(self) -> Tuple[ReviewSection, ...]:
        return tuple(s for s in self.sections if not s.collapsed)

    @property
    def collapsed_sections(self) -> Tuple[ReviewSection, ...]:
        return tuple(s for s in self.sections if s.collapsed)


def _visible(key, title, guidance):
    return ReviewSection(key, title, guidance, collapsed=False)


def _collapsed(key, title, guidance):
    return ReviewSection(key, title, guidance, collapsed=True)


OVERVIEW = _visible(
    'overview', 'Overview',
    'Two or three sentences on what the change set does and why it matters.')
CHANGES = _visible(
    'changes', 'Changes',
    'One bullet per changed file: the file path in backticks and a short description of what changed.')

TEMPLATES: Dict[TemplateId, ReviewTemplate] = {
    TemplateId.BASIC: ReviewTemplate(
        template_id=TemplateId.BASIC,
        label=ReviewDepth.BASIC.value,
        context='You are an AI teammate performing a focused, concise code review of simple changes.',
        detail_level='Keep it short. Highlight only critical issues.',
        sections=(
            OVERVIEW,
            CHANGES,
            _collapsed('key_points', '🎯 Key Points',
                       'The most important strengths and risks, at most five bullets.'),
            _collapsed('recommendations', '💡 Recommendations',
                       'Brief, actionable fixes for the critical issues only.'),
        ),
        instructions=(
            'Keep the review concise and focused',
            'Highlight only critical issues',
            'Provide brief, actionable feedback',
        ),
    ),
    TemplateId.COMPREHENSIVE: ReviewTemplate(
        template_id=TemplateId.COMPREHENSIVE,
        label=ReviewDepth.COMPREHENSIVE.value,
        context='You are an AI teammate reviewing code changes. Provide comprehensive, helpful feedback.',
        detail_level='Be thorough and constructive; explain the reasoning behind each point.',
        sections=(
            OVERVIEW,
            CHANGES,
            _collapsed('strengths', '✅ Strengths',
                       'What the change does well.'),
            _collapsed('risks', '⚠️ Potential Issues',
                       'Bugs, regressions and risky assumptions, each tied to a file.'),
            _collapsed('security', '🔒 Security Considerations',
                       'Input handling, secrets, injection and access-control concerns.'),
            _collapsed('maintainability', '🧹 Maintainability',
                       'Readability, naming, duplication and test coverage.'),
            _collapsed('recommendations', '💡 Suggestions for Improvement',
                       'Specific, actionable suggestions ordered by importance.'),
        ),
        instructions=(
            'Be constructive, specific and helpful',
            'Tie every finding to a file from the change set',
            'Provide actionable feedback',
        ),
    ),
    TemplateId.EXPERT: ReviewTemplate(
        template_id=TemplateId.EXPERT,
        label=ReviewDepth.EXPERT.value,
        context='You are an AI teammate performing an expert-level, comprehensive code review.',
        detail_level=('Perform deep technical analysis and provide architectural insights '
                      'and detailed recommendations, with code examples where helpful.'),
        sections=(
            OVERVIEW,
            CHANGES,
            _collapsed('strengths', '✅ Strengths',
                       'Design and implementation choices worth keeping.'),
            _collapsed('risks', '⚠️ Potential Issues & Edge Cases',
                       'Failure modes, edge cases and concurrency or ordering hazards.'),
            _collapsed('security', '🔒 Security Assessment',
                       'Vulnerabilities with severity and a concrete exploit scenario where one exists.'),
            _collapsed('performance', '⚡ Performance Analysis',
                       'Complexity, I/O, allocation and hot-path implications.'),
            _collapsed('maintainability', '🧹 Maintainability & Technical Debt',
                       'Coupling, abstractions and debt introduced or paid down.'),
            _collapsed('testing', '🧪 Testing Recommendations',
                       'Missing tests and the cases they should cover.'),
            _collapsed('architecture', '🏗️ Architectural Impact',
                       'Effects on module boundaries, interfaces and data flow.'),
            _collapsed('recommendations', '💡 Expert Recommendations',
                       'Detailed, prioritized recommendations with code examples where helpful.'),
        ),
        instructions=(
            'Consider edge cases and potential failures',
            'Analyze performance implications',
            'Assess architectural impact',
            'Include code examples where helpful',
        ),
    ),
}

_TEMPLATE_FOR_DEPTH = {
    ReviewDepth.BASIC: TemplateId.BASIC,
    ReviewDepth.COMPREHENSIVE: TemplateId.COMPREHENSIVE,
    ReviewDepth.EXPERT: TemplateId.EXPERT,
}


def resolve_depth(value: Union[ReviewDepth, str, None]) -> ReviewDepth:
    """
    Resolve free-form input to a review depth.

    Matching is case-insensitive; anything unrecognized falls back to
    comprehensive.
    """
    if isinstance(value, ReviewDepth):
        return value
    normalized = (value or '').strip().lower()
    for depth in ReviewDepth:
        if depth.value == normalized:
            return depth
    return ReviewDepth(DEFAULT_REVIEW_DEPTH)


def select_template(depth: Union[ReviewDepth, str, None]) -> TemplateId:
    return _TEMPLATE_FOR_DEPTH[resolve_depth(depth)]


def get_template(depth: Union[ReviewDepth, str, None]) -> ReviewTemplate:
    return TEMPLATES[select_template(depth)]


def _render_section_format(section: ReviewSection) -> str:
    if section.collapsed:
        return (
            f"    <section collapsed=\"true\">\n"
            f"      <format><![CDATA[<details>\n<summary>{section.title}</summary>\n\n...\n\n</details>]]></format>\n"
            f"      <content>{section.guidance}</content>\n"
            f"    </section>"
        )
    return (
        f"    <section collapsed=\"false\">\n"
        f"      <format>## {section.title}</format>\n"
        f"      <content>{section.guidance}</content>\n"
        f"    </section>"
    )


def _render_sections(sections) -> str:
    return "\n".join(_render_section_format(s) for s in sections)


def _render_instructions(lines) -> str:
    return "\n".join(f"    - {line}" for line in lines)


def render_system_prompt(depth: Union[ReviewDepth, str, None]) -> str:
    """System role block shared by both model calls"""
    template = get_template(depth)
    return f"""<system_role>
  <identity>Expert AI Code Reviewer - your AI review teammate</identity>
  <focus>ONLY the actual code changes</focus>
  <ignore>PR titles, descriptions, or other metadata</ignore>
  <approach>thorough, constructive feedback based solely on code modifications</approach>
  <output_format>structured markdown with clear sections</output_format>
  <review_depth>{template.label}</review_depth>
</system_role>"""


def render_overview_prompt(summary: ChangeSetSummary, depth: Union[ReviewDepth, str, None]) -> str:
    """
    Task prompt for the first comment: overview and file-level changes only.

    Analytical sections are left to the detailed review so the two
    comments do not repeat each other.
    """
    template = get_template(depth)
    return f"""<overview_and_changes_request>
  <context>
    You are an AI teammate summarizing a pull request. Describe WHAT changed, not whether it is good.
  </context>

  <files_changed>
{summary.text}
  </files_changed>

  <output_structure>
    <title># {OVERVIEW_TITLE}</title>
{_render_sections(template.visible_sections)}
  </output_structure>

  <instructions>
    - Do not review or critique the code here; a separate detailed review comment covers that
    - Mention every file listed above
    - Format your response in markdown
    - Review depth: {template.label}
  </instructions>
</overview_and_changes_request>"""


def render_task_prompt(summary: ChangeSetSummary, depth: Union[ReviewDepth, str, None]) -> str:
    """Task prompt for the detailed review comment at the given depth"""
    template = get_template(depth)
    return f"""<review_request>
  <context>
    {template.context}
    This is a separate detailed review comment; the overview and per-file changes are posted on their own.
  </context>

  <files_changed>
{summary.text}
  </files_changed>

  <output_structure>
    <title># {REVIEW_TITLE}</title>
{_render_sections(template.collapsed_sections)}
  </output_structure>

  <instructions>
    - Focus ONLY on the code changes themselves
    - Do not repeat the overview or the list of changes
{_render_instructions(template.instructions)}
    - Format your response in markdown
    - Level of detail: {template.detail_level}
    - Review depth: {template.label}
  </instructions>
</review_request>"""


def build_prompt_pairs(
    summary: ChangeSetSummary,
    depth: Union[ReviewDepth, str, None],
) -> Tuple[PromptPair, PromptPair]:
    """Return (overview, detailed review) prompt pairs"""
    system_prompt = render_system_prompt(depth)
    return (
        PromptPair(system_prompt, render_overview_prompt(summary, depth)),
        PromptPair(system_prompt, render_task_prompt(summary, depth)),
    )
