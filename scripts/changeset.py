#!/usr/bin/env python3
"""
Change-Set Summarizer
Turns the per-file listing of a pull request into one bounded text block
for the review prompts.

Token sizes are estimated with a fixed characters-per-token ratio
(CHARS_PER_TOKEN). This is an approximation, not a tokenizer: the budget is
a soft guide for how much diff text goes into a single request.
"""
import math
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

from config_constants import (
    CHARS_PER_TOKEN,
    NO_PATCH_PLACEHOLDER,
    PATCH_TRUNCATION_MARKER,
)


class FileChange(NamedTuple):
    """One modified file of a change set"""
    path: str
    lines_added: int
    lines_removed: int
    status: str
    patch: Optional[str] = None
    previous_path: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FileChange':
        """Build from a GitHub pull request file record"""
        return cls(
            path=data.get('filename', ''),
            lines_added=data.get('additions', 0),
            lines_removed=data.get('deletions', 0),
            status=data.get('status', 'modified'),
            patch=data.get('patch'),
            previous_path=data.get('previous_filename'),
        )


class ChangeSetSummary(NamedTuple):
    text: str
    included_count: int
    total_count: int
    truncated: bool


def estimate_tokens(text: str, chars_per_token: int = CHARS_PER_TOKEN) -> int:
    """Approximate token count: ceil(len / chars_per_token)"""
    return math.ceil(len(text) / chars_per_token)


def render_patch_excerpt(patch: Optional[str], max_patch_chars: int) -> str:
    if patch is None:
        return NO_PATCH_PLACEHOLDER + "\n"
    if len(patch) > max_patch_chars:
        patch = patch[:max_patch_chars] + "\n" + PATCH_TRUNCATION_MARKER
    return f"```diff\n{patch}\n```\n"


def render_file_section(change: FileChange, max_patch_chars: int) -> str:
    """
    Render one file as a markdown section.

    The section ends with a blank line so sections can be concatenated
    directly; its length is what the budget is charged for.
    """
    status = change.status
    if change.previous_path and change.previous_path != change.path:
        status = f"{status} (from `{change.previous_path}`)"

    return (
        f"### `{change.path}`\n"
        f"- Status: {status}\n"
        f"- Lines: +{change.lines_added} / -{change.lines_removed}\n"
        f"\n"
        f"{render_patch_excerpt(change.patch, max_patch_chars)}"
        f"\n"
    )


def truncation_note(included_count: int, total_count: int) -> str:
    return (
        f"_Note: showing {included_count} of {total_count} changed files; "
        f"the rest were omitted to fit the token budget._\n"
    )


def summarize(
    files: Sequence[FileChange],
    budget_tokens: int,
    max_patch_chars: int,
    chars_per_token: int = CHARS_PER_TOKEN,
) -> ChangeSetSummary:
    """
    Greedily pack file sections, in input order, into the token budget.

    The first file is always included even if it alone exceeds the budget,
    so a non-empty change set never yields an empty summary. Packing stops
    at the first section that does not fit; later, smaller files are not
    considered.
    """
    total_count = len(files)
    sections: List[str] = []
    used_tokens = 0

    for change in files:
        section = render_file_section(change, max_patch_chars)
        section_tokens = estimate_tokens(section, chars_per_token)

        if sections and used_tokens + section_tokens > budget_tokens:
            sections.append(truncation_note(len(sections), total_count))
            return ChangeSetSummary(
                text="".join(sections),
                included_count=len(sections) - 1,
                total_count=total_count,
                truncated=True,
            )

        sections.append(section)
        used_tokens += section_tokens

    return ChangeSetSummary(
        text="".join(sections),
        included_count=len(sections),
        total_count=total_count,
        truncated=False,
    )
