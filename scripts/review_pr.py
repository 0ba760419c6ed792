#!/usr/bin/env python3
# Copyright 2025 vijayabhaskar78
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import os
import sys
import json
import uuid
from typing import Any, Dict, List, Mapping, NamedTuple, Optional

import requests
from groq import Groq, GroqError

from changeset import FileChange, summarize
from github_api import create_review, list_pull_request_files
from prompts import PromptPair, build_prompt_pairs, resolve_depth
from config_constants import (
    CHARS_PER_TOKEN,
    DEFAULT_MAX_PATCH_CHARS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_REVIEW_DEPTH,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOKEN_BUDGET,
    MODEL_PR_REVIEW,
    read_float_setting,
    read_int_setting,
)

# Failure stages, in the order the run reaches them
STAGE_CONFIG = 'config'
STAGE_CONTEXT = 'context'
STAGE_FETCH = 'fetch'
STAGE_GENERATE = 'generate'
STAGE_POST_OVERVIEW = 'post_overview'
STAGE_POST_REVIEW = 'post_review'


class StageError(NamedTuple):
    stage: str
    message: str


class StepResult:
    """Outcome of one boundary step: a value, or the stage that failed and why"""

    def __init__(self, value: Any = None, error: Optional[StageError] = None):
        self.value = value
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> 'StepResult':
        return cls(value=value)

    @classmethod
    def failure(cls, stage: str, message: str) -> 'StepResult':
        return cls(error=StageError(stage, message))

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {'ok': self.value}
        return {'error': {'stage': self.error.stage, 'message': self.error.message}}


class ReviewConfig(NamedTuple):
    groq_api_key: str
    github_token: str
    model: str = MODEL_PR_REVIEW
    review_depth: str = DEFAULT_REVIEW_DEPTH
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    token_budget: int = DEFAULT_TOKEN_BUDGET
    max_patch_chars: int = DEFAULT_MAX_PATCH_CHARS
    chars_per_token: int = CHARS_PER_TOKEN


class PullRequestContext(NamedTuple):
    repo: str
    pr_number: int

    @property
    def owner(self) -> str:
        return self.repo.split('/', 1)[0]

    @property
    def name(self) -> str:
        return self.repo.split('/', 1)[1]


class Completion(NamedTuple):
    content: str
    usage: Optional[Dict[str, int]]


class ReviewOutcome(NamedTuple):
    overview: str
    review: str
    included_count: int
    total_count: int


# ============================================================================
# Process boundary: configuration and pull request context
# ============================================================================

def load_config(environ: Mapping[str, str]) -> StepResult:
    """Build the run configuration from action inputs exposed as environment variables"""
    missing = [name for name in ('GROQ_API_KEY', 'GITHUB_TOKEN') if not environ.get(name)]
    if missing:
        return StepResult.failure(
            STAGE_CONFIG,
            f"Missing required configuration: {', '.join(missing)}. "
            "Please check your groq_api_key and github_token inputs."
        )

    return StepResult.success(ReviewConfig(
        groq_api_key=environ['GROQ_API_KEY'],
        github_token=environ['GITHUB_TOKEN'],
        model=environ.get('MODEL') or MODEL_PR_REVIEW,
        review_depth=environ.get('REVIEW_DEPTH') or DEFAULT_REVIEW_DEPTH,
        max_tokens=read_int_setting(environ, 'MAX_TOKENS', DEFAULT_MAX_TOKENS),
        temperature=read_float_setting(environ, 'REVIEW_TEMPERATURE', DEFAULT_TEMPERATURE),
        token_budget=read_int_setting(environ, 'TOKEN_BUDGET', DEFAULT_TOKEN_BUDGET),
        max_patch_chars=read_int_setting(environ, 'MAX_PATCH_CHARS', DEFAULT_MAX_PATCH_CHARS),
        chars_per_token=read_int_setting(environ, 'CHARS_PER_TOKEN', CHARS_PER_TOKEN),
    ))


def _pr_number_from_event(event_path: Optional[str]) -> Optional[int]:
    if not event_path:
        return None
    try:
        with open(event_path, 'r', encoding='utf-8') as f:
            event = json.load(f)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        print(f"⚠️ Could not read event payload: {e}", file=sys.stderr)
        return None
    pull_request = event.get('pull_request') if isinstance(event, dict) else None
    if not isinstance(pull_request, dict):
        return None
    return pull_request.get('number')


def load_context(environ: Mapping[str, str]) -> StepResult:
    """
    Locate the pull request this run is about.

    The event payload wins; PR_NUMBER is the fallback for non pull_request
    triggers such as workflow_dispatch.
    """
    missing = StepResult.failure(
        STAGE_CONTEXT,
        "Missing required PR information. "
        "Ensure this action runs on pull_request events or provide pr_number input."
    )

    repo = environ.get('GITHUB_REPOSITORY', '')
    owner, _, name = repo.partition('/')
    if not owner or not name:
        return missing

    pr_number = _pr_number_from_event(environ.get('GITHUB_EVENT_PATH'))
    if pr_number is None:
        pr_number = environ.get('PR_NUMBER')
    try:
        pr_number = int(pr_number) if pr_number else None
    except (ValueError, TypeError):
        pr_number = None
    if not pr_number or pr_number <= 0:
        return missing

    return StepResult.success(PullRequestContext(repo=repo, pr_number=pr_number))


# ============================================================================
# Collaborators
# ============================================================================

def _usage_dict(usage: Any) -> Optional[Dict[str, int]]:
    if usage is None:
        return None
    try:
        return {
            'prompt_tokens': int(getattr(usage, 'prompt_tokens')),
            'completion_tokens': int(getattr(usage, 'completion_tokens')),
            'total_tokens': int(getattr(usage, 'total_tokens')),
        }
    except (AttributeError, TypeError, ValueError):
        return None


def generate_completion(client, model: str, prompt: PromptPair, max_tokens: int, temperature: float) -> Completion:
    """One chat completion for a system/task prompt pair"""
    response = client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": prompt.system_prompt},
            {"role": "user", "content": prompt.task_prompt},
        ],
        max_tokens=max_tokens,
        temperature=temperature,
    )
    if not response.choices:
        raise ValueError("No response from LLM")
    content = (response.choices[0].message.content or "").strip()
    if not content:
        raise ValueError("Empty response content from LLM")
    return Completion(content=content, usage=_usage_dict(getattr(response, 'usage', None)))


def annotate_usage(completion: Completion, label: str) -> str:
    """Append a token usage footer when the provider reported usage"""
    if not completion.usage:
        return completion.content
    usage = completion.usage
    return (
        f"{completion.content}\n\n"
        f"---\n"
        f"📊 Token Usage - {label}: "
        f"{usage['prompt_tokens']} prompt + {usage['completion_tokens']} completion "
        f"= {usage['total_tokens']} total"
    )


def write_outputs(outputs: Dict[str, str], output_path: Optional[str]) -> None:
    """Append step outputs using the multi-line GITHUB_OUTPUT syntax"""
    if not output_path:
        print("⚠️ GITHUB_OUTPUT not set, skipping step outputs", file=sys.stderr)
        return
    with open(output_path, 'a', encoding='utf-8') as f:
        for name, value in outputs.items():
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


# ============================================================================
# Steps
# ============================================================================

def fetch_file_changes(config: ReviewConfig, context: PullRequestContext) -> StepResult:
    try:
        records = list_pull_request_files(config.github_token, context.repo, context.pr_number)
    except (requests.exceptions.RequestException, ValueError) as e:
        print(f"❌ Failed to fetch PR files: {e}", file=sys.stderr)
        return StepResult.failure(STAGE_FETCH, f"Failed to fetch PR files: {e}")
    return StepResult.success([FileChange.from_dict(r) for r in records])


def generate_step(client, config: ReviewConfig, prompt: PromptPair) -> StepResult:
    try:
        completion = generate_completion(client, config.model, prompt, config.max_tokens, config.temperature)
    except (GroqError, ValueError) as e:
        return StepResult.failure(STAGE_GENERATE, str(e))
    return StepResult.success(completion)


def post_step(config: ReviewConfig, context: PullRequestContext, body: str, stage: str, what: str) -> StepResult:
    try:
        create_review(config.github_token, context.repo, context.pr_number, body)
    except requests.exceptions.RequestException as e:
        print(f"❌ Failed to post {what}: {e}", file=sys.stderr)
        return StepResult.failure(stage, f"Failed to post {what}: {e}")
    return StepResult.success()


def run(config: ReviewConfig, context: PullRequestContext, client, output_path: Optional[str] = None) -> StepResult:
    """
    Fetch, summarize, generate and post, strictly in that order.

    The first failing step ends the run. Outputs are written after both
    completions, so they survive a later posting failure; an overview that
    was already posted is left in place.
    """
    depth = resolve_depth(config.review_depth)

    fetched = fetch_file_changes(config, context)
    if not fetched.ok:
        return fetched
    files: List[FileChange] = fetched.value

    summary = summarize(files, config.token_budget, config.max_patch_chars, config.chars_per_token)
    print(f"📂 Including {summary.included_count} of {summary.total_count} changed files", file=sys.stderr)
    if summary.truncated:
        print(f"⚠️ Change set truncated to fit ~{config.token_budget} tokens", file=sys.stderr)

    overview_prompt, review_prompt = build_prompt_pairs(summary, depth)

    print("🔍 Generating overview and changes...", file=sys.stderr)
    overview = generate_step(client, config, overview_prompt)
    if not overview.ok:
        return overview

    print(f"🔍 Generating detailed review ({depth.value})...", file=sys.stderr)
    review = generate_step(client, config, review_prompt)
    if not review.ok:
        return review

    overview_body = annotate_usage(overview.value, 'Overview')
    review_body = annotate_usage(review.value, 'Detailed Review')
    write_outputs({'overview': overview_body, 'review': review_body}, output_path)

    print("📝 Posting overview and changes...", file=sys.stderr)
    posted = post_step(config, context, overview_body, STAGE_POST_OVERVIEW, 'overview')
    if not posted.ok:
        return posted

    print("📝 Posting detailed review...", file=sys.stderr)
    posted = post_step(config, context, review_body, STAGE_POST_REVIEW, 'detailed review')
    if not posted.ok:
        return posted

    return StepResult.success(ReviewOutcome(
        overview=overview_body,
        review=review_body,
        included_count=summary.included_count,
        total_count=summary.total_count,
    ))


def fail(message: str) -> int:
    print(f"❌ Error during AI review: {message}", file=sys.stderr)
    print(f"::error::AI review failed: {message}")
    return 1


def main() -> int:
    environ = os.environ

    loaded = load_config(environ)
    if not loaded.ok:
        return fail(loaded.error.message)
    config: ReviewConfig = loaded.value

    located = load_context(environ)
    if not located.ok:
        return fail(located.error.message)
    context: PullRequestContext = located.value

    print("🤖 AI Review Teammate - Starting PR Review...", file=sys.stderr)
    print(f"📝 Analyzing PR: #{context.pr_number}", file=sys.stderr)
    print(f"🔗 Repository: {context.owner}/{context.name}", file=sys.stderr)

    try:
        client = Groq(api_key=config.groq_api_key)
        result = run(config, context, client, output_path=environ.get('GITHUB_OUTPUT'))
    except Exception as e:
        return fail(str(e))
    if not result.ok:
        return fail(result.error.message)

    print("🎉 AI review completed successfully!", file=sys.stderr)
    print("✅ Posted overview and changes message", file=sys.stderr)
    print("✅ Posted detailed review comment", file=sys.stderr)
    return 0


if __name__ == '__main__':
    sys.exit(main())
