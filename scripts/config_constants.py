#!/usr/bin/env python3
"""
Shared Configuration Constants for the AI Review Teammate
Centralized configuration to avoid magic numbers across modules.
"""
import sys

__version__ = "1.0.0"

# ============================================================================
# LLM Model Configuration
# ============================================================================

# llama-3.3-70b-versatile: default model for both the overview and the detailed review
MODEL_PR_REVIEW = "llama-3.3-70b-versatile"
MODEL_CONFIG_CHECK = "llama-3.3-70b-versatile"

DEFAULT_REVIEW_DEPTH = "comprehensive"
DEFAULT_MAX_TOKENS = 2000  # Completion cap per model call
DEFAULT_TEMPERATURE = 0.3

# ============================================================================
# Change-Set Size Limits
# ============================================================================

# Rough heuristic, not a tokenizer: about 4 characters per token for English and code.
# Override with CHARS_PER_TOKEN when a model tokenizes very differently.
CHARS_PER_TOKEN = 4

DEFAULT_TOKEN_BUDGET = 6000  # Approximate tokens of change-set text per request
DEFAULT_MAX_PATCH_CHARS = 4000  # Diff excerpt cap per file

PATCH_TRUNCATION_MARKER = "... [diff truncated]"
NO_PATCH_PLACEHOLDER = "_No diff available (binary file or diff not provided by the host)._"

# ============================================================================
# GitHub API Configuration
# ============================================================================

GITHUB_API_URL = "https://api.github.com"
HTTP_TIMEOUT_SECONDS = 30  # Timeout for HTTP requests to the GitHub API
FILES_PER_PAGE = 100  # GitHub maximum for the pull request files listing
MAX_FILE_PAGES = 30  # GitHub stops listing pull request files at 3000
USER_AGENT = "AI-Review-Teammate/1.0"

# ============================================================================
# Helper Functions
# ============================================================================

def read_int_setting(environ, name: str, default: int, minimum: int = 1) -> int:
    """
    Read a positive integer setting from an environment mapping.

    Invalid or out-of-range values fall back to the default with a warning
    instead of failing the run.
    """
    raw = environ.get(name, "")
    if not raw or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        print(f"⚠️ Invalid {name} ({raw!r}), using default {default}", file=sys.stderr)
        return default
    if value < minimum:
        print(f"⚠️ {name} too small ({value}), using default {default}", file=sys.stderr)
        return default
    return value


def read_float_setting(environ, name: str, default: float) -> float:
    """Read a float setting, falling back to the default when empty or malformed."""
    raw = environ.get(name, "")
    if not raw or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        print(f"⚠️ Invalid {name} ({raw!r}), using default {default}", file=sys.stderr)
        return default
