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

"""
GitHub REST helpers for the review action.
Both calls raise requests exceptions on failure; the caller decides how to report them.
"""
import sys
from typing import Any, Dict, List

import requests

from config_constants import (
    FILES_PER_PAGE,
    GITHUB_API_URL,
    HTTP_TIMEOUT_SECONDS,
    MAX_FILE_PAGES,
    USER_AGENT,
)


def _headers(token: str) -> Dict[str, str]:
    return {
        'Authorization': f'Bearer {token}',
        'Accept': 'application/vnd.github+json',
        'User-Agent': USER_AGENT,
    }


def list_pull_request_files(token: str, repo: str, pr_number: int) -> List[Dict[str, Any]]:
    """
    List every changed file of a pull request.

    Follows the Link header across pages. GitHub itself stops at 3000 files,
    so the page count is capped to match.
    """
    url = f"{GITHUB_API_URL}/repos/{repo}/pulls/{pr_number}/files"
    params = {'per_page': FILES_PER_PAGE}
    files: List[Dict[str, Any]] = []

    for _ in range(MAX_FILE_PAGES):
        response = requests.get(url, headers=_headers(token), params=params, timeout=HTTP_TIMEOUT_SECONDS)
        response.raise_for_status()

        page = response.json()
        if not isinstance(page, list):
            raise ValueError(f"Unexpected files payload: {type(page).__name__}")
        files.extend(page)

        next_url = response.links.get('next', {}).get('url')
        if not next_url:
            break
        # The next link already carries the query string
        url, params = next_url, None
    else:
        print(f"⚠️ Stopped listing files after {MAX_FILE_PAGES} pages", file=sys.stderr)

    return files


def create_review(token: str, repo: str, pr_number: int, body: str, event: str = 'COMMENT') -> Dict[str, Any]:
    """Post a pull request review with a markdown body"""
    url = f"{GITHUB_API_URL}/repos/{repo}/pulls/{pr_number}/reviews"
    response = requests.post(
        url,
        headers=_headers(token),
        json={'body': body, 'event': event},
        timeout=HTTP_TIMEOUT_SECONDS,
    )
    response.raise_for_status()
    return response.json()
