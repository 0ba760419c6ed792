#!/usr/bin/env python3
"""
Change-Set Summarizer Tests
Budget packing, first-file exemption and diff excerpt rules.
"""
import sys
import unittest
from pathlib import Path

# Add scripts to path
sys.path.insert(0, str(Path(__file__).resolve().parent / 'scripts'))

from changeset import (  # noqa: E402
    ChangeSetSummary,
    FileChange,
    estimate_tokens,
    render_file_section,
    summarize,
)
from config_constants import NO_PATCH_PLACEHOLDER, PATCH_TRUNCATION_MARKER  # noqa: E402


def make_change(path='a.js', added=5, removed=2, status='modified', patch='diff content'):
    return FileChange(path=path, lines_added=added, lines_removed=removed, status=status, patch=patch)


def sized_change(path, section_chars, max_patch_chars=4000):
    """Build a change whose rendered section is exactly section_chars long"""
    overhead = len(render_file_section(make_change(path=path, patch=''), max_patch_chars))
    return make_change(path=path, patch='+' * (section_chars - overhead))


class TestSummarize(unittest.TestCase):

    def test_empty_change_set(self):
        """Scenario A: nothing to summarize"""
        summary = summarize([], budget_tokens=1000, max_patch_chars=4000)

        self.assertEqual(summary.text, "")
        self.assertEqual(summary.included_count, 0)
        self.assertEqual(summary.total_count, 0)
        self.assertFalse(summary.truncated)

    def test_single_small_file(self):
        """Scenario B: one file well inside the budget"""
        summary = summarize([make_change()], budget_tokens=1000, max_patch_chars=4000)

        self.assertEqual(summary.included_count, 1)
        self.assertEqual(summary.total_count, 1)
        self.assertFalse(summary.truncated)
        self.assertIn("a.js", summary.text)
        self.assertIn("modified", summary.text)
        self.assertIn("+5 / -2", summary.text)
        self.assertIn("```diff\ndiff content\n```", summary.text)

    def test_budget_trips_on_second_file(self):
        """Scenario C: ~500-token sections against a 600-token budget"""
        files = [sized_change(f"file{i}.py", 2000) for i in range(3)]
        self.assertEqual(estimate_tokens(render_file_section(files[0], 4000)), 500)

        summary = summarize(files, budget_tokens=600, max_patch_chars=4000)

        self.assertEqual(summary.included_count, 1)
        self.assertEqual(summary.total_count, 3)
        self.assertTrue(summary.truncated)
        self.assertIn("1 of 3", summary.text)
        self.assertIn("file0.py", summary.text)
        self.assertNotIn("file1.py", summary.text)

    def test_oversized_first_file_is_kept(self):
        files = [sized_change("huge.py", 8000), make_change(path="small.py")]

        summary = summarize(files, budget_tokens=100, max_patch_chars=8000)

        self.assertEqual(summary.included_count, 1)
        self.assertTrue(summary.truncated)
        self.assertIn("huge.py", summary.text)
        self.assertIn("1 of 2", summary.text)

    def test_oversized_single_file_is_not_truncated(self):
        summary = summarize([sized_change("huge.py", 8000)], budget_tokens=10, max_patch_chars=8000)

        self.assertEqual(summary.included_count, 1)
        self.assertFalse(summary.truncated)

    def test_included_sections_stay_within_budget(self):
        files = [sized_change(f"f{i}.py", 400) for i in range(10)]

        summary = summarize(files, budget_tokens=350, max_patch_chars=4000)

        # 100 tokens per section, so three fit
        self.assertEqual(summary.included_count, 3)
        self.assertTrue(summary.truncated)
        packed = "".join(render_file_section(f, 4000) for f in files[:3])
        self.assertTrue(summary.text.startswith(packed))
        self.assertLessEqual(estimate_tokens(packed), 350)

    def test_counts_invariant(self):
        files = [sized_change(f"f{i}.py", 300 + 40 * i) for i in range(8)]
        for budget in (1, 50, 100, 200, 500, 1000, 5000):
            summary = summarize(files, budget_tokens=budget, max_patch_chars=4000)
            self.assertGreaterEqual(summary.included_count, 1)
            self.assertLessEqual(summary.included_count, summary.total_count)
            self.assertEqual(summary.truncated, summary.included_count < summary.total_count)

    def test_input_order_preserved(self):
        files = [make_change(path=name) for name in ("z.py", "a.py", "m.py")]

        text = summarize(files, budget_tokens=10000, max_patch_chars=4000).text

        self.assertLess(text.index("z.py"), text.index("a.py"))
        self.assertLess(text.index("a.py"), text.index("m.py"))

    def test_repeated_calls_are_identical(self):
        files = [sized_change(f"f{i}.py", 500) for i in range(5)]

        first = summarize(files, budget_tokens=300, max_patch_chars=4000)
        second = summarize(files, budget_tokens=300, max_patch_chars=4000)

        self.assertEqual(first, second)
        self.assertIsInstance(first, ChangeSetSummary)

    def test_negative_counts_are_accepted(self):
        summary = summarize([make_change(added=-1, removed=-3)], budget_tokens=1000, max_patch_chars=4000)

        self.assertIn("+-1 / --3", summary.text)

    def test_custom_chars_per_token(self):
        files = [sized_change(f"f{i}.py", 400) for i in range(3)]

        # 400 chars at 1 char/token is 400 tokens per section
        summary = summarize(files, budget_tokens=700, max_patch_chars=4000, chars_per_token=1)

        self.assertEqual(summary.included_count, 1)


class TestFileSection(unittest.TestCase):

    def test_missing_patch_placeholder(self):
        section = render_file_section(make_change(path="logo.png", patch=None), 4000)

        self.assertIn(NO_PATCH_PLACEHOLDER, section)
        self.assertNotIn("```diff", section)

    def test_long_patch_is_cut(self):
        """Scenario E: only the first max_patch_chars characters survive"""
        patch = "".join(chr(ord('a') + i % 26) for i in range(500))

        section = render_file_section(make_change(patch=patch), 100)

        self.assertIn(patch[:100] + "\n" + PATCH_TRUNCATION_MARKER, section)
        self.assertNotIn(patch[:101], section)

    def test_cut_section_length_ignores_patch_tail(self):
        short = render_file_section(make_change(patch="x" * 1000), 100)
        longer = render_file_section(make_change(patch="x" * 50000), 100)

        self.assertEqual(len(short), len(longer))

    def test_patch_at_limit_is_verbatim(self):
        section = render_file_section(make_change(patch="y" * 100), 100)

        self.assertIn("y" * 100 + "\n```", section)
        self.assertNotIn(PATCH_TRUNCATION_MARKER, section)

    def test_rename_shows_previous_path(self):
        change = FileChange.from_dict({
            'filename': 'src/new.py',
            'previous_filename': 'src/old.py',
            'status': 'renamed',
            'additions': 0,
            'deletions': 0,
        })

        section = render_file_section(change, 4000)

        self.assertIn("renamed (from `src/old.py`)", section)
        self.assertIn(NO_PATCH_PLACEHOLDER, section)


class TestFileChange(unittest.TestCase):

    def test_from_github_record(self):
        change = FileChange.from_dict({
            'filename': 'src/index.js',
            'additions': 10,
            'deletions': 3,
            'status': 'modified',
            'patch': '@@ -1 +1 @@\n-a\n+b',
        })

        self.assertEqual(change.path, 'src/index.js')
        self.assertEqual(change.lines_added, 10)
        self.assertEqual(change.lines_removed, 3)
        self.assertEqual(change.status, 'modified')
        self.assertEqual(change.patch, '@@ -1 +1 @@\n-a\n+b')
        self.assertIsNone(change.previous_path)

    def test_estimate_rounds_up(self):
        self.assertEqual(estimate_tokens(""), 0)
        self.assertEqual(estimate_tokens("abc"), 1)
        self.assertEqual(estimate_tokens("abcd"), 1)
        self.assertEqual(estimate_tokens("abcde"), 2)


if __name__ == '__main__':
    unittest.main()
