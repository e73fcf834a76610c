import unittest

from models import RawCommitRecord
from commit_parser import parse_commit
from commit_filter import filter_commits


def _commits():
    messages = [
        "website: new hero",
        "website: update stats ($59,707 distributed, 579 distributions)",
        "ops: buyback executed",
        "Economist: tokenomics review",
        "Add stats\n\nDistributed 1000 tokens to 50 holders",
        "chore: bump deps",
        "docs: roadmap",
    ]
    return [
        parse_commit(RawCommitRecord(sha=f"{i:040x}", message=m))
        for i, m in enumerate(messages)
    ]


class TestFilterCommits(unittest.TestCase):

    def setUp(self):
        self.commits = _commits()

    def test_all_without_hiding_is_identity(self):
        result = filter_commits(self.commits, "all", False)
        self.assertEqual(result, self.commits)

    def test_defaults_hide_stats_blocks(self):
        result = filter_commits(self.commits)
        self.assertEqual(len(result), 5)
        self.assertTrue(all(c.stats is None for c in result))

    def test_category_filter_preserves_order(self):
        result = filter_commits(self.commits, "stats", False)
        self.assertEqual([c.title for c in result], [
            "website: update stats ($59,707 distributed, 579 distributions)",
            "Add stats",
        ])
        self.assertEqual(
            [c.title for c in filter_commits(self.commits, "website", False)],
            ["website: new hero"],
        )

    def test_category_with_hidden_stats(self):
        self.assertEqual(filter_commits(self.commits, "stats", True), [])
        self.assertEqual(len(filter_commits(self.commits, "stats", False)), 2)

    def test_unknown_category_is_empty(self):
        self.assertEqual(filter_commits(self.commits, "memes", False), [])

    def test_empty_input(self):
        self.assertEqual(filter_commits([], "ops", True), [])

    def test_idempotent(self):
        for category in ["all", "ops", "stats", "other", "nope"]:
            for hide_stats in [True, False]:
                once = filter_commits(self.commits, category, hide_stats)
                twice = filter_commits(once, category, hide_stats)
                self.assertEqual(once, twice)


if __name__ == "__main__":
    unittest.main()
