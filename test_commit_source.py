import os
import tempfile
import unittest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest import mock

from github import GithubException

from config import GlobalConfig
from models import RawCommitRecord
from data_sources.base import CommitSource
from data_sources.cached import RevalidatingCommitSource
from data_sources.factory import get_commit_source
from data_sources.github_api import GitHubCommitSource, parse_repo_name
from data_sources.local_git import LocalGitCommitSource
import git_utils


class FakeCommitSource(CommitSource):
    """按页返回预设数据；某页可以配置为抛异常"""

    name = "Fake"

    def __init__(self, total: int, per_page: int = 100, fail_on_page=None):
        super().__init__(per_page=per_page)
        self.records = [RawCommitRecord(sha=f"{i:040x}", message=f"commit {i}") for i in range(total)]
        self.fail_on_page = fail_on_page
        self.pages_requested = []

    def fetch_commits(self, page):
        self.pages_requested.append(page)
        if page == self.fail_on_page:
            raise ConnectionError("upstream unavailable")
        start = (page - 1) * self.per_page
        return self.records[start:start + self.per_page]


class TestFetchAllRecentCommits(unittest.TestCase):

    def test_zero_limit_makes_no_call(self):
        source = FakeCommitSource(total=10)
        self.assertEqual(source.fetch_all_recent_commits(0), [])
        self.assertEqual(source.pages_requested, [])

    def test_aggregates_pages_up_to_limit(self):
        source = FakeCommitSource(total=250)
        commits = source.fetch_all_recent_commits(200)
        self.assertEqual(len(commits), 200)
        self.assertEqual(source.pages_requested, [1, 2])
        self.assertEqual(commits[0].message, "commit 0")
        self.assertEqual(commits[-1].message, "commit 199")

    def test_stops_on_short_page(self):
        source = FakeCommitSource(total=130)
        commits = source.fetch_all_recent_commits(500)
        self.assertEqual(len(commits), 130)
        self.assertEqual(source.pages_requested, [1, 2])

    def test_stops_on_empty_page(self):
        source = FakeCommitSource(total=100)
        self.assertEqual(len(source.fetch_all_recent_commits(300)), 100)
        self.assertEqual(source.pages_requested, [1, 2])

    def test_truncates_inside_page(self):
        source = FakeCommitSource(total=100)
        self.assertEqual(len(source.fetch_all_recent_commits(5)), 5)

    def test_upstream_failure_returns_partial(self):
        source = FakeCommitSource(total=300, fail_on_page=2)
        commits = source.fetch_all_recent_commits(300)
        self.assertEqual(len(commits), 100)

    def test_upstream_failure_on_first_page_returns_empty(self):
        source = FakeCommitSource(total=300, fail_on_page=1)
        self.assertEqual(source.fetch_all_recent_commits(200), [])


def _gh_commit(sha, message, name="Ralph", login="ralph", with_account=True):
    return SimpleNamespace(
        sha=sha,
        commit=SimpleNamespace(
            message=message,
            author=SimpleNamespace(name=name, date=datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)),
        ),
        author=SimpleNamespace(login=login, avatar_url="https://avatars/1") if with_account else None,
        html_url=f"https://github.com/snark-tank/ralph/commit/{sha}",
    )


class TestGitHubCommitSource(unittest.TestCase):

    def setUp(self):
        self.config = GlobalConfig()
        self.config.COMMIT_SOURCE_REPO = "https://github.com/snark-tank/ralph.git"
        self.client = mock.Mock()
        self.repo = self.client.get_repo.return_value

    def test_parse_repo_name(self):
        self.assertEqual(parse_repo_name("snark-tank/ralph"), "snark-tank/ralph")
        self.assertEqual(parse_repo_name("https://github.com/snark-tank/ralph"), "snark-tank/ralph")
        self.assertEqual(parse_repo_name("git@github.com:snark-tank/ralph.git"), "snark-tank/ralph")
        self.assertIsNone(parse_repo_name("ralph"))
        self.assertIsNone(parse_repo_name(""))

    def test_invalid_repo_raises(self):
        self.config.COMMIT_SOURCE_REPO = "not-a-repo"
        with self.assertRaises(ValueError):
            GitHubCommitSource(self.config, client=self.client)

    def test_fetch_commits_converts_records(self):
        self.repo.get_commits.return_value.get_page.return_value = [
            _gh_commit("a" * 40, "website: hello\n\nbody"),
            _gh_commit("b" * 40, "ops: burn", with_account=False),
        ]
        source = GitHubCommitSource(self.config, client=self.client)

        records = source.fetch_commits(1)

        self.client.get_repo.assert_called_once_with("snark-tank/ralph", lazy=True)
        self.repo.get_commits.return_value.get_page.assert_called_once_with(0)
        self.assertEqual(records[0].sha, "a" * 40)
        self.assertEqual(records[0].message, "website: hello\n\nbody")
        self.assertEqual(records[0].author_login, "ralph")
        self.assertEqual(records[0].date, "2025-03-01T12:00:00+00:00")
        self.assertIsNone(records[1].author_login)
        self.assertIsNone(records[1].author_avatar)

    def test_api_error_degrades_to_empty(self):
        self.repo.get_commits.return_value.get_page.side_effect = GithubException(
            403, {"message": "API rate limit exceeded"}, None
        )
        source = GitHubCommitSource(self.config, client=self.client)
        with self.assertRaises(GithubException):
            source.fetch_commits(1)
        self.assertEqual(source.fetch_all_recent_commits(200), [])

    def test_zero_limit_never_touches_client(self):
        source = GitHubCommitSource(self.config, client=self.client)
        self.assertEqual(source.fetch_all_recent_commits(0), [])
        self.client.get_repo.assert_not_called()


class TestRevalidatingCommitSource(unittest.TestCase):

    def setUp(self):
        self.now = 1000.0
        self.inner = FakeCommitSource(total=3)
        self.source = RevalidatingCommitSource(self.inner, revalidate_seconds=60, clock=lambda: self.now)

    def test_serves_cached_within_window(self):
        first = self.source.fetch_all_recent_commits(200)
        self.now += 59
        second = self.source.fetch_all_recent_commits(200)
        self.assertEqual(first, second)
        self.assertEqual(self.inner.pages_requested, [1])

    def test_refetches_after_window(self):
        self.source.fetch_all_recent_commits(200)
        self.now += 60
        self.source.fetch_all_recent_commits(200)
        self.assertEqual(self.inner.pages_requested, [1, 1])

    def test_empty_result_not_cached(self):
        self.inner.fail_on_page = 1
        self.assertEqual(self.source.fetch_all_recent_commits(200), [])
        self.inner.fail_on_page = None
        self.assertEqual(len(self.source.fetch_all_recent_commits(200)), 3)

    def test_zero_limit(self):
        self.assertEqual(self.source.fetch_all_recent_commits(0), [])
        self.assertEqual(self.inner.pages_requested, [])


class TestGitLogParsing(unittest.TestCase):

    def test_parse_git_log(self):
        output = (
            "aaa111\x1fRalph\x1f2025-01-01T00:00:00+00:00\x1fwebsite: hi\n\nbody line\n\x1e\n"
            "bbb222\x1f\x1f\x1fdocs: x\x1e"
        )
        records = git_utils.parse_git_log(output)
        self.assertEqual(len(records), 2)
        self.assertEqual(records[0].sha, "aaa111")
        self.assertEqual(records[0].message, "website: hi\n\nbody line")
        self.assertEqual(records[0].author_name, "Ralph")
        self.assertIsNone(records[1].author_name)
        self.assertIsNone(records[1].date)

    def test_parse_empty_output(self):
        self.assertEqual(git_utils.parse_git_log(""), [])


class TestCommitSourceFactory(unittest.TestCase):

    def setUp(self):
        self.config = GlobalConfig()
        self.config.COMMITS_REVALIDATE_SECONDS = 15
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_remote_repo_uses_github(self):
        self.config.COMMIT_SOURCE_REPO = "snark-tank/ralph"
        with mock.patch("data_sources.github_api.Github"):
            source = get_commit_source(self.config)
        self.assertIsInstance(source, RevalidatingCommitSource)
        self.assertIsInstance(source.inner, GitHubCommitSource)
        self.assertEqual(source.revalidate_seconds, 15)

    def test_local_directory_uses_git(self):
        self.config.COMMIT_SOURCE_REPO = self.tmpdir.name
        with mock.patch("git_utils.is_git_repository", return_value=True):
            source = get_commit_source(self.config)
        self.assertIsInstance(source, RevalidatingCommitSource)
        self.assertIsInstance(source.inner, LocalGitCommitSource)
        self.assertEqual(source.revalidate_seconds, 15)

    def test_local_directory_must_be_a_repository(self):
        self.config.COMMIT_SOURCE_REPO = self.tmpdir.name
        with mock.patch("git_utils.is_git_repository", return_value=False):
            with self.assertRaises(ValueError):
                get_commit_source(self.config)


class TestLocalGitCommitSource(unittest.TestCase):

    def setUp(self):
        self.config = GlobalConfig()
        self.config.COMMIT_SOURCE_REPO = "/srv/repos/ralph"
        self.source = LocalGitCommitSource(self.config)

    def test_pages_map_to_skip_and_count(self):
        output = "aaa111\x1fRalph\x1f2025-01-01T00:00:00+00:00\x1fops: burn\x1e"
        with mock.patch("git_utils.get_git_log_page", return_value=output) as log_page:
            records = self.source.fetch_commits(3)

        log_page.assert_called_once_with(
            os.path.abspath("/srv/repos/ralph"), self.config.GIT_LOG_FORMAT, skip=200, count=100
        )
        self.assertEqual([r.sha for r in records], ["aaa111"])

    def test_git_failure_raises_and_degrades(self):
        with mock.patch("git_utils.get_git_log_page", return_value=None):
            with self.assertRaises(RuntimeError):
                self.source.fetch_commits(1)
            self.assertEqual(self.source.fetch_all_recent_commits(200), [])


if __name__ == "__main__":
    unittest.main()
