import logging
from typing import List, Optional
from urllib.parse import urlparse

import requests
from github import Auth, Github, GithubException
from github.Commit import Commit
from github.Repository import Repository

from .base import CommitSource
from models import RawCommitRecord
from config import GlobalConfig

logger = logging.getLogger(__name__)


def parse_repo_name(repo: str) -> Optional[str]:
    """从 URL 或 owner/repo 字符串中解析 owner/repo"""
    # 支持 https://github.com/owner/repo、git@github.com:owner/repo.git 和 owner/repo
    if not repo:
        return None
    try:
        if repo.startswith("git@"):
            path = repo.split(":", 1)[1]
        elif repo.startswith(("http://", "https://")):
            path = urlparse(repo).path
        else:
            path = repo
        path = path.strip("/")
        if path.endswith(".git"):
            path = path[:-4]
        parts = [p for p in path.split("/") if p]
        if len(parts) != 2:
            return None
        return "/".join(parts)
    except (IndexError, ValueError):
        return None


class GitHubCommitSource(CommitSource):
    """
    [V5.0] GitHub 远程提交数据源
    使用 PyGithub 按页读取 /repos/{owner}/{repo}/commits，不做任何本地缓存。
    """

    name = "GitHub"

    def __init__(self, global_config: GlobalConfig, client: Optional[Github] = None):
        super().__init__(per_page=global_config.COMMITS_PER_PAGE)
        self.global_config = global_config
        self.repo_name = parse_repo_name(global_config.COMMIT_SOURCE_REPO)
        self._repo: Optional[Repository] = None

        if not self.repo_name:
            raise ValueError(
                f"无法从配置中解析仓库名称: {global_config.COMMIT_SOURCE_REPO}"
            )

        if client is not None:
            self.client = client
        elif global_config.is_github_authenticated():
            self.client = Github(
                auth=Auth.Token(global_config.GITHUB_TOKEN),
                base_url=global_config.GITHUB_BASE_URL,
                per_page=self.per_page,
            )
        else:
            logger.warning(
                "⚠️ 未配置 GITHUB_TOKEN，API 请求可能会受到严格限制 (60次/小时)。建议在 .env 中配置。"
            )
            self.client = Github(
                base_url=global_config.GITHUB_BASE_URL, per_page=self.per_page
            )

    def _get_repo(self) -> Repository:
        if self._repo is None:
            # lazy=True 不会额外请求仓库详情
            self._repo = self.client.get_repo(self.repo_name, lazy=True)
        return self._repo

    def fetch_commits(self, page: int) -> List[RawCommitRecord]:
        logger.info(f"🌐 正在请求 GitHub 提交列表: {self.repo_name} (第 {page} 页)")
        try:
            # PyGithub 的分页从 0 开始
            gh_commits = self._get_repo().get_commits().get_page(page - 1)
        except GithubException as e:
            message = e.data.get("message", "") if isinstance(e.data, dict) else ""
            logger.error(f"❌ GitHub API 错误: {e.status} {message}")
            raise
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ 无法连接 GitHub: {e}")
            raise

        return [self._to_raw_record(c) for c in gh_commits]

    def _to_raw_record(self, c: Commit) -> RawCommitRecord:
        """把 PyGithub 的 Commit 对象转换为原始记录 (字段缺失时留空)"""
        git_commit = c.commit
        git_author = git_commit.author if git_commit else None
        account = c.author
        date = git_author.date if git_author else None

        return RawCommitRecord(
            sha=c.sha or "",
            message=(git_commit.message if git_commit else None) or "",
            author_name=git_author.name if git_author else None,
            author_login=account.login if account else None,
            author_avatar=account.avatar_url if account else None,
            date=date.isoformat() if date else None,
            url=c.html_url or "",
        )
