import logging
import os
from config import GlobalConfig
from .base import CommitSource
from .cached import RevalidatingCommitSource
from .local_git import LocalGitCommitSource
from .github_api import GitHubCommitSource

logger = logging.getLogger(__name__)


def get_commit_source(global_config: GlobalConfig) -> CommitSource:
    """
    [V5.0] 提交数据源工厂
    - 已存在的本地路径 -> Local Git (不是 Git 仓库时抛出 ValueError)
    - 其它 (URL 或 owner/repo) -> GitHub API
    返回的数据源总是包裹一层重新验证缓存。
    """
    repo = global_config.COMMIT_SOURCE_REPO.strip()

    if os.path.isdir(repo):
        logger.info("🔌 [Factory] 检测到本地路径，初始化数据源: Local Git")
        local_source = LocalGitCommitSource(global_config)
        if not local_source.validate():
            raise ValueError(f"本地路径不是可用的 Git 仓库: {repo}")
        source: CommitSource = local_source
    else:
        logger.info("🔌 [Factory] 初始化数据源: GitHub API")
        source = GitHubCommitSource(global_config)

    return RevalidatingCommitSource(
        source, revalidate_seconds=global_config.COMMITS_REVALIDATE_SECONDS
    )
