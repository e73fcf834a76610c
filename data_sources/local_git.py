import logging
import os
from typing import List

from .base import CommitSource
from models import RawCommitRecord
from config import GlobalConfig
import git_utils

logger = logging.getLogger(__name__)


class LocalGitCommitSource(CommitSource):
    """
    [V5.0] 本地 Git 提交数据源
    通过 git log --skip/-n 分页读取本地仓库，记录格式与 GitHub 数据源一致 (无 URL / 头像)。
    """

    name = "LocalGit"

    def __init__(self, global_config: GlobalConfig):
        super().__init__(per_page=global_config.COMMITS_PER_PAGE)
        self.global_config = global_config
        self.repo_path = os.path.abspath(global_config.COMMIT_SOURCE_REPO)

    def validate(self) -> bool:
        if not os.path.exists(self.repo_path):
            logger.error(f"❌ 路径不存在: {self.repo_path}")
            return False
        if not git_utils.is_git_repository(self.repo_path):
            logger.error(f"❌ 指定路径不是 Git 仓库: {self.repo_path}")
            return False
        return True

    def fetch_commits(self, page: int) -> List[RawCommitRecord]:
        log_output = git_utils.get_git_log_page(
            self.repo_path,
            self.global_config.GIT_LOG_FORMAT,
            skip=(page - 1) * self.per_page,
            count=self.per_page,
        )
        if log_output is None:
            raise RuntimeError(f"git log 执行失败: {self.repo_path}")
        return git_utils.parse_git_log(log_output)
