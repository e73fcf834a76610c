import logging
from abc import ABC, abstractmethod
from typing import List
from models import RawCommitRecord

logger = logging.getLogger(__name__)


class CommitSource(ABC):
    """
    [V5.0] 提交数据源抽象基类
    屏蔽底层是 GitHub API 还是本地 Git 的差异，统一按"最新优先"返回原始提交记录。
    """

    # 数据源名称 (日志显示用，子类覆盖)
    name: str = "CommitSource"

    def __init__(self, per_page: int = 100):
        self.per_page = per_page

    @abstractmethod
    def fetch_commits(self, page: int) -> List[RawCommitRecord]:
        """
        获取指定页的提交 (page 从 1 开始，每页 self.per_page 条，最新优先)。
        网络或解析失败时可以直接抛出异常，由 fetch_all_recent_commits 统一处理。
        """
        pass

    def fetch_all_recent_commits(self, limit: int = 200) -> List[RawCommitRecord]:
        """
        逐页获取最近的提交，直到达到 limit、某页为空或不满一页为止。
        任何一页失败都只记录日志，并返回已经获取到的部分结果，从不向上抛出。
        """
        if limit <= 0:
            return []

        commits: List[RawCommitRecord] = []
        page = 1
        while len(commits) < limit:
            try:
                batch = self.fetch_commits(page)
            except Exception as e:
                logger.error(
                    f"❌ [{self.name}] 获取第 {page} 页提交失败，返回已获取的 {len(commits)} 条: {e}"
                )
                break

            if not batch:
                break
            commits.extend(batch)
            page += 1

            if len(batch) < self.per_page:
                break

        logger.info(f"✅ [{self.name}] 共获取 {min(len(commits), limit)} 条提交")
        return commits[:limit]
