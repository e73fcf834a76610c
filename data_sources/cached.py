import logging
import threading
import time
from typing import Callable, Dict, List, Tuple

from .base import CommitSource
from models import RawCommitRecord

logger = logging.getLogger(__name__)


class RevalidatingCommitSource(CommitSource):
    """
    [V5.0] HTTP 层的重新验证缓存
    包装另一个数据源：同一 limit 的结果在 revalidate_seconds 内直接复用，过期后重新获取。
    被包装的数据源本身不做缓存。
    """

    def __init__(
        self,
        inner: CommitSource,
        revalidate_seconds: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(per_page=inner.per_page)
        self.inner = inner
        self.name = f"{inner.name}+cache"
        self.revalidate_seconds = revalidate_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[int, Tuple[float, List[RawCommitRecord]]] = {}

    def fetch_commits(self, page: int) -> List[RawCommitRecord]:
        return self.inner.fetch_commits(page)

    def fetch_all_recent_commits(self, limit: int = 200) -> List[RawCommitRecord]:
        if limit <= 0:
            return []

        now = self._clock()
        with self._lock:
            entry = self._entries.get(limit)
            if entry and now - entry[0] < self.revalidate_seconds:
                return list(entry[1])

        commits = self.inner.fetch_all_recent_commits(limit)

        # 空结果通常意味着上游故障，不缓存以便下次请求立即重试
        if commits:
            with self._lock:
                self._entries[limit] = (now, commits)
        else:
            logger.warning(f"⚠️ [{self.name}] 未获取到提交，跳过缓存")
        return list(commits)
