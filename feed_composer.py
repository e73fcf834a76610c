"""
[V5.0] 提交动态编排器
数据源 -> 解析 -> 过滤 -> 评论数统计 -> 讨论串，本身不包含额外业务逻辑。
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from context import FeedContext
from config import GlobalConfig
from models import CommitStats, ParsedCommit, UpdateComment
from commit_parser import parse_commit, get_latest_stats
from commit_filter import filter_commits
from update_comments import get_comment_counts, get_comment_threads
from data_sources.base import CommitSource
from kv_store.base import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class CommitFeedPage:
    """一次渲染所需的全部数据"""

    context: FeedContext
    commits: List[ParsedCommit]
    total_commits: int
    comment_counts: Dict[str, int] = field(default_factory=dict)
    latest_stats: Optional[CommitStats] = None
    comment_threads: Dict[str, List[UpdateComment]] = field(default_factory=dict)

    def comment_count(self, sha: str) -> int:
        return self.comment_counts.get(sha, 0)

    def comment_thread(self, sha: str) -> List[UpdateComment]:
        return self.comment_threads.get(sha, [])


class CommitFeedComposer:
    """
    (V5.0) 负责把各组件串成一次页面请求。
    """

    def __init__(
        self,
        global_config: GlobalConfig,
        commit_source: CommitSource,
        store: KeyValueStore,
    ):
        self.global_config = global_config
        self.commit_source = commit_source
        self.store = store

    def compose(self, context: FeedContext) -> CommitFeedPage:
        # --- 1. 获取原始提交 (失败时为空或部分列表) ---
        raw_commits = self.commit_source.fetch_all_recent_commits(context.limit)
        if not raw_commits:
            logger.warning("⚠️ 未获取到提交记录，页面将显示空列表")

        # --- 2. 解析 ---
        all_commits = [parse_commit(raw) for raw in raw_commits]

        # --- 3. 过滤 ---
        commits = filter_commits(all_commits, context.category, context.hide_stats)
        logger.info(
            f"ℹ️ 提交动态: 共 {len(all_commits)} 条，过滤后 {len(commits)} 条 "
            f"(category={context.category}, hideStats={context.hide_stats})"
        )

        # --- 4. 评论数 ---
        comment_counts = get_comment_counts(self.store, [c.sha for c in commits])

        # --- 5. 讨论串 (只读取有评论的提交) ---
        comment_threads = get_comment_threads(
            self.store,
            [sha for sha, count in comment_counts.items() if count > 0],
            self.global_config.COMMENTS_DEFAULT_LIMIT,
        )

        return CommitFeedPage(
            context=context,
            commits=commits,
            total_commits=len(all_commits),
            comment_counts=comment_counts,
            latest_stats=get_latest_stats(all_commits),
            comment_threads=comment_threads,
        )
