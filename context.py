"""
[V5.0] 单次请求的提交动态参数模型
"""
from dataclasses import dataclass
from config import GlobalConfig
from models import CATEGORY_ALL


@dataclass
class FeedContext:
    """
    (V5.0) 封装一次页面请求所需的过滤条件和配置。
    这是从 HTTP / CLI 层传递到 Composer 的唯一对象。
    """

    # --- 过滤条件 ---
    category: str
    hide_stats: bool

    # --- 获取数量 ---
    limit: int

    # --- 全局配置 ---
    global_config: GlobalConfig


def resolve_feed_context(
    category_param, hide_stats_param, global_config: GlobalConfig
) -> FeedContext:
    """
    根据查询参数组装 FeedContext。
    - category 缺省 (或空字符串) 为 "all"
    - hideStats 只有等于字符串 "false" 时才为 False
    """
    category = category_param or CATEGORY_ALL
    hide_stats = hide_stats_param != "false"
    return FeedContext(
        category=category,
        hide_stats=hide_stats,
        limit=global_config.COMMITS_FETCH_LIMIT,
        global_config=global_config,
    )
