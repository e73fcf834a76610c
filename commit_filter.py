from typing import List

from models import CATEGORY_ALL, ParsedCommit


def commit_matches(commit: ParsedCommit, category: str, hide_stats: bool) -> bool:
    if category != CATEGORY_ALL and commit.category != category:
        return False
    # 统计播报在综合动态中视为噪音
    if hide_stats and commit.stats is not None:
        return False
    return True


def filter_commits(
    commits: List[ParsedCommit], category: str = CATEGORY_ALL, hide_stats: bool = True
) -> List[ParsedCommit]:
    """按分类和"隐藏统计"过滤提交，保持原有顺序 (最新优先)"""
    return [c for c in commits if commit_matches(c, category, hide_stats)]
