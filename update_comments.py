"""
[V5.0] 更新 (提交) 评论
- 评论以 JSON 存在键值存储中，键为 update_comments:<sha>:<创建时间>:<id>
- get_comment_counts 为提交动态页面统计每个提交的评论数
"""
import json
import logging
import time
import uuid
from typing import Dict, Iterable, List, Optional

from kv_store.base import KeyValueStore
from models import UpdateComment

logger = logging.getLogger(__name__)

COMMENT_KEY_PREFIX = "update_comments"
COMMENT_INDEX_PREFIX = "update_comment_index"
MAX_COMMENT_LENGTH = 500


class CommentError(ValueError):
    """评论校验或权限错误 (对应 HTTP 400)"""


def _now_ms() -> int:
    return int(time.time() * 1000)


def comment_prefix(commit_sha: str) -> str:
    return f"{COMMENT_KEY_PREFIX}:{commit_sha}:"


def _comment_key(comment: UpdateComment) -> str:
    return f"{comment_prefix(comment.commit_sha)}{comment.created_at:013d}:{comment.id}"


def _index_key(comment_id: str) -> str:
    return f"{COMMENT_INDEX_PREFIX}:{comment_id}"


def _load(value: str) -> Optional[UpdateComment]:
    try:
        return UpdateComment.from_dict(json.loads(value))
    except (ValueError, KeyError, TypeError) as e:
        logger.error(f"❌ 评论数据损坏，已跳过: {e}")
        return None


def get_comment_counts(store: KeyValueStore, commit_shas: Iterable[str]) -> Dict[str, int]:
    """
    统计每个提交的评论数。
    - 输入去重，每个 sha 都会出现在结果中 (无评论为 0)
    - 单个 sha 查询失败只记录错误并记为 0，不影响其它 sha
    """
    counts: Dict[str, int] = {}
    for sha in commit_shas:
        if sha in counts:
            continue
        try:
            counts[sha] = store.count_prefix(comment_prefix(sha))
        except Exception as e:
            logger.error(f"❌ 获取提交 {sha[:7]} 的评论数失败: {e}")
            counts[sha] = 0
    return counts


def get_comments_for_update(
    store: KeyValueStore, commit_sha: str, limit: int = 100
) -> List[UpdateComment]:
    """返回某个提交的评论 (最新优先，最多 limit 条)"""
    comments = []
    for _, value in store.scan_prefix(comment_prefix(commit_sha)):
        comment = _load(value)
        if comment:
            comments.append(comment)
    comments.sort(key=lambda c: c.created_at, reverse=True)
    return comments[: max(limit, 0)]


def nest_comments(comments: List[UpdateComment]) -> List[UpdateComment]:
    """把回复挂到父评论下；顶层保持原顺序，回复按时间正序"""
    replies: Dict[str, List[UpdateComment]] = {}
    top_level = []
    for comment in comments:
        if comment.parent_id:
            replies.setdefault(comment.parent_id, []).append(comment)
        else:
            top_level.append(comment)
    for comment in top_level:
        comment.replies = sorted(replies.get(comment.id, []), key=lambda c: c.created_at)
    return top_level


def get_comment_threads(
    store: KeyValueStore, commit_shas: Iterable[str], limit: int = 50
) -> Dict[str, List[UpdateComment]]:
    """
    读取每个提交最近的评论并组装成讨论串 (顶层最新优先，回复挂在父评论下)。
    单个 sha 读取失败只记录错误并返回空列表。
    """
    threads: Dict[str, List[UpdateComment]] = {}
    for sha in commit_shas:
        if sha in threads:
            continue
        try:
            threads[sha] = nest_comments(get_comments_for_update(store, sha, limit))
        except Exception as e:
            logger.error(f"❌ 获取提交 {sha[:7]} 的评论失败: {e}")
            threads[sha] = []
    return threads


def find_comment(store: KeyValueStore, comment_id: str) -> Optional[UpdateComment]:
    key = store.get(_index_key(comment_id))
    if not key:
        return None
    value = store.get(key)
    return _load(value) if value else None


def add_update_comment(
    store: KeyValueStore,
    commit_sha: str,
    wallet_address: str,
    username: str,
    content: str,
    parent_id: Optional[str] = None,
    max_length: int = MAX_COMMENT_LENGTH,
) -> UpdateComment:
    """新增评论，内容为空 / 过长 / 父评论不存在时抛出 CommentError"""
    if not content or not content.strip():
        raise CommentError("Comment cannot be empty")
    if len(content) > max_length:
        raise CommentError(f"Comment must be {max_length} characters or less")

    if parent_id:
        parent = find_comment(store, parent_id)
        if not parent or parent.commit_sha != commit_sha:
            raise CommentError("Parent comment not found")

    comment = UpdateComment(
        id=uuid.uuid4().hex,
        commit_sha=commit_sha,
        wallet_address=wallet_address.lower(),
        username=username,
        content=content.strip(),
        created_at=_now_ms(),
        parent_id=parent_id or None,
    )
    key = _comment_key(comment)
    store.set(key, json.dumps(comment.to_dict(), ensure_ascii=False))
    store.set(_index_key(comment.id), key)
    logger.info(f"✅ 新增评论 {comment.id} -> {commit_sha[:7]}")
    return comment


def delete_update_comment(store: KeyValueStore, comment_id: str, wallet_address: str) -> int:
    """
    删除评论及其直接回复 (只有作者本人可以删除)。
    返回删除的条数；不存在或无权限时抛出 CommentError。
    """
    comment = find_comment(store, comment_id)
    if not comment:
        raise CommentError("Comment not found")
    if comment.wallet_address != wallet_address.lower():
        raise CommentError("Not authorized to delete this comment")

    targets = [comment] + [
        c
        for c in get_comments_for_update(store, comment.commit_sha, limit=10 ** 9)
        if c.parent_id == comment_id
    ]
    for target in targets:
        store.delete(_comment_key(target))
        store.delete(_index_key(target.id))

    logger.info(f"🗑️ 已删除评论 {comment_id} (含 {len(targets) - 1} 条回复)")
    return len(targets)
