from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

# 固定的提交分类 (按展示顺序)
COMMIT_CATEGORIES = ("stats", "website", "research", "ops", "twitter", "docs", "other")
CATEGORY_ALL = "all"
DEFAULT_CATEGORY = "other"


@dataclass(frozen=True)
class RawCommitRecord:
    """数据源返回的原始提交记录 (未经校验，字段可能缺失)"""

    sha: str
    message: str
    author_name: Optional[str] = None
    author_login: Optional[str] = None
    author_avatar: Optional[str] = None
    date: Optional[str] = None
    url: str = ""

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "RawCommitRecord":
        """
        从 GitHub commits API 的 JSON 对象构建记录。
        缺失的字段使用默认值，不抛异常。
        """
        payload = payload or {}
        commit = payload.get("commit") or {}
        commit_author = commit.get("author") or {}
        account = payload.get("author") or {}
        return cls(
            sha=payload.get("sha") or "",
            message=commit.get("message") or "",
            author_name=commit_author.get("name"),
            author_login=account.get("login"),
            author_avatar=account.get("avatar_url"),
            date=commit_author.get("date"),
            url=payload.get("html_url") or "",
        )


@dataclass
class CommitStats:
    """从提交信息中提取的分红统计"""

    distributed: float
    distributions: int
    holders: Optional[int] = None


@dataclass
class ParsedCommit:
    """解析、分类后的提交 (用于展示)"""

    sha: str
    short_sha: str
    message: str
    title: str
    body: str
    category: str
    author: str
    author_login: Optional[str]
    author_avatar: Optional[str]
    date: Optional[datetime]
    url: str
    stats: Optional[CommitStats] = None


@dataclass
class UpdateComment:
    """社区对某个提交 (更新) 的评论"""

    id: str
    commit_sha: str
    wallet_address: str
    username: str
    content: str
    created_at: int
    parent_id: Optional[str] = None
    replies: List["UpdateComment"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "commitSha": self.commit_sha,
            "walletAddress": self.wallet_address,
            "username": self.username,
            "content": self.content,
            "createdAt": self.created_at,
            "parentId": self.parent_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UpdateComment":
        return cls(
            id=data["id"],
            commit_sha=data["commitSha"],
            wallet_address=data["walletAddress"],
            username=data.get("username") or "",
            content=data.get("content") or "",
            created_at=int(data.get("createdAt") or 0),
            parent_id=data.get("parentId") or None,
        )
