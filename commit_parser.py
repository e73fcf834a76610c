"""
[V5.0] 提交解析器
把原始提交记录转换为带分类、统计信息的展示记录。纯函数，无 I/O。
"""
import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Pattern, Tuple

from models import (
    CommitStats,
    DEFAULT_CATEGORY,
    ParsedCommit,
    RawCommitRecord,
)

logger = logging.getLogger(__name__)

SHORT_SHA_LENGTH = 7


@dataclass(frozen=True)
class CategoryRule:
    """一条分类规则：标题以 prefixes 开头或包含任一 keywords 即命中"""

    category: str
    prefixes: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()

    def matches(self, title: str) -> bool:
        lowered = title.lower()
        if any(lowered.startswith(p) for p in self.prefixes):
            return True
        return any(k in lowered for k in self.keywords)


# 按优先级排列，先命中者生效 (统计类必须排在 website / ops 之前)
CATEGORY_RULES: List[CategoryRule] = [
    CategoryRule("stats", prefixes=("website: update stats",), keywords=("stats", "statistics")),
    CategoryRule("website", prefixes=("website:",)),
    CategoryRule("research", prefixes=("economist:",), keywords=("research",)),
    CategoryRule("ops", prefixes=("ops:",), keywords=("buyback", "burn")),
    CategoryRule("twitter", prefixes=("twitter:",), keywords=("tweet",)),
    CategoryRule("docs", prefixes=("docs:",), keywords=("documentation",)),
]

_NUMBER = r"([0-9][0-9,]*(?:\.[0-9]+)?)"

# "$59,707 distributed, 579 distributions" (可选 ", 1,234 holders")
SUMMARY_STATS_PATTERN: Pattern = re.compile(
    r"\$\s*" + _NUMBER + r"\s+distributed,\s*" + _NUMBER + r"\s+distributions?"
    r"(?:,\s*" + _NUMBER + r"\s+holders?)?",
    re.IGNORECASE,
)

# "Distributed 1,000 tokens to 50 holders" (单次分发)
SINGLE_DISTRIBUTION_PATTERN: Pattern = re.compile(
    r"distributed\s+\$?\s*" + _NUMBER + r"(?:\s+[A-Za-z$][\w$]*)?\s+to\s+" + _NUMBER + r"\s+holders?",
    re.IGNORECASE,
)


def _to_number(text: str) -> float:
    value = float(text.replace(",", ""))
    if not math.isfinite(value):
        raise ValueError(f"数值超出范围: {text[:20]}...")
    return value


def _to_int(text: str) -> int:
    return int(_to_number(text))


def categorize_commit(title: str) -> str:
    """按 CATEGORY_RULES 顺序对标题分类，未命中返回 "other" """
    for rule in CATEGORY_RULES:
        if rule.matches(title or ""):
            return rule.category
    return DEFAULT_CATEGORY


def _stats_from_match(match, single: bool) -> CommitStats:
    if single:
        return CommitStats(
            distributed=_to_number(match.group(1)),
            distributions=1,
            holders=_to_int(match.group(2)),
        )
    holders = match.group(3)
    return CommitStats(
        distributed=_to_number(match.group(1)),
        distributions=_to_int(match.group(2)),
        holders=_to_int(holders) if holders else None,
    )


def extract_stats(text: str) -> Optional[CommitStats]:
    """从文本中提取分红统计，无法识别 (或数值溢出) 时返回 None"""
    if not text:
        return None

    for pattern, single in ((SUMMARY_STATS_PATTERN, False), (SINGLE_DISTRIBUTION_PATTERN, True)):
        match = pattern.search(text)
        if not match:
            continue
        try:
            return _stats_from_match(match, single)
        except (ValueError, OverflowError) as e:
            logger.warning(f"⚠️ 忽略无法解析的统计信息: {e}")
            return None
    return None


def parse_commit_date(value) -> Optional[datetime]:
    """解析 ISO-8601 时间 (支持末尾 Z)，无时区的视为 UTC；失败返回 None"""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"⚠️ 无法解析提交时间: {value!r}")
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def split_message(message: str) -> Tuple[str, str]:
    """按第一个换行拆分标题与正文"""
    title, _, body = (message or "").partition("\n")
    return title.strip(), body.strip()


def parse_commit(raw: RawCommitRecord) -> ParsedCommit:
    sha = raw.sha or ""
    message = raw.message or ""
    title, body = split_message(message)

    stats = extract_stats(body) or extract_stats(title)

    return ParsedCommit(
        sha=sha,
        short_sha=sha[:SHORT_SHA_LENGTH],
        message=message,
        title=title,
        body=body,
        category=categorize_commit(title),
        author=raw.author_name or raw.author_login or "unknown",
        author_login=raw.author_login,
        author_avatar=raw.author_avatar,
        date=parse_commit_date(raw.date),
        url=raw.url or "",
        stats=stats,
    )


def get_latest_stats(commits: List[ParsedCommit]) -> Optional[CommitStats]:
    """返回最新一条统计播报 (stats 分类) 提交的统计块，其它分类中顺带提到的数字不算"""
    for commit in commits:
        if commit.category == "stats" and commit.stats is not None:
            return commit.stats
    return None
