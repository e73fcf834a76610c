import logging
import sys
from datetime import datetime, timezone
from typing import Optional


# 将日志配置移到这里，作为一个可被调用的函数
def setup_logging(level: int = logging.INFO):
    """配置全局日志"""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


_UNITS = [
    (365 * 24 * 3600, "year"),
    (30 * 24 * 3600, "month"),
    (24 * 3600, "day"),
    (3600, "hour"),
    (60, "minute"),
]


def format_relative_date(date: Optional[datetime], now: Optional[datetime] = None) -> str:
    """把时间格式化为 "3 hours ago" 这样的相对描述"""
    if date is None:
        return "unknown date"
    now = now or datetime.now(timezone.utc)
    seconds = int((now - date).total_seconds())
    future = seconds < 0
    seconds = abs(seconds)

    if seconds < 60:
        return "just now"
    for size, unit in _UNITS:
        if seconds >= size:
            count = seconds // size
            label = f"{count} {unit}{'s' if count != 1 else ''}"
            return f"in {label}" if future else f"{label} ago"
    return "just now"


def format_datetime(date: Optional[datetime]) -> str:
    if date is None:
        return ""
    return date.astimezone(timezone.utc).strftime("%b %d, %Y %H:%M UTC")


def format_number(value: float) -> str:
    return f"{value:,.0f}"
