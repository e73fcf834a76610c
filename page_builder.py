"""
[V5.0] 页面生成器 - Jinja2 模板渲染
负责准备数据上下文，并调用 Jinja2 模板渲染提交动态页面；另提供纯文本版本供 CLI 使用。
"""
import html
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import markdown
from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from config import GlobalConfig
from feed_composer import CommitFeedPage
from models import CATEGORY_ALL, ParsedCommit, UpdateComment
from commit_insights import generate_tldr, why_it_matters
import utils

logger = logging.getLogger(__name__)

# 过滤栏中展示的分类 (stats 通过单独的开关控制)
FILTER_CATEGORIES = [CATEGORY_ALL, "website", "research", "ops", "docs", "other"]


def generate_text_feed(page: CommitFeedPage, now: Optional[datetime] = None) -> str:
    """
    生成纯文本格式的提交动态 (用于终端输出)。
    """
    context = page.context
    lines = [
        "=" * 80,
        f"{context.global_config.SITE_TITLE} - All Updates".center(80),
        "=" * 80,
        f"分类: {context.category}  |  隐藏统计: {'是' if context.hide_stats else '否'}",
        f"提交数量: {len(page.commits)} / {page.total_commits}",
    ]
    if page.latest_stats:
        lines.append(
            f"最新统计: ${utils.format_number(page.latest_stats.distributed)} distributed, "
            f"{page.latest_stats.distributions} distributions"
        )
    lines.append("")

    if not page.commits:
        lines.append("⚠️  未找到提交记录")
    for commit in page.commits:
        comments = page.comment_count(commit.sha)
        comment_info = f" 💬{comments}" if comments else ""
        lines.append(
            f"[{commit.category:<8}] {commit.short_sha} - {commit.title} "
            f"({utils.format_relative_date(commit.date, now)}, {commit.author}){comment_info}"
        )
    lines.append("=" * 80)
    return "\n".join(lines)


def _get_css_styles(global_config: GlobalConfig) -> str:
    """读取 CSS 文件内容"""
    css_path = os.path.join(global_config.templates_path, "styles.css")
    try:
        with open(css_path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        logger.error(f"❌ CSS 模板文件未找到: {css_path}")
        return "/* CSS 模板文件未找到 */"
    except OSError as e:
        logger.error(f"❌ 加载 CSS 模板失败: {e}")
        return f"/* 加载 CSS 模板失败: {e} */"


def _escape_raw_html(text: str) -> str:
    # 只转义 & 和 <，保留 Markdown 的 > 引用语法
    return text.replace("&", "&amp;").replace("<", "&lt;")


def render_markdown(text: str) -> Markup:
    """提交正文 / 评论 -> HTML (原始 HTML 标签不会生效)"""
    if not text:
        return Markup("")
    return Markup(
        markdown.markdown(_escape_raw_html(text), extensions=["fenced_code", "sane_lists", "nl2br"])
    )


def build_query(category: str, hide_stats: bool) -> str:
    """生成过滤链接的查询字符串 (默认值不写入 URL)"""
    params = {}
    if category != CATEGORY_ALL:
        params["category"] = category
    if not hide_stats:
        params["hideStats"] = "false"
    return "?" + urlencode(params) if params else "?"


def _comment_view(comment: UpdateComment, now: datetime) -> Dict[str, Any]:
    created = datetime.fromtimestamp(comment.created_at / 1000, tz=timezone.utc)
    return {
        "comment": comment,
        "content_html": render_markdown(comment.content),
        "relative_date": utils.format_relative_date(created, now),
        "replies": [_comment_view(r, now) for r in comment.replies],
    }


def _commit_view(commit: ParsedCommit, page: CommitFeedPage, now: datetime) -> Dict[str, Any]:
    return {
        "commit": commit,
        "body_html": render_markdown(commit.body),
        "tldr": generate_tldr(commit),
        "why": why_it_matters(commit),
        "relative_date": utils.format_relative_date(commit.date, now),
        "full_date": utils.format_datetime(commit.date),
        "comment_count": page.comment_count(commit.sha),
        "comments": [_comment_view(c, now) for c in page.comment_thread(commit.sha)],
    }


def _filter_links(page: CommitFeedPage) -> List[Dict[str, Any]]:
    context = page.context
    return [
        {
            "id": category,
            "href": build_query(category, context.hide_stats),
            "active": context.category == category,
        }
        for category in FILTER_CATEGORIES
    ]


def generate_html_page(
    page: CommitFeedPage, global_config: GlobalConfig, now: Optional[datetime] = None
) -> str:
    """
    (V5.0) 使用 Jinja2 模板引擎生成提交动态页面。
    """
    now = now or datetime.now(timezone.utc)
    context = page.context

    # 1. 准备模板环境
    env = Environment(
        loader=FileSystemLoader(global_config.templates_path),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )

    # 2. 组装完整上下文
    template_context = {
        "title": f"{global_config.SITE_TITLE} - All Updates",
        "site_title": global_config.SITE_TITLE,
        "repo_url": global_config.repo_web_url(),
        "css_content": Markup(_get_css_styles(global_config)),
        "filters": _filter_links(page),
        "hide_stats": context.hide_stats,
        "stats_toggle_href": build_query(context.category, not context.hide_stats),
        "latest_stats": page.latest_stats,
        "total_commits": page.total_commits,
        "commits": [_commit_view(c, page, now) for c in page.commits],
        "generation_time": now.strftime("%Y-%m-%d %H:%M:%S UTC"),
        "format_number": utils.format_number,
    }

    # 3. 加载并渲染模板
    template_name = global_config.PAGE_TEMPLATE_NAME
    try:
        template = env.get_template(template_name)
        logger.info(f"🎨 正在渲染 Jinja2 模板: {template_name}")
        return template.render(**template_context)
    except Exception as e:
        logger.error(f"❌ Jinja2 模板渲染失败: {e}", exc_info=True)
        return f"<h1>错误：模板渲染失败</h1><pre>{html.escape(str(e))}</pre>"
