"""
[V5.0] 提交解读
为每个提交生成面向社区的一句话摘要 (TL;DR) 和"为什么重要"说明。
"""
from models import ParsedCommit

CATEGORY_WHY = {
    "website": "Improves the user experience and interface of fed.markets",
    "research": "Informs strategy and optimization of the distribution system",
    "ops": "Directly affects token supply and holder rewards",
    "stats": "Tracks distribution progress toward QE milestones",
    "docs": "Helps the community understand how the system works",
    "twitter": "Grows awareness and community engagement",
    "other": "General improvements to the project",
}

# 标题关键词 -> 摘要 (按分类，先命中者生效)
TITLE_HINTS = {
    "website": [
        (("polish", "cosmetic"), "Visual refinements to improve the look and feel of the website."),
        (("seo", "metadata"), "Improvements to help more people discover $FED through search engines."),
        (("background", "effect"), "Enhanced visual effects to make the website more engaging."),
    ],
    "ops": [
        (("buyback",), "Buyback operation reducing circulating supply and supporting token price."),
        (("burn",), "Token burn permanently removing supply from circulation."),
    ],
}

CATEGORY_TLDR = {
    "research": "New research update analyzing market conditions, tokenomics, or strategy improvements for the $FED ecosystem.",
    "website": "Updates to the fed.markets website improving functionality or appearance.",
    "ops": "Operational update affecting the distribution or token mechanics.",
    "docs": "Documentation update helping users understand the $FED system better.",
    "twitter": "Social media activity to grow community awareness and engagement.",
}

DEFAULT_TLDR = "Development update improving the $FED ecosystem."


def why_it_matters(commit: ParsedCommit) -> str:
    return CATEGORY_WHY.get(commit.category, CATEGORY_WHY["other"])


def generate_tldr(commit: ParsedCommit) -> str:
    if commit.stats is not None:
        text = f"Distribution milestone: ${commit.stats.distributed:,.0f} USD1 has been distributed across {commit.stats.distributions} distribution cycles"
        if commit.stats.holders:
            text += f" to {commit.stats.holders:,} holders"
        return text + "."

    title = commit.title.lower()
    for keywords, summary in TITLE_HINTS.get(commit.category, []):
        if any(k in title for k in keywords):
            return summary
    return CATEGORY_TLDR.get(commit.category, DEFAULT_TLDR)
