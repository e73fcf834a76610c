"""
[V5.0] 全局配置
- 所有适配器 (数据源 / KV 存储 / 服务) 都通过构造函数接收 GlobalConfig 实例，
  测试中可以直接覆盖实例属性。
"""
import os
from dotenv import load_dotenv


# --- 脚本基础路径 ---
SCRIPT_BASE_PATH = os.path.abspath(os.path.dirname(__file__))
env_path = os.path.join(SCRIPT_BASE_PATH, ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)
else:
    load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name, "")
    try:
        return int(value) if value.strip() else default
    except ValueError:
        return default


class GlobalConfig:
    """
    (V5.0) Fed News 的全局应用配置。
    """

    # --- 路径配置 ---
    SCRIPT_BASE_PATH: str = SCRIPT_BASE_PATH
    TEMPLATES_DIR_NAME: str = "templates"
    PAGE_TEMPLATE_NAME: str = "commits.html.j2"

    # =================================================================
    # --- 提交数据源 (GitHub / 本地 Git) ---
    # =================================================================
    # 支持 "owner/repo"、https://github.com/owner/repo 或本地仓库路径
    COMMIT_SOURCE_REPO: str = os.getenv("COMMIT_SOURCE_REPO", "snark-tank/ralph")
    GITHUB_TOKEN: str = os.getenv("GITHUB_TOKEN", "")
    GITHUB_BASE_URL: str = os.getenv("GITHUB_BASE_URL", "https://api.github.com")

    # GitHub API 单页上限为 100
    COMMITS_PER_PAGE: int = 100
    COMMITS_FETCH_LIMIT: int = _env_int("COMMITS_FETCH_LIMIT", 200)

    # 重新验证窗口 (秒)：外部提交数据与页面缓存的最大寿命
    COMMITS_REVALIDATE_SECONDS: int = _env_int("COMMITS_REVALIDATE_SECONDS", 60)

    # 本地 Git 模式
    GIT_LOG_FORMAT = "git log --skip={skip} -n {count} --pretty=format:%H%x1f%an%x1f%aI%x1f%B%x1e"

    # =================================================================
    # --- 键值存储 (评论) ---
    # =================================================================
    KV_BACKEND: str = os.getenv("KV_BACKEND", "sqlite").lower()
    KV_SQLITE_PATH: str = os.getenv(
        "KV_SQLITE_PATH", os.path.join(SCRIPT_BASE_PATH, "data", "fednews.sqlite3")
    )

    # 评论限制
    COMMENT_MAX_LENGTH: int = 500
    COMMENTS_DEFAULT_LIMIT: int = 50
    COMMENTS_MAX_LIMIT: int = 100

    # =================================================================
    # --- HTTP 服务 ---
    # =================================================================
    SERVER_HOST: str = os.getenv("SERVER_HOST", "127.0.0.1")
    SERVER_PORT: int = _env_int("SERVER_PORT", 8000)
    SITE_TITLE: str = "Fed News"

    def is_github_authenticated(self) -> bool:
        """是否配置了 GitHub Token (匿名访问限额为 60 次/小时)"""
        return bool(self.GITHUB_TOKEN)

    @property
    def templates_path(self) -> str:
        return os.path.join(self.SCRIPT_BASE_PATH, self.TEMPLATES_DIR_NAME)

    def repo_web_url(self) -> str:
        """返回提交来源仓库的网页地址 (本地仓库返回空字符串)"""
        repo = self.COMMIT_SOURCE_REPO.strip()
        if repo.startswith(("http://", "https://")):
            return repo[:-4] if repo.endswith(".git") else repo
        if repo.startswith("git@"):
            return "https://github.com/" + repo.split(":", 1)[1].replace(".git", "")
        if os.path.exists(repo):
            return ""
        return f"https://github.com/{repo}"
