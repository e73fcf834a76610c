import subprocess
import logging
from typing import Optional, List

from models import RawCommitRecord

logger = logging.getLogger(__name__)

# git log 输出中的字段 / 记录分隔符 (%x1f / %x1e)
FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"


def run_git_command(
    cmd: str, repo_path: str, context: str = "执行Git命令"
) -> Optional[str]:
    """
    统一的Git命令执行函数
    - 在 repo_path 下执行，失败或超时返回 None
    """
    try:
        logger.info(f"在 {repo_path} 中执行命令: {cmd}")
        result = subprocess.run(
            cmd,
            shell=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            timeout=30,
            cwd=repo_path,
        )
        if result.returncode != 0:
            logger.error(f"{context}失败: {result.stderr}")
            return None
        logger.info(f"{context}成功，输出 {len(result.stdout)} 字节")
        return result.stdout
    except subprocess.TimeoutExpired:
        logger.error(f"{context}超时")
        return None
    except OSError as e:
        logger.error(f"{context}出错: {e}")
        return None


def is_git_repository(repo_path: str) -> bool:
    """检查指定路径是否为Git仓库"""
    try:
        result = subprocess.run(
            "git rev-parse --is-inside-work-tree",
            shell=True,
            capture_output=True,
            text=True,
            cwd=repo_path,
        )
        return result.returncode == 0
    except OSError:
        return False


def get_git_log_page(
    repo_path: str, log_format: str, skip: int, count: int
) -> Optional[str]:
    """获取一页Git提交历史 (最新优先)"""
    cmd = log_format.format(skip=skip, count=count)
    return run_git_command(cmd, repo_path, "获取Git提交历史")


def parse_single_commit(chunk: str) -> Optional[RawCommitRecord]:
    """解析单条提交记录: sha | 作者 | ISO 时间 | 完整信息"""
    parts = chunk.strip("\n").split(FIELD_SEP)
    if len(parts) < 4 or not parts[0].strip():
        logger.warning(f"提交格式异常: {chunk[:80]!r}")
        return None
    return RawCommitRecord(
        sha=parts[0].strip(),
        author_name=parts[1].strip() or None,
        date=parts[2].strip() or None,
        message=FIELD_SEP.join(parts[3:]).strip(),
    )


def parse_git_log(log_output: str) -> List[RawCommitRecord]:
    """解析Git日志输出"""
    commits = []
    if not log_output or not log_output.strip():
        logger.warning("Git日志输出为空")
        return commits
    for chunk in log_output.split(RECORD_SEP):
        if not chunk.strip():
            continue
        commit = parse_single_commit(chunk)
        if commit:
            commits.append(commit)
    logger.info(f"成功解析 {len(commits)} 个提交")
    return commits
