"""
[V5.0] 命令行界面 (Interface) 层
- serve: 启动 HTTP 服务 (uvicorn)
- feed:  在终端输出提交动态
"""
import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from config import GlobalConfig
from context import resolve_feed_context
from data_sources.factory import get_commit_source
from feed_composer import CommitFeedComposer
from kv_store.factory import get_store
import page_builder

logger = logging.getLogger(__name__)


def setup_parser() -> argparse.ArgumentParser:
    """
    (V5.0) 负责所有 argparse 的定义。
    """
    parser = argparse.ArgumentParser(
        description="Fed News 提交动态 (V5.0)",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "-r",
        "--repo",
        type=str,
        default=None,
        help="(覆盖) 提交来源：owner/repo、GitHub URL 或本地仓库路径。\n"
        "(默认: .env 中的 COMMIT_SOURCE_REPO)",
    )
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="启动 HTTP 服务")
    serve.add_argument("--host", type=str, default=None, help="监听地址 (默认: SERVER_HOST)")
    serve.add_argument("--port", type=int, default=None, help="监听端口 (默认: SERVER_PORT)")
    serve.add_argument("--reload", action="store_true", help="开发模式自动重载")

    feed = subparsers.add_parser("feed", help="在终端输出提交动态")
    feed.add_argument(
        "-c",
        "--category",
        type=str,
        default=None,
        help="只显示指定分类 (website, research, ops, docs, twitter, stats, other)\n(默认: all)",
    )
    feed.add_argument(
        "--show-stats", action="store_true", help="显示统计播报类提交 (默认隐藏)"
    )
    feed.add_argument(
        "-n", "--limit", type=int, default=None, help="最多获取的提交数量 (默认: 200)"
    )
    return parser


def _run_feed(args, global_config: GlobalConfig) -> int:
    context = resolve_feed_context(
        args.category, "false" if args.show_stats else None, global_config
    )
    if args.limit is not None:
        context.limit = args.limit

    composer = CommitFeedComposer(
        global_config, get_commit_source(global_config), get_store(global_config)
    )
    page = composer.compose(context)
    print(page_builder.generate_text_feed(page))
    return 0


def _run_serve(args, global_config: GlobalConfig) -> int:
    from server import create_app

    host = args.host or global_config.SERVER_HOST
    port = args.port or global_config.SERVER_PORT
    logger.info("=" * 50)
    logger.info("🚀 (V5.0) Fed News 服务启动...")
    logger.info(f"   [提交来源]: {global_config.COMMIT_SOURCE_REPO}")
    logger.info(f"   [评论存储]: {global_config.KV_BACKEND}")
    logger.info(f"   [地址]: http://{host}:{port}/commits")
    logger.info("=" * 50)

    if args.reload:
        uvicorn.run("server:create_app", factory=True, host=host, port=port, reload=True)
    else:
        uvicorn.run(create_app(global_config), host=host, port=port)
    return 0


def run_cli(argv: Optional[List[str]] = None) -> int:
    """
    (V5.0) 主入口点。
    """
    parser = setup_parser()
    args = parser.parse_args(argv)

    global_config = GlobalConfig()
    if args.repo:
        global_config.COMMIT_SOURCE_REPO = args.repo

    if args.command == "serve":
        return _run_serve(args, global_config)
    if args.command == "feed":
        return _run_feed(args, global_config)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(run_cli())
