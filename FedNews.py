"""
Fed News 提交动态 (V5.0)
- cli.py: 负责命令行界面和配置组装
- server.py: 负责 HTTP 服务
- feed_composer.py: 负责核心流程编排
- FedNews.py: 仅作为主入口启动器
"""

import logging
import sys

# 1. 初始化日志 (必须在所有模块导入之前完成)
import utils

utils.setup_logging()

logger = logging.getLogger(__name__)


def main() -> int:
    try:
        # 延迟导入 cli 模块，确保日志已配置
        import cli

        return cli.run_cli()

    except Exception as e:
        logger.error(f"❌ 发生未处理的全局异常: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
