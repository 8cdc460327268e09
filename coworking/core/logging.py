"""
@description 日志初始化
@responsibility 根据配置设置 loguru 的控制台与文件输出
"""

import sys
from pathlib import Path

from loguru import logger

from coworking.core.config import LoggingConfig


def setup_logging(config: LoggingConfig) -> None:
    """重置 loguru 输出：控制台 + 可选的轮转日志文件"""
    logger.remove()
    logger.add(sys.stderr, level=config.level)

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level=config.level,
            rotation=config.rotation,
            retention=config.retention,
            encoding="utf-8",
            enqueue=True,
        )
        logger.debug(f"日志文件输出已启用: {log_path}")
