"""日志管理 - 中继服务的日志配置。

控制台输出带颜色；指定目录时另外写两个按大小轮转的文件:
relay.log 记录全部级别，error.log 只记录 ERROR 以上。
"""

import logging
import logging.config
from pathlib import Path
from typing import Any, Dict, Optional

LOG_FILE = "relay.log"
ERROR_LOG_FILE = "error.log"

_PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# 只保留警告以上的第三方 logger
_NOISY_LOGGERS = ("websockets", "asyncio", "uvicorn.access")


class ColoredFormatter(logging.Formatter):
    """按级别给 levelname 上色，ERROR 以上附带源码位置"""

    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self):
        super().__init__(datefmt=_DATE_FORMAT)

    def format(self, record):
        color = self.COLORS.get(record.levelno, "")
        where = "[%(filename)s:%(lineno)d] " if record.levelno >= logging.ERROR else ""
        self._style._fmt = (
            f"%(asctime)s | {color}%(levelname)-8s{self.RESET} | %(name)-28s | {where}%(message)s"
        )
        return super().format(record)


def build_logging_config(
    log_dir: Optional[str],
    log_level: str,
    max_bytes: int,
    backup_count: int,
) -> Dict[str, Any]:
    """
    Build a ``logging.config.dictConfig`` mapping.

    Args:
        log_dir: Directory for log files, None/empty for console only
        log_level: Root level name
        max_bytes: Rotate a file once it reaches this size
        backup_count: Rotated files to keep

    Returns:
        dictConfig-compatible dict
    """
    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "formatter": "colored",
        },
    }
    if log_dir:
        for name, filename, level in (
            ("file", LOG_FILE, "DEBUG"),
            ("errors", ERROR_LOG_FILE, "ERROR"),
        ):
            handlers[name] = {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": str(Path(log_dir) / filename),
                "maxBytes": max_bytes,
                "backupCount": backup_count,
                "encoding": "utf-8",
                "level": level,
                "formatter": "plain",
            }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "colored": {"()": ColoredFormatter},
            "plain": {"format": _PLAIN_FORMAT, "datefmt": _DATE_FORMAT},
        },
        "handlers": handlers,
        "root": {"level": log_level.upper(), "handlers": list(handlers)},
        "loggers": {
            # uvicorn 不再自带 handler，统一交给根 logger
            "uvicorn": {"handlers": [], "propagate": True},
            "uvicorn.error": {"handlers": [], "propagate": True},
            **{name: {"level": "WARNING", "handlers": [], "propagate": True} for name in _NOISY_LOGGERS},
        },
    }


def setup_logging(
    log_dir: Optional[str] = "logs",
    log_level: str = "INFO",
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> None:
    """
    初始化全局日志配置

    Args:
        log_dir: 日志文件目录，为空时只输出到控制台
        log_level: 日志级别（DEBUG, INFO, WARNING, ERROR, CRITICAL）
        max_bytes: 单个日志文件最大字节数
        backup_count: 保留的日志文件备份数量
    """
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_dir, log_level, max_bytes, backup_count))

    root_logger = logging.getLogger()
    root_logger.info(f"日志系统初始化完成，级别: {log_level.upper()}")
    if log_dir:
        root_logger.info(f"日志目录: {Path(log_dir).absolute()}")


def get_logger(name: str) -> logging.Logger:
    """
    获取指定名称的logger实例

    Args:
        name: logger名称，通常使用 __name__

    Returns:
        Logger实例
    """
    return logging.getLogger(name)
