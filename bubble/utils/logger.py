"""bubble 日志配置

根日志器统一输出到 stderr，支持人类可读与 JSON 两种格式。
弃用提示不走日志，而是直接写诊断通道，见 bubble.core.deprecate。
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

LOG_LEVEL_ENV = "BUBBLE_LOG_LEVEL"
LOG_JSON_ENV = "BUBBLE_LOG_JSON"

_TEXT_FORMAT = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """每条记录输出为一行 JSON，便于 CI 收集"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _clear_handlers(root: logging.Logger) -> None:
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()


def setup_logging(level: str = "WARNING", json_output: bool = False) -> None:
    """配置根日志器

    参数:
        level: 日志级别字符串，无法识别时退回 WARNING
        json_output: 为 True 时使用 JSONFormatter

    重复调用会先清理已有 handler，不会重复输出。
    """
    root = logging.getLogger()
    _clear_handlers(root)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    root.addHandler(handler)


def setup_logging_from_env() -> None:
    """按 BUBBLE_LOG_LEVEL / BUBBLE_LOG_JSON 环境变量配置日志"""
    setup_logging(
        level=os.getenv(LOG_LEVEL_ENV, "WARNING"),
        json_output=os.getenv(LOG_JSON_ENV, "") == "1",
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def reset_logging() -> None:
    """清理根日志器的全部 handler，测试中常用"""
    _clear_handlers(logging.getLogger())
