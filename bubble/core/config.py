"""集中配置管理

从 YAML 文件加载，未知键放入 extra；未初始化时使用默认值。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from typing import Any

import yaml

from bubble.core.exceptions import ConfigError
from bubble.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "bubble.yml"


@dataclass
class Config:
    """全局配置"""

    # 弃用提示中的工具名: "It will be removed in <tool_name> 4.0."
    tool_name: str = "Bubble"
    manifest: str = "Bubblefile.yml"
    # 为 True 时 CLI 启动即关闭弃用提示
    skip_deprecations: bool = False

    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，文件不存在则返回默认"""
        try:
            data = load_yaml(path)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigError(f"配置文件无效: {path}: {e}") from e
        if not data:
            return cls()

        known = {f.name for f in fields(cls)} - {"extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}

        if "tool_name" in matched and not isinstance(matched["tool_name"], str):
            raise ConfigError(f"tool_name 必须是字符串: {path}")
        if "manifest" in matched and not isinstance(matched["manifest"], str):
            raise ConfigError(f"manifest 必须是字符串: {path}")
        if "skip_deprecations" in matched and not isinstance(matched["skip_deprecations"], bool):
            raise ConfigError(f"skip_deprecations 必须是布尔值: {path}")

        return cls(**matched, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# 首次 import 时不读文件，由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current


def reset_config() -> None:
    global _current  # noqa: PLW0603
    _current = None
