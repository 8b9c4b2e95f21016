"""运行时兼容定义

这里集中存放为兼容旧调用方、不同解释器构建而保留的定义，集中在一处
便于判断何时可以移除。
"""

from __future__ import annotations

import sysconfig
from typing import Any

from bubble import __version__

# 旧名称，新代码请直接使用 bubble.__version__
BUBBLE_VERSION = __version__

# environment 命令展示的解释器构建变量，按顺序输出
CONFIG_PRIORITIES = [
    "py_version",
    "py_version_short",
    "prefix",
    "exec_prefix",
    "BINDIR",
    "LIBDIR",
    "INCLUDEPY",
    "LDLIBRARY",
    "SOABI",
    "EXT_SUFFIX",
    "MULTIARCH",
    "EXE",
]


class ConfigMap(dict):
    """解释器构建配置

    首次访问某个键时才从 sysconfig 读取并缓存；不同平台缺失的变量为 None。
    """

    def __missing__(self, key: Any) -> Any:
        value = sysconfig.get_config_var(str(key))
        self[key] = value
        return value


_config_map: ConfigMap | None = None


def get_config_map() -> ConfigMap:
    """进程级 ConfigMap，优先变量已预先填充"""
    global _config_map  # noqa: PLW0603
    if _config_map is None:
        _config_map = ConfigMap()
        for key in CONFIG_PRIORITIES:
            _config_map[key] = sysconfig.get_config_var(key)
    return _config_map
