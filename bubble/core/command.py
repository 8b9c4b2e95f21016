"""命令基类

每个子命令是一个 Command 子类实例，由 CommandManager 注册并暴露到
click。弃用命令通过 bubble.core.deprecate.annotate_command 覆盖
deprecated() / deprecation_warning() 两个钩子。
"""

from __future__ import annotations

from typing import Any

import click


class Command:
    """子命令基类

    子类需设置 command（命令名）并实现 execute()。
    """

    command: str = ""
    summary: str = ""
    # 弃用命令的移除标记，由 annotate_command 写入
    removal: Any = None

    def __init__(self) -> None:
        if not self.command:
            raise ValueError(f"{type(self).__name__} 未设置 command 名称")

    def params(self) -> list[click.Parameter]:
        """命令接受的 click 参数"""
        return []

    def execute(self, options: dict[str, Any]) -> Any:
        raise NotImplementedError

    def deprecated(self) -> bool:
        return False

    def deprecation_warning(self) -> None:
        """弃用命令执行前调用，普通命令无操作"""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.command!r}>"
