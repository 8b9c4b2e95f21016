"""命令注册与分发

CommandManager 负责:
  - 注册 Command 实例
  - 按完整名称或唯一前缀查找命令 (`bubble dep` 等同 `bubble dependency`)
  - 执行前检查 deprecated()，为弃用命令输出告警
  - 把命令挂到 click group 上
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import click

from bubble.core.command import Command
from bubble.core.exceptions import BubbleError, CommandNotFoundError

logger = logging.getLogger(__name__)


def match_prefix(name: str, names: Iterable[str]) -> str:
    """在 names 中查找 name：完全匹配优先，否则要求前缀唯一"""
    candidates = sorted(names)
    if name in candidates:
        return name
    matches = [n for n in candidates if n.startswith(name)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise CommandNotFoundError(f"未知命令: {name}")
    raise CommandNotFoundError(
        f"命令 '{name}' 不唯一，可能是: {', '.join(matches)}", candidates=matches,
    )


class CommandManager:
    """命令注册表"""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def register(self, cmd: Command) -> Command:
        if cmd.command in self._commands:
            raise ValueError(f"命令已注册: {cmd.command}")
        self._commands[cmd.command] = cmd
        logger.debug("命令已注册: %s", cmd.command)
        return cmd

    def command_names(self) -> list[str]:
        return sorted(self._commands)

    def find(self, name: str) -> Command:
        return self._commands[match_prefix(name, self._commands)]

    def invoke(self, name: str, options: dict[str, Any] | None = None) -> Any:
        """执行命令；弃用命令先输出告警"""
        cmd = self.find(name)
        if cmd.deprecated():
            cmd.deprecation_warning()
        logger.info("执行命令: %s", cmd.command)
        return cmd.execute(options or {})

    def to_click(self, cmd: Command) -> click.Command:
        def callback(**options: Any) -> Any:
            try:
                return self.invoke(cmd.command, options)
            except BubbleError as e:
                raise click.ClickException(str(e)) from e

        return click.Command(
            cmd.command, callback=callback, params=cmd.params(), help=cmd.summary,
        )

    def attach(self, group: click.Group) -> None:
        """把全部已注册命令挂到 group 上"""
        for name in self.command_names():
            group.add_command(self.to_click(self._commands[name]))


class PrefixGroup(click.Group):
    """支持唯一前缀匹配的 click group"""

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        try:
            resolved = match_prefix(cmd_name, self.list_commands(ctx))
        except CommandNotFoundError as e:
            if e.candidates:
                ctx.fail(str(e))
            return None
        return super().get_command(ctx, resolved)

    def resolve_command(
        self, ctx: click.Context, args: list[str],
    ) -> tuple[str | None, click.Command | None, list[str]]:
        # 返回完整命令名，帮助信息与错误提示里显示全名
        _, cmd, rest = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, rest
