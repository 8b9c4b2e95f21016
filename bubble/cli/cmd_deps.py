"""CLI — 依赖清单命令"""

from __future__ import annotations

from typing import Any

import click

from bubble.core.command import Command
from bubble.core.command_manager import CommandManager
from bubble.core.config import get_config
from bubble.core.dependency import load_dependencies
from bubble.core.deprecate import deprecated_command


def register(manager: CommandManager) -> None:
    manager.register(DependencyCommand())
    manager.register(QueryCommand())


class DependencyCommand(Command):
    command = "dependency"
    summary = "列出依赖清单中声明的依赖"

    def params(self) -> list[click.Parameter]:
        return [
            click.Option(["--manifest"], default=None, help="依赖清单路径（默认取配置中的 manifest）"),
            click.Option(["--group"], default=None, help="只列出指定分组"),
        ]

    def execute(self, options: dict[str, Any]) -> None:
        path = options.get("manifest") or get_config().manifest
        deps = load_dependencies(path)
        group = options.get("group")
        if group:
            deps = [d for d in deps if group in d.options.groups]
        if not deps:
            click.echo("没有已声明的依赖。")
            return
        for dep in deps:
            extra = ""
            if dep.options.groups != ("default",):
                extra += f"  groups={','.join(dep.options.groups)}"
            if dep.options.git or dep.options.path:
                extra += f"  from={dep.options.git or dep.options.path}"
            click.echo(f"  {dep}{extra}")


@deprecated_command("4.0")
class QueryCommand(DependencyCommand):
    command = "query"
    summary = "查询依赖（已弃用，请改用 dependency）"
