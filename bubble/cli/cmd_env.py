"""CLI — 运行环境信息"""

from __future__ import annotations

import sys
from typing import Any

import click

from bubble import __version__
from bubble.compat import CONFIG_PRIORITIES, get_config_map
from bubble.core.command import Command
from bubble.core.command_manager import CommandManager
from bubble.core.config import get_config


def register(manager: CommandManager) -> None:
    manager.register(EnvironmentCommand())


class EnvironmentCommand(Command):
    command = "environment"
    summary = "显示 bubble 与 Python 运行环境信息"

    def execute(self, options: dict[str, Any]) -> None:
        cfg = get_config()
        click.echo(f"{cfg.tool_name.upper()} VERSION: {__version__}")
        click.echo(f"PYTHON VERSION: {sys.version.split()[0]}")
        click.echo(f"DEPENDENCY MANIFEST: {cfg.manifest}")
        click.echo("PYTHON BUILD CONFIGURATION:")
        config_map = get_config_map()
        for key in CONFIG_PRIORITIES:
            value = config_map[key]
            click.echo(f"  - {key}: {'(unset)' if value in (None, '') else value}")
