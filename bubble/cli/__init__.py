"""bubble 命令行接口

子命令按领域拆分为 cmd_* 模块，每个模块把自己的 Command 注册到
CommandManager，再统一挂到 main group。
"""

import click

from bubble import __version__
from bubble.core.command_manager import CommandManager, PrefixGroup
from bubble.core.config import DEFAULT_CONFIG_FILE, init_config
from bubble.core.deprecate import set_skip
from bubble.core.exceptions import BubbleError
from bubble.utils.logger import setup_logging_from_env


@click.group(cls=PrefixGroup)
@click.version_option(version=__version__, prog_name="bubble")
@click.option("--config", "config_path", default=DEFAULT_CONFIG_FILE, help="配置文件路径")
def main(config_path: str) -> None:
    """bubble - 包管理工具"""
    setup_logging_from_env()
    try:
        cfg = init_config(config_path)
    except BubbleError as e:
        raise click.ClickException(str(e)) from e
    if cfg.skip_deprecations:
        set_skip(True)


manager = CommandManager()

# 注册各领域子命令
from bubble.cli.cmd_deps import register as _reg_deps  # noqa: E402
from bubble.cli.cmd_env import register as _reg_env  # noqa: E402

_reg_deps(manager)
_reg_env(manager)

manager.attach(main)
