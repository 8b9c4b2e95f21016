"""统一异常体系

所有业务异常继承 BubbleError，CLI 层据此输出友好提示。
被弃用方法自身抛出的异常不在此体系内，原样透传。
"""

from __future__ import annotations


class BubbleError(Exception):
    """框架基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(BubbleError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class DependencyError(BubbleError):
    """依赖清单解析失败"""

    code = "DEPENDENCY_ERROR"


class ValidationError(BubbleError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class DeprecationTargetError(BubbleError):
    """弃用标注的目标成员不存在或已被标注"""

    code = "NO_SUCH_MEMBER"

    def __init__(self, owner: str, member: str, reason: str = "不存在") -> None:
        super().__init__(f"无法标注弃用: {owner}.{member} {reason}")
        self.owner = owner
        self.member = member


class CommandNotFoundError(BubbleError):
    """命令不存在或前缀匹配不唯一"""

    code = "COMMAND_NOT_FOUND"

    def __init__(self, message: str, candidates: list[str] | None = None) -> None:
        super().__init__(message)
        self.candidates = candidates or []
