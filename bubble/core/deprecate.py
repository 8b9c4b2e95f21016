"""弃用标注

把类上已有的方法包装为 "先输出弃用提示、再执行原逻辑" 的版本，调用方
无需改变调用方式。命令对象则通过 annotate_command 挂上弃用钩子，由
CommandManager 在执行前触发。

用法:
    class Legacy:
        def instance_method(self):
            ...

        @classmethod
        def class_method(cls):
            ...

    deprecate_with_date(Legacy, "instance_method", "new_method", 2030, 4)
    deprecate(Legacy, "class_method", replacement=NO_REPLACEMENT, version="4.0")

    # 或在类体中直接声明
    class Legacy:
        @deprecated_member("new_method", "4.0")
        def old_method(self):
            ...

输出示例 (stderr):
    NOTE: Legacy#instance_method is deprecated; use new_method instead. It will be removed on or after 2030-04-01.
    Legacy#instance_method called from app.py:12.

测试中用 skip_during() 关闭提示。全局开关没有加锁，只应在单线程的
测试流程中切换。
"""

from __future__ import annotations

import enum
import functools
import inspect
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Protocol, Union

import click

from bubble.core.command import Command
from bubble.core.config import get_config
from bubble.core.exceptions import DeprecationTargetError, ValidationError
from bubble.utils.caller import format_location, location_of_caller

logger = logging.getLogger(__name__)

DEPRECATIONS_ATTR = "__deprecations__"
_RECORD_ATTR = "__deprecation__"


class MemberKind(enum.Enum):
    """被标注成员的调用形式，决定提示中的目标写法"""

    INSTANCE = "instance"  # Type#member
    STATIC = "static"      # Type.member


class Replacement(enum.Enum):
    NONE = "none"


NO_REPLACEMENT = Replacement.NONE


# =========================================================================
# 移除标记
# =========================================================================

@dataclass(frozen=True)
class RemovalVersion:
    """计划在某个版本移除"""

    label: str

    def __post_init__(self) -> None:
        if not isinstance(self.label, str) or not self.label.strip():
            raise ValidationError(f"移除版本必须是非空字符串: {self.label!r}")

    def describe(self, tool_name: str) -> str:
        return f"in {tool_name} {self.label}"


@dataclass(frozen=True)
class RemovalDate:
    """计划在某年某月（当月 1 日）之后移除"""

    year: int
    month: int

    def __post_init__(self) -> None:
        errors: list[str] = []
        if not _is_int(self.year) or not 1 <= self.year <= 9999:
            errors.append(f"year 必须在 [1, 9999] 内: {self.year!r}")
        if not _is_int(self.month) or not 1 <= self.month <= 12:
            errors.append(f"month 必须在 [1, 12] 内: {self.month!r}")
        if errors:
            raise ValidationError("移除日期无效", details=errors)

    def describe(self, tool_name: str) -> str:
        return f"on or after {self.year:04d}-{self.month:02d}-01"


RemovalMarker = Union[RemovalVersion, RemovalDate]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def as_removal(marker: Any) -> RemovalMarker:
    """把 "4.0" 或 (2030, 4) 这样的输入统一为移除标记"""
    if isinstance(marker, (RemovalVersion, RemovalDate)):
        return marker
    if isinstance(marker, str):
        return RemovalVersion(marker)
    if isinstance(marker, tuple) and len(marker) == 2:
        return RemovalDate(*marker)
    raise ValidationError(f"无法识别的移除标记: {marker!r}")


def _check_replacement(replacement: Any) -> str | Replacement:
    if replacement is NO_REPLACEMENT:
        return replacement
    if isinstance(replacement, str) and replacement.strip():
        return replacement
    raise ValidationError(
        f"替代方案必须是非空字符串或 NO_REPLACEMENT: {replacement!r}"
    )


def replacement_clause(replacement: str | Replacement) -> str:
    if replacement is NO_REPLACEMENT:
        return " with no replacement"
    return f"; use {replacement} instead"


# =========================================================================
# 弃用记录
# =========================================================================

@dataclass(frozen=True)
class DeprecationRecord:
    """一次弃用声明，标注时创建，之后不再修改"""

    owner: type
    name: str
    kind: MemberKind
    replacement: str | Replacement
    removal: RemovalMarker
    original: Callable[..., Any]

    def target(self, receiver: Any = None) -> str:
        """实例调用为 Type#member，类级调用为 Type.member"""
        if self.kind is MemberKind.INSTANCE:
            return f"{type(receiver).__name__}#{self.name}"
        # classmethod 的接收者是实际调用的类，子类调用时显示子类名
        cls = receiver if isinstance(receiver, type) else self.owner
        return f"{cls.__name__}.{self.name}"

    def message(self, target: str, location: str, tool_name: str) -> str:
        return (
            f"NOTE: {target} is deprecated{replacement_clause(self.replacement)}. "
            f"It will be removed {self.removal.describe(tool_name)}.\n"
            f"{target} called from {location}."
        )


def command_message(command: str, removal: RemovalMarker, tool_name: str) -> str:
    return f"{command} command is deprecated. It will be removed {removal.describe(tool_name)}.\n"


# =========================================================================
# 输出通道
# =========================================================================

class Channel(Protocol):
    """弃用提示的输出目标"""

    def emit(self, message: str) -> None:
        ...


class StderrChannel:
    """诊断通道：原样写入 stderr 并换行"""

    def emit(self, message: str) -> None:
        click.echo(message, err=True)


class AlertChannel:
    """用户告警通道：与命令层的 click 输出保持同一格式"""

    def emit(self, message: str) -> None:
        click.echo(f"WARNING:  {message}", err=True, nl=not message.endswith("\n"))


@dataclass
class _Channels:
    diagnostic: Channel
    warning: Channel


_channels = _Channels(diagnostic=StderrChannel(), warning=AlertChannel())


@contextmanager
def use_channels(
    diagnostic: Channel | None = None, warning: Channel | None = None,
) -> Iterator[None]:
    """在代码块内替换输出通道，退出时恢复"""
    previous = (_channels.diagnostic, _channels.warning)
    if diagnostic is not None:
        _channels.diagnostic = diagnostic
    if warning is not None:
        _channels.warning = warning
    try:
        yield
    finally:
        _channels.diagnostic, _channels.warning = previous


def _emit(channel: Channel, message: str) -> None:
    # 输出失败不能影响被包装方法的执行
    try:
        channel.emit(message)
    except Exception:
        logger.warning("弃用提示输出失败: %s", message.splitlines()[0], exc_info=True)


# =========================================================================
# 全局开关
# =========================================================================

_skip = False


def skip() -> bool:
    return _skip


def set_skip(value: bool) -> None:
    global _skip  # noqa: PLW0603
    _skip = bool(value)


@contextmanager
def skip_during() -> Iterator[None]:
    """临时关闭弃用提示，仅供测试使用

    退出时恢复进入前的值（而不是无条件置为 False），异常退出同样恢复。
    """
    previous = _skip
    set_skip(True)
    try:
        yield
    finally:
        set_skip(previous)


# =========================================================================
# 成员标注
# =========================================================================

def _unwrap(raw: Any) -> tuple[Callable[..., Any], type | None]:
    """拆出 staticmethod / classmethod 内部的函数"""
    if isinstance(raw, (staticmethod, classmethod)):
        return raw.__func__, type(raw)
    return raw, None


def annotate_member(
    owner: type,
    name: str,
    replacement: str | Replacement,
    removal: Any,
    kind: MemberKind | None = None,
) -> DeprecationRecord:
    """将 owner 上名为 name 的方法标注为弃用

    参数:
        owner: 成员所属的类
        name: 成员名，标注时必须已存在
        replacement: 替代方案描述，或 NO_REPLACEMENT
        removal: 移除标记，"4.0" / (2030, 4) / RemovalVersion / RemovalDate
        kind: 调用形式；不传时按类属性推断 (staticmethod/classmethod 为 STATIC)

    返回:
        DeprecationRecord: 同时登记在 owner.__deprecations__ 中

    异常:
        DeprecationTargetError: 成员不存在、不可调用或已被标注
        ValidationError: 替代方案或移除标记无效
    """
    if not isinstance(owner, type):
        raise TypeError(f"owner 必须是类: {owner!r}")
    owner_name = owner.__name__

    try:
        raw = inspect.getattr_static(owner, name)
    except AttributeError:
        raise DeprecationTargetError(owner_name, name) from None

    func, wrap_as = _unwrap(raw)
    if not callable(func):
        raise DeprecationTargetError(owner_name, name, "不是可调用成员")
    if hasattr(func, _RECORD_ATTR):
        raise DeprecationTargetError(owner_name, name, "已标注为弃用")

    derived = MemberKind.INSTANCE if wrap_as is None else MemberKind.STATIC
    if kind is None:
        kind = derived
    elif kind is MemberKind.INSTANCE and wrap_as is not None:
        raise DeprecationTargetError(owner_name, name, f"是 {wrap_as.__name__}，不能按实例方法标注")

    record = DeprecationRecord(
        owner=owner,
        name=name,
        kind=kind,
        replacement=_check_replacement(replacement),
        removal=as_removal(removal),
        original=func,
    )
    takes_receiver = wrap_as is not staticmethod

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if not _skip:
            receiver = args[0] if takes_receiver and args else None
            location = format_location(location_of_caller())
            _emit(
                _channels.diagnostic,
                record.message(record.target(receiver), location, get_config().tool_name),
            )
        return func(*args, **kwargs)

    setattr(wrapper, _RECORD_ATTR, record)
    setattr(owner, name, wrap_as(wrapper) if wrap_as is not None else wrapper)

    # 复制一份再写回，避免改到父类的登记表
    records = dict(owner.__dict__.get(DEPRECATIONS_ATTR, {}))
    records[name] = record
    setattr(owner, DEPRECATIONS_ATTR, records)

    logger.debug("已标注弃用: %s.%s (%s)", owner_name, name, kind.value)
    return record


def deprecate(
    owner: type,
    name: str,
    *,
    replacement: str | Replacement,
    version: str,
    kind: MemberKind | None = None,
) -> DeprecationRecord:
    """按版本号标注弃用"""
    return annotate_member(owner, name, replacement, RemovalVersion(version), kind)


def deprecate_with_date(
    owner: type,
    name: str,
    replacement: str | Replacement,
    year: int,
    month: int,
    kind: MemberKind | None = None,
) -> DeprecationRecord:
    """按年月标注弃用"""
    return annotate_member(owner, name, replacement, RemovalDate(year, month), kind)


class _PendingDeprecation:
    """类体中的弃用声明，类创建完成后再执行标注"""

    def __init__(
        self,
        member: Any,
        replacement: str | Replacement,
        removal: RemovalMarker,
        kind: MemberKind | None,
    ) -> None:
        self._member = member
        self._replacement = replacement
        self._removal = removal
        self._kind = kind

    def __set_name__(self, owner: type, name: str) -> None:
        setattr(owner, name, self._member)
        annotate_member(owner, name, self._replacement, self._removal, self._kind)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        # 未经 __set_name__ 替换：被 @staticmethod 等包在内层，或用在了类外
        member = getattr(self._member, "__func__", self._member)
        raise DeprecationTargetError(
            "<unbound>", getattr(member, "__name__", repr(member)),
            "未在类体中完成标注；@deprecated_member 需位于类体内且放在最外层",
        )


def deprecated_member(
    replacement: str | Replacement,
    removal: Any,
    kind: MemberKind | None = None,
) -> Callable[[Any], Any]:
    """annotate_member 的装饰器形式

    需放在 @staticmethod / @classmethod 的外层。
    """
    checked_replacement = _check_replacement(replacement)
    marker = as_removal(removal)

    def decorator(member: Any) -> Any:
        return _PendingDeprecation(member, checked_replacement, marker, kind)

    return decorator


def deprecations_of(owner: type) -> dict[str, DeprecationRecord]:
    """返回类上登记的全部弃用记录（含继承自父类的）"""
    records: dict[str, DeprecationRecord] = {}
    for cls in reversed(owner.__mro__):
        records.update(cls.__dict__.get(DEPRECATIONS_ATTR, {}))
    return records


# =========================================================================
# 命令标注
# =========================================================================

def annotate_command(command_cls: type[Command], removal: Any) -> type[Command]:
    """将命令类标注为弃用

    安装 deprecated() (恒为 True) 与 deprecation_warning()，不包装
    execute；何时调用钩子由 CommandManager 决定。
    """
    if not (isinstance(command_cls, type) and issubclass(command_cls, Command)):
        raise TypeError(f"只能标注 Command 子类: {command_cls!r}")
    marker = as_removal(removal)

    def deprecated(self: Command) -> bool:
        return True

    def deprecation_warning(self: Command) -> None:
        if _skip:
            return
        _emit(_channels.warning, command_message(self.command, marker, get_config().tool_name))

    command_cls.deprecated = deprecated  # type: ignore[method-assign]
    command_cls.deprecation_warning = deprecation_warning  # type: ignore[method-assign]
    command_cls.removal = marker
    logger.debug("已标注弃用命令: %s", command_cls.command or command_cls.__name__)
    return command_cls


def deprecate_command(command_cls: type[Command], *, version: str) -> type[Command]:
    return annotate_command(command_cls, RemovalVersion(version))


def deprecate_command_with_date(
    command_cls: type[Command], year: int, month: int,
) -> type[Command]:
    return annotate_command(command_cls, RemovalDate(year, month))


def deprecated_command(removal: Any) -> Callable[[type[Command]], type[Command]]:
    """annotate_command 的类装饰器形式"""
    marker = as_removal(removal)

    def decorator(command_cls: type[Command]) -> type[Command]:
        return annotate_command(command_cls, marker)

    return decorator
