"""依赖描述

Dependency 只描述 "依赖谁、要求什么版本、附带哪些选项"，不做版本求解。
选项键在构造时统一规整为字符串字段，未知键直接报错，调用方无需再做
键名转换。

清单格式 (Bubblefile.yml):
    dependencies:
      rack:
        version: [">= 2.0", "< 4"]
        group: [default, test]
      rspec:
        version: "~> 3.12"
        type: development
      local_lib:
        path: vendor/local_lib
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from bubble.core.exceptions import DependencyError, ValidationError
from bubble.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEPENDENCY_TYPES = ("runtime", "development")
DEFAULT_REQUIREMENT = ">= 0"

# 旧写法兼容: group -> groups, platform -> platforms
_KEY_ALIASES = {"group": "groups", "platform": "platforms"}
_LIST_FIELDS = {"groups", "platforms", "require"}


def _normalize_key(key: Any) -> str:
    """":group" / "group" / 枚举等各种键统一为字段名"""
    if isinstance(key, bytes):
        key = key.decode("utf-8")
    name = str(getattr(key, "value", key)).strip().lstrip(":")
    return _KEY_ALIASES.get(name, name)


def _as_tuple(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(str(v) for v in value)
    return (str(value),)


@dataclass(frozen=True)
class DependencyOptions:
    """依赖选项

    require 为 None 表示按默认方式加载，空元组表示不自动加载。
    """

    groups: tuple[str, ...] = ("default",)
    platforms: tuple[str, ...] = ()
    source: str = ""
    git: str = ""
    branch: str = ""
    ref: str = ""
    path: str = ""
    require: tuple[str, ...] | None = None

    @classmethod
    def from_mapping(cls, options: Mapping[Any, Any] | None) -> DependencyOptions:
        """从任意键类型的映射构造，键名规整后校验"""
        if not options:
            return cls()

        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        errors: list[str] = []
        for raw_key, value in options.items():
            key = _normalize_key(raw_key)
            if key not in known:
                errors.append(f"未知选项: {raw_key!r}")
                continue
            if key in values:
                errors.append(f"选项重复: {raw_key!r}")
                continue
            if key == "require" and isinstance(value, bool):
                values[key] = None if value else ()
            elif key in _LIST_FIELDS:
                values[key] = _as_tuple(value)
            elif value is None:
                values[key] = ""
            elif isinstance(value, (dict, list, tuple)):
                errors.append(f"选项 {key} 必须是字符串: {value!r}")
            else:
                values[key] = str(value)

        if values.get("groups") == ():
            errors.append("groups 不能为空")
        if sum(1 for k in ("git", "path") if values.get(k)) > 1:
            errors.append("git 与 path 不能同时指定")
        if errors:
            raise ValidationError("依赖选项无效", details=errors)
        return cls(**values)


@dataclass(frozen=True)
class Dependency:
    """单个依赖"""

    name: str
    requirements: tuple[str, ...] = (DEFAULT_REQUIREMENT,)
    type: str = "runtime"
    options: DependencyOptions = field(default_factory=DependencyOptions)

    def __post_init__(self) -> None:
        errors: list[str] = []
        if not isinstance(self.name, str) or not self.name.strip():
            errors.append(f"依赖名必须是非空字符串: {self.name!r}")
        if not self.requirements or any(
            not isinstance(r, str) or not r.strip() for r in self.requirements
        ):
            errors.append(f"版本要求不能为空: {self.requirements!r}")
        if self.type not in DEPENDENCY_TYPES:
            errors.append(f"依赖类型必须是 {'/'.join(DEPENDENCY_TYPES)}: {self.type!r}")
        if errors:
            raise ValidationError(f"依赖 {self.name!r} 无效", details=errors)

    @classmethod
    def create(
        cls,
        name: str,
        *requirements: str,
        type: str = "runtime",  # noqa: A002
        **options: Any,
    ) -> Dependency:
        """Dependency.create("rack", ">= 2.0", group="test")"""
        return cls(
            name=name,
            requirements=tuple(requirements) or (DEFAULT_REQUIREMENT,),
            type=type,
            options=DependencyOptions.from_mapping(options),
        )

    @property
    def runtime(self) -> bool:
        return self.type == "runtime"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "requirements": list(self.requirements),
            "type": self.type,
            "groups": list(self.options.groups),
        }
        for key in ("source", "git", "branch", "ref", "path"):
            value = getattr(self.options, key)
            if value:
                result[key] = value
        if self.options.platforms:
            result["platforms"] = list(self.options.platforms)
        if self.options.require is not None:
            result["require"] = list(self.options.require)
        return result

    def __str__(self) -> str:
        text = ", ".join(self.requirements)
        if not self.runtime:
            text += f", {self.type}"
        return f"{self.name} ({text})"


def _entry_to_dependency(name: Any, entry: Any) -> Dependency:
    if entry is None:
        entry = {}
    elif isinstance(entry, (str, list)):
        entry = {"version": entry}
    if not isinstance(entry, dict):
        raise ValidationError(f"依赖 {name!r} 的定义必须是映射或版本字符串")

    options = dict(entry)
    requirements = _as_tuple(options.pop("version", None)) or (DEFAULT_REQUIREMENT,)
    dep_type = str(options.pop("type", "runtime"))
    return Dependency(
        name=str(name),
        requirements=requirements,
        type=dep_type,
        options=DependencyOptions.from_mapping(options),
    )


def load_dependencies(path: str | Path) -> list[Dependency]:
    """读取依赖清单，文件不存在时返回空列表

    异常:
        DependencyError: 清单格式错误或某条依赖无效
    """
    try:
        data = load_yaml(path)
    except (yaml.YAMLError, ValueError) as e:
        raise DependencyError(f"无法读取依赖清单 {path}: {e}") from e

    section = data.get("dependencies") or {}
    if not isinstance(section, dict):
        raise DependencyError(f"依赖清单 {path} 中 dependencies 必须是映射")

    deps: list[Dependency] = []
    for name, entry in section.items():
        try:
            deps.append(_entry_to_dependency(name, entry))
        except ValidationError as e:
            detail = "; ".join(e.details) if e.details else str(e)
            raise DependencyError(f"依赖 {name!r} 无效: {detail}") from e
    logger.debug("从 %s 读取 %d 个依赖", path, len(deps))
    return deps
