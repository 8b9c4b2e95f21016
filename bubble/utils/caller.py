"""调用方位置查询

弃用提示需要指出 "在哪里调用了被弃用的方法"，由这里取栈帧得到 file:line。
"""

from __future__ import annotations

import sys

UNKNOWN_LOCATION = ("<unknown>", 0)


def location_of_caller(depth: int = 1) -> tuple[str, int]:
    """返回调用链上第 depth 层调用方的 (文件名, 行号)

    depth=1 表示 "调用本函数的那个函数" 的调用方。栈深度不足时
    返回 ("<unknown>", 0)。
    """
    try:
        # +1 跳过本函数自身的栈帧
        frame = sys._getframe(depth + 1)
    except ValueError:
        return UNKNOWN_LOCATION
    return frame.f_code.co_filename, frame.f_lineno


def format_location(location: tuple[str, int]) -> str:
    filename, lineno = location
    return f"{filename}:{lineno}"
