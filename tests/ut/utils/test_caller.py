"""调用方位置查询单元测试"""

from __future__ import annotations

import inspect

from bubble.utils.caller import UNKNOWN_LOCATION, format_location, location_of_caller


def _where() -> tuple[str, int]:
    return location_of_caller()


def _where_two_up() -> tuple[str, int]:
    return _relay()


def _relay() -> tuple[str, int]:
    return location_of_caller(depth=2)


class TestLocationOfCaller:
    def test_reports_calling_line(self) -> None:
        line = inspect.currentframe().f_lineno + 1  # type: ignore[union-attr]
        filename, lineno = _where()
        assert filename == __file__ or filename.endswith("test_caller.py")
        assert lineno == line

    def test_depth(self) -> None:
        line = inspect.currentframe().f_lineno + 1  # type: ignore[union-attr]
        _, lineno = _where_two_up()
        assert lineno == line

    def test_too_deep(self) -> None:
        assert location_of_caller(depth=100000) == UNKNOWN_LOCATION

    def test_format(self) -> None:
        assert format_location(("lib/app.py", 12)) == "lib/app.py:12"
