"""基础层测试：exceptions / config / yaml_io / logger / compat"""

from __future__ import annotations

import json
import logging
import sysconfig
from pathlib import Path

import pytest

from bubble import __version__
from bubble.compat import BUBBLE_VERSION, CONFIG_PRIORITIES, ConfigMap, get_config_map
from bubble.core.config import Config, get_config, init_config, reset_config
from bubble.core.exceptions import (
    BubbleError,
    CommandNotFoundError,
    ConfigError,
    DependencyError,
    DeprecationTargetError,
    ValidationError,
)
from bubble.utils import yaml_io
from bubble.utils.logger import JSONFormatter, reset_logging, setup_logging

# =========================================================================
# exceptions.py
# =========================================================================


class TestExceptions:
    @pytest.mark.parametrize("exc_cls, code", [
        (ConfigError, "CONFIG_ERROR"),
        (DependencyError, "DEPENDENCY_ERROR"),
        (ValidationError, "VALIDATION_ERROR"),
        (CommandNotFoundError, "COMMAND_NOT_FOUND"),
    ])
    def test_hierarchy(self, exc_cls: type[BubbleError], code: str) -> None:
        e = exc_cls("msg")
        assert isinstance(e, BubbleError)
        assert e.code == code
        assert str(e) == "msg"

    def test_validation_details(self) -> None:
        assert ValidationError("x").details == []
        assert ValidationError("x", details=["a"]).details == ["a"]

    def test_deprecation_target(self) -> None:
        e = DeprecationTargetError("Legacy", "old")
        assert e.code == "NO_SUCH_MEMBER"
        assert "Legacy.old" in str(e)
        assert (e.owner, e.member) == ("Legacy", "old")


# =========================================================================
# config.py / yaml_io.py
# =========================================================================


class TestConfig:
    def test_defaults(self) -> None:
        cfg = get_config()
        assert cfg.tool_name == "Bubble"
        assert cfg.skip_deprecations is False
        assert get_config() is cfg

    def test_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "bubble.yml"
        path.write_text(
            "tool_name: Pebble\nskip_deprecations: true\nmirror: https://m.example.org\n",
            encoding="utf-8",
        )
        cfg = init_config(str(path))
        assert cfg.tool_name == "Pebble"
        assert cfg.skip_deprecations is True
        assert cfg.extra == {"mirror": "https://m.example.org"}
        assert get_config() is cfg
        assert cfg.to_dict()["tool_name"] == "Pebble"

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert Config.from_file(str(tmp_path / "none.yml")) == Config()

    @pytest.mark.parametrize("content", [
        "skip_deprecations: 'yes'\n",
        "tool_name: 3\n",
        "manifest: [a]\n",
        "tool_name: [unclosed\n",
    ])
    def test_invalid(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "bubble.yml"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigError):
            Config.from_file(str(path))

    def test_reset(self) -> None:
        cfg = get_config()
        reset_config()
        assert get_config() is not cfg


class TestYamlIO:
    def test_non_mapping_is_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        assert yaml_io.load_yaml(path) == {}

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")
        assert yaml_io.load_yaml(path) == {}

    def test_size_limit(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(yaml_io, "MAX_YAML_SIZE", 4)
        path = tmp_path / "big.yml"
        path.write_text("key: value\n", encoding="utf-8")
        with pytest.raises(ValueError, match="过大"):
            yaml_io.load_yaml(path)


# =========================================================================
# logger.py
# =========================================================================


class TestLogger:
    def teardown_method(self) -> None:
        reset_logging()

    def test_setup_replaces_handlers(self) -> None:
        setup_logging("DEBUG")
        setup_logging("INFO")
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.INFO

    def test_unknown_level_falls_back(self) -> None:
        setup_logging("LOUD")
        assert logging.getLogger().level == logging.WARNING

    def test_json_formatter(self) -> None:
        record = logging.LogRecord("bubble.test", logging.WARNING, __file__, 7, "弃用 %s", ("x",), None)
        entry = json.loads(JSONFormatter().format(record))
        assert entry["level"] == "WARNING"
        assert entry["message"] == "弃用 x"
        assert entry["logger"] == "bubble.test"
        assert entry["line"] == 7
        assert "exception" not in entry


# =========================================================================
# compat.py
# =========================================================================


class TestCompat:
    def test_version_alias(self) -> None:
        assert BUBBLE_VERSION == __version__

    def test_config_map_lazy_fill(self) -> None:
        cm = ConfigMap()
        assert "py_version_short" not in cm
        assert cm["py_version_short"] == sysconfig.get_config_var("py_version_short")
        assert "py_version_short" in cm

    def test_unknown_key_is_none(self) -> None:
        assert ConfigMap()["NO_SUCH_BUILD_VARIABLE"] is None

    def test_priorities_prefilled(self) -> None:
        cm = get_config_map()
        assert get_config_map() is cm
        assert all(key in cm for key in CONFIG_PRIORITIES)
