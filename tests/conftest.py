"""公共 fixture：重置全局开关与配置，提供记录型输出通道"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from bubble.core.config import reset_config
from bubble.core.deprecate import set_skip, use_channels


class RecordingChannel:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def emit(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture(autouse=True)
def _reset_global_state() -> Iterator[None]:
    set_skip(False)
    reset_config()
    yield
    set_skip(False)
    reset_config()


@pytest.fixture()
def diagnostics() -> Iterator[RecordingChannel]:
    channel = RecordingChannel()
    with use_channels(diagnostic=channel):
        yield channel


@pytest.fixture()
def alerts() -> Iterator[RecordingChannel]:
    channel = RecordingChannel()
    with use_channels(warning=channel):
        yield channel
