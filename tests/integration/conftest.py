"""
集成测试专用 Fixtures

提供真实命令表 + 真实文件系统（tmp_path）+ mock 下载/执行 的调用环境。
"""
import pytest
from pathlib import Path
from typing import Callable

from script_handler.commands.lifecycle import create_command_table
from script_handler.core.dispatcher import DispatchResult, dispatch
from script_handler.core.interface import HandlerContext, create_plugin_manager
from tests.mocks import MockDownloader, MockRunner, RecordingReporter, StaticSettingsProvider


@pytest.fixture
def integration_reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def invoke(
    state_dir: Path,
    legacy_state_dir: Path,
    mock_runner: MockRunner,
    mock_downloader: MockDownloader,
    settings_provider: StaticSettingsProvider,
    integration_reporter: RecordingReporter,
) -> Callable[[str, int], DispatchResult]:
    """
    模拟宿主的一次调用: invoke("enable", seq_num)

    每次调用都新建 HandlerContext 和命令表，与真实进程边界一致；
    mock 服务在多次调用之间共享，便于统计动作执行次数。
    """
    hook = create_plugin_manager(integration_reporter).hook

    def _invoke(command: str, seq_num: int) -> DispatchResult:
        context = HandlerContext(
            state_dir=state_dir,
            legacy_state_dir=legacy_state_dir,
            seq_num=seq_num,
            cmd=mock_runner,
            downloader=mock_downloader,
            settings=settings_provider,
        )
        return dispatch(command, context, create_command_table(), hook=hook)

    return _invoke
