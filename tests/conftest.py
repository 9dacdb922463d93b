"""
Pytest 共享 Fixtures

提供可复用的测试上下文、mock 服务和临时文件系统。
"""
import pytest
from pathlib import Path

from script_handler.core.interface import HandlerContext
from tests.mocks import MockDownloader, MockRunner, StaticSettingsProvider


@pytest.fixture
def mock_runner() -> MockRunner:
    """新建一个干净的 MockRunner"""
    return MockRunner()


@pytest.fixture
def mock_downloader() -> MockDownloader:
    """新建一个干净的 MockDownloader"""
    return MockDownloader()


@pytest.fixture
def settings_provider() -> StaticSettingsProvider:
    """public 命令为 'sh run.sh'，下载两个文件"""
    return StaticSettingsProvider.of(
        command="sh run.sh",
        file_uris=["https://example.com/files/run.sh", "https://example.com/files/data.txt"],
    )


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    """canonical 状态目录（初始不存在）"""
    return tmp_path / "waagent" / "custom-script"


@pytest.fixture
def legacy_state_dir(tmp_path: Path) -> Path:
    """legacy 状态目录（初始不存在）"""
    return tmp_path / "azure" / "custom-script"


@pytest.fixture
def handler_context(
    mock_runner: MockRunner,
    mock_downloader: MockDownloader,
    settings_provider: StaticSettingsProvider,
    state_dir: Path,
    legacy_state_dir: Path,
) -> HandlerContext:
    """
    构建一个完整的测试用 HandlerContext

    - 使用 MockRunner 替代 SubprocessRunner
    - 使用 MockDownloader 替代 DownloadManager
    - 使用 pytest tmp_path 作为状态目录（避免污染真实文件系统）
    """
    return HandlerContext(
        state_dir=state_dir,
        legacy_state_dir=legacy_state_dir,
        seq_num=3,
        cmd=mock_runner,
        downloader=mock_downloader,
        settings=settings_provider,
    )
