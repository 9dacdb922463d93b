"""
main.py 单元测试

测试覆盖:
- create_context(): 上下文创建
- main(): CLI 入口与退出码
"""
import pytest
from pathlib import Path
from unittest.mock import patch

from script_handler.main import DATA_DIR, DATA_DIR_OLD, create_context, main
from script_handler.core.adapters import SubprocessRunner
from script_handler.core.dispatcher import DispatchResult, Outcome
from script_handler.core.errors import ConfigError
from script_handler.core.interface import HandlerContext
from script_handler.core.settings import FileSettingsProvider
from script_handler.lib.download import DownloadManager


class TestCreateContext:

    def test_returns_production_context(self, tmp_path: Path):
        ctx = create_context(tmp_path, 5)

        assert isinstance(ctx, HandlerContext)
        assert ctx.seq_num == 5
        assert ctx.state_dir == DATA_DIR
        assert ctx.legacy_state_dir == DATA_DIR_OLD
        assert isinstance(ctx.cmd, SubprocessRunner)
        assert isinstance(ctx.downloader, DownloadManager)
        assert isinstance(ctx.settings, FileSettingsProvider)
        assert ctx.settings.config_folder == tmp_path

    def test_state_dirs_can_be_overridden(self, tmp_path: Path):
        ctx = create_context(tmp_path, 1, state_dir=tmp_path / "new", legacy_state_dir=tmp_path / "old")
        assert ctx.state_dir == tmp_path / "new"
        assert ctx.legacy_state_dir == tmp_path / "old"


class TestMain:

    @pytest.fixture
    def mock_dependencies(self, tmp_path: Path):
        """Mock 所有外部依赖"""
        with patch("script_handler.main.setup_logger"), \
             patch("script_handler.main.add_file_handler") as mock_file_handler, \
             patch("script_handler.main.load_handler_env") as mock_env, \
             patch("script_handler.main.find_seq_num", return_value=3) as mock_seq, \
             patch("script_handler.main.create_context") as mock_ctx, \
             patch("script_handler.main.dispatch") as mock_dispatch:
            mock_env.return_value.handler_environment.config_folder = tmp_path / "config"
            mock_env.return_value.handler_environment.log_folder = tmp_path / "log"
            mock_dispatch.return_value = DispatchResult(command="enable", outcome=Outcome.SUCCEEDED)
            yield {
                "add_file_handler": mock_file_handler,
                "load_handler_env": mock_env,
                "find_seq_num": mock_seq,
                "create_context": mock_ctx,
                "dispatch": mock_dispatch,
            }

    @pytest.mark.parametrize("command", ["install", "uninstall", "enable", "update", "disable"])
    def test_valid_commands(self, mock_dependencies, command):
        """有效命令正确传递给 dispatch"""
        with pytest.raises(SystemExit) as exc_info:
            main([command])
        assert exc_info.value.code == 0
        assert mock_dependencies["dispatch"].call_args[0][0] == command

    def test_invalid_command_rejected(self, mock_dependencies):
        """无效命令被 argparse 拒绝"""
        with pytest.raises(SystemExit) as exc_info:
            main(["restart"])
        assert exc_info.value.code == 2
        mock_dependencies["dispatch"].assert_not_called()

    @pytest.mark.parametrize("outcome,code", [
        (Outcome.SUCCEEDED, 0),
        (Outcome.SKIPPED, 0),
        (Outcome.FAILED, 1),
    ])
    def test_exit_code_follows_outcome(self, mock_dependencies, outcome, code):
        mock_dependencies["dispatch"].return_value = DispatchResult(
            command="enable", outcome=outcome,
            error=RuntimeError("x") if outcome is Outcome.FAILED else None,
        )
        with pytest.raises(SystemExit) as exc_info:
            main(["enable"])
        assert exc_info.value.code == code

    def test_handler_dir_argument(self, mock_dependencies, tmp_path: Path):
        with pytest.raises(SystemExit):
            main(["install", "--handler-dir", str(tmp_path)])
        mock_dependencies["load_handler_env"].assert_called_once_with(tmp_path)

    def test_context_uses_config_folder_and_seq_num(self, mock_dependencies, tmp_path: Path):
        with pytest.raises(SystemExit):
            main(["enable"])
        assert mock_dependencies["create_context"].call_args[0] == (tmp_path / "config", 3)

    def test_init_failure_exits_non_zero(self, mock_dependencies):
        mock_dependencies["find_seq_num"].side_effect = ConfigError("no seq")
        with pytest.raises(SystemExit) as exc_info:
            main(["enable"])
        assert exc_info.value.code == 1
        mock_dependencies["dispatch"].assert_not_called()

    def test_unwritable_log_folder_exits_non_zero(self, mock_dependencies):
        """日志目录不可写时按初始化失败处理，不抛出异常栈"""
        mock_dependencies["add_file_handler"].side_effect = PermissionError("read-only")
        with pytest.raises(SystemExit) as exc_info:
            main(["enable"])
        assert exc_info.value.code == 1
        mock_dependencies["dispatch"].assert_not_called()
