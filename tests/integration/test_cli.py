"""
CLI 端到端测试

真实的 HandlerEnvironment.json / .settings / SubprocessRunner，
只把状态目录重定向到 tmp_path。
"""
import json
import pytest
from pathlib import Path
from unittest.mock import patch

from script_handler import main as main_module
from script_handler.main import main


@pytest.fixture
def handler_dir(tmp_path: Path, monkeypatch) -> Path:
    """构造宿主目录结构并写入 HandlerEnvironment.json"""
    monkeypatch.delenv("ConfigSequenceNumber", raising=False)
    root = tmp_path / "handler"
    for sub in ("config", "status", "log"):
        (root / sub).mkdir(parents=True)
    (root / "HandlerEnvironment.json").write_text(json.dumps([{
        "name": "CustomScript",
        "version": 1.0,
        "handlerEnvironment": {
            "logFolder": str(root / "log"),
            "configFolder": str(root / "config"),
            "statusFolder": str(root / "status"),
            "heartbeatFile": str(root / "heartbeat.log"),
        },
    }]))
    return root


@pytest.fixture
def state_root(tmp_path: Path):
    """把 create_context 的状态目录重定向到 tmp_path"""
    real_create_context = main_module.create_context
    state = tmp_path / "state"
    legacy = tmp_path / "legacy"

    def create_context(config_folder, seq_num):
        return real_create_context(config_folder, seq_num, state_dir=state, legacy_state_dir=legacy)

    with patch("script_handler.main.create_context", side_effect=create_context):
        yield state


def _write_settings(handler_dir: Path, seq_num: int, command: str) -> None:
    doc = {"runtimeSettings": [{"handlerSettings": {"publicSettings": {"commandToExecute": command}}}]}
    (handler_dir / "config" / f"{seq_num}.settings").write_text(json.dumps(doc))


def _run(*argv: str) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(list(argv))
    return exc_info.value.code


class TestCli:

    def test_enable_runs_command_once(self, handler_dir: Path, state_root: Path):
        _write_settings(handler_dir, 0, "echo hello >> out.txt")

        assert _run("enable", "--handler-dir", str(handler_dir)) == 0
        assert _run("enable", "--handler-dir", str(handler_dir)) == 0

        work = state_root / "download" / "0"
        assert (work / "out.txt").read_text() == "hello\n"
        assert (state_root / "mrseq").read_text() == "0"
        assert (handler_dir / "log" / "handler.log").exists()

    def test_failing_command_exits_non_zero(self, handler_dir: Path, state_root: Path):
        _write_settings(handler_dir, 1, "echo broken >&2; exit 5")

        assert _run("enable", "--handler-dir", str(handler_dir)) == 1
        assert (state_root / "download" / "1" / "stderr").read_text() == "broken\n"

    def test_install_and_uninstall(self, handler_dir: Path, state_root: Path):
        _write_settings(handler_dir, 0, "true")

        assert _run("install", "--handler-dir", str(handler_dir)) == 0
        assert state_root.is_dir()
        assert _run("uninstall", "--handler-dir", str(handler_dir)) == 0
        assert not state_root.exists()

    def test_missing_handler_environment(self, tmp_path: Path, state_root: Path):
        assert _run("enable", "--handler-dir", str(tmp_path / "nowhere")) == 1
