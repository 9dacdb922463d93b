"""
Custom Script 扩展生命周期入口

宿主以单个命令名调用本程序: install | uninstall | enable | update | disable
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from script_handler.commands.lifecycle import create_command_table
from script_handler.core.adapters import LogStatusReporter, SubprocessRunner
from script_handler.core.dispatcher import dispatch
from script_handler.core.errors import HandlerError
from script_handler.core.interface import HandlerContext, create_plugin_manager
from script_handler.core.settings import FileSettingsProvider, find_seq_num, load_handler_env
from script_handler.core.utils import add_file_handler, logger, setup_logger
from script_handler.lib.download import DownloadManager


# ============================================================
# 全局常量
# ============================================================
DATA_DIR = Path("/var/lib/waagent/custom-script")   # 当前版本状态目录
DATA_DIR_OLD = Path("/var/lib/azure/custom-script")  # 旧版本状态目录
LOG_FILE_NAME = "handler.log"


def create_context(
    config_folder: Path,
    seq_num: int,
    state_dir: Path = DATA_DIR,
    legacy_state_dir: Path = DATA_DIR_OLD,
) -> HandlerContext:
    """创建调用上下文"""
    return HandlerContext(
        state_dir=state_dir,
        legacy_state_dir=legacy_state_dir,
        seq_num=seq_num,
        cmd=SubprocessRunner(),
        downloader=DownloadManager(),
        settings=FileSettingsProvider(config_folder),
    )


def main(argv: Optional[List[str]] = None) -> None:
    table = create_command_table()

    parser = argparse.ArgumentParser(description="Custom Script 扩展生命周期处理器")
    parser.add_argument("command", choices=list(table), help="宿主调用的命令")
    parser.add_argument(
        "--handler-dir", type=Path, default=Path.cwd(),
        help="HandlerEnvironment.json 所在目录（默认当前目录）",
    )
    parser.add_argument("--debug", action="store_true", help="调试模式")
    args = parser.parse_args(argv)

    # 初始化日志（必须在所有其他操作之前）
    setup_logger(debug=args.debug)

    try:
        handler_env = load_handler_env(args.handler_dir)
        paths = handler_env.handler_environment
        add_file_handler(paths.log_folder / LOG_FILE_NAME)
        seq_num = find_seq_num(paths.config_folder)
    except (HandlerError, OSError) as e:
        logger.error(f">>> 初始化失败: {e}")
        sys.exit(1)

    context = create_context(paths.config_folder, seq_num)
    pm = create_plugin_manager(LogStatusReporter())

    result = dispatch(args.command, context, table, hook=pm.hook)
    if result.error is not None:
        logger.error(f">>> [{args.command}] 失败: {result.error}")
    sys.exit(result.exit_code)


if __name__ == "__main__":
    main()
