"""
生命周期命令 - install / uninstall / enable / update / disable
"""
import shutil
from typing import Mapping

from script_handler.core.dispatcher import CommandSpec, freeze_table
from script_handler.core.errors import SequenceNumberError, StateDirectoryError
from script_handler.core.interface import HandlerContext
from script_handler.core.migration import migrate_state_dir
from script_handler.core.pipeline import fetch_all, run_command
from script_handler.core.schema import CommandName, PreCheck
from script_handler.core import seqnum
from script_handler.core.utils import logger


DOWNLOAD_DIR = "download"


def noop(ctx: HandlerContext) -> None:
    logger.info("  -> 无需操作")
    ctx.log("noop")


def install(ctx: HandlerContext) -> None:
    """创建状态目录"""
    try:
        ctx.state_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as e:
        raise StateDirectoryError(f"无法创建状态目录 {ctx.state_dir}: {e}") from e
    logger.info(f"  -> 已创建状态目录: {ctx.state_dir}")
    ctx.log("install")


def uninstall(ctx: HandlerContext) -> None:
    """删除整个状态目录（包括所有已下载文件和序列号）"""
    logger.info(f"  -> 正在删除状态目录: {ctx.state_dir}")
    if ctx.state_dir.exists():
        try:
            shutil.rmtree(ctx.state_dir)
        except OSError as e:
            raise StateDirectoryError(f"无法删除状态目录 {ctx.state_dir}: {e}") from e
    logger.info("  -> 状态目录已删除")
    ctx.log("uninstall")


def enable_pre(ctx: HandlerContext) -> PreCheck:
    """
    enable 的前置检查

    1. 迁移旧状态目录（序列号文件可能还在旧目录中，必须先迁移）
    2. 序列号已处理则返回 ALREADY_PROCESSED，否则先保存序列号再继续
    """
    logger.info("  -> 检查状态目录迁移...")
    migrate_state_dir(ctx.legacy_state_dir, ctx.state_dir)

    path = ctx.state_dir / seqnum.SEQ_NUM_FILE
    try:
        return seqnum.check_and_save(path, ctx.seq_num)
    except SequenceNumberError as e:
        raise SequenceNumberError(f"序列号处理失败: {e}") from e


def enable(ctx: HandlerContext) -> None:
    """读取配置 → 下载文件到 download/<seq> → 在该目录执行命令"""
    settings = ctx.settings.load(ctx.seq_num)
    command = settings.resolve_command()

    work_dir = ctx.state_dir / DOWNLOAD_DIR / str(ctx.seq_num)
    fetch_all(
        work_dir,
        settings.file_targets(),
        ctx.downloader,
        normalize_scripts=not settings.public.skip_dos2unix,
    )
    ctx.log("enable", "downloaded")

    run_command(command, work_dir, ctx.cmd)
    ctx.log("enable", "executed")


def create_command_table() -> Mapping[str, CommandSpec]:
    """构建只读命令表（启动时调用一次）"""
    return freeze_table({
        CommandName.INSTALL.value:   CommandSpec("Install", install, should_report_status=False),
        CommandName.UNINSTALL.value: CommandSpec("Uninstall", uninstall, should_report_status=False),
        CommandName.ENABLE.value:    CommandSpec("Enable", enable, should_report_status=True, pre=enable_pre),
        CommandName.UPDATE.value:    CommandSpec("Update", noop, should_report_status=True),
        CommandName.DISABLE.value:   CommandSpec("Disable", noop, should_report_status=True),
    })
