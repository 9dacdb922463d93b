"""
适配器 - 生产环境的接口实现
"""
import subprocess
from pathlib import Path
from typing import Optional

from script_handler.core.interface import hookimpl
from script_handler.core.ports import ICommandRunner, CommandResult
from script_handler.core.schema import StatusValue
from script_handler.core.utils import logger


class SubprocessRunner(ICommandRunner):
    """生产环境命令执行器"""

    def run(
        self,
        cmd: str,
        cwd: Optional[Path] = None,
        timeout: Optional[int] = None,
        shell: bool = True,
    ) -> CommandResult:
        logger.debug(f"[CMD] {cmd}")

        result = subprocess.run(
            cmd,
            cwd=cwd,
            timeout=timeout,
            shell=shell,
            capture_output=True,
            text=True,
        )

        if result.stdout:
            logger.debug(f"[STDOUT] {result.stdout.strip()}")
        if result.stderr:
            logger.debug(f"[STDERR] {result.stderr.strip()}")

        return CommandResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            command=cmd,
        )


class LogStatusReporter:
    """把状态写入日志的默认上报器"""

    @hookimpl
    def report_status(self, operation: str, status: str, seq_num: int, message: str) -> None:
        line = f"  -> [Status] {operation} #{seq_num}: {status}"
        if message:
            line += f" ({message})"
        if status == StatusValue.ERROR.value:
            logger.error(line)
        else:
            logger.info(line)
