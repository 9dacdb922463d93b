"""
核心接口定义
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List

import pluggy

from script_handler.core.ports import ICommandRunner, IDownloader, ISettingsProvider


PROJECT_NAME = "script_handler"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


@dataclass
class HandlerContext:
    """
    一次调用的上下文 - 组合根

    所有命令都通过这个上下文获取路径、配置和外部服务。
    """

    # === 状态目录（main.py 注入）===
    state_dir: Path         # 当前版本的状态目录
    legacy_state_dir: Path  # 旧版本遗留的状态目录

    # === 本次调用 ===
    seq_num: int

    # === 注入的服务 ===
    cmd: ICommandRunner
    downloader: IDownloader
    settings: ISettingsProvider

    # === 执行追踪（用于调试和测试）===
    execution_log: List[str] = field(default_factory=lambda: [])

    def log(self, name: str, message: str = "") -> None:
        """记录执行日志"""
        entry = name if not message else f"{name}:{message}"
        self.execution_log.append(entry)


class StatusSpec:
    """状态上报钩子规范"""

    @hookspec
    def report_status(self, operation: str, status: str, seq_num: int, message: str) -> None:
        """向宿主上报命令状态"""
        ...


def create_plugin_manager(*reporters: Any) -> pluggy.PluginManager:
    """创建状态上报插件管理器并注册给定的上报器"""
    pm = pluggy.PluginManager(PROJECT_NAME)
    pm.add_hookspecs(StatusSpec)
    for reporter in reporters:
        pm.register(reporter)
    return pm
