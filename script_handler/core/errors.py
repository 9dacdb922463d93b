"""
错误分类

每个阶段抛出自己的 HandlerError 子类，并通过 ``raise ... from e`` 保留底层原因。
Dispatcher 不做恢复，只负责上报状态或转换为非零退出码。
"""
from typing import Optional


class HandlerError(RuntimeError):
    """所有可预期错误的基类"""


class StateDirectoryError(HandlerError):
    """状态目录创建 / 删除 / 迁移失败"""


class SequenceNumberError(HandlerError):
    """序列号文件无法读取、内容损坏或无法写入"""


class ConfigError(HandlerError):
    """HandlerEnvironment / settings 缺失或不合法"""


class UnknownCommandError(HandlerError):
    """未注册的命令名"""


class DownloadError(HandlerError):
    """文件下载失败

    index 为失败目标在下载列表中的序号（从 0 开始），
    单文件场景（未经过 fetch_all）时为 None。
    """

    def __init__(self, message: str, index: Optional[int] = None) -> None:
        super().__init__(message)
        self.index = index


class CommandExecutionError(HandlerError):
    """用户命令启动失败或以非零状态退出"""

    def __init__(self, message: str, returncode: Optional[int] = None, output: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output = output

    def __str__(self) -> str:
        base = super().__str__()
        if self.output:
            return f"{base}\n{self.output}"
        return base
