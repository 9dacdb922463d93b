"""
端口（接口）定义
所有与外部世界交互的能力都在这里声明
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from script_handler.core.settings import HandlerSettings


@dataclass
class CommandResult:
    """命令执行结果"""
    returncode: int
    stdout: str
    stderr: str
    command: str

    @property
    def output(self) -> str:
        """stdout + stderr 合并输出，用于错误信息"""
        parts = [p.strip() for p in (self.stdout, self.stderr) if p and p.strip()]
        return "\n".join(parts)


@dataclass(frozen=True)
class StorageCredentials:
    """存储账户凭据"""
    account_name: str
    account_key: str


@dataclass(frozen=True)
class FileTarget:
    """一个待下载的远程文件

    index 决定下载顺序，也是失败时报告的序号。
    """
    index: int
    url: str
    credentials: Optional[StorageCredentials] = None


class ICommandRunner(ABC):
    """命令执行接口"""

    @abstractmethod
    def run(
        self,
        cmd: str,
        cwd: Optional[Path] = None,
        timeout: Optional[int] = None,
        shell: bool = True,
    ) -> CommandResult:
        """执行命令并返回结果（不因非零退出码抛异常）"""
        ...


class IDownloader(ABC):
    """下载接口"""

    @abstractmethod
    def download(self, target: FileTarget, dest_dir: Path) -> Path:
        """下载 target 到 dest_dir，返回落地文件路径，失败时抛异常"""
        ...


class ISettingsProvider(ABC):
    """Handler settings 读取接口"""

    @abstractmethod
    def load(self, seq_num: int) -> "HandlerSettings":
        """读取指定序列号对应的 settings"""
        ...
