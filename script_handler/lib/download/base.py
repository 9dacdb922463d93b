"""
下载策略抽象基类
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from script_handler.core.ports import StorageCredentials


class DownloadStrategy(ABC):
    """下载策略抽象基类

    每个具体策略负责:
      1. 自身可用性检测
      2. 单次文件下载（不重试）
      3. 下载前准备与下载后收尾
      4. 自身配置的加载（各策略在 __init__ 中接收 manifest 配置段）
    """

    # ── 元信息 ──────────────────────────────────────────────

    @property
    @abstractmethod
    def name(self) -> str:
        """策略唯一名称，如 'http'、'aria2'"""
        ...

    @property
    def supports_credentials(self) -> bool:
        """是否能使用存储账户凭据发起请求"""
        return False

    # ── 可用性 ──────────────────────────────────────────────

    @abstractmethod
    def is_available(self) -> bool:
        """检查策略当前是否可用（依赖已安装 / 已启用）"""
        ...

    # ── 下载（核心）─────────────────────────────────────────

    @abstractmethod
    def download(
        self,
        url: str,
        target_path: Path,
        credentials: Optional[StorageCredentials] = None,
    ) -> bool:
        """执行一次下载

        Args:
            url:         下载链接
            target_path: 目标文件完整路径
            credentials: 存储账户凭据（仅 supports_credentials 的策略会收到）

        Returns:
            True 成功，False 失败
        """
        ...

    def pre_download(self, target_path: Path) -> None:
        """下载前的准备工作（由 Manager 调用）"""
        pass

    def post_download(self, target_path: Path) -> None:
        """下载成功后的收尾工作（由 Manager 调用）"""
        pass
