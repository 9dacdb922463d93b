"""
Aria2 多线程下载策略

适用于体积较大的直链文件。需要在 manifest.yaml 中显式启用，
且 aria2c 已安装，否则 DownloadManager 回退到 http 策略。

下载只尝试一次（--max-tries=1），失败由调用方决定如何处理。
"""
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional

from script_handler.core.ports import StorageCredentials
from script_handler.lib.download.base import DownloadStrategy

logger = logging.getLogger("script_handler")


class Aria2Strategy(DownloadStrategy):
    """Aria2 多线程下载策略

    配置段 (manifest.yaml → aria2):
        enabled:         是否启用（默认 false）
        connections:     每服务器最大连接数（默认 8，aria2 上限 16）
        split_size:      最小分片大小 MB（默认 5）
        timeout:         传输超时秒数（默认 60）
        connect_timeout: 连接超时秒数（默认 30）
        file_allocation: 文件预分配方式（默认 none）

    文档: https://aria2.github.io/manual/en/html/aria2c.html
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        cfg = config or {}
        self._enabled         = bool(cfg.get("enabled", False))
        self._connections     = min(int(cfg.get("connections", 8)), 16)
        self._split_size      = cfg.get("split_size", 5)
        self._timeout         = cfg.get("timeout", 60)
        self._connect_timeout = cfg.get("connect_timeout", 30)
        self._file_allocation = cfg.get("file_allocation", "none")

    # ── 元信息 ──────────────────────────────────────────────

    @property
    def name(self) -> str:
        return "aria2"

    # ── 可用性 ──────────────────────────────────────────────

    def is_available(self) -> bool:
        return self._enabled and shutil.which("aria2c") is not None

    # ── 下载生命周期 ─────────────────────────────────────────

    def pre_download(self, target_path: Path) -> None:
        """确保目标目录存在"""
        target_path.parent.mkdir(parents=True, exist_ok=True)

    def post_download(self, target_path: Path) -> None:
        """清理 aria2 产生的 .aria2 控制文件"""
        aria2_ctrl = Path(str(target_path) + ".aria2")
        if aria2_ctrl.exists():
            try:
                aria2_ctrl.unlink()
                logger.debug(f"  -> [aria2] 已清理控制文件: {aria2_ctrl.name}")
            except OSError as e:
                logger.debug(f"  -> [aria2] 清理控制文件失败: {e}")

    # ── 核心下载 ────────────────────────────────────────────

    def build_command(self, url: str, target_path: Path) -> List[str]:
        return [
            "aria2c",
            # === 连接与分片 ===
            "--max-connection-per-server", str(self._connections),
            "--split",                     str(self._connections),
            "--min-split-size",            f"{self._split_size}M",
            # === 单次尝试 ===
            "--max-tries=1",
            "--timeout",                   str(self._timeout),
            "--connect-timeout",           str(self._connect_timeout),
            # === 磁盘 ===
            "--file-allocation",           self._file_allocation,
            "--auto-file-renaming=false",
            "--allow-overwrite=true",
            # === 日志与输出（保持静默） ===
            "--console-log-level=warn",
            "--summary-interval=0",
            "--download-result=hide",
            # === 目标路径 ===
            "--dir", str(target_path.parent),
            "--out", target_path.name,
            url,
        ]

    def download(
        self,
        url: str,
        target_path: Path,
        credentials: Optional[StorageCredentials] = None,
    ) -> bool:
        cmd = self.build_command(url, target_path)
        logger.info(f"  -> [aria2] 启动 {self._connections} 线程下载...")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError:
            logger.error("  -> [ERROR] aria2c 未安装")
            return False

        if result.returncode != 0:
            stderr_msg = result.stderr.strip() if result.stderr else "未知错误"
            logger.error(f"  -> [aria2] 下载失败 (退出码 {result.returncode}): {stderr_msg}")
            return False
        return target_path.exists()
