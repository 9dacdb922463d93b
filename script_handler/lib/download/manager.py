"""
下载管理器 - 选择策略并编排单个文件的下载生命周期

特性:
  - 策略配置统一从 manifest.yaml 读取
  - aria2 启用且可用时优先，否则使用 http
  - 目标文件名取自 URL 路径最后一段
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from script_handler.core.errors import DownloadError
from script_handler.core.ports import FileTarget, IDownloader
from script_handler.lib.download.aria2 import Aria2Strategy
from script_handler.lib.download.base import DownloadStrategy
from script_handler.lib.download.http import HttpStrategy
from script_handler.lib.download.url_utils import extract_filename_from_url, redact_url
from script_handler.lib.utils import load_yaml

logger = logging.getLogger("script_handler")

MANIFEST_FILE = Path(__file__).resolve().parent / "manifest.yaml"


def load_config(path: Path = MANIFEST_FILE) -> Dict[str, Any]:
    """读取 download/manifest.yaml"""
    return load_yaml(path)


class DownloadManager(IDownloader):
    """下载管理器

    策略优先级:
      1. aria2（manifest 中启用且 aria2c 已安装）
      2. http
    带存储凭据的目标只会交给 supports_credentials 的策略。
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        strategies: Optional[List[DownloadStrategy]] = None,
    ) -> None:
        if strategies is None:
            cfg = load_config() if config is None else config
            strategies = [
                Aria2Strategy(cfg.get("aria2")),
                HttpStrategy(cfg.get("http")),
            ]
        self._strategies = strategies

    # ── 策略选择 ─────────────────────────────────────────────

    def get_strategy(self, target: FileTarget) -> DownloadStrategy:
        """根据目标选择第一个可用策略"""
        for strategy in self._strategies:
            if not strategy.is_available():
                continue
            if target.credentials is not None and not strategy.supports_credentials:
                continue
            return strategy

        if target.credentials is not None:
            raise DownloadError("没有支持存储账户凭据的下载策略", index=target.index)
        raise DownloadError("没有可用的下载策略", index=target.index)

    # ── 下载 ─────────────────────────────────────────────────

    def download(self, target: FileTarget, dest_dir: Path) -> Path:
        filename = extract_filename_from_url(target.url)
        if not filename:
            raise DownloadError(f"无法从 URL 中解析文件名: {redact_url(target.url)}", index=target.index)

        target_path = dest_dir / filename
        strategy = self.get_strategy(target)
        logger.info(f"  -> 使用策略: {strategy.name} ({redact_url(target.url)})")

        strategy.pre_download(target_path)
        credentials = target.credentials if strategy.supports_credentials else None
        if not strategy.download(target.url, target_path, credentials=credentials):
            raise DownloadError(f"[{strategy.name}] 下载失败: {redact_url(target.url)}", index=target.index)
        strategy.post_download(target_path)

        return target_path
