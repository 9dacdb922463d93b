"""
HTTP 直链下载策略（requests 流式下载）

默认策略，适用于公开 URL 及带 SAS token 的存储 URL。
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from script_handler.core.ports import StorageCredentials
from script_handler.lib.download.base import DownloadStrategy
from script_handler.lib.download.url_utils import redact_url
from script_handler.lib.utils import format_size

logger = logging.getLogger("script_handler")


class HttpStrategy(DownloadStrategy):
    """requests 单线程下载

    配置段 (manifest.yaml → http):
        connect_timeout: 连接超时秒数（默认 30）
        read_timeout:    读取超时秒数（默认不限制）
        chunk_size:      写盘块大小 KB（默认 1024）
        user_agent:      User-Agent（默认 custom-script-handler）
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        cfg = config or {}
        self._connect_timeout = cfg.get("connect_timeout", 30)
        self._read_timeout    = cfg.get("read_timeout")
        self._chunk_size      = int(cfg.get("chunk_size", 1024)) * 1024
        self._user_agent      = cfg.get("user_agent", "custom-script-handler")

    @property
    def name(self) -> str:
        return "http"

    def is_available(self) -> bool:
        return True

    def pre_download(self, target_path: Path) -> None:
        """确保目标目录存在"""
        target_path.parent.mkdir(parents=True, exist_ok=True)

    def download(
        self,
        url: str,
        target_path: Path,
        credentials: Optional[StorageCredentials] = None,
    ) -> bool:
        headers = {"User-Agent": self._user_agent}
        logger.debug(f"  -> [http] GET {redact_url(url)}")

        try:
            with requests.get(
                url,
                headers=headers,
                stream=True,
                timeout=(self._connect_timeout, self._read_timeout),
            ) as resp:
                if resp.status_code != 200:
                    logger.error(f"  -> [http] 服务器返回 {resp.status_code}: {redact_url(url)}")
                    return False

                written = 0
                with open(target_path, "wb") as f:
                    for chunk in resp.iter_content(chunk_size=self._chunk_size):
                        if chunk:
                            f.write(chunk)
                            written += len(chunk)
                    f.flush()
                    os.fsync(f.fileno())

        except requests.RequestException as e:
            logger.error(f"  -> [http] 请求失败: {e}")
            return False
        except OSError as e:
            logger.error(f"  -> [http] 写入失败 {target_path}: {e}")
            return False

        logger.debug(f"  -> [http] 已写入 {format_size(written)}")
        return True
