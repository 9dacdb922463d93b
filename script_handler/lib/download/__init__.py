"""
文件下载模块

支持的下载策略:
  - http:  requests 流式下载（默认）
  - aria2: aria2c 多线程下载（manifest.yaml 中启用）
"""
from script_handler.lib.download.manager import DownloadManager, load_config
from script_handler.lib.download.url_utils import extract_filename_from_url, is_storage_blob_url, redact_url
from script_handler.lib.download.base import DownloadStrategy

__all__ = [
    # 下载
    "DownloadManager",
    "DownloadStrategy",
    "load_config",
    # URL 工具
    "extract_filename_from_url",
    "is_storage_blob_url",
    "redact_url",
]
