"""
URL 解析工具
"""
from urllib.parse import unquote, urlparse


def extract_filename_from_url(url: str) -> str:
    """从 URL 路径的最后一段提取文件名（忽略 query，如 SAS token）

    Returns:
        文件名，或空字符串
    """
    parsed = urlparse(url)
    path = unquote(parsed.path)
    if "/" not in path:
        return ""
    filename = path.rsplit("/", 1)[-1]
    if filename in ("", ".", ".."):
        return ""
    return filename


def redact_url(url: str) -> str:
    """去掉 query 部分，避免 SAS token 写入日志"""
    parsed = urlparse(url)
    return parsed._replace(query="", fragment="").geturl()


STORAGE_BLOB_HOST_SUFFIX = ".blob.core.windows.net"


def is_storage_blob_url(url: str) -> bool:
    """是否为存储账户 Blob 地址（只有这类地址需要账户凭据）"""
    host = (urlparse(url).hostname or "").lower()
    return host.endswith(STORAGE_BLOB_HOST_SUFFIX)
