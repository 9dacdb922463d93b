"""
工具函数
"""
import logging
import sys
from pathlib import Path
from typing import Optional


LOGGER_NAME = "script_handler"

FILE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(module)s] %(message)s"


def setup_logger(log_file: Optional[Path] = None, debug: bool = False) -> logging.Logger:
    """配置全局日志，终端输出 INFO（debug 模式输出 DEBUG），文件输出 DEBUG

    log_file 为空时只配置终端输出，文件 Handler 可在 HandlerEnvironment
    加载后通过 add_file_handler() 补充。
    """
    _logger = logging.getLogger(LOGGER_NAME)
    _logger.setLevel(logging.DEBUG)

    # 避免重复添加 handler
    if _logger.handlers:
        if debug:
            for h in _logger.handlers:
                if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
                    h.setLevel(logging.DEBUG)
        if log_file is not None:
            add_file_handler(log_file)
        return _logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    _logger.addHandler(console_handler)

    if log_file is not None:
        add_file_handler(log_file)

    return _logger


def add_file_handler(log_file: Path) -> None:
    """追加 DEBUG 级别的文件 Handler（同一路径只添加一次）"""
    _logger = logging.getLogger(LOGGER_NAME)
    target = str(log_file.resolve())
    for h in _logger.handlers:
        if isinstance(h, logging.FileHandler) and h.baseFilename == target:
            return

    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    _logger.addHandler(file_handler)


logger = logging.getLogger(LOGGER_NAME)
