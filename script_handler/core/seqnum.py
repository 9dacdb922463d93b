"""
序列号存储 - 幂等执行的基础

文件内容仅为一个十进制整数。写入发生在动作执行 *之前*：
如果进程在写入之后、动作完成之前崩溃，该序列号下次会被视为"已处理"。
这是已知限制，见 DESIGN.md。

本模块不加锁，依赖宿主保证同一实例同一时刻只有一次调用。
"""
import os
import tempfile
from pathlib import Path
from typing import Optional

from script_handler.core.errors import SequenceNumberError
from script_handler.core.schema import PreCheck
from script_handler.core.utils import logger


SEQ_NUM_FILE = "mrseq"


def read(path: Path) -> Optional[int]:
    """读取已保存的序列号，文件不存在返回 None

    内容为空或不是整数时视为损坏，直接报错而不是当作"无记录"。
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        raise SequenceNumberError(f"无法读取序列号文件 {path}: {e}") from e

    try:
        return int(raw.strip())
    except ValueError as e:
        raise SequenceNumberError(f"序列号文件 {path} 内容损坏: {raw!r}") from e


def is_newer(path: Path, candidate: int) -> bool:
    """candidate 是否严格大于已保存的序列号（无记录时总是 True）"""
    stored = read(path)
    if stored is None:
        return True
    return candidate > stored


def persist(path: Path, value: int) -> None:
    """原子写入序列号：先写同目录临时文件，再 os.replace 覆盖"""
    tmp_name: Optional[str] = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(str(value))
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        raise SequenceNumberError(f"无法写入序列号文件 {path}: {e}") from e
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)


def check_and_save(path: Path, seq_num: int) -> PreCheck:
    """
    检查 seq_num 是否已处理，未处理则立即保存。

    Returns:
        PreCheck.ALREADY_PROCESSED: 已保存的序列号 >= seq_num
        PreCheck.PROCEED:           seq_num 已写入，调用方继续执行动作
    """
    logger.debug(f"  -> 比较序列号: {path}")
    if not is_newer(path, seq_num):
        return PreCheck.ALREADY_PROCESSED

    persist(path, seq_num)
    logger.info(f"  -> 序列号 {seq_num} 已保存")
    return PreCheck.PROCEED
