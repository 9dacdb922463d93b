"""
状态目录迁移

旧版本把状态放在 legacy 路径下，新版本统一到 canonical 路径。
迁移必须在 enable 的序列号检查之前执行，因为序列号文件本身可能还在旧目录里。
"""
import errno
import os
import shutil
from pathlib import Path

from script_handler.core.errors import StateDirectoryError
from script_handler.core.utils import logger


def migrate_state_dir(old: Path, new: Path) -> bool:
    """
    将 old 整棵目录树迁移到 new。

    - old 不存在: 无需迁移（已迁移过或从未存在）
    - new 已存在: 不迁移，旧状态不能覆盖新状态
    - 同一文件系统: 一次 rename 完成
    - 跨文件系统: 先复制到 new 的同级暂存目录，再 rename 到位，最后删除 old

    任何时刻数据都不会被拆分到两个目录中。

    Returns:
        True 表示发生了迁移
    """
    if not old.exists():
        logger.debug(f"  -> 旧状态目录不存在，跳过迁移: {old}")
        return False

    if new.exists():
        logger.info(f"  -> 状态目录已存在，保留现有状态，不迁移: {new}")
        return False

    logger.info(f"  -> 迁移状态目录: {old} -> {new}")
    try:
        new.parent.mkdir(parents=True, exist_ok=True)
        os.rename(old, new)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise StateDirectoryError(f"状态目录迁移失败: {old} -> {new}: {e}") from e
        _migrate_across_devices(old, new)

    logger.info("  -> 状态目录迁移完成")
    return True


def _migrate_across_devices(old: Path, new: Path) -> None:
    """跨文件系统迁移：复制到暂存目录 → rename 到位 → 删除旧目录"""
    staging = new.parent / f".{new.name}.migrating"
    try:
        if staging.exists():
            shutil.rmtree(staging)
        shutil.copytree(old, staging, symlinks=True)
        os.rename(staging, new)
    except OSError as e:
        shutil.rmtree(staging, ignore_errors=True)
        raise StateDirectoryError(f"状态目录跨设备迁移失败: {old} -> {new}: {e}") from e

    try:
        shutil.rmtree(old)
    except OSError as e:
        # 数据已完整落在 new，旧目录下次迁移时会因 new 存在而被忽略
        logger.warning(f"  -> [WARN] 旧状态目录删除失败: {old}: {e}")
