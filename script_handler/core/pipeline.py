"""
下载 → 执行 流水线

两个步骤严格串行，任一步失败立即中止，不重试，也不清理已下载的文件。
"""
from pathlib import Path
from typing import List, Sequence

from script_handler.core.errors import CommandExecutionError, DownloadError, StateDirectoryError
from script_handler.core.ports import FileTarget, ICommandRunner, IDownloader
from script_handler.core.utils import logger


UTF8_BOM = b"\xef\xbb\xbf"

STDOUT_FILE = "stdout"
STDERR_FILE = "stderr"


def fetch_all(
    dest_dir: Path,
    targets: Sequence[FileTarget],
    downloader: IDownloader,
    normalize_scripts: bool = True,
) -> List[Path]:
    """
    按顺序下载所有目标到 dest_dir。

    Args:
        dest_dir:          下载目录，不存在时自动创建（已存在不报错）
        targets:           下载目标，按给定顺序逐个下载
        downloader:        下载实现
        normalize_scripts: 是否对脚本文件做换行符规范化

    Returns:
        已下载文件路径列表

    Raises:
        StateDirectoryError: 无法创建 dest_dir
        DownloadError:       第 k 个目标下载失败，index=k，后续目标不会被尝试
    """
    logger.info(f"  -> 准备下载目录: {dest_dir}")
    try:
        dest_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
    except OSError as e:
        raise StateDirectoryError(f"无法创建下载目录 {dest_dir}: {e}") from e

    logger.info(f"  -> 待下载文件: {len(targets)} 个")
    downloaded: List[Path] = []
    for i, target in enumerate(targets):
        logger.info(f"  -> [{i}] 开始下载")
        try:
            path = downloader.download(target, dest_dir)
            if normalize_scripts:
                normalize_script(path)
        except Exception as e:
            logger.error(f"  -> [{i}] 下载失败: {e}")
            raise DownloadError(f"下载 file[{i}] 失败: {e}", index=i) from e
        logger.info(f"  -> [{i}] 下载完成: {path.name}")
        downloaded.append(path)

    return downloaded


def normalize_script(path: Path) -> bool:
    """
    以 shebang 开头的脚本：去掉 UTF-8 BOM，CRLF 转为 LF。

    Windows 上编辑过的脚本带 CRLF 时解释器路径会变成 "/bin/sh\\r"，无法执行。

    Returns:
        True 表示文件被改写
    """
    # 只读文件头判断是否为脚本，二进制大文件不整体载入
    with path.open("rb") as f:
        head = f.read(len(UTF8_BOM) + 2)
    if head.startswith(UTF8_BOM):
        head = head[len(UTF8_BOM):]
    if not head.startswith(b"#!"):
        return False

    data = path.read_bytes()
    body = data[len(UTF8_BOM):] if data.startswith(UTF8_BOM) else data

    fixed = body.replace(b"\r\n", b"\n")
    if fixed == data:
        return False

    path.write_bytes(fixed)
    logger.debug(f"  -> 已规范化脚本换行符: {path.name}")
    return True


def run_command(command: str, cwd: Path, runner: ICommandRunner) -> None:
    """
    在 cwd 下通过 shell 执行 command，阻塞直到结束（无超时）。

    stdout / stderr 同时写入 cwd 下的同名文件，便于排查。

    Raises:
        CommandExecutionError: 启动失败或退出码非零
    """
    logger.info(f"  -> 执行命令，工作目录: {cwd}")
    try:
        result = runner.run(command, cwd=cwd, shell=True)
    except OSError as e:
        raise CommandExecutionError(f"命令启动失败: {e}") from e

    for name in (STDOUT_FILE, STDERR_FILE):
        if (cwd / name).exists():
            logger.warning(f"  -> [WARN] {name} 已存在，将被命令输出覆盖: {cwd / name}")

    try:
        (cwd / STDOUT_FILE).write_text(result.stdout, encoding="utf-8")
        (cwd / STDERR_FILE).write_text(result.stderr, encoding="utf-8")
    except OSError as e:
        logger.warning(f"  -> [WARN] 命令输出保存失败: {e}")

    if result.returncode != 0:
        logger.error(f"  -> 命令执行失败，退出码: {result.returncode}")
        raise CommandExecutionError(
            f"命令执行失败，退出码: {result.returncode}",
            returncode=result.returncode,
            output=result.output,
        )

    logger.info("  -> 命令执行完成")
