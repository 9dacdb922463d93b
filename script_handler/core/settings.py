"""
宿主配置解析

- HandlerEnvironment.json: 宿主提供的目录信息（日志 / 配置 / 状态）
- <configFolder>/<seq>.settings: 每个序列号一份的 handler settings
- 序列号发现: 环境变量优先，其次取配置目录中最大的 <n>.settings

protected settings 的解密不在本项目范围内，这里只接受已解密的 JSON 对象。
"""
import json
import os
import re
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from script_handler.core.errors import ConfigError
from script_handler.core.ports import FileTarget, ISettingsProvider, StorageCredentials
from script_handler.core.schema import EnvKey
from script_handler.core.utils import logger
from script_handler.lib.download.url_utils import is_storage_blob_url


HANDLER_ENV_FILE = "HandlerEnvironment.json"

_SETTINGS_FILE_RE = re.compile(r"^(?P<seq_num>\d+)\.settings$")


# ============================================================
# HandlerEnvironment.json
# ============================================================
class HandlerEnvironmentPaths(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    log_folder: Path = Field(alias="logFolder")
    config_folder: Path = Field(alias="configFolder")
    status_folder: Path = Field(alias="statusFolder")
    heartbeat_file: Optional[Path] = Field(default=None, alias="heartbeatFile")


class HandlerEnvironment(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = ""
    version: float = 1.0
    handler_environment: HandlerEnvironmentPaths = Field(alias="handlerEnvironment")


def load_handler_env(handler_dir: Path) -> HandlerEnvironment:
    """读取 handler_dir 下的 HandlerEnvironment.json（一个元素的 JSON 数组）"""
    path = handler_dir / HANDLER_ENV_FILE
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"找不到 {HANDLER_ENV_FILE}: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"无法解析 {path}: {e}") from e

    if not isinstance(raw, list) or len(raw) != 1:
        raise ConfigError(f"{path} 应为只含一个元素的数组")

    try:
        return HandlerEnvironment.model_validate(raw[0])
    except ValidationError as e:
        raise ConfigError(f"{path} 格式有误:\n{e}") from e


# ============================================================
# 序列号发现
# ============================================================
def find_seq_num(config_folder: Path) -> int:
    """获取当前序列号

    优先读取环境变量 ConfigSequenceNumber，
    否则取配置目录中编号最大的 <n>.settings。
    """
    env_value = os.environ.get(EnvKey.CONFIG_SEQUENCE_NUMBER.value)
    if env_value is not None and env_value.strip():
        try:
            seq_num = int(env_value.strip())
        except ValueError as e:
            raise ConfigError(f"环境变量 {EnvKey.CONFIG_SEQUENCE_NUMBER.value} 不是整数: {env_value!r}") from e
        if seq_num < 0:
            raise ConfigError(f"序列号不能为负数: {seq_num}")
        return seq_num

    candidates: List[int] = []
    if config_folder.is_dir():
        for item in config_folder.iterdir():
            match = _SETTINGS_FILE_RE.match(item.name)
            if match and item.is_file():
                candidates.append(int(match.group("seq_num")))

    if not candidates:
        raise ConfigError(f"无法确定序列号: 未设置 {EnvKey.CONFIG_SEQUENCE_NUMBER.value}，且 {config_folder} 中没有 .settings 文件")
    return max(candidates)


# ============================================================
# Handler settings
# ============================================================
class PublicSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    file_uris: List[str] = Field(default_factory=list, alias="fileUris")
    command_to_execute: str = Field(default="", alias="commandToExecute")
    skip_dos2unix: bool = Field(default=False, alias="skipDos2Unix")


class ProtectedSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    file_uris: List[str] = Field(default_factory=list, alias="fileUris")
    command_to_execute: str = Field(default="", alias="commandToExecute")
    storage_account_name: str = Field(default="", alias="storageAccountName")
    storage_account_key: str = Field(default="", alias="storageAccountKey")


class HandlerSettings(BaseModel):
    """一次 enable 所需的全部配置"""
    public: PublicSettings = Field(default_factory=PublicSettings)
    protected: ProtectedSettings = Field(default_factory=ProtectedSettings)

    @property
    def credentials(self) -> Optional[StorageCredentials]:
        name = self.protected.storage_account_name
        key = self.protected.storage_account_key
        if name and key:
            return StorageCredentials(account_name=name, account_key=key)
        return None

    def resolve_command(self) -> str:
        """public 命令非空时优先，否则使用 protected 命令；两者都为空视为配置错误"""
        command = self.public.command_to_execute or self.protected.command_to_execute
        if not command.strip():
            raise ConfigError("commandToExecute 在 public 和 protected settings 中均为空")
        return command

    def file_targets(self) -> List[FileTarget]:
        """
        public fileUris 在前，protected fileUris 在后，统一编号。

        账户凭据只附加到存储 Blob 地址，其他地址匿名下载。
        """
        urls = list(self.public.file_uris) + list(self.protected.file_uris)
        creds = self.credentials
        return [
            FileTarget(index=i, url=url, credentials=creds if is_storage_blob_url(url) else None)
            for i, url in enumerate(urls)
        ]


def parse_settings(data: Any) -> HandlerSettings:
    """从 .settings 文件的 JSON 结构中取出 public / protected settings"""
    try:
        handler_settings = data["runtimeSettings"][0]["handlerSettings"]
    except (KeyError, IndexError, TypeError) as e:
        raise ConfigError("settings 缺少 runtimeSettings[0].handlerSettings") from e

    public_raw = handler_settings.get("publicSettings") or {}
    protected_raw = handler_settings.get("protectedSettings") or {}
    if isinstance(protected_raw, str):
        raise ConfigError("protectedSettings 仍为加密内容，需要由解密后的 settings provider 提供")

    try:
        return HandlerSettings(
            public=PublicSettings.model_validate(public_raw),
            protected=ProtectedSettings.model_validate(protected_raw),
        )
    except ValidationError as e:
        raise ConfigError(f"settings 格式有误:\n{e}") from e


class FileSettingsProvider(ISettingsProvider):
    """从 <configFolder>/<seq>.settings 读取配置"""

    def __init__(self, config_folder: Path):
        self.config_folder = config_folder

    def load(self, seq_num: int) -> HandlerSettings:
        path = self.config_folder / f"{seq_num}.settings"
        logger.debug(f"  -> 读取配置: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise ConfigError(f"找不到 settings 文件: {path}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"无法解析 settings 文件 {path}: {e}") from e
        return parse_settings(data)
