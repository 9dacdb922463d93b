"""
Schema & 类型定义

集中管理:
- CommandName: 宿主可调用的命令名（避免魔法字符串）
- StatusValue: 上报给宿主的状态值
- PreCheck: 前置检查结果
- EnvKey: 宿主注入的环境变量名
"""
from enum import Enum


# ============================================================
# 命令名
# ============================================================
class CommandName(str, Enum):
    INSTALL = "install"
    UNINSTALL = "uninstall"
    ENABLE = "enable"
    UPDATE = "update"
    DISABLE = "disable"


# ============================================================
# 状态值
# ============================================================
class StatusValue(str, Enum):
    TRANSITIONING = "transitioning"
    SUCCESS = "success"
    ERROR = "error"


# ============================================================
# 前置检查结果
# ============================================================
class PreCheck(Enum):
    """
    前置检查的两种结果。

    ALREADY_PROCESSED 不是错误：该序列号对应的配置已经执行过，
    调用方应直接成功返回，不上报状态也不执行动作。
    """
    PROCEED = "proceed"
    ALREADY_PROCESSED = "already_processed"


# ============================================================
# 环境变量名
# ============================================================
class EnvKey(str, Enum):
    # 宿主通过该变量传入当前配置的序列号
    CONFIG_SEQUENCE_NUMBER = "ConfigSequenceNumber"
