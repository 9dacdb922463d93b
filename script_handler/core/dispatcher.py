"""
命令调度器

命令表在启动时构建一次，以只读映射的形式显式传入 dispatch()。
dispatch() 只返回结果，不退出进程；退出码由 main.py 决定。
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from script_handler.core.errors import UnknownCommandError
from script_handler.core.interface import HandlerContext
from script_handler.core.schema import PreCheck, StatusValue
from script_handler.core.utils import logger


ActionFunc = Callable[[HandlerContext], None]
PreFunc = Callable[[HandlerContext], PreCheck]


@dataclass(frozen=True)
class CommandSpec:
    """单个命令的定义"""
    name: str                          # 展示名，如 "Enable"
    action: ActionFunc                 # 主动作
    should_report_status: bool         # 是否需要向宿主上报状态
    pre: Optional[PreFunc] = None      # 在任何状态上报之前执行


class Outcome(str, Enum):
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class DispatchResult:
    command: str
    outcome: Outcome
    error: Optional[BaseException] = None

    @property
    def exit_code(self) -> int:
        return 1 if self.outcome is Outcome.FAILED else 0


def freeze_table(commands: Dict[str, CommandSpec]) -> Mapping[str, CommandSpec]:
    """返回命令表的只读视图"""
    return MappingProxyType(dict(commands))


def dispatch(
    name: str,
    context: HandlerContext,
    table: Mapping[str, CommandSpec],
    hook: Any = None,
) -> DispatchResult:
    """
    执行一个命令: pre-check → (transitioning) → action → (success / error)

    Args:
        name:    宿主传入的命令名
        context: 调用上下文
        table:   命令表
        hook:    pluggy hook relay，用于状态上报；None 时不上报

    Raises:
        UnknownCommandError: name 不在命令表中
    """
    spec = table.get(name)
    if spec is None:
        raise UnknownCommandError(f"未知命令: {name}")

    logger.info(f"\n>>> [{spec.name}] 开始执行 (seq={context.seq_num})")

    if spec.pre is not None:
        try:
            pre_result = spec.pre(context)
        except Exception as e:
            logger.error(f"  -> 前置检查失败: {e}")
            return DispatchResult(command=name, outcome=Outcome.FAILED, error=e)

        if pre_result is PreCheck.ALREADY_PROCESSED:
            logger.info("  -> 该配置已处理过，不再重复执行")
            context.log(name, "skipped")
            return DispatchResult(command=name, outcome=Outcome.SKIPPED)

    report = _reporter(spec, context, hook)
    report(StatusValue.TRANSITIONING, "")

    try:
        spec.action(context)
    except Exception as e:
        logger.error(f"  -> [{spec.name}] 执行失败: {e}")
        report(StatusValue.ERROR, str(e))
        return DispatchResult(command=name, outcome=Outcome.FAILED, error=e)

    report(StatusValue.SUCCESS, f"{spec.name} succeeded")
    logger.info(f"  -> [{spec.name}] 完成")
    return DispatchResult(command=name, outcome=Outcome.SUCCEEDED)


def _reporter(spec: CommandSpec, context: HandlerContext, hook: Any) -> Callable[[StatusValue, str], None]:
    def report(status: StatusValue, message: str) -> None:
        if hook is None or not spec.should_report_status:
            return
        hook.report_status(
            operation=spec.name,
            status=status.value,
            seq_num=context.seq_num,
            message=message,
        )

    return report
