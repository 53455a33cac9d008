"""
错误分类

两类错误:
- Rejection: 可恢复的规则违例，引擎拒绝动作、状态不变、返回原因 (不抛异常)
- InvariantViolation: 结构性前置条件被破坏 (调用方 bug)，直接抛出
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Rejection(Enum):
    """拒绝原因，值为可直接展示的提示文本"""
    INVALID_CARD_SHAPE = "无效的牌型"
    BID_TOO_LOW = "叫分必须高于当前最高分"
    BID_OUT_OF_RANGE = "叫分只能是 0-3 分"
    OUT_OF_TURN = "现在不是您的回合"
    MUST_PLAY_FIRST_HAND = "本局第一手牌不能过牌"
    CANNOT_BEAT_REFERENCE = "出的牌不能压过上一手牌"
    WRONG_PHASE = "当前阶段不能执行该操作"

    @property
    def message(self) -> str:
        return self.value


class InvariantViolation(ValueError):
    """结构性不变量被破坏 (牌索引越界、重复牌等)"""


@dataclass(frozen=True)
class Outcome:
    """
    动作结果

    Attributes:
        accepted: 是否被接受
        reason: 被拒绝时的原因
    """
    accepted: bool
    reason: Optional[Rejection] = None

    @classmethod
    def ok(cls) -> 'Outcome':
        return cls(accepted=True)

    @classmethod
    def rejected(cls, reason: Rejection) -> 'Outcome':
        return cls(accepted=False, reason=reason)

    def __bool__(self) -> bool:
        return self.accepted
