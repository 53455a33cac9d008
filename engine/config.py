"""
引擎配置

定义游戏模式与叫地主策略
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import InvariantViolation


class GameMode(Enum):
    """游戏模式"""
    STANDARD = "standard"      # 标准模式: 经典叫地主
    CLASSIC = "classic"        # 经典模式: 不叫地主，随机分配地主
    FAST = "fast"              # 快速模式: 自动叫分
    THREE_KING = "three_king"  # 三王模式: 无地主，各自为战


class NoBidPolicy(Enum):
    """三家都不叫时的处理方式"""
    REDEAL = "redeal"                    # 重新发牌
    RANDOM_LANDLORD = "random_landlord"  # 随机指定地主


@dataclass
class EngineConfig:
    """
    引擎配置

    Attributes:
        mode: 默认游戏模式 (new_round 可覆盖)
        no_bid_policy: 无人叫分时的处理方式
        human_player: 人类玩家的座位 (累计得分以其视角计算)
        seed: 随机种子
        max_redeals: 连续重新发牌的上限，超过后改为随机指定地主
    """
    mode: GameMode = GameMode.STANDARD
    no_bid_policy: NoBidPolicy = NoBidPolicy.REDEAL
    human_player: int = 0
    seed: Optional[int] = None
    max_redeals: int = 10

    def __post_init__(self):
        self.mode = GameMode(self.mode)
        self.no_bid_policy = NoBidPolicy(self.no_bid_policy)
        if self.human_player not in (0, 1, 2):
            raise InvariantViolation(f"human_player must be 0, 1 or 2, got {self.human_player}")
        if self.max_redeals < 0:
            raise InvariantViolation("max_redeals must be non-negative")

    @classmethod
    def from_dict(cls, d: dict) -> 'EngineConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)
