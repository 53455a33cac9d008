"""
计分

倍数 = 2^炸弹数 (王炸也算)，春天 / 反春天再翻一倍
得分 = max(1, 叫分) × 倍数
"""
from dataclasses import dataclass, replace
from typing import Tuple

from .actions import Classification


@dataclass(frozen=True)
class ScoreState:
    """
    计分状态

    Attributes:
        bombs: 本局打出的炸弹 (含王炸) 次数
        played_any: 各玩家本局是否出过牌
        landlord_plays: 地主本局出牌手数
        total: 人类玩家的累计得分 (跨局保留)
    """
    bombs: int = 0
    played_any: Tuple[bool, bool, bool] = (False, False, False)
    landlord_plays: int = 0
    total: int = 0

    def record_play(self, player: int, classification: Classification, landlord: int) -> 'ScoreState':
        """记录一手被接受的出牌"""
        played_any = list(self.played_any)
        played_any[player] = True
        return replace(
            self,
            bombs=self.bombs + (1 if classification.is_bomb else 0),
            played_any=tuple(played_any),
            landlord_plays=self.landlord_plays + (1 if player == landlord else 0),
        )

    def new_round(self) -> 'ScoreState':
        """新一局: 只保留累计得分"""
        return ScoreState(total=self.total)


@dataclass(frozen=True)
class RoundResult:
    """单局结算结果"""
    winner: int
    landlord: int
    base: int
    bombs: int
    locked: int
    spring: bool
    anti_spring: bool
    multiplier: int
    score: int
    human_won: bool
    total: int

    @property
    def landlord_won(self) -> bool:
        return self.landlord >= 0 and self.winner == self.landlord


def is_winning_side(player: int, winner: int, landlord: int) -> bool:
    """player 是否与赢家同一方 (无地主时各自为战)"""
    if landlord < 0:
        return player == winner
    if winner == landlord:
        return player == landlord
    return player != landlord


def compute_score(
    state: ScoreState,
    winner: int,
    landlord: int,
    highest_bid: int,
    human_player: int = 0,
) -> RoundResult:
    """
    计算本局得分

    Args:
        state: 本局计分状态
        winner: 出完手牌的玩家
        landlord: 地主 (-1 表示无地主)
        highest_bid: 最高叫分
        human_player: 人类玩家座位

    Returns:
        RoundResult (total 为更新后的累计得分)
    """
    # 关住人数: 未出过牌的另外两名玩家
    locked = sum(1 for i in range(3) if i != winner and not state.played_any[i])

    spring = landlord >= 0 and winner == landlord and locked == 2
    anti_spring = landlord >= 0 and winner != landlord and state.landlord_plays == 1

    multiplier = 2 ** state.bombs
    if spring or anti_spring:
        multiplier *= 2

    base = max(1, highest_bid)
    score = base * multiplier

    human_won = is_winning_side(human_player, winner, landlord)
    return RoundResult(
        winner=winner,
        landlord=landlord,
        base=base,
        bombs=state.bombs,
        locked=locked,
        spring=spring,
        anti_spring=anti_spring,
        multiplier=multiplier,
        score=score,
        human_won=human_won,
        total=apply_to_total(state.total, score, human_won),
    )


def apply_to_total(total: int, score: int, won: bool) -> int:
    """累计得分: 赢加输减，最低为 0"""
    if won:
        return total + score
    return max(0, total - score)
