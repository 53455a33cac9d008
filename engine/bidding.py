"""
叫地主状态机

三名玩家依次叫分 (0=不叫, 1/2/3=叫分)，叫分必须高于当前最高分:
- 有人叫 3 分立即成为地主
- 有人叫过分后，连续两人不叫，最后叫分者成为地主
- 三人都不叫，交由引擎按策略处理 (重新发牌或随机地主)
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple

from .errors import InvariantViolation, Rejection

MAX_BID = 3
NUM_PLAYERS = 3


class BidStatus(Enum):
    """叫地主阶段状态"""
    BIDDING = "bidding"    # 叫分中
    RESOLVED = "resolved"  # 地主已确定
    NO_BID = "no_bid"      # 三家都不叫


@dataclass(frozen=True)
class BiddingState:
    """
    不可变叫地主状态

    Attributes:
        current_bidder: 当前叫分玩家
        highest_bid: 当前最高分 (0 表示还没人叫)
        bids: 每名玩家最近一次叫分，-1 表示未叫
        pass_count: 连续不叫次数
        last_nonzero_bidder: 最后一个叫分的玩家，-1 表示没有
        landlord: 地主，-1 表示未确定
        status: 状态
        history: 叫分历史 ((玩家, 分数), ...)
    """
    current_bidder: int = 0
    highest_bid: int = 0
    bids: Tuple[int, int, int] = (-1, -1, -1)
    pass_count: int = 0
    last_nonzero_bidder: int = -1
    landlord: int = -1
    status: BidStatus = BidStatus.BIDDING
    history: Tuple[Tuple[int, int], ...] = ()

    @property
    def is_resolved(self) -> bool:
        return self.status == BidStatus.RESOLVED

    def legal_bids(self) -> List[int]:
        """当前可叫的分数"""
        if self.status != BidStatus.BIDDING:
            return []
        return [0] + [b for b in range(1, MAX_BID + 1) if b > self.highest_bid]

    def check_bid(self, player: int, amount: int) -> Optional[Rejection]:
        """
        检查叫分是否合法

        Returns:
            拒绝原因，合法时返回 None
        """
        if self.status != BidStatus.BIDDING:
            return Rejection.WRONG_PHASE
        if player != self.current_bidder:
            return Rejection.OUT_OF_TURN
        if amount < 0 or amount > MAX_BID:
            return Rejection.BID_OUT_OF_RANGE
        if 0 < amount <= self.highest_bid:
            return Rejection.BID_TOO_LOW
        return None

    def with_bid(self, player: int, amount: int) -> 'BiddingState':
        """
        叫分后的新状态

        Args:
            player: 叫分玩家
            amount: 分数 (0 表示不叫)

        Returns:
            新状态
        """
        rejection = self.check_bid(player, amount)
        if rejection is not None:
            raise InvariantViolation(f"Illegal bid {amount} by player {player}: {rejection.name}")

        bids = list(self.bids)
        bids[player] = amount
        highest_bid = self.highest_bid
        last_nonzero = self.last_nonzero_bidder
        pass_count = self.pass_count

        if amount > highest_bid:
            highest_bid = amount
            last_nonzero = player
            pass_count = 0
        elif amount == 0:
            pass_count += 1

        state = replace(
            self,
            highest_bid=highest_bid,
            bids=tuple(bids),
            pass_count=pass_count,
            last_nonzero_bidder=last_nonzero,
            history=self.history + ((player, amount),),
        )

        if amount == MAX_BID:
            return state.resolved(player)
        if last_nonzero >= 0 and pass_count >= NUM_PLAYERS - 1:
            return state.resolved(last_nonzero)
        if last_nonzero < 0 and pass_count >= NUM_PLAYERS:
            return replace(state, status=BidStatus.NO_BID)

        return replace(state, current_bidder=(player + 1) % NUM_PLAYERS)

    def resolved(self, landlord: int) -> 'BiddingState':
        """确定地主"""
        if landlord not in range(NUM_PLAYERS):
            raise InvariantViolation(f"Invalid landlord index: {landlord}")
        return replace(self, landlord=landlord, status=BidStatus.RESOLVED)
