"""
智能体

所有智能体都是同步决策: 输入玩家视角的局面，输出叫分或出牌
"""
from typing import List, Optional, Tuple

import numpy as np

from engine.game import PlayerView
from engine.heuristics import choose_bid, choose_play


class Agent:
    """智能体基类"""

    def __init__(self, name: str = "agent"):
        self.name = name

    def bid(self, view: PlayerView, legal_bids: List[int]) -> int:
        """选择叫分 (0 表示不叫)"""
        raise NotImplementedError

    def play(self, view: PlayerView, legal_plays: List[Tuple[int, ...]]) -> Tuple[int, ...]:
        """选择出牌 (手牌位置)，空元组表示过牌"""
        raise NotImplementedError

    def reset(self):
        """重置状态"""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class RandomAgent(Agent):
    """随机智能体"""

    def __init__(self, name: str = "random", seed: Optional[int] = None):
        super().__init__(name)
        self.rng = np.random.default_rng(seed)

    def bid(self, view: PlayerView, legal_bids: List[int]) -> int:
        if not legal_bids:
            return 0
        return int(self.rng.choice(legal_bids))

    def play(self, view: PlayerView, legal_plays: List[Tuple[int, ...]]) -> Tuple[int, ...]:
        options = list(legal_plays)
        # 跟牌时可以过牌
        if not view.is_leading:
            options.append(())
        if not options:
            return ()
        idx = self.rng.integers(len(options))
        return options[idx]


class RuleBasedAgent(Agent):
    """规则智能体: 按手牌强度叫分，出能压过的最小牌"""

    def __init__(self, name: str = "rule"):
        super().__init__(name)

    def bid(self, view: PlayerView, legal_bids: List[int]) -> int:
        amount = choose_bid(view.hand, view.highest_bid)
        return amount if amount in legal_bids else 0

    def play(self, view: PlayerView, legal_plays: List[Tuple[int, ...]]) -> Tuple[int, ...]:
        return choose_play(
            view.hand,
            view.reference,
            player=view.player,
            last_player=view.last_player,
            landlord=view.landlord,
        )
