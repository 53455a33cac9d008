"""
观察空间编码

将引擎局面转换为数组形式的特征表示 (只包含该玩家可见的信息)
"""
from dataclasses import dataclass
from typing import Dict

import numpy as np

from engine.cards import DECK_SIZE, HAND_SIZE, BOTTOM_SIZE, cards_to_array, cards_to_mask
from engine.game import DoudizhuEngine, Phase

PHASES = (Phase.IDLE, Phase.BIDDING, Phase.PLAYING, Phase.FINISHED)


@dataclass
class Observation:
    """
    结构化观测

    Attributes:
        hand: 自己的手牌 (54,) 点数编码
        hand_mask: 自己的手牌 (54,) 按具体的牌编码，与动作空间对齐
        last_play: 需要压过的牌 (54,)，主动出牌时全零
        played_cards: 各玩家已出牌累计 (3, 54)
        position: 自己的座位 (3,) one-hot
        landlord: 地主座位 (3,) one-hot，无地主时全零
        bid_info: 各玩家叫分 (3,)，未叫为 -1
        cards_left: 各玩家剩余牌数比例 (3,)
        phase: 游戏阶段 (4,) one-hot
    """
    hand: np.ndarray
    hand_mask: np.ndarray
    last_play: np.ndarray
    played_cards: np.ndarray
    position: np.ndarray
    landlord: np.ndarray
    bid_info: np.ndarray
    cards_left: np.ndarray
    phase: np.ndarray

    def to_dict(self) -> Dict[str, np.ndarray]:
        """转换为字典格式"""
        return {
            "hand": self.hand,
            "hand_mask": self.hand_mask,
            "last_play": self.last_play,
            "played_cards": self.played_cards,
            "position": self.position,
            "landlord": self.landlord,
            "bid_info": self.bid_info,
            "cards_left": self.cards_left,
            "phase": self.phase,
        }


class ObservationBuilder:
    """
    观测构建器

    负责将 DoudizhuEngine 的局面转换为 Observation
    """

    def build(self, engine: DoudizhuEngine, player: int) -> Observation:
        """
        从引擎局面构建观测

        Args:
            engine: 引擎
            player: 视角玩家

        Returns:
            Observation 对象
        """
        view = engine.view(player)

        played_cards = np.zeros((3, DECK_SIZE), dtype=np.float32)
        for i in range(3):
            played_cards[i] = cards_to_array(engine.played_cards(i))

        position = np.zeros(3, dtype=np.float32)
        position[player] = 1

        landlord = np.zeros(3, dtype=np.float32)
        if view.landlord >= 0:
            landlord[view.landlord] = 1

        bid_info = np.array(engine.bidding.bids, dtype=np.float32)

        max_cards = HAND_SIZE + BOTTOM_SIZE
        cards_left = np.array(view.hand_sizes, dtype=np.float32) / max_cards

        phase = np.zeros(len(PHASES), dtype=np.float32)
        phase[PHASES.index(view.phase)] = 1

        return Observation(
            hand=cards_to_array(view.hand),
            hand_mask=cards_to_mask(view.hand),
            last_play=cards_to_array(view.reference),
            played_cards=played_cards,
            position=position,
            landlord=landlord,
            bid_info=bid_info,
            cards_left=cards_left,
            phase=phase,
        )
