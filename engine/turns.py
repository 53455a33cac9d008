"""
出牌轮转状态机

- 主动出牌: 任何合法牌型
- 跟牌: 必须压过上一手牌，或者过牌
- 连续两人过牌后，最后出牌者重新主动出牌
- 有人出完手牌时本局结束
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Tuple

from .cards import Card, sort_cards
from .actions import Classification
from .errors import InvariantViolation, Rejection
from .rules import RuleEngine

NUM_PLAYERS = 3


class TurnStatus(Enum):
    """出牌阶段状态"""
    LEADING = "leading"                  # 主动出牌
    AWAITING_FOLLOW = "awaiting_follow"  # 等待跟牌
    ROUND_END = "round_end"              # 本局结束


Hands = Tuple[Tuple[Card, ...], Tuple[Card, ...], Tuple[Card, ...]]


@dataclass(frozen=True)
class TurnState:
    """
    不可变出牌状态

    Attributes:
        hands: 三名玩家的手牌 (按点数排序)
        current_player: 当前行动玩家
        last_play: 最近一次有效出牌 (空表示可以主动出牌)
        last_player: 最近出牌的玩家，-1 表示本局还没人出牌
        pass_count: 连续过牌次数
        winner: 赢家，-1 表示未结束
    """
    hands: Hands
    current_player: int = 0
    last_play: Tuple[Card, ...] = ()
    last_player: int = -1
    pass_count: int = 0
    winner: int = -1

    @property
    def status(self) -> TurnStatus:
        if self.winner >= 0:
            return TurnStatus.ROUND_END
        if not self.last_play:
            return TurnStatus.LEADING
        return TurnStatus.AWAITING_FOLLOW

    def reference_for(self, player: int) -> Tuple[Card, ...]:
        """player 需要压过的牌 (空表示可以任意出牌)"""
        if self.last_player == player:
            return ()
        return self.last_play

    def with_bottom(self, landlord: int, bottom: Sequence[Card]) -> 'TurnState':
        """地主获得底牌并先出牌"""
        hands = list(self.hands)
        hands[landlord] = tuple(sort_cards(hands[landlord] + tuple(bottom)))
        return replace(self, hands=tuple(hands), current_player=landlord)

    def check_play(self, player: int, cards: Sequence[Card]) -> Optional[Rejection]:
        """
        检查出牌是否合法

        Returns:
            拒绝原因，合法时返回 None
        """
        if self.status == TurnStatus.ROUND_END:
            return Rejection.WRONG_PHASE
        if player != self.current_player:
            return Rejection.OUT_OF_TURN

        classification = RuleEngine.classify(cards)
        if not classification.is_playable:
            return Rejection.INVALID_CARD_SHAPE

        reference = self.reference_for(player)
        if reference and not RuleEngine.beats(classification, RuleEngine.classify(reference)):
            return Rejection.CANNOT_BEAT_REFERENCE
        return None

    def with_play(self, player: int, cards: Sequence[Card]) -> 'TurnState':
        """
        出牌后的新状态

        Args:
            player: 出牌玩家
            cards: 出的牌 (必须都在该玩家手中)

        Returns:
            新状态
        """
        rejection = self.check_play(player, cards)
        if rejection is not None:
            raise InvariantViolation(f"Illegal play by player {player}: {rejection.name}")

        played_ids = [card.id for card in cards]
        if len(set(played_ids)) != len(played_ids):
            raise InvariantViolation(f"Duplicate cards in play: {played_ids}")
        hand = self.hands[player]
        held = {card.id for card in hand}
        missing = [cid for cid in played_ids if cid not in held]
        if missing:
            raise InvariantViolation(f"Player {player} does not hold {missing}")

        removed = set(played_ids)
        hands = list(self.hands)
        hands[player] = tuple(card for card in hand if card.id not in removed)

        new_state = replace(
            self,
            hands=tuple(hands),
            last_play=tuple(sort_cards(cards)),
            last_player=player,
            pass_count=0,
        )
        if not hands[player]:
            return replace(new_state, winner=player)
        return replace(new_state, current_player=(player + 1) % NUM_PLAYERS)

    def check_pass(self, player: int) -> Optional[Rejection]:
        if self.status == TurnStatus.ROUND_END:
            return Rejection.WRONG_PHASE
        if player != self.current_player:
            return Rejection.OUT_OF_TURN
        # 本局第一手不能过牌
        if self.last_player < 0:
            return Rejection.MUST_PLAY_FIRST_HAND
        return None

    def with_pass(self, player: int) -> 'TurnState':
        """
        过牌后的新状态

        连续两人过牌时清空上一手牌，并把出牌权交还给最后出牌者
        """
        rejection = self.check_pass(player)
        if rejection is not None:
            raise InvariantViolation(f"Illegal pass by player {player}: {rejection.name}")

        pass_count = self.pass_count + 1
        if pass_count >= NUM_PLAYERS - 1:
            return replace(
                self,
                last_play=(),
                current_player=self.last_player,
                pass_count=0,
            )
        return replace(
            self,
            current_player=(player + 1) % NUM_PLAYERS,
            pass_count=pass_count,
        )

    def classify_last(self) -> Optional[Classification]:
        if not self.last_play:
            return None
        return RuleEngine.classify(self.last_play)
