"""
斗地主引擎

持有一局游戏的全部状态 (手牌、叫地主、出牌轮转、计分)，
对外只暴露同步、原子的操作。界面或 AI 驱动方必须串行调用。
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple
import logging
import random

from .cards import Card, Deal, build_deck, shuffle, deal, sort_cards, check_partition
from .actions import Classification
from .bidding import BiddingState, BidStatus
from .turns import TurnState
from .scoring import ScoreState, RoundResult, compute_score
from .config import EngineConfig, GameMode, NoBidPolicy
from .errors import InvariantViolation, Outcome, Rejection
from .rules import RuleEngine, generate_possible_plays
from .heuristics import choose_bid, choose_play

logger = logging.getLogger(__name__)

NUM_PLAYERS = 3


class Phase(Enum):
    """游戏阶段"""
    IDLE = "idle"          # 尚未开局
    BIDDING = "bidding"    # 叫地主阶段
    PLAYING = "playing"    # 出牌阶段
    FINISHED = "finished"  # 本局结束


@dataclass(frozen=True)
class EngineEvent:
    """
    状态变化通知

    Attributes:
        kind: 事件类型 (deal/bid/redeal/no_bid/landlord/play/pass/lead_reset/round_end)
        player: 相关玩家
        cards: 相关的牌
        value: 附加数值 (叫分、得分等)
        message: 可读描述
    """
    kind: str
    player: int = -1
    cards: Tuple[Card, ...] = ()
    value: int = 0
    message: str = ""


@dataclass(frozen=True)
class PlayerView:
    """某一玩家视角下的局面 (不含其他玩家的手牌)"""
    player: int
    hand: Tuple[Card, ...]
    phase: Phase
    current_player: int
    landlord: int
    highest_bid: int
    reference: Tuple[Card, ...]
    last_player: int
    hand_sizes: Tuple[int, int, int]
    bottom: Tuple[Card, ...]

    @property
    def is_my_turn(self) -> bool:
        return self.current_player == self.player

    @property
    def is_leading(self) -> bool:
        return not self.reference


Listener = Callable[[EngineEvent], None]


class DoudizhuEngine:
    """
    斗地主引擎

    Usage:
        engine = DoudizhuEngine(EngineConfig(seed=42))
        engine.new_round()
        engine.submit_bid(0, 3)
        engine.submit_play(0, [0])
    """

    def __init__(self, config: Optional[EngineConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or EngineConfig()
        self._rng = rng or random.Random(self.config.seed)
        self._listeners: List[Listener] = []
        self.log: List[str] = []

        self.mode = self.config.mode
        self.phase = Phase.IDLE
        self._bottom: Tuple[Card, ...] = ()
        self._bottom_taken = False
        self._played: List[List[Card]] = [[], [], []]
        self._bidding = BiddingState()
        self._turn: Optional[TurnState] = None
        self._score = ScoreState()
        self._result: Optional[RoundResult] = None
        self._landlord = -1
        self._redeals = 0

    # ---- 通知 ----

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _emit(self, kind: str, player: int = -1, cards: Sequence[Card] = (),
              value: int = 0, message: str = "") -> None:
        if message:
            self.log.append(message)
        event = EngineEvent(kind, player, tuple(cards), value, message)
        for listener in list(self._listeners):
            listener(event)

    def player_name(self, player: int) -> str:
        if player == self.config.human_player:
            return "您"
        return f"电脑{player}"

    # ---- 开局 ----

    def new_round(self, mode: Optional[GameMode] = None) -> Deal:
        """
        开始新一局

        Args:
            mode: 游戏模式，None 时使用配置中的模式

        Returns:
            发牌结果 (地主确定前的手牌与底牌)
        """
        self.mode = GameMode(mode) if mode is not None else self.config.mode
        self.log = []
        self._score = self._score.new_round()
        self._result = None
        self._redeals = 0
        dealt = self._deal()

        if self.mode == GameMode.CLASSIC:
            self._emit("deal", message="发牌完成，随机选择地主中...")
            self._bidding = BiddingState().resolved(self._rng.randrange(NUM_PLAYERS))
            self._assign_landlord(self._bidding.landlord)
        elif self.mode == GameMode.THREE_KING:
            self._emit("deal", message="发牌完成，三王模式开始！")
            self._bidding = BiddingState(status=BidStatus.NO_BID)
            self.phase = Phase.PLAYING
        elif self.mode == GameMode.FAST:
            self._emit("deal", message="发牌完成，自动叫地主中...")
            self._auto_bid()
        else:
            self._emit("deal", message="发牌完成，开始叫地主！")

        logger.info("New round: mode=%s phase=%s", self.mode.value, self.phase.value)
        return dealt

    def _deal(self) -> Deal:
        dealt = deal(shuffle(build_deck(), self._rng))
        hands = tuple(tuple(sort_cards(h)) for h in dealt.hands)
        self._turn = TurnState(hands=hands)
        self._bottom = dealt.bottom
        self._bottom_taken = False
        self._played = [[], [], []]
        self._landlord = -1
        self._bidding = BiddingState()
        self.phase = Phase.BIDDING
        self._check_invariants()
        return Deal(hands=hands, bottom=dealt.bottom)

    def _auto_bid(self) -> None:
        """快速模式: 每名玩家按手牌强度自动叫分，直到确定地主"""
        while self.phase == Phase.BIDDING:
            bidder = self._bidding.current_bidder
            amount = choose_bid(self._turn.hands[bidder], self._bidding.highest_bid)
            outcome = self.submit_bid(bidder, amount)
            if not outcome:
                raise InvariantViolation(f"Automatic bid rejected: {outcome.reason}")

    # ---- 叫地主 ----

    def submit_bid(self, player: int, amount: int) -> Outcome:
        """
        叫分

        Args:
            player: 玩家座位
            amount: 分数 (0 表示不叫)

        Returns:
            Outcome
        """
        self._check_player(player)
        if self.phase != Phase.BIDDING:
            return self._reject(player, Rejection.WRONG_PHASE)
        rejection = self._bidding.check_bid(player, amount)
        if rejection is not None:
            return self._reject(player, rejection)

        self._bidding = self._bidding.with_bid(player, amount)
        text = "不叫" if amount == 0 else f"{amount}分"
        self._emit("bid", player, value=amount, message=f"{self.player_name(player)}叫了{text}")
        logger.debug("Player %d bid %d", player, amount)

        if self._bidding.status == BidStatus.RESOLVED:
            self._assign_landlord(self._bidding.landlord)
        elif self._bidding.status == BidStatus.NO_BID:
            self._handle_no_bid()
        return Outcome.ok()

    def pass_bid(self, player: int) -> Outcome:
        """不叫"""
        return self.submit_bid(player, 0)

    def legal_bids(self) -> List[int]:
        if self.phase != Phase.BIDDING:
            return []
        return self._bidding.legal_bids()

    def _handle_no_bid(self) -> None:
        policy = self.config.no_bid_policy
        if policy == NoBidPolicy.REDEAL and self._redeals < self.config.max_redeals:
            self._redeals += 1
            logger.info("Nobody bid, redealing (%d)", self._redeals)
            self._deal()
            self._emit("redeal", value=self._redeals, message="无人叫分，重新发牌")
            return

        landlord = self._rng.randrange(NUM_PLAYERS)
        self._bidding = self._bidding.resolved(landlord)
        self._emit("no_bid", message="无人叫分，随机指定地主")
        self._assign_landlord(landlord)

    def _assign_landlord(self, landlord: int) -> None:
        """地主获得底牌并先出牌"""
        self._landlord = landlord
        self._turn = self._turn.with_bottom(landlord, self._bottom)
        self._bottom_taken = True
        self.phase = Phase.PLAYING
        self._check_invariants()
        self._emit(
            "landlord", landlord, self._bottom,
            message=f"{self.player_name(landlord)}成为地主，获得底牌！",
        )
        logger.info("Landlord is player %d (bid %d)", landlord, self._bidding.highest_bid)

    # ---- 出牌 ----

    def submit_play(self, player: int, indices: Sequence[int]) -> Outcome:
        """
        按手牌位置出牌

        Args:
            player: 玩家座位
            indices: 选中的牌在手牌中的位置

        Returns:
            Outcome
        """
        self._check_player(player)
        if self.phase != Phase.PLAYING:
            return self._reject(player, Rejection.WRONG_PHASE)
        return self.submit_cards(player, self._resolve(player, indices))

    def submit_cards(self, player: int, cards: Sequence[Card]) -> Outcome:
        """按牌的身份出牌 (不受手牌位置变化影响)"""
        self._check_player(player)
        if self.phase != Phase.PLAYING:
            return self._reject(player, Rejection.WRONG_PHASE)
        held = {card.id for card in self._turn.hands[player]}
        missing = [card.id for card in cards if card.id not in held]
        if missing:
            raise InvariantViolation(f"Player {player} does not hold {missing}")

        rejection = self._turn.check_play(player, cards)
        if rejection is not None:
            return self._reject(player, rejection)

        classification = RuleEngine.classify(cards)
        self._turn = self._turn.with_play(player, cards)
        self._score = self._score.record_play(player, classification, self._landlord)
        self._played[player].extend(cards)
        winner = self._turn.winner
        if winner >= 0:
            self._finish_round(winner)
        self._check_invariants()

        names = ", ".join(card.label for card in sort_cards(cards))
        self._emit(
            "play", player, sort_cards(cards), value=classification.category,
            message=f"{self.player_name(player)}出了: {names}",
        )
        logger.debug("Player %d played %s (%s)", player, names, classification.category.name)

        if winner >= 0:
            self._announce_result(winner)
        return Outcome.ok()

    def submit_pass(self, player: int) -> Outcome:
        """过牌"""
        self._check_player(player)
        if self.phase != Phase.PLAYING:
            return self._reject(player, Rejection.WRONG_PHASE)
        rejection = self._turn.check_pass(player)
        if rejection is not None:
            return self._reject(player, rejection)

        self._turn = self._turn.with_pass(player)
        self._emit("pass", player, message=f"{self.player_name(player)}选择过牌")
        if self._turn.pass_count == 0:
            leader = self._turn.current_player
            self._emit(
                "lead_reset", leader,
                message=f"所有其他玩家均过牌，轮到 {self.player_name(leader)} 任意出牌",
            )
        return Outcome.ok()

    def _finish_round(self, winner: int) -> None:
        self._result = compute_score(
            self._score,
            winner,
            self._landlord,
            self._bidding.highest_bid,
            self.config.human_player,
        )
        self._score = replace(self._score, total=self._result.total)
        self.phase = Phase.FINISHED

    def _announce_result(self, winner: int) -> None:
        result = self._result
        if self._landlord < 0:
            side = f"{self.player_name(winner)}获胜！"
        else:
            side = "地主获胜！" if result.landlord_won else "农民获胜！"
        message = (
            f"游戏结束：{side}（炸弹 {result.bombs} 次，关住 {result.locked} 人，"
            f"倍数 x{result.multiplier}） 得分 {result.score}"
        )
        self._emit("round_end", winner, value=result.score, message=message)
        logger.info(message)

    # ---- 查询 ----

    @staticmethod
    def classify(cards: Sequence[Card]) -> Classification:
        return RuleEngine.classify(cards)

    @staticmethod
    def can_beat(current: Sequence[Card], reference: Sequence[Card]) -> bool:
        return RuleEngine.can_beat(current, reference)

    def legal_plays(self, player: int) -> List[Tuple[int, ...]]:
        """player 在当前局面下所有可出的牌 (手牌位置元组)"""
        self._check_player(player)
        if self.phase != Phase.PLAYING:
            return []
        return generate_possible_plays(self._turn.hands[player], self._turn.reference_for(player))

    def hint(self, player: int) -> Tuple[int, ...]:
        """提示: 电脑策略会出的牌，空元组表示建议过牌"""
        self._check_player(player)
        if self.phase != Phase.PLAYING:
            return ()
        return choose_play(
            self._turn.hands[player],
            self._turn.reference_for(player),
            player=player,
            last_player=self._turn.last_player,
            landlord=self._landlord,
        )

    def same_rank_indices(self, player: int, index: int) -> Tuple[int, ...]:
        """与 index 处的牌点数相同的所有手牌位置"""
        hand = self.hand(player)
        rank = self._resolve(player, [index])[0].rank
        return tuple(i for i, card in enumerate(hand) if card.rank == rank)

    def hand(self, player: int) -> Tuple[Card, ...]:
        self._check_player(player)
        if self._turn is None:
            return ()
        return self._turn.hands[player]

    def played_cards(self, player: int) -> Tuple[Card, ...]:
        """player 本局已出的牌"""
        self._check_player(player)
        return tuple(self._played[player])

    @property
    def hands(self) -> Tuple[Tuple[Card, ...], ...]:
        if self._turn is None:
            return ((), (), ())
        return self._turn.hands

    @property
    def bottom(self) -> Tuple[Card, ...]:
        return self._bottom

    @property
    def landlord(self) -> int:
        return self._landlord

    @property
    def highest_bid(self) -> int:
        return self._bidding.highest_bid

    @property
    def bidding(self) -> BiddingState:
        return self._bidding

    @property
    def turn(self) -> Optional[TurnState]:
        return self._turn

    @property
    def current_player(self) -> int:
        if self.phase == Phase.BIDDING:
            return self._bidding.current_bidder
        if self._turn is None:
            return -1
        return self._turn.current_player

    @property
    def last_play(self) -> Tuple[Card, ...]:
        return self._turn.last_play if self._turn else ()

    @property
    def last_player(self) -> int:
        return self._turn.last_player if self._turn else -1

    @property
    def score_state(self) -> ScoreState:
        return self._score

    @property
    def total_score(self) -> int:
        return self._score.total

    @property
    def result(self) -> Optional[RoundResult]:
        return self._result

    def current_score(self) -> ScoreState:
        """计分状态快照 (不可变)"""
        return self._score

    def view(self, player: int) -> PlayerView:
        """player 视角的局面"""
        self._check_player(player)
        turn = self._turn
        return PlayerView(
            player=player,
            hand=self.hand(player),
            phase=self.phase,
            current_player=self.current_player,
            landlord=self._landlord,
            highest_bid=self._bidding.highest_bid,
            reference=turn.reference_for(player) if turn and self.phase == Phase.PLAYING else (),
            last_player=turn.last_player if turn else -1,
            hand_sizes=tuple(len(h) for h in self.hands),
            bottom=self._bottom if self._bottom_taken else (),
        )

    # ---- 内部检查 ----

    def _check_player(self, player: int) -> None:
        if player not in range(NUM_PLAYERS):
            raise InvariantViolation(f"Invalid player index: {player}")

    def _resolve(self, player: int, indices: Sequence[int]) -> List[Card]:
        """手牌位置 -> 牌 (只在出牌瞬间解析)"""
        hand = self.hand(player)
        if len(set(indices)) != len(indices):
            raise InvariantViolation(f"Duplicate card indices: {list(indices)}")
        for i in indices:
            if not 0 <= i < len(hand):
                raise InvariantViolation(f"Card index {i} out of range for hand of {len(hand)}")
        return [hand[i] for i in indices]

    def _reject(self, player: int, reason: Rejection) -> Outcome:
        logger.debug("Rejected action of player %d: %s", player, reason.name)
        return Outcome.rejected(reason)

    def _check_invariants(self) -> None:
        groups = list(self._turn.hands) + self._played
        if not self._bottom_taken:
            groups.append(self._bottom)
        check_partition(groups)
