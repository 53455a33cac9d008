"""
Engine Layer - 纯游戏逻辑

Modules:
    cards: 牌定义、洗牌与发牌
    actions: 牌型与合法出牌生成
    rules: 牌型识别与大小比较
    bidding: 叫地主状态机
    turns: 出牌轮转状态机
    scoring: 计分
    heuristics: 电脑玩家决策
    game: 引擎对象
"""
from .cards import (
    Rank,
    Suit,
    Card,
    Deal,
    FULL_DECK,
    build_deck,
    shuffle,
    deal,
    rank_of,
    sort_cards,
    check_partition,
    cards_to_array,
    cards_to_mask,
    mask_to_cards,
    cards_to_str,
    str_to_cards,
)

from .actions import (
    Category,
    Classification,
    Play,
    PlayGenerator,
    MIN_STRAIGHT_LEN,
    MIN_CHAIN_PAIRS_LEN,
    MIN_PLANE_LEN,
)

from .rules import (
    RuleEngine,
    classify,
    can_beat,
    generate_possible_plays,
)

from .errors import (
    Rejection,
    Outcome,
    InvariantViolation,
)

from .config import (
    GameMode,
    NoBidPolicy,
    EngineConfig,
)

from .bidding import BiddingState, BidStatus
from .turns import TurnState, TurnStatus
from .scoring import ScoreState, RoundResult, compute_score

from .heuristics import (
    hand_strength,
    choose_bid,
    choose_play,
)

from .game import (
    Phase,
    EngineEvent,
    PlayerView,
    DoudizhuEngine,
)

__all__ = [
    # cards
    "Rank",
    "Suit",
    "Card",
    "Deal",
    "FULL_DECK",
    "build_deck",
    "shuffle",
    "deal",
    "rank_of",
    "sort_cards",
    "check_partition",
    "cards_to_array",
    "cards_to_mask",
    "mask_to_cards",
    "cards_to_str",
    "str_to_cards",
    # actions
    "Category",
    "Classification",
    "Play",
    "PlayGenerator",
    "MIN_STRAIGHT_LEN",
    "MIN_CHAIN_PAIRS_LEN",
    "MIN_PLANE_LEN",
    # rules
    "RuleEngine",
    "classify",
    "can_beat",
    "generate_possible_plays",
    # errors
    "Rejection",
    "Outcome",
    "InvariantViolation",
    # config
    "GameMode",
    "NoBidPolicy",
    "EngineConfig",
    # state machines
    "BiddingState",
    "BidStatus",
    "TurnState",
    "TurnStatus",
    "ScoreState",
    "RoundResult",
    "compute_score",
    # heuristics
    "hand_strength",
    "choose_bid",
    "choose_play",
    # game
    "Phase",
    "EngineEvent",
    "PlayerView",
    "DoudizhuEngine",
]
