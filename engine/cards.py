"""
牌的定义、洗牌与发牌

斗地主使用 54 张牌：
- 3-10, J, Q, K, A, 2 各 4 张 (四种花色)
- 小王、大王各 1 张

每张牌是不可变值对象，通过唯一 id 区分同点数的不同花色。
"""
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from collections import Counter
import random

import numpy as np

from .errors import InvariantViolation


class Rank(IntEnum):
    """
    牌面等级 (数值即比较大小)

    A 与 2、2 与小王之间留有空隙，保证任何"连续"判断都不会越过 2 和王
    """
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14
    TWO = 17
    SMALL_JOKER = 20
    BIG_JOKER = 30


class Suit(Enum):
    """花色 (王没有花色)"""
    SPADE = "♠"
    HEART = "♥"
    DIAMOND = "♦"
    CLUB = "♣"
    NONE = ""


SUITS: Tuple[Suit, ...] = (Suit.SPADE, Suit.HEART, Suit.DIAMOND, Suit.CLUB)

# 普通牌点数 (3 ~ 2)
NORMAL_RANKS: Tuple[Rank, ...] = tuple(r for r in Rank if r < Rank.SMALL_JOKER)

# 可以组成顺子/连对/飞机的点数 (3 ~ A)
CHAIN_RANKS: Tuple[Rank, ...] = tuple(r for r in Rank if r < Rank.TWO)

JOKERS: Tuple[Rank, ...] = (Rank.SMALL_JOKER, Rank.BIG_JOKER)

# 点数到显示字符的映射
RANK_TO_STR: Dict[Rank, str] = {
    Rank.THREE: '3', Rank.FOUR: '4', Rank.FIVE: '5', Rank.SIX: '6',
    Rank.SEVEN: '7', Rank.EIGHT: '8', Rank.NINE: '9', Rank.TEN: '10',
    Rank.JACK: 'J', Rank.QUEEN: 'Q', Rank.KING: 'K', Rank.ACE: 'A',
    Rank.TWO: '2', Rank.SMALL_JOKER: 'X', Rank.BIG_JOKER: 'D',
}

# 显示字符到点数的映射
STR_TO_RANK: Dict[str, Rank] = {v: k for k, v in RANK_TO_STR.items()}

# 点数到数组列索引的映射 (用于 one-hot 编码)
RANK_TO_COLUMN: Dict[Rank, int] = {r: i for i, r in enumerate(NORMAL_RANKS)}

DECK_SIZE = 54
HAND_SIZE = 17
BOTTOM_SIZE = 3


@dataclass(frozen=True)
class Card:
    """
    不可变的牌

    Attributes:
        rank: 点数
        suit: 花色
        id: 唯一标识 (如 "♠10", "small_joker")
    """
    rank: Rank
    suit: Suit
    id: str

    @classmethod
    def make(cls, rank: Rank, suit: Suit = Suit.NONE) -> 'Card':
        rank = Rank(rank)
        if rank == Rank.SMALL_JOKER:
            return cls(rank, Suit.NONE, "small_joker")
        if rank == Rank.BIG_JOKER:
            return cls(rank, Suit.NONE, "big_joker")
        if suit == Suit.NONE:
            raise InvariantViolation(f"Normal rank {rank.name} needs a suit")
        return cls(rank, suit, f"{suit.value}{RANK_TO_STR[rank]}")

    @property
    def is_joker(self) -> bool:
        return self.rank in JOKERS

    @property
    def label(self) -> str:
        if self.rank == Rank.SMALL_JOKER:
            return "小王"
        if self.rank == Rank.BIG_JOKER:
            return "大王"
        return RANK_TO_STR[self.rank]

    def __str__(self) -> str:
        return self.label if self.is_joker else self.id


def build_deck() -> List[Card]:
    """生成固定顺序的 54 张牌 (按花色、再按点数，最后大小王)"""
    deck = [Card.make(rank, suit) for suit in SUITS for rank in NORMAL_RANKS]
    deck.append(Card.make(Rank.SMALL_JOKER))
    deck.append(Card.make(Rank.BIG_JOKER))
    return deck


# 完整牌组 (54 张) 及每张牌在牌组中的位置
FULL_DECK: Tuple[Card, ...] = tuple(build_deck())
DECK_INDEX: Dict[str, int] = {card.id: i for i, card in enumerate(FULL_DECK)}
CARD_BY_ID: Dict[str, Card] = {card.id: card for card in FULL_DECK}


def rank_of(card: Card) -> int:
    """返回用于所有比较的整数等级 (王大于 2)"""
    return int(card.rank)


def sort_key(card: Card) -> Tuple[int, int]:
    """排序键: 先点数，再花色"""
    return rank_of(card), DECK_INDEX[card.id]


def sort_cards(cards: Iterable[Card], reverse: bool = False) -> List[Card]:
    """按点数排序 (从小到大)"""
    return sorted(cards, key=sort_key, reverse=reverse)


def shuffle(deck: Sequence[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    洗牌 (Fisher-Yates)，返回新的随机排列

    Args:
        deck: 牌组
        rng: 随机数生成器，None 时使用全局 random

    Returns:
        打乱后的新列表
    """
    rng = rng or random
    shuffled = list(deck)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


@dataclass(frozen=True)
class Deal:
    """
    发牌结果

    Attributes:
        hands: 三名玩家的手牌 (各 17 张)
        bottom: 底牌 (3 张)
    """
    hands: Tuple[Tuple[Card, ...], Tuple[Card, ...], Tuple[Card, ...]]
    bottom: Tuple[Card, ...]


def deal(deck: Sequence[Card]) -> Deal:
    """
    发牌: [0,17) [17,34) [34,51) 分给三名玩家，[51,54) 为底牌

    Args:
        deck: 已洗好的 54 张牌

    Returns:
        Deal
    """
    if len(deck) != DECK_SIZE:
        raise InvariantViolation(f"Deck must hold {DECK_SIZE} cards, got {len(deck)}")
    check_partition([deck])

    hands = (
        tuple(deck[0:17]),
        tuple(deck[17:34]),
        tuple(deck[34:51]),
    )
    return Deal(hands=hands, bottom=tuple(deck[51:54]))


def check_partition(groups: Iterable[Iterable[Card]], complete: bool = True) -> None:
    """
    检查若干组牌互不重复，且 (complete=True 时) 恰好组成整副牌

    Raises:
        InvariantViolation: 出现重复牌、未知牌或缺牌
    """
    seen = Counter(card.id for group in groups for card in group)
    duplicated = sorted(cid for cid, n in seen.items() if n > 1)
    if duplicated:
        raise InvariantViolation(f"Duplicate cards: {duplicated}")
    unknown = sorted(cid for cid in seen if cid not in DECK_INDEX)
    if unknown:
        raise InvariantViolation(f"Unknown cards: {unknown}")
    if complete and len(seen) != DECK_SIZE:
        raise InvariantViolation(f"Cards do not cover the deck: {len(seen)}/{DECK_SIZE}")


def rank_counts(cards: Iterable[Card]) -> Counter:
    """点数 -> 张数 的直方图 (大小王点数不同，天然分开计数)"""
    return Counter(card.rank for card in cards)


def cards_to_array(cards: Iterable[Card]) -> np.ndarray:
    """
    将牌转换为 54 维 one-hot 向量 (只看点数，不看花色)

    编码方式 (参考 DouZero 论文):
    - 前 52 维: 13 种牌面 × 4 张牌 (按列展开)
    - 后 2 维: [小王, 大王]
    """
    matrix = np.zeros((4, 13), dtype=np.float32)
    jokers = np.zeros(2, dtype=np.float32)

    for rank, count in rank_counts(cards).items():
        if rank == Rank.SMALL_JOKER:
            jokers[0] = 1
        elif rank == Rank.BIG_JOKER:
            jokers[1] = 1
        else:
            matrix[:count, RANK_TO_COLUMN[rank]] = 1

    return np.concatenate([matrix.flatten('F'), jokers])


def cards_to_mask(cards: Iterable[Card]) -> np.ndarray:
    """将牌转换为 54 维选择向量 (每一维对应 FULL_DECK 中的一张具体的牌)"""
    mask = np.zeros(DECK_SIZE, dtype=np.int8)
    for card in cards:
        mask[DECK_INDEX[card.id]] = 1
    return mask


def mask_to_cards(mask: np.ndarray) -> List[Card]:
    """cards_to_mask 的逆运算"""
    mask = np.asarray(mask).reshape(-1)
    if mask.shape[0] != DECK_SIZE:
        raise InvariantViolation(f"Selection mask must have {DECK_SIZE} entries")
    return [FULL_DECK[i] for i in np.flatnonzero(mask)]


def cards_to_str(cards: Iterable[Card]) -> str:
    """
    将牌转换为可读字符串

    Returns:
        如 "34567" 或 "JQKA2XD"
    """
    return ''.join(RANK_TO_STR[c.rank] for c in sort_cards(cards))


def str_to_cards(s: str) -> List[Card]:
    """
    将字符串转换为牌列表，同点数的牌依次取 ♠ ♥ ♦ ♣ 花色

    Args:
        s: 牌字符串，如 "33345" 或 "10JQKA"

    Returns:
        牌列表
    """
    cards = []
    used: Counter = Counter()
    i = 0
    while i < len(s):
        if s[i:i+2] == '10':
            token = '10'
            i += 2
        else:
            token = s[i]
            i += 1
        if token.isspace():
            continue
        if token not in STR_TO_RANK:
            raise InvariantViolation(f"Unknown card symbol: {token!r}")
        rank = STR_TO_RANK[token]
        if rank in JOKERS:
            if used[rank]:
                raise InvariantViolation(f"Only one {rank.name} exists")
            cards.append(Card.make(rank))
        else:
            if used[rank] >= len(SUITS):
                raise InvariantViolation(f"Only four {token} exist")
            cards.append(Card.make(rank, SUITS[used[rank]]))
        used[rank] += 1
    return cards
