"""
牌型定义与合法出牌生成器

斗地主共有 13 种可出牌型，另加 PASS 与 INVALID
"""
from enum import IntEnum
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple
from collections import Counter, defaultdict
import itertools

from .cards import Card, Rank, CHAIN_RANKS, JOKERS, rank_counts
from .errors import InvariantViolation


class Category(IntEnum):
    """牌型"""
    PASS = 0                # 不出 / 过
    SINGLE = 1              # 单张
    PAIR = 2                # 对子
    TRIPLE = 3              # 三张
    TRIPLE_WITH_SINGLE = 4  # 三带一
    TRIPLE_WITH_PAIR = 5    # 三带二
    STRAIGHT = 6            # 顺子 (至少5张)
    CHAIN_PAIRS = 7         # 连对 (至少3对)
    PLANE = 8               # 飞机不带 (至少2个三张)
    PLANE_WITH_SINGLE = 9   # 飞机带单
    PLANE_WITH_PAIR = 10    # 飞机带对
    FOUR_WITH_TWO = 11      # 四带二
    BOMB = 12               # 炸弹 (四张相同)
    KING_BOMB = 13          # 王炸
    INVALID = 14            # 非法牌型


# 顺子/连对/飞机的最小长度
MIN_STRAIGHT_LEN = 5       # 顺子至少 5 张
MIN_CHAIN_PAIRS_LEN = 3    # 连对至少 3 对
MIN_PLANE_LEN = 2          # 飞机至少 2 个三张

# 王炸的比较值 (高于任何点数)
KING_BOMB_STRENGTH = 1000

PLANE_FAMILY = (Category.PLANE, Category.PLANE_WITH_SINGLE, Category.PLANE_WITH_PAIR)
BOMB_FAMILY = (Category.BOMB, Category.KING_BOMB)


@dataclass(frozen=True)
class Classification:
    """
    牌型识别结果

    Attributes:
        category: 牌型
        strength: 比较值 (主牌点数，或连续牌型的最高点数)
        length: 张数
        group_count: 飞机中三张的组数 (其余牌型为 0)
    """
    category: Category
    strength: int = 0
    length: int = 0
    group_count: int = 0

    @classmethod
    def pass_(cls) -> 'Classification':
        return cls(Category.PASS)

    @classmethod
    def invalid(cls, length: int = 0) -> 'Classification':
        return cls(Category.INVALID, length=length)

    @property
    def valid(self) -> bool:
        """PASS 也是合法的牌型识别结果"""
        return self.category != Category.INVALID

    @property
    def is_playable(self) -> bool:
        """可以作为一手牌打出"""
        return self.category not in (Category.PASS, Category.INVALID)

    @property
    def is_bomb(self) -> bool:
        return self.category in BOMB_FAMILY

    @property
    def is_plane(self) -> bool:
        return self.category in PLANE_FAMILY


@dataclass(frozen=True)
class Play:
    """
    一手牌

    Attributes:
        cards: 打出的牌
        classification: 牌型
        indices: 生成时牌在手牌中的位置 (已排序)
    """
    cards: Tuple[Card, ...]
    classification: Classification
    indices: Tuple[int, ...] = ()

    @classmethod
    def from_cards(cls, cards: Sequence[Card]) -> 'Play':
        from .rules import RuleEngine
        return cls(tuple(cards), RuleEngine.classify(cards))

    @property
    def category(self) -> Category:
        return self.classification.category

    @property
    def strength(self) -> int:
        return self.classification.strength

    @property
    def is_bomb(self) -> bool:
        return self.classification.is_bomb

    def __len__(self) -> int:
        return len(self.cards)


# 点数多重集: ((点数, 张数), ...)
RankSet = Tuple[Tuple[Rank, int], ...]


class PlayGenerator:
    """
    合法出牌生成器

    先根据手牌的点数直方图生成点数候选，再展开为该点数在手牌中所有花色的
    位置组合 (按位置集合去重)。每个组合都交给牌型识别确认，因此生成结果与
    识别规则接受的子集完全一致。
    """

    def __init__(self, hand: Sequence[Card]):
        """
        Args:
            hand: 手牌 (返回的 indices 指向该序列中的位置)
        """
        self.hand: List[Card] = list(hand)
        self.card_count: Counter = rank_counts(self.hand)

        # 每个点数在手牌中的位置
        self._positions: Dict[Rank, List[int]] = defaultdict(list)
        for idx, card in enumerate(self.hand):
            self._positions[card.rank].append(idx)

        self._ranks: List[Rank] = sorted(self.card_count)
        self._pair_ranks = [r for r in self._ranks if self.card_count[r] >= 2]
        self._triple_ranks = [r for r in self._ranks if self.card_count[r] >= 3]
        self._quad_ranks = [r for r in self._ranks if self.card_count[r] == 4]

    # ---- 基础牌型 ----

    def gen_singles(self) -> Iterator[RankSet]:
        for r in self._ranks:
            yield ((r, 1),)

    def gen_pairs(self) -> Iterator[RankSet]:
        for r in self._pair_ranks:
            yield ((r, 2),)

    def gen_triples(self) -> Iterator[RankSet]:
        for r in self._triple_ranks:
            yield ((r, 3),)

    def gen_bombs(self) -> Iterator[RankSet]:
        for r in self._quad_ranks:
            yield ((r, 4),)

    def gen_king_bomb(self) -> Iterator[RankSet]:
        if all(self.card_count[j] for j in JOKERS):
            yield tuple((j, 1) for j in JOKERS)

    def gen_triple_with_single(self) -> Iterator[RankSet]:
        for t in self._triple_ranks:
            for s in self._ranks:
                if s != t:
                    yield ((t, 3), (s, 1))

    def gen_triple_with_pair(self) -> Iterator[RankSet]:
        for t in self._triple_ranks:
            for p in self._pair_ranks:
                if p != t:
                    yield ((t, 3), (p, 2))

    # ---- 连续牌型 ----

    def _runs(self, min_count: int, min_len: int, length: int = 0) -> Iterator[Tuple[Rank, ...]]:
        """
        枚举所有连续点数窗口

        Args:
            min_count: 每个点数至少的张数 (1=顺子, 2=连对, 3=飞机)
            min_len: 最小窗口长度
            length: 要求的精确窗口长度，0 表示不限制
        """
        available = [r for r in CHAIN_RANKS if self.card_count[r] >= min_count]
        runs: List[List[Rank]] = []
        for r in available:
            if runs and r - runs[-1][-1] == 1:
                runs[-1].append(r)
            else:
                runs.append([r])

        for run in runs:
            for size in range(min_len, len(run) + 1):
                if length and size != length:
                    continue
                for start in range(len(run) - size + 1):
                    yield tuple(run[start:start + size])

    def gen_straights(self, length: int = 0) -> Iterator[RankSet]:
        for window in self._runs(1, MIN_STRAIGHT_LEN, length):
            yield tuple((r, 1) for r in window)

    def gen_chain_pairs(self, pairs: int = 0) -> Iterator[RankSet]:
        for window in self._runs(2, MIN_CHAIN_PAIRS_LEN, pairs):
            yield tuple((r, 2) for r in window)

    def gen_planes(self, groups: int = 0) -> Iterator[RankSet]:
        for window in self._runs(3, MIN_PLANE_LEN, groups):
            yield tuple((r, 3) for r in window)

    def gen_plane_with_single(self, groups: int = 0) -> Iterator[RankSet]:
        for window in self._runs(3, MIN_PLANE_LEN, groups):
            k = len(window)
            # 带的单牌可以是飞机以外任意点数的牌 (可重复点数)
            pool = [r for r in self._ranks if r not in window]
            for kickers in itertools.combinations_with_replacement(pool, k):
                wings = Counter(kickers)
                if any(n > self.card_count[r] for r, n in wings.items()):
                    continue
                yield tuple((r, 3) for r in window) + tuple(sorted(wings.items()))

    def gen_plane_with_pair(self, groups: int = 0) -> Iterator[RankSet]:
        for window in self._runs(3, MIN_PLANE_LEN, groups):
            k = len(window)
            pool = [r for r in self._pair_ranks if r not in window]
            for pairs in itertools.combinations(pool, k):
                yield tuple((r, 3) for r in window) + tuple((r, 2) for r in pairs)

    def gen_four_with_two(self) -> Iterator[RankSet]:
        for q in self._quad_ranks:
            others = [r for r in self._ranks if r != q]
            for a, b in itertools.combinations(others, 2):
                yield ((q, 4), (a, 1), (b, 1))
            for p in self._pair_ranks:
                if p != q:
                    yield ((q, 4), (p, 2))

    # ---- 组合 ----

    def _candidates_for(self, reference: Classification) -> Iterator[RankSet]:
        """与参考牌型同类型、同长度的候选"""
        category = reference.category
        if category == Category.SINGLE:
            yield from self.gen_singles()
        elif category == Category.PAIR:
            yield from self.gen_pairs()
        elif category == Category.TRIPLE:
            yield from self.gen_triples()
        elif category == Category.TRIPLE_WITH_SINGLE:
            yield from self.gen_triple_with_single()
        elif category == Category.TRIPLE_WITH_PAIR:
            yield from self.gen_triple_with_pair()
        elif category == Category.STRAIGHT:
            yield from self.gen_straights(reference.length)
        elif category == Category.CHAIN_PAIRS:
            yield from self.gen_chain_pairs(reference.length // 2)
        elif category == Category.PLANE:
            yield from self.gen_planes(reference.group_count)
        elif category == Category.PLANE_WITH_SINGLE:
            yield from self.gen_plane_with_single(reference.group_count)
        elif category == Category.PLANE_WITH_PAIR:
            yield from self.gen_plane_with_pair(reference.group_count)
        elif category == Category.FOUR_WITH_TWO:
            yield from self.gen_four_with_two()
        # 炸弹与王炸统一在 generate() 中处理

    def _all_candidates(self) -> Iterator[RankSet]:
        yield from self.gen_singles()
        yield from self.gen_pairs()
        yield from self.gen_triples()
        yield from self.gen_triple_with_single()
        yield from self.gen_triple_with_pair()
        yield from self.gen_straights()
        yield from self.gen_chain_pairs()
        yield from self.gen_planes()
        yield from self.gen_plane_with_single()
        yield from self.gen_plane_with_pair()
        yield from self.gen_four_with_two()

    def _realize(self, rank_set: RankSet) -> Iterator[Tuple[int, ...]]:
        """点数多重集 -> 所有可能的手牌位置组合 (靠前的位置先产出)"""
        choices = [itertools.combinations(self._positions[rank], n) for rank, n in rank_set]
        for parts in itertools.product(*choices):
            yield tuple(sorted(itertools.chain.from_iterable(parts)))

    def generate(self, reference: Optional[Sequence[Card]] = None) -> List[Play]:
        """
        生成所有合法出牌

        Args:
            reference: 需要压过的上一手牌，None 或空表示主动出牌

        Returns:
            去重后的出牌列表 (每个 Play 带有 indices)
        """
        from .rules import RuleEngine

        ref = RuleEngine.classify(reference) if reference else Classification.pass_()
        if ref.category == Category.INVALID:
            raise InvariantViolation("Reference play is not a valid hand")

        if ref.category == Category.PASS:
            candidates = itertools.chain(
                self._all_candidates(), self.gen_bombs(), self.gen_king_bomb()
            )
        elif ref.category == Category.KING_BOMB:
            return []
        else:
            # 炸弹与王炸可以回应任何牌型
            candidates = itertools.chain(
                self._candidates_for(ref), self.gen_bombs(), self.gen_king_bomb()
            )

        plays: List[Play] = []
        seen = set()
        for rank_set in candidates:
            for indices in self._realize(rank_set):
                if indices in seen:
                    continue
                seen.add(indices)
                cards = tuple(self.hand[i] for i in indices)
                classification = RuleEngine.classify(cards)
                if not RuleEngine.beats(classification, ref):
                    continue
                plays.append(Play(cards, classification, indices))
        return plays

    def generate_indices(self, reference: Optional[Sequence[Card]] = None) -> List[Tuple[int, ...]]:
        """generate() 的索引形式"""
        return [play.indices for play in self.generate(reference)]
