"""
规则引擎 - 牌型识别、大小比较

所有方法都是纯函数，无状态
"""
from typing import Iterable, List, Optional, Sequence, Tuple
from collections import Counter

from .cards import Card, Rank, CHAIN_RANKS, rank_counts
from .actions import (
    Category,
    Classification,
    PlayGenerator,
    KING_BOMB_STRENGTH,
    MIN_STRAIGHT_LEN,
    MIN_CHAIN_PAIRS_LEN,
    MIN_PLANE_LEN,
)


class RuleEngine:
    """
    斗地主规则引擎

    提供牌型识别、大小比较等功能
    所有方法都是静态方法，无状态
    """

    @staticmethod
    def is_consecutive(ranks: Sequence[int]) -> bool:
        """
        检查点数列表是否连续

        Args:
            ranks: 已排序的点数列表

        Returns:
            是否连续
        """
        for i in range(len(ranks) - 1):
            if ranks[i + 1] - ranks[i] != 1:
                return False
        return True

    @staticmethod
    def is_chain(ranks: Sequence[int]) -> bool:
        """连续且不含 2 和王"""
        return all(r < Rank.TWO for r in ranks) and RuleEngine.is_consecutive(ranks)

    @staticmethod
    def classify(cards: Iterable[Card]) -> Classification:
        """
        识别牌型 (不修改输入)

        按优先级依次匹配，先匹配者胜出

        Args:
            cards: 牌

        Returns:
            Classification
        """
        cards = list(cards)
        n = len(cards)
        if n == 0:
            return Classification.pass_()

        counter = rank_counts(cards)
        ranks = sorted(counter)
        counts = sorted(counter.values())

        # 单张、对子、三张
        if n == 1:
            return Classification(Category.SINGLE, ranks[0], n)
        if n == 2 and len(counter) == 1:
            return Classification(Category.PAIR, ranks[0], n)
        if n == 3 and len(counter) == 1:
            return Classification(Category.TRIPLE, ranks[0], n)

        # 王炸
        if n == 2 and set(counter) == {Rank.SMALL_JOKER, Rank.BIG_JOKER}:
            return Classification(Category.KING_BOMB, KING_BOMB_STRENGTH, n)

        # 4张: 炸弹 或 三带一
        if n == 4:
            if len(counter) == 1:
                return Classification(Category.BOMB, ranks[0], n)
            if counts == [1, 3]:
                return Classification(Category.TRIPLE_WITH_SINGLE, _rank_with(counter, 3), n)

        # 5张: 三带二
        if n == 5 and counts == [2, 3]:
            return Classification(Category.TRIPLE_WITH_PAIR, _rank_with(counter, 3), n)

        # 顺子
        if n >= MIN_STRAIGHT_LEN and len(counter) == n and RuleEngine.is_chain(ranks):
            return Classification(Category.STRAIGHT, ranks[-1], n)

        # 连对
        if (n >= MIN_CHAIN_PAIRS_LEN * 2 and n % 2 == 0
                and all(c == 2 for c in counts) and RuleEngine.is_chain(ranks)):
            return Classification(Category.CHAIN_PAIRS, ranks[-1], n)

        # 飞机
        if n >= MIN_PLANE_LEN * 3:
            plane = RuleEngine._classify_plane(counter, n)
            if plane is not None:
                return plane

        # 四带二 (两张不同的单牌，或一对)
        if n == 6 and counts in ([1, 1, 4], [2, 4]):
            return Classification(Category.FOUR_WITH_TWO, _rank_with(counter, 4), n)

        return Classification.invalid(n)

    @staticmethod
    def plane_windows(counter: Counter) -> List[Tuple[Rank, ...]]:
        """
        所有可作为飞机机身的连续三张窗口 (长度 >= 2)

        先长后短，同长度先大后小
        """
        triple_ranks = [r for r in CHAIN_RANKS if counter.get(r, 0) >= 3]
        runs: List[List[Rank]] = []
        for r in triple_ranks:
            if runs and r - runs[-1][-1] == 1:
                runs[-1].append(r)
            else:
                runs.append([r])

        windows = []
        for run in runs:
            for size in range(MIN_PLANE_LEN, len(run) + 1):
                for start in range(len(run) - size + 1):
                    windows.append(tuple(run[start:start + size]))
        windows.sort(key=lambda w: (len(w), w[-1]), reverse=True)
        return windows

    @staticmethod
    def _classify_plane(counter: Counter, n: int) -> Optional[Classification]:
        for window in RuleEngine.plane_windows(counter):
            k = len(window)
            rest = counter.copy()
            for r in window:
                rest[r] -= 3
            rest = +rest  # 去掉张数为 0 的点数
            remaining = sum(rest.values())

            if remaining == 0:
                return Classification(Category.PLANE, window[-1], n, k)
            # 机身点数不能再出现在翅膀里
            if any(r in window for r in rest):
                continue
            if remaining == k:
                return Classification(Category.PLANE_WITH_SINGLE, window[-1], n, k)
            if len(rest) == k and all(c == 2 for c in rest.values()):
                return Classification(Category.PLANE_WITH_PAIR, window[-1], n, k)
        return None

    @staticmethod
    def beats(current: Classification, reference: Optional[Classification]) -> bool:
        """
        判断 current 能否压过 reference

        Args:
            current: 要出的牌型
            reference: 上一手牌型 (None 或 PASS 表示主动出牌)

        Returns:
            是否能压过
        """
        if not current.is_playable:
            return False
        # 主动出牌: 任何合法牌型都可以
        if reference is None or reference.category == Category.PASS:
            return True

        # 王炸最大，且不能被压
        if reference.category == Category.KING_BOMB:
            return False
        if current.category == Category.KING_BOMB:
            return True

        # 炸弹 vs 非炸弹 / 炸弹 vs 炸弹
        if current.category == Category.BOMB:
            if reference.category != Category.BOMB:
                return True
            return current.strength > reference.strength
        if reference.category == Category.BOMB:
            return False

        # 不同类型不可比较
        if current.category != reference.category:
            return False

        # 飞机必须三张组数相同
        if current.is_plane and current.group_count != reference.group_count:
            return False

        # 长度不同不可比较 (顺子、连对等)
        if current.length != reference.length:
            return False

        return current.strength > reference.strength

    @staticmethod
    def can_beat(current: Sequence[Card], reference: Sequence[Card]) -> bool:
        """
        判断一组牌能否压过另一组牌

        Args:
            current: 要出的牌
            reference: 上一手牌 (空表示主动出牌)
        """
        ref = RuleEngine.classify(reference) if reference else None
        return RuleEngine.beats(RuleEngine.classify(current), ref)

    @staticmethod
    def has_response(hand: Sequence[Card], reference: Sequence[Card]) -> bool:
        """手牌中是否存在能压过 reference 的牌"""
        return bool(PlayGenerator(hand).generate(reference))


def _rank_with(counter: Counter, count: int) -> Rank:
    """张数为 count 的点数"""
    for rank, n in counter.items():
        if n == count:
            return rank
    raise KeyError(count)


def classify(cards: Iterable[Card]) -> Classification:
    return RuleEngine.classify(cards)


def can_beat(current: Sequence[Card], reference: Sequence[Card]) -> bool:
    return RuleEngine.can_beat(current, reference)


def generate_possible_plays(
    hand: Sequence[Card],
    reference: Optional[Sequence[Card]] = None,
) -> List[Tuple[int, ...]]:
    """
    枚举手牌中所有合法出牌

    Args:
        hand: 手牌 (建议已按点数排序)
        reference: 需要压过的上一手牌，None 或空表示主动出牌

    Returns:
        手牌位置元组列表 (按位置排序并去重)
    """
    return PlayGenerator(hand).generate_indices(reference)
