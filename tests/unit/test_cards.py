"""牌定义测试"""
import random

import pytest
import numpy as np

from engine.cards import (
    Rank,
    Suit,
    Card,
    FULL_DECK,
    DECK_SIZE,
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
from engine.errors import InvariantViolation


class TestRank:
    """点数测试"""

    def test_values(self):
        assert Rank.THREE == 3
        assert Rank.ACE == 14
        assert Rank.TWO == 17
        assert Rank.SMALL_JOKER == 20
        assert Rank.BIG_JOKER == 30

    def test_total_order(self):
        ranks = list(Rank)
        assert ranks == sorted(ranks)
        assert len(set(int(r) for r in ranks)) == len(ranks)

    def test_jokers_above_two(self):
        two = Card.make(Rank.TWO, Suit.SPADE)
        small = Card.make(Rank.SMALL_JOKER)
        big = Card.make(Rank.BIG_JOKER)
        assert rank_of(two) < rank_of(small) < rank_of(big)


class TestCard:
    """Card 测试"""

    def test_ids(self):
        assert Card.make(Rank.TEN, Suit.SPADE).id == "♠10"
        assert Card.make(Rank.ACE, Suit.HEART).id == "♥A"
        assert Card.make(Rank.SMALL_JOKER).id == "small_joker"
        assert Card.make(Rank.BIG_JOKER).id == "big_joker"

    def test_normal_card_needs_suit(self):
        with pytest.raises(InvariantViolation):
            Card.make(Rank.FIVE)

    def test_labels(self):
        assert Card.make(Rank.SMALL_JOKER).label == "小王"
        assert Card.make(Rank.BIG_JOKER).label == "大王"
        assert Card.make(Rank.JACK, Suit.CLUB).label == "J"

    def test_immutable(self):
        card = Card.make(Rank.THREE, Suit.SPADE)
        with pytest.raises(Exception):
            card.rank = Rank.FOUR


class TestDeck:
    """牌组测试"""

    def test_build_deck(self):
        deck = build_deck()
        assert len(deck) == DECK_SIZE
        assert len({card.id for card in deck}) == DECK_SIZE

    def test_rank_counts(self):
        deck = build_deck()
        for rank in Rank:
            expected = 1 if rank in (Rank.SMALL_JOKER, Rank.BIG_JOKER) else 4
            assert sum(1 for c in deck if c.rank == rank) == expected

    def test_full_deck_is_fixed(self):
        assert list(FULL_DECK) == build_deck()

    def test_shuffle_is_permutation(self):
        deck = build_deck()
        shuffled = shuffle(deck, random.Random(1))
        assert shuffled is not deck
        assert sorted(c.id for c in shuffled) == sorted(c.id for c in deck)
        # 原牌组不变
        assert deck == build_deck()

    def test_shuffle_is_reproducible(self):
        a = shuffle(build_deck(), random.Random(42))
        b = shuffle(build_deck(), random.Random(42))
        assert a == b


class TestDeal:
    """发牌测试"""

    def test_fixed_boundaries(self):
        deck = build_deck()
        dealt = deal(deck)
        assert dealt.hands[0] == tuple(deck[0:17])
        assert dealt.hands[1] == tuple(deck[17:34])
        assert dealt.hands[2] == tuple(deck[34:51])
        assert dealt.bottom == tuple(deck[51:54])

    @pytest.mark.parametrize("seed", range(20))
    def test_partitions_full_deck(self, seed):
        dealt = deal(shuffle(build_deck(), random.Random(seed)))
        assert [len(h) for h in dealt.hands] == [17, 17, 17]
        assert len(dealt.bottom) == 3
        check_partition(list(dealt.hands) + [dealt.bottom])

    def test_wrong_size(self):
        with pytest.raises(InvariantViolation):
            deal(build_deck()[:53])

    def test_duplicate_cards(self):
        deck = build_deck()
        deck[1] = deck[0]
        with pytest.raises(InvariantViolation):
            deal(deck)


class TestCheckPartition:
    """分组检查测试"""

    def test_missing(self):
        with pytest.raises(InvariantViolation):
            check_partition([build_deck()[:50]])

    def test_incomplete_allowed(self):
        check_partition([build_deck()[:10]], complete=False)

    def test_duplicate_across_groups(self):
        deck = build_deck()
        with pytest.raises(InvariantViolation):
            check_partition([deck[:10], deck[9:]])


class TestSortCards:
    """排序测试"""

    def test_sort_by_rank(self):
        cards = str_to_cards("D2A3X")
        assert cards_to_str(sort_cards(cards)) == "3A2XD"

    def test_reverse(self):
        cards = str_to_cards("345")
        assert [c.rank for c in sort_cards(cards, reverse=True)] == [Rank.FIVE, Rank.FOUR, Rank.THREE]


class TestStrConversion:
    """字符串转换测试"""

    def test_str_to_cards(self):
        cards = str_to_cards("33310XD")
        assert [c.rank for c in cards] == [
            Rank.THREE, Rank.THREE, Rank.THREE, Rank.TEN, Rank.SMALL_JOKER, Rank.BIG_JOKER,
        ]
        # 同点数依次取不同花色
        assert [c.suit for c in cards[:3]] == [Suit.SPADE, Suit.HEART, Suit.DIAMOND]

    def test_too_many(self):
        with pytest.raises(InvariantViolation):
            str_to_cards("33333")
        with pytest.raises(InvariantViolation):
            str_to_cards("XX")

    def test_unknown_symbol(self):
        with pytest.raises(InvariantViolation):
            str_to_cards("3Z")

    def test_cards_to_str(self):
        assert cards_to_str(str_to_cards("JQKA2XD")) == "JQKA2XD"


class TestArrayEncoding:
    """数组编码测试"""

    def test_cards_to_array(self):
        arr = cards_to_array(str_to_cards("333XD"))
        assert arr.shape == (54,)
        assert arr.dtype == np.float32
        assert arr[:3].tolist() == [1, 1, 1]
        assert arr[3] == 0
        assert arr[52] == 1 and arr[53] == 1
        assert arr.sum() == 5

    def test_mask_round_trip(self):
        cards = str_to_cards("34567XD")
        mask = cards_to_mask(cards)
        assert mask.sum() == 7
        assert sorted(c.id for c in mask_to_cards(mask)) == sorted(c.id for c in cards)

    def test_mask_wrong_size(self):
        with pytest.raises(InvariantViolation):
            mask_to_cards(np.zeros(10))
