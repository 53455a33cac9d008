"""规则引擎测试"""
import random

import pytest

from engine.cards import Rank, Suit, Card, str_to_cards
from engine.actions import Category, Classification, KING_BOMB_STRENGTH
from engine.rules import RuleEngine, classify, can_beat


def c(s):
    return str_to_cards(s)


class TestClassify:
    """牌型识别测试"""

    def test_pass(self):
        assert classify([]).category == Category.PASS

    def test_single(self):
        assert classify(c("5")) == Classification(Category.SINGLE, Rank.FIVE, 1)
        assert classify(c("D")).category == Category.SINGLE

    def test_pair(self):
        assert classify(c("55")) == Classification(Category.PAIR, Rank.FIVE, 2)

    def test_not_pair(self):
        assert classify(c("34")).category == Category.INVALID

    def test_triple(self):
        assert classify(c("555")).category == Category.TRIPLE

    def test_king_bomb(self):
        result = classify(c("XD"))
        assert result.category == Category.KING_BOMB
        assert result.strength == KING_BOMB_STRENGTH

    def test_bomb(self):
        assert classify(c("5555")) == Classification(Category.BOMB, Rank.FIVE, 4)

    def test_triple_with_single(self):
        cards = [
            Card.make(Rank.THREE, Suit.SPADE),
            Card.make(Rank.THREE, Suit.HEART),
            Card.make(Rank.THREE, Suit.DIAMOND),
            Card.make(Rank.FOUR, Suit.CLUB),
        ]
        result = classify(cards)
        assert result.category == Category.TRIPLE_WITH_SINGLE
        assert result.strength == Rank.THREE

    def test_triple_with_pair(self):
        result = classify(c("33344"))
        assert result.category == Category.TRIPLE_WITH_PAIR
        assert result.strength == Rank.THREE

    def test_straight(self):
        result = classify(c("34567"))
        assert result.category == Category.STRAIGHT
        assert result.strength == Rank.SEVEN

    def test_straight_max(self):
        result = classify(c("345678910JQKA"))
        assert result.category == Category.STRAIGHT
        assert result.length == 12
        assert result.strength == Rank.ACE

    @pytest.mark.parametrize("s", ["24567", "32567", "34267", "34527", "34562"])
    def test_two_breaks_straight(self, s):
        assert classify(c(s)).category == Category.INVALID

    def test_no_wraparound(self):
        assert classify(c("JQKA2")).category == Category.INVALID
        assert classify(c("QKA23")).category == Category.INVALID

    def test_joker_not_in_straight(self):
        assert classify(c("10JQKAX")).category == Category.INVALID

    def test_short_straight(self):
        assert classify(c("3456")).category == Category.INVALID

    def test_chain_pairs(self):
        result = classify(c("334455"))
        assert result.category == Category.CHAIN_PAIRS
        assert result.strength == Rank.FIVE
        assert result.length == 6

    def test_chain_pairs_no_two(self):
        assert classify(c("KKAA22")).category == Category.INVALID

    def test_two_pairs_not_chain(self):
        assert classify(c("3344")).category == Category.INVALID

    def test_plane(self):
        result = classify(c("333444"))
        assert result.category == Category.PLANE
        assert result.group_count == 2
        assert result.strength == Rank.FOUR

    def test_plane_with_single(self):
        result = classify(c("33344456"))
        assert result.category == Category.PLANE_WITH_SINGLE
        assert result.group_count == 2

    def test_plane_with_same_rank_singles(self):
        # 翅膀可以是同点数的两张牌
        assert classify(c("33344455")).category == Category.PLANE_WITH_SINGLE

    def test_plane_with_pair(self):
        result = classify(c("3334445566"))
        assert result.category == Category.PLANE_WITH_PAIR
        assert result.group_count == 2

    def test_plane_wings_not_in_body(self):
        assert classify(c("33334445")).category == Category.INVALID

    def test_longest_plane_first(self):
        result = classify(c("333444555666"))
        assert result.category == Category.PLANE
        assert result.group_count == 4
        assert result.strength == Rank.SIX

    def test_plane_no_two(self):
        assert classify(c("AAA222")).category == Category.INVALID

    def test_four_with_two(self):
        assert classify(c("555534")).category == Category.FOUR_WITH_TWO
        assert classify(c("555533")).category == Category.FOUR_WITH_TWO
        assert classify(c("5555XD")).category == Category.FOUR_WITH_TWO

    def test_invalid(self):
        assert classify(c("334")).category == Category.INVALID
        assert classify(c("3344")).category == Category.INVALID
        assert classify(c("5555334")).category == Category.INVALID

    def test_order_independent(self):
        cards = c("3334445566")
        rng = random.Random(0)
        expected = classify(cards)
        for _ in range(10):
            shuffled = list(cards)
            rng.shuffle(shuffled)
            assert classify(shuffled) == expected

    def test_does_not_mutate(self):
        cards = c("34567")
        before = list(cards)
        classify(cards)
        assert cards == before


class TestCanBeat:
    """大小比较测试"""

    def test_free_lead(self):
        assert can_beat(c("3"), [])
        assert not can_beat(c("34"), [])

    def test_singles(self):
        assert can_beat(c("5"), c("3"))
        assert not can_beat(c("3"), c("5"))
        assert not can_beat(c("5"), c("5"))

    def test_joker_beats_two(self):
        assert can_beat(c("X"), c("2"))
        assert can_beat(c("D"), c("X"))

    def test_category_mismatch(self):
        assert not can_beat(c("55"), c("3"))
        assert not can_beat(c("555"), c("33"))

    def test_straight_length_must_match(self):
        assert can_beat(c("45678"), c("34567"))
        assert not can_beat(c("456789"), c("34567"))

    @pytest.mark.parametrize("reference", [
        "3", "22", "AAA", "33345", "34567", "334455", "333444", "555534", "2222",
    ])
    def test_king_bomb_beats_everything(self, reference):
        assert can_beat(c("XD"), c(reference))
        assert not can_beat(c(reference), c("XD"))

    def test_nothing_beats_king_bomb(self):
        assert not can_beat(c("XD"), c("XD"))

    def test_bomb_beats_non_bomb(self):
        assert can_beat(c("3333"), c("22"))
        assert can_beat(c("3333"), c("3456789"))
        assert not can_beat(c("22"), c("3333"))

    def test_bombs_compare_by_rank(self):
        assert not can_beat(c("5555"), c("9999"))
        assert can_beat(c("9999"), c("5555"))

    def test_plane_group_count(self):
        two = c("JJJQQQ")
        three = c("333444555")
        assert not can_beat(two, three)
        assert not can_beat(three, two)

    def test_plane_same_groups(self):
        assert can_beat(c("444555"), c("333444"))
        assert can_beat(c("44455578"), c("33344456"))
        assert not can_beat(c("444555"), c("33344456"))

    def test_four_with_two(self):
        assert can_beat(c("666634"), c("555578"))

    def test_invalid_never_beats(self):
        assert not can_beat(c("34"), c("3"))


class TestRuleEngine:
    """RuleEngine 静态方法测试"""

    def test_is_consecutive(self):
        assert RuleEngine.is_consecutive([3, 4, 5])
        assert not RuleEngine.is_consecutive([3, 5])

    def test_is_chain_excludes_two(self):
        assert RuleEngine.is_chain([Rank.QUEEN, Rank.KING, Rank.ACE])
        assert not RuleEngine.is_chain([Rank.KING, Rank.ACE, Rank.TWO])

    def test_beats_pass_reference(self):
        assert RuleEngine.beats(classify(c("3")), Classification.pass_())
        assert RuleEngine.beats(classify(c("3")), None)

    def test_has_response(self):
        assert RuleEngine.has_response(c("3456"), c("3"))
        assert not RuleEngine.has_response(c("345"), c("2"))
