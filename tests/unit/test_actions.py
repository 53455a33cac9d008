"""合法出牌生成测试"""
import itertools
import random

import pytest

from engine.cards import build_deck, shuffle, sort_cards, str_to_cards
from engine.actions import Category, Play, PlayGenerator
from engine.errors import InvariantViolation
from engine.rules import RuleEngine, generate_possible_plays


def c(s):
    return sort_cards(str_to_cards(s))


def categories(plays):
    return {p.category for p in plays}


class TestPlay:
    """Play 测试"""

    def test_from_cards(self):
        play = Play.from_cards(c("33345"))
        assert play.category == Category.INVALID
        play = Play.from_cards(c("3334"))
        assert play.category == Category.TRIPLE_WITH_SINGLE
        assert len(play) == 4
        assert not play.is_bomb

    def test_bomb(self):
        assert Play.from_cards(c("XD")).is_bomb
        assert Play.from_cards(c("7777")).is_bomb


class TestFreeLead:
    """主动出牌生成测试"""

    def test_singles_and_pairs(self):
        plays = PlayGenerator(c("3345")).generate()
        signatures = {tuple(card.rank for card in p.cards) for p in plays}
        assert signatures == {(3,), (4,), (5,), (3, 3)}

    def test_each_suit_is_a_separate_play(self):
        # 同点数不同花色的牌各自构成一手牌
        plays = PlayGenerator(c("3333")).generate()
        counts = {cat: sum(p.category == cat for p in plays) for cat in categories(plays)}
        assert counts == {
            Category.SINGLE: 4, Category.PAIR: 6, Category.TRIPLE: 4, Category.BOMB: 1,
        }

    def test_second_card_of_a_rank(self):
        hand = c("33")
        assert RuleEngine.classify([hand[1]]).is_playable
        assert generate_possible_plays(hand) == [(0,), (1,), (0, 1)]

    def test_follow_with_any_suit(self):
        hand = c("4455")
        assert generate_possible_plays(hand, c("3")) == [(0,), (1,), (2,), (3,)]

    def test_indices_are_sorted_and_unique(self):
        hand = c("33344455566678910JJQQKKA2XD")[:20]
        indices = generate_possible_plays(hand)
        assert len(indices) == len(set(indices))
        for idx in indices:
            assert list(idx) == sorted(idx)

    def test_all_categories(self):
        hand = c("333444555677778899XD")
        found = categories(PlayGenerator(hand).generate())
        expected = {
            Category.SINGLE, Category.PAIR, Category.TRIPLE,
            Category.TRIPLE_WITH_SINGLE, Category.TRIPLE_WITH_PAIR,
            Category.STRAIGHT, Category.CHAIN_PAIRS,
            Category.PLANE, Category.PLANE_WITH_SINGLE, Category.PLANE_WITH_PAIR,
            Category.FOUR_WITH_TWO, Category.BOMB, Category.KING_BOMB,
        }
        assert found == expected

    def test_straights_of_every_length(self):
        hand = c("3456789")
        lengths = {len(p) for p in PlayGenerator(hand).generate() if p.category == Category.STRAIGHT}
        assert lengths == {5, 6, 7}

    def test_every_play_classifies(self):
        hand = c("333444555677778899XD")
        for play in PlayGenerator(hand).generate():
            assert RuleEngine.classify(play.cards) == play.classification
            assert play.classification.is_playable


class TestFollow:
    """跟牌生成测试"""

    def test_follow_single(self):
        hand = c("3579")
        plays = PlayGenerator(hand).generate(c("5"))
        assert sorted(p.strength for p in plays) == [7, 9]

    def test_follow_adds_bombs(self):
        hand = c("3333XD4")
        plays = PlayGenerator(hand).generate(c("55"))
        assert categories(plays) == {Category.BOMB, Category.KING_BOMB}

    def test_follow_bomb(self):
        hand = c("44449999")
        plays = PlayGenerator(hand).generate(c("5555"))
        assert [p.strength for p in plays] == [9]

    def test_follow_king_bomb(self):
        hand = c("3333XD")
        assert PlayGenerator(hand).generate(c("XD")) == []

    def test_follow_straight_same_length(self):
        hand = c("45678910")
        plays = PlayGenerator(hand).generate(c("34567"))
        assert all(len(p) == 5 for p in plays)
        assert sorted(p.strength for p in plays) == [8, 9, 10]

    def test_follow_plane_same_groups(self):
        hand = c("444555666")
        plays = PlayGenerator(hand).generate(c("333444"))
        planes = [p for p in plays if p.category == Category.PLANE]
        assert planes
        assert all(p.classification.group_count == 2 for p in planes)

    def test_invalid_reference(self):
        with pytest.raises(InvariantViolation):
            PlayGenerator(c("345")).generate(c("34"))

    def test_generate_indices(self):
        hand = c("3579")
        assert generate_possible_plays(hand, c("7")) == [(3,)]


def _brute_force(hand, reference):
    """暴力枚举所有位置子集 (只用于小手牌)"""
    ref = RuleEngine.classify(reference) if reference else None
    found = set()
    for size in range(1, len(hand) + 1):
        for combo in itertools.combinations(range(len(hand)), size):
            classification = RuleEngine.classify([hand[i] for i in combo])
            if RuleEngine.beats(classification, ref):
                found.add(combo)
    return found


class TestMatchesClassifier:
    """生成结果与识别规则一致"""

    @pytest.mark.parametrize("seed", range(8))
    def test_free_lead_matches_brute_force(self, seed):
        hand = sort_cards(shuffle(build_deck(), random.Random(seed))[:10])
        generated = generate_possible_plays(hand)
        assert len(generated) == len(set(generated))
        assert set(generated) == _brute_force(hand, None)

    @pytest.mark.parametrize("reference", ["5", "99", "34567", "3334", "5555"])
    def test_follow_matches_brute_force(self, reference):
        hand = c("44566778899JJJQKAXD")[:12]
        generated = generate_possible_plays(hand, c(reference))
        assert len(generated) == len(set(generated))
        assert set(generated) == _brute_force(hand, c(reference))
