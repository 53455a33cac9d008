"""计分测试"""
import pytest

from engine.cards import str_to_cards
from engine.rules import classify
from engine.scoring import ScoreState, compute_score, apply_to_total, is_winning_side


class TestScoreState:
    """ScoreState 测试"""

    def test_record_play(self):
        state = ScoreState()
        state = state.record_play(0, classify(str_to_cards("3")), landlord=0)
        state = state.record_play(1, classify(str_to_cards("5555")), landlord=0)
        state = state.record_play(2, classify(str_to_cards("XD")), landlord=0)
        assert state.bombs == 2
        assert state.played_any == (True, True, True)
        assert state.landlord_plays == 1

    def test_new_round_keeps_total(self):
        state = ScoreState(bombs=3, played_any=(True, False, True), landlord_plays=2, total=12)
        fresh = state.new_round()
        assert fresh == ScoreState(total=12)


class TestComputeScore:
    """得分计算测试"""

    def test_spring_doubles_score(self):
        # 叫 2 分，一个炸弹，地主获胜且两名农民都没出过牌
        state = ScoreState(bombs=1, played_any=(True, False, False), landlord_plays=5)
        result = compute_score(state, winner=0, landlord=0, highest_bid=2)
        assert result.spring
        assert result.locked == 2
        assert result.multiplier == 4
        assert result.score == 8
        assert result.human_won
        assert result.total == 8

    def test_plain_farmer_win(self):
        state = ScoreState(bombs=0, played_any=(True, True, True), landlord_plays=3)
        result = compute_score(state, winner=1, landlord=0, highest_bid=3)
        assert not result.spring and not result.anti_spring
        assert result.multiplier == 1
        assert result.score == 3
        assert not result.landlord_won
        assert not result.human_won

    def test_anti_spring(self):
        state = ScoreState(bombs=0, played_any=(True, True, False), landlord_plays=1)
        result = compute_score(state, winner=1, landlord=0, highest_bid=1)
        assert result.anti_spring
        assert result.multiplier == 2
        assert result.score == 2

    def test_base_at_least_one(self):
        state = ScoreState(played_any=(True, True, True))
        result = compute_score(state, winner=0, landlord=-1, highest_bid=0)
        assert result.base == 1
        assert result.score == 1

    def test_bombs_double(self):
        state = ScoreState(bombs=3, played_any=(True, True, True), landlord_plays=4)
        result = compute_score(state, winner=0, landlord=0, highest_bid=1)
        assert result.multiplier == 8

    def test_locked_counts_non_winners(self):
        state = ScoreState(played_any=(False, True, False), landlord_plays=0)
        result = compute_score(state, winner=1, landlord=0, highest_bid=1)
        assert result.locked == 2
        assert not result.spring

    def test_total_floor(self):
        state = ScoreState(played_any=(True, True, True), landlord_plays=2, total=1)
        result = compute_score(state, winner=0, landlord=0, highest_bid=3, human_player=1)
        assert not result.human_won
        assert result.total == 0


class TestHelpers:
    """辅助函数测试"""

    @pytest.mark.parametrize("player,winner,landlord,expected", [
        (0, 0, 0, True),
        (1, 0, 0, False),
        (1, 2, 0, True),
        (0, 2, 0, False),
        (1, 1, -1, True),
        (2, 1, -1, False),
    ])
    def test_is_winning_side(self, player, winner, landlord, expected):
        assert is_winning_side(player, winner, landlord) == expected

    def test_apply_to_total(self):
        assert apply_to_total(5, 3, True) == 8
        assert apply_to_total(5, 3, False) == 2
        assert apply_to_total(2, 3, False) == 0
