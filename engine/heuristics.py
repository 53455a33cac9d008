"""
电脑玩家的简单决策

纯函数: 只依赖手牌和当前局面，与任何延时/界面无关
"""
from typing import Sequence, Tuple

from .cards import Card, Rank, rank_counts
from .actions import Play, PlayGenerator
from .bidding import MAX_BID


def hand_strength(hand: Sequence[Card]) -> int:
    """
    手牌强度 (用于叫分)

    对子 +1，三张 +2，炸弹 +4，王炸 +5
    """
    counts = rank_counts(hand)
    strength = 0
    for count in counts.values():
        if count == 2:
            strength += 1
        elif count == 3:
            strength += 2
        elif count == 4:
            strength += 4
    if counts[Rank.SMALL_JOKER] and counts[Rank.BIG_JOKER]:
        strength += 5
    return strength


def choose_bid(hand: Sequence[Card], highest_bid: int = 0) -> int:
    """
    根据手牌强度决定叫分

    Args:
        hand: 手牌
        highest_bid: 当前最高分

    Returns:
        叫分 (0 表示不叫)，保证为合法叫分
    """
    strength = hand_strength(hand)
    if strength >= 6:
        bid = 3
    elif strength >= 4:
        bid = 2
    elif strength >= 2:
        bid = 1
    else:
        bid = 0

    # 叫分必须高于当前最高分
    if bid <= highest_bid or highest_bid >= MAX_BID:
        bid = 0
    return bid


def _lead_key(play: Play):
    # 先出小牌，同样大小时多出几张
    return play.strength, -len(play)


def choose_play(
    hand: Sequence[Card],
    reference: Sequence[Card] = (),
    player: int = -1,
    last_player: int = -1,
    landlord: int = -1,
) -> Tuple[int, ...]:
    """
    选择一手牌

    Args:
        hand: 手牌
        reference: 需要压过的牌 (空表示主动出牌)
        player: 自己的座位
        last_player: 出 reference 的玩家
        landlord: 地主座位 (-1 表示无地主)

    Returns:
        手牌位置元组，空元组表示过牌
    """
    plays = PlayGenerator(hand).generate(reference or None)
    if not plays:
        return ()

    plain = [p for p in plays if not p.is_bomb]
    bombs = sorted((p for p in plays if p.is_bomb), key=lambda p: p.strength)

    if not reference:
        # 任何非空手牌都有单张可出
        return min(plain, key=_lead_key).indices

    if plain:
        return min(plain, key=lambda p: p.strength).indices

    # 不用炸弹压队友
    if _is_partner(player, last_player, landlord):
        return ()
    return bombs[0].indices if bombs else ()


def _is_partner(player: int, other: int, landlord: int) -> bool:
    if landlord < 0 or player < 0 or other < 0 or player == other:
        return False
    return player != landlord and other != landlord

