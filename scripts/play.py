#!/usr/bin/env python3
"""
对战脚本

Usage:
    python scripts/play.py --mode watch                    # 观看电脑对战
    python scripts/play.py --mode play                     # 与电脑对战
    python scripts/play.py --mode play --game-mode fast    # 快速模式
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence
import time

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from engine import Card, DoudizhuEngine, EngineConfig, EngineEvent, GameMode, Phase
from agents import Agent, Arena, RandomAgent, RuleBasedAgent

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Doudizhu Play")

    parser.add_argument(
        "--mode",
        type=str,
        default="watch",
        choices=["watch", "play"],
        help="Mode: watch AI or play against AI",
    )
    parser.add_argument(
        "--game-mode",
        type=str,
        default="standard",
        choices=[m.value for m in GameMode],
        help="Game mode",
    )
    parser.add_argument(
        "--opponent",
        type=str,
        default="rule",
        choices=["random", "rule"],
        help="Opponent type",
    )
    parser.add_argument("--delay", type=float, default=0.5, help="Delay between moves")
    parser.add_argument("--games", type=int, default=1, help="Number of games")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")

    return parser.parse_args()


def cards_to_str(cards: Sequence[Card]) -> str:
    """牌列表转字符串"""
    if not cards:
        return "Pass"
    return " ".join(card.label for card in cards)


def hand_to_str(hand: Sequence[Card]) -> str:
    """带位置编号的手牌"""
    return "  ".join(f"{i}:{card.label}" for i, card in enumerate(hand))


def create_agent(kind: str, name: str, seed: Optional[int] = None, seat: int = 0) -> Agent:
    if kind == "random":
        # 每个座位使用不同的随机流
        return RandomAgent(name, seed=None if seed is None else seed + seat)
    return RuleBasedAgent(name)


def print_event(delay: float):
    """引擎事件 -> 终端输出"""
    def listener(event: EngineEvent):
        if event.message:
            logger.info(event.message)
        if event.kind in ("play", "pass", "bid"):
            time.sleep(delay)
    return listener


def print_table(engine: DoudizhuEngine, player: int):
    """打印玩家视角的牌桌"""
    view = engine.view(player)
    print("\n" + "=" * 60)
    for i, size in enumerate(view.hand_sizes):
        tag = " (地主)" if i == view.landlord else ""
        print(f" {engine.player_name(i)}{tag}  手牌数: {size}")
    if view.bottom:
        print(f" 底牌: {cards_to_str(view.bottom)}")
    if view.reference:
        print(f"\n 需要压过: {cards_to_str(view.reference)} ({engine.player_name(view.last_player)})")
    print("-" * 60)
    print(f" 你的手牌: {hand_to_str(view.hand)}")
    print("=" * 60)


def read_bid(engine: DoudizhuEngine, player: int) -> Optional[int]:
    """读取叫分，返回 None 表示退出"""
    legal = engine.legal_bids()
    while True:
        choice = input(f"\n请叫分 {legal} (0 不叫, 'q' 退出): ").strip()
        if choice.lower() == 'q':
            return None
        try:
            amount = int(choice)
        except ValueError:
            print("请输入数字")
            continue
        outcome = engine.submit_bid(player, amount)
        if outcome:
            return amount
        print(outcome.reason.message)


def read_play(engine: DoudizhuEngine, player: int) -> bool:
    """读取并提交一手牌，返回 False 表示退出"""
    while True:
        choice = input("\n出牌编号 (空格分隔), 'p' 过牌, 'h' 提示, 's N' 选同点数, 'q' 退出: ").strip()
        lowered = choice.lower()
        if lowered == 'q':
            return False
        if lowered == 'p':
            outcome = engine.submit_pass(player)
            if outcome:
                return True
            print(outcome.reason.message)
            continue
        if lowered == 'h':
            hint = engine.hint(player)
            hand = engine.hand(player)
            if hint:
                print(f"提示: {' '.join(str(i) for i in hint)} -> {cards_to_str([hand[i] for i in hint])}")
            else:
                print("提示: 过牌")
            continue
        if lowered.startswith('s '):
            try:
                same = engine.same_rank_indices(player, int(lowered[2:]))
            except ValueError:
                print("请输入有效的编号")
                continue
            print(f"同点数: {' '.join(str(i) for i in same)}")
            continue

        try:
            indices = [int(tok) for tok in choice.split()]
        except ValueError:
            print("请输入数字")
            continue
        hand = engine.hand(player)
        if not indices or len(set(indices)) != len(indices) or \
                any(not 0 <= i < len(hand) for i in indices):
            print("无效选择，请重试")
            continue
        outcome = engine.submit_play(player, indices)
        if outcome:
            return True
        print(outcome.reason.message)


def watch_game(args):
    """观看电脑对战"""
    agents = [create_agent(args.opponent, f"AI_{i}", args.seed, seat=i) for i in range(3)]
    config = EngineConfig(mode=GameMode(args.game_mode), seed=args.seed)
    arena = Arena(agents, config, on_event=print_event(args.delay))

    for game_idx in range(args.games):
        print(f"\n{'='*60}")
        print(f"Game {game_idx + 1}/{args.games}")
        print("=" * 60)

        result = arena.play_round()

        print("\n" + "=" * 60)
        print(f"游戏结束! 胜者: {arena.engine.player_name(result.winner)}")
        print(f"总步数: {result.length}  得分: {result.score}")
        print("=" * 60)


def play_game(args):
    """与电脑对战"""
    human = 0
    config = EngineConfig(mode=GameMode(args.game_mode), human_player=human, seed=args.seed)
    engine = DoudizhuEngine(config)
    engine.add_listener(print_event(args.delay))
    ai_agents: List[Optional[Agent]] = [
        None,
        create_agent(args.opponent, "AI_1", args.seed, seat=1),
        create_agent(args.opponent, "AI_2", args.seed, seat=2),
    ]

    for game_idx in range(args.games):
        print(f"\n{'='*60}")
        print(f"Game {game_idx + 1}/{args.games}")
        print("=" * 60)

        engine.new_round()
        while engine.phase != Phase.FINISHED:
            player = engine.current_player
            if player == human:
                print_table(engine, human)
                if engine.phase == Phase.BIDDING:
                    if read_bid(engine, human) is None:
                        print("退出游戏")
                        return
                elif not read_play(engine, human):
                    print("退出游戏")
                    return
                continue

            agent = ai_agents[player]
            view = engine.view(player)
            if engine.phase == Phase.BIDDING:
                outcome = engine.submit_bid(player, agent.bid(view, engine.legal_bids()))
            else:
                indices = agent.play(view, engine.legal_plays(player))
                outcome = engine.submit_play(player, indices) if indices else engine.submit_pass(player)
            if not outcome:
                raise RuntimeError(f"{agent} made an illegal move: {outcome.reason.name}")

        result = engine.result
        print("\n" + "=" * 60)
        print("恭喜你赢了!" if result.human_won else "你输了!")
        print(f"本局得分: {result.score}  累计得分: {engine.total_score}")
        print("=" * 60)


def main():
    args = parse_args()

    print("=" * 60)
    print("斗地主")
    print("=" * 60)

    if args.mode == "watch":
        watch_game(args)
    elif args.mode == "play":
        play_game(args)


if __name__ == "__main__":
    main()
