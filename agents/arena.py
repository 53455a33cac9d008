"""
对战竞技场

用三个智能体驱动引擎完成整局游戏，所有调用串行执行
"""
from typing import Callable, List, Optional, Sequence
from dataclasses import dataclass, field
import logging

from engine.config import EngineConfig, GameMode
from engine.game import DoudizhuEngine, EngineEvent, Phase

from .agent import Agent

logger = logging.getLogger(__name__)


@dataclass
class MatchResult:
    """对局结果"""
    mode: GameMode
    winner: int
    landlord: int
    highest_bid: int
    bombs: int
    spring: bool
    anti_spring: bool
    score: int
    length: int
    log: List[str] = field(default_factory=list)

    @property
    def landlord_won(self) -> bool:
        return self.landlord >= 0 and self.winner == self.landlord


@dataclass
class ArenaStats:
    """多局统计"""
    games: int = 0
    landlord_games: int = 0
    landlord_wins: int = 0
    springs: int = 0
    anti_springs: int = 0
    bombs: int = 0
    wins_by_seat: List[int] = field(default_factory=lambda: [0, 0, 0])

    def add(self, result: MatchResult) -> None:
        self.games += 1
        if result.landlord >= 0:
            self.landlord_games += 1
            self.landlord_wins += int(result.landlord_won)
        self.springs += int(result.spring)
        self.anti_springs += int(result.anti_spring)
        self.bombs += result.bombs
        self.wins_by_seat[result.winner] += 1

    @property
    def landlord_win_rate(self) -> float:
        return self.landlord_wins / self.landlord_games if self.landlord_games else 0.0

    @property
    def bomb_rate(self) -> float:
        return self.bombs / self.games if self.games else 0.0

    def __repr__(self) -> str:
        return (
            f"ArenaStats(games={self.games}, "
            f"landlord_win_rate={self.landlord_win_rate:.2%}, "
            f"springs={self.springs}, anti_springs={self.anti_springs}, "
            f"bomb_rate={self.bomb_rate:.2f})"
        )


class Arena:
    """
    对战竞技场

    座位 i 由 agents[i] 控制
    """

    def __init__(
        self,
        agents: Sequence[Agent],
        config: Optional[EngineConfig] = None,
        max_steps: int = 1000,
        on_event: Optional[Callable[[EngineEvent], None]] = None,
    ):
        assert len(agents) == 3
        self.agents = list(agents)
        self.engine = DoudizhuEngine(config)
        self.max_steps = max_steps
        if on_event is not None:
            self.engine.add_listener(on_event)

    def play_round(self, mode: Optional[GameMode] = None) -> MatchResult:
        """
        进行一局

        Args:
            mode: 游戏模式，None 时使用引擎配置

        Returns:
            MatchResult
        """
        engine = self.engine
        for agent in self.agents:
            agent.reset()
        engine.new_round(mode)

        steps = 0
        while engine.phase != Phase.FINISHED:
            if steps >= self.max_steps:
                raise RuntimeError(f"Round did not finish within {self.max_steps} steps")
            player = engine.current_player
            agent = self.agents[player]
            view = engine.view(player)

            if engine.phase == Phase.BIDDING:
                amount = agent.bid(view, engine.legal_bids())
                outcome = engine.submit_bid(player, amount)
            else:
                indices = agent.play(view, engine.legal_plays(player))
                if indices:
                    outcome = engine.submit_play(player, indices)
                else:
                    outcome = engine.submit_pass(player)

            if not outcome:
                raise RuntimeError(f"{agent} made an illegal move: {outcome.reason.name}")
            steps += 1

        result = engine.result
        return MatchResult(
            mode=engine.mode,
            winner=result.winner,
            landlord=result.landlord,
            highest_bid=engine.highest_bid,
            bombs=result.bombs,
            spring=result.spring,
            anti_spring=result.anti_spring,
            score=result.score,
            length=steps,
            log=list(engine.log),
        )

    def run(self, n_games: int, mode: Optional[GameMode] = None, log_every: int = 0) -> ArenaStats:
        """
        连续进行多局

        Args:
            n_games: 局数
            mode: 游戏模式
            log_every: 每隔多少局输出一次统计，0 表示不输出

        Returns:
            ArenaStats
        """
        stats = ArenaStats()
        for game_idx in range(n_games):
            stats.add(self.play_round(mode))
            if log_every and (game_idx + 1) % log_every == 0:
                logger.info(f"Game {game_idx + 1}/{n_games}, {stats}")
        return stats
