"""
斗地主 Gymnasium 环境

遵循标准 Gymnasium API，三个座位都由调用方依次驱动
"""
from typing import Dict, Any, Tuple, Optional, List, Union
import random

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from engine.cards import DECK_SIZE, cards_to_mask, cards_to_str, mask_to_cards
from engine.config import EngineConfig
from engine.errors import InvariantViolation, Outcome
from engine.game import DoudizhuEngine, Phase
from engine.scoring import is_winning_side
from engine.bidding import MAX_BID

from .observation import ObservationBuilder, PHASES

Action = Union[int, np.integer, np.ndarray, Dict[str, Any]]


class DoudizhuEnv(gym.Env):
    """
    斗地主 Gymnasium 环境

    动作:
    - 叫地主阶段: 叫分 0-3 (整数，或 {"bid": n})
    - 出牌阶段: 54 维选择向量，每一维对应一张具体的牌，全零表示过牌
      (数组，或 {"cards": mask})

    奖励:
    - 非法动作: -1.0，局面不变，info["error"] 给出原因
    - 本局结束: 视角玩家所在一方赢得 +score，输掉 -score
    - 其他: 0

    API:
    - reset() -> observation, info
    - step(action) -> observation, reward, terminated, truncated, info
    """

    metadata = {
        "render_modes": ["human", "ansi"],
        "name": "Doudizhu-v1",
    }

    def __init__(
        self,
        render_mode: Optional[str] = None,
        config: Optional[EngineConfig] = None,
        agent_player: Optional[int] = None,
        seed: Optional[int] = None,
    ):
        """
        Args:
            render_mode: 渲染模式 ("human", "ansi", None)
            config: 引擎配置
            agent_player: 观测与奖励的视角座位 (None=当前行动玩家)
            seed: 随机种子
        """
        super().__init__()

        if agent_player is not None and agent_player not in (0, 1, 2):
            raise ValueError(f"agent_player must be 0, 1 or 2, got {agent_player}")

        self.render_mode = render_mode
        self.config = config or EngineConfig()
        self._agent_player = agent_player
        self._seed = seed if seed is not None else self.config.seed

        self._obs_builder = ObservationBuilder()
        self._engine: Optional[DoudizhuEngine] = None
        self._step_count = 0

        self._define_spaces()

    def _define_spaces(self):
        """定义观测和动作空间"""
        self.action_space = spaces.Dict({
            "bid": spaces.Discrete(MAX_BID + 1),
            "cards": spaces.MultiBinary(DECK_SIZE),
        })

        self.observation_space = spaces.Dict({
            "hand": spaces.Box(0, 1, shape=(DECK_SIZE,), dtype=np.float32),
            "hand_mask": spaces.MultiBinary(DECK_SIZE),
            "last_play": spaces.Box(0, 1, shape=(DECK_SIZE,), dtype=np.float32),
            "played_cards": spaces.Box(0, 1, shape=(3, DECK_SIZE), dtype=np.float32),
            "position": spaces.Box(0, 1, shape=(3,), dtype=np.float32),
            "landlord": spaces.Box(0, 1, shape=(3,), dtype=np.float32),
            "bid_info": spaces.Box(-1, MAX_BID, shape=(3,), dtype=np.float32),
            "cards_left": spaces.Box(0, 1, shape=(3,), dtype=np.float32),
            "phase": spaces.Box(0, 1, shape=(len(PHASES),), dtype=np.float32),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        重置环境

        Args:
            seed: 随机种子
            options: 额外选项 ("mode": 本局游戏模式)

        Returns:
            (observation, info) 元组
        """
        if seed is None and self._engine is None:
            seed = self._seed
        super().reset(seed=seed)

        # 引擎的随机源由环境的 np_random 派生，保证同种子可复现
        engine_seed = int(self.np_random.integers(2 ** 31))
        self._engine = DoudizhuEngine(self.config, rng=random.Random(engine_seed))
        self._step_count = 0

        mode = (options or {}).get("mode")
        self._engine.new_round(mode)

        obs = self._build_observation()
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, info

    def step(
        self,
        action: Action,
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        执行动作

        Args:
            action: 叫分或出牌选择向量

        Returns:
            (observation, reward, terminated, truncated, info) 元组
        """
        engine = self._engine
        if engine is None:
            raise RuntimeError("Environment not reset. Call reset() first.")
        if engine.phase == Phase.FINISHED:
            raise RuntimeError("Round is finished. Call reset() to start a new one.")

        player = engine.current_player
        outcome = self._apply(player, action)

        if not outcome:
            # 非法动作：给予惩罚并保持状态
            obs = self._build_observation()
            info = self._build_info()
            info["error"] = outcome.reason.message
            info["rejection"] = outcome.reason.name
            return obs, -1.0, False, False, info

        self._step_count += 1
        terminated = engine.phase == Phase.FINISHED
        reward = self._compute_reward(player) if terminated else 0.0

        obs = self._build_observation()
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, False, info

    def _apply(self, player: int, action: Action) -> Outcome:
        """把动作交给引擎"""
        engine = self._engine
        if isinstance(action, dict):
            action = action["bid"] if engine.phase == Phase.BIDDING else action["cards"]

        if engine.phase == Phase.BIDDING:
            if not isinstance(action, (int, np.integer)):
                raise ValueError(f"Bidding action must be an integer, got {type(action)}")
            return engine.submit_bid(player, int(action))

        if isinstance(action, (int, np.integer)):
            raise ValueError("Playing action must be a card selection mask")
        try:
            cards = mask_to_cards(action)
        except InvariantViolation as e:
            raise ValueError(str(e)) from e
        if not cards:
            return engine.submit_pass(player)

        held = {card.id for card in engine.hand(player)}
        if any(card.id not in held for card in cards):
            raise ValueError(f"Player {player} selected cards not in hand")
        return engine.submit_cards(player, cards)

    def _perspective(self) -> int:
        if self._agent_player is not None:
            return self._agent_player
        current = self._engine.current_player
        return current if current >= 0 else 0

    def _build_observation(self) -> Dict[str, np.ndarray]:
        """构建观测"""
        obs = self._obs_builder.build(self._engine, self._perspective())
        return obs.to_dict()

    def _build_info(self) -> Dict[str, Any]:
        """构建 info 字典"""
        engine = self._engine
        info = {
            "current_player": engine.current_player,
            "phase": engine.phase.value,
            "mode": engine.mode.value,
            "landlord": engine.landlord,
            "step_count": self._step_count,
            "bombs_count": engine.score_state.bombs,
        }

        if engine.phase == Phase.BIDDING:
            info["legal_bids"] = engine.legal_bids()

        if engine.phase == Phase.PLAYING:
            info["legal_action_masks"] = self.legal_action_masks()

        if engine.phase == Phase.FINISHED:
            result = engine.result
            info["winner"] = result.winner
            info["score"] = result.score
            info["is_spring"] = result.spring
            info["is_anti_spring"] = result.anti_spring

        return info

    def _compute_reward(self, actor: int) -> float:
        """本局结束时的奖励"""
        player = self._agent_player if self._agent_player is not None else actor
        result = self._engine.result
        if is_winning_side(player, result.winner, result.landlord):
            return float(result.score)
        return -float(result.score)

    def legal_action_masks(self) -> List[np.ndarray]:
        """当前行动玩家所有合法出牌的选择向量 (跟牌时不含过牌)"""
        engine = self._engine
        if engine is None or engine.phase != Phase.PLAYING:
            return []
        player = engine.current_player
        hand = engine.hand(player)
        return [cards_to_mask(hand[i] for i in indices) for indices in engine.legal_plays(player)]

    def render(self) -> Optional[str]:
        """渲染环境"""
        if self.render_mode == "ansi" or self.render_mode == "human":
            return self._render_text()
        return None

    def _render_text(self) -> str:
        """文本渲染"""
        engine = self._engine
        lines = []
        lines.append("=" * 50)
        lines.append(f"Mode: {engine.mode.value}  Phase: {engine.phase.value}")
        lines.append(f"Current Player: {engine.current_player}")

        if engine.phase == Phase.BIDDING:
            lines.append(f"Bids: {engine.bidding.bids}  Highest: {engine.highest_bid}")
        else:
            lines.append(f"Landlord: {engine.landlord if engine.landlord >= 0 else 'None'}")

        for player, hand in enumerate(engine.hands):
            lines.append(f"Player {player}: {cards_to_str(hand)} ({len(hand)})")

        if engine.last_play:
            lines.append(f"Last Play: {cards_to_str(engine.last_play)} by {engine.last_player}")

        if engine.phase == Phase.FINISHED:
            result = engine.result
            lines.append(f"Winner: {result.winner}  Score: {result.score}")
            lines.append(f"Spring: {result.spring}  Anti-spring: {result.anti_spring}")

        lines.append("=" * 50)

        output = "\n".join(lines)
        if self.render_mode == "human":
            print(output)
        return output

    def close(self):
        """关闭环境"""
        pass

    @property
    def engine(self) -> Optional[DoudizhuEngine]:
        """当前引擎 (用于调试)"""
        return self._engine

    def sample_action(self) -> Action:
        """随机采样一个合法动作"""
        engine = self._engine
        if engine.phase == Phase.BIDDING:
            bids = engine.legal_bids()
            return int(bids[self.np_random.integers(len(bids))])
        masks = self.legal_action_masks()
        if not engine.view(engine.current_player).is_leading:
            masks.append(np.zeros(DECK_SIZE, dtype=np.int8))
        return masks[self.np_random.integers(len(masks))]


def make_env(**kwargs) -> DoudizhuEnv:
    """
    工厂函数：创建环境

    Args:
        **kwargs: 环境参数，config 可以是 EngineConfig 或字典

    Returns:
        DoudizhuEnv 实例
    """
    config = kwargs.pop("config", None)
    if isinstance(config, dict):
        config = EngineConfig.from_dict(config)
    return DoudizhuEnv(config=config, **kwargs)
