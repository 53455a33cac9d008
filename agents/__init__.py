"""
Agents Layer - 电脑玩家与对战驱动

Modules:
    agent: 智能体
    arena: 对战竞技场
"""
from .agent import (
    Agent,
    RandomAgent,
    RuleBasedAgent,
)
from .arena import (
    MatchResult,
    ArenaStats,
    Arena,
)

__all__ = [
    # agent
    "Agent",
    "RandomAgent",
    "RuleBasedAgent",
    # arena
    "MatchResult",
    "ArenaStats",
    "Arena",
]
