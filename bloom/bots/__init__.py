"""
Bots module - AI opponents.

Provides:
- choose_action_ai: The greedy one-ply AI
- BotPolicy: Interface for bot decision-making
- GreedyPolicy / PassPolicy: Concrete policies for rooms and simulations
"""

from .greedy import choose_action_ai
from .policy import BotPolicy, BotDecision, GreedyPolicy, PassPolicy

__all__ = [
    "choose_action_ai",
    "BotPolicy",
    "BotDecision",
    "GreedyPolicy",
    "PassPolicy",
]
