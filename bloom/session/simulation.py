"""
Simulation - Bot-only games for balance testing.

Every seat is played by the greedy AI through take_turn_once. Each season
is bounded by a turn guard; a season that exhausts it ends as it stands.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import math
import random
from typing import Callable

from ..engine_core.state import GameConfig, GameState
from ..engine_core.engine import (
    NUM_SEASONS,
    setup_game,
    begin_season,
    take_turn_once,
    end_season,
    final_scoreboard,
    all_passed,
    standings,
)
from .game_loop import DEFAULT_MAX_STEPS


logger = logging.getLogger(__name__)

DEFAULT_NAMES = ["You", "Bot1", "Bot2"]


def simulate_game(
    config: GameConfig | None = None,
    names: list[str] | None = None,
    rng: random.Random | None = None,
    max_steps: int = DEFAULT_MAX_STEPS,
    on_turn: Callable[[GameState], None] | None = None,
) -> GameState:
    """
    Play one full game with the AI in every seat.

    Args:
        config: Game options
        names: Seat names (default: You, Bot1, Bot2)
        rng: Source for the AI's random choices
        max_steps: Turn guard per season
        on_turn: Called after every turn, e.g. to print summaries

    Returns:
        The finished GameState, final scoreboard applied
    """
    state = setup_game(list(names or DEFAULT_NAMES), config)

    for _ in range(NUM_SEASONS):
        begin_season(state)
        guard = max_steps
        while not all_passed(state) and guard > 0:
            take_turn_once(state, rng=rng)
            guard -= 1
            if on_turn is not None:
                on_turn(state)
        if guard == 0 and not all_passed(state):
            logger.warning("Season %d hit the %d-turn guard", state.season, max_steps)
        end_season(state)

    final_scoreboard(state)
    return state


@dataclass
class BatchStats:
    """Per-seat tallies over a batch of games."""
    names: list[str]
    games: int = 0
    score_sum: list[int] = field(default_factory=list)
    score_sq_sum: list[int] = field(default_factory=list)
    wins: list[int] = field(default_factory=list)
    tokens_left: list[int] = field(default_factory=list)

    def __post_init__(self):
        n = len(self.names)
        for tally in (self.score_sum, self.score_sq_sum, self.wins, self.tokens_left):
            if not tally:
                tally.extend([0] * n)

    def record(self, state: GameState) -> None:
        """Add a finished game. The winner is the first seat in standings."""
        self.games += 1
        for index, player in enumerate(state.players):
            self.score_sum[index] += player.score
            self.score_sq_sum[index] += player.score * player.score
            self.tokens_left[index] += player.tokens
        self.wins[standings(state)[0].id] += 1

    def mean(self, index: int) -> float:
        return self.score_sum[index] / self.games if self.games else 0.0

    def sigma(self, index: int) -> float:
        """Population standard deviation of the seat's score."""
        if not self.games:
            return 0.0
        mean = self.mean(index)
        variance = max(0.0, self.score_sq_sum[index] / self.games - mean * mean)
        return math.sqrt(variance)

    def win_pct(self, index: int) -> float:
        return 100.0 * self.wins[index] / self.games if self.games else 0.0

    def avg_tokens(self, index: int) -> float:
        return self.tokens_left[index] / self.games if self.games else 0.0

    def win_share(self) -> list[int]:
        """Rounded percentage of all wins per seat."""
        total = sum(self.wins)
        if not total:
            return [0] * len(self.wins)
        return [round(100 * w / total) for w in self.wins]

    def to_dict(self) -> dict:
        return {
            "games": self.games,
            "seats": [
                {
                    "name": name,
                    "mean": self.mean(i),
                    "sigma": self.sigma(i),
                    "win_pct": self.win_pct(i),
                    "avg_tokens": self.avg_tokens(i),
                }
                for i, name in enumerate(self.names)
            ],
            "win_share": self.win_share(),
        }


def run_batch(
    runs: int,
    config: GameConfig | None = None,
    names: list[str] | None = None,
    rng: random.Random | None = None,
    on_turn: Callable[[GameState], None] | None = None,
) -> BatchStats:
    """Play `runs` games and tally the results. `on_turn` is passed to each game."""
    names = list(names or DEFAULT_NAMES)
    stats = BatchStats(names=names)
    for i in range(runs):
        state = simulate_game(config, names, rng=rng, on_turn=on_turn)
        stats.record(state)
        logger.debug("Game %d: %s", i + 1, [p.score for p in state.players])
    return stats
