"""
Engine - Game setup, season lifecycle and scheduled water events.

Lifecycle:
    setup_game -> (begin_season -> turns -> end_season) x 8 -> final_scoreboard

The water step advances once per season (capped at 8) and selects the
event resolved at the end of that season:

    1-3  nothing
    4    bonus bloom: each player auto-plants their best hand tile
    5    drought (solo mode only): every player with tokens loses one
    6    podium: +5/+3/+1 by number of flowers touching a pond
    7    flood: each player floods their own board at the worst pond
    8    nothing (harvest is paid by final_scoreboard)
"""

from __future__ import annotations
import logging
import random

from .state import GameConfig, GameState, PlayerState, Species
from .action import IllegalActionError
from .rng import make_rng
from .rules import make_empty_board, roll_dice, empty_cells
from .scoring import score_board, harvest_bonus_clusters, count_pond_touchers
from .flood import clear_flood, list_ponds, count_flood_potential, apply_flood
from .reducer import apply_action, add_pattern_delta_and_tokens


logger = logging.getLogger(__name__)

HAND_SIZE = 5
START_TOKENS = 3
COPIES_PER_SPECIES = 30
WEED_POOL = 10
MAX_WATER_STEP = 8
NUM_SEASONS = 8
PODIUM_AWARDS = (5, 3, 1)
TOKEN_VALUE = 2


def build_bag(rng: random.Random) -> list[Species]:
    """30 tiles of each species, shuffled."""
    bag = [s for _ in range(COPIES_PER_SPECIES) for s in Species]
    rng.shuffle(bag)
    return bag


def draw_tiles(bag: list[Species], count: int) -> list[Species]:
    """Pop up to `count` tiles from the end of the bag."""
    out: list[Species] = []
    while len(out) < count and bag:
        out.append(bag.pop())
    return out


def setup_game(names: list[str], config: GameConfig | None = None) -> GameState:
    """
    Set up a new game.

    Args:
        names: Display names, one per seat (seat index = player id)
        config: Game options; a seed makes the bag and dice reproducible

    Returns:
        Initial GameState, before the first season begins
    """
    if not names:
        raise ValueError("At least one player is required")

    config = config or GameConfig()
    rng = make_rng(config.seed)
    bag = build_bag(rng)

    players = [
        PlayerState(
            id=seat,
            name=name,
            board=make_empty_board(),
            hand=draw_tiles(bag, HAND_SIZE),
            tokens=START_TOKENS,
        )
        for seat, name in enumerate(names)
    ]

    state = GameState(
        players=players,
        bag=bag,
        season=1,
        water_step=1,
        current_roll=None,
        current_player_idx=0,
        start_player_idx=0,
        weeds_remaining=WEED_POOL,
        config=config,
    )
    logger.info("Game set up for %d player(s), seed=%s", len(players), config.seed)
    return state


# =============================================================================
# Season flow
# =============================================================================

def begin_season(state: GameState) -> None:
    """Reset per-season flags, clear floods, roll the dice."""
    for player in state.players:
        player.passed = False
        player.flood_active = False
        clear_flood(player.board)

    # A fresh generator from the configured seed every season: with a fixed
    # seed, every season rolls the same dice.
    rng = make_rng(state.config.seed)
    state.current_roll = roll_dice(rng)
    state.current_player_idx = state.start_player_idx
    roll = state.current_roll
    logger.info(
        "Season %d begins: colors=%s row=%d col=%d zone=%s",
        state.season,
        [getattr(c, "value", c) for c in roll.colors],
        roll.row,
        roll.col,
        roll.zone.value,
    )


def all_passed(state: GameState) -> bool:
    return all(p.passed for p in state.players)


def advance_turn(state: GameState) -> None:
    """Move to the next seat that has not passed, wrapping at most once."""
    n = len(state.players)
    for _ in range(n):
        state.current_player_idx = (state.current_player_idx + 1) % n
        if not state.players[state.current_player_idx].passed:
            return


def take_turn_once(state: GameState, rng: random.Random | None = None) -> None:
    """
    Resolve the current turn with the AI.

    An illegal choice ends that player's season instead of raising.
    """
    from ..bots.greedy import choose_action_ai

    player = state.current_player
    if player.passed:
        advance_turn(state)
        return

    action = choose_action_ai(state, player.id, rng=rng)
    try:
        apply_action(state, action)
    except IllegalActionError as e:
        logger.debug("%s: rejected %s (%s), passing", player.name, action.describe(), e)
        player.passed = True

    if not all_passed(state):
        advance_turn(state)


def end_season(state: GameState) -> None:
    """Refill hands, resolve the water event, advance the clocks."""
    for player in state.players:
        player.hand.extend(draw_tiles(state.bag, HAND_SIZE - len(player.hand)))

    resolve_water_event(state)

    state.water_step = min(MAX_WATER_STEP, state.water_step + 1)
    state.start_player_idx = (state.start_player_idx + 1) % len(state.players)
    state.season += 1
    logger.info("Season %d ended, water step now %d", state.season - 1, state.water_step)


def final_scoreboard(state: GameState) -> None:
    """
    Close out the game.

    Pays the harvest bonus once the water clock reached 8, then +2 per
    leftover token. Call exactly once: every call pays the token bonus again.
    """
    if state.water_step >= MAX_WATER_STEP:
        for player in state.players:
            player.score += harvest_bonus_clusters(player.board)
    for player in state.players:
        player.score += player.tokens * TOKEN_VALUE
    logger.info(
        "Final scores: %s",
        ", ".join(f"{p.name}={p.score}" for p in state.players),
    )


def standings(state: GameState) -> list[PlayerState]:
    """Players by score, highest first; ties keep seat order."""
    return sorted(state.players, key=lambda p: p.score, reverse=True)


# =============================================================================
# Water events
# =============================================================================

def resolve_water_event(state: GameState) -> None:
    """Resolve the event for the water step in effect before it advances."""
    step = state.water_step
    if step == 4:
        bonus_bloom(state)
    elif step == 5:
        drought(state)
    elif step == 6:
        podium(state)
    elif step == 7:
        flood_now(state)


def bonus_bloom(state: GameState) -> None:
    """Each player plants the hand tile and open cell with the best point delta."""
    for player in state.players:
        cells = empty_cells(player.board)
        if not cells or not player.hand:
            continue

        before = score_board(player.board).points
        best: tuple[Species, int, int] | None = None
        best_delta = float("-inf")
        for species in dict.fromkeys(player.hand):
            for r, c in cells:
                cell = player.board.cell(r, c)
                cell.species = species
                delta = score_board(player.board).points - before
                cell.species = None
                if delta > best_delta:
                    best_delta = delta
                    best = (species, r, c)

        species, r, c = best
        player.board.cell(r, c).species = species
        player.hand.remove(species)
        add_pattern_delta_and_tokens(player)
        logger.info("Bonus bloom: %s planted %s at (%d,%d)", player.name, species.value, r, c)


def drought(state: GameState) -> None:
    """Solo games only: every player with tokens loses one."""
    if not state.config.solo_mode:
        return
    for player in state.players:
        if player.tokens > 0:
            player.tokens -= 1
    logger.info("Drought: one token lost per player")


def podium(state: GameState) -> None:
    """
    Award +5/+3/+1 to the top three tiers of pond-touching flowers.

    Players with equal counts share a tier and its award.
    """
    counts = [(player, count_pond_touchers(player.board)) for player in state.players]
    counts.sort(key=lambda entry: entry[1], reverse=True)

    tiers: list[list[PlayerState]] = []
    last = None
    for player, count in counts:
        if not tiers or count != last:
            tiers.append([])
            last = count
        tiers[-1].append(player)

    for award, tier in zip(PODIUM_AWARDS, tiers):
        for player in tier:
            player.score += award
    logger.info("Podium: %s", [[p.name for p in tier] for tier in tiers[:len(PODIUM_AWARDS)]])


def flood_now(state: GameState) -> None:
    """Each player floods their own board from the pond with the most open neighbours."""
    for player in state.players:
        best_pond = None
        best_count = -1
        for pond in list_ponds(player.board):
            count = count_flood_potential(player.board, pond)
            if count > best_count:
                best_count = count
                best_pond = pond

        if best_pond is not None:
            applied = apply_flood(player.board, best_pond)
            player.flood_active = applied > 0
            logger.info("Flood: %s pond %s flooded %d cell(s)", player.name, best_pond, applied)
