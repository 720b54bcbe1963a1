"""
Tests for the season lifecycle and water events.
"""

import random

import pytest

from ..engine_core.state import GameConfig, Species
from ..engine_core.rng import make_rng
from ..engine_core.rules import make_empty_board, roll_dice
from ..engine_core.engine import (
    HAND_SIZE,
    MAX_WATER_STEP,
    advance_turn,
    all_passed,
    begin_season,
    bonus_bloom,
    build_bag,
    draw_tiles,
    drought,
    end_season,
    final_scoreboard,
    flood_now,
    podium,
    resolve_water_event,
    setup_game,
    standings,
    take_turn_once,
)
from .conftest import make_state, plant


def play_season(state, rng, max_steps=200):
    for _ in range(max_steps):
        if all_passed(state):
            break
        take_turn_once(state, rng)
    for player in state.players:
        player.passed = True


class TestSetup:
    """Tests for game setup."""

    def test_setup_two_players(self):
        state = setup_game(["Ada", "Bo"], GameConfig(seed=1))
        assert state.num_players == 2
        assert len(state.bag) == 120 - 2 * HAND_SIZE
        for player in state.players:
            assert len(player.hand) == HAND_SIZE
            assert player.tokens == 3
            assert player.score == 0
        assert state.season == 1
        assert state.water_step == 1
        assert state.weeds_remaining == 10
        assert state.current_roll is None

    def test_seat_index_is_player_id(self):
        state = setup_game(["A", "B", "C"])
        assert [p.id for p in state.players] == [0, 1, 2]
        assert [p.name for p in state.players] == ["A", "B", "C"]

    def test_no_players_rejected(self):
        with pytest.raises(ValueError):
            setup_game([])

    def test_seed_reproduces_bag(self):
        a = setup_game(["A"], GameConfig(seed=42))
        b = setup_game(["A"], GameConfig(seed=42))
        assert a.bag == b.bag
        assert a.players[0].hand == b.players[0].hand

    def test_bag_contents(self):
        bag = build_bag(random.Random(0))
        assert len(bag) == 120
        for species in Species:
            assert bag.count(species) == 30

    def test_draw_tiles_stops_when_empty(self):
        bag = [Species.ROSE, Species.LILY]
        assert draw_tiles(bag, 5) == [Species.LILY, Species.ROSE]
        assert bag == []


class TestSeasonFlow:
    """Tests for begin_season, advance_turn and end_season."""

    def test_begin_season_rolls_from_seed(self):
        state = setup_game(["A", "B"], GameConfig(seed=7))
        begin_season(state)
        assert state.current_roll == roll_dice(make_rng(7))

    def test_every_season_rolls_the_same_with_a_seed(self):
        state = setup_game(["A", "B"], GameConfig(seed=7))
        begin_season(state)
        first = state.current_roll
        end_season(state)
        begin_season(state)
        assert state.current_roll == first

    def test_begin_season_resets_flags_and_floods(self):
        state = setup_game(["A", "B"], GameConfig(seed=3))
        state.players[0].passed = True
        state.players[1].flood_active = True
        state.players[1].board.cell(1, 3).flooded = True
        state.start_player_idx = 1

        begin_season(state)

        assert not any(p.passed for p in state.players)
        assert not state.players[1].flood_active
        assert not state.players[1].board.cell(1, 3).flooded
        assert state.current_player_idx == 1

    def test_advance_turn_skips_passed(self, three_player_state):
        state = three_player_state
        state.players[1].passed = True
        advance_turn(state)
        assert state.current_player_idx == 2
        advance_turn(state)
        assert state.current_player_idx == 0

    def test_end_season_refills_and_rotates(self):
        state = setup_game(["A", "B"], GameConfig(seed=5))
        begin_season(state)
        state.players[0].hand = state.players[0].hand[:2]
        bag_before = len(state.bag)

        end_season(state)

        assert len(state.players[0].hand) == HAND_SIZE
        assert len(state.bag) == bag_before - 3
        assert state.start_player_idx == 1
        assert state.season == 2
        assert state.water_step == 2

    def test_water_step_capped(self):
        state = setup_game(["A", "B"], GameConfig(seed=5))
        state.water_step = MAX_WATER_STEP
        state.season = 8
        end_season(state)
        assert state.water_step == MAX_WATER_STEP
        assert state.season == 9
        assert state.is_over

    def test_take_turn_once_plants_and_advances(self):
        state = setup_game(["A", "B"], GameConfig(seed=11))
        begin_season(state)
        first = state.current_player_idx

        take_turn_once(state, random.Random(0))

        assert state.current_player_idx != first or all_passed(state)


class TestWaterEvents:
    """Tests for the scheduled water events."""

    def test_schedule_dispatch(self, monkeypatch):
        calls = []
        for name in ("bonus_bloom", "drought", "podium", "flood_now"):
            monkeypatch.setattr(
                f"bloom.engine_core.engine.{name}", lambda s, n=name: calls.append(n)
            )
        state = make_state()
        for step in range(1, 9):
            state.water_step = step
            resolve_water_event(state)
        assert calls == ["bonus_bloom", "drought", "podium", "flood_now"]

    def test_bonus_bloom_picks_first_best_cell(self):
        state = make_state(num_players=1, hands=[[Species.FERN]], boards=[make_empty_board()])
        bonus_bloom(state)

        me = state.players[0]
        assert me.board.species_at(1, 3) == Species.FERN
        assert me.hand == []
        assert me.score == 1

    def test_bonus_bloom_tries_every_hand_species(self):
        board = plant(make_empty_board(), Species.ROSE, (1, 1), (1, 2))
        state = make_state(num_players=1, hands=[[Species.LILY, Species.ROSE]], boards=[board])
        bonus_bloom(state)

        me = state.players[0]
        assert me.board.species_at(1, 3) == Species.ROSE
        assert me.hand == [Species.LILY]
        assert me.score == 4
        assert me.tokens == 4

    def test_bonus_bloom_skips_empty_hand(self):
        state = make_state(num_players=1, hands=[[]])
        bonus_bloom(state)
        assert all(c.species is None for c in state.players[0].board.iter_cells())

    def test_drought_solo_only(self):
        state = make_state(num_players=2)
        drought(state)
        assert [p.tokens for p in state.players] == [3, 3]

        state.config.solo_mode = True
        state.players[1].tokens = 0
        drought(state)
        assert [p.tokens for p in state.players] == [2, 0]

    def test_podium_shares_tiers(self):
        boards = [make_empty_board() for _ in range(4)]
        plant(boards[0], Species.FERN, (1, 2), (1, 3), (1, 4))
        plant(boards[1], Species.LILY, (1, 2), (1, 3), (1, 4))
        plant(boards[2], Species.ROSE, (1, 3))
        state = make_state(num_players=4, boards=boards)

        podium(state)

        assert [p.score for p in state.players] == [5, 5, 3, 1]

    def test_podium_everyone_tied(self):
        state = make_state(num_players=3, boards=[make_empty_board() for _ in range(3)])
        podium(state)
        assert [p.score for p in state.players] == [5, 5, 5]

    def test_flood_now_uses_first_best_pond(self):
        state = make_state(num_players=1, boards=[make_empty_board()])
        flood_now(state)

        me = state.players[0]
        flooded = {(c.row, c.col) for c in me.board.iter_cells() if c.flooded}
        assert flooded == {(1, 3), (3, 3), (2, 2), (2, 4)}
        assert me.flood_active

    def test_flood_now_prefers_most_open_pond(self):
        board = make_empty_board()
        plant(board, Species.ROSE, (1, 3), (2, 2))
        state = make_state(num_players=1, boards=[board])
        flood_now(state)
        assert board.cell(1, 5).flooded
        assert not board.cell(3, 3).flooded

    def test_flood_without_ponds(self):
        state = make_state(num_players=1)
        flood_now(state)
        assert not state.players[0].flood_active


class TestFinalScoring:
    """Tests for final_scoreboard and standings."""

    def test_token_bonus_every_call(self):
        state = make_state(num_players=1, tokens=3)
        final_scoreboard(state)
        final_scoreboard(state)
        assert state.players[0].score == 12

    def test_harvest_only_at_last_water_step(self):
        board = plant(make_empty_board(), Species.FERN, (4, 1), (4, 2), (5, 1), (6, 1))
        state = make_state(num_players=1, tokens=0, boards=[board])

        final_scoreboard(state)
        assert state.players[0].score == 0

        state.water_step = MAX_WATER_STEP
        final_scoreboard(state)
        assert state.players[0].score == 2

    def test_standings_stable_on_ties(self, three_player_state):
        state = three_player_state
        state.players[0].score = 4
        state.players[1].score = 9
        state.players[2].score = 4
        assert [p.id for p in standings(state)] == [1, 0, 2]


class TestFullGame:
    """Tests for playing a whole game with the AI."""

    def test_game_runs_eight_seasons(self):
        state = setup_game(["A", "B", "C"], GameConfig(seed=2024))
        rng = random.Random(9)
        history = []
        while not state.is_over:
            begin_season(state)
            play_season(state, rng)
            end_season(state)
            history.append([p.score for p in state.players])

        assert len(history) == 8
        assert state.season == 9
        assert state.water_step == MAX_WATER_STEP
        for earlier, later in zip(history, history[1:]):
            assert all(b >= a for a, b in zip(earlier, later))

    def test_scores_never_drop_within_a_season(self):
        state = setup_game(["A", "B"], GameConfig(seed=17))
        rng = random.Random(1)
        begin_season(state)
        last = [0, 0]
        for _ in range(200):
            if all_passed(state):
                break
            take_turn_once(state, rng)
            scores = [p.score for p in state.players]
            assert all(b >= a for a, b in zip(last, scores))
            last = scores
