"""
Tests for the reducer (state transitions).

Tests:
- Action application
- State mutation correctness
- Validation (rejections leave the state untouched)
- Degrade-to-pass on missing resources
- The score ratchet
"""

import copy

import pytest

from ..engine_core.state import WILD, DiceRoll, Species, Zone
from ..engine_core.action import Action, ActionType, IllegalActionError, ShovelTarget
from ..engine_core.reducer import Reducer, add_pattern_delta_and_tokens, apply_action, try_apply_action
from .conftest import make_state, plant


def assert_rejected(state, action, code):
    before = copy.deepcopy(state)
    with pytest.raises(IllegalActionError) as exc:
        apply_action(state, action)
    assert exc.value.code == code
    assert state == before


class TestDispatch:
    def test_every_action_type_has_a_handler(self):
        reducer = Reducer()
        for action_type in ActionType:
            assert reducer._get_handler(action_type) is not None

    def test_no_roll_rejected(self):
        state = make_state(hands=[[Species.ROSE], []])
        assert_rejected(state, Action.plant(Species.ROSE, 1, 1), "NO_ROLL")

    def test_pass_without_roll(self):
        """Passing is allowed before any dice are drawn."""
        state = make_state(hands=[[Species.ROSE], []])
        assert apply_action(state, Action.pass_()).success
        assert state.players[0].passed


class TestPlantAction:
    """Tests for plant action."""

    def test_plant_from_hand(self, two_player_state):
        state = two_player_state
        result = apply_action(state, Action.plant(Species.ROSE, 1, 4))

        assert result.success
        me = state.players[0]
        assert me.board.species_at(1, 4) == Species.ROSE
        assert me.hand == [Species.FERN]
        assert me.score == 0

    def test_plant_completing_run_scores(self, two_player_state):
        state = two_player_state
        me = state.players[0]
        plant(me.board, Species.ROSE, (1, 1), (1, 2))

        apply_action(state, Action.plant(Species.ROSE, 1, 3))

        assert me.score == 3
        assert me.tokens == 4
        assert me.last_pattern_points == 3
        assert me.last_pattern_tokens == 1

    def test_species_not_in_hand(self, two_player_state):
        assert_rejected(two_player_state, Action.plant(Species.LILY, 1, 4), "NOT_IN_HAND")

    def test_species_not_allowed_by_dice(self, two_player_state):
        assert_rejected(two_player_state, Action.plant(Species.FERN, 1, 4), "SPECIES_NOT_ALLOWED")

    def test_plain_string_species(self, two_player_state):
        state = two_player_state
        assert_rejected(state, Action.plant("Fern", 1, 4), "SPECIES_NOT_ALLOWED")

        result = apply_action(state, Action.plant("Rose", 1, 4))

        assert result.state_changes == ["P1 planted Rose at (1,4)"]
        assert state.players[0].board.species_at(1, 4) is Species.ROSE
        assert state.players[0].hand == [Species.FERN]

    def test_unknown_species(self, two_player_state):
        assert_rejected(two_player_state, Action.plant("Tulip", 1, 4), "NOT_IN_HAND")

    def test_wild_allows_any_hand_species(self, two_player_state):
        state = two_player_state
        state.current_roll = DiceRoll(colors=(WILD, Species.ROSE), row=1, col=1, zone=Zone.FREE)
        apply_action(state, Action.plant(Species.FERN, 1, 5))
        assert state.players[0].board.species_at(1, 5) == Species.FERN

    def test_destination_outside_roll(self, two_player_state):
        assert_rejected(two_player_state, Action.plant(Species.ROSE, 3, 3), "ILLEGAL_DESTINATION")

    def test_occupied_destination(self, two_player_state):
        plant(two_player_state.players[0].board, Species.LILY, (1, 4))
        assert_rejected(two_player_state, Action.plant(Species.ROSE, 1, 4), "ILLEGAL_DESTINATION")

    def test_out_of_bounds(self, two_player_state):
        assert_rejected(two_player_state, Action.plant(Species.ROSE, 0, 1), "OUT_OF_BOUNDS")


class TestPlantWeedAction:
    """Tests for weed placement."""

    def test_weed_opponent(self, two_player_state):
        state = two_player_state
        apply_action(state, Action.plant_weed(1, 1, 2))

        assert state.players[1].board.cell(1, 2).weed
        assert state.players[0].tokens == 2
        assert state.weeds_remaining == 9

    def test_no_tokens_degrades_to_pass(self, two_player_state):
        state = two_player_state
        state.players[0].tokens = 0
        result = apply_action(state, Action.plant_weed(1, 1, 2))

        assert result.success
        assert state.players[0].passed
        assert not state.players[1].board.cell(1, 2).weed
        assert state.weeds_remaining == 10

    def test_empty_pool_degrades_to_pass(self, two_player_state):
        state = two_player_state
        state.weeds_remaining = 0
        apply_action(state, Action.plant_weed(1, 1, 2))

        assert state.players[0].passed
        assert state.players[0].tokens == 3

    def test_self_target_rejected(self, two_player_state):
        assert_rejected(two_player_state, Action.plant_weed(0, 1, 2), "SELF_TARGET")

    def test_unknown_player_rejected(self, two_player_state):
        assert_rejected(two_player_state, Action.plant_weed(5, 1, 2), "UNKNOWN_PLAYER")

    def test_illegal_weed_cell(self, two_player_state):
        assert_rejected(two_player_state, Action.plant_weed(1, 4, 4), "ILLEGAL_DESTINATION")


class TestShovelAction:
    """Tests for shovel."""

    def test_remove_own_weed(self, two_player_state):
        state = two_player_state
        state.weeds_remaining = 9
        state.players[0].board.cell(4, 4).weed = True

        apply_action(state, Action.shovel(ShovelTarget.WEED, 4, 4))

        assert not state.players[0].board.cell(4, 4).weed
        assert state.players[0].tokens == 2
        assert state.weeds_remaining == 10

    def test_remove_weed_from_other_board(self, two_player_state):
        state = two_player_state
        state.weeds_remaining = 9
        state.players[1].board.cell(2, 2).weed = True

        apply_action(state, Action.shovel(ShovelTarget.WEED, 2, 2, target_player_id=1))

        assert not state.players[1].board.cell(2, 2).weed
        assert state.weeds_remaining == 10

    def test_no_weed_rejected(self, two_player_state):
        assert_rejected(two_player_state, Action.shovel(ShovelTarget.WEED, 4, 4), "NO_WEED")

    def test_drain_flood(self, two_player_state):
        state = two_player_state
        state.players[0].board.cell(3, 3).flooded = True

        apply_action(state, Action.shovel(ShovelTarget.FLOOD, 3, 3))

        assert not state.players[0].board.cell(3, 3).flooded
        assert state.players[0].tokens == 2

    def test_no_flood_rejected(self, two_player_state):
        assert_rejected(two_player_state, Action.shovel(ShovelTarget.FLOOD, 3, 3), "NO_FLOOD")

    def test_dig_up_flower_returns_it_to_bag(self, two_player_state):
        state = two_player_state
        plant(state.players[0].board, Species.DAISY, (5, 5))

        apply_action(state, Action.shovel(ShovelTarget.FLOWER, 5, 5))

        assert state.players[0].board.species_at(5, 5) is None
        assert state.bag == [Species.DAISY]
        assert state.players[0].tokens == 2

    def test_no_flower_rejected(self, two_player_state):
        assert_rejected(two_player_state, Action.shovel(ShovelTarget.FLOWER, 5, 5), "NO_FLOWER")

    def test_no_tokens_degrades_to_pass(self, two_player_state):
        state = two_player_state
        state.players[0].tokens = 0
        state.players[0].board.cell(4, 4).weed = True

        apply_action(state, Action.shovel(ShovelTarget.WEED, 4, 4))

        assert state.players[0].passed
        assert state.players[0].board.cell(4, 4).weed


class TestScoreRatchet:
    """Tests for add_pattern_delta_and_tokens."""

    def test_losing_a_pattern_keeps_score(self, two_player_state):
        state = two_player_state
        me = state.players[0]
        plant(me.board, Species.ROSE, (1, 1), (1, 2), (1, 3))
        add_pattern_delta_and_tokens(me)
        assert (me.score, me.tokens) == (3, 4)

        apply_action(state, Action.shovel(ShovelTarget.FLOWER, 1, 1))

        assert me.score == 3
        assert me.tokens == 3
        assert me.last_pattern_points == 0
        assert me.last_pattern_tokens == 0

    def test_restoring_a_pattern_credits_again(self, two_player_state):
        state = two_player_state
        me = state.players[0]
        plant(me.board, Species.ROSE, (1, 1), (1, 2), (1, 3))
        add_pattern_delta_and_tokens(me)
        apply_action(state, Action.shovel(ShovelTarget.FLOWER, 1, 1))

        apply_action(state, Action.plant(Species.ROSE, 1, 1))

        assert me.score == 6

    def test_no_change_no_credit(self, two_player_state):
        me = two_player_state.players[0]
        add_pattern_delta_and_tokens(me)
        add_pattern_delta_and_tokens(me)
        assert (me.score, me.tokens) == (0, 3)


class TestStealAction:
    """Tests for steal."""

    def test_steal_matching_flower(self, two_player_state):
        state = two_player_state
        plant(state.players[1].board, Species.ROSE, (4, 4))

        apply_action(state, Action.steal(1, 4, 4, 1, 3))

        assert state.players[0].board.species_at(1, 3) == Species.ROSE
        assert state.players[1].board.species_at(4, 4) is None
        assert state.players[0].tokens == 1

    def test_victim_keeps_score(self, two_player_state):
        state = two_player_state
        victim = state.players[1]
        plant(victim.board, Species.LILY, (4, 1), (4, 2), (4, 3))
        add_pattern_delta_and_tokens(victim)

        apply_action(state, Action.steal(1, 4, 3, 1, 3))

        assert victim.score == 3
        assert victim.last_pattern_points == 0

    def test_color_mismatch(self, two_player_state):
        plant(two_player_state.players[1].board, Species.FERN, (4, 4))
        assert_rejected(two_player_state, Action.steal(1, 4, 4, 1, 3), "COLOR_MISMATCH")

    def test_empty_source(self, two_player_state):
        assert_rejected(two_player_state, Action.steal(1, 4, 4, 1, 3), "NO_FLOWER")

    def test_blocked_destination(self, two_player_state):
        plant(two_player_state.players[1].board, Species.ROSE, (4, 4))
        two_player_state.players[0].board.cell(1, 3).weed = True
        assert_rejected(two_player_state, Action.steal(1, 4, 4, 1, 3), "CELL_BLOCKED")

    def test_destination_outside_roll(self, two_player_state):
        plant(two_player_state.players[1].board, Species.ROSE, (4, 4))
        assert_rejected(two_player_state, Action.steal(1, 4, 4, 3, 3), "ILLEGAL_DESTINATION")

    def test_self_target_rejected(self, two_player_state):
        plant(two_player_state.players[0].board, Species.ROSE, (4, 4))
        assert_rejected(two_player_state, Action.steal(0, 4, 4, 1, 3), "SELF_TARGET")

    def test_one_token_degrades_to_pass(self, two_player_state):
        state = two_player_state
        state.players[0].tokens = 1
        plant(state.players[1].board, Species.ROSE, (4, 4))

        apply_action(state, Action.steal(1, 4, 4, 1, 3))

        assert state.players[0].passed
        assert state.players[1].board.species_at(4, 4) == Species.ROSE


class TestSwapAction:
    """Tests for swap."""

    def test_swap_flowers(self, two_player_state):
        state = two_player_state
        plant(state.players[0].board, Species.ROSE, (1, 2))
        plant(state.players[1].board, Species.LILY, (1, 5))

        apply_action(state, Action.swap(1, 1, 2, 1, 5))

        assert state.players[0].board.species_at(1, 2) == Species.LILY
        assert state.players[1].board.species_at(1, 5) == Species.ROSE
        assert state.players[0].tokens == 0

    def test_their_cell_outside_roll(self, two_player_state):
        plant(two_player_state.players[0].board, Species.ROSE, (1, 2))
        plant(two_player_state.players[1].board, Species.LILY, (3, 3))
        assert_rejected(two_player_state, Action.swap(1, 1, 2, 3, 3), "ILLEGAL_SWAP")

    def test_missing_flower(self, two_player_state):
        plant(two_player_state.players[0].board, Species.ROSE, (1, 2))
        assert_rejected(two_player_state, Action.swap(1, 1, 2, 1, 5), "NO_FLOWER")

    def test_two_tokens_degrade_to_pass(self, two_player_state):
        state = two_player_state
        state.players[0].tokens = 2
        plant(state.players[0].board, Species.ROSE, (1, 2))
        plant(state.players[1].board, Species.LILY, (1, 5))

        apply_action(state, Action.swap(1, 1, 2, 1, 5))

        assert state.players[0].passed
        assert state.players[0].board.species_at(1, 2) == Species.ROSE


class TestPassAction:
    def test_pass(self, two_player_state):
        result = apply_action(two_player_state, Action.pass_())
        assert result.success
        assert two_player_state.players[0].passed
        assert not two_player_state.players[1].passed


class TestTryApplyAction:
    """Rejections come back as failed results instead of exceptions."""

    def test_rejection_is_failure(self, two_player_state):
        state = two_player_state
        before = copy.deepcopy(state)

        result = try_apply_action(state, Action.plant(Species.LILY, 1, 4))

        assert not result.success
        assert result.error_code == "NOT_IN_HAND"
        assert "Lily" in result.error
        assert result.state_changes == []
        assert state == before

    def test_legal_action_applies(self, two_player_state):
        result = try_apply_action(two_player_state, Action.pass_())
        assert result.success
        assert result.error is None
        assert two_player_state.players[0].passed
