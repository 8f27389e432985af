"""
Tests for the rules engine.

Tests:
- Board setup and dice
- Move legality
- Move application (exit, advance, finish, win)
- Captures and safe squares
- Turn advance and extra turns
"""

import random
from collections import Counter

import pytest

from ..engine_core.board import FINISH_POSITION
from ..engine_core.rules import (
    advance_turn,
    apply_move,
    can_player_move,
    initialize_tokens,
    is_valid_move,
    roll_dice,
    valid_moves,
)
from ..engine_core.state import MatchStatus, PlayerColor, TokenStatus
from .helpers import FixedBiasRng

RED = PlayerColor.RED
GREEN = PlayerColor.GREEN
BLUE = PlayerColor.BLUE
YELLOW = PlayerColor.YELLOW


class TestSetup:
    """Tests for board setup."""

    def test_initialize_tokens(self):
        """All four colors get four home tokens."""
        tokens = initialize_tokens()

        assert set(tokens) == {RED, GREEN, BLUE, YELLOW}
        for color, color_tokens in tokens.items():
            assert [t.slot for t in color_tokens] == [0, 1, 2, 3]
            for t in color_tokens:
                assert t.color == color
                assert t.position == -1
                assert t.status == TokenStatus.HOME


class TestDice:
    """Tests for the biased die."""

    def test_range(self):
        rng = random.Random(0)
        for _ in range(1000):
            assert 1 <= roll_dice(rng) <= 6

    def test_bias_forces_six(self):
        """Below the bias threshold the roll is always 6."""
        assert roll_dice(FixedBiasRng(0.1)) == 6

    def test_fair_roll_above_bias(self):
        """Above the threshold the fair die decides."""
        assert roll_dice(FixedBiasRng(0.5)) == 1

    def test_distribution(self):
        """P(6) is about 1/3, every other face about 0.133."""
        rng = random.Random(12345)
        n = 60_000
        counts = Counter(roll_dice(rng) for _ in range(n))

        assert counts[6] / n == pytest.approx(0.2 + 0.8 / 6, abs=0.01)
        for face in range(1, 6):
            assert counts[face] / n == pytest.approx(0.8 / 6, abs=0.01)


class TestIsValidMove:
    """Tests for move legality."""

    def test_exit_home_needs_six(self, two_player_match):
        state = two_player_match
        assert is_valid_move(state, "alice", 0, 6)
        for steps in range(1, 6):
            assert not is_valid_move(state, "alice", 0, steps)

    def test_not_current_player(self, two_player_match):
        """Only the player on turn may move."""
        assert not is_valid_move(two_player_match, "bob", 0, 6)

    def test_unknown_player(self, two_player_match):
        assert not is_valid_move(two_player_match, "mallory", 0, 6)

    def test_finished_token(self, two_player_match):
        two_player_match.tokens[RED][0].position = FINISH_POSITION
        assert not is_valid_move(two_player_match, "alice", 0, 1)

    def test_exact_finish(self, two_player_match):
        """Landing exactly on 57 is allowed, overshooting is not."""
        two_player_match.tokens[RED][0].position = 54
        assert is_valid_move(two_player_match, "alice", 0, 3)
        assert not is_valid_move(two_player_match, "alice", 0, 4)

    def test_active_token_any_roll(self, two_player_match):
        two_player_match.tokens[RED][1].position = 20
        for steps in range(1, 7):
            assert is_valid_move(two_player_match, "alice", 1, steps)

    @pytest.mark.parametrize("slot", [-1, 4, 99, None, "0", 1.0, True])
    def test_malformed_slot(self, two_player_match, slot):
        """Bad slot indexes are rejected, not raised."""
        assert not is_valid_move(two_player_match, "alice", slot, 6)


class TestCanPlayerMove:
    """Tests for move availability."""

    def test_all_home_without_six(self, two_player_match):
        assert not can_player_move(two_player_match, "alice", 3)
        assert valid_moves(two_player_match, "alice", 3) == []

    def test_all_home_with_six(self, two_player_match):
        assert can_player_move(two_player_match, "alice", 6)
        assert valid_moves(two_player_match, "alice", 6) == [0, 1, 2, 3]

    def test_only_some_tokens(self, two_player_match):
        tokens = two_player_match.tokens[RED]
        tokens[0].position = 56
        tokens[1].position = 10
        tokens[2].position = FINISH_POSITION
        assert valid_moves(two_player_match, "alice", 2) == [1]


class TestApplyMove:
    """Tests for move application."""

    def test_exit_home(self, two_player_match):
        """A 6 takes a home token to position 0 and keeps the turn."""
        state = two_player_match
        state.dice_value = 6
        state.waiting_for_move = True

        apply_move(state, "alice", 0, 6)

        token = state.tokens[RED][0]
        assert token.position == 0
        assert token.status == TokenStatus.ACTIVE
        assert state.current_player_index == 0
        assert state.dice_value is None
        assert not state.waiting_for_move

    def test_advance(self, two_player_match):
        state = two_player_match
        state.tokens[RED][0].position = 5

        apply_move(state, "alice", 0, 4)

        assert state.tokens[RED][0].position == 9
        assert state.current_player_index == 1

    def test_enter_home_stretch(self, two_player_match):
        state = two_player_match
        state.tokens[RED][0].position = 49

        apply_move(state, "alice", 0, 5)

        assert state.tokens[RED][0].position == 54
        assert state.tokens[RED][0].status == TokenStatus.ACTIVE

    def test_finish_token(self, two_player_match):
        """Landing on 57 finishes the token but not the game."""
        state = two_player_match
        state.tokens[RED][0].position = 52

        apply_move(state, "alice", 0, 5)

        assert state.tokens[RED][0].status == TokenStatus.FINISHED
        assert state.status == MatchStatus.IN_PROGRESS
        assert state.winner is None

    def test_win(self, two_player_match):
        """Finishing the fourth token ends the match with no turn advance."""
        state = two_player_match
        tokens = state.tokens[RED]
        for t in tokens[:3]:
            t.position = FINISH_POSITION
        tokens[3].position = 55
        state.dice_value = 2
        state.waiting_for_move = True

        apply_move(state, "alice", 3, 2)

        assert state.status == MatchStatus.FINISHED
        assert state.winner == RED
        assert state.dice_value is None
        assert not state.waiting_for_move
        assert state.current_player_index == 0

    def test_invalid_move_is_noop(self, two_player_match):
        """Moves that fail validation leave the state untouched."""
        state = two_player_match
        state.dice_value = 3
        before = state.clone()

        apply_move(state, "alice", 0, 3)
        apply_move(state, "bob", 0, 6)
        apply_move(state, "alice", 9, 6)

        assert state == before

    def test_never_past_finish(self, two_player_match):
        """No sequence of applied moves goes beyond 57."""
        state = two_player_match
        state.players = state.players[:1]
        token = state.tokens[RED][0]
        for start in range(0, FINISH_POSITION):
            for steps in range(1, 7):
                token.position = start
                apply_move(state, "alice", 0, steps)
                assert token.position <= FINISH_POSITION

    def test_status_consistent_after_moves(self, two_player_match):
        state = two_player_match
        state.tokens[RED][0].position = 50
        apply_move(state, "alice", 0, 1)
        for tokens in state.tokens.values():
            for t in tokens:
                if t.position == -1:
                    assert t.status == TokenStatus.HOME
                elif t.position == FINISH_POSITION:
                    assert t.status == TokenStatus.FINISHED
                else:
                    assert t.status == TokenStatus.ACTIVE


class TestCapture:
    """Tests for captures."""

    def test_capture_on_shared_square(self, two_player_match):
        """Red landing on absolute 10 sends green's token home."""
        state = two_player_match
        state.tokens[RED][0].position = 10
        state.tokens[RED][1].position = 7
        state.tokens[GREEN][0].position = 49  # absolute 10

        apply_move(state, "alice", 1, 3)

        assert state.tokens[RED][1].position == 10
        assert state.tokens[GREEN][0].position == -1
        assert state.tokens[GREEN][0].status == TokenStatus.HOME
        assert state.last_captures == [(GREEN, 0)]

    def test_no_capture_on_safe_square(self, two_player_match):
        """Safe squares protect whoever stands on them."""
        state = two_player_match
        state.tokens[RED][0].position = 5
        state.tokens[GREEN][0].position = 47  # absolute 8

        apply_move(state, "alice", 0, 3)

        assert state.tokens[RED][0].position == 8
        assert state.tokens[GREEN][0].position == 47
        assert state.last_captures == []

    def test_no_capture_on_entry_square(self, two_player_match):
        """Green's entry square is safe for green's tokens."""
        state = two_player_match
        state.tokens[RED][0].position = 9
        state.tokens[GREEN][0].position = 0  # absolute 13

        apply_move(state, "alice", 0, 4)

        assert state.tokens[GREEN][0].position == 0

    def test_stacked_tokens_all_captured(self, make_match):
        """Every opposing token on the square goes home at once."""
        state = make_match(names=("Alice", "Bob", "Cara", "Dan"))
        state.tokens[RED][0].position = 6
        state.tokens[GREEN][0].position = 49
        state.tokens[GREEN][2].position = 49
        state.tokens[BLUE][1].position = 23   # (23 + 39) % 52 == 10
        state.tokens[YELLOW][3].position = 36  # (36 + 26) % 52 == 10

        apply_move(state, "alice", 0, 4)

        assert state.tokens[GREEN][0].is_home
        assert state.tokens[GREEN][2].is_home
        assert state.tokens[BLUE][1].is_home
        assert state.tokens[YELLOW][3].is_home
        assert len(state.last_captures) == 4

    def test_own_tokens_never_captured(self, two_player_match):
        state = two_player_match
        state.tokens[RED][0].position = 10
        state.tokens[RED][1].position = 6

        apply_move(state, "alice", 1, 4)

        assert state.tokens[RED][0].position == 10
        assert state.tokens[RED][1].position == 10

    def test_home_stretch_not_captured(self, two_player_match):
        """Tokens off the shared loop cannot be hit."""
        state = two_player_match
        state.players.reverse()  # Bob (green) to play
        state.tokens[GREEN][0].position = 14
        state.tokens[RED][0].position = 53

        apply_move(state, "bob", 0, 3)

        assert state.tokens[RED][0].position == 53

    def test_capture_with_six_keeps_turn(self, two_player_match):
        state = two_player_match
        state.tokens[RED][0].position = 4
        state.tokens[GREEN][0].position = 49

        apply_move(state, "alice", 0, 6)

        assert state.tokens[GREEN][0].is_home
        assert state.current_player_index == 0


class TestTurnAdvance:
    """Tests for the extra-turn rule."""

    @pytest.mark.parametrize("steps", [1, 2, 3, 4, 5])
    def test_non_six_advances(self, two_player_match, steps):
        advance_turn(two_player_match, steps)
        assert two_player_match.current_player_index == 1

    def test_six_keeps_turn(self, two_player_match):
        advance_turn(two_player_match, 6)
        assert two_player_match.current_player_index == 0

    def test_wraps_around(self, make_match):
        state = make_match(names=("Alice", "Bob", "Cara"))
        state.current_player_index = 2
        advance_turn(state, 1)
        assert state.current_player_index == 0
