"""Recurrence tests for the buffer/streak propagation engine."""

from datetime import date

import pytest

from conftest import FIRST_DAY, day
from services.challenge_config import ChallengeConfig
from services.propagation import DayState, PropagationEngine


def make_engine(habits=2, boost=7, default_buffer=1) -> PropagationEngine:
    return PropagationEngine(
        ChallengeConfig(
            boost_interval_days=boost,
            default_buffer_per_habit=default_buffer,
            first_challenge_date=FIRST_DAY,
            habit_count=habits,
        )
    )


def with_completion(state: DayState, completion: list) -> DayState:
    state.completion = completion
    return state


# =============================================================================
# SCENARIOS
# =============================================================================


class TestScenarios:
    def test_seed_day(self):
        seed = make_engine().seed_state(FIRST_DAY)
        assert seed.completion == [None, None]
        assert seed.buffer == [1, 1]
        assert (seed.current_streak, seed.highest_streak) == (0, 0)

    def test_one_miss_spends_buffer(self):
        engine = make_engine()
        day1 = with_completion(engine.seed_state(FIRST_DAY), [True, False])

        day2 = engine.next_state(day1)

        assert day2.day == day(2)
        assert day2.buffer == [1, 0]
        assert (day2.current_streak, day2.highest_streak) == (1, 1)

    def test_second_miss_on_empty_buffer_fails(self):
        engine = make_engine()
        day1 = with_completion(engine.seed_state(FIRST_DAY), [True, False])
        day2 = with_completion(engine.next_state(day1), [True, False])

        day3 = engine.next_state(day2)

        assert day3.current_streak == 0
        assert day3.highest_streak == 1
        assert day3.buffer == [1, 1]

    def test_boost_every_second_day_when_all_done(self):
        engine = make_engine(boost=2)
        state = with_completion(engine.seed_state(FIRST_DAY), [True, True])
        buffers = {}
        for _ in range(4):
            state = with_completion(engine.next_state(state), [True, True])
            buffers[state.current_streak] = state.buffer

        assert buffers[1] == [1, 1]
        assert buffers[2] == [2, 2]
        assert buffers[3] == [2, 2]
        assert buffers[4] == [3, 3]


# =============================================================================
# TRANSITION RULES
# =============================================================================


class TestTransitionRules:
    def test_boost_boundary_at_seven(self):
        engine = make_engine(boost=7)
        prev = DayState(day=day(7), completion=[True, False], buffer=[1, 1], current_streak=6, highest_streak=6)

        nxt = engine.next_state(prev)

        assert nxt.current_streak == 7
        # +1 boost for both, -1 for the miss on B
        assert nxt.buffer == [2, 1]

    def test_no_boost_off_boundary(self):
        engine = make_engine(boost=7)
        prev = DayState(day=day(8), completion=[True, True], buffer=[2, 2], current_streak=7, highest_streak=7)

        assert engine.next_state(prev).buffer == [2, 2]

    def test_failure_resets_every_habit(self):
        engine = make_engine(habits=3, default_buffer=2)
        prev = DayState(day=day(20), completion=[True, False, True], buffer=[3, 0, 5],
                        current_streak=5, highest_streak=9)

        nxt = engine.next_state(prev)

        assert nxt.current_streak == 0
        assert nxt.highest_streak == 9
        assert nxt.buffer == [2, 2, 2]

    def test_unset_counts_as_miss(self):
        engine = make_engine()
        prev = DayState(day=day(3), completion=[None, True], buffer=[0, 5], current_streak=2, highest_streak=2)

        assert engine.is_failed(prev)
        assert engine.next_state(prev).current_streak == 0

    def test_met_habit_with_empty_buffer_is_not_a_failure(self):
        engine = make_engine()
        prev = DayState(day=day(3), completion=[True, True], buffer=[0, 0], current_streak=2, highest_streak=4)

        nxt = engine.next_state(prev)

        assert nxt.buffer == [0, 0]
        assert (nxt.current_streak, nxt.highest_streak) == (3, 4)

    def test_negative_stored_buffer_clamps_to_zero(self):
        engine = make_engine()
        prev = DayState(day=day(2), completion=[True, True], buffer=[-1, 2], current_streak=0, highest_streak=0)

        assert engine.next_state(prev).buffer == [0, 2]

    def test_create_mode_starts_unset(self):
        engine = make_engine()
        prev = with_completion(engine.seed_state(FIRST_DAY), [True, True])

        assert engine.next_state(prev).completion == [None, None]

    def test_recompute_mode_keeps_stored_completion(self):
        engine = make_engine()
        prev = with_completion(engine.seed_state(FIRST_DAY), [True, True])

        assert engine.next_state(prev, [False, True]).completion == [False, True]

    @pytest.mark.parametrize("boost", [1, 3, 7])
    def test_highest_streak_never_below_current(self, boost):
        engine = make_engine(habits=3, boost=boost)
        pattern = [
            [True, True, True],
            [True, False, True],
            [None, True, True],
            [True, True, False],
            [False, False, False],
            [True, True, True],
        ]
        state = engine.seed_state(date(2023, 1, 1))
        for i in range(120):
            state.completion = pattern[(i * 5) % len(pattern)]
            state = engine.next_state(state)
            assert state.highest_streak >= state.current_streak
            assert all(b >= 0 for b in state.buffer)
