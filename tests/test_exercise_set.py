"""Tests for the ExerciseSet model."""

import gc
from datetime import datetime, timezone

import pytest

from progress_fit.clock import FixedClock
from progress_fit.errors import ValidationError
from progress_fit.models.exercise import Exercise, ExerciseType
from progress_fit.models.exercise_set import PROGRESSIVE_WEIGHT_INCREMENT, ExerciseSet


class TestCompletion:
    """Tests for complete/reset and the parent notification."""

    def test_complete_sets_timestamp_and_notifies_parent(self, clock):
        exercise = Exercise(name="Squat", type=ExerciseType.RESISTANCE)
        exercise_set = ExerciseSet(weight=100, reps=5)
        exercise.add_set(exercise_set)

        returned = exercise_set.complete(clock)

        assert exercise_set.is_completed
        assert exercise_set.completed_at == clock.now()
        assert exercise.last_set_completed_at == clock.now()
        assert returned == clock.now()

    def test_reset_reverses_only_the_set(self, clock):
        exercise = Exercise(name="Squat", type=ExerciseType.RESISTANCE)
        exercise_set = ExerciseSet(weight=100, reps=5)
        exercise.add_set(exercise_set)
        exercise_set.complete(clock)

        exercise_set.reset()

        assert not exercise_set.is_completed
        assert exercise_set.completed_at is None
        assert exercise.last_set_completed_at == clock.now()

    def test_complete_without_parent_does_not_raise(self, clock):
        exercise_set = ExerciseSet(reps=10)

        exercise_set.complete(clock)

        assert exercise_set.is_completed
        assert exercise_set.exercise is None

    def test_parent_reference_is_weak(self):
        exercise = Exercise(name="Row", type=ExerciseType.RESISTANCE)
        exercise_set = ExerciseSet(weight=50, reps=10)
        exercise.add_set(exercise_set)
        assert exercise_set.exercise is exercise

        del exercise
        gc.collect()

        assert exercise_set.exercise is None


class TestUpdate:
    """Tests for partial updates and validation."""

    def test_update_overwrites_only_supplied_fields(self):
        exercise_set = ExerciseSet(weight=60, reps=8, notes="easy")

        exercise_set.update(reps=10)

        assert exercise_set.reps == 10
        assert exercise_set.weight == 60
        assert exercise_set.notes == "easy"

    def test_update_accepts_zero(self):
        exercise_set = ExerciseSet(weight=60, reps=8)
        exercise_set.update(weight=0)
        assert exercise_set.weight == 0

    @pytest.mark.parametrize("field", ["weight", "reps", "duration", "distance"])
    def test_update_rejects_negative_values(self, field):
        exercise_set = ExerciseSet(weight=60, reps=8, duration=30, distance=1)

        with pytest.raises(ValidationError):
            exercise_set.update(**{field: -1})

        # Nothing was applied
        assert (exercise_set.weight, exercise_set.reps) == (60, 8)

    def test_constructor_rejects_negative_weight(self):
        with pytest.raises(ValidationError):
            ExerciseSet(weight=-5)

    def test_intensity_must_be_between_one_and_ten(self):
        ExerciseSet(duration=60, intensity_level=10)
        with pytest.raises(ValidationError):
            ExerciseSet(duration=60, intensity_level=11)

    def test_validation_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            ExerciseSet(reps=-1)

    @pytest.mark.parametrize("reps", [2.5, 0.1, True])
    def test_reps_must_be_whole(self, reps):
        with pytest.raises(ValidationError, match="whole number"):
            ExerciseSet(reps=reps)

    def test_fractional_reps_leave_the_set_untouched(self):
        exercise_set = ExerciseSet(weight=60, reps=8)

        with pytest.raises(ValidationError):
            exercise_set.update(weight=70, reps=7.5)
        with pytest.raises(ValidationError):
            exercise_set.set_targets(reps=4.5)

        assert (exercise_set.weight, exercise_set.reps) == (60, 8)
        assert exercise_set.target_reps is None
        exercise_set.update(reps=8.0)
        assert exercise_set.reps == 8

    def test_set_targets_and_hit_target(self):
        exercise_set = ExerciseSet(weight=100, reps=5)
        assert exercise_set.hit_target

        exercise_set.set_targets(weight=100, reps=6)
        assert not exercise_set.hit_target

        exercise_set.update(reps=6)
        assert exercise_set.hit_target


class TestDerived:
    """Tests for computed values."""

    def test_volume(self):
        assert ExerciseSet(weight=20, reps=3).volume == 60

    def test_formatted_duration(self):
        assert ExerciseSet(duration=305).formatted_duration == "05:05"
        assert ExerciseSet().formatted_duration == "00:00"


class TestDuplication:
    """Tests for duplicate and progressive sets."""

    def test_duplicate_copies_fields_with_new_identity(self, clock):
        original = ExerciseSet(
            weight=80, reps=5, order=2, target_weight=80, target_reps=5, notes="belt"
        )
        original.complete(clock)

        copy = original.duplicate(clock)

        assert copy.id != original.id
        assert copy.created_at == clock.now()
        assert not copy.is_completed
        assert (copy.weight, copy.reps, copy.order) == (80, 5, 2)
        assert (copy.target_weight, copy.target_reps, copy.notes) == (80, 5, "belt")

    def test_progressive_set_adds_weight(self):
        progressed = ExerciseSet(weight=100, reps=5).create_progressive_set()
        assert progressed.weight == 100 + PROGRESSIVE_WEIGHT_INCREMENT
        assert progressed.reps == 5

    def test_progressive_set_adds_rep_for_bodyweight(self):
        progressed = ExerciseSet(weight=0, reps=12).create_progressive_set()
        assert progressed.weight == 0
        assert progressed.reps == 13

    def test_progressive_set_is_stamped_by_the_clock(self, clock):
        progressed = ExerciseSet(weight=100, reps=5).create_progressive_set(clock)
        assert progressed.created_at == clock.now()

    def test_progressive_set_leaves_timed_sets_unchanged(self):
        progressed = ExerciseSet(duration=60).create_progressive_set()
        assert (progressed.weight, progressed.reps, progressed.duration) == (0, 0, 60)


class TestSerialization:
    """Tests for to_dict/from_dict."""

    def test_completion_survives_round_trip(self):
        done_at = datetime(2024, 3, 15, 12, 30, tzinfo=timezone.utc)
        exercise_set = ExerciseSet(weight=40, reps=12, average_heart_rate=130)
        exercise_set.complete(FixedClock(done_at))

        restored = ExerciseSet.from_dict(exercise_set.to_dict())

        assert restored.id == exercise_set.id
        assert restored.completed_at == done_at
        assert restored.is_completed
        assert restored.average_heart_rate == 130
