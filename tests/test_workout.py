"""Tests for the Workout model and its lifecycle."""

import pytest

from progress_fit.errors import ValidationError
from progress_fit.models.exercise import Exercise, ExerciseType
from progress_fit.models.exercise_set import ExerciseSet
from progress_fit.models.workout import TransitionResult, Workout, WorkoutStatus


class TestLifecycle:
    """Tests for start/complete/cancel."""

    def test_start_records_time(self, clock):
        workout = Workout(name="Legs")

        result = workout.start(clock)

        assert result == TransitionResult(True, WorkoutStatus.PLANNED, WorkoutStatus.IN_PROGRESS)
        assert workout.is_in_progress
        assert workout.started_at == clock.now()

    def test_full_session(self, clock):
        workout = Workout(name="Legs")
        workout.start(clock)
        clock.advance(3600)

        result = workout.complete(clock)

        assert result
        assert workout.is_completed
        assert workout.completed_at == clock.now()
        assert workout.duration == 3600

    def test_starting_twice_is_ignored(self, clock):
        workout = Workout(name="Legs")
        workout.start(clock)
        first_start = workout.started_at
        clock.advance(60)

        result = workout.start(clock)

        assert not result
        assert result.previous == result.current == WorkoutStatus.IN_PROGRESS
        assert workout.started_at == first_start

    def test_cancel_from_planned_is_ignored(self):
        workout = Workout(name="Legs")

        result = workout.cancel()

        assert not result.accepted
        assert workout.status == WorkoutStatus.PLANNED

    def test_complete_from_planned_is_ignored(self, clock):
        workout = Workout(name="Legs")
        assert not workout.complete(clock)
        assert workout.completed_at is None

    def test_cancel_in_progress(self, clock):
        workout = Workout(name="Legs")
        workout.start(clock)

        assert workout.cancel()
        assert workout.status == WorkoutStatus.CANCELLED
        assert workout.completed_at is None
        assert workout.duration is None

    @pytest.mark.parametrize("final", [WorkoutStatus.COMPLETED, WorkoutStatus.CANCELLED])
    def test_terminal_states_accept_nothing(self, clock, final):
        workout = Workout(name="Legs", status=final)

        assert not workout.start(clock)
        assert not workout.complete(clock)
        assert not workout.cancel()
        assert workout.status == final
        assert final.is_terminal

    def test_status_display(self):
        assert Workout(name="x", status=WorkoutStatus.IN_PROGRESS).get_status_display() == "In Progress"


class TestExercises:
    """Tests for exercise ordering and lookups."""

    def test_remove_exercise_renumbers(self):
        exercises = [Exercise(name=n, type=ExerciseType.RESISTANCE) for n in "ABC"]
        workout = Workout(name="Full Body", exercises=exercises)

        assert workout.remove_exercise(exercises[0])

        assert [ex.name for ex in workout.exercises] == ["B", "C"]
        assert [ex.order for ex in workout.exercises] == [0, 1]
        assert exercises[0].workout is None

    def test_remove_unknown_exercise_is_a_no_op(self, sample_workout):
        stranger = Exercise(name="Stranger", type=ExerciseType.CARDIO)
        assert not sample_workout.remove_exercise(stranger)
        assert len(sample_workout.exercises) == 2

    def test_insert_exercise_restores_position(self, sample_workout):
        bench = sample_workout.exercises[0]
        sample_workout.remove_exercise(bench)

        sample_workout.insert_exercise(0, bench)

        assert sample_workout.exercises[0] is bench
        assert [ex.order for ex in sample_workout.exercises] == [0, 1]

    @pytest.mark.parametrize(
        "source, target, expected",
        [(0, 2, "BCAD"), (2, 0, "CABD"), (1, 1, "ABCD"), (3, 0, "DABC")],
    )
    def test_move_exercise_renumbers(self, source, target, expected):
        exercises = [Exercise(name=n, type=ExerciseType.RESISTANCE) for n in "ABCD"]
        workout = Workout(name="Full Body", exercises=exercises)

        moved = workout.move_exercise(source, target)

        assert moved is exercises[source]
        assert "".join(ex.name for ex in workout.exercises) == expected
        assert [ex.order for ex in workout.exercises] == [0, 1, 2, 3]
        assert moved.order == target

    def test_move_exercise_out_of_range(self, sample_workout):
        with pytest.raises(ValidationError):
            sample_workout.move_exercise(0, 2)
        with pytest.raises(ValidationError):
            Workout(name="Empty").move_exercise(0, 0)

        assert [ex.order for ex in sample_workout.exercises] == [0, 1]

    def test_find_set(self, sample_workout):
        run = sample_workout.exercises[1]
        target = run.sets[0]

        assert sample_workout.find_set(target.id) == (run, target)
        assert sample_workout.find_set("missing") is None
        assert sample_workout.exercise_by_id(run.id) is run


class TestTotals:
    """Tests for aggregate values."""

    def test_total_weight_counts_resistance_only(self, sample_workout):
        assert sample_workout.total_weight == 110

    def test_total_weight_ignores_weighted_cardio(self):
        workout = Workout(
            name="Sled",
            exercises=[
                Exercise(
                    name="Sled Push",
                    type=ExerciseType.CARDIO,
                    sets=[ExerciseSet(weight=100, reps=1, duration=30)],
                )
            ],
        )
        assert workout.total_weight == 0

    def test_completion_percentage(self, sample_workout, clock):
        assert sample_workout.completion_percentage == 0
        sample_workout.exercises[0].sets[0].complete(clock)

        assert sample_workout.completed_sets == 1
        assert sample_workout.total_sets == 3
        assert sample_workout.completion_percentage == pytest.approx(100 / 3)

    def test_completion_percentage_without_sets(self):
        assert Workout(name="Empty").completion_percentage == 0


class TestTemplates:
    """Tests for duplicate_as_template."""

    def test_template_is_a_fresh_deep_copy(self, sample_workout, clock):
        sample_workout.start(clock)
        sample_workout.exercises[0].sets[0].complete(clock)

        clock.advance(days=1)
        template = sample_workout.duplicate_as_template("Push Template", clock)

        assert template.is_template
        assert template.template_id == sample_workout.id
        assert template.name == "Push Template"
        assert template.notes == "Heavy week"
        assert template.status == WorkoutStatus.PLANNED
        assert template.started_at is None
        assert [ex.name for ex in template.exercises] == ["Bench Press", "Treadmill"]
        assert template.completed_sets == 0
        assert template.total_sets == 3

        original_ids = {ex.id for ex in sample_workout.exercises}
        assert original_ids.isdisjoint(ex.id for ex in template.exercises)
        assert all(ex.workout is template for ex in template.exercises)
        stamps = [template.created_at] + [ex.created_at for ex in template.exercises]
        stamps += [s.created_at for ex in template.exercises for s in ex.sets]
        assert set(stamps) == {clock.now()}


class TestSerialization:
    """Tests for to_dict/from_dict and the summary."""

    def test_round_trip(self, sample_workout, clock):
        sample_workout.start(clock)
        sample_workout.exercises[0].sets[1].complete(clock)

        restored = Workout.from_dict(sample_workout.to_dict())

        assert restored.id == sample_workout.id
        assert restored.status == WorkoutStatus.IN_PROGRESS
        assert restored.started_at == clock.now()
        assert restored.total_weight == 110
        assert restored.completed_sets == 1
        assert restored.exercises[0].last_set_completed_at == clock.now()

    def test_summary(self, sample_workout):
        summary = sample_workout.get_summary()

        assert "Workout: Push Day [Planned]" in summary
        assert "Total weight: 110" in summary
        assert "1. Bench Press (Resistance)" in summary
        assert "[ ] Set 2: 20 x 3" in summary
        assert "10:00, 1.5" in summary
