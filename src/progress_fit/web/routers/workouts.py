"""Workout routes."""

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel

from ...models.exercise import Exercise, ExerciseType
from ...models.exercise_set import ExerciseSet
from ...models.preferences import WorkoutSortOption
from ...models.workout import TransitionResult, Workout
from ...services.workout_service import WorkoutService

router = APIRouter(prefix="/workouts", tags=["workouts"])


def get_service(request: Request) -> WorkoutService:
    """Get the workout service from app state."""
    return request.app.state.workout_service


class WorkoutCreate(BaseModel):
    name: str
    notes: str | None = None
    profile_id: int | None = None


class TemplateCreate(BaseModel):
    name: str


class ExerciseCreate(BaseModel):
    name: str
    type: ExerciseType = ExerciseType.RESISTANCE
    category: str | None = None
    notes: str | None = None
    rest_time: float | None = None


class ExerciseMove(BaseModel):
    from_index: int
    to_index: int


class SetValues(BaseModel):
    """Set fields; anything left out keeps its current value."""

    weight: float | None = None
    reps: int | None = None
    duration: float | None = None
    distance: float | None = None
    notes: str | None = None


class SetCreate(SetValues):
    target_weight: float | None = None
    target_reps: int | None = None


def set_payload(exercise_set: ExerciseSet) -> dict:
    data = exercise_set.to_dict()
    data["is_completed"] = exercise_set.is_completed
    data["volume"] = exercise_set.volume
    data["hit_target"] = exercise_set.hit_target
    return data


def exercise_payload(exercise: Exercise) -> dict:
    data = exercise.to_dict()
    data["sets"] = [set_payload(s) for s in exercise.sets]
    data["total_volume"] = exercise.total_volume
    data["total_duration"] = exercise.total_duration
    data["completed_sets_count"] = exercise.completed_sets_count
    data["is_completed"] = exercise.is_completed
    return data


def workout_payload(workout: Workout) -> dict:
    """Stored fields plus the derived totals."""
    data = workout.to_dict()
    data["exercises"] = [exercise_payload(ex) for ex in workout.exercises]
    data["duration"] = workout.duration
    data["total_sets"] = workout.total_sets
    data["completed_sets"] = workout.completed_sets
    data["total_weight"] = workout.total_weight
    data["completion_percentage"] = workout.completion_percentage
    return data


def transition_payload(result: TransitionResult, workout: Workout) -> dict:
    return {
        "accepted": result.accepted,
        "previous": result.previous.value,
        "current": result.current.value,
        "workout": workout_payload(workout),
    }


@router.post("", status_code=201)
async def create_workout(body: WorkoutCreate, service: WorkoutService = Depends(get_service)):
    workout = await service.create_workout(
        body.name, notes=body.notes, profile_id=body.profile_id
    )
    return workout_payload(workout)


@router.get("")
async def list_workouts(
    sort: WorkoutSortOption = WorkoutSortOption.OFF,
    search: str | None = None,
    profile_id: int | None = None,
    service: WorkoutService = Depends(get_service),
):
    """List workouts, optionally filtered by name and sorted."""
    found = await service.list_workouts(sort=sort, search=search, profile_id=profile_id)
    return [workout_payload(w) for w in found]


@router.get("/{workout_id}")
async def get_workout(workout_id: str, service: WorkoutService = Depends(get_service)):
    return workout_payload(await service.get_workout(workout_id))


@router.delete("/{workout_id}", status_code=204)
async def delete_workout(workout_id: str, service: WorkoutService = Depends(get_service)):
    await service.delete_workout(workout_id)
    return Response(status_code=204)


@router.post("/{workout_id}/start")
async def start_workout(workout_id: str, service: WorkoutService = Depends(get_service)):
    result = await service.start_workout(workout_id)
    return transition_payload(result, await service.get_workout(workout_id))


@router.post("/{workout_id}/complete")
async def complete_workout(workout_id: str, service: WorkoutService = Depends(get_service)):
    result = await service.complete_workout(workout_id)
    return transition_payload(result, await service.get_workout(workout_id))


@router.post("/{workout_id}/cancel")
async def cancel_workout(workout_id: str, service: WorkoutService = Depends(get_service)):
    result = await service.cancel_workout(workout_id)
    return transition_payload(result, await service.get_workout(workout_id))


@router.post("/{workout_id}/template", status_code=201)
async def save_as_template(
    workout_id: str, body: TemplateCreate, service: WorkoutService = Depends(get_service)
):
    template = await service.duplicate_as_template(workout_id, body.name)
    return workout_payload(template)


@router.post("/{workout_id}/exercises", status_code=201)
async def add_exercise(
    workout_id: str, body: ExerciseCreate, service: WorkoutService = Depends(get_service)
):
    exercise = await service.add_exercise(
        workout_id,
        body.name,
        body.type,
        category=body.category,
        notes=body.notes,
        rest_time=body.rest_time,
    )
    return exercise_payload(exercise)


@router.post("/{workout_id}/exercises/move")
async def move_exercise(
    workout_id: str, body: ExerciseMove, service: WorkoutService = Depends(get_service)
):
    """Reorder an exercise; returns the workout in its new order."""
    await service.move_exercise(workout_id, body.from_index, body.to_index)
    return workout_payload(await service.get_workout(workout_id))


@router.delete("/{workout_id}/exercises/{exercise_id}", status_code=204)
async def remove_exercise(
    workout_id: str, exercise_id: str, service: WorkoutService = Depends(get_service)
):
    await service.remove_exercise(workout_id, exercise_id)
    return Response(status_code=204)


@router.post("/{workout_id}/exercises/{exercise_id}/sets", status_code=201)
async def add_set(
    workout_id: str,
    exercise_id: str,
    body: SetCreate,
    service: WorkoutService = Depends(get_service),
):
    exercise_set = await service.add_set(workout_id, exercise_id, **body.model_dump())
    return set_payload(exercise_set)


@router.patch("/{workout_id}/sets/{set_id}")
async def update_set(
    workout_id: str,
    set_id: str,
    body: SetValues,
    service: WorkoutService = Depends(get_service),
):
    exercise_set = await service.update_set(workout_id, set_id, **body.model_dump())
    return set_payload(exercise_set)


@router.post("/{workout_id}/sets/{set_id}/complete")
async def complete_set(
    workout_id: str, set_id: str, service: WorkoutService = Depends(get_service)
):
    exercise_set = await service.complete_set(workout_id, set_id)
    data = set_payload(exercise_set)
    exercise = exercise_set.exercise
    if exercise is not None:
        data["remaining_rest_time"] = exercise.remaining_rest_time(service.clock)
    return data


@router.post("/{workout_id}/sets/{set_id}/reset")
async def reset_set(workout_id: str, set_id: str, service: WorkoutService = Depends(get_service)):
    return set_payload(await service.reset_set(workout_id, set_id))


@router.delete("/{workout_id}/sets/{set_id}", status_code=204)
async def remove_set(workout_id: str, set_id: str, service: WorkoutService = Depends(get_service)):
    await service.remove_set(workout_id, set_id)
    return Response(status_code=204)
