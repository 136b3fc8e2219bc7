"""Workout planning and logging commands."""

import click

from ..db import WorkoutRepository, get_db_path
from ..models.exercise import ExerciseType
from ..models.preferences import WorkoutSortOption
from ..models.workout import TransitionResult
from ..services.workout_service import WorkoutService
from .base import (
    async_command,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_table,
    load_preferences,
    require_profile,
)


def _service() -> WorkoutService:
    return WorkoutService(WorkoutRepository(get_db_path()))


def _report_transition(action: str, result: TransitionResult) -> None:
    if result.accepted:
        echo_success(f"Workout {action}: {result.previous.display_name} -> {result.current.display_name}")
    else:
        echo_warning(f"Cannot {action} a workout that is {result.current.display_name.lower()}")


@click.group()
@click.pass_context
def workouts(ctx):
    """Plan workouts and log sets.

    Workouts move from planned to in progress to completed (or cancelled).
    """
    ensure_initialized(ctx)


@workouts.command("create")
@click.argument("name")
@click.option("--notes", help="Free-form notes")
@click.pass_context
@async_command
async def create(ctx, name: str, notes: str | None):
    """Create a planned workout."""
    profile = await require_profile(ctx)
    workout = await _service().create_workout(name, notes=notes, profile_id=profile.id)
    echo_success(f"Created workout '{workout.name}'")
    click.echo(f"ID: {workout.id}")


@workouts.command("list")
@click.option(
    "--sort",
    "sort_option",
    type=click.Choice([o.value for o in WorkoutSortOption]),
    help="Ordering (defaults to the saved preference)",
)
@click.option("--search", "-s", help="Only workouts whose name contains this text")
@click.option("--templates/--no-templates", default=True, help="Include templates")
@click.pass_context
@async_command
async def list_workouts(ctx, sort_option: str | None, search: str | None, templates: bool):
    """List workouts."""
    profile = await require_profile(ctx)
    if sort_option is None:
        sort = (await load_preferences(profile)).workout_sort_option
    else:
        sort = WorkoutSortOption(sort_option)

    found = await _service().list_workouts(
        sort=sort, search=search, profile_id=profile.id, include_templates=templates
    )
    if not found:
        echo_info("No workouts found. Create one with 'progress-fit workouts create'")
        return

    headers = ["ID", "Name", "Status", "Sets", "Created"]
    rows = []
    for workout in found:
        name = workout.name[:30] + "..." if len(workout.name) > 30 else workout.name
        if workout.is_template:
            name += " (template)"
        rows.append([
            workout.id,
            name,
            workout.get_status_display(),
            f"{workout.completed_sets}/{workout.total_sets}",
            workout.created_at.strftime("%Y-%m-%d"),
        ])

    click.echo()
    click.echo(format_table(headers, rows))
    click.echo()
    click.echo(f"Total: {len(found)} workout(s)")


@workouts.command()
@click.argument("workout_id")
@click.pass_context
@async_command
async def show(ctx, workout_id: str):
    """Show a workout with its exercises and sets."""
    workout = await _service().get_workout(workout_id)

    click.echo()
    click.echo("=" * 60)
    click.echo(workout.get_summary().rstrip())
    click.echo("=" * 60)
    if workout.duration is not None:
        minutes = int(workout.duration // 60)
        click.echo(f"Duration: {minutes} min")
    for exercise in workout.exercises:
        click.echo(f"{exercise.name}: {exercise.id}")
        for s in exercise.sets:
            click.echo(f"  set {s.order + 1}: {s.id}")


@workouts.command("add-exercise")
@click.argument("workout_id")
@click.argument("name")
@click.option(
    "--type",
    "exercise_type",
    type=click.Choice([t.value for t in ExerciseType]),
    default=ExerciseType.RESISTANCE.value,
    show_default=True,
)
@click.option("--category", help="Muscle group or category")
@click.option("--rest", type=float, help="Rest between sets in seconds")
@click.pass_context
@async_command
async def add_exercise(
    ctx, workout_id: str, name: str, exercise_type: str, category: str | None, rest: float | None
):
    """Add an exercise to a workout."""
    exercise = await _service().add_exercise(
        workout_id, name, ExerciseType(exercise_type), category=category, rest_time=rest
    )
    echo_success(f"Added {exercise.name} (#{exercise.order + 1})")
    click.echo(f"ID: {exercise.id}")


@workouts.command("remove-exercise")
@click.argument("workout_id")
@click.argument("exercise_id")
@click.pass_context
@async_command
async def remove_exercise(ctx, workout_id: str, exercise_id: str):
    """Remove an exercise and all of its sets."""
    exercise = await _service().remove_exercise(workout_id, exercise_id)
    echo_success(f"Removed {exercise.name}")


@workouts.command("move-exercise")
@click.argument("workout_id")
@click.argument("position", type=int)
@click.argument("new_position", type=int)
@click.pass_context
@async_command
async def move_exercise(ctx, workout_id: str, position: int, new_position: int):
    """Move the exercise at POSITION to NEW_POSITION (both 1-based)."""
    exercise = await _service().move_exercise(workout_id, position - 1, new_position - 1)
    echo_success(f"Moved {exercise.name} to position {exercise.order + 1}")


@workouts.command("add-set")
@click.argument("workout_id")
@click.argument("exercise_id")
@click.option("--weight", type=float)
@click.option("--reps", type=int)
@click.option("--duration", type=float, help="Seconds")
@click.option("--distance", type=float)
@click.option("--notes")
@click.pass_context
@async_command
async def add_set(ctx, workout_id: str, exercise_id: str, weight, reps, duration, distance, notes):
    """Add a set, seeded with the exercise type's defaults."""
    exercise_set = await _service().add_set(
        workout_id,
        exercise_id,
        weight=weight,
        reps=reps,
        duration=duration,
        distance=distance,
        notes=notes,
    )
    echo_success(f"Added set {exercise_set.order + 1}")
    click.echo(f"ID: {exercise_set.id}")


@workouts.command("update-set")
@click.argument("workout_id")
@click.argument("set_id")
@click.option("--weight", type=float)
@click.option("--reps", type=int)
@click.option("--duration", type=float, help="Seconds")
@click.option("--distance", type=float)
@click.option("--notes")
@click.pass_context
@async_command
async def update_set(ctx, workout_id: str, set_id: str, weight, reps, duration, distance, notes):
    """Change the logged values of a set."""
    await _service().update_set(
        workout_id,
        set_id,
        weight=weight,
        reps=reps,
        duration=duration,
        distance=distance,
        notes=notes,
    )
    echo_success("Set updated")


@workouts.command("complete-set")
@click.argument("workout_id")
@click.argument("set_id")
@click.pass_context
@async_command
async def complete_set(ctx, workout_id: str, set_id: str):
    """Mark a set as done and start the rest timer."""
    service = _service()
    exercise_set = await service.complete_set(workout_id, set_id)
    exercise = exercise_set.exercise
    echo_success(f"Set {exercise_set.order + 1} completed")
    if exercise is not None and exercise.rest_time:
        click.echo(f"Rest: {exercise.remaining_rest_time(service.clock):.0f}s")


@workouts.command("reset-set")
@click.argument("workout_id")
@click.argument("set_id")
@click.pass_context
@async_command
async def reset_set(ctx, workout_id: str, set_id: str):
    """Mark a set as not done."""
    exercise_set = await _service().reset_set(workout_id, set_id)
    echo_success(f"Set {exercise_set.order + 1} reset")


@workouts.command("remove-set")
@click.argument("workout_id")
@click.argument("set_id")
@click.pass_context
@async_command
async def remove_set(ctx, workout_id: str, set_id: str):
    """Remove a set."""
    await _service().remove_set(workout_id, set_id)
    echo_success("Set removed")


@workouts.command()
@click.argument("workout_id")
@click.pass_context
@async_command
async def start(ctx, workout_id: str):
    """Start a planned workout."""
    _report_transition("start", await _service().start_workout(workout_id))


@workouts.command()
@click.argument("workout_id")
@click.pass_context
@async_command
async def complete(ctx, workout_id: str):
    """Complete an in-progress workout."""
    _report_transition("complete", await _service().complete_workout(workout_id))


@workouts.command()
@click.argument("workout_id")
@click.pass_context
@async_command
async def cancel(ctx, workout_id: str):
    """Cancel an in-progress workout."""
    _report_transition("cancel", await _service().cancel_workout(workout_id))


@workouts.command("template")
@click.argument("workout_id")
@click.argument("name")
@click.pass_context
@async_command
async def save_template(ctx, workout_id: str, name: str):
    """Save a copy of a workout as a reusable template."""
    template = await _service().duplicate_as_template(workout_id, name)
    echo_success(f"Template '{template.name}' saved")
    click.echo(f"ID: {template.id}")


@workouts.command()
@click.argument("workout_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, workout_id: str, yes: bool):
    """Delete a workout."""
    service = _service()
    workout = await service.get_workout(workout_id)

    if not yes:
        if not click.confirm(f"Delete workout '{workout.name}'?"):
            echo_info("Cancelled")
            return

    await service.delete_workout(workout_id)
    echo_success(f"Deleted workout '{workout.name}'")
