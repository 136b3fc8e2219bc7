"""Preferences and profile commands."""

import click

from ..db.repositories import PreferencesRepository, UserProfileRepository
from ..errors import ValidationError
from ..models.nutrition_metric import METRIC_PRESETS, NutritionMetricType
from ..models.preferences import MAX_SECONDARY_METRICS, WorkoutSortOption
from ..models.user_profile import FitnessGoal, FitnessLevel, SubscriptionTier, UnitSystem
from .base import (
    async_command,
    echo_success,
    echo_warning,
    ensure_initialized,
    load_preferences,
    require_profile,
)


@click.group()
@click.pass_context
def preferences(ctx):
    """View and change preferences.

    Preferences control workout list ordering, which nutrients the daily
    summary tracks, and the timezone used to group entries into days.
    """
    ensure_initialized(ctx)


@preferences.command()
@click.pass_context
@async_command
async def show(ctx):
    """Display current preferences."""
    profile = await require_profile(ctx)
    prefs = await load_preferences(profile)

    click.echo()
    click.echo(click.style(f"Preferences for {profile.name}", bold=True))
    click.echo("=" * 40)
    click.echo(prefs.get_summary())


@preferences.command()
@click.argument("option", type=click.Choice([o.value for o in WorkoutSortOption]))
@click.pass_context
@async_command
async def sort(ctx, option: str):
    """Set the default workout list ordering."""
    profile = await require_profile(ctx)
    prefs = await load_preferences(profile)
    prefs.workout_sort_option = WorkoutSortOption(option)
    await PreferencesRepository().upsert(prefs)
    echo_success(f"Workouts sorted by: {prefs.workout_sort_option.display_name}")


@preferences.command()
@click.argument("metric", type=click.Choice([m.value for m in NutritionMetricType]))
@click.pass_context
@async_command
async def toggle(ctx, metric: str):
    """Track or stop tracking a secondary nutrient."""
    profile = await require_profile(ctx)
    prefs = await load_preferences(profile)
    chosen = NutritionMetricType(metric)

    if not prefs.toggle_secondary_metric(chosen):
        echo_warning(
            f"Already tracking {MAX_SECONDARY_METRICS} nutrients. Remove one first."
        )
        return

    await PreferencesRepository().upsert(prefs)
    state = "Tracking" if chosen in prefs.secondary_metrics else "Stopped tracking"
    echo_success(f"{state} {chosen.display_name}")


@preferences.command()
@click.argument("name", type=click.Choice(list(METRIC_PRESETS)))
@click.pass_context
@async_command
async def preset(ctx, name: str):
    """Replace tracked nutrients with a preset."""
    profile = await require_profile(ctx)
    prefs = await load_preferences(profile)
    prefs.set_secondary_metrics(METRIC_PRESETS[name])
    await PreferencesRepository().upsert(prefs)
    echo_success(f"Applied preset '{name}'")


@preferences.command()
@click.argument("zone", required=False)
@click.pass_context
@async_command
async def timezone(ctx, zone: str | None):
    """Set the timezone for daily totals (omit to use the system zone)."""
    profile = await require_profile(ctx)
    prefs = await load_preferences(profile)
    prefs.set_timezone(zone)
    await PreferencesRepository().upsert(prefs)
    echo_success(f"Timezone: {zone or 'system local'}")


@preferences.command()
@click.pass_context
@async_command
async def reset(ctx):
    """Restore default preferences."""
    profile = await require_profile(ctx)
    prefs = await load_preferences(profile)
    prefs.reset_to_defaults()
    await PreferencesRepository().upsert(prefs)
    echo_success("Preferences reset to defaults")


@click.group()
@click.pass_context
def profile(ctx):
    """View and edit the user profile."""
    ensure_initialized(ctx)


@profile.command("show")
@click.pass_context
@async_command
async def show_profile(ctx):
    """Display the user profile."""
    user = await require_profile(ctx)
    click.echo()
    click.echo(user.get_summary())


@profile.command()
@click.option("--name")
@click.option("--email")
@click.option("--age", type=click.IntRange(0, 130))
@click.option("--goal", type=click.Choice([g.value for g in FitnessGoal]))
@click.option("--level", type=click.Choice([lv.value for lv in FitnessLevel]))
@click.option("--units", type=click.Choice([u.value for u in UnitSystem]))
@click.option("--plan", type=click.Choice([t.value for t in SubscriptionTier]))
@click.pass_context
@async_command
async def update(ctx, name, email, age, goal, level, units, plan):
    """Change profile fields."""
    user = await require_profile(ctx)
    if name is not None:
        if not name.strip():
            raise ValidationError("name must not be empty")
        user.name = name
    if email is not None:
        user.email = email
    if age is not None:
        user.age = age
    if goal is not None:
        user.fitness_goal = FitnessGoal(goal)
    if level is not None:
        user.fitness_level = FitnessLevel(level)
    if units is not None:
        user.preferred_units = UnitSystem(units)
    if plan is not None:
        user.subscription_tier = SubscriptionTier(plan)

    await UserProfileRepository().update(user)
    echo_success("Profile updated")
