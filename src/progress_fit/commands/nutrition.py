"""Nutrition logging commands."""

from datetime import date, datetime

import click

from ..db import NutritionEntryRepository, get_db_path
from ..models.nutrition import MealType, NutritionEntry
from ..models.nutrition_metric import NutritionMetricType
from ..services.nutrition_service import NutritionService
from ..services.nutrition_summary import MetricProgress
from .base import (
    async_command,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_amount,
    format_table,
    load_preferences,
    require_profile,
)

MEAL_CHOICES = click.Choice([m.value for m in MealType])


def _service() -> NutritionService:
    return NutritionService(NutritionEntryRepository(get_db_path()))


def _parse_nutrients(values: tuple[str, ...]) -> dict[NutritionMetricType, float]:
    """Parse repeated ``metric=amount`` options."""
    nutrients = {}
    for item in values:
        name, sep, amount = item.partition("=")
        if not sep:
            raise click.BadParameter(f"expected metric=amount, got '{item}'")
        try:
            metric = NutritionMetricType(name.strip())
            nutrients[metric] = float(amount)
        except ValueError:
            raise click.BadParameter(f"invalid nutrient '{item}'") from None
    return nutrients


def _entry_row(entry: NutritionEntry) -> list[str]:
    return [
        entry.id,
        entry.display_name[:30],
        entry.meal_type.display_name,
        format_amount(entry.quantity),
        format_amount(entry.total_calories),
        entry.log_method.display_name,
    ]


def _progress_line(progress: MetricProgress) -> str:
    unit = progress.metric.short_unit
    return (
        f"  {progress.label:<20} {format_amount(progress.display_value, unit):>10}"
        f"   ({format_amount(progress.consumed, unit)} / {format_amount(progress.target, unit)})"
    )


@click.group()
@click.pass_context
def nutrition(ctx):
    """Log food and review daily nutrition."""
    ensure_initialized(ctx)


@nutrition.command()
@click.argument("food_name")
@click.option("--calories", type=float, required=True, help="Per serving")
@click.option("--protein", type=float, required=True, help="Grams per serving")
@click.option("--carbs", "carbohydrates", type=float, required=True, help="Grams per serving")
@click.option("--fat", type=float, required=True, help="Grams per serving")
@click.option("--serving", "serving_size", default="1 serving", show_default=True)
@click.option("--quantity", "-q", type=float, default=1.0, show_default=True)
@click.option("--meal", type=MEAL_CHOICES, default=MealType.OTHER.value, show_default=True)
@click.option("--brand")
@click.option("--fiber", type=float)
@click.option("--sugar", type=float)
@click.option("--sodium", type=float, help="Milligrams per serving")
@click.option("--nutrient", "-n", multiple=True, help="Extra metric, e.g. -n zinc=5")
@click.option("--notes")
@click.pass_context
@async_command
async def log(
    ctx,
    food_name,
    calories,
    protein,
    carbohydrates,
    fat,
    serving_size,
    quantity,
    meal,
    brand,
    fiber,
    sugar,
    sodium,
    nutrient,
    notes,
):
    """Log a food by hand."""
    profile = await require_profile(ctx)
    entry = await _service().log_manual(
        food_name,
        calories=calories,
        protein=protein,
        carbohydrates=carbohydrates,
        fat=fat,
        serving_size=serving_size,
        quantity=quantity,
        meal_type=MealType(meal),
        brand_name=brand,
        fiber=fiber,
        sugar=sugar,
        sodium=sodium,
        extended_nutrients=_parse_nutrients(nutrient),
        notes=notes,
        profile_id=profile.id,
    )
    echo_success(
        f"Logged {entry.display_name} ({format_amount(entry.total_calories)} cal)"
    )
    click.echo(f"ID: {entry.id}")


@nutrition.command()
@click.argument("entry_id")
@click.option("--quantity", "-q", type=float, help="Defaults to the original quantity")
@click.option("--meal", type=MEAL_CHOICES, help="Defaults to the original meal")
@click.pass_context
@async_command
async def again(ctx, entry_id: str, quantity: float | None, meal: str | None):
    """Log an earlier entry again, as of now."""
    entry = await _service().log_duplicate(
        entry_id, quantity=quantity, meal_type=MealType(meal) if meal else None
    )
    echo_success(f"Logged {entry.display_name} again")
    click.echo(f"ID: {entry.id}")


@nutrition.command("quantity")
@click.argument("entry_id")
@click.argument("quantity", type=float)
@click.pass_context
@async_command
async def set_quantity(ctx, entry_id: str, quantity: float):
    """Change how many servings an entry counts for."""
    entry = await _service().update_quantity(entry_id, quantity)
    echo_success(f"{entry.display_name}: {format_amount(entry.quantity)} serving(s)")


@nutrition.command()
@click.argument("entry_id")
@click.option("--remove", is_flag=True, help="Remove from favorites instead")
@click.pass_context
@async_command
async def favorite(ctx, entry_id: str, remove: bool):
    """Mark an entry as a favorite."""
    entry = await _service().set_favorite(entry_id, not remove)
    if entry.is_favorite:
        echo_success(f"{entry.display_name} added to favorites")
    else:
        echo_success(f"{entry.display_name} removed from favorites")


@nutrition.command()
@click.argument("entry_id")
@click.pass_context
@async_command
async def verify(ctx, entry_id: str):
    """Confirm an entry's nutrition facts."""
    entry = await _service().verify_entry(entry_id)
    echo_success(f"{entry.display_name} verified")


@nutrition.command()
@click.argument("entry_id")
@click.pass_context
@async_command
async def delete(ctx, entry_id: str):
    """Delete an entry."""
    await _service().delete_entry(entry_id)
    echo_success("Entry deleted")


@nutrition.command()
@click.option(
    "--date",
    "day",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Day to summarise (default: today)",
)
@click.pass_context
@async_command
async def day(ctx, day: datetime | None):
    """Show a day's entries and progress against daily targets."""
    profile = await require_profile(ctx)
    preferences = await load_preferences(profile)
    service = _service()

    if day is None:
        target_day: date = service.clock.now().astimezone(preferences.tz).date()
    else:
        target_day = day.date()

    summary = await service.daily_summary(target_day, preferences, profile_id=profile.id)

    click.echo()
    click.echo(click.style(f"Nutrition for {target_day.isoformat()}", bold=True))
    click.echo("=" * 50)

    if summary.entry_count == 0:
        echo_info("Nothing logged for this day.")
    else:
        for meal_type, entries in summary.meals.items():
            click.echo()
            click.echo(f"{meal_type.display_name} ({meal_type.time_range})")
            click.echo(
                format_table(
                    ["ID", "Food", "Meal", "Qty", "Cal", "Method"],
                    [_entry_row(e) for e in entries],
                )
            )
            for entry in entries:
                if entry.needs_verification:
                    echo_warning(f"{entry.display_name} needs verification")

    click.echo()
    click.echo("Daily targets:")
    for progress in summary.primary:
        click.echo(_progress_line(progress))
    if summary.secondary:
        click.echo()
        click.echo("Tracked nutrients:")
        for progress in summary.secondary:
            click.echo(_progress_line(progress))


@nutrition.command()
@click.pass_context
@async_command
async def favorites(ctx):
    """List favorite foods."""
    profile = await require_profile(ctx)
    found = await _service().list_favorites(profile_id=profile.id)
    if not found:
        echo_info("No favorites yet. Mark one with 'progress-fit nutrition favorite'")
        return

    click.echo()
    click.echo(
        format_table(
            ["ID", "Food", "Meal", "Qty", "Cal", "Method"],
            [_entry_row(e) for e in found],
        )
    )
