"""Initialize project command."""

import click

from ..db import get_data_dir, get_db_path, init_db
from ..db.repositories import PreferencesRepository, UserProfileRepository
from ..models.preferences import Preferences
from ..models.user_profile import FitnessGoal, FitnessLevel, UnitSystem, UserProfile
from .base import async_command, echo_info, echo_success


@click.command()
@click.option("--name", default="Athlete", show_default=True, help="Profile name")
@click.option("--email", default="", help="Profile email")
@click.option(
    "--goal",
    type=click.Choice([g.value for g in FitnessGoal]),
    default=FitnessGoal.GENERAL_FITNESS.value,
    show_default=True,
)
@click.option(
    "--level",
    type=click.Choice([lv.value for lv in FitnessLevel]),
    default=FitnessLevel.BEGINNER.value,
    show_default=True,
)
@click.option(
    "--units",
    type=click.Choice([u.value for u in UnitSystem]),
    default=UnitSystem.METRIC.value,
    show_default=True,
)
@async_command
async def init(name: str, email: str, goal: str, level: str, units: str):
    """Initialize the progress-fit database and profile.

    This creates the data directory, initializes the SQLite database and
    stores a profile with default preferences. Running it again keeps the
    existing profile.
    """
    data_dir = get_data_dir()
    db_path = get_db_path(data_dir)

    echo_info(f"Initializing progress-fit in {data_dir}")

    await init_db(db_path)
    echo_success("Database initialized")

    profile_repo = UserProfileRepository(db_path)
    profile = await profile_repo.get_latest()
    if profile is None:
        profile = UserProfile(
            name=name,
            email=email,
            fitness_goal=FitnessGoal(goal),
            fitness_level=FitnessLevel(level),
            preferred_units=UnitSystem(units),
        )
        await profile_repo.create(profile)
        await PreferencesRepository(db_path).upsert(Preferences(profile_id=profile.id))
        echo_success(f"Profile created for {profile.name}")
    else:
        echo_info(f"Using existing profile: {profile.name}")

    click.echo()
    click.echo("progress-fit is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo('  progress-fit workouts create "Push Day"')
    click.echo('  progress-fit nutrition log "Oatmeal" --calories 150 --protein 5 --carbs 27 --fat 3')
    click.echo("  progress-fit nutrition day")
