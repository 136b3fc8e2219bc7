"""CLI entry point for progress-fit."""

import click

from . import __version__
from .commands import init, nutrition, preferences, profile, serve, workouts
from .commands.base import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="progress-fit")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def main(verbose: bool):
    """progress-fit: workout and nutrition tracking.

    Plan workouts, log sets and food, and see how the day's intake compares
    with recommended targets.

    Example usage:

        # Initialize the project
        progress-fit init --name "Sam"

        # Plan and run a workout
        progress-fit workouts create "Push Day"
        progress-fit workouts add-exercise <workout-id> "Bench Press"
        progress-fit workouts start <workout-id>

        # Log food and check the day
        progress-fit nutrition log "Greek Yogurt" --calories 100 --protein 17 --carbs 6 --fat 0
        progress-fit nutrition day
    """
    configure_logging(verbose)


# Register commands
main.add_command(init)
main.add_command(workouts)
main.add_command(nutrition)
main.add_command(preferences)
main.add_command(profile)
main.add_command(serve)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
