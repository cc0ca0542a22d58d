"""Command line entrypoint: plan the coming days for a user from the local database."""

import argparse
from datetime import date

from logic.weather_resolver import describe_weather
from planner_app.app import WardrobePlannerApp


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Plan outfits for the coming days.")
    parser.add_argument("user_id")
    parser.add_argument("--start", type=date.fromisoformat, default=date.today())
    parser.add_argument("--days", type=int, default=7)
    parser.add_argument("--weekdays-only", action="store_true")
    parser.add_argument("--mix", choices=["saved-heavy", "balanced", "ai-heavy"])
    parser.add_argument("--existing", choices=["skip", "overwrite"])
    parser.add_argument("--location")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    app = WardrobePlannerApp()
    options = app.default_options(mix_strategy=args.mix, existing_policy=args.existing)
    result = app.plan_week(
        args.user_id,
        args.start,
        days=args.days,
        weekdays_only=args.weekdays_only,
        options=options,
        location=args.location,
    )
    for day in result.results:
        weather = describe_weather(day.weather) if day.weather else "existing entry kept"
        print(f"{day.target_date.isoformat()}  {day.outcome:<17} {','.join(day.item_ids)}  [{weather}]")
    counts = result.counts
    print(
        f"{counts.matched_saved} saved, {counts.generated_ai} generated, "
        f"{counts.skipped} skipped, {counts.overwritten} overwritten"
    )
    if result.error is not None:
        print(f"Stopped on {result.failed_date}: {result.error}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
