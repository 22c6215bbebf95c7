"""CLI entry point for fruitfresh."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from .camera import FruitCamera, load_image
from .config import load_config
from .context import AppContext
from .errors import PersistenceFailure, ValidationFailure
from .logbook import parse_date_key
from .orchestrator import AnalysisSession
from .suggestion import daily_suggestion
from .views import (
    TABS,
    render_analysis,
    render_calendar,
    render_history,
    render_suggestion,
)
from .vision import create_backend, create_image_generator


def main(argv: list[str] | None = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="fruitfresh",
        description="Fruit Fresh: photograph a fruit, check its ripeness and log it",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="path to a TOML config file",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="show progress logging"
    )

    sub = parser.add_subparsers(dest="command")

    # analyze
    analyze_parser = sub.add_parser("analyze", help="capture and analyze a fruit")
    analyze_parser.add_argument("--image", type=str, help="use an existing image file")
    analyze_parser.add_argument(
        "--tab",
        choices=[*TABS, "all"],
        default="all",
        help="which part of the analysis to show",
    )
    analyze_parser.add_argument(
        "--recipe-image", type=str, default=None, metavar="FILE",
        help="save the generated recipe image to FILE",
    )
    analyze_parser.add_argument(
        "--log", action="store_true", help="log this fruit to your calendar"
    )
    analyze_parser.add_argument("--json", action="store_true", help="print JSON")

    # logbook
    logbook_parser = sub.add_parser("logbook", help="show the fruit calendar")
    logbook_parser.add_argument(
        "--month", type=str, default=None, metavar="YYYY-M",
        help="month to display (default: this month)",
    )
    logbook_parser.add_argument(
        "--date", type=str, default=None, metavar="YYYY-M-D",
        help="list the fruits logged on this day",
    )
    logbook_parser.add_argument(
        "--watch", action="store_true", help="keep the calendar updated live"
    )
    logbook_parser.add_argument(
        "--interval", type=float, default=2.0,
        help="seconds between checks in --watch mode",
    )

    # history
    sub.add_parser("history", help="list logged fruits, newest first")

    # zip
    zip_parser = sub.add_parser("zip", help="show or set your zip code")
    zip_parser.add_argument("code", nargs="?", default=None)

    # suggest
    sub.add_parser("suggest", help="show today's fruit suggestion")

    # remind
    remind_parser = sub.add_parser("remind", help="send a snack reminder")
    remind_parser.add_argument(
        "--daemon", action="store_true", help="run scheduled reminders"
    )

    # cameras
    sub.add_parser("cameras", help="list available cameras")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)

    if args.command == "cameras":
        _cmd_cameras()
        return

    context = AppContext.create(config)
    try:
        if context.needs_postal_code and args.command != "zip":
            print(
                "Tip: set your zip code with `fruitfresh zip 12345` "
                "for local suggestions.",
                file=sys.stderr,
            )

        match args.command:
            case "analyze":
                asyncio.run(_cmd_analyze(context, args))
            case "logbook":
                _cmd_logbook(context, args)
            case "history":
                print(render_history(context.fruit_logs.list_entries(context.user_id)))
            case "zip":
                _cmd_zip(context, args)
            case "suggest":
                print(render_suggestion(daily_suggestion(context.postal_code)))
            case "remind":
                _cmd_remind(context, args)
    except (ValueError, ImportError, RuntimeError, OSError) as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    finally:
        context.close()


def _cmd_cameras() -> None:
    cameras = FruitCamera.list_cameras()
    if not cameras:
        print("No cameras found.")
        return
    print(f"Available cameras: {len(cameras)}")
    for idx in cameras:
        print(f"  camera {idx}")


async def _cmd_analyze(context: AppContext, args) -> None:
    config = context.config

    if args.image:
        image, mime_type = load_image(args.image)
    else:
        camera = FruitCamera(
            camera_index=config.camera.index,
            save_dir=config.camera.save_dir,
        )
        print("📷 Capturing...")
        capture = camera.capture()
        image, mime_type = load_image(capture.image_path)

    session = AnalysisSession(
        create_backend(config), create_image_generator(config)
    )
    print("🔍 Analyzing your fruit...")
    analysis = await session.analyze(image, mime_type)
    if analysis is None:
        print(session.error, file=sys.stderr)
        sys.exit(1)

    tabs = TABS if args.tab == "all" else (args.tab,)
    if "more" in tabs or args.recipe_image:
        holder = await session.ensure_recipe_image()
        if args.recipe_image and holder is not None and holder.image is not None:
            Path(args.recipe_image).write_bytes(holder.image.data)
            print(f"   Recipe image saved: {args.recipe_image}")

    if args.json:
        payload = analysis.to_dict()
        holder = session.recipe_image
        if holder is not None and holder.image is not None:
            payload["recipe_image"] = holder.image.data_url
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print()
        print(
            render_analysis(
                analysis,
                tabs,
                session.recipe_image,
                color=sys.stdout.isatty(),
            )
        )

    if args.log:
        try:
            context.fruit_logs.append(analysis, context.user_id)
        except PersistenceFailure as e:
            print(f"Error logging fruit: {e}", file=sys.stderr)
            sys.exit(1)
        print(f"{analysis.fruit_name} has been logged to your calendar!")


def _cmd_logbook(context: AppContext, args) -> None:
    today = date.today()
    year, month = today.year, today.month
    if args.month:
        try:
            y, m = (int(part) for part in args.month.split("-"))
        except ValueError:
            raise ValueError(f"Invalid month: {args.month!r} (expected YYYY-M)")
        if not 1 <= m <= 12:
            raise ValueError(f"Invalid month: {args.month!r} (expected YYYY-M)")
        year, month = y, m
    if args.date:
        selected_day = parse_date_key(args.date)
        if not args.month:
            year, month = selected_day.year, selected_day.month

    def show(grouped) -> None:
        print(render_calendar(grouped, year, month, selected=args.date))
        print()

    subscription = context.fruit_logs.subscribe_calendar(show, context.user_id)
    with subscription:
        if not args.watch:
            return
        try:
            while True:
                time.sleep(args.interval)
                context.fruit_logs.refresh()
        except KeyboardInterrupt:
            pass


def _cmd_zip(context: AppContext, args) -> None:
    if args.code is None:
        print(context.postal_code or "Zip code not set.")
        return
    try:
        context.set_postal_code(args.code)
    except ValidationFailure as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    print(f"Zip code saved: {context.postal_code}")


def _cmd_remind(context: AppContext, args) -> None:
    from .notifier import DesktopNotifier
    from .scheduler import ReminderScheduler, send_reminder

    if not args.daemon:
        body = send_reminder(context.postal_code)
        print(body)
        return

    if not DesktopNotifier.is_supported():
        raise RuntimeError(
            "Desktop notifications are unavailable (notify-send not found)."
        )

    async def run() -> None:
        scheduler = ReminderScheduler(context)
        scheduler.start()
        if not scheduler.get_jobs():
            print(
                "Reminders are disabled; set [reminder] enabled = true.",
                file=sys.stderr,
            )
        try:
            await asyncio.Event().wait()
        finally:
            scheduler.stop()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass
