"""
Command-line front end for the blood-pressure log.

Usage:
    bp-monitor add --systolic 128 --diastolic 82 --heart-rate 70 --posture sitting
    bp-monitor import readings.csv
    bp-monitor export backup.json
    bp-monitor show --window 30 --sort systolic --desc --trend
    bp-monitor clear --yes

The history file comes from BP_DATA_FILE (see core.config).
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import get_args

from pydantic import ValidationError
from rich.bar import Bar
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adapters.codecs import CodecError, from_csv, from_json, to_csv, to_json
from adapters.presentation import (
    SortField,
    TimeSeries,
    headline,
    map_gauge,
    severity_color,
    severity_label,
    sort_history,
    time_series,
)
from adapters.storage import HistoryStore
from core.config import AppConfig, get_config
from core.domain.models import DayPart, DayPartAverage, EnrichedReading, Posture, PosturalPair
from core.logging_config import configure_logging
from core.services.aggregator import (
    bucket_by_day_part,
    filter_by_window,
    find_postural_pairs,
    latest,
    parse_time_window,
)

console = Console()

TREND_SCALE = 200


def _fmt_time(ts: datetime) -> str:
    return ts.astimezone().strftime("%Y-%m-%d %H:%M")


def history_table(readings: Sequence[EnrichedReading]) -> Table:
    """History rows in the order given."""
    table = Table(title="Reading history")
    for column in ("Time", "SBP", "DBP", "HR", "MAP", "PP", "Level", "Posture", "Orthostatic"):
        table.add_column(column)
    table.add_column("Symptoms")
    table.add_column("Medications")
    table.add_column("Note")

    for rec in readings:
        meds = ", ".join(f"{m.name} ({m.dose})" if m.dose else m.name for m in rec.medications)
        table.add_row(
            _fmt_time(rec.timestamp),
            str(rec.systolic),
            str(rec.diastolic),
            str(rec.heart_rate) if rec.heart_rate is not None else "",
            str(rec.mean_arterial_pressure),
            str(rec.pulse_pressure),
            f"[{severity_color(rec.severity_level)}]{severity_label(rec.severity_level)}[/]",
            rec.posture.value,
            "yes" if rec.orthostatic_flag else "",
            ", ".join(rec.symptoms),
            meds,
            rec.note,
        )
    return table


def posture_table(pairs: Sequence[PosturalPair]) -> Table:
    table = Table(title="Lying vs standing")
    for column in (
        "Lying time",
        "Lying SBP",
        "Lying DBP",
        "Standing time",
        "Standing SBP",
        "Standing DBP",
        "SBP drop",
        "DBP drop",
        "Orthostatic",
    ):
        table.add_column(column)

    for pair in pairs:
        table.add_row(
            _fmt_time(pair.lying.timestamp),
            str(pair.lying.systolic),
            str(pair.lying.diastolic),
            _fmt_time(pair.standing.timestamp),
            str(pair.standing.systolic),
            str(pair.standing.diastolic),
            str(pair.drop.systolic_drop),
            str(pair.drop.diastolic_drop),
            "yes" if pair.drop.orthostatic else "",
        )
    return table


def trend_table(series: TimeSeries) -> Table:
    """Chronological DBP..SBP range bars with heart rate alongside."""
    table = Table(title="Trend")
    table.add_column("Time")
    table.add_column("DBP..SBP", ratio=1)
    table.add_column("SBP/DBP")
    table.add_column("HR")

    for sbp, dbp, hr in zip(series.systolic, series.diastolic, series.heart_rate):
        table.add_row(
            _fmt_time(sbp.timestamp),
            Bar(TREND_SCALE, min(dbp.value or 0, TREND_SCALE), min(sbp.value or 0, TREND_SCALE)),
            f"{sbp.value}/{dbp.value}",
            str(hr.value) if hr.value is not None else "",
        )
    return table


def day_part_table(buckets: dict[DayPart, DayPartAverage]) -> Table:
    table = Table(title="Average by time of day")
    for column in ("Day part", "Readings", "Mean SBP", "Mean DBP"):
        table.add_column(column)
    for avg in buckets.values():
        table.add_row(
            avg.day_part.value,
            str(avg.count),
            f"{avg.systolic_avg:.1f}",
            f"{avg.diastolic_avg:.1f}",
        )
    return table


def _parse_medication(value: str) -> dict[str, str]:
    name, dose, at = (value.split(";") + ["", ""])[:3]
    return {"name": name, "dose": dose, "administeredAt": at}


def cmd_add(store: HistoryStore, args: argparse.Namespace) -> int:
    raw = {
        "timestamp": args.timestamp or datetime.now().astimezone().isoformat(),
        "systolic": args.systolic,
        "diastolic": args.diastolic,
        "heartRate": args.heart_rate,
        "posture": args.posture,
        "symptoms": args.symptom or [],
        "medications": [_parse_medication(m) for m in args.medication or []],
        "note": args.note,
    }
    try:
        rec = store.add(raw)
    except ValidationError as e:
        console.print(f"[red]Invalid reading:[/] {e}")
        return 2
    console.print(Panel(headline(rec), title="Added"))
    return 0


def cmd_import(store: HistoryStore, args: argparse.Namespace) -> int:
    path = Path(args.file)
    try:
        text = path.read_text(encoding="utf-8")
        raws = from_json(text) if path.suffix.lower() == ".json" else from_csv(text)
    except (OSError, UnicodeDecodeError, CodecError) as e:
        console.print(f"[red]Cannot import {path}:[/] {e}")
        return 2

    report = store.extend(raws)
    console.print(f"Imported {len(report.added)} readings, rejected {len(report.rejected)}.")
    for row, error in report.rejected:
        console.print(f"  row {row}: {error.splitlines()[0]}")
    return 0 if not report.rejected else 1


def cmd_export(store: HistoryStore, args: argparse.Namespace) -> int:
    path = Path(args.file)
    fmt = args.format or ("json" if path.suffix.lower() == ".json" else "csv")
    try:
        content = to_json(store.history) if fmt == "json" else to_csv(store.history)
    except CodecError as e:
        console.print(f"[red]Cannot export:[/] {e}")
        return 2
    path.write_text(content, encoding="utf-8")
    console.print(f"Exported {len(store.history)} readings to {path}")
    return 0


def cmd_show(store: HistoryStore, args: argparse.Namespace, config: AppConfig) -> int:
    history = store.history
    try:
        window = parse_time_window(args.window or config.analysis.default_time_window)
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        return 2

    console.print(Panel(headline(latest(history)), title="Latest reading"))
    gauge = map_gauge(latest(history))
    if gauge is not None:
        console.print(f"MAP [{gauge.color}]{gauge.value}[/] / {gauge.maximum}")

    readings = filter_by_window(history, window)
    if args.sort:
        rows = sort_history(readings, args.sort, descending=args.desc)
    else:
        rows = list(reversed(readings))
    console.print(history_table(rows))
    if args.trend:
        console.print(trend_table(time_series(history, window)))
    console.print(day_part_table(bucket_by_day_part(history)))

    pairs = find_postural_pairs(history, config.analysis.criteria())
    if pairs:
        console.print(posture_table(pairs))
    else:
        console.print("No lying/standing pairs recorded.")
    return 0


def cmd_clear(store: HistoryStore, args: argparse.Namespace) -> int:
    if not args.yes:
        console.print("Refusing to clear history without --yes")
        return 2
    store.clear()
    console.print("History cleared.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bp-monitor", description="Home blood-pressure log")
    parser.add_argument("--data-file", help="History file (defaults to BP_DATA_FILE)")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Record a reading")
    add.add_argument("--systolic", required=True)
    add.add_argument("--diastolic", required=True)
    add.add_argument("--heart-rate")
    add.add_argument("--timestamp", help="ISO-8601, defaults to now")
    add.add_argument("--posture", choices=[p.value for p in Posture], default="unspecified")
    add.add_argument("--symptom", action="append", help="Repeat for several symptoms")
    add.add_argument("--medication", action="append", help="name;dose;administeredAt")
    add.add_argument("--note", default="")

    imp = sub.add_parser("import", help="Import readings from CSV or JSON")
    imp.add_argument("file")

    exp = sub.add_parser("export", help="Export readings to CSV or JSON")
    exp.add_argument("file")
    exp.add_argument("--format", choices=["csv", "json"])

    show = sub.add_parser("show", help="Show latest reading, history and summaries")
    show.add_argument("--window", help="Days to show, or 'all'")
    show.add_argument(
        "--sort", choices=get_args(SortField), help="Sort the history table (default: newest first)"
    )
    show.add_argument("--desc", action="store_true", help="Sort descending")
    show.add_argument("--trend", action="store_true", help="Also draw the SBP/DBP trend")

    clear = sub.add_parser("clear", help="Delete all readings")
    clear.add_argument("--yes", action="store_true")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    configure_logging(config.logging)

    store = HistoryStore(args.data_file or config.storage.data_file, config.analysis.criteria())
    loaded = store.load()
    if loaded.is_err():
        console.print(f"[red]Cannot read history:[/] {loaded.unwrap_err()}")
        return 2

    if args.command == "add":
        return cmd_add(store, args)
    if args.command == "import":
        return cmd_import(store, args)
    if args.command == "export":
        return cmd_export(store, args)
    if args.command == "show":
        return cmd_show(store, args, config)
    return cmd_clear(store, args)


if __name__ == "__main__":
    sys.exit(main())
