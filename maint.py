#!/usr/bin/env python3
"""
Unified CLI for household maintenance tracking.

Commands:
  status         - Show which maintenance is overdue, due soon, or current
  subjects       - List subjects with an overall status
  topics         - List maintenance topics and their intervals
  add-subject    - Add a vehicle, house, boat, piece of equipment...
  add-topic      - Add a recurring maintenance topic to a subject
  complete       - Record that a topic was serviced
  update-usage   - Update a subject's current mileage or hours
  delete-subject - Delete a subject and all of its topics
  delete-topic   - Delete a single topic
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional, Tuple

from models import (
    DurationType,
    MaintenanceStatus,
    MaintenanceTopic,
    Subject,
    SubjectType,
    Urgency,
    YamlRepository,
    calc_due_date,
    calc_due_usage,
)

StatusRow = Tuple[Subject, MaintenanceTopic, MaintenanceStatus]

# =============================================================================
# Formatting helpers
# =============================================================================


def format_reading(value: Optional[float]) -> str:
    """Format an odometer or hour-meter reading for display."""
    if value is None:
        return "-"
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,.1f}"


def format_percent(percent: Optional[float]) -> str:
    """Format percent remaining for display."""
    return f"{percent:.0f}%" if percent is not None else "-"


def format_last_done(topic: MaintenanceTopic) -> str:
    """Format the last completion, e.g. '2025-01-15 @ 50,000 mi'."""
    if not topic.last_completed_date:
        return "-"
    parts = [topic.last_completed_date[:10]]
    if topic.duration_type == DurationType.MILES and topic.last_completed_mileage is not None:
        parts.append(f"{format_reading(topic.last_completed_mileage)} mi")
    if topic.duration_type == DurationType.HOURS and topic.last_completed_hours is not None:
        parts.append(f"{format_reading(topic.last_completed_hours)} h")
    return " @ ".join(parts)


def format_due(topic: MaintenanceTopic) -> str:
    """Format when a topic is next due (date or reading)."""
    unit = topic.duration_type
    if unit in (DurationType.DAYS, DurationType.MONTHS):
        due = calc_due_date(topic.last_completed_date, topic.duration_value, unit)
        return due.isoformat() if due else "-"
    if unit == DurationType.MILES:
        due = calc_due_usage(topic.last_completed_mileage, topic.duration_value)
        return f"{format_reading(due)} mi" if due is not None else "-"
    if unit == DurationType.HOURS:
        due = calc_due_usage(topic.last_completed_hours, topic.duration_value)
        return f"{format_reading(due)} h" if due is not None else "-"
    return "-"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def parse_as_of(value: Optional[str]) -> date:
    """The instant every status in one run is computed against."""
    return date.fromisoformat(value) if value else date.today()


# =============================================================================
# Status command
# =============================================================================


def make_status_table(rows: List[StatusRow]) -> List[List[str]]:
    """Convert (subject, topic, status) rows to table rows."""
    table = []
    for subject, topic, status in rows:
        table.append(
            [
                subject.name,
                topic.name,
                topic.interval_label,
                format_last_done(topic),
                format_due(topic),
                status.status_text,
                format_percent(status.percent_remaining),
            ]
        )
    return table


def group_by_urgency(rows: List[StatusRow]) -> dict:
    """Split rows into overdue / warning / ok / unknown, sorted by name."""
    groups = {Urgency.OVERDUE: [], Urgency.WARNING: [], Urgency.OK: [], None: []}
    for row in rows:
        groups[row[2].urgency].append(row)
    for key in groups:
        groups[key].sort(key=lambda r: (r[0].name, r[1].name))
    return groups


def cmd_status(args, repo: YamlRepository):
    """Show which maintenance is overdue, due soon, or current."""
    garage = repo.garage()
    now = parse_as_of(args.as_of)

    if args.subject and garage.get_subject(args.subject) is None:
        print(f"Error: Unknown subject '{args.subject}'")
        return 1

    rows = garage.get_all_topic_status(now, subject_id=args.subject)

    print(f"As of: {now.isoformat()}")
    print(f"Subjects: {len(garage.subjects)}")
    print(f"Topics: {len(rows)}")
    print()

    headers = ["Subject", "Topic", "Interval", "Last Done", "Due", "Status", "Left"]
    groups = group_by_urgency(rows)

    if groups[Urgency.OVERDUE]:
        print("OVERDUE:")
        print(tabulate(make_status_table(groups[Urgency.OVERDUE]), headers=headers, tablefmt="simple"))
        print()

    if groups[Urgency.WARNING]:
        print("DUE SOON:")
        print(tabulate(make_status_table(groups[Urgency.WARNING]), headers=headers, tablefmt="simple"))
        print()

    if groups[Urgency.OK]:
        print("OK:")
        print(tabulate(make_status_table(groups[Urgency.OK]), headers=headers, tablefmt="simple"))
        print()

    if groups[None]:
        print("UNKNOWN (missing readings):")
        for subject, topic, status in groups[None]:
            print(f"  {subject.name}: {topic.name} - {status.status_text}")
        print()

    return 0


# =============================================================================
# Listing commands
# =============================================================================


def cmd_subjects(args, repo: YamlRepository):
    """List subjects with an overall status."""
    garage = repo.garage()
    now = parse_as_of(args.as_of)

    if not garage.subjects:
        print("No subjects found.")
        return 0

    rows = []
    for subject, summary in zip(garage.subjects, garage.get_all_summaries(now)):
        rows.append(
            [
                subject.id,
                subject.name,
                subject.type.value,
                format_reading(subject.current_mileage),
                format_reading(subject.current_hours),
                len(subject.topics),
                summary.text,
            ]
        )

    headers = ["ID", "Name", "Type", "Mileage", "Hours", "Topics", "Status"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


def cmd_topics(args, repo: YamlRepository):
    """List maintenance topics and their intervals."""
    garage = repo.garage()

    rows = []
    for subject in garage.subjects:
        if args.subject and subject.id != args.subject:
            continue
        for topic in subject.topics:
            rows.append(
                [
                    topic.id,
                    subject.name,
                    topic.name,
                    topic.interval_label,
                    format_last_done(topic),
                    truncate(topic.notes),
                ]
            )

    if not rows:
        print("No topics found.")
        return 0

    headers = ["ID", "Subject", "Topic", "Interval", "Last Done", "Notes"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Mutating commands
# =============================================================================


def cmd_add_subject(args, repo: YamlRepository):
    """Add a subject."""
    subject = repo.create_subject(
        args.name,
        args.type,
        current_mileage=args.mileage,
        current_hours=args.hours,
        id=args.id,
    )
    print(f"Added subject {subject.id}: {subject.name} ({subject.type.value})")
    return 0


def cmd_add_topic(args, repo: YamlRepository):
    """Add a recurring maintenance topic to a subject."""
    if (args.every is None) != (args.unit is None):
        print("Error: --every and --unit must be given together")
        return 1

    topic = repo.create_topic(
        args.subject_id,
        args.name,
        duration_value=args.every,
        duration_type=args.unit,
        tools=args.tool,
        notes=args.notes,
        id=args.id,
    )
    print(f"Added topic {topic.id}: {topic.name} ({topic.interval_label})")
    return 0


def cmd_complete(args, repo: YamlRepository):
    """Record that a topic was serviced."""
    subject = repo.get_subject(args.subject_id)
    if subject is None:
        print(f"Error: Unknown subject '{args.subject_id}'")
        return 1
    topic = subject.get_topic(args.topic_id)
    if topic is None:
        print(f"Error: Unknown topic '{args.topic_id}' for subject '{subject.name}'")
        return 1

    # Default to the subject's current readings, as the dashboard does
    mileage = args.mileage
    if mileage is None and subject.is_vehicle:
        mileage = subject.current_mileage
    hours = args.hours
    if hours is None and subject.tracks_hours:
        hours = subject.current_hours
    completed_on = args.date or date.today().isoformat()

    print(f"Completing maintenance in {repo.filename}:")
    print(f"  Subject: {subject.name}")
    print(f"  Topic:   {topic.name}")
    print(f"  Date:    {completed_on}")
    if mileage is not None:
        print(f"  Mileage: {format_reading(mileage)}")
    if hours is not None:
        print(f"  Hours:   {format_reading(hours)}")
    if args.notes:
        print(f"  Notes:   {args.notes}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    repo.complete_topic_maintenance(
        subject.id, topic.id, completed_on, mileage=mileage, hours=hours, notes=args.notes
    )
    print("Maintenance recorded.")
    return 0


def cmd_update_usage(args, repo: YamlRepository):
    """Update a subject's current mileage and/or hours."""
    if args.mileage is None and args.hours is None:
        print("Error: give --mileage and/or --hours")
        return 1

    subject = repo.get_subject(args.subject_id)
    if subject is None:
        print(f"Error: Unknown subject '{args.subject_id}'")
        return 1

    print(f"Subject: {subject.name}")
    fields = {}
    if args.mileage is not None:
        print(f"Current mileage: {format_reading(subject.current_mileage)}")
        print(f"New mileage:     {format_reading(args.mileage)}")
        fields["current_mileage"] = args.mileage
    if args.hours is not None:
        print(f"Current hours:   {format_reading(subject.current_hours)}")
        print(f"New hours:       {format_reading(args.hours)}")
        fields["current_hours"] = args.hours
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    repo.update_subject(subject.id, **fields)
    print("Usage updated.")
    return 0


def cmd_delete_subject(args, repo: YamlRepository):
    """Delete a subject and all of its topics."""
    if not repo.delete_subject(args.subject_id):
        print(f"Error: Unknown subject '{args.subject_id}'")
        return 1
    print(f"Deleted subject {args.subject_id}.")
    return 0


def cmd_delete_topic(args, repo: YamlRepository):
    """Delete a single topic."""
    if not repo.delete_topic(args.topic_id):
        print(f"Error: Unknown topic '{args.topic_id}'")
        return 1
    print(f"Deleted topic {args.topic_id}.")
    return 0


COMMANDS = {
    "status": cmd_status,
    "subjects": cmd_subjects,
    "topics": cmd_topics,
    "add-subject": cmd_add_subject,
    "add-topic": cmd_add_topic,
    "complete": cmd_complete,
    "update-usage": cmd_update_usage,
    "delete-subject": cmd_delete_subject,
    "delete-topic": cmd_delete_topic,
}

# Commands that may create the data file
CREATING_COMMANDS = ("add-subject",)


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Household maintenance tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/maintenance.yaml status
  %(prog)s data/maintenance.yaml status --as-of 2025-07-20
  %(prog)s data/maintenance.yaml add-subject "2015 Honda Civic" --type vehicle --mileage 50000
  %(prog)s data/maintenance.yaml add-topic civic "Oil change" --every 5000 --unit miles
  %(prog)s data/maintenance.yaml complete civic oil --mileage 55000
  %(prog)s data/maintenance.yaml update-usage civic --mileage 56000
""",
    )
    parser.add_argument(
        "data_file",
        type=Path,
        help="Path to maintenance YAML file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Status subcommand
    status_parser = subparsers.add_parser(
        "status", help="Show which maintenance is overdue, due soon, or current"
    )
    status_parser.add_argument("--subject", type=str, help="Limit to one subject ID")
    status_parser.add_argument(
        "--as-of",
        type=str,
        help="Compute status as of this date, YYYY-MM-DD (default: today)",
    )

    # Subjects subcommand
    subjects_parser = subparsers.add_parser("subjects", help="List subjects")
    subjects_parser.add_argument(
        "--as-of",
        type=str,
        help="Compute status as of this date, YYYY-MM-DD (default: today)",
    )

    # Topics subcommand
    topics_parser = subparsers.add_parser("topics", help="List maintenance topics")
    topics_parser.add_argument("--subject", type=str, help="Limit to one subject ID")

    # Add subject subcommand
    add_subject_parser = subparsers.add_parser("add-subject", help="Add a subject")
    add_subject_parser.add_argument("name", type=str, help="Display name")
    add_subject_parser.add_argument(
        "--type",
        choices=[t.value for t in SubjectType],
        default=SubjectType.VEHICLE.value,
        help="Kind of subject (default: vehicle)",
    )
    add_subject_parser.add_argument("--id", type=str, help="Explicit ID (default: generated)")
    add_subject_parser.add_argument("--mileage", type=float, help="Current mileage")
    add_subject_parser.add_argument("--hours", type=float, help="Current engine hours")

    # Add topic subcommand
    add_topic_parser = subparsers.add_parser("add-topic", help="Add a maintenance topic")
    add_topic_parser.add_argument("subject_id", type=str, help="Owning subject ID")
    add_topic_parser.add_argument("name", type=str, help="Topic name (e.g., 'Oil change')")
    add_topic_parser.add_argument("--id", type=str, help="Explicit ID (default: generated)")
    add_topic_parser.add_argument("--every", type=float, help="Interval magnitude")
    add_topic_parser.add_argument(
        "--unit",
        choices=[t.value for t in DurationType],
        help="Interval unit",
    )
    add_topic_parser.add_argument(
        "--tool",
        action="append",
        help="Tool needed (repeatable)",
    )
    add_topic_parser.add_argument("--notes", type=str, help="Notes")

    # Complete subcommand
    complete_parser = subparsers.add_parser("complete", help="Record that a topic was serviced")
    complete_parser.add_argument("subject_id", type=str, help="Subject ID")
    complete_parser.add_argument("topic_id", type=str, help="Topic ID")
    complete_parser.add_argument(
        "--date",
        type=str,
        help="Service date in YYYY-MM-DD format (default: today)",
    )
    complete_parser.add_argument(
        "--mileage",
        type=float,
        help="Mileage at time of service (default: subject's current mileage)",
    )
    complete_parser.add_argument(
        "--hours",
        type=float,
        help="Engine hours at time of service (default: subject's current hours)",
    )
    complete_parser.add_argument("--notes", type=str, help="Notes about the service")
    complete_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be recorded without saving",
    )

    # Update usage subcommand
    usage_parser = subparsers.add_parser(
        "update-usage", help="Update current mileage or hours"
    )
    usage_parser.add_argument("subject_id", type=str, help="Subject ID")
    usage_parser.add_argument("--mileage", type=float, help="Current mileage")
    usage_parser.add_argument("--hours", type=float, help="Current engine hours")
    usage_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be updated without saving",
    )

    # Delete subcommands
    delete_subject_parser = subparsers.add_parser(
        "delete-subject", help="Delete a subject and its topics"
    )
    delete_subject_parser.add_argument("subject_id", type=str, help="Subject ID")
    delete_topic_parser = subparsers.add_parser("delete-topic", help="Delete a topic")
    delete_topic_parser.add_argument("topic_id", type=str, help="Topic ID")

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Validate data file exists
    if args.command not in CREATING_COMMANDS and not args.data_file.exists():
        print(f"Error: File not found: {args.data_file}")
        return 1

    repo = YamlRepository(args.data_file)
    try:
        return COMMANDS[args.command](args, repo)
    except ValueError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
