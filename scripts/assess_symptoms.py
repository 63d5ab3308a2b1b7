#!/usr/bin/env python3
"""
Run a Dr. Mimu symptom assessment from the command line.

Usage:
    python scripts/assess_symptoms.py --symptom chest-pain:8 --symptom breathing-difficulty:7
    python scripts/assess_symptoms.py --symptom fever:5:few-days --locale bn --narrate
    python scripts/assess_symptoms.py --symptom headache:6 --json

Each --symptom is SYMPTOM_ID:INTENSITY[:DURATION]. Duration defaults to "few-days".
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from mimucare import HealthAssistant, configure_logging
from mimucare.agents.catalog import Duration, SelectedSymptom, all_symptoms
from mimucare.locale import SUPPORTED_LOCALES


def parse_symptom(value: str) -> SelectedSymptom:
    parts = value.split(":")
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(f"expected SYMPTOM:INTENSITY[:DURATION], got {value!r}")
    duration = parts[2] if len(parts) == 3 else Duration.FEW_DAYS.value
    try:
        return SelectedSymptom(parts[0], duration, int(parts[1]))
    except (KeyError, ValueError) as e:
        raise argparse.ArgumentTypeError(str(e))


def main():
    parser = argparse.ArgumentParser(description="Dr. Mimu symptom assessment")
    parser.add_argument(
        "--symptom",
        action="append",
        type=parse_symptom,
        default=[],
        help="SYMPTOM_ID:INTENSITY[:DURATION] (repeatable)",
    )
    parser.add_argument("--locale", choices=SUPPORTED_LOCALES, default=None)
    parser.add_argument("--user-id", default=None, help="Save the result to this user's history")
    parser.add_argument("--narrate", action="store_true", help="Ask the AI providers for an explanation")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--list", action="store_true", help="List symptom ids and exit")
    args = parser.parse_args()

    if args.list:
        for symptom in all_symptoms():
            print(f"{symptom.id:<22} {symptom.body_part:<8} {symptom.display_name('en')}")
        return

    if not args.symptom:
        parser.error("at least one --symptom is required")

    configure_logging()
    assistant = HealthAssistant()
    result = assistant.assess(args.symptom, locale=args.locale, user_id=args.user_id)

    if args.narrate:
        asyncio.run(assistant.narrate(result))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(result.to_report())


if __name__ == "__main__":
    main()
