# Path: scripts/quick_search_demo.py
# Purpose: Simple CLI to run a search query against the configured repository.
# Layer: scripts.
# Details: Prints the detected intent, extracted entities, and ranked results with their reasons.

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import AppSettings
from core.models.domain import ScoringOptions
from core.service import IntelligenceService


def main() -> None:
    """Execute a quick search from the command line."""

    parser = argparse.ArgumentParser(description="Run a quick search against the ArtFlow catalog")
    parser.add_argument("--text", type=str, required=True, help="Text query to search for")
    parser.add_argument("--k", type=int, default=10, help="Number of results to return")
    parser.add_argument("--discovery", type=float, default=0.3, help="Discovery mode between 0 and 1")
    parser.add_argument("--db", type=Path, default=None, help="SQLite database to search")
    args = parser.parse_args()

    settings = AppSettings.from_env()
    if args.db is not None:
        settings.repository.database_path = args.db

    with IntelligenceService.from_settings(settings) as service:
        outcome = service.search_detailed(
            args.text, limit=args.k, options=ScoringOptions(discovery_mode=args.discovery)
        )

    print(f"intent={outcome.intent.value}")
    print(f"entities={json.dumps(outcome.entities.to_dict())}")
    if outcome.failed_sources:
        print(f"degraded sources: {', '.join(source.value for source in outcome.failed_sources)}")
    for result in outcome.results:
        reasons = "; ".join(result.reasons) or "n/a"
        print(f"{result.type.value}:{result.id} score={result.relevance_score:.2f} title={result.title!r} reasons={reasons}")


if __name__ == "__main__":
    main()
