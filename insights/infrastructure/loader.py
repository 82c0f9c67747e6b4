# ==============================================================================
# Event and Goal Loading
# ==============================================================================
"""
Loads event snapshots and goal definitions from files.

Events are read with Polars from CSV, a JSON array, or newline-delimited JSON
(.ndjson / .jsonl), then validated row by row into RawEvent. Rows that fail
validation are skipped with a warning so that one malformed event does not
discard a whole export.
"""

import json
import logging
from pathlib import Path

import polars as pl
from pydantic import ValidationError

from insights.core.goals import Goal, parse_goal
from insights.core.models import RawEvent

logger = logging.getLogger(__name__)

_NDJSON_SUFFIXES = {".ndjson", ".jsonl"}


def _read_frame(path: Path) -> pl.DataFrame:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        # Keep every column as text; pydantic does the coercion
        return pl.read_csv(path, infer_schema_length=0)
    if suffix == ".json":
        return pl.read_json(path, infer_schema_length=None)
    if suffix in _NDJSON_SUFFIXES:
        return pl.read_ndjson(path, infer_schema_length=None)
    raise ValueError(f"Unsupported event file type: {path.suffix or path.name}")


def load_events(path: str | Path) -> list[RawEvent]:
    """
    Load an event snapshot from a file.

    Args:
        path: .csv, .json or .ndjson/.jsonl file

    Returns:
        Valid events in file order

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file type is not supported
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Event file not found: {path}")

    df = _read_frame(path)

    events: list[RawEvent] = []
    skipped = 0
    for idx, row in enumerate(df.iter_rows(named=True)):
        try:
            events.append(RawEvent.model_validate(row))
        except (ValidationError, json.JSONDecodeError) as e:
            skipped += 1
            logger.warning("Skipping row %d of %s: %s", idx, path.name, e)

    logger.info("Loaded %d events from %s (%d skipped)", len(events), path, skipped)
    return events


def load_goals(path: str | Path) -> list[Goal]:
    """
    Load goal definitions from a JSON file.

    The file holds either a list of goal records or an object with a
    ``goals`` list. Unknown goal types load as goals that never match.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Goal file not found: {path}")

    with path.open(encoding="utf-8") as f:
        data = json.load(f)

    records = data.get("goals", []) if isinstance(data, dict) else data
    return [parse_goal(record) for record in records]
