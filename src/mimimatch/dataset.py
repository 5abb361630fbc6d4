"""Name dataset schema and loader.

The dataset is an immutable ordered tuple of CandidateRecord loaded
from a YAML file. A default Czech name list ships with the package.

YAML format:
  names:
    - {name: Eva, gender: ZENA, fact: "..."}
"""

from __future__ import annotations

import logging
from collections import Counter
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mimimatch.schemas import CandidateRecord, Category

logger = logging.getLogger(__name__)

_BUNDLED_DATASET = "names.yaml"


class DatasetError(ValueError):
    """Raised when a dataset file has an invalid shape or duplicate names."""


def _parse_record(data: Any, index: int) -> CandidateRecord:
    """Parse a single name entry from YAML data."""
    if not isinstance(data, dict):
        raise DatasetError(f"Entry {index} is not a mapping: {data!r}")
    try:
        return CandidateRecord.model_validate(data)
    except ValidationError as e:
        raise DatasetError(f"Invalid entry {index}: {e}") from e


def _check_unique(records: tuple[CandidateRecord, ...]) -> None:
    """Reject datasets where a name appears more than once.

    Decision tracking is keyed by name, so duplicates would collapse.
    """
    counts = Counter(r.key for r in records)
    duplicates = sorted(name for name, n in counts.items() if n > 1)
    if duplicates:
        raise DatasetError(f"Duplicate names in dataset: {', '.join(duplicates)}")


def parse_dataset(raw: Any) -> tuple[CandidateRecord, ...]:
    """Build the record tuple from parsed YAML content.

    Raises:
        DatasetError: If the structure is invalid or names repeat.
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("names"), list):
        raise DatasetError("Dataset must be a mapping with a 'names' list")

    records = tuple(_parse_record(item, i) for i, item in enumerate(raw["names"]))
    _check_unique(records)
    return records


def load_dataset(path: Path | None = None) -> tuple[CandidateRecord, ...]:
    """Load a name dataset from a YAML file, or the bundled one if None.

    Raises:
        FileNotFoundError: If the YAML file does not exist.
        DatasetError: If the YAML is invalid or the dataset is malformed.
    """
    if path is None:
        text = (
            resources.files("mimimatch.data")
            .joinpath(_BUNDLED_DATASET)
            .read_text(encoding="utf-8")
        )
        source = f"<bundled {_BUNDLED_DATASET}>"
    else:
        if not path.exists():
            msg = f"Dataset file not found: {path}"
            raise FileNotFoundError(msg)
        text = path.read_text(encoding="utf-8")
        source = str(path)

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DatasetError(f"Invalid YAML in {source}: {e}") from e

    records = parse_dataset(raw)
    logger.info("Loaded %d names from %s", len(records), source)
    return records


def count_by_category(records: tuple[CandidateRecord, ...]) -> dict[Category, int]:
    """Return the number of records per category tag."""
    counts = {category: 0 for category in Category}
    for record in records:
        counts[record.category] += 1
    return counts
