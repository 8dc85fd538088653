"""Flat-file persistence for published series snapshots and the index document."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from pipelines.model import IndexDocument, SeriesSnapshot

DATA_DIR_ENV_VAR = "FRED_DATA_DIR"
DEFAULT_DATA_DIR = Path("web/public/data")

INDEX_FILENAME = "_index.json"

logger = logging.getLogger(__name__)


def get_data_dir(override: str | os.PathLike[str] | None = None) -> Path:
    """Resolve the output directory from an explicit override or environment variable."""

    if override is not None:
        return Path(override)
    env_value = os.getenv(DATA_DIR_ENV_VAR)
    if env_value:
        return Path(env_value)
    return DEFAULT_DATA_DIR


def snapshot_filename(series_id: str) -> str:
    return f"{series_id}.json"


def snapshot_path(data_dir: Path, series_id: str) -> Path:
    return data_dir / snapshot_filename(series_id)


def index_path(data_dir: Path) -> Path:
    return data_dir / INDEX_FILENAME


def serialize_document(document: Any) -> str:
    """Stable on-disk form: two-space indented JSON with a trailing newline."""

    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def _previous_updated_at(text: str) -> str | None:
    try:
        previous = json.loads(text)
    except json.JSONDecodeError:
        return None
    if isinstance(previous, dict) and isinstance(previous.get("updatedAt"), str):
        return previous["updatedAt"]
    return None


def write_if_changed(
    path: Path, model: SeriesSnapshot | IndexDocument, *, force: bool = False
) -> bool:
    """Write ``model`` to ``path`` only when its content differs from the file on disk.

    The comparison is made with the ``updatedAt`` already on disk, so a rerun over
    unchanged upstream data neither rewrites the file nor moves its timestamp.
    ``force`` skips the comparison. Returns whether the file was written.
    """

    previous = _read_text(path)
    if previous is not None and not force:
        prior_stamp = _previous_updated_at(previous)
        if prior_stamp is not None:
            candidate = model.model_copy(update={"updated_at": prior_stamp})
            if serialize_document(candidate.to_document()) == previous:
                return False

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize_document(model.to_document()), encoding="utf-8")
    return True


def read_snapshot(data_dir: Path, series_id: str) -> SeriesSnapshot | None:
    text = _read_text(snapshot_path(data_dir, series_id))
    if text is None:
        return None
    return SeriesSnapshot.model_validate_json(text)


def read_index(data_dir: Path) -> IndexDocument | None:
    text = _read_text(index_path(data_dir))
    if text is None:
        return None
    return IndexDocument.model_validate_json(text)


def verify_data_dir(data_dir: Path, expected: Iterable[str]) -> list[str]:
    """Check the published files and return a list of human-readable problems.

    An empty list means the index lists every expected series and each
    snapshot exists and satisfies the model invariants.
    """

    problems: list[str] = []
    expected_ids = list(expected)

    try:
        index = read_index(data_dir)
    except ValidationError as exc:
        return [f"{INDEX_FILENAME}: {exc.error_count()} validation error(s)"]
    if index is None:
        return [f"{INDEX_FILENAME}: missing"]

    missing_from_index = [sid for sid in expected_ids if sid not in index.series]
    if missing_from_index:
        problems.append(f"{INDEX_FILENAME}: missing series {', '.join(missing_from_index)}")

    for series_id in index.series:
        try:
            snapshot = read_snapshot(data_dir, series_id)
        except ValidationError as exc:
            problems.append(f"{series_id}: {exc.error_count()} validation error(s)")
            continue
        if snapshot is None:
            problems.append(f"{series_id}: snapshot file missing")
        elif snapshot.series_id != series_id:
            problems.append(f"{series_id}: file carries seriesId {snapshot.series_id!r}")

    for problem in problems:
        logger.warning("Data check: %s", problem)
    return problems


__all__ = [
    "DATA_DIR_ENV_VAR",
    "DEFAULT_DATA_DIR",
    "INDEX_FILENAME",
    "get_data_dir",
    "snapshot_filename",
    "snapshot_path",
    "index_path",
    "serialize_document",
    "write_if_changed",
    "read_snapshot",
    "read_index",
    "verify_data_dir",
]
