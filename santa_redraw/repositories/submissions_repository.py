import json
from pathlib import Path
from typing import Any, Iterable

import pandas as pd

from santa_redraw.config import RECEIVER_COLUMNS, SUBMITTER_EMAIL, SUBMITTER_NAME
from santa_redraw.errors import SourceError
from santa_redraw.schemas import Declaration, SubmissionRecord


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().strip('"').strip()


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return _text(value).lower() == "true"


def record_from_row(row: dict) -> SubmissionRecord:
    declarations = []
    for receiver_key, purchased_key in RECEIVER_COLUMNS:
        receiver = _text(row.get(receiver_key))
        if not receiver:
            continue
        declarations.append(Declaration(receiver=receiver, purchased=_flag(row.get(purchased_key))))

    return SubmissionRecord(
        giver=_text(row.get(SUBMITTER_NAME)),
        contact=_text(row.get(SUBMITTER_EMAIL)),
        declarations=tuple(declarations),
    )


def _records(rows: Iterable[Any]) -> list[SubmissionRecord]:
    out = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        record = record_from_row(row)
        if record.giver:
            out.append(record)
    return out


def load_submissions_json(path: Path) -> list[SubmissionRecord]:
    if not path.exists():
        raise SourceError(f"Submissions file {path} does not exist.")
    try:
        with path.open("r", encoding="utf-8") as f:
            content = json.load(f)
    except (json.JSONDecodeError, ValueError) as exc:
        raise SourceError(f"Submissions file {path} is not valid JSON: {exc}") from exc

    if isinstance(content, dict):
        content = [content]
    if not isinstance(content, list):
        raise SourceError(f"Submissions file {path} must be a JSON array of objects.")
    return _records(content)


def load_submissions_csv(path: Path) -> list[SubmissionRecord]:
    if not path.exists():
        raise SourceError(f"Submissions file {path} does not exist.")
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise SourceError(f"Submissions file {path} could not be parsed: {exc}") from exc

    df.columns = [_text(c) for c in df.columns]
    return _records(df.to_dict(orient="records"))


def contact_map(submissions: Iterable[SubmissionRecord]) -> dict[str, str]:
    contacts: dict[str, str] = {}
    for sub in submissions:
        if sub.contact and sub.giver not in contacts:
            contacts[sub.giver] = sub.contact
    return contacts
