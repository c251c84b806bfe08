import json
from pathlib import Path

from santa_redraw.errors import SourceError


def load_roster(path: Path) -> list[str]:
    if not path.exists():
        raise SourceError(f"Participant list {path} does not exist.")
    try:
        with path.open("r", encoding="utf-8") as f:
            content = json.load(f)
    except (json.JSONDecodeError, ValueError) as exc:
        raise SourceError(f"Participant list {path} is not valid JSON: {exc}") from exc

    if not isinstance(content, list):
        raise SourceError(f"Participant list {path} must be a JSON array of names.")

    names = [str(n).strip() for n in content if n is not None and str(n).strip()]
    return list(dict.fromkeys(names))
