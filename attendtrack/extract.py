"""
Subject extraction from uploaded documents.

The actual extraction (an AI service reading a timetable image, PDF or page)
is provided by the caller as an Extractor callable. This module only:

- prepares the payload (HTML pages are reduced to their text)
- reads the service's JSON answer into typed objects
- turns the answer into new Subjects with an empty history
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from bs4 import BeautifulSoup

from attendtrack.ledger import coerce_count, new_subject
from attendtrack.model import ScheduleSlot, Subject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractedSubject:
    name: str
    total: Optional[int] = None
    attended: Optional[int] = None
    schedule: Tuple[ScheduleSlot, ...] = ()


@dataclass(frozen=True)
class ExtractionResult:
    subjects: Tuple[ExtractedSubject, ...] = ()
    schedule_summary: Optional[str] = None


# (payload, mime_type) -> result
Extractor = Callable[[bytes, str], ExtractionResult]


def prepare_payload(content: bytes, mime_type: str) -> Tuple[bytes, str]:
    """
    HTML documents are sent as plain text; anything else is passed through.
    """
    mime = (mime_type or "").split(";", 1)[0].strip().lower()
    if mime == "text/html":
        soup = BeautifulSoup(content, "html.parser")
        for tag in soup(["script", "style"]):
            tag.decompose()
        text = soup.get_text("\n", strip=True)
        return text.encode("utf-8"), "text/plain"
    return content, mime or "application/octet-stream"


def _optional_count(raw: Any) -> Optional[int]:
    if raw is None or raw == "":
        return None
    return coerce_count(raw)


def parse_extraction_result(data: Any) -> ExtractionResult:
    """
    Read the service's JSON answer:

        {"subjects": [{"name", "total", "attended", "schedule": [{"day", "time"}]}],
         "scheduleSummary": "..."}
    """
    if not isinstance(data, dict):
        raise ValueError("Extraction result must be a JSON object")

    subjects: List[ExtractedSubject] = []
    for raw in data.get("subjects") or []:
        if not isinstance(raw, dict):
            continue
        schedule = tuple(
            ScheduleSlot(day=str(s.get("day") or "").strip(), time=str(s.get("time") or "").strip())
            for s in raw.get("schedule") or []
            if isinstance(s, dict)
        )
        subjects.append(
            ExtractedSubject(
                name=str(raw.get("name") or "").strip(),
                total=_optional_count(raw.get("total")),
                attended=_optional_count(raw.get("attended")),
                schedule=schedule,
            )
        )

    summary = data.get("scheduleSummary", data.get("schedule_summary"))
    return ExtractionResult(subjects=tuple(subjects), schedule_summary=str(summary) if summary else None)


def load_extraction_result(path: str | Path) -> ExtractionResult:
    return parse_extraction_result(json.loads(Path(path).read_text(encoding="utf-8")))


def subjects_from_extraction(result: ExtractionResult) -> List[Subject]:
    """
    New subjects (zero history) for every named entry of the result.
    """
    out: List[Subject] = []
    for ex in result.subjects:
        if not ex.name:
            logger.info("Skipping extracted entry without a name")
            continue
        out.append(new_subject(ex.name, total=ex.total or 0, attended=ex.attended or 0, schedule=ex.schedule))
    return out


def extract_subjects(content: bytes, mime_type: str, extractor: Extractor) -> List[Subject]:
    payload, mime = prepare_payload(content, mime_type)
    return subjects_from_extraction(extractor(payload, mime))
