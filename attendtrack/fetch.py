"""
Resilient download of a timetable document from a link.

Many links cannot be fetched directly (blocked hosts, slow servers), so we
try an ordered chain of stages, each with its own timeout:

    1. direct                 3 s
    2. corsproxy.io           8 s
    3. api.allorigins.win    10 s

A stage that fails is skipped silently; only when all stages fail does the
caller see a single ResourceUnreachableError. Proxies sometimes answer with
an HTML error page instead of the requested image; such answers count as a
failed stage.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple, Type, TypeVar
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNREACHABLE_MESSAGE = "Unable to access link. Please ensure it is public."

_IMAGE_URL_RE = re.compile(r"\.(png|jpg|jpeg|webp)$", re.IGNORECASE)

_EXPECTED_TYPES = ("image/", "application/pdf", "text/", "application/json")


class ResourceUnreachableError(Exception):
    """
    Raised when every stage of a fallback chain failed.

    `failures` holds (stage label, error) pairs in the order they were tried.
    """

    def __init__(self, message: str, failures: Optional[List[Tuple[str, BaseException]]] = None) -> None:
        super().__init__(message)
        self.failures = list(failures or [])

    def details(self) -> str:
        return "; ".join(f"{label}: {err}" for label, err in self.failures)


class ResourceRejectedError(Exception):
    """
    A stage answered, but with content we cannot use.
    """


def first_successful(
    attempts: Iterable[Tuple[str, Callable[[], T]]],
    errors: Tuple[Type[BaseException], ...] = (Exception,),
    message: str = UNREACHABLE_MESSAGE,
) -> T:
    """
    Run (label, thunk) attempts in order and return the first result.

    Exceptions listed in `errors` are recorded and the next attempt is tried;
    anything else propagates unchanged.
    """
    failures: List[Tuple[str, BaseException]] = []
    for label, thunk in attempts:
        try:
            return thunk()
        except errors as exc:
            logger.debug("Stage %s failed: %s", label, exc)
            failures.append((label, exc))
    raise ResourceUnreachableError(message, failures)


@dataclass(frozen=True)
class FetchStage:
    name: str
    url_for: Callable[[str], str]
    timeout: float
    reject_html_for_images: bool = False


@dataclass(frozen=True)
class FetchedResource:
    content: bytes
    mime_type: str
    source: str


def _direct(url: str) -> str:
    return url


def _corsproxy(url: str) -> str:
    return f"https://corsproxy.io/?{quote(url, safe='')}"


def _allorigins(url: str) -> str:
    return f"https://api.allorigins.win/raw?url={quote(url, safe='')}"


DEFAULT_STAGES: Tuple[FetchStage, ...] = (
    FetchStage("direct", _direct, timeout=3.0),
    FetchStage("corsproxy", _corsproxy, timeout=8.0, reject_html_for_images=True),
    FetchStage("allorigins", _allorigins, timeout=10.0, reject_html_for_images=True),
)


def looks_like_image_url(url: str) -> bool:
    # ignore query string / fragment
    path = url.split("#", 1)[0].split("?", 1)[0]
    return bool(_IMAGE_URL_RE.search(path))


def _mime_type(resp: requests.Response) -> str:
    raw = resp.headers.get("Content-Type", "")
    mime = raw.split(";", 1)[0].strip().lower()
    return mime or "text/html"


def describe_html_page(content: bytes) -> str:
    """
    Short description of an HTML page (its <title> or first text).
    """
    soup = BeautifulSoup(content, "html.parser")
    if soup.title and soup.title.get_text(strip=True):
        return soup.title.get_text(strip=True)
    text = soup.get_text(" ", strip=True)
    return text[:80] if text else "(empty page)"


def _run_stage(stage: FetchStage, url: str, session: requests.Session) -> FetchedResource:
    target = stage.url_for(url)
    resp = session.get(target, timeout=stage.timeout)
    resp.raise_for_status()

    mime = _mime_type(resp)
    content = resp.content

    if stage.reject_html_for_images and "text/html" in mime and looks_like_image_url(url):
        raise ResourceRejectedError(f"HTML instead of image ({describe_html_page(content)})")

    if not mime.startswith(_EXPECTED_TYPES):
        logger.warning("Uncommon file type %s from %s, extraction might fail", mime, stage.name)

    return FetchedResource(content=content, mime_type=mime, source=stage.name)


def fetch_resource(
    url: str,
    stages: Iterable[FetchStage] = DEFAULT_STAGES,
    session: Optional[requests.Session] = None,
) -> FetchedResource:
    """
    Download `url` trying each stage in order.

    Raises ResourceUnreachableError once all stages failed.
    """
    link = (url or "").strip()
    if not link:
        raise ValueError("Please provide a link")

    if session is None:
        with requests.Session() as own_session:
            return _fetch_with(link, stages, own_session)
    return _fetch_with(link, stages, session)


def _fetch_with(link: str, stages: Iterable[FetchStage], session: requests.Session) -> FetchedResource:
    attempts = [(stage.name, lambda stage=stage: _run_stage(stage, link, session)) for stage in stages]
    return first_successful(attempts, errors=(requests.RequestException, ResourceRejectedError))
