"""HTTP scraping of the university academic-calendar pages."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

import requests
from bs4 import BeautifulSoup

from deadline_tracker import config
from deadline_tracker.filters.categories import category_from_slug
from deadline_tracker.scraper import extractor, parse_utils
from deadline_tracker.scraper.models import DeadlineCandidate, RawRow

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": config.REQUEST_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


def current_academic_year(today: Optional[date] = None) -> Tuple[int, int]:
    """Return (start_year, end_year) of the academic year containing ``today``."""
    today = today or parse_utils.today_local()
    if today.month >= config.ACADEMIC_YEAR_START_MONTH:
        return today.year, today.year + 1
    return today.year - 1, today.year


def candidate_urls(slug: str, y1: int, y2: int) -> List[str]:
    return [
        f"{config.CALENDAR_BASE_URL}/{slug}-{y1}-{y2}",
        f"{config.CALENDAR_BASE_URL}/{y1}-{y2}-calendars/{slug}-{y1}-{y2}",
    ]


def build_discovered_urls(today: Optional[date] = None) -> List[str]:
    """URLs for the current academic year and the ones after it."""
    start, _ = current_academic_year(today)
    urls: List[str] = []
    for offset in range(config.DISCOVERY_YEARS_AHEAD + 1):
        y1 = start + offset
        for slug in config.CALENDAR_SLUGS:
            for url in candidate_urls(slug, y1, y1 + 1):
                if url not in urls:
                    urls.append(url)
    return urls


def default_urls(today: Optional[date] = None) -> List[str]:
    urls = list(config.STATIC_URLS)
    for url in build_discovered_urls(today):
        if url not in urls:
            urls.append(url)
    return urls


def slug_from_url(url: str) -> str:
    tail = url.rstrip("/").rsplit("/", 1)[-1]
    parts = tail.split("-")
    if len(parts) > 2 and parts[-1].isdigit() and parts[-2].isdigit():
        parts = parts[:-2]
    return "-".join(parts)


def fetch_page(url: str) -> Optional[str]:
    """Fetch a calendar page; None when it is not published (404) or not HTML."""
    response = requests.get(url, headers=DEFAULT_HEADERS, timeout=config.REQUEST_TIMEOUT)
    if response.status_code == 404:
        logger.debug(f"Not published yet: {url}")
        return None
    response.raise_for_status()
    content_type = response.headers.get("Content-Type", "")
    if content_type and "html" not in content_type:
        logger.debug(f"Skipping non-HTML response from {url} ({content_type})")
        return None
    return response.text


def _table_heading(table) -> str:
    heading = table.find_previous_sibling(list(config.HEADING_TAGS))
    if heading is None:
        return ""
    return parse_utils.clean_text(heading.get_text(" ", strip=True)) or ""


def parse_calendar_html(html: str, source_url: Optional[str] = None) -> List[RawRow]:
    """Flatten every table on the page into RawRows.

    Two row layouts are understood: a ``<th>`` title followed by one or more
    ``<td>`` date cells, and two ``<td>`` cells holding date then title.
    """
    soup = BeautifulSoup(html, "lxml")
    default_category = category_from_slug(slug_from_url(source_url)) if source_url else None
    rows: List[RawRow] = []

    for table_index, table in enumerate(soup.find_all("table")):
        heading = _table_heading(table)
        body_rows = table.select("tbody tr") or table.find_all("tr")
        for tr in body_rows:
            ths = tr.find_all("th")
            tds = tr.find_all("td")
            if ths and tds:
                title = ths[0].get_text(" ", strip=True)
                cells = [td.get_text(" ", strip=True) for td in tds]
            elif not ths and len(tds) >= 2:
                cells = [tds[0].get_text(" ", strip=True)]
                title = tds[1].get_text(" ", strip=True)
                if not parse_utils.clean_text(title):
                    continue
            else:
                continue
            rows.append(
                RawRow(
                    event_text=title,
                    heading_text=heading,
                    date_cell_text=cells[0],
                    more_date_cells=tuple(cells[1:]),
                    table_index=table_index,
                    source_url=source_url,
                    default_category=default_category,
                )
            )
    return rows


def scrape_url(url: str) -> List[RawRow]:
    """Scrape a single page; any failure is logged and yields no rows."""
    try:
        html = fetch_page(url)
    except requests.RequestException as exc:
        logger.warning(f"[scrape] {url} -> {exc}")
        return []
    if not html:
        return []
    try:
        rows = parse_calendar_html(html, url)
    except Exception as exc:
        logger.warning(f"[scrape] {url} -> could not parse page: {exc}")
        return []
    logger.info(f"[scrape] {url}: {len(rows)} rows")
    return rows


def scrape_rows(urls: Sequence[str], max_workers: int = config.SCRAPE_MAX_WORKERS) -> List[RawRow]:
    """Fetch pages concurrently and concatenate their rows in URL order."""
    if not urls:
        return []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(urls)))) as pool:
        per_url = list(pool.map(scrape_url, urls))
    return [row for rows in per_url for row in rows]


def fetch_all_deadlines(urls: Optional[Iterable[str]] = None) -> List[DeadlineCandidate]:
    """Scrape every source page and return extracted candidates by date."""
    url_list = list(urls) if urls is not None else default_urls()
    candidates = extractor.extract(scrape_rows(url_list))
    candidates.sort(key=lambda c: c.date_obj)
    logger.info(f"Extracted {len(candidates)} deadline candidates from {len(url_list)} pages")
    return candidates
