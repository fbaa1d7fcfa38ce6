"""
Substance catalogue cache.

The WebBook identifies substances by IDs such as ``C7732185`` (water). The
list of IDs the fluid service supports is scraped from its substance
selection page and kept in a small local file::

    # Available (IDs) Fluids @ NIST webbook
    C7732185:Water
    C7727379:Nitrogen
    ...

The file is refreshed when it is older than ``max_age`` or on request, and
is replaced atomically so a failed refresh never leaves a partial file.
"""

import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import List, Optional, Protocol

from bs4 import BeautifulSoup

from fluidfetch.exceptions import CatalogueError
from fluidfetch.tables import write_output

logger = logging.getLogger(__name__)

CATALOGUE_HEADER = "# Available (IDs) Fluids @ NIST webbook"


class SubstancePageSource(Protocol):
    def fetch_substance_page(self) -> str: ...


@dataclass(frozen=True)
class CatalogueEntry:
    substance_id: str
    name: str

    def to_line(self) -> str:
        return f"{self.substance_id}:{self.name}"

    @classmethod
    def from_line(cls, line: str) -> "CatalogueEntry":
        substance_id, sep, name = line.partition(":")
        if not sep or not substance_id.strip():
            raise ValueError(f"Malformed catalogue line: {line!r}")
        return cls(substance_id.strip(), name.strip())


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of CatalogueCache.refresh()."""

    refreshed: bool
    age: timedelta
    reason: str
    entry_count: Optional[int] = None

    @property
    def age_days(self) -> float:
        return self.age.total_seconds() / 86400


def parse_substance_page(html: str) -> List[CatalogueEntry]:
    """Extract (ID, name) pairs from the first selector list of the page.

    Comments and options without a value (placeholders) are skipped; a
    repeated ID keeps its first name.
    """
    soup = BeautifulSoup(html, "html.parser")
    select = soup.find("select")
    if select is None:
        return []

    entries: List[CatalogueEntry] = []
    seen = set()
    for option in select.find_all("option"):
        substance_id = (option.get("value") or "").strip()
        name = " ".join(option.get_text().split())
        if not substance_id or not name or substance_id in seen:
            continue
        seen.add(substance_id)
        entries.append(CatalogueEntry(substance_id, name))
    return entries


class CatalogueCache:
    """
    Persisted ID-to-name catalogue with age-based refresh.

    Usage:
        >>> cache = CatalogueCache(settings.catalogue_path, client=client)
        >>> cache.refresh()
        >>> cache.lookup_by_id("C7732185")
        'Water'
    """

    def __init__(
        self,
        path: Path,
        client: Optional[SubstancePageSource] = None,
        max_age: timedelta = timedelta(days=1),
    ):
        self.path = Path(path)
        self.client = client
        self.max_age = max_age

    def age(self) -> timedelta:
        """Time since the catalogue file was last modified.

        A missing file is infinitely old.
        """
        try:
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            return timedelta.max
        return timedelta(seconds=max(0.0, time.time() - mtime))

    def is_stale(self) -> bool:
        return self.age() > self.max_age

    def refresh(self, force: bool = False) -> RefreshResult:
        """Re-download the catalogue when forced or stale.

        Raises:
            CatalogueError: if the page yields no substances
            NetworkError: if the page cannot be fetched
        """
        age = self.age()
        if age == timedelta.max:
            reason = "catalogue file does not exist"
        elif force:
            reason = "renewal enforced"
        elif age > self.max_age:
            reason = "catalogue file is too old"
        else:
            logger.info(f"Catalogue {self.path} is {age.total_seconds():.0f} s old; keeping it")
            return RefreshResult(refreshed=False, age=age, reason="catalogue file is current")

        if self.client is None:
            raise CatalogueError("No WebBook client configured for catalogue refresh", path=self.path)

        logger.info(f"Refreshing catalogue {self.path}: {reason}")
        entries = parse_substance_page(self.client.fetch_substance_page())
        if not entries:
            raise CatalogueError(
                "No substances found on the WebBook selection page; the page layout may have changed",
                path=self.path,
            )
        self._write(entries)
        logger.info(f"Catalogue written with {len(entries)} substances")
        return RefreshResult(refreshed=True, age=timedelta(0), reason=reason, entry_count=len(entries))

    def _write(self, entries: List[CatalogueEntry]) -> None:
        lines = [CATALOGUE_HEADER] + [entry.to_line() for entry in entries]
        write_output(self.path, "\n".join(lines) + "\n")

    def entries(self) -> List[CatalogueEntry]:
        """Read the persisted catalogue.

        Raises:
            CatalogueError: if the file does not exist
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise CatalogueError(
                f"Catalogue file {self.path} not found; run 'fluids catalogue refresh'",
                path=self.path,
            ) from e

        entries = []
        for line in text.splitlines():
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            try:
                entries.append(CatalogueEntry.from_line(line))
            except ValueError:
                logger.warning(f"Skipping malformed catalogue line: {line!r}")
        return entries

    def lookup_all(self, fragment: str, field: str = "name") -> List[CatalogueEntry]:
        """All entries whose ``field`` ("name" or "substance_id") contains fragment."""
        if field not in ("name", "substance_id"):
            raise ValueError(f"Unknown catalogue field: {field}")
        return [entry for entry in self.entries() if fragment in getattr(entry, field)]

    def _best_match(self, fragment: str, field: str) -> Optional[CatalogueEntry]:
        matches = self.lookup_all(fragment, field)
        for entry in matches:
            if getattr(entry, field) == fragment:
                return entry
        return matches[0] if matches else None

    def lookup_by_id(self, substance_id: str) -> Optional[str]:
        """Name for an ID, or None when not available."""
        entry = self._best_match(substance_id, "substance_id")
        return entry.name if entry else None

    def lookup_by_name(self, fragment: str) -> Optional[str]:
        """ID for a (partial) substance name, or None when not available."""
        entry = self._best_match(fragment, "name")
        return entry.substance_id if entry else None
