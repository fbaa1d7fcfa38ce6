# -*- coding: utf-8 -*-
"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import List, Optional, Tuple

import pytest

from fluidfetch.config import FluidsSettings
from fluidfetch.connectors import ConnectorNetworkError


SUBSTANCE_PAGE = """
<html>
<head><title>Thermophysical Properties of Fluid Systems</title></head>
<body>
<form action="/cgi/fluid.cgi" method="get">
<p>Please select the species of interest:
<select name="ID">
<option value="">-- select a fluid --</option>
<!-- <option value="C0000000">Retired fluid</option> -->
<option value="C7732185">Water</option>
<option value="C7727379">Nitrogen</option>
<option value="C7789200">Heavy water</option>
<option value="C124389">Carbon dioxide</option>
<option value="C7732185">Water (duplicate)</option>
</select>
</p>
<select name="Units">
<option value="SI">SI</option>
</select>
</form>
</body>
</html>
"""

CATALOGUE_TEXT = (
    "# Available (IDs) Fluids @ NIST webbook\n"
    "C7732185:Water\n"
    "C7727379:Nitrogen\n"
    "C7789200:Heavy water\n"
    "C124389:Carbon dioxide\n"
)


def make_table(columns: int, rows: int = 3) -> str:
    """Tab-delimited body as returned by the data request."""
    header = "\t".join(f"Col{i}" for i in range(1, columns + 1))
    lines = [header]
    for r in range(rows):
        values = [f"{r + 1}.{c:03d}" for c in range(1, columns)]
        values.append("liquid")
        lines.append("\t".join(values))
    return "\n".join(lines) + "\n"


class FakeWebBookClient:
    """Records every request instead of contacting the WebBook."""

    def __init__(
        self,
        table: str = "",
        substance_page: str = SUBSTANCE_PAGE,
        fail_on: Optional[str] = None,
    ):
        self.table = table or make_table(14)
        self.substance_page = substance_page
        self.fail_on = fail_on
        self.calls: List[Tuple[str, Optional[str]]] = []

    def _maybe_fail(self, kind: str, url: Optional[str]) -> None:
        if self.fail_on == kind:
            raise ConnectorNetworkError("Network error: unreachable", connector=f"webbook/{kind}", url=url)

    def fetch_substance_page(self) -> str:
        self.calls.append(("catalogue", None))
        self._maybe_fail("catalogue", None)
        return self.substance_page

    def prime(self, url: str) -> None:
        self.calls.append(("prime", url))
        self._maybe_fail("prime", url)

    def fetch_table(self, url: str) -> str:
        self.calls.append(("data", url))
        self._maybe_fail("data", url)
        return self.table

    def call_kinds(self) -> List[str]:
        return [kind for kind, _ in self.calls]

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


@pytest.fixture
def catalogue_path(tmp_path) -> Path:
    return tmp_path / "catalogue" / ".fluids"


@pytest.fixture
def fresh_catalogue(catalogue_path) -> Path:
    """A catalogue file written just now."""
    catalogue_path.parent.mkdir(parents=True, exist_ok=True)
    catalogue_path.write_text(CATALOGUE_TEXT, encoding="utf-8")
    return catalogue_path


@pytest.fixture
def settings(catalogue_path) -> FluidsSettings:
    return FluidsSettings(catalogue_path=catalogue_path)


@pytest.fixture
def fake_client() -> FakeWebBookClient:
    return FakeWebBookClient()


@pytest.fixture
def substance_page() -> str:
    return SUBSTANCE_PAGE


@pytest.fixture
def client_factory():
    """Build FakeWebBookClient instances with custom responses."""
    return FakeWebBookClient


@pytest.fixture
def table_factory():
    return make_table


@pytest.fixture
def catalogue_text() -> str:
    return CATALOGUE_TEXT
