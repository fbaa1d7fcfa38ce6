"""
Fetch pipeline: one calculation request, end to end.

    resolve substance (optional) -> build URLs -> prime -> fetch -> classify -> write

Nothing is written when any request fails. An unrecognized table layout is
not an error: the table is written without a legend and the FormatError is
returned on the result for the caller to report.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

from fluidfetch.calculations import CalculationRequest, RequestPlan, build
from fluidfetch.catalogue import CatalogueCache, RefreshResult
from fluidfetch.config import FluidsSettings
from fluidfetch.connectors import WebBookClient
from fluidfetch.exceptions import FormatError, ResolutionError
from fluidfetch.tables import (
    ClassifiedTable,
    LegendRegistry,
    classify,
    default_registry,
    format_error,
    render_output,
    write_output,
)
from fluidfetch.units import UnitLabels, resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    output_path: Path
    plan: RequestPlan
    table: ClassifiedTable
    substance_label: str
    format_error: Optional[FormatError] = None
    catalogue: Optional[RefreshResult] = None

    @property
    def column_count(self) -> int:
        return self.table.column_count

    @property
    def data_points(self) -> int:
        return self.table.data_points


class FluidsPipeline:
    """
    Runs calculation requests against the WebBook.

    Usage:
        >>> settings = load_settings()
        >>> with WebBookClient(settings) as client:
        ...     pipeline = FluidsPipeline(settings, client)
        ...     result = pipeline.run(IsothermRequest(substance_id="C7732185", ...))
    """

    def __init__(
        self,
        settings: FluidsSettings,
        client: WebBookClient,
        catalogue: Optional[CatalogueCache] = None,
        registry: Optional[LegendRegistry] = None,
        progress: Optional[Callable[[str], None]] = None,
    ):
        self.settings = settings
        self.client = client
        self.catalogue = catalogue or CatalogueCache(
            settings.catalogue_path,
            client=client,
            max_age=timedelta(seconds=settings.catalogue_max_age),
        )
        self.registry = registry or default_registry()
        self._progress = progress or (lambda message: None)

    def resolve_substance(self, substance_id: str, renew: bool = False):
        """Refresh the catalogue if needed and look up the substance name.

        Returns:
            (name, RefreshResult)

        Raises:
            ResolutionError: if the ID is not in the catalogue
        """
        refresh = self.catalogue.refresh(force=renew)
        name = self.catalogue.lookup_by_id(substance_id)
        if name is None:
            raise ResolutionError(
                f"The ID you entered is invalid: {substance_id}. "
                "Use 'fluids catalogue show' to list available IDs.",
                substance=substance_id,
            )
        logger.info(f"Resolved ID:{substance_id} = {name}")
        return name, refresh

    def plan(self, request: CalculationRequest) -> RequestPlan:
        return build(
            request,
            resolve(request.units),
            base_url=self.settings.data_url,
            prefix=self.settings.output_prefix,
        )

    def fetch(self, plan: RequestPlan) -> str:
        """Prime the server, then download the table. Order matters."""
        self._progress("send request to NIST")
        self.client.prime(plan.prime_url)
        self._progress("retrieve data from NIST")
        return self.client.fetch_table(plan.data_url)

    def run(
        self,
        request: CalculationRequest,
        output: Optional[Path] = None,
        resolve_name: bool = False,
        renew: bool = False,
        timestamp: Optional[datetime] = None,
    ) -> FetchResult:
        """Execute one request and write its table.

        Args:
            request: Calculation to run
            output: Output file (default: <prefix>_<tag>.dat in the cwd)
            resolve_name: Label the file with the substance name from the catalogue
            renew: Force a catalogue refresh before resolving
            timestamp: Time stamp for the file header (default: now)
        """
        refresh = None
        if resolve_name or renew:
            name, refresh = self.resolve_substance(request.substance_id, renew=renew)
            substance_label = name
        else:
            substance_label = f"ID:{request.substance_id}"

        units: UnitLabels = resolve(request.units)
        plan = self.plan(request)
        output_path = Path(output) if output else Path(plan.output_name)

        body = self.fetch(plan)
        table = classify(body, self.registry)
        warning = format_error(table, self.registry)

        text = render_output(
            table,
            units,
            substance_label=substance_label,
            tag=request.TAG,
            timestamp=timestamp,
            citation=self.settings.source_citation,
        )
        write_output(output_path, text)
        logger.info(f"Table with {table.data_points} data points written to {output_path}")

        return FetchResult(
            output_path=output_path,
            plan=plan,
            table=table,
            substance_label=substance_label,
            format_error=warning,
            catalogue=refresh,
        )
