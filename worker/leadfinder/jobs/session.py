"""Per-user search session state.

A user may start a new search before the previous one finishes. Each search
gets a generation token from ``SearchSession.begin``; the token travels with
the pipeline call and comes back on the ``SearchOutcome``. ``apply`` only
accepts the outcome of the newest generation, so a slow stale response can
never overwrite the results of a later search.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from leadfinder.core.errors import ErrorKind, LeadSearchError
from leadfinder.core.geo import annotate_distances
from leadfinder.core.models import Coordinates, Lead, SearchQuery

from .find_leads import find_leads

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchOutcome:
    generation: int
    query: SearchQuery
    leads: Tuple[Lead, ...] = ()
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generation": self.generation,
            "leads": [lead.to_dict() for lead in self.leads],
            "error": self.error_kind.value if self.error_kind else None,
            "message": self.message,
        }


@dataclass(frozen=True)
class SearchHistoryEntry:
    id: str
    query: SearchQuery
    timestamp: str
    result_count: int


def no_results_message(query: SearchQuery) -> str:
    return (
        f'No verified results found for "{", ".join(query.categories)}" in {query.city}. '
        "Try searching for one category at a time."
    )


async def run_search(
    query: SearchQuery,
    generation: int,
    reference: Optional[Coordinates] = None,
    **pipeline_kwargs: Any,
) -> SearchOutcome:
    """Run the pipeline and fold success or classified failure into an outcome."""
    try:
        leads = await find_leads(query, reference, **pipeline_kwargs)
    except LeadSearchError as exc:
        return SearchOutcome(generation, query, error_kind=exc.kind, message=exc.user_message)

    message = None if leads else no_results_message(query)
    return SearchOutcome(generation, query, leads=tuple(leads), message=message)


@dataclass
class SearchSession:
    reference: Optional[Coordinates] = None
    generation: int = 0
    current: Optional[SearchOutcome] = None
    history: List[SearchHistoryEntry] = field(default_factory=list)

    def begin(self) -> int:
        self.generation += 1
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def apply(self, outcome: SearchOutcome) -> bool:
        """Store ``outcome`` if it belongs to the latest search; report whether it did."""
        if not self.is_current(outcome.generation):
            logger.info("Discarding stale outcome generation=%s latest=%s", outcome.generation, self.generation)
            return False

        if self.reference is not None and outcome.leads:
            outcome = replace(outcome, leads=tuple(annotate_distances(outcome.leads, self.reference)))
        self.current = outcome
        if outcome.ok:
            self.history.append(
                SearchHistoryEntry(
                    id=uuid.uuid4().hex,
                    query=outcome.query,
                    timestamp=datetime.now(timezone.utc).isoformat(),
                    result_count=len(outcome.leads),
                )
            )
        return True

    @property
    def leads(self) -> Tuple[Lead, ...]:
        if self.current is None:
            return ()
        return self.current.leads

    def set_reference(self, reference: Optional[Coordinates]) -> None:
        """Record the user's position and back-fill distances on the current leads."""
        self.reference = reference
        if self.current is None or reference is None:
            return
        annotated = tuple(annotate_distances(self.current.leads, reference))
        self.current = replace(self.current, leads=annotated)

    async def search(self, query: SearchQuery, **pipeline_kwargs: Any) -> SearchOutcome:
        """Begin a search, run it and apply it; stale results are returned but not stored."""
        generation = self.begin()
        outcome = await run_search(query, generation, self.reference, **pipeline_kwargs)
        self.apply(outcome)
        return outcome
