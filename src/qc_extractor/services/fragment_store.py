"""Bounded store of input fragments and the bulk extraction fan-out.

The store owns an ordered list of immutable `Fragment` snapshots. Every
mutation replaces one fragment by id, and only the coroutine that owns the
store writes to it: `process_all` runs one extraction task per eligible
fragment, then merges each `(fragment_id, outcome)` pair back by id as the
tasks complete. Listeners registered with `subscribe` see every transition
immediately.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from qc_extractor.core.structured_logging import StructuredLogger, set_correlation_id
from qc_extractor.schemas.quality import ExtractedRecord, Fragment
from qc_extractor.services.ai.exceptions import ExtractionError
from qc_extractor.services.ai.interfaces import ExtractorProtocol


logger = StructuredLogger(__name__)

MAX_FRAGMENTS = 10
EXTRACTION_FAILED_LABEL = "Extraction failed"

FragmentListener = Callable[[Fragment], None]


@dataclass(slots=True)
class FragmentOutcome:
    """Settled result of one fragment's extraction task."""

    fragment_id: str
    result: ExtractedRecord | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.result is not None


class FragmentStore:
    """Ordered collection of 1..`max_fragments` fragments."""

    def __init__(
        self,
        extractor: ExtractorProtocol,
        *,
        max_fragments: int = MAX_FRAGMENTS,
    ) -> None:
        if max_fragments < 1:
            raise ValueError("max_fragments must be at least 1")
        self._extractor = extractor
        self._max_fragments = max_fragments
        self._fragments: list[Fragment] = [Fragment()]
        self._listeners: list[FragmentListener] = []
        self._processing_all = False

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def fragments(self) -> tuple[Fragment, ...]:
        return tuple(self._fragments)

    @property
    def max_fragments(self) -> int:
        return self._max_fragments

    def __len__(self) -> int:
        return len(self._fragments)

    def get(self, fragment_id: str) -> Fragment | None:
        for fragment in self._fragments:
            if fragment.id == fragment_id:
                return fragment
        return None

    @property
    def can_add(self) -> bool:
        return len(self._fragments) < self._max_fragments

    @property
    def has_input(self) -> bool:
        """True when at least one fragment has non-blank text."""
        return any(f.has_text for f in self._fragments)

    @property
    def is_processing_all(self) -> bool:
        return self._processing_all

    def results(self) -> list[ExtractedRecord]:
        """Records of all extracted fragments, in on-screen order."""
        return [f.result for f in self._fragments if f.result is not None]

    @property
    def processed_count(self) -> int:
        return sum(1 for f in self._fragments if f.result is not None)

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable snapshot of the store."""
        return {
            "max_fragments": self._max_fragments,
            "fragments": [f.model_dump(mode="json") for f in self._fragments],
        }

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, listener: FragmentListener) -> Callable[[], None]:
        """Register *listener* for every fragment transition.

        Returns a callable that removes the listener again.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, fragment: Fragment) -> None:
        for listener in list(self._listeners):
            try:
                listener(fragment)
            except Exception:  # noqa: BLE001
                logger.exception(
                    "Fragment listener failed",
                    fragment_id=fragment.id,
                    listener=getattr(listener, "__name__", repr(listener)),
                )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _index_of(self, fragment_id: str) -> int | None:
        for index, fragment in enumerate(self._fragments):
            if fragment.id == fragment_id:
                return index
        return None

    def _replace(self, fragment_id: str, **changes: Any) -> Fragment | None:
        index = self._index_of(fragment_id)
        if index is None:
            logger.debug("Fragment no longer present", fragment_id=fragment_id)
            return None
        updated = self._fragments[index].update(**changes)
        self._fragments[index] = updated
        self._notify(updated)
        return updated

    def add_fragment(self) -> Fragment | None:
        """Append an empty fragment; returns None once the cap is reached."""
        if not self.can_add:
            logger.debug("Fragment cap reached", max_fragments=self._max_fragments)
            return None
        fragment = Fragment()
        self._fragments.append(fragment)
        self._notify(fragment)
        return fragment

    def remove_fragment(self, fragment_id: str) -> None:
        """Remove a fragment; the sole remaining fragment is reset instead."""
        index = self._index_of(fragment_id)
        if index is None:
            return
        if len(self._fragments) > 1:
            removed = self._fragments.pop(index)
            self._notify(removed)
            return
        fresh = Fragment()
        self._fragments = [fresh]
        self._notify(fresh)

    def update_text(self, fragment_id: str, text: str) -> Fragment | None:
        """Replace the text of one fragment, leaving its other fields alone."""
        return self._replace(fragment_id, text=text)

    # ------------------------------------------------------------------
    # Bulk extraction
    # ------------------------------------------------------------------

    async def _extract(self, fragment_id: str, text: str) -> FragmentOutcome:
        try:
            record = await self._extractor.extract(text)
        except ExtractionError as e:
            logger.warning(
                "Fragment extraction failed",
                fragment_id=fragment_id,
                error_code=e.error_code,
            )
            return FragmentOutcome(fragment_id, error=EXTRACTION_FAILED_LABEL)
        except Exception:  # noqa: BLE001
            logger.exception(
                "Unexpected error during fragment extraction",
                fragment_id=fragment_id,
            )
            return FragmentOutcome(fragment_id, error=EXTRACTION_FAILED_LABEL)
        return FragmentOutcome(fragment_id, result=record)

    def _settle(self, outcome: FragmentOutcome) -> None:
        if outcome.success:
            self._replace(
                outcome.fragment_id,
                is_processing=False,
                result=outcome.result,
                error=None,
            )
        else:
            self._replace(
                outcome.fragment_id,
                is_processing=False,
                result=None,
                error=outcome.error,
            )

    async def process_all(self) -> dict[str, FragmentOutcome]:
        """Extract every fragment with text and no result, concurrently.

        Returns the outcomes keyed by fragment id once every launched
        extraction has settled. Failures are recorded on their fragment and
        never abort the others.
        """
        eligible = [(f.id, f.text) for f in self._fragments if f.is_eligible]
        if not eligible:
            logger.info("No fragments eligible for extraction")
            return {}

        set_correlation_id(None)
        self._processing_all = True
        logger.info("Starting bulk extraction", fragment_count=len(eligible))

        outcomes: dict[str, FragmentOutcome] = {}
        try:
            for fragment_id, _ in eligible:
                self._replace(fragment_id, is_processing=True, error=None)

            tasks = {
                fragment_id: asyncio.create_task(self._extract(fragment_id, text))
                for fragment_id, text in eligible
            }
            for next_done in asyncio.as_completed(tasks.values()):
                outcome = await next_done
                outcomes[outcome.fragment_id] = outcome
                self._settle(outcome)
        finally:
            self._processing_all = False

        succeeded = sum(1 for o in outcomes.values() if o.success)
        logger.info(
            "Bulk extraction finished",
            succeeded=succeeded,
            failed=len(outcomes) - succeeded,
        )
        return outcomes
