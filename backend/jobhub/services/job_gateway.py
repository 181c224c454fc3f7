"""
Dedup & Persist Gateway

Normalizes raw listings and writes the ones whose apply URL is not yet
stored. Every listing is handled on its own: a failure is recorded
against its index and the rest of the batch carries on.
"""

from typing import Callable, Iterable, Optional, Protocol
from datetime import datetime

from pydantic import ValidationError

from jobhub.core.exceptions import DuplicateJobError, ListingExtractionError, StorageError
from jobhub.schemas.job import NormalizedJob
from jobhub.scrapers.base import ExtractionResult, ListingError, RawListing
from jobhub.scrapers.normalizer import normalize_listing
from jobhub.utils.logger import get_logger

logger = get_logger(__name__)


class JobStore(Protocol):
    """Storage operations the gateway relies on."""

    async def find_job_by_apply_url(self, apply_url: str) -> Optional[NormalizedJob]: ...

    async def insert_job(self, job: NormalizedJob) -> NormalizedJob: ...


def _validation_message(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(part) for part in item.get("loc", ())) or "listing"
        parts.append(f"{field}: {item.get('msg')}")
    return "invalid listing (" + "; ".join(parts) + ")"


class JobGateway:
    """Persists unseen jobs and reports per-source counts."""

    def __init__(self, store: JobStore, clock: Callable[[], datetime] = datetime.utcnow) -> None:
        self.store = store
        self._clock = clock

    async def save_all(self, listings: Iterable[RawListing], source_name: str) -> ExtractionResult:
        """
        Normalize, dedup and insert a batch of listings.

        Args:
            listings: Raw listings from one source
            source_name: Name of the source they came from

        Returns:
            ExtractionResult: raw_count is the number of listings attempted,
            saved_count the number of new inserts
        """
        listings = list(listings)
        result = ExtractionResult(source_name=source_name, raw_count=len(listings))

        for position, listing in enumerate(listings):
            index = listing.index if listing.index is not None else position
            try:
                if await self._save_one(listing, source_name):
                    result.saved_count += 1
                else:
                    result.duplicate_count += 1
            except ValidationError as e:
                self._record(result, index, _validation_message(e))
            except (ListingExtractionError, StorageError) as e:
                self._record(result, index, e.message)

        return result

    async def _save_one(self, listing: RawListing, source_name: str) -> bool:
        """Return True when inserted, False when the job was already known."""
        job = normalize_listing(listing, source_name, now=self._clock())

        if await self.store.find_job_by_apply_url(job.apply_url) is not None:
            logger.debug("Job already stored", source=source_name, apply_url=job.apply_url)
            return False

        try:
            await self.store.insert_job(job)
        except DuplicateJobError:
            # Another writer stored it between lookup and insert
            logger.debug("Job stored concurrently", source=source_name, apply_url=job.apply_url)
            return False

        return True

    @staticmethod
    def _record(result: ExtractionResult, index: int, message: str) -> None:
        logger.error(
            "Failed to save listing",
            source=result.source_name,
            listing_index=index,
            error=message,
        )
        result.errors.append(ListingError(index, message))
