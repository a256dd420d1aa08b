"""
Enrichment Pipeline - Core business logic

read -> lookup -> merge -> write, one person per invocation.
Each stage either returns its value or raises an EnrichmentError, which
short-circuits the remaining stages.
"""

import asyncio
from typing import Optional, List

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_random_exponential,
)

from people_shared.config.settings import settings
from people_shared.models.person import ENRICHABLE_FIELDS, LookupCandidate, PersonRecord
from people_shared.utils.logger import get_logger

from .errors import (
    EnrichmentError,
    LookupServiceError,
    NoMatchError,
    StoreReadError,
    StoreWriteError,
)
from .metrics import ProcessedCounter
from .providers.people_lookup_provider import PeopleLookupClient
from .stores.base import PersonStore

logger = get_logger(__name__)


def _is_retriable(exc: BaseException) -> bool:
    return isinstance(exc, LookupServiceError) and exc.retriable


def merge_candidate(record: PersonRecord, candidate: LookupCandidate) -> PersonRecord:
    """
    Overwrite the enrichable fields of record with the candidate's values

    Pure and deterministic: the same inputs always give the same record.
    id and creator attribution are carried over untouched.
    """
    updates = {field: getattr(candidate, field) for field in ENRICHABLE_FIELDS}
    return record.model_copy(update=updates)


class EnrichmentPipeline:
    """
    Enriches a single person record from the people search service
    """

    def __init__(
        self,
        store: PersonStore,
        lookup: PeopleLookupClient,
        counter: Optional[ProcessedCounter] = None,
        store_timeout: Optional[float] = None,
        lookup_max_attempts: Optional[int] = None,
        lookup_backoff_max: Optional[float] = None
    ):
        self.store = store
        self.lookup = lookup
        self.counter = counter or ProcessedCounter()
        self.store_timeout = store_timeout or settings.store_timeout_seconds
        self.lookup_max_attempts = lookup_max_attempts or settings.lookup_max_attempts
        self.lookup_backoff_max = (
            lookup_backoff_max
            if lookup_backoff_max is not None
            else settings.lookup_backoff_max_seconds
        )

    async def process_person(self, person_id: str) -> PersonRecord:
        """
        Load a person, look them up by email, merge the top match and save

        Returns:
            The merged record as persisted

        Raises:
            PersonNotFoundError: no record with this id
            StoreReadError: the store could not be read
            LookupServiceError: the search service failed
            NoMatchError: nothing to merge; the record is unchanged
            StoreWriteError: the merged record could not be saved
        """
        record = await self._read(person_id)
        candidates = await self._lookup(record)
        merged = self._merge(record, candidates)
        saved = await self._write(merged)

        processed = self.counter.increment()
        logger.info("person_enriched", person_id=person_id, processed=processed)
        return saved

    # =============================================
    # STAGES
    # =============================================

    async def _read(self, person_id: str) -> PersonRecord:
        try:
            return await asyncio.wait_for(self.store.read(person_id), timeout=self.store_timeout)
        except EnrichmentError:
            raise
        except asyncio.TimeoutError as e:
            raise StoreReadError(person_id, "store read timed out") from e
        except Exception as e:
            raise StoreReadError(person_id, f"store read failed: {e}") from e

    async def _lookup(self, record: PersonRecord) -> List[LookupCandidate]:
        if not record.email:
            raise NoMatchError(record.id, "record has no email to look up")

        retrying = AsyncRetrying(
            retry=retry_if_exception(_is_retriable),
            wait=wait_random_exponential(multiplier=1, max=self.lookup_backoff_max),
            stop=stop_after_attempt(self.lookup_max_attempts),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            "people_lookup_retry",
                            person_id=record.id,
                            attempt=attempt.retry_state.attempt_number
                        )
                    candidates = await self.lookup.search(record.email)
        except LookupServiceError as e:
            raise LookupServiceError(
                record.id,
                str(e),
                retriable=e.retriable,
                status_code=e.status_code
            ) from e

        if not candidates:
            raise NoMatchError(record.id, f"no lookup match for {record.email}")
        return candidates

    def _merge(self, record: PersonRecord, candidates: List[LookupCandidate]) -> PersonRecord:
        # Relevance order from the service is trusted; no local re-ranking
        return merge_candidate(record, candidates[0])

    async def _write(self, record: PersonRecord) -> PersonRecord:
        try:
            return await asyncio.wait_for(
                self.store.update(record.id, record, queue_person=False),
                timeout=self.store_timeout
            )
        except asyncio.TimeoutError as e:
            raise StoreWriteError(record.id, "store write timed out") from e
        except Exception as e:
            raise StoreWriteError(record.id, f"store write failed: {e}") from e
