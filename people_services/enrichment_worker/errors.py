"""
Enrichment error taxonomy

Every per-invocation failure of the pipeline is an EnrichmentError and is
handled at the dispatch boundary of the subscription loop. Only
SubscriptionFatalError is allowed to end the process.
"""

from typing import Optional


class EnrichmentError(Exception):
    """Base class for failures while processing one person"""

    def __init__(self, person_id: Optional[str], message: str = ""):
        self.person_id = person_id
        super().__init__(message or f"{type(self).__name__}: person {person_id}")


class PersonNotFoundError(EnrichmentError):
    """The record store has no record with this id"""


class StoreReadError(EnrichmentError):
    """Reading the record failed or timed out"""


class StoreWriteError(EnrichmentError):
    """Persisting the merged record failed or timed out"""


class NoMatchError(EnrichmentError):
    """The lookup service returned no candidates; the record is left unchanged"""


class LookupServiceError(EnrichmentError):
    """
    The people search service could not be queried

    retriable is True for transport errors, timeouts, 429 and 5xx responses.
    """

    def __init__(
        self,
        person_id: Optional[str],
        message: str = "",
        retriable: bool = True,
        status_code: Optional[int] = None
    ):
        self.retriable = retriable
        self.status_code = status_code
        super().__init__(person_id, message)


class SubscriptionFatalError(Exception):
    """The work stream transport failed and the worker cannot make progress"""
