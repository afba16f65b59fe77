"""
Lead store interface.

The engine owns no persistent state; every read and write goes through a
LeadStore. Implementations must raise UpstreamStoreError for any backend
failure so callers see one error type regardless of backend.
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Dict, Any, List, Iterable

from .models.schemas import Lead, ContactHistoryEntry, MessageEvent
from .errors import UpstreamStoreError

logger = logging.getLogger(__name__)


class LeadStore(ABC):
    """
    Read/write access to leads, contact history and message events.
    """

    @abstractmethod
    def query_leads(
        self,
        ids: Optional[List[str]] = None,
        statuses: Optional[List[str]] = None,
        exclude_statuses: Optional[List[str]] = None,
        country: Optional[str] = None,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
        last_contact_before: Optional[datetime] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Lead]:
        """
        Fetch leads matching every given filter.

        created_after is inclusive, created_before and last_contact_before
        are exclusive. Leads never contacted do not match
        last_contact_before.
        """
        ...

    @abstractmethod
    def count_leads(
        self,
        statuses: Optional[List[str]] = None,
        country: Optional[str] = None,
    ) -> int:
        ...

    @abstractmethod
    def update_lead(self, lead_id: str, fields: Dict[str, Any]) -> Lead:
        """Apply a partial update and return the updated lead."""
        ...

    @abstractmethod
    def update_leads(self, ids: List[str], fields: Dict[str, Any]) -> List[Lead]:
        """Apply the same partial update to many leads; unknown ids are skipped."""
        ...

    @abstractmethod
    def query_contact_history(
        self,
        lead_ids: Optional[List[str]] = None,
        since: Optional[datetime] = None,
    ) -> List[ContactHistoryEntry]:
        ...

    @abstractmethod
    def query_messages(
        self,
        lead_ids: Optional[List[str]] = None,
        since: Optional[datetime] = None,
    ) -> List[MessageEvent]:
        ...


class InMemoryLeadStore(LeadStore):
    """
    Dict-backed store used by the development server and the tests.
    """

    def __init__(
        self,
        leads: Optional[Iterable[Any]] = None,
        contact_history: Optional[Iterable[Any]] = None,
        messages: Optional[Iterable[Any]] = None,
    ):
        self._lock = threading.Lock()
        self._leads: Dict[str, Lead] = {}
        self._contact_history: List[ContactHistoryEntry] = []
        self._messages: List[MessageEvent] = []

        self.add_leads(leads or [])
        self.add_contact_history(contact_history or [])
        self.add_messages(messages or [])

    # =========================================================================
    # Seeding
    # =========================================================================

    def add_leads(self, leads: Iterable[Any]):
        with self._lock:
            for lead in leads:
                lead = lead if isinstance(lead, Lead) else Lead(**lead)
                self._leads[lead.id] = lead

    def add_contact_history(self, entries: Iterable[Any]):
        with self._lock:
            self._contact_history.extend(
                e if isinstance(e, ContactHistoryEntry) else ContactHistoryEntry(**e)
                for e in entries
            )

    def add_messages(self, messages: Iterable[Any]):
        with self._lock:
            self._messages.extend(
                m if isinstance(m, MessageEvent) else MessageEvent(**m)
                for m in messages
            )

    # =========================================================================
    # LeadStore
    # =========================================================================

    def query_leads(
        self,
        ids=None,
        statuses=None,
        exclude_statuses=None,
        country=None,
        created_after=None,
        created_before=None,
        last_contact_before=None,
        limit=None,
        offset=0,
        order_by=None,
        descending=False,
    ) -> List[Lead]:
        with self._lock:
            if ids is not None:
                wanted = set(ids)
                leads = [l for l in self._leads.values() if l.id in wanted]
            else:
                leads = list(self._leads.values())

        if statuses is not None:
            leads = [l for l in leads if l.contact_status in statuses]
        if exclude_statuses:
            leads = [l for l in leads if l.contact_status not in exclude_statuses]
        if country:
            leads = [l for l in leads if l.country == country]
        if created_after:
            leads = [l for l in leads if l.created_at >= created_after]
        if created_before:
            leads = [l for l in leads if l.created_at < created_before]
        if last_contact_before:
            leads = [
                l for l in leads
                if l.last_contact_date is not None and l.last_contact_date < last_contact_before
            ]

        if order_by:
            if order_by not in Lead.model_fields:
                raise UpstreamStoreError(f"Cannot order by unknown column '{order_by}'")
            present = [l for l in leads if getattr(l, order_by) is not None]
            missing = [l for l in leads if getattr(l, order_by) is None]
            present.sort(key=lambda l: getattr(l, order_by), reverse=descending)
            leads = present + missing

        leads = leads[offset:]
        if limit is not None:
            leads = leads[:limit]

        return [l.model_copy(deep=True) for l in leads]

    def count_leads(self, statuses=None, country=None) -> int:
        with self._lock:
            leads = list(self._leads.values())
        return sum(
            1 for l in leads
            if (statuses is None or l.contact_status in statuses)
            and (not country or l.country == country)
        )

    def update_lead(self, lead_id: str, fields: Dict[str, Any]) -> Lead:
        with self._lock:
            current = self._leads.get(lead_id)
            if current is None:
                raise UpstreamStoreError(f"Lead {lead_id} not found", details={"lead_id": lead_id})
            try:
                updated = Lead(**{**current.model_dump(), **fields})
            except ValueError as e:
                raise UpstreamStoreError(
                    f"Rejected update for lead {lead_id}: {e}",
                    details={"lead_id": lead_id},
                ) from e
            self._leads[lead_id] = updated
        return updated.model_copy(deep=True)

    def update_leads(self, ids: List[str], fields: Dict[str, Any]) -> List[Lead]:
        updated = []
        for lead_id in ids:
            with self._lock:
                known = lead_id in self._leads
            if not known:
                logger.debug("update_leads: skipping unknown lead %s", lead_id)
                continue
            updated.append(self.update_lead(lead_id, fields))
        return updated

    def query_contact_history(self, lead_ids=None, since=None) -> List[ContactHistoryEntry]:
        with self._lock:
            entries = list(self._contact_history)
        if lead_ids is not None:
            wanted = set(lead_ids)
            entries = [e for e in entries if e.lead_id in wanted]
        if since:
            entries = [e for e in entries if e.contacted_at >= since]
        return [e.model_copy() for e in entries]

    def query_messages(self, lead_ids=None, since=None) -> List[MessageEvent]:
        with self._lock:
            messages = list(self._messages)
        if lead_ids is not None:
            wanted = set(lead_ids)
            messages = [m for m in messages if m.lead_id in wanted]
        if since:
            messages = [m for m in messages if m.sent_at >= since]
        return [m.model_copy() for m in messages]
