# stockroom/session.py
"""User intents for one browser session.

Each intent that changes the query derives a new ``QueryState`` from the
current one and resyncs.  The derivation and the fetch it triggers are one
``ProductSync.transition`` so concurrent intents cannot pair a state with
another intent's response.  Mutations resync the current query on success.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import OrderedDict
from typing import Any, Callable, Mapping

from .errors import ValidationError
from .models import ProductDraft, ViewModel
from .query_state import QueryState, SortField, SortOrder
from .sync import ProductSync


class InventorySession:
    def __init__(self, sync: ProductSync) -> None:
        self.sync = sync
        self.last_seen = time.monotonic()

    @property
    def state(self) -> QueryState:
        return self.sync.state

    @property
    def view(self) -> ViewModel:
        return self.sync.view

    @property
    def categories(self) -> list[str]:
        return self.sync.categories

    def _apply(self, change: Callable[[QueryState], QueryState]) -> ViewModel:
        return self.sync.transition(lambda state, view: change(state))

    def load(self) -> ViewModel:
        """Initial fetch: categories plus the first page."""
        self.sync.fetch_categories()
        return self.refresh()

    def refresh(self) -> ViewModel:
        return self._apply(lambda s: s)

    def search(self, text: str) -> ViewModel:
        return self._apply(lambda s: s.set_search_term(text))

    def filter_by_category(self, category: str | None) -> ViewModel:
        return self._apply(lambda s: s.set_category(category))

    def change_sort(self, sort_field: SortField | str) -> ViewModel:
        return self._apply(lambda s: s.set_sort_field(sort_field))

    def change_order(self, sort_order: SortOrder | str) -> ViewModel:
        return self._apply(lambda s: s.set_sort_order(sort_order))

    def toggle_order(self) -> ViewModel:
        return self._apply(lambda s: s.toggle_sort_order())

    def go_to_page(self, page: int) -> ViewModel:
        """Fetch ``page`` if it lies within the last known page count.

        Navigating to the page already shown fetches it again, which is how
        the user retries a failed page load.
        """
        def change(state: QueryState, view: ViewModel) -> QueryState | None:
            if page < 1 or page > view.total_pages:
                logging.debug("page %s rejected (total_pages=%s)", page, view.total_pages)
                return None
            return state.set_page(page, view.total_pages)

        return self.sync.transition(change)

    def submit_form(
        self,
        draft: ProductDraft | Mapping[str, Any],
        editing_id: Any = None,
    ) -> ViewModel:
        if not isinstance(draft, ProductDraft):
            try:
                draft = ProductDraft.from_form(draft)
            except ValidationError as e:
                return self.sync.report_error(str(e))
        if editing_id is None:
            result = self.sync.create(draft)
        else:
            result = self.sync.update(editing_id, draft)
        if not result.ok:
            return self.sync.report_error(result.error)
        # New products may introduce a new category.
        self.sync.fetch_categories()
        return self.refresh()

    def delete_product(self, product_id: Any) -> ViewModel:
        result = self.sync.remove(product_id)
        if not result.ok:
            return self.sync.report_error(result.error)
        return self.refresh()

    def to_dict(self) -> dict:
        return {
            "query": self.state.to_dict(),
            "view": self.view.to_dict(),
            "categories": self.categories,
        }

    def close(self) -> None:
        self.sync.close()


class SessionRegistry:
    """Keeps one ``InventorySession`` per browser, keyed by an opaque id.

    At most ``max_sessions`` are kept, least recently used first out, and a
    session idle for longer than ``ttl`` seconds is dropped.  Dropped
    sessions are closed, which closes their HTTP connection pool.
    """

    def __init__(
        self,
        factory: Callable[[], InventorySession],
        max_sessions: int = 500,
        ttl: float = 1800,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.factory = factory
        self.max_sessions = max_sessions
        self.ttl = ttl
        self.clock = clock
        self.sessions: OrderedDict[str, InventorySession] = OrderedDict()
        self.lock = threading.Lock()

    def get(self, key: str | None) -> tuple[str, InventorySession, bool]:
        """Return ``(key, session, created)``, creating a session if needed."""
        with self.lock:
            now = self.clock()
            evicted = self._expire(now)
            if key and key in self.sessions:
                sess = self.sessions[key]
                sess.last_seen = now
                self.sessions.move_to_end(key)
                created = False
            else:
                key = uuid.uuid4().hex
                sess = self.factory()
                sess.last_seen = now
                self.sessions[key] = sess
                created = True
                while len(self.sessions) > self.max_sessions:
                    _, old = self.sessions.popitem(last=False)
                    evicted.append(old)
        for old in evicted:
            old.close()
        if evicted:
            logging.info("evicted %s inventory sessions (%s active)", len(evicted), len(self.sessions))
        return key, sess, created

    def _expire(self, now: float) -> list[InventorySession]:
        expired = []
        while self.sessions:
            key, sess = next(iter(self.sessions.items()))
            if now - sess.last_seen <= self.ttl:
                break
            del self.sessions[key]
            expired.append(sess)
        return expired
