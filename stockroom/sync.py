# stockroom/sync.py
"""Fetch pages of products for a ``QueryState`` and own the mutations."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Any, Callable

from .errors import ApiError, NetworkError, StockroomError
from .models import MutationResult, Product, ProductDraft, ViewModel
from .query_state import QueryState

PAGE_SIZE = 10

NETWORK_MESSAGE = "Could not reach the inventory server. Please try again."
MALFORMED_MESSAGE = "The inventory server sent an unexpected response."


class ProductSync:
    """Maps query states to requests and responses to view models.

    Nothing raised by the API client escapes this class: page fetches record
    the failure on the returned ``ViewModel`` and mutations return a failed
    ``MutationResult``.

    The current ``QueryState`` lives here too.  It is replaced in the same
    critical section that issues the sequence token, so the latest token
    always belongs to the current state.  A response is only applied if no
    newer fetch was issued meanwhile (last-issued-wins).
    """

    def __init__(self, api, page_size: int = PAGE_SIZE) -> None:
        self.api = api
        self.page_size = page_size
        self._lock = threading.Lock()
        self._issued = 0
        self._state = QueryState()
        self._view = ViewModel()
        self._categories: tuple[str, ...] = ()

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def view(self) -> ViewModel:
        return self._view

    @property
    def categories(self) -> list[str]:
        return list(self._categories)

    def fetch_page(self, state: QueryState) -> ViewModel:
        return self.transition(lambda current, view: state)

    def transition(
        self,
        change: Callable[[QueryState, ViewModel], QueryState | None],
    ) -> ViewModel:
        """Derive the next state from the current one and fetch it.

        ``change`` runs under the lock with the current state and view.
        Returning ``None`` rejects the transition: nothing is fetched and the
        current view is returned.
        """
        with self._lock:
            state = change(self._state, self._view)
            if state is None:
                return self._view
            self._state = state
            self._issued += 1
            token = self._issued
            # Stale items stay visible while the request is in flight.
            self._view = self._view.begin_loading()

        fresh: ViewModel | None = None
        message = ""
        try:
            data = self.api.list_products(state.to_params(self.page_size))
            fresh = self._to_view(state, data)
        except NetworkError as e:
            logging.error("product fetch failed (network) for %s: %s", state, e)
            message = NETWORK_MESSAGE
        except ApiError as e:
            logging.error("product fetch failed (HTTP %s) for %s: %s", e.status_code, state, e)
            message = e.message or f"Failed to load products (HTTP {e.status_code})."
            if e.status_code is None:
                message = MALFORMED_MESSAGE
        except (AttributeError, KeyError, TypeError, ValueError):
            logging.exception("malformed product page for %s", state)
            message = MALFORMED_MESSAGE

        with self._lock:
            if token != self._issued:
                logging.debug("discarding stale page fetch %s (latest %s)", token, self._issued)
                return self._view
            if fresh is None:
                self._view = self._view.failed(message)
            else:
                self._view = fresh
            return self._view

    def _to_view(self, state: QueryState, data: dict) -> ViewModel:
        rows = data["products"]
        if not isinstance(rows, list):
            raise TypeError("products is not a list")
        items = tuple(Product.from_api(row) for row in rows)
        pagination = data.get("pagination") or {}
        total_items = int(pagination.get("totalItems", len(items)))
        total_pages = int(pagination.get("totalPages", 1 if items else 0))
        return ViewModel(
            items=items,
            page=state.page,
            total_pages=total_pages,
            total_items=total_items,
            loading=False,
            error=None,
        )

    def fetch_categories(self) -> list[str]:
        """Refresh the category filter options.

        Failures are logged and leave both the previous list and the
        view's error untouched.
        """
        try:
            categories = self.api.list_categories()
        except StockroomError as e:
            logging.warning("category list unavailable: %s", e)
            return self.categories
        self._categories = tuple(categories)
        return self.categories

    def close(self) -> None:
        close = getattr(self.api, "close", None)
        if close is not None:
            close()

    def report_error(self, message: str) -> ViewModel:
        with self._lock:
            self._view = replace(self._view, error=message)
            return self._view

    def create(self, draft: ProductDraft) -> MutationResult:
        return self._mutate(
            lambda: self.api.create_product(draft.to_payload()),
            "Failed to create product.",
        )

    def update(self, product_id: Any, draft: ProductDraft) -> MutationResult:
        return self._mutate(
            lambda: self.api.update_product(product_id, draft.to_payload()),
            "Failed to update product.",
        )

    def remove(self, product_id: Any) -> MutationResult:
        return self._mutate(
            lambda: self.api.delete_product(product_id),
            "Failed to delete product.",
        )

    def _mutate(self, call: Callable[[], Any], fallback: str) -> MutationResult:
        try:
            data = call()
        except ApiError as e:
            logging.warning("%s HTTP %s: %s", fallback, e.status_code, e.message)
            return MutationResult.failure(e.message or fallback)
        except NetworkError as e:
            logging.warning("%s network error: %s", fallback, e)
            return MutationResult.failure(fallback)

        product = None
        if isinstance(data, dict):
            try:
                product = Product.from_api(data)
            except (AttributeError, KeyError, TypeError, ValueError):
                logging.debug("mutation response without a usable product: %r", data)
        return MutationResult.success(product)
