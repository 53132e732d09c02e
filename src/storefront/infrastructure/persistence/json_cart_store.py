"""JSON-file-backed implementation of CartStore.

The cart file belongs to the shopper, not to the store, so a damaged
or missing file is treated as an empty cart rather than an error.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from storefront.domain.model.cart import Cart
from storefront.domain.repository.cart_store import CartStore
from storefront.infrastructure.persistence.json_file import JsonFile

logger = logging.getLogger(__name__)


class JsonCartStore(CartStore):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, default=[])

    def load(self) -> Cart:
        try:
            payload = self._file.read()
        except (FileNotFoundError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Cart file %s is unreadable, starting empty: %s", self._file.path, exc)
            return Cart()
        return Cart.from_payload(payload)

    def save(self, cart: Cart) -> None:
        self._file.write(cart.to_payload())
