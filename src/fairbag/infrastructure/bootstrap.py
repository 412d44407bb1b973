"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from fairbag.application.cart_service import CartService
from fairbag.application.save_queue import SaveQueue
from fairbag.application.saved_for_later_service import SavedForLaterService
from fairbag.domain.model.identity import Identity, IdentityProvider
from fairbag.domain.repository.backends import KeyValueStore, RemoteStore
from fairbag.domain.repository.cart_repository import CartRepository, SavedItemsRepository
from fairbag.infrastructure.config import Settings
from fairbag.infrastructure.identity import StaticIdentityProvider
from fairbag.infrastructure.persistence.json_catalog_repository import JsonCatalogRepository
from fairbag.infrastructure.persistence.json_file_stores import (
    JsonFileKeyValueStore,
    JsonFileRemoteStore,
)
from fairbag.infrastructure.persistence.local_repository import (
    LocalCartRepository,
    LocalSavedItemsRepository,
)
from fairbag.infrastructure.persistence.remote_order_repository import RemoteOrderRepository
from fairbag.infrastructure.persistence.remote_repository import (
    RemoteCartRepository,
    RemoteSavedItemsRepository,
    has_remote_profile,
)

logger = structlog.get_logger(__name__)


# --- Adapters ---------------------------------------------------------------


def key_value_store(settings: Settings) -> JsonFileKeyValueStore:
    return JsonFileKeyValueStore(settings.data_dir / "device_cache.json")


def remote_store(settings: Settings) -> JsonFileRemoteStore:
    return JsonFileRemoteStore(settings.data_dir / "remote_store.json")


def catalog_repository(settings: Settings) -> JsonCatalogRepository:
    return JsonCatalogRepository(
        settings.data_dir / "products.json",
        settings.data_dir / "vendors.json",
    )


def order_repository(settings: Settings) -> RemoteOrderRepository:
    return RemoteOrderRepository(remote_store(settings))


def identity_provider(settings: Settings) -> StaticIdentityProvider:
    return StaticIdentityProvider.from_settings(settings.user_id, settings.user_email)


# --- Backend selection --------------------------------------------------------


def uses_remote_backend(identity: Identity, remote: RemoteStore) -> bool:
    """Remote when signed in with a customer profile, local cache otherwise."""
    return identity.is_authenticated and has_remote_profile(remote, identity.user_id)  # type: ignore[arg-type]


def cart_repository(
    identity: Identity,
    local: KeyValueStore,
    remote: RemoteStore,
) -> CartRepository:
    local_repo = LocalCartRepository(local)
    if uses_remote_backend(identity, remote):
        return RemoteCartRepository(remote, identity.user_id, fallback=local_repo)  # type: ignore[arg-type]
    return local_repo


def saved_items_repository(
    identity: Identity,
    local: KeyValueStore,
    remote: RemoteStore,
) -> SavedItemsRepository:
    local_repo = LocalSavedItemsRepository(local)
    if uses_remote_backend(identity, remote):
        return RemoteSavedItemsRepository(remote, identity.user_id, fallback=local_repo)  # type: ignore[arg-type]
    return local_repo


# --- Shopper session ----------------------------------------------------------


@dataclass
class ShopperSession:
    """Everything one signed-in (or anonymous) shopper works with."""

    identity_provider: IdentityProvider
    cart: CartService
    saved: SavedForLaterService
    save_queue: SaveQueue

    def close(self, timeout: float | None = 10.0) -> None:
        """Let queued cart writes land before the process exits."""
        self.save_queue.close(timeout)


def open_session(
    settings: Settings,
    provider: IdentityProvider | None = None,
    local: KeyValueStore | None = None,
    remote: RemoteStore | None = None,
) -> ShopperSession:
    """Build and load the cart and saved list for the current identity.

    Signing in as someone else means opening a new session: the new
    backend is loaded as-is and nothing is carried over.
    """
    if provider is None:
        provider = identity_provider(settings)
    if local is None:
        local = key_value_store(settings)
    if remote is None:
        remote = remote_store(settings)
    identity = provider.current()
    owner = identity.user_id or "guest"

    queue = SaveQueue()
    cart = CartService(
        cart_repository(identity, local, remote), queue, save_key=f"cart:{owner}"
    )
    saved = SavedForLaterService(
        saved_items_repository(identity, local, remote),
        queue,
        cart,
        save_key=f"saved_for_later:{owner}",
    )
    cart.load()
    saved.load()
    logger.info("session_opened", user_id=identity.user_id)
    return ShopperSession(provider, cart, saved, queue)
