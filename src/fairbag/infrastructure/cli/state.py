"""Per-invocation state shared by CLI commands."""

from __future__ import annotations

import click

from fairbag.domain.exceptions import EntityNotFoundError
from fairbag.domain.model.catalog import Product, Vendor
from fairbag.domain.model.identity import IdentityProvider
from fairbag.domain.model.value_objects import Customization
from fairbag.infrastructure import bootstrap
from fairbag.infrastructure.bootstrap import ShopperSession
from fairbag.infrastructure.config import Settings
from fairbag.infrastructure.persistence.json_catalog_repository import JsonCatalogRepository
from fairbag.infrastructure.persistence.remote_order_repository import RemoteOrderRepository


class CliState:
    """Builds adapters on first use; the shopper session is closed on exit."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._session: ShopperSession | None = None

    @property
    def session(self) -> ShopperSession:
        if self._session is None:
            self._session = bootstrap.open_session(self.settings)
        return self._session

    @property
    def identity_provider(self) -> IdentityProvider:
        if self._session is not None:
            return self._session.identity_provider
        return bootstrap.identity_provider(self.settings)

    def catalog(self) -> JsonCatalogRepository:
        return bootstrap.catalog_repository(self.settings)

    def orders(self) -> RemoteOrderRepository:
        return bootstrap.order_repository(self.settings)

    def product(self, product_id: str) -> Product:
        product = self.catalog().get_product(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product not found: '{product_id}'")
        return product

    def vendor(self, vendor_id: str) -> Vendor:
        vendor = self.catalog().get_vendor(vendor_id)
        if vendor is None:
            raise EntityNotFoundError(f"Vendor not found: '{vendor_id}'")
        return vendor

    def vendor_for(self, product: Product, vendor_id: str | None) -> Vendor:
        vendor_id = vendor_id or product.vendor_id
        if not vendor_id:
            raise click.UsageError(f"Product '{product.id}' is not listed by any vendor.")
        return self.vendor(vendor_id)

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None


pass_state = click.make_pass_decorator(CliState)


def parse_options(raw: tuple[str, ...]) -> list[Customization] | None:
    """Parse repeated ``code=value`` or ``code=value@delta`` options.

    No options at all returns None, which commands treat as "any variant"
    where that makes sense.
    """
    if not raw:
        return None
    parsed: list[Customization] = []
    for entry in raw:
        if "=" not in entry:
            raise click.BadParameter(
                f"Invalid option '{entry}'. Expected 'code=value' or 'code=value@delta'."
            )
        code, rest = entry.split("=", 1)
        value, _, delta = rest.partition("@")
        parsed.append(
            Customization(
                code=code.strip(),
                label=code.strip().replace("_", " ").capitalize(),
                value=_parse_value(value.strip()),
                price_delta=delta.strip() or "0",  # type: ignore[arg-type]
            )
        )
    return parsed


def _parse_value(value: str) -> str | bool:
    lowered = value.lower()
    if lowered in ("yes", "true"):
        return True
    if lowered in ("no", "false"):
        return False
    return value
