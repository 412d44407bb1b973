"""Application services: order queries."""

from __future__ import annotations

from fairbag.application.dto import OrderDTO, to_order_dto
from fairbag.domain.exceptions import EntityNotFoundError
from fairbag.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: str) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return to_order_dto(order)


class ListOrdersHandler:
    """A customer's purchases or a vendor's incoming orders, newest first."""

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def for_customer(self, customer_id: str) -> list[OrderDTO]:
        return [to_order_dto(o) for o in self._order_repo.list_for_customer(customer_id)]

    def for_vendor(self, vendor_id: str) -> list[OrderDTO]:
        return [to_order_dto(o) for o in self._order_repo.list_for_vendor(vendor_id)]
