"""Carrier lookups: tracking URLs and carrier status codes."""

from __future__ import annotations

from fairbag.domain.model.order import ShippingStatus

TRACKING_URL_TEMPLATES: dict[str, str] = {
    "usps": "https://tools.usps.com/go/TrackConfirmAction?tLabels={number}",
    "ups": "https://www.ups.com/track?tracknum={number}",
    "fedex": "https://www.fedex.com/fedextrack/?tracknumbers={number}",
    "dhl": "https://www.dhl.com/en/express/tracking.html?AWB={number}",
    "dhl express": "https://www.dhl.com/en/express/tracking.html?AWB={number}",
}

# Status codes reported by the tracking aggregator.
CARRIER_STATUS_MAP: dict[str, ShippingStatus] = {
    "transit": ShippingStatus.IN_TRANSIT,
    "pickup": ShippingStatus.IN_TRANSIT,
    "out_for_delivery": ShippingStatus.OUT_FOR_DELIVERY,
    "delivered": ShippingStatus.DELIVERED,
}


def tracking_url(provider: str, tracking_number: str) -> str | None:
    """Public tracking page for a shipment, or None for an unknown carrier."""
    template = TRACKING_URL_TEMPLATES.get((provider or "").lower().strip())
    if template is None:
        return None
    return template.format(number="".join((tracking_number or "").split()))


def map_carrier_status(raw_status: str | None) -> ShippingStatus | None:
    """Fulfillment status for a carrier code.

    ``notfound``, ``undelivered``, ``expired`` and unknown codes carry no
    forward progress and map to None.
    """
    return CARRIER_STATUS_MAP.get((raw_status or "").lower().strip())
