"""Payment gateway order creation.

``RazorpayGateway`` talks to the Razorpay Orders API; ``FakeGateway`` answers
locally and is used when no API keys are configured (and in tests). The active
gateway lives in ``app.extensions["payment_gateway"]``.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from uuid import uuid4

import requests
from flask import current_app

from billing.errors import UpstreamError
from billing.services.payment_ledger import record_gateway_order


@dataclass(frozen=True)
class GatewayOrder:
    order_id: str
    amount: int  # 最小通貨単位（paise）
    currency: str


def to_minor_units(amount):
    return int(round(amount * 100))


class PaymentGateway(ABC):
    currency = "INR"

    @abstractmethod
    def create_order(self, amount, receipt_id) -> GatewayOrder:
        """Create a payable order for ``amount`` (major units)."""


class RazorpayGateway(PaymentGateway):
    def __init__(self, key_id, key_secret, api_url="https://api.razorpay.com/v1", currency="INR", timeout=10):
        self.key_id = key_id
        self.key_secret = key_secret
        self.api_url = api_url.rstrip("/")
        self.currency = currency
        self.timeout = timeout

    def create_order(self, amount, receipt_id) -> GatewayOrder:
        payload = {
            "amount": to_minor_units(amount),
            "currency": self.currency,
            "receipt": receipt_id,
        }
        try:
            resp = requests.post(
                f"{self.api_url}/orders",
                json=payload,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
            return GatewayOrder(
                order_id=body["id"],
                amount=body.get("amount", payload["amount"]),
                currency=body.get("currency", self.currency),
            )
        except requests.RequestException as e:
            raise UpstreamError(f"Error creating order: {e}")
        except (ValueError, KeyError) as e:
            raise UpstreamError(f"Malformed gateway response: {e}")


class FakeGateway(PaymentGateway):
    """Local gateway with configurable success, records every call."""

    def __init__(self, currency="INR"):
        self.currency = currency
        self.should_succeed = True
        self.failure_reason = "Gateway unavailable"
        self.calls = []

    def configure(self, should_succeed, failure_reason="Gateway unavailable"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_order(self, amount, receipt_id) -> GatewayOrder:
        self.calls.append({"method": "create_order", "amount": amount, "receipt": receipt_id})
        if not self.should_succeed:
            raise UpstreamError(f"Error creating order: {self.failure_reason}")
        return GatewayOrder(
            order_id=f"order_fake_{uuid4().hex[:14]}",
            amount=to_minor_units(amount),
            currency=self.currency,
        )


def build_gateway(config):
    currency = config.get("GATEWAY_CURRENCY", "INR")
    key_id = config.get("RAZORPAY_KEY_ID")
    key_secret = config.get("RAZORPAY_KEY_SECRET")
    if key_id and key_secret:
        return RazorpayGateway(
            key_id,
            key_secret,
            api_url=config.get("RAZORPAY_API_URL", "https://api.razorpay.com/v1"),
            currency=currency,
            timeout=config.get("GATEWAY_TIMEOUT", 10),
        )
    return FakeGateway(currency=currency)


def get_gateway() -> PaymentGateway:
    return current_app.extensions["payment_gateway"]


def set_gateway(app, gateway) -> None:
    app.extensions["payment_gateway"] = gateway


def create_order_for_payment(amount, payment_id):
    """Create a gateway order for ``payment_id`` and remember its order id.

    Returns ``{"orderId", "amount", "currency"}`` with ``amount`` in minor
    units.
    """
    gateway = get_gateway()
    receipt_id = f"receipt_{payment_id}"
    current_app.logger.info("[GATEWAY] create_order gateway=%s amount=%s receipt=%s", type(gateway).__name__, amount, receipt_id)
    try:
        order = gateway.create_order(amount, receipt_id)
    except UpstreamError as e:
        current_app.logger.error("[GATEWAY] order creation failed receipt=%s: %s", receipt_id, e.message)
        raise

    if payment_id is not None:
        try:
            payment_key = int(payment_id)
        except (TypeError, ValueError):
            payment_key = None
        if payment_key is not None and record_gateway_order(payment_key, order.order_id):
            current_app.logger.info("[GATEWAY] order_id=%s recorded on payment_id=%s", order.order_id, payment_key)

    return {"orderId": order.order_id, "amount": order.amount, "currency": order.currency}
