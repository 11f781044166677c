"""Request body checks for quotations and payments.

Each ``clean_*`` function returns a dict of model-ready values or raises one of
the ``ValidationError`` subclasses. Nothing here touches the database.
"""
from datetime import datetime

from billing.errors import (
    EmptyItemList,
    InvalidFieldValue,
    InvalidItemShape,
    InvalidStatus,
    MissingRequiredField,
)
from billing.models.payment import PaymentStatus
from billing.models.quotation import QuotationStatus

QUOTATION_REQUIRED = ("number", "client", "date", "expireDate", "items", "subTotal", "total", "status")
PAYMENT_REQUIRED = ("quotationId", "amount", "date", "status")

QUOTATION_STATUSES = [s.value for s in QuotationStatus]
PAYMENT_STATUSES = [s.value for s in PaymentStatus]


def is_number(value):
    # bool は int のサブクラスなので除外
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def _optional_str(value):
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_datetime(value, field):
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise InvalidFieldValue(f"'{field}' must be an ISO-8601 date string", field=field)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidFieldValue(f"Invalid date format for '{field}'", field=field)
    # タイムゾーン付きは UTC の naive に揃える（DB は naive 保存）
    if parsed.tzinfo is not None:
        parsed = (parsed - parsed.utcoffset()).replace(tzinfo=None)
    return parsed


def _non_negative_number(value, field, error_cls=InvalidFieldValue):
    if not is_number(value) or value < 0:
        raise error_cls(f"'{field}' must be a non-negative number", field=field)
    return float(value)


def _integer_id(value, field):
    # true / 1.9 のような値を黙って 1 にしない
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidFieldValue("Invalid quotation ID", field=field)
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidFieldValue("Invalid quotation ID", field=field)


def clean_line_item(raw, index):
    field = f"items[{index}]"
    if not isinstance(raw, dict):
        raise InvalidItemShape("Each item must have a valid item name, quantity, unitPrice and lineTotal", field=field)
    name = raw.get("item")
    if _is_blank(name) or not isinstance(name, str):
        raise InvalidItemShape("Each item must have a valid item name, quantity, unitPrice and lineTotal", field=f"{field}.item")

    # price / total は旧フロントの項目名
    unit_price = raw.get("unitPrice", raw.get("price"))
    line_total = raw.get("lineTotal", raw.get("total"))
    values = {"quantity": raw.get("quantity"), "unitPrice": unit_price, "lineTotal": line_total}
    for key, value in values.items():
        _non_negative_number(value, f"{field}.{key}", InvalidItemShape)

    sgst = raw.get("sgst", 0) or 0
    igst = raw.get("igst", 0) or 0
    for key, value in (("sgst", sgst), ("igst", igst)):
        _non_negative_number(value, f"{field}.{key}", InvalidItemShape)

    return {
        "position": index,
        "item": name.strip(),
        "hsn_sac": _optional_str(raw.get("hsnSac")),
        "quantity": float(values["quantity"]),
        "unit_price": float(unit_price),
        "sgst": float(sgst),
        "igst": float(igst),
        "line_total": float(line_total),
    }


def clean_quotation(data):
    """Validate a quotation create/update body.

    Returns header values plus ``items`` (list of line dicts). Field names are
    the model's column names.
    """
    if not isinstance(data, dict):
        raise InvalidFieldValue("Request body must be a JSON object")

    for key in QUOTATION_REQUIRED:
        if _is_blank(data.get(key)):
            raise MissingRequiredField(f"'{key}' is required", field=key)

    items = data["items"]
    if not isinstance(items, list):
        raise InvalidItemShape("Items must be a non-empty array", field="items")
    if not items:
        raise EmptyItemList("Items must be a non-empty array", field="items")
    cleaned_items = [clean_line_item(raw, i) for i, raw in enumerate(items)]

    status = data["status"]
    if status not in QUOTATION_STATUSES:
        raise InvalidStatus(f"Invalid status value; expected one of {QUOTATION_STATUSES}", field="status")

    tax = data.get("tax")
    return {
        "number": str(data["number"]).strip(),
        "client": str(data["client"]).strip(),
        "date": parse_datetime(data["date"], "date").date(),
        "expire_date": parse_datetime(data["expireDate"], "expireDate").date(),
        "sub_total": _non_negative_number(data["subTotal"], "subTotal"),
        "tax": 0.0 if tax is None else _non_negative_number(tax, "tax"),
        "total": _non_negative_number(data["total"], "total"),
        "status": status,
        "year": _optional_str(data.get("year")),
        "currency": _optional_str(data.get("currency")),
        "note": _optional_str(data.get("note")),
        "items": cleaned_items,
    }


def clean_payment(data):
    if not isinstance(data, dict):
        raise InvalidFieldValue("Request body must be a JSON object")

    for key in PAYMENT_REQUIRED:
        if _is_blank(data.get(key)):
            raise MissingRequiredField(
                "All required fields (quotationId, amount, date, status) must be provided", field=key
            )

    quotation_id = _integer_id(data["quotationId"], "quotationId")

    if not is_number(data["amount"]) or data["amount"] < 0:
        raise InvalidFieldValue("Amount must be a non-negative number", field="amount")

    status = data["status"]
    if status not in PAYMENT_STATUSES:
        raise InvalidStatus(f"Status must be one of: {', '.join(PAYMENT_STATUSES)}", field="status")

    return {
        "quotation_id": quotation_id,
        "amount": float(data["amount"]),
        "date": parse_datetime(data["date"], "date"),
        "status": status,
        # razorpay* は旧クライアントの項目名
        "gateway_order_id": _optional_str(data.get("gatewayOrderId", data.get("razorpayOrderId"))),
        "gateway_payment_id": _optional_str(data.get("gatewayPaymentId", data.get("razorpayPaymentId"))),
    }
