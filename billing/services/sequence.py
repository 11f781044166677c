"""Quotation number allocation (``WI0001``, ``WI0002``, ...).

The next number is derived from the most recently created quotation. Callers
that insert the new quotation must hold ``allocation_lock`` across allocation
and commit; the unique constraint on ``quotations.quotation_no`` catches any
writer outside this process.
"""
import re
import threading

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from billing.errors import SequenceError, StoreError
from billing.models.quotation import Quotation

allocation_lock = threading.Lock()

_DIGITS = re.compile(r"[0-9]+")


def _prefix():
    return current_app.config.get("QUOTATION_PREFIX", "WI")


def _width():
    return current_app.config.get("QUOTATION_NUMBER_WIDTH", 4)


def format_quotation_no(value, prefix=None, width=None):
    prefix = _prefix() if prefix is None else prefix
    width = _width() if width is None else width
    return f"{prefix}{str(value).zfill(width)}"


def parse_quotation_no(quotation_no, prefix=None):
    """Return the numeric part of ``quotation_no``.

    Raises ``SequenceError`` when the value is not ``prefix`` followed by
    ASCII digits; a malformed stored number stops allocation.
    """
    prefix = _prefix() if prefix is None else prefix
    if not quotation_no or not quotation_no.startswith(prefix):
        raise SequenceError(f"Stored quotation number {quotation_no!r} does not start with {prefix!r}")
    rest = quotation_no[len(prefix):]
    if not _DIGITS.fullmatch(rest):
        raise SequenceError(f"Stored quotation number {quotation_no!r} has a non-numeric suffix")
    return int(rest)


def allocate_next():
    try:
        last = Quotation.query.order_by(Quotation.created_at.desc(), Quotation.id.desc()).first()
    except SQLAlchemyError as e:
        current_app.logger.exception("[SEQ] failed to read last quotation: %s", e)
        raise StoreError("Could not read the quotation sequence")

    if last is None:
        next_no = format_quotation_no(1)
        current_app.logger.info("[SEQ] empty store, seeding %s", next_no)
        return next_no

    try:
        last_value = parse_quotation_no(last.quotation_no)
    except SequenceError:
        current_app.logger.error("[SEQ] malformed quotation_no=%r on quotation id=%s", last.quotation_no, last.id)
        raise

    next_no = format_quotation_no(last_value + 1)
    current_app.logger.debug("[SEQ] last=%s next=%s", last.quotation_no, next_no)
    return next_no
