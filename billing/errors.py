"""Exceptions raised by the billing services.

Every error carries an HTTP status and renders as a JSON body
``{"message": ..., "error": ..., "field": ...}`` through the error handler
registered in ``create_app``.
"""


class BillingError(Exception):
    status_code = 500

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self):
        body = {"message": self.message, "error": type(self).__name__}
        if self.field:
            body["field"] = self.field
        return body


class ValidationError(BillingError):
    status_code = 400


class MissingRequiredField(ValidationError):
    pass


class EmptyItemList(ValidationError):
    pass


class InvalidItemShape(ValidationError):
    pass


class InvalidStatus(ValidationError):
    pass


class InvalidFieldValue(ValidationError):
    pass


class AuthenticationError(BillingError):
    status_code = 401


class NotFoundError(BillingError):
    status_code = 404


class ConflictError(BillingError):
    status_code = 409


class UpstreamError(BillingError):
    status_code = 502


class StoreError(BillingError):
    status_code = 500


class SequenceError(StoreError):
    """Stored quotation number does not match ``PREFIX + digits``."""
