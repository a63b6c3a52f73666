from django.core.exceptions import ValidationError


class InvoiceError(ValidationError):
    """Base class for invoice problems the caller can fix."""

    default_message = 'The invoice could not be processed'

    def __init__(self, message=None, code=None, params=None):
        super().__init__(message or self.default_message, code=code, params=params)


class EmptyInvoiceError(InvoiceError):
    default_message = 'An invoice needs at least one item'


class InvalidLineItemError(InvoiceError):
    default_message = 'Invalid invoice item'


class InvalidDiscountError(InvoiceError):
    default_message = 'Invalid discount'
