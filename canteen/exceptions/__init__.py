"""Custom exceptions for the canteen application."""


class CanteenError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        rv['error'] = type(self).__name__
        return rv


# Rejected before anything is written

class ValidationError(CanteenError):
    """Exception raised for malformed input."""
    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)


class EmptyCartError(ValidationError):
    def __init__(self, message="The cart is empty"):
        super().__init__(message)


class InvalidQuantityError(ValidationError):
    def __init__(self, quantity):
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}",
                         payload={'quantity': str(quantity)})


class InvalidAmountError(ValidationError):
    def __init__(self, amount):
        super().__init__(f"Amount must be a number greater than 0, got {amount!r}",
                         payload={'amount': str(amount)})


class InvalidPaymentMethodError(ValidationError):
    def __init__(self, method):
        super().__init__(f"Invalid payment method: {method!r}")


class NotFoundError(CanteenError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_id):
        super().__init__(f"Customer {customer_id} not found", payload={'customer_id': customer_id})
        self.customer_id = customer_id


class ItemNotFoundError(NotFoundError):
    def __init__(self, item_id):
        super().__init__(f"Item {item_id} not found", payload={'item_id': item_id})
        self.item_id = item_id


class ReceiptNotFoundError(NotFoundError):
    def __init__(self, receipt_id):
        super().__init__(f"Receipt {receipt_id} not found", payload={'receipt_id': receipt_id})
        self.receipt_id = receipt_id


# Rejected after loading, before writing

class BusinessRuleError(CanteenError):
    """Exception raised for business rule violations."""
    def __init__(self, message, status_code=409, payload=None):
        super().__init__(message, status_code, payload)


class InsufficientFundsError(BusinessRuleError):
    """Raised when a customer's balance cannot cover a debit."""
    def __init__(self, customer_id, required, available):
        message = f"Insufficient funds for customer {customer_id}: required {required}, available {available}"
        super().__init__(message, payload={
            'customer_id': customer_id,
            'required': str(required),
            'available': str(available),
        })
        self.required = required
        self.available = available


class InsufficientStockError(BusinessRuleError):
    """Raised when an operation fails due to lack of stock."""
    def __init__(self, item_name, required, available):
        message = f"Insufficient stock for {item_name}: required {required}, available {available}"
        super().__init__(message, payload={'required': required, 'available': available})


# Store failures; retryable by the caller

class StoreError(CanteenError):
    """Raised when the ledger store fails; the transaction was rolled back."""
    def __init__(self, message="The ledger store failed", payload=None):
        super().__init__(message, 503, payload)


class PurchaseTimeoutError(StoreError):
    def __init__(self, timeout):
        super().__init__(f"Purchase did not complete within {timeout}s", payload={'timeout': timeout})
