# error types raised by the business layer
# views catch POSError and show the message as a flash


class POSError(Exception):
    message = 'Something went wrong.'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidProduct(POSError):
    message = 'Please select a valid product.'


class InsufficientStock(POSError):
    def __init__(self, remaining):
        self.remaining = remaining
        super().__init__(f'Insufficient stock! Only {remaining} remaining.')


class StoreUnavailable(POSError):
    message = 'Connection failed. Please check system status.'


class AuthFailure(POSError):
    # same text for unknown user and wrong password
    message = 'Invalid username or password. Access denied.'


class PermissionDenied(POSError):
    message = 'You do not have permission to do that.'


class ReservedAccount(POSError):
    message = 'The master administrator account cannot be deleted.'


class ValidationError(POSError):
    message = 'Invalid input.'
