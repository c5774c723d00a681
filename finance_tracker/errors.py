from flask import jsonify
from werkzeug.exceptions import HTTPException


class FinanceError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    message = 'Something went wrong!'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {'message': self.message}


class ValidationError(FinanceError):
    status_code = 400
    message = 'Validation failed'

    def __init__(self, errors, message=None):
        super().__init__(message)
        self.errors = dict(errors)

    def to_dict(self):
        return {'message': self.message, 'errors': self.errors}


class ConflictError(FinanceError):
    status_code = 400
    field = None

    def to_dict(self):
        return {'message': self.message, 'errors': {self.field: self.message}}


class DuplicateIdentifier(ConflictError):
    field = 'username'
    message = 'Username already exists'


class DuplicateEmail(ConflictError):
    field = 'email'
    message = 'Email already exists'


class AuthError(FinanceError):
    status_code = 403
    message = 'Forbidden'


class Unauthorized(AuthError):
    status_code = 401
    message = 'Unauthorized'


class Forbidden(AuthError):
    pass


class TokenInvalid(Forbidden):
    message = 'Invalid token'


class TokenExpired(Forbidden):
    message = 'Token expired'


class InvalidCredentials(FinanceError):
    status_code = 400
    message = 'Invalid username or password'


class NotFoundError(FinanceError):
    status_code = 404
    message = 'Not Found'


class StorageError(FinanceError):
    status_code = 500
    message = 'Database error'


class HashingError(FinanceError):
    status_code = 500
    message = 'Password hashing failed'


def register_error_handlers(app):
    @app.errorhandler(FinanceError)
    def handle_finance_error(err):
        if err.status_code >= 500:
            # the cause is logged here; the client only sees the generic message
            app.logger.error('%s: %s', type(err).__name__, err.__cause__ or err)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        message = 'Not Found' if err.code == 404 else err.name
        return jsonify({'message': message}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        app.logger.exception('Unhandled error: %s', err)
        return jsonify({'message': 'Something went wrong!'}), 500
