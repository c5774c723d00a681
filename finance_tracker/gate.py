import logging

from flask import current_app, g, request
from flask_login import LoginManager, UserMixin

from .errors import AuthError, Forbidden, Unauthorized

logger = logging.getLogger(__name__)

login_manager = LoginManager()
# identity comes from the bearer token only, never a session cookie
login_manager.session_protection = None


class Identity(UserMixin):
    """The requester as resolved from a validated bearer token."""

    def __init__(self, account_id):
        self.id = account_id

    def __repr__(self):
        return '<Identity %s>' % self.id


def bearer_token(header):
    """Return the token from an ``Authorization: Bearer <token>`` header, or None."""
    if not header:
        return None
    parts = header.split(None, 1)
    if len(parts) != 2 or parts[0].lower() != 'bearer':
        return None
    return parts[1].strip() or None


@login_manager.request_loader
def load_identity(req):
    token = bearer_token(req.headers.get('Authorization'))
    if token is None:
        return None
    try:
        account_id = current_app.extensions['token_service'].validate(token)
    except AuthError as e:
        logger.debug('Rejected token: %s', e)
        g.token_rejected = True
        return None
    return Identity(account_id)


@login_manager.unauthorized_handler
def reject():
    if g.get('token_rejected'):
        raise Forbidden()
    logger.debug('No bearer token on %s %s', request.method, request.path)
    raise Unauthorized()


def init_gate(app):
    login_manager.init_app(app)
