import logging
import re

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .errors import DuplicateEmail, DuplicateIdentifier, NotFoundError, StorageError
from .models import Account

logger = logging.getLogger(__name__)

# where each driver names the violated key; the offending value is quoted elsewhere
# in the message, so only the key part is inspected
KEY_PATTERNS = (
    re.compile(r"for key '([^']+)'"),                   # mysql
    re.compile(r'unique constraint failed: ([\w.]+)'),  # sqlite
    re.compile(r'unique constraint "([^"]+)"'),         # postgres
)
CONFLICTS = {'username': DuplicateIdentifier, 'email': DuplicateEmail}


def conflicting_field(message):
    """Name the accounts column a unique-violation message refers to, or None."""
    text = message.lower()
    for pattern in KEY_PATTERNS:
        match = pattern.search(text)
        if match:
            # accounts.email, email, accounts_email_key
            parts = re.split(r'[._]', match.group(1))
            for field in CONFLICTS:
                if field in parts:
                    return field
    return None


class UserDirectory:
    """Account records, keyed by a surrogate id with unique username and email."""

    def __init__(self, session):
        self.session = session

    def create(self, username, email, password_hash, full_name=None):
        account = Account(username=username, email=email, password_hash=password_hash,
                          full_name=full_name)
        self.session.add(account)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            # the unique constraints decide; look up afterwards only to name the field
            raise self._conflict(username, e) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError() from e
        logger.info('Registered account %s', account.id)
        return account

    def _conflict(self, username, error):
        field = conflicting_field(str(error.orig))
        if field:
            return CONFLICTS[field]()
        try:
            taken = self.session.query(Account.id).filter_by(username=username).first()
        except SQLAlchemyError as e:
            raise StorageError() from e
        return DuplicateIdentifier() if taken else DuplicateEmail()

    def _first(self, **criteria):
        try:
            account = self.session.query(Account).filter_by(**criteria).first()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError() from e
        if account is None:
            raise NotFoundError('Account not found')
        return account

    def get(self, account_id):
        return self._first(id=account_id)

    def find_by_username(self, username):
        return self._first(username=username)

    def find_by_email(self, email):
        return self._first(email=email)

    def delete(self, account_id):
        """Remove an account and, by cascade, every expense it owns."""
        account = self.get(account_id)
        try:
            self.session.delete(account)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError() from e
        logger.info('Deleted account %s', account_id)
