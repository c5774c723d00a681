import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

import pandas as pd
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .errors import NotFoundError, StorageError, ValidationError
from .models import CENTS, Expense

logger = logging.getLogger(__name__)

MAX_AMOUNT = Decimal('100000000')
DESCRIPTION_KEYS = ('description', 'name', 'expense_name')
UNCATEGORIZED = 'Uncategorized'


def _from_cents(cents):
    return str((Decimal(int(cents)) / 100).quantize(CENTS))


def parse_amount(value):
    if isinstance(value, bool) or not isinstance(value, (str, int, float, Decimal)):
        raise ValueError('Amount must be a number')
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError('Amount must be a number')
    if not amount.is_finite() or amount <= 0:
        raise ValueError('Amount must be a positive number')
    if amount >= MAX_AMOUNT:
        raise ValueError('Amount is too large')
    if amount.as_tuple().exponent < -2 and amount != amount.quantize(CENTS):
        raise ValueError('Amount must have at most two decimal places')
    return amount.quantize(CENTS)


def parse_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError('Date must be a YYYY-MM-DD string')
    try:
        return datetime.strptime(value.strip(), '%Y-%m-%d').date()
    except ValueError:
        raise ValueError('Date must be a valid YYYY-MM-DD date')


def clean_expense_fields(fields, partial=False):
    """Validate raw request fields and return column values.

    With ``partial`` only the supplied keys are checked and returned; otherwise
    description, amount and date are required.
    """
    errors = {}
    values = {}

    description_key = next((k for k in DESCRIPTION_KEYS if k in fields), None)
    if description_key is not None:
        description = fields[description_key]
        if not isinstance(description, str) or not description.strip():
            errors['description'] = 'Description is required'
        elif len(description.strip()) > 255:
            errors['description'] = 'Description must be at most 255 characters'
        else:
            values['description'] = description.strip()
    elif not partial:
        errors['description'] = 'Description is required'

    if 'amount' in fields:
        try:
            values['amount'] = parse_amount(fields['amount'])
        except ValueError as e:
            errors['amount'] = str(e)
    elif not partial:
        errors['amount'] = 'Amount is required'

    if 'date' in fields:
        try:
            values['date'] = parse_date(fields['date'])
        except ValueError as e:
            errors['date'] = str(e)
    elif not partial:
        errors['date'] = 'Date is required'

    if 'category' in fields:
        category = fields['category']
        if category is None or (isinstance(category, str) and not category.strip()):
            values['category'] = None
        elif not isinstance(category, str):
            errors['category'] = 'Category must be text'
        elif len(category.strip()) > 100:
            errors['category'] = 'Category must be at most 100 characters'
        else:
            values['category'] = category.strip()

    if errors:
        raise ValidationError(errors)
    if partial and not values:
        raise ValidationError({'body': 'No updatable fields supplied'})
    return values


class ExpenseLedger:
    """Expense records, every one owned by exactly one account.

    Update and delete filter on both the expense id and the owner in a single
    statement, so an expense belonging to someone else looks exactly like one
    that does not exist.
    """

    def __init__(self, session):
        self.session = session

    def _commit(self):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError() from e

    def _owned(self, expense_id, owner_id):
        return self.session.query(Expense).filter_by(id=expense_id, owner_id=owner_id)

    def create(self, owner_id, fields):
        values = clean_expense_fields(fields)
        expense = Expense(owner_id=owner_id, **values)
        self.session.add(expense)
        try:
            self.session.commit()
        except IntegrityError as e:
            # owner row is gone (account deleted while its token is still live)
            self.session.rollback()
            raise NotFoundError('Account not found') from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError() from e
        logger.debug('Created expense %s for %s', expense.id, owner_id)
        return expense

    def list_by_owner(self, owner_id):
        try:
            return (self.session.query(Expense)
                    .filter_by(owner_id=owner_id)
                    .order_by(Expense.created_at, Expense.id)
                    .all())
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError() from e

    def get(self, expense_id, owner_id):
        try:
            expense = self._owned(expense_id, owner_id).first()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError() from e
        if expense is None:
            raise NotFoundError('Expense not found')
        return expense

    def update(self, expense_id, owner_id, fields):
        values = clean_expense_fields(fields, partial=True)
        try:
            changed = self._owned(expense_id, owner_id).update(values, synchronize_session=False)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError() from e
        if not changed:
            self.session.rollback()
            raise NotFoundError('Expense not found')
        self._commit()
        return self.get(expense_id, owner_id)

    def delete(self, expense_id, owner_id):
        try:
            removed = self._owned(expense_id, owner_id).delete(synchronize_session=False)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError() from e
        if not removed:
            self.session.rollback()
            raise NotFoundError('Expense not found')
        self._commit()

    def total_for_owner(self, owner_id):
        try:
            total = (self.session.query(func.sum(Expense.amount))
                     .filter(Expense.owner_id == owner_id)
                     .scalar())
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError() from e
        if total is None:
            return Decimal('0.00')
        return Decimal(str(total)).quantize(CENTS)

    def summary_by_category(self, owner_id):
        """Per-category spend for ``owner_id``, largest first."""
        expenses = self.list_by_owner(owner_id)
        if not expenses:
            return {'labels': [], 'values': [], 'total': '0.00'}

        # sum in integer cents so no float rounding creeps in
        rows = [{'category': e.category or UNCATEGORIZED,
                 'cents': int(Decimal(e.amount).quantize(CENTS) * 100)} for e in expenses]
        df = pd.DataFrame(rows)
        summary = df.groupby('category')['cents'].sum().sort_values(ascending=False, kind='stable')
        labels = summary.index.tolist()
        values = [_from_cents(v) for v in summary.values.tolist()]
        total = _from_cents(df['cents'].sum())
        return {'labels': labels, 'values': values, 'total': total}
