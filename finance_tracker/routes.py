import logging
import re

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from .errors import InvalidCredentials, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__, url_prefix='/api')

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MIN_PASSWORD_LENGTH = 6


def _service(name):
    return current_app.extensions[name]


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError({'body': 'Expected a JSON object'})
    return data


def _text(data, *keys):
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ''


# ==============================
# AUTH
# ==============================
@api.route('/auth/register', methods=['POST'])
def register():
    data = _json_body()
    username = _text(data, 'username', 'identifier')
    email = _text(data, 'email')
    full_name = _text(data, 'full_name') or None
    password = data.get('password')

    errors = {}
    if not EMAIL_RE.match(email):
        errors['email'] = 'Please enter a valid email'
    if not username.isalnum():
        errors['username'] = 'Username must be alphanumeric'
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        errors['password'] = 'Password must be at least %d characters long' % MIN_PASSWORD_LENGTH
    if full_name and len(full_name) > 150:
        errors['full_name'] = 'Full name must be at most 150 characters'
    if errors:
        raise ValidationError(errors)

    password_hash = _service('password_hasher').hash(password)
    account = _service('user_directory').create(username, email.lower(), password_hash, full_name)
    body = account.to_dict()
    body['message'] = 'User registered successfully'
    return jsonify(body), 201


@api.route('/auth/login', methods=['POST'])
def login():
    data = _json_body()
    username = _text(data, 'username', 'identifier')
    email = _text(data, 'email')
    password = data.get('password')

    directory = _service('user_directory')
    try:
        if username:
            account = directory.find_by_username(username)
        elif email:
            account = directory.find_by_email(email.lower())
        else:
            raise InvalidCredentials()
    except NotFoundError:
        logger.info('Failed login for unknown user %r', username or email)
        raise InvalidCredentials()

    if not _service('password_hasher').verify(password, account.password_hash):
        logger.info('Failed login for %r', account.username)
        raise InvalidCredentials()

    token = _service('token_service').issue(account.id)
    return jsonify({'message': 'Login successful', 'token': token}), 200


# ==============================
# EXPENSES
# ==============================
@api.route('/expenses', methods=['POST'])
@login_required
def create_expense():
    expense = _service('expense_ledger').create(current_user.id, _json_body())
    return jsonify(expense.to_dict()), 201


@api.route('/expenses', methods=['GET'])
@login_required
def list_expenses():
    expenses = _service('expense_ledger').list_by_owner(current_user.id)
    return jsonify([e.to_dict() for e in expenses]), 200


@api.route('/expenses/<expense_id>', methods=['PUT'])
@login_required
def update_expense(expense_id):
    expense = _service('expense_ledger').update(expense_id, current_user.id, _json_body())
    return jsonify({'message': 'Expense updated successfully', 'expense': expense.to_dict()}), 200


@api.route('/expenses/<expense_id>', methods=['DELETE'])
@login_required
def delete_expense(expense_id):
    _service('expense_ledger').delete(expense_id, current_user.id)
    return '', 204


@api.route('/expense', methods=['GET'])
@login_required
def total_expense():
    total = _service('expense_ledger').total_for_owner(current_user.id)
    return jsonify({'totalExpense': str(total)}), 200


@api.route('/expenses/summary', methods=['GET'])
@login_required
def expense_summary():
    return jsonify(_service('expense_ledger').summary_by_category(current_user.id)), 200

