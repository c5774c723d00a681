from datetime import timedelta

from flask import Flask

from .accounts import UserDirectory
from .cli import register_commands
from .config import DEV_JWT_SECRET, Config, engine_options
from .errors import register_error_handlers
from .expenses import ExpenseLedger
from .gate import init_gate
from .models import db
from .routes import api
from .security import PasswordHasher
from .tokens import TokenService

__all__ = ['create_app', 'db']


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
    app.config.setdefault(
        'SQLALCHEMY_ENGINE_OPTIONS',
        engine_options(app.config['SQLALCHEMY_DATABASE_URI'], app.config['STORAGE_TIMEOUT']),
    )

    # app.logger is the 'finance_tracker' logger, parent of every module logger
    app.logger.setLevel(app.config['LOG_LEVEL'])
    if app.config['JWT_SECRET'] == DEV_JWT_SECRET:
        app.logger.warning('JWT_SECRET is not set; using the development default')

    db.init_app(app)
    init_gate(app)
    register_error_handlers(app)

    # one instance of each component per process, shared by every request
    app.extensions['password_hasher'] = PasswordHasher(app.config['PASSWORD_HASH_ITERATIONS'])
    app.extensions['token_service'] = TokenService(
        app.config['JWT_SECRET'], ttl=timedelta(seconds=app.config['TOKEN_TTL_SECONDS']))
    app.extensions['user_directory'] = UserDirectory(db.session)
    app.extensions['expense_ledger'] = ExpenseLedger(db.session)

    app.register_blueprint(api)
    register_commands(app)

    return app
