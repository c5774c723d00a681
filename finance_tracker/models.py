import sqlite3
import uuid
from decimal import Decimal
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()

CENTS = Decimal('0.01')


def new_id():
    return uuid.uuid4().hex


def utcnow():
    return datetime.now(timezone.utc)


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite only honours ON DELETE CASCADE with this pragma set per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


# ==============================
# MODELS
# ==============================
class Account(db.Model):
    __tablename__ = 'accounts'

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    username = db.Column(db.String(150), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    full_name = db.Column(db.String(150))
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    expenses = db.relationship('Expense', backref='owner', lazy=True, cascade='all, delete-orphan')

    def to_dict(self):
        return {'id': self.id, 'username': self.username, 'email': self.email, 'full_name': self.full_name}

    def __repr__(self):
        return '<Account %s %s>' % (self.id, self.username)


class Expense(db.Model):
    __tablename__ = 'expenses'

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    owner_id = db.Column(db.String(32), db.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False, index=True)
    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    date = db.Column(db.Date, nullable=False)
    category = db.Column(db.String(100))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'description': self.description,
            'amount': str(Decimal(self.amount).quantize(CENTS)),
            'date': self.date.isoformat(),
            'category': self.category,
        }

    def __repr__(self):
        return '<Expense %s %s>' % (self.id, self.amount)
