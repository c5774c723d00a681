import os

from dotenv import load_dotenv
from sqlalchemy.pool import StaticPool

load_dotenv()

DEV_JWT_SECRET = 'your_jwt_secret'


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'replace_with_a_long_random_string')
    JWT_SECRET = os.environ.get('JWT_SECRET', DEV_JWT_SECRET)
    TOKEN_TTL_SECONDS = int(os.environ.get('TOKEN_TTL_SECONDS', 3600))
    PASSWORD_HASH_ITERATIONS = int(os.environ.get('PASSWORD_HASH_ITERATIONS', 600000))
    # seconds to wait on the storage backend before giving up
    STORAGE_TIMEOUT = float(os.environ.get('STORAGE_TIMEOUT', 5))
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///finance.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


def engine_options(uri, timeout):
    """SQLAlchemy engine options that bound how long a request waits on storage."""
    options = {'pool_pre_ping': True}
    if uri.startswith('sqlite'):
        options['connect_args'] = {'timeout': timeout, 'check_same_thread': False}
        if ':memory:' in uri or uri in ('sqlite://', 'sqlite:///'):
            options['poolclass'] = StaticPool
    else:
        options['pool_timeout'] = timeout
        if uri.startswith('mysql'):
            # read/write bound a slow query, not just the handshake
            seconds = max(1, int(timeout))
            options['connect_args'] = {
                'connect_timeout': seconds,
                'read_timeout': seconds,
                'write_timeout': seconds,
            }
    return options
