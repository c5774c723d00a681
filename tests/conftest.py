import pytest

from finance_tracker import create_app, db

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'JWT_SECRET': 'test-secret',
    'PASSWORD_HASH_ITERATIONS': 1000,
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
    # no context stays pushed: every test-client request must build its own
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def directory(app, app_context):
    return app.extensions['user_directory']


@pytest.fixture
def ledger(app, app_context):
    return app.extensions['expense_ledger']


@pytest.fixture
def hasher(app):
    return app.extensions['password_hasher']


def register(client, username='alice', email='alice@x.com', password='secret1'):
    return client.post('/api/auth/register',
                       json={'username': username, 'email': email, 'password': password})


def login(client, username='alice', password='secret1'):
    return client.post('/api/auth/login', json={'username': username, 'password': password})


def auth_header(token):
    return {'Authorization': 'Bearer %s' % token}


@pytest.fixture
def token(client):
    register(client)
    return login(client).get_json()['token']


@pytest.fixture
def make_account(directory, hasher):
    def make(username, email=None, password='secret1'):
        return directory.create(username, email or '%s@x.com' % username, hasher.hash(password))
    return make
