from unittest import mock

from sqlalchemy.exc import OperationalError

from conftest import auth_header, login, register


def test_end_to_end(client):
    resp = client.post('/api/auth/register',
                       json={'identifier': 'alice', 'email': 'alice@x.com', 'password': 'secret1'})
    assert resp.status_code == 201
    assert resp.get_json()['message'] == 'User registered successfully'
    assert resp.get_json()['id']

    assert login(client, password='wrong-password').status_code == 400

    resp = login(client)
    assert resp.status_code == 200
    token = resp.get_json()['token']
    headers = auth_header(token)

    resp = client.post('/api/expenses', headers=headers,
                       json={'description': 'coffee', 'amount': 3.5, 'date': '2024-01-01'})
    assert resp.status_code == 201
    created = resp.get_json()
    assert created['id']

    resp = client.get('/api/expenses', headers=headers)
    assert resp.status_code == 200
    assert resp.get_json() == [created]

    resp = client.delete('/api/expenses/%s' % created['id'], headers=headers)
    assert resp.status_code == 204
    assert resp.data == b''

    assert client.get('/api/expenses', headers=headers).get_json() == []


def test_register_keeps_full_name(app, client):
    resp = client.post('/api/auth/register', json={
        'username': 'ian', 'email': 'ian@mail.com', 'password': '123456', 'full_name': 'Ian PLP'})
    assert resp.status_code == 201
    body = resp.get_json()
    assert body['username'] == 'ian'
    assert body['email'] == 'ian@mail.com'
    assert body['full_name'] == 'Ian PLP'
    assert 'password_hash' not in body

    with app.app_context():
        account = app.extensions['user_directory'].find_by_username('ian')
        assert account.full_name == 'Ian PLP'


def test_full_name_is_optional(client):
    resp = register(client)
    assert resp.status_code == 201
    assert resp.get_json()['full_name'] is None


def test_register_validation(client):
    resp = register(client, username='not valid!', email='nope', password='123')
    assert resp.status_code == 400
    assert set(resp.get_json()['errors']) == {'username', 'email', 'password'}


def test_register_duplicates(client):
    assert register(client).status_code == 201

    resp = register(client, email='other@x.com')
    assert resp.status_code == 400
    assert resp.get_json()['errors'] == {'username': 'Username already exists'}

    resp = register(client, username='alice2')
    assert resp.status_code == 400
    assert resp.get_json()['errors'] == {'email': 'Email already exists'}


def test_register_rejects_non_json(client):
    resp = client.post('/api/auth/register', data='username=alice', content_type='text/plain')
    assert resp.status_code == 400


def test_login_unknown_user_same_as_bad_password(client):
    register(client)
    unknown = login(client, username='ghost')
    wrong = login(client, password='nope-nope')
    assert unknown.status_code == wrong.status_code == 400
    assert unknown.get_json() == wrong.get_json() == {'message': 'Invalid username or password'}


def test_login_by_email(client):
    register(client)
    resp = client.post('/api/auth/login', json={'email': 'ALICE@x.com', 'password': 'secret1'})
    assert resp.status_code == 200
    assert resp.get_json()['token']


def test_create_expense_missing_fields(client, token):
    resp = client.post('/api/expenses', headers=auth_header(token), json={'description': 'coffee'})
    assert resp.status_code == 400
    assert set(resp.get_json()['errors']) == {'amount', 'date'}


def test_update_expense(client, token):
    headers = auth_header(token)
    created = client.post('/api/expenses', headers=headers,
                          json={'description': 'coffee', 'amount': '3.50', 'date': '2024-01-01'}).get_json()

    resp = client.put('/api/expenses/%s' % created['id'], headers=headers, json={'amount': 4.00})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['message'] == 'Expense updated successfully'
    assert body['expense'] == dict(created, amount='4.00')


def test_foreign_expense_looks_missing(client, token):
    headers = auth_header(token)
    created = client.post('/api/expenses', headers=headers,
                          json={'description': 'coffee', 'amount': '3.50', 'date': '2024-01-01'}).get_json()

    register(client, username='bob', email='bob@x.com')
    bob = auth_header(login(client, username='bob').get_json()['token'])

    url = '/api/expenses/%s' % created['id']
    assert client.put(url, headers=bob, json={'amount': 1}).status_code == 404
    assert client.delete(url, headers=bob).status_code == 404
    assert client.put('/api/expenses/%s' % ('0' * 32), headers=bob, json={'amount': 1}).get_json() == \
        client.put(url, headers=bob, json={'amount': 1}).get_json()
    assert client.get('/api/expenses', headers=headers).get_json() == [created]


def test_owner_comes_from_token_not_body(client, token):
    headers = auth_header(token)
    register(client, username='bob', email='bob@x.com')
    bob = auth_header(login(client, username='bob').get_json()['token'])

    client.post('/api/expenses', headers=headers,
                json={'description': 'x', 'amount': 1, 'date': '2024-01-01', 'userId': 'bob', 'owner_id': 'bob'})
    assert client.get('/api/expenses', headers=bob).get_json() == []
    assert len(client.get('/api/expenses', headers=headers).get_json()) == 1


def test_total_and_summary(client, token):
    headers = auth_header(token)
    assert client.get('/api/expense', headers=headers).get_json() == {'totalExpense': '0.00'}

    for amount, category in (('12.50', 'Food'), ('7.25', 'Travel')):
        client.post('/api/expenses', headers=headers,
                    json={'description': 'x', 'amount': amount, 'date': '2024-01-01', 'category': category})

    assert client.get('/api/expense', headers=headers).get_json() == {'totalExpense': '19.75'}
    assert client.get('/api/expenses/summary', headers=headers).get_json() == {
        'labels': ['Food', 'Travel'],
        'values': ['12.50', '7.25'],
        'total': '19.75',
    }


def test_unmatched_route_is_json_404(client):
    resp = client.get('/api/nothing-here')
    assert resp.status_code == 404
    assert resp.get_json() == {'message': 'Not Found'}


def test_no_health_route(client):
    assert client.get('/api/health').status_code == 404


def test_storage_failure_is_generic_500(app, client, token):
    failure = OperationalError('SELECT secret FROM expenses', {}, Exception('disk I/O error'))
    broken = mock.Mock(query=mock.Mock(side_effect=failure))
    with mock.patch.object(app.extensions['expense_ledger'], 'session', broken):
        resp = client.get('/api/expenses', headers=auth_header(token))
    assert resp.status_code == 500
    assert resp.get_json() == {'message': 'Database error'}
    assert b'SELECT' not in resp.data


def test_unexpected_error_is_generic_500(app, client, token):
    with mock.patch.object(app.extensions['expense_ledger'], 'list_by_owner', side_effect=RuntimeError('boom')):
        resp = client.get('/api/expenses', headers=auth_header(token))
    assert resp.status_code == 500
    assert resp.get_json() == {'message': 'Something went wrong!'}
