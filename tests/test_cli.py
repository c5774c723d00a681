from finance_tracker.models import Account, Expense


def test_initdb(app):
    result = app.test_cli_runner().invoke(args=['initdb'])
    assert result.exit_code == 0
    assert 'Database initialized!' in result.output


def test_delete_user_cascades(app, ledger, make_account):
    alice = make_account('alice')
    ledger.create(alice.id, {'description': 'coffee', 'amount': '3.50', 'date': '2024-01-01'})

    result = app.test_cli_runner().invoke(args=['delete-user', 'alice'])

    assert result.exit_code == 0
    assert "User 'alice' deleted." in result.output
    assert Account.query.count() == 0
    assert Expense.query.count() == 0


def test_delete_unknown_user(app):
    result = app.test_cli_runner().invoke(args=['delete-user', 'ghost'])
    assert result.exit_code == 1
    assert "not found" in result.output
