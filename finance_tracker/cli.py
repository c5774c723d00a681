import click

from .errors import NotFoundError
from .models import db


def register_commands(app):
    @app.cli.command('initdb')
    def initdb():
        """Create the database tables."""
        db.create_all()
        click.echo('Database initialized!')

    @app.cli.command('delete-user')
    @click.argument('username')
    def delete_user(username):
        """Delete an account and all of its expenses."""
        directory = app.extensions['user_directory']
        try:
            account = directory.find_by_username(username)
        except NotFoundError:
            raise click.ClickException("User '%s' not found." % username)
        directory.delete(account.id)
        click.echo("User '%s' deleted." % username)
