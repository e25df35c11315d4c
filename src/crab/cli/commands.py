import logging
from functools import wraps
from pathlib import Path

import click

from crab import __version__
from crab.constants import DB_PATH_ENVVAR
from crab.core.entry import CredentialEntry
from crab.core.storage import CredentialStorage
from crab.errors import (
    CredentialError,
    CredentialNotFoundError,
    CredentialsNotStoredError,
    DatabaseNotFoundError,
    UserCancelledError,
)
from crab.utils import format_timestamp_local


def handle_errors(f):
    """Decorator that turns credential errors into messages and exit codes.

    An interrupted prompt (click.Abort) counts as a cancellation, which has
    its own exit code and never leaves a partial write behind.
    """
    @wraps(f)
    def wrapped(*args, **kwargs):
        ctx = click.get_current_context()
        try:
            try:
                return f(*args, **kwargs)
            except click.Abort as e:
                raise UserCancelledError() from e
        except UserCancelledError as e:
            click.echo("Operation cancelled.")
            ctx.exit(e.exit_code)
        except DatabaseNotFoundError as e:
            click.echo(f"Error: {e}", err=True)
            click.echo("Try running 'crab add' to create your first credential.", err=True)
            ctx.exit(e.exit_code)
        except CredentialNotFoundError as e:
            click.echo(f"Error: {e}", err=True)
            click.echo(
                f"Try 'crab list' to see available services or 'crab add -s {e.service}' to create it.",
                err=True,
            )
            ctx.exit(e.exit_code)
        except CredentialError as e:
            logging.debug("Command failed", exc_info=e)
            click.echo(f"Error: {e}", err=True)
            ctx.exit(e.exit_code)
    return wrapped


@click.group()
@click.option('--db', 'db_path', default=None, envvar=DB_PATH_ENVVAR,
              type=click.Path(dir_okay=False, path_type=Path),
              help='Path of the credential database (default: ~/.crab/credentials.json).')
@click.option('-v', '--verbose', is_flag=True, help='Log debug output to stderr.')
@click.version_option(__version__, prog_name='crab')
@click.pass_context
def cli(ctx, db_path, verbose):
    """crab - a local credential manager.

    Stores service / account / secret credentials in a JSON file in your
    home directory. Secrets are stored unencrypted; the file is readable
    only by its owner.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING,
                        format='%(asctime)s - %(levelname)s - %(message)s')
    ctx.obj = CredentialStorage(db_path)


@cli.command()
@click.option('-s', '--service', default=None, help='Service name (prompted if omitted).')
@click.option('-a', '--account', default=None, help='Account name (prompted if omitted).')
@click.pass_obj
@handle_errors
def add(storage, service, account):
    """Add a credential, or overwrite an existing one after confirmation."""
    database = storage.load()
    if service is None:
        service = click.prompt('Service name')

    if service in database:
        click.echo(f"Service '{service}' already exists!")
        if not click.confirm('Do you want to overwrite it?'):
            click.echo("Operation cancelled.")
            return

    if account is None:
        account = click.prompt('Account name')
    secret = click.prompt('Secret', hide_input=True, confirmation_prompt='Confirm secret')

    database.upsert_entry(CredentialEntry.create(service, account, secret))
    storage.save(database)
    click.echo(f"Credential for '{service}' added successfully!")


@cli.command()
@click.argument('service')
@click.pass_obj
@handle_errors
def get(storage, service):
    """Show the credential stored for SERVICE."""
    entry = storage.load().get_entry(service)
    click.echo("Credential found:")
    click.echo(f"  Service: {entry.service}")
    click.echo(f"  Account: {entry.account}")
    click.echo(f"  Secret: {entry.secret}")
    click.echo(f"  Created: {format_timestamp_local(entry.created_at)}")
    click.echo(f"  Updated: {format_timestamp_local(entry.updated_at)}")


@cli.command(name="list")
@click.pass_obj
@handle_errors
def list_credentials(storage):
    """List stored services in the order they were added."""
    services = storage.load().list_services()
    if not services:
        raise CredentialsNotStoredError()
    click.echo(f"Stored credentials ({len(services)} entries):")
    for i, service in enumerate(services, start=1):
        click.echo(f"  {i}. {service}")


@cli.command()
@click.argument('service')
@click.pass_obj
@handle_errors
def edit(storage, service):
    """Edit the service name, account or secret of SERVICE."""
    database = storage.load()
    entry = database.get_entry(service)
    click.echo(f"Editing credential for '{service}'")
    click.echo("Current values:")
    click.echo(f"  Service: {entry.service}")
    click.echo(f"  Account: {entry.account}")

    new_service = click.prompt('New service name', default=entry.service)
    new_account = click.prompt('New account', default=entry.account)
    new_secret = None
    if click.confirm('Change secret?'):
        new_secret = click.prompt('New secret', hide_input=True, confirmation_prompt='Confirm secret')

    def apply_changes(working):
        if new_service != working.service:
            working.update_service(new_service)
        if new_account != working.account:
            working.update_account(new_account)
        if new_secret is not None:
            working.update_secret(new_secret)

    database.update_entry(service, apply_changes)
    storage.save(database)
    click.echo("Credential updated successfully!")


@cli.command()
@click.argument('service')
@click.pass_obj
@handle_errors
def remove(storage, service):
    """Remove the credential stored for SERVICE."""
    database = storage.load()
    if service not in database:
        raise CredentialNotFoundError(service)
    if click.confirm(f"Are you sure you want to remove '{service}'?") and database.remove_entry(service):
        storage.save(database)
        click.echo(f"Credential for '{service}' removed successfully!")


@cli.command()
@click.pass_obj
@handle_errors
def info(storage):
    """Show information about the credential database."""
    if not storage.exists():
        raise DatabaseNotFoundError()
    database = storage.load()
    click.echo("Database information:")
    click.echo(f"  Version: {database.version}")
    click.echo(f"  Entries: {len(database)}")
    try:
        metadata = storage.metadata()
    except CredentialError as e:
        click.echo(f"  Failed to get file info: {e}")
    else:
        click.echo(f"  File size: {metadata.size} bytes")
        click.echo(f"  Last modified: {metadata.last_modified:%Y-%m-%d %H:%M:%S}")
    click.echo(f"  Location: {storage.path}")


@cli.command()
@click.pass_obj
@handle_errors
def backup(storage):
    """Copy the database to a timestamped backup file."""
    backup_path = storage.backup()
    click.echo(f"Database backup created: {backup_path}")


@cli.command()
@click.pass_obj
@handle_errors
def delete(storage):
    """Delete the entire credential database."""
    if not storage.exists():
        raise DatabaseNotFoundError()
    database = storage.load()
    click.echo("You are about to delete the entire database!")
    click.echo(f"Current database contains {len(database)} entries")

    if not click.confirm('Are you sure you want to delete the ENTIRE database? This cannot be undone!'):
        return
    if click.confirm('Create a backup before deletion?', default=True):
        backup_path = storage.backup()
        click.echo(f"Database backup created: {backup_path}")
    storage.delete()
    click.echo(f"Database deleted: {storage.path}")


def main():
    cli(prog_name='crab')


if __name__ == '__main__':
    main()
