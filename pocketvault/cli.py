"""
cli.py - Command-line interface for PocketVault
"""
import logging
import os
import sys
import time
from typing import Optional

import click
from tabulate import tabulate

from . import __version__, config
from .errors import VaultError
from .generator import DEFAULT_PASSWORD_OPTIONS, PasswordOptions, generate_password
from .manager import PasswordManager
from .models import VaultRecord
from .storage import FileKeyValueStore
from .strength import estimate_strength, format_strength_bar


def get_password_manager() -> PasswordManager:
    """Build the password manager for the store chosen on the command line"""
    ctx = click.get_current_context()
    store_path = ctx.find_root().obj["store"]
    return PasswordManager(FileKeyValueStore(store_path))


def prompt_master_password(confirm: bool = False) -> str:
    """Prompt for master password with optional confirmation"""
    return click.prompt("Master password", hide_input=True, confirmation_prompt=confirm)


def require_vault(pm: PasswordManager) -> None:
    try:
        found = pm.has_vault()
    except VaultError as e:
        show_error(f"Could not open vault: {e}")
        sys.exit(1)

    if not found:
        show_error("No vault found. Run 'pocketvault init' first.")
        sys.exit(1)


def unlock_or_exit(pm: PasswordManager) -> None:
    require_vault(pm)

    try:
        unlocked = pm.unlock(prompt_master_password())
    except VaultError as e:
        show_error(f"Could not open vault: {e}")
        sys.exit(1)

    if not unlocked:
        show_error("Invalid master password!")
        sys.exit(1)


def show_error(message: str) -> None:
    click.echo(click.style(f"❌ {message}", fg='red'), err=True)


def resolve_entry(pm: PasswordManager, key: str) -> Optional[VaultRecord]:
    """Find an entry by id, then exact title, then a unique search hit"""
    for entry in pm.entries():
        if entry.id == key:
            return entry

    titled = [e for e in pm.entries() if e.title.lower() == key.lower()]
    if len(titled) == 1:
        return titled[0]

    matches = titled or pm.search(key)
    if len(matches) == 1:
        return matches[0]

    if matches:
        click.echo(f"'{key}' matches several entries. Use an id:")
        for entry in matches[:5]:
            click.echo(f"  • {entry.id}  {entry.title} ({entry.username})")
    else:
        show_error(f"No entry found for '{key}'")
    return None


def secure_clipboard_copy(password: str, timeout: int = 30) -> bool:
    """
    Copy to the clipboard, wait timeout seconds, then clear it again.

    The command stays running while it waits, Ctrl-C clears right away.
    A timeout of 0 leaves the password on the clipboard.
    """
    try:
        import pyperclip
    except ImportError:
        return False

    pyperclip.copy(password)
    if timeout <= 0:
        click.echo("\n✅ Password copied to clipboard!")
        return True

    click.echo(f"\n✅ Password copied to clipboard! Clearing in {timeout} seconds (Ctrl-C to clear now)")
    try:
        time.sleep(timeout)
    except KeyboardInterrupt:
        click.echo()

    # Only clear if it's still our password
    if pyperclip.paste() == password:
        pyperclip.copy("")
    click.echo("🧹 Clipboard cleared")
    return True


def parse_tags(tags: Optional[str]):
    return [t.strip() for t in tags.split(',')] if tags else []


@click.group()
@click.version_option(version=__version__, prog_name="PocketVault")
@click.option('--store', type=click.Path(dir_okay=False), default=None,
              help='Vault store file (default: $POCKETVAULT_HOME/vault.json)')
@click.option('--verbose', '-v', is_flag=True, help='Log what the vault is doing')
@click.pass_context
def cli(ctx, store, verbose):
    """PocketVault - an offline password vault

    Your vault is encrypted locally with AES-256-GCM under a key derived from
    your master password. The master password itself is never stored.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = {"store": store or config.default_store_path()}


@cli.command()
def init():
    """Initialize a new password vault"""
    pm = get_password_manager()

    replace_existing = False
    try:
        if pm.has_vault():
            click.echo("⚠️  Vault already exists!")
            if not click.confirm("Do you want to delete it and create a new one?"):
                return
            replace_existing = True
    except VaultError as e:
        show_error(f"Could not read vault store: {e}")
        sys.exit(1)

    click.echo("🔐 Creating a new password vault...\n")
    click.echo("Choose a strong master password.")
    click.echo("This password protects all your other passwords.")
    click.echo("It cannot be recovered if you forget it!\n")

    password = prompt_master_password(confirm=True)
    click.echo(format_strength_bar(estimate_strength(password)))

    # The old vault stays until the new password is known to be acceptable
    if len(password) < config.MIN_MASTER_PASSWORD_LENGTH:
        show_error(f"Master password must be at least {config.MIN_MASTER_PASSWORD_LENGTH} characters long")
        sys.exit(1)

    try:
        if replace_existing:
            pm.reset()
        pm.setup(password)
        click.echo("\n✅ Password vault created successfully!")
        click.echo(f"📁 Location: {pm.store.filename}")
    except VaultError as e:
        show_error(f"Error creating vault: {e}")
        sys.exit(1)
    finally:
        pm.lock()


@cli.command()
@click.option('--title', '-t', prompt="Title", help='Name of the entry')
@click.option('--website', '-w', default="", help='Website URL')
@click.option('--username', '-u', prompt="Username", help='Username or email')
@click.option('--generate', '-g', is_flag=True, help='Generate a secure password')
@click.option('--length', '-l', default=16, help='Generated password length')
@click.option('--notes', '-n', default="", help='Optional notes about this account')
@click.option('--tags', default="", help='Comma-separated tags')
def add(title, website, username, generate, length, notes, tags):
    """Add a new password to the vault"""
    pm = get_password_manager()
    unlock_or_exit(pm)

    try:
        if generate:
            password = generate_password(length=length)
            click.echo(f"\n🎲 Generated password: {click.style(password, fg='green', bold=True)}")
        else:
            password = click.prompt("Password", hide_input=True, confirmation_prompt=True)
            click.echo(format_strength_bar(estimate_strength(password)))

        entry = pm.add_entry(title, website, username, password, notes, parse_tags(tags))
        click.echo(f"✅ Saved '{entry.title}' ({entry.id})")
    except VaultError as e:
        show_error(f"Error: {e}")
        sys.exit(1)
    finally:
        pm.lock()


@cli.command()
@click.argument('entry')
@click.option('--show', '-S', is_flag=True, help='Show password in plain text')
@click.option('--copy', '-c', is_flag=True, help='Copy password to clipboard')
@click.option('--clear-after', default=30, type=int, show_default=True,
              help='Seconds before the clipboard is cleared (0 to keep it)')
def get(entry, show, copy, clear_after):
    """Retrieve a password from the vault"""
    pm = get_password_manager()
    unlock_or_exit(pm)

    try:
        record = resolve_entry(pm, entry)
        if record is None:
            sys.exit(1)

        click.echo(f"\n🔐 {click.style(record.title, bold=True)}")
        if record.website:
            click.echo(f"🌐 Website: {record.website}")
        click.echo(f"👤 Username: {click.style(record.username, fg='cyan')}")

        if show:
            click.echo(f"🔑 Password: {click.style(record.password, fg='yellow')}")
        else:
            click.echo(f"🔑 Password: {'*' * len(record.password)} (use --show to display)")

        if record.notes:
            click.echo(f"📝 Notes: {record.notes}")
        if record.tags:
            click.echo(f"🏷  Tags: {', '.join(record.tags)}")
        click.echo(f"📅 Last modified: {record.updated_at[:10]}")

        if copy:
            # Vault stays locked while the clipboard timer runs
            password = record.password
            pm.lock()
            if not secure_clipboard_copy(password, clear_after):
                click.echo("\n⚠️  Install 'pyperclip' to enable clipboard support", err=True)
    except VaultError as e:
        show_error(f"Error: {e}")
        sys.exit(1)
    finally:
        pm.lock()


@cli.command('list')
@click.option('--filter', '-f', 'query', default="", help='Filter entries by search term')
@click.option('--tag', '-t', default=None, help='Only entries with this tag')
@click.option('--verbose', '-v', is_flag=True, help='Show ids and strength')
def list_entries(query, tag, verbose):
    """List stored entries"""
    pm = get_password_manager()
    unlock_or_exit(pm)

    try:
        entries = pm.search(query, tag)
        if not entries:
            click.echo("No entries found.")
            return

        headers = ['Title', 'Website', 'Username', 'Tags', 'Modified']
        if verbose:
            headers = ['Id'] + headers + ['Strength']

        rows = []
        for e in entries:
            row = [e.title, e.website, e.username, ', '.join(e.tags), e.updated_at[:10]]
            if verbose:
                row = [e.id] + row + [estimate_strength(e.password).label]
            rows.append(row)

        click.echo(tabulate(rows, headers=headers, tablefmt='simple'))
        click.echo(f"\n{len(entries)} of {len(pm.entries())} entries")
    except VaultError as e:
        show_error(f"Error: {e}")
        sys.exit(1)
    finally:
        pm.lock()


@cli.command()
@click.argument('entry')
@click.option('--title', default=None, help='New title')
@click.option('--website', default=None, help='New website')
@click.option('--username', default=None, help='New username')
@click.option('--notes', default=None, help='New notes')
@click.option('--tags', default=None, help='New comma-separated tags')
@click.option('--password', 'change_password', is_flag=True, help='Prompt for a new password')
@click.option('--generate', '-g', is_flag=True, help='Generate a new password')
@click.option('--length', '-l', default=16, help='Generated password length')
def edit(entry, title, website, username, notes, tags, change_password, generate, length):
    """Edit an existing entry"""
    pm = get_password_manager()
    unlock_or_exit(pm)

    try:
        record = resolve_entry(pm, entry)
        if record is None:
            sys.exit(1)

        changes = {
            name: value
            for name, value in (('title', title), ('website', website),
                                ('username', username), ('notes', notes))
            if value is not None
        }
        if tags is not None:
            changes['tags'] = parse_tags(tags)
        if generate:
            changes['password'] = generate_password(length=length)
            click.echo(f"🎲 Generated password: {click.style(changes['password'], fg='green', bold=True)}")
        elif change_password:
            changes['password'] = click.prompt("New password", hide_input=True, confirmation_prompt=True)

        if not changes:
            click.echo("Nothing to change.")
            return

        pm.update_entry(record.id, **changes)
        click.echo(f"✅ Updated '{record.title}'")
    except VaultError as e:
        show_error(f"Error: {e}")
        sys.exit(1)
    finally:
        pm.lock()


@cli.command()
@click.argument('entry')
@click.option('--force', '-f', is_flag=True, help='Skip confirmation prompt')
def delete(entry, force):
    """Delete an entry from the vault"""
    pm = get_password_manager()
    unlock_or_exit(pm)

    try:
        record = resolve_entry(pm, entry)
        if record is None:
            sys.exit(1)

        if not force and not click.confirm(f"Delete '{record.title}' ({record.username})?"):
            click.echo("Cancelled.")
            return

        pm.delete_entry(record.id)
        click.echo(f"🗑  Deleted '{record.title}'")
    except VaultError as e:
        show_error(f"Error: {e}")
        sys.exit(1)
    finally:
        pm.lock()


@cli.command()
@click.option('--length', '-l', default=DEFAULT_PASSWORD_OPTIONS.length, type=int, help='Password length')
@click.option('--count', '-c', default=1, type=int, help='Number of passwords to generate')
@click.option('--numbers', 'number_count', default=DEFAULT_PASSWORD_OPTIONS.number_count, type=int,
              help='Minimum number of digits')
@click.option('--specials', 'special_count', default=DEFAULT_PASSWORD_OPTIONS.special_char_count, type=int,
              help='Minimum number of special characters')
@click.option('--no-symbols', is_flag=True, help='Exclude symbols')
@click.option('--no-digits', is_flag=True, help='Exclude numbers')
@click.option('--no-uppercase', is_flag=True, help='Exclude uppercase letters')
@click.option('--no-lowercase', is_flag=True, help='Exclude lowercase letters')
@click.option('--allow-similar', is_flag=True, help='Allow look-alike characters (i,l,1,L,o,0,O)')
@click.option('--no-ambiguous', is_flag=True, help='Exclude ambiguous symbols ({}[]()/\\\'"`~,;.<>)')
def generate(length, count, number_count, special_count, no_symbols, no_digits,
             no_uppercase, no_lowercase, allow_similar, no_ambiguous):
    """Generate secure passwords without saving them"""
    options = PasswordOptions(
        length=length,
        include_uppercase=not no_uppercase,
        include_lowercase=not no_lowercase,
        include_numbers=not no_digits,
        include_special_chars=not no_symbols,
        number_count=number_count,
        special_char_count=special_count,
        exclude_similar=not allow_similar,
        exclude_ambiguous=no_ambiguous,
    )

    for i in range(count):
        try:
            password = generate_password(options)
        except VaultError as e:
            show_error(str(e))
            sys.exit(1)

        prefix = "" if count == 1 else f"{i + 1}. "
        click.echo(f"{prefix}{click.style(password, fg='green', bold=True)}")

    click.echo("\n💡 Tip: Use 'pocketvault add -g' to generate and save a password")


@cli.command()
@click.argument('password', required=False)
def strength(password):
    """Score a password's strength"""
    if password is None:
        password = click.prompt("Password", hide_input=True)
    click.echo(format_strength_bar(estimate_strength(password)))


@cli.command()
@click.option('--format', '-f', 'format_type', type=click.Choice(['json', 'csv']), default='json',
              help='Export format')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Output file path')
@click.option('--include-passwords', is_flag=True, help='Include actual passwords (CAREFUL!)')
def export(format_type, output, include_passwords):
    """Export entries to a plaintext file"""
    pm = get_password_manager()

    if not include_passwords:
        click.echo("⚠️  Exporting without passwords (use --include-passwords to include)")

    unlock_or_exit(pm)

    try:
        text = pm.export(format_type, include_passwords)
        filename = output or f"pocketvault-export-{time.strftime('%Y-%m-%d')}.{format_type}"

        with open(filename, 'w', encoding='utf-8', newline='') as f:
            f.write(text)
        if os.name == 'posix':
            os.chmod(filename, 0o600)

        click.echo(f"✅ Exported {len(pm.entries())} entries to {filename}")
    except VaultError as e:
        show_error(f"Error: {e}")
        sys.exit(1)
    finally:
        pm.lock()


@cli.command()
def passwd():
    """Change the master password"""
    pm = get_password_manager()
    require_vault(pm)

    current = click.prompt("Current master password", hide_input=True)
    new = click.prompt("New master password", hide_input=True, confirmation_prompt=True)

    try:
        if not pm.change_master_password(current, new):
            show_error("Invalid master password!")
            sys.exit(1)
        click.echo("✅ Master password changed")
    except VaultError as e:
        show_error(f"Error: {e}")
        sys.exit(1)
    finally:
        pm.lock()


if __name__ == '__main__':
    cli()
