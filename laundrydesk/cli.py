# laundrydesk/cli.py
import click
from flask.cli import with_appcontext

from .extensions import db
from .model import Branch, Setting, User
from .model.user import ROLES

@click.command("create-admin")
@with_appcontext
@click.option("--username", required=True)
@click.option("--password", required=True)
@click.option("--name", required=True)
@click.option("--role", default="admin", type=click.Choice(ROLES))
@click.option("--branch-id", type=int, default=None)
def create_admin(username, password, name, role, branch_id):
    username = username.strip().lower()
    if User.query.filter_by(username=username).first():
        click.echo("Username already exists"); return
    if branch_id is not None and not db.session.get(Branch, branch_id):
        click.echo(f"Branch {branch_id} not found"); return
    u = User(username=username, full_name=name, role=role, branch_id=branch_id)
    u.set_password(password)
    db.session.add(u); db.session.commit()
    click.echo(f"User created: {u.id} {u.username} ({u.role})")

@click.command("create-branch")
@with_appcontext
@click.option("--name", required=True)
@click.option("--code", required=True)
@click.option("--address", default=None)
def create_branch(name, code, address):
    code = code.strip().upper()
    if Branch.query.filter_by(code=code).first():
        click.echo("Branch code already exists"); return
    b = Branch(name=name.strip(), code=code, address=address)
    db.session.add(b); db.session.commit()
    click.echo(f"Branch created: {b.id} {b.code}")

@click.command("set-setting")
@with_appcontext
@click.argument("key")
@click.argument("value")
def set_setting(key, value):
    from .services.pricing import EXPRESS_SETTINGS, parse_multiplier
    if key in {k for k, _ in EXPRESS_SETTINGS.values()}:
        try:
            parse_multiplier(value, source=key)
        except ValueError as e:
            raise click.ClickException(str(e))
    row = Setting.query.filter_by(key=key).first()
    if row:
        row.value = value
    else:
        db.session.add(Setting(key=key, value=value))
    db.session.commit()
    click.echo(f"{key} = {value}")

@click.command("export-price-list")
@with_appcontext
@click.argument("path")
@click.option("--active-only", is_flag=True)
def export_prices(path, active_only):
    from .services.price_list_io import export_price_list
    count = export_price_list(path, include_inactive=not active_only)
    click.echo(f"{count} services exported to {path}")

@click.command("import-price-list")
@with_appcontext
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def import_prices(path):
    from .services.price_list_io import import_price_list
    try:
        result = import_price_list(path)
    except ValueError as e:
        db.session.rollback()
        raise click.ClickException(str(e))
    click.echo(f"{result['created']} created, {result['updated']} updated from {path}")

def register_cli(app):
    app.cli.add_command(create_admin)
    app.cli.add_command(create_branch)
    app.cli.add_command(set_setting)
    app.cli.add_command(export_prices)
    app.cli.add_command(import_prices)
