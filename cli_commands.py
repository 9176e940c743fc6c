"""
Flask CLI Commands per il Comporto Tracker
"""
import click
from flask.cli import with_appcontext
from werkzeug.security import generate_password_hash
from app import app, db


@app.cli.command('init-ccnl')
@with_appcontext
def init_ccnl_command():
    """
    Crea i CCNL predefiniti se il registro è vuoto

    Esegui dopo il primo deploy:
    flask init-ccnl
    """
    from services.storage import get_storage, seed_default_ccnls

    created = seed_default_ccnls(get_storage())
    if created:
        click.echo(f"✅ Creati {created} CCNL predefiniti")
    else:
        click.echo("CCNL già presenti, nessuna modifica.")


@app.cli.command('create-user')
@click.option('--username', required=True, help='Username di accesso')
@click.option('--email', default=None, help='Email del consulente')
@click.option('--password', required=True, help='Password iniziale')
@click.option('--first-name', default=None, help='Nome')
@click.option('--last-name', default=None, help='Cognome')
@with_appcontext
def create_user_command(username, email, password, first_name, last_name):
    """Crea un account consulente"""
    from models import User

    if User.query.filter_by(username=username).first():
        raise click.ClickException(f"Username '{username}' già esistente")
    if email and User.query.filter_by(email=email).first():
        raise click.ClickException(f"Email '{email}' già registrata")

    user = User(
        username=username,
        email=email,
        password_hash=generate_password_hash(password),
        first_name=first_name,
        last_name=last_name,
        active=True,
    )
    db.session.add(user)
    db.session.commit()
    click.echo(f"✅ Utente creato: {user.username} (id {user.id})")


@app.cli.command('comporto-report')
@click.option('--username', required=True, help='Account di cui stampare il riepilogo')
@with_appcontext
def comporto_report_command(username):
    """
    Riepilogo comporto di un account: statistiche e dipendenti critici
    Utile per controlli periodici via cron
    """
    from models import User
    from services.storage import get_storage
    from services.reporting import employee_stats
    from utils_comporto import employee_remaining_days, get_status_info
    from constants import ComportoStatus

    user = User.query.filter_by(username=username).first()
    if user is None:
        raise click.ClickException(f"Utente '{username}' non trovato")

    employees = get_storage().list_employees(user.id)
    stats = employee_stats(employees)

    click.echo(f"=== Report Comporto - {user.get_full_name()} ===\n")
    click.echo(f"Totale dipendenti: {stats['total']}")
    click.echo(f"In scadenza (10gg): {stats['expiring_soon']}")
    click.echo(f"Comporto scaduto: {stats['expired']}")
    click.echo(f"In regola: {stats['compliant']}")

    flagged = []
    for employee in employees:
        remaining = employee_remaining_days(employee)
        info = get_status_info(remaining)
        if info['status'] in (ComportoStatus.EXPIRED, ComportoStatus.CRITICAL):
            flagged.append((employee, remaining, info))

    if flagged:
        click.echo("\nDipendenti da verificare:")
        for employee, remaining, info in flagged:
            click.echo(f"  - {employee.external_code} {employee.get_full_name()}: "
                       f"{remaining} giorni ({info['label']})")
