"""
Flask CLI commands for canteen administration.

Commands:
- flask init-db: Create the database tables
- flask register-customer: Register a customer with a zero balance
- flask top-up: Credit a customer's balance
"""

import click
from canteen.database import create_all, session_scope
from canteen.exceptions import CanteenError
from canteen.services import balance_service, customer_service


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables that do not exist yet."""
        create_all()
        click.echo(click.style('Database tables created.', fg='green'))

    @app.cli.command('register-customer')
    @click.argument('customer_id')
    @click.option('--name', prompt=True, help='Customer display name')
    @click.option('--type', 'customer_type', default=None, help="Customer type tag, e.g. 'student'")
    def register_customer(customer_id, name, customer_type):
        """Register a new customer with a zero balance."""
        try:
            with session_scope() as session:
                customer = customer_service.register_customer(session, customer_id, name, customer_type)
                click.echo(click.style(f'Customer {customer.id} registered.', fg='green'))
        except CanteenError as e:
            raise click.ClickException(e.message)

    @app.cli.command('top-up')
    @click.argument('customer_id')
    @click.argument('amount')
    def top_up(customer_id, amount):
        """Credit AMOUNT to the balance of CUSTOMER_ID."""
        try:
            with session_scope() as session:
                balance = balance_service.top_up(session, customer_id, amount)
        except CanteenError as e:
            raise click.ClickException(e.message)

        click.echo(f'Customer {customer_id} balance: {balance}')
