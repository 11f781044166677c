import click

from billing.models.user import User


def register_commands(app):
    @app.cli.command("create-user")
    @click.argument("login_id")
    @click.argument("password")
    @click.option("--name", default=None, help="表示名（省略時は login_id）")
    @click.option("--email", default=None)
    def create_user(login_id, password, name, email):
        """Create an active API user."""
        from billing.routes.auth import register_user

        if User.query.filter_by(login_id=login_id).first():
            raise click.ClickException(f"user {login_id} already exists")
        user = register_user(login_id, name or login_id, password, email)
        click.echo(f"[OK] user created id={user.id} login_id={user.login_id}")

    @app.cli.command("reconcile-payments")
    def reconcile_payments():
        """Retry auto-payments for accepted quotations left without one."""
        from billing.services.reconciliation import reconcile_pending_payments

        result = reconcile_pending_payments()
        click.echo(f"[RECONCILE] resolved={result['resolved']} remaining={result['remaining']}")
