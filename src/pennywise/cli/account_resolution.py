"""CLI helpers for account resolution and error handling."""

from __future__ import annotations

import click
from pennywise.cli.error_handling import handle_domain_error
from pennywise.domain.account import AccountService
from pennywise.utils.account_resolver import resolve_account


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str
) -> str:
    """Resolve account name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_account(account_service, account)
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def account_labels(account_service: AccountService) -> dict[str, str]:
    """Map account ids to display names, inactive accounts marked."""
    return {
        acc.id: acc.name if acc.is_active else f"{acc.name} (inactive)"
        for acc in account_service.list_accounts(include_inactive=True)
    }
