"""Utility for resolving account names to IDs."""

from pennywise.domain.account import AccountService
from pennywise.domain.errors import NotFoundError


def resolve_account(account_service: AccountService, account: str) -> str:
    """Resolve an account name or ID to an account ID.

    IDs are matched first (including inactive accounts, so historical
    records stay addressable), then active account names, case-insensitively.

    Args:
        account_service: AccountService instance
        account: Account name or ID

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
    """
    account = account.strip()
    if account_service.get(account) is not None:
        return account

    wanted = account.lower()
    for acc in account_service.list_accounts():
        if acc.name.lower() == wanted:
            return acc.id

    # Allow unambiguous id prefixes, which is how ids are shown in listings
    matches = [acc for acc in account_service.list_accounts(include_inactive=True) if acc.id.startswith(account)]
    if len(matches) == 1:
        return matches[0].id

    raise NotFoundError(f"Account '{account}' not found")
