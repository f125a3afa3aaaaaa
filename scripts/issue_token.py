#!/usr/bin/env python3
"""Print a signed access token for an existing account (local development)."""
import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kinfolk.core.log import get_logger, init_logging
from kinfolk.core.security import AuthenticatedAccount, get_security_provider
from kinfolk.db import session_scope
from kinfolk.repositories import AccountsRepository

logger = get_logger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email", help="Email of the account to sign in as")
    args = parser.parse_args(argv)

    with session_scope() as session:
        account = AccountsRepository(session).find_by_email(args.email)
        if account is None:
            logger.error(f"No account registered for {args.email}")
            return 1
        principal = AuthenticatedAccount(account_id=account.id, email=account.email)

    print(get_security_provider().create_access_token(principal))
    return 0


if __name__ == "__main__":
    init_logging(app_name="issue-token")
    sys.exit(main())
