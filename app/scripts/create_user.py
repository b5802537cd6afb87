"""
Create a user (e.g. the first admin). Registration over HTTP always yields
role 'user'; this is the administrative path for admins. Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user admin admin@example.com your-secure-password admin
"""
import argparse
import logging
import sys

from app.core.database import SessionLocal
from app.core.security import PASSWORD_MAX_LEN, USERNAME_MAX_LEN, hash_password
from app.models.user import Role
from app.services.credential_store import CredentialConflictError, CredentialStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Quill user.")
    parser.add_argument("username", help=f"Username (1-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password (1-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default=Role.USER.value, choices=[r.value for r in Role])
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not username or len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if "@" not in args.email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not args.password or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be 1-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        store = CredentialStore(db)
        try:
            store.create(username, args.email.strip(), hash_password(args.password), role=Role(args.role))
        except CredentialConflictError as e:
            print(f"{e.message}.", file=sys.stderr)
            return 1
        logger.info("Created user '%s' with role '%s'", username, args.role)
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
