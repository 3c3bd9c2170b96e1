import argparse
import sys
from typing import Optional, Sequence

from config import Settings
from database import init_db, make_engine, make_session_factory
from errors import AccountError, NotFound
from models import utcnow
from repository import UserRepository


def soft_delete(repository: UserRepository, username: str, deleted_by: Optional[str] = None):
    """
    Soft-delete the live user ``username``.

    The deleter defaults to the user themself. The row stays in the
    ``users`` table but the user can no longer log in or be resolved.
    """
    user = repository.resolve_by_username(username)
    if user.is_deleted:
        raise AccountError(f"User {username!r} is already deleted")

    actor_id = user.id
    if deleted_by and deleted_by != username:
        actor = repository.resolve_by_username(deleted_by)
        if actor.is_deleted:
            raise NotFound("User")
        actor_id = actor.id

    user.soft_delete(actor_id, utcnow())
    repository.update(user)
    return user


def main(argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None) -> int:
    """
    Soft-delete one user from the accounts database.

    This is a maintenance script intended for admins; the account service
    itself exposes no delete route.
    """
    parser = argparse.ArgumentParser(description="Soft-delete an account service user")
    parser.add_argument("username", help="user to delete")
    parser.add_argument("--by", dest="deleted_by", help="username of the acting admin")
    args = parser.parse_args(argv)

    settings = settings or Settings()
    engine = make_engine(settings.database_url)
    init_db(engine)
    db = make_session_factory(engine)()
    try:
        user = soft_delete(UserRepository(db), args.username, args.deleted_by)
        print(f"Deleted user {args.username} ({user.id}).")
    except AccountError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
