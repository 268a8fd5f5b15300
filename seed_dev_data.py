"""Seed the development database with demo users and products."""

from app.backend.src.db import get_engine, session_scope
from app.backend.src.models.base import Base
from app.backend.src.services.seed import DEFAULT_PASSWORD, seed_development_data


def main() -> None:
    """Create tables (if needed) and ensure demo data exists."""

    engine = get_engine()
    Base.metadata.create_all(bind=engine)

    with session_scope() as session:
        result = seed_development_data(session)

    print("Development data ready!")
    print(f"Users created: {', '.join(result.users_created) or 'none'}")
    print(f"Products created: {', '.join(result.products_created) or 'none'}")
    if result.users_created:
        print(f"Demo password for new users: {DEFAULT_PASSWORD}")


if __name__ == "__main__":
    main()
