from app.backend.src import models  # noqa: F401
from app.backend.src.db import get_engine
from app.backend.src.models.base import Base


def init_db():
    engine = get_engine()
    print(f"Connecting to {engine.url.render_as_string(hide_password=True)}")
    Base.metadata.create_all(bind=engine)
    print("Tables created successfully!")


if __name__ == "__main__":
    init_db()
