import os
import tempfile

# Must be set before clipscribe modules read their configuration
_WORK_DIR = tempfile.mkdtemp(prefix="clipscribe-tests-")
os.environ["TESTING"] = "true"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_WORK_DIR, 'unused.db')}"
os.environ["STORAGE_DIR"] = os.path.join(_WORK_DIR, "storage")
os.environ["SYNC_DEBOUNCE_SECONDS"] = "0.01"
os.environ.setdefault("DEEPGRAM_API_KEY", "test-key")
os.environ["DEEPGRAM_CALLBACK_SECRET"] = ""

import pytest  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from clipscribe.database.connection import Base, create_db_engine  # noqa: E402
from clipscribe.services.storage_service import StorageService  # noqa: E402


@pytest.fixture
def session_factory(tmp_path):
    """Create a temporary database for one test."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(engine)

    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    yield testing_session_local

    engine.dispose()


@pytest.fixture
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def storage(tmp_path):
    return StorageService(
        root_dir=str(tmp_path / "storage"),
        public_base_url="http://testserver/api/v1/media",
        max_upload_bytes=1024,
    )
