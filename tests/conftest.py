import os
import tempfile

# Must run before db.py is imported anywhere.
_TMP = tempfile.mkdtemp(prefix="assessment-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP, "test.db")
os.environ["ADMIN_TOKEN"] = "secret"
os.environ["ASSESSMENT_API_KEY"] = "client-key"

import pytest  # noqa: E402

import models  # noqa: E402,F401
from db import Base, engine  # noqa: E402
from main import app  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()
