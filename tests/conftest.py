import pytest
from app.main import app
from app.auth import deps as auth_deps

TEST_USER_ID = "6f1c2a8e-3d4b-4c5a-9e7f-0a1b2c3d4e5f"


@pytest.fixture(autouse=True)
def override_auth():
    app.dependency_overrides[auth_deps.get_current_user_id] = lambda: TEST_USER_ID
    yield
    app.dependency_overrides.pop(auth_deps.get_current_user_id, None)
