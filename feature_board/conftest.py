# feature_board/conftest.py
"""
테스트 공용 fixture

사용법: python -m pytest -v
testing 설정은 Firestore 대신 프로세스 내부 저장소(memory)를 사용합니다.
"""

import pytest
from flask_jwt_extended import create_access_token

from feature_board import create_app
from feature_board.api.features.services import FeatureService
from feature_board.models.user import Actor
from feature_board.services.memory_store import InMemoryFeatureStore, InMemoryUserDirectory

TEST_USERS = [
    Actor(user_id="u1", name="Alice", email="alice@example.com", photo_url="https://example.com/a.png"),
    Actor(user_id="u2", name="Bob", email="bob@example.com"),
    Actor(user_id="u3", name="Carol", email="carol@example.com"),
]


@pytest.fixture
def store():
    return InMemoryFeatureStore()


@pytest.fixture
def users():
    return InMemoryUserDirectory(TEST_USERS)


@pytest.fixture
def service(store, users):
    return FeatureService(store=store, user_directory=users)


@pytest.fixture
def app():
    app = create_app('testing')
    for actor in TEST_USERS:
        app.services['users'].add_user(actor)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """사용자 ID를 받아 Authorization 헤더를 만들어 주는 함수를 반환합니다."""
    def _headers(user_id: str):
        with app.app_context():
            token = create_access_token(identity=user_id)
        return {"Authorization": f"Bearer {token}"}
    return _headers
