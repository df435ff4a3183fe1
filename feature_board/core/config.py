# feature_board/core/config.py

import os # 환경 변수를 읽기 위해 사용합니다.

DEFAULT_FEATURE_STATUSES = ('Open', 'InProgress', 'Done', 'Rejected')


def _statuses_from_env():
    # 쉼표로 구분된 목록. 첫 번째 값이 새 기능 요청의 기본 상태가 됩니다.
    raw = os.getenv('FEATURE_STATUSES')
    if not raw:
        return DEFAULT_FEATURE_STATUSES
    return tuple(s.strip() for s in raw.split(',') if s.strip())


class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # JWT 서명 검증용 키. 토큰 발급은 외부 인증 서비스가 담당합니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')

    # 'firestore' 또는 'memory'
    FEATURE_STORE = os.getenv('FEATURE_STORE', 'firestore')
    FEATURE_STATUSES = _statuses_from_env()
    # Firestore 트랜잭션 경합/중단 시 최대 시도 횟수
    FIRESTORE_TRANSACTION_ATTEMPTS = int(os.getenv('FIRESTORE_TRANSACTION_ATTEMPTS', 5))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

class DevelopmentConfig(Config):
    """개발 환경 설정. Config를 상속받아 공통 설정을 그대로 사용합니다."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')

class TestingConfig(Config):
    """테스트 환경 설정. Firestore 대신 프로세스 내부 저장소를 사용합니다."""
    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'feature-board-testing-secret-key-0123456789')
    FEATURE_STORE = os.getenv('TEST_FEATURE_STORE', 'memory')
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')

class ProductionConfig(Config):
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

# FLASK_ENV 값에 따라 create_app에서 적절한 설정 클래스를 선택합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
