# feature_board/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from flask import Flask, jsonify
from marshmallow import ValidationError
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException

# - 설정
from feature_board.core.config import config_by_name
from feature_board.core.exceptions import FeatureBoardError

# - API 블루프린트
from feature_board.api.features.routes import features_bp

# - 서비스 모듈
from feature_board.api.features.services import FeatureService


def _init_persistence(app):
    """설정(FEATURE_STORE)에 따라 기능 요청 저장소와 사용자 조회 서비스를 생성합니다."""
    store_kind = app.config['FEATURE_STORE']

    if store_kind == 'memory':
        from feature_board.services.memory_store import InMemoryFeatureStore, InMemoryUserDirectory
        return InMemoryFeatureStore(), InMemoryUserDirectory()

    if store_kind == 'firestore':
        import firebase_admin
        from firebase_admin import credentials
        from feature_board.services.feature_store import FirestoreFeatureStore
        from feature_board.services.user_directory import FirestoreUserDirectory

        if not firebase_admin._apps:
            cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
            if not cred_path or not os.path.exists(cred_path):
                raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
            firebase_admin.initialize_app(credentials.Certificate(cred_path))

        store = FirestoreFeatureStore(max_attempts=app.config['FIRESTORE_TRANSACTION_ATTEMPTS'])
        return store, FirestoreUserDirectory()

    raise ValueError(f"알 수 없는 FEATURE_STORE 설정입니다: {store_kind}")


def create_app(config_name=None):
    """
    Flask 애플리케이션 팩토리 함수.
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 로깅
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(
            level=app.config.get('LOG_LEVEL', 'INFO'),
            format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        )

    # =====================================================================================
    # 5. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    # 토큰 발급은 외부 인증 서비스가 담당하고, 여기서는 검증과 사용자 ID 추출만 합니다.
    JWTManager(app)

    # =====================================================================================
    # 6. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}
    try:
        store, user_directory = _init_persistence(app)
        logging.info(f"Feature store initialized ({app.config['FEATURE_STORE']})")
    except Exception as e:
        logging.error(f"Failed to initialize feature store: {e}")
        raise

    app.services['feature_store'] = store
    app.services['users'] = user_directory
    app.services['features'] = FeatureService(
        store=store,
        user_directory=user_directory,
        statuses=app.config['FEATURE_STATUSES']
    )

    # =====================================================================================
    # 7. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(features_bp, url_prefix='/api/v1/features')

    @app.route('/health')
    def health():
        return jsonify({"status": "Feature Board API is running"}), 200

    # =====================================================================================
    # 8. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(FeatureBoardError)
    def handle_feature_board_error(err):
        if err.status_code >= 500:
            logging.error(f"Feature board error: {err.error_code} {err.message}", exc_info=True)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 라우팅 404/405 등 HTTP 예외는 그대로 돌려줍니다.
        if isinstance(err, HTTPException):
            return err
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
