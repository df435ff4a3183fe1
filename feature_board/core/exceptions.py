# feature_board/core/exceptions.py
"""
기능 요청(Feature Request) 도메인에서 사용하는 예외 클래스 모음.

모든 도메인 예외는 고정된 error_code와 사람이 읽을 수 있는 message를 가지며,
서비스 계층에서 그대로 전파되어 app/__init__의 전역 에러 핸들러에서
HTTP 상태 코드로 변환됩니다.
"""
from typing import Any, Dict, Optional


class FeatureBoardError(Exception):
    """애플리케이션 예외의 기반 클래스."""
    error_code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload = {"error_code": self.error_code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class DuplicateTitleError(FeatureBoardError):
    """같은 제목의 기능 요청이 이미 존재할 때 발생합니다."""
    error_code = "DUPLICATE_TITLE"
    status_code = 400

    def __init__(self, title: str):
        super().__init__("같은 제목의 기능 요청이 이미 존재합니다.", {"title": title})


class FeatureNotFoundError(FeatureBoardError):
    error_code = "FEATURE_NOT_FOUND"
    status_code = 404

    def __init__(self, feature_id: str):
        super().__init__("기능 요청을 찾을 수 없습니다.", {"feature_id": feature_id})


class CommentNotFoundError(FeatureBoardError):
    error_code = "COMMENT_NOT_FOUND"
    status_code = 404

    def __init__(self, comment_id: str):
        super().__init__("댓글을 찾을 수 없습니다.", {"comment_id": comment_id})


class ForbiddenError(FeatureBoardError):
    """작성자가 아닌 사용자가 댓글을 삭제하려 할 때 발생합니다."""
    error_code = "FORBIDDEN"
    status_code = 403

    def __init__(self, message: str = "본인이 작성한 댓글만 삭제할 수 있습니다."):
        super().__init__(message)


class FieldValidationError(FeatureBoardError):
    """필수 필드가 비어 있거나 허용되지 않는 값일 때 발생합니다."""
    error_code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, field_name: str, message: str):
        super().__init__(message, {"field": field_name})


class PersistenceError(FeatureBoardError):
    """저장소(Firestore) 호출 실패를 감싸는 예외. 코어에서는 재시도하지 않습니다."""
    error_code = "PERSISTENCE_FAILURE"
    status_code = 500

    def __init__(self, operation: str, message: str):
        super().__init__(message, {"operation": operation})
