# feature_board/services/feature_store.py
"""
Firestore 'features' 컬렉션 저장소.

문서 하나를 읽고-수정하고-쓰는 모든 작업은 Firestore 트랜잭션 안에서 실행됩니다.
Firestore 서버 트랜잭션은 읽은 문서에 잠금을 걸고, 경합이나 중단(Aborted)으로
커밋이 실패하면 트랜잭션 함수 전체를 max_attempts 횟수까지 다시 실행합니다.
따라서 동시에 들어온 좋아요/댓글 요청이 서로의 변경을 덮어쓰지 않습니다.
"""
import logging
import re
from typing import Callable, List, Optional

from firebase_admin import firestore
from google.api_core.exceptions import GoogleAPICallError

from feature_board.core.exceptions import FeatureNotFoundError, PersistenceError
from feature_board.models.feature import FeatureRequest, FeatureSummary, SUMMARY_FIELDS

logger = logging.getLogger(__name__)

Mutator = Callable[[FeatureRequest], bool]


def title_collides(new_title: str, existing_title: Optional[str]) -> bool:
    """새 제목이 기존 제목 안에 (대소문자 구분 없이) 포함되어 있으면 중복으로 봅니다."""
    if not existing_title:
        return False
    return re.search(re.escape(new_title), existing_title, re.IGNORECASE) is not None


class FirestoreFeatureStore:
    """기능 요청 문서의 조회/저장을 담당합니다."""

    def __init__(self, max_attempts: int = 5):
        self.db = firestore.client()
        self.features_ref = self.db.collection('features')
        self.max_attempts = max_attempts

    def get(self, feature_id: str) -> Optional[FeatureRequest]:
        try:
            doc = self.features_ref.document(feature_id).get()
        except GoogleAPICallError as e:
            logger.error(f"기능 요청 조회 실패 (feature_id: {feature_id}): {e}", exc_info=True)
            raise PersistenceError("get", str(e)) from e
        if not doc.exists:
            return None
        return FeatureRequest.from_dict(doc.to_dict())

    def insert(self, feature: FeatureRequest) -> None:
        try:
            # create()는 같은 ID의 문서가 이미 있으면 실패합니다.
            self.features_ref.document(feature.feature_id).create(feature.to_dict())
        except GoogleAPICallError as e:
            logger.error(f"기능 요청 저장 실패 (feature_id: {feature.feature_id}): {e}", exc_info=True)
            raise PersistenceError("insert", str(e)) from e

    def find_title_match(self, title: str) -> Optional[FeatureSummary]:
        """삭제 여부와 관계없이 모든 문서의 제목을 확인합니다."""
        try:
            for doc in self.features_ref.select(SUMMARY_FIELDS).stream():
                data = doc.to_dict()
                if title_collides(title, data.get('title')):
                    return FeatureSummary.from_dict(data)
        except GoogleAPICallError as e:
            logger.error(f"제목 중복 확인 실패 (title: {title}): {e}", exc_info=True)
            raise PersistenceError("find_title_match", str(e)) from e
        return None

    def list_summaries(self) -> List[FeatureSummary]:
        """삭제되지 않은 기능 요청을 최신순으로 반환합니다. 댓글 본문은 읽지 않습니다."""
        query = (
            self.features_ref.where('is_deleted', '==', False)
            .order_by('created_at', direction=firestore.Query.DESCENDING)
            .select(SUMMARY_FIELDS)
        )
        try:
            return [FeatureSummary.from_dict(doc.to_dict()) for doc in query.stream()]
        except GoogleAPICallError as e:
            logger.error(f"기능 요청 목록 조회 실패: {e}", exc_info=True)
            raise PersistenceError("list_summaries", str(e)) from e

    def search(self, term: str) -> List[FeatureSummary]:
        # Firestore는 부분 문자열 검색을 지원하지 않으므로 요약 필드만 읽어 서버에서 거릅니다.
        return [summary for summary in self.list_summaries() if summary.matches(term)]

    def mutate(self, feature_id: str, mutator: Mutator) -> FeatureRequest:
        """
        트랜잭션 안에서 문서를 읽고 mutator를 적용한 뒤, 변경이 있을 때만 씁니다.
        - 문서가 없으면 FeatureNotFoundError
        - mutator가 던진 도메인 예외는 쓰기 없이 그대로 전파됩니다.
        """
        doc_ref = self.features_ref.document(feature_id)
        transaction = self.db.transaction(max_attempts=self.max_attempts)

        @firestore.transactional
        def _mutate_in_transaction(transaction):
            snapshot = doc_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise FeatureNotFoundError(feature_id)
            feature = FeatureRequest.from_dict(snapshot.to_dict())
            if mutator(feature):
                transaction.set(doc_ref, feature.to_dict())
            return feature

        try:
            return _mutate_in_transaction(transaction)
        except GoogleAPICallError as e:
            logger.error(f"기능 요청 수정 트랜잭션 실패 (feature_id: {feature_id}): {e}", exc_info=True)
            raise PersistenceError("mutate", str(e)) from e
        except ValueError as e:
            # 재시도 횟수를 모두 소진하면 google.cloud.firestore가 ValueError를 던집니다.
            logger.error(f"트랜잭션 재시도 한도 초과 (feature_id: {feature_id}): {e}", exc_info=True)
            raise PersistenceError("mutate", str(e)) from e
