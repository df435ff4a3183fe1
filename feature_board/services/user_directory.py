# feature_board/services/user_directory.py
import logging
from typing import Dict, Iterable, Optional

from firebase_admin import firestore
from google.api_core.exceptions import GoogleAPICallError

from feature_board.core.exceptions import PersistenceError
from feature_board.models.user import Actor

logger = logging.getLogger(__name__)


class FirestoreUserDirectory:
    """
    'users' 컬렉션에서 작성자/좋아요/댓글 작성자 정보를 조회합니다.
    사용자 문서의 생성과 수정은 인증 서비스의 책임입니다.
    """
    def __init__(self):
        self.db = firestore.client()
        self.users_ref = self.db.collection('users')

    def get(self, user_id: str) -> Optional[Actor]:
        try:
            doc = self.users_ref.document(user_id).get()
        except GoogleAPICallError as e:
            logger.error(f"사용자 조회 실패 (user_id: {user_id}): {e}", exc_info=True)
            raise PersistenceError("get_user", str(e)) from e
        if not doc.exists:
            return None
        return Actor.from_dict(doc.id, doc.to_dict())

    def get_many(self, user_ids: Iterable[str]) -> Dict[str, Actor]:
        """여러 사용자를 한 번의 요청(get_all)으로 조회합니다. 없는 사용자는 결과에서 빠집니다."""
        unique_ids = [uid for uid in dict.fromkeys(user_ids) if uid]
        if not unique_ids:
            return {}
        refs = [self.users_ref.document(uid) for uid in unique_ids]
        try:
            return {
                doc.id: Actor.from_dict(doc.id, doc.to_dict())
                for doc in self.db.get_all(refs)
                if doc.exists
            }
        except GoogleAPICallError as e:
            logger.error(f"사용자 일괄 조회 실패 ({len(unique_ids)}명): {e}", exc_info=True)
            raise PersistenceError("get_users", str(e)) from e
