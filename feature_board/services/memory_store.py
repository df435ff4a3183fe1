# feature_board/services/memory_store.py
"""
프로세스 내부 저장소 (개발/테스트용).

FirestoreFeatureStore, FirestoreUserDirectory와 같은 인터페이스를 제공합니다.
문서는 Firestore와 동일하게 dict 형태로 보관하므로 직렬화 경로도 함께 검증됩니다.
mutate()는 락 안에서 읽기-수정-쓰기를 수행해 동시 요청이 서로 끼어들지 않습니다.
"""
import copy
import logging
import threading
from typing import Dict, Any, Iterable, List, Optional

from feature_board.core.exceptions import FeatureNotFoundError, PersistenceError
from feature_board.models.feature import FeatureRequest, FeatureSummary
from feature_board.models.user import Actor
from feature_board.services.feature_store import Mutator, title_collides

logger = logging.getLogger(__name__)


class InMemoryFeatureStore:

    def __init__(self):
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()

    def get(self, feature_id: str) -> Optional[FeatureRequest]:
        with self._lock:
            data = self._docs.get(feature_id)
            return FeatureRequest.from_dict(copy.deepcopy(data)) if data else None

    def insert(self, feature: FeatureRequest) -> None:
        with self._lock:
            if feature.feature_id in self._docs:
                raise PersistenceError("insert", f"이미 존재하는 문서입니다: {feature.feature_id}")
            self._docs[feature.feature_id] = feature.to_dict()

    def find_title_match(self, title: str) -> Optional[FeatureSummary]:
        with self._lock:
            for data in self._docs.values():
                if title_collides(title, data.get('title')):
                    return FeatureSummary.from_dict(copy.deepcopy(data))
        return None

    def list_summaries(self) -> List[FeatureSummary]:
        with self._lock:
            # 삽입 역순으로 정렬한 뒤 created_at으로 안정 정렬 -> 같은 시각이면 나중에 만든 것이 먼저
            docs = [copy.deepcopy(d) for d in reversed(list(self._docs.values())) if not d.get('is_deleted')]
        docs.sort(key=lambda d: d['created_at'], reverse=True)
        return [FeatureSummary.from_dict(d) for d in docs]

    def search(self, term: str) -> List[FeatureSummary]:
        return [summary for summary in self.list_summaries() if summary.matches(term)]

    def mutate(self, feature_id: str, mutator: Mutator) -> FeatureRequest:
        with self._lock:
            data = self._docs.get(feature_id)
            if data is None:
                raise FeatureNotFoundError(feature_id)
            feature = FeatureRequest.from_dict(copy.deepcopy(data))
            if mutator(feature):
                self._docs[feature_id] = feature.to_dict()
            return feature


class InMemoryUserDirectory:

    def __init__(self, users: Optional[Iterable[Actor]] = None):
        self._users: Dict[str, Actor] = {}
        for actor in users or []:
            self.add_user(actor)

    def add_user(self, actor: Actor) -> Actor:
        self._users[actor.user_id] = copy.copy(actor)
        return actor

    def mark_deleted(self, user_id: str) -> None:
        actor = self._users.get(user_id)
        if actor is None:
            raise KeyError(user_id)
        actor.is_deleted = True
        logger.info(f"사용자 탈퇴 처리 (user_id: {user_id})")

    def get(self, user_id: str) -> Optional[Actor]:
        actor = self._users.get(user_id)
        return copy.copy(actor) if actor else None

    def get_many(self, user_ids: Iterable[str]) -> Dict[str, Actor]:
        return {uid: copy.copy(self._users[uid]) for uid in set(user_ids) if uid in self._users}
