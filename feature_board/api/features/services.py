# feature_board/api/features/services.py
import logging
from typing import Optional, Dict, Any, Iterable, List, Sequence, Tuple

from feature_board.core.config import DEFAULT_FEATURE_STATUSES
from feature_board.core.exceptions import DuplicateTitleError, FeatureNotFoundError, FieldValidationError
from feature_board.models.feature import FeatureRequest, FeatureSummary, Likes
from feature_board.models.user import Actor

logger = logging.getLogger(__name__)


class FeatureService:
    """
    기능 요청 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 생성, 목록/상세/검색 조회, 좋아요, 상태 변경, 댓글 추가/삭제를 포함합니다.
    - 저장소(store)와 사용자 조회(user_directory)는 feature_board/__init__.py에서 주입됩니다.
    - 모든 메서드는 응답 스키마로 바로 dump할 수 있는 dict를 반환합니다.
    """
    def __init__(self, store, user_directory, statuses: Sequence[str] = DEFAULT_FEATURE_STATUSES):
        self.store = store
        self.users = user_directory
        self.statuses = tuple(statuses)
        if not self.statuses:
            raise ValueError("기능 요청 상태 목록이 비어 있습니다.")

    @property
    def default_status(self) -> str:
        return self.statuses[0]

    # ------------------------------------------------------------------
    # 생성 / 조회
    # ------------------------------------------------------------------
    def create_request(self, actor_id: str, title: str, description: Optional[str]) -> Dict[str, Any]:
        """새로운 기능 요청을 생성합니다. 제목이 기존 제목에 포함되면 DuplicateTitleError."""
        feature = FeatureRequest.new(title, description, created_by=actor_id, status=self.default_status)

        existing = self.store.find_title_match(title)
        if existing:
            logger.info(f"중복 제목으로 생성 거부 (title: {title}, 기존 feature_id: {existing.feature_id})")
            raise DuplicateTitleError(title)

        self.store.insert(feature)
        logger.info(f"기능 요청 생성 (feature_id: {feature.feature_id}, user_id: {actor_id})")
        return self._project_detail(feature)

    def get_all_requests(self) -> List[Dict[str, Any]]:
        """
        삭제되지 않은 기능 요청을 최신순으로 반환합니다.
        작성자가 탈퇴(soft delete)한 기능 요청은 목록에서 제외됩니다.
        """
        summaries = self.store.list_summaries()
        actors = self.users.get_many(self._actor_ids_for_summaries(summaries))

        results = []
        for summary in summaries:
            creator = actors.get(summary.created_by)
            if creator is not None and creator.is_deleted:
                continue
            item = self._project_summary_base(summary, actors)
            item['total_comments'] = summary.total_comments
            results.append(item)
        return results

    def get_request_by_id(self, feature_id: str) -> Dict[str, Any]:
        # 삭제 플래그(is_deleted)는 확인하지 않습니다. ID로는 항상 조회할 수 있습니다.
        feature = self.store.get(feature_id)
        if feature is None:
            raise FeatureNotFoundError(feature_id)
        return self._project_detail(feature)

    def search(self, term: Optional[str]) -> List[Dict[str, Any]]:
        """제목 또는 설명에 검색어가 포함된 기능 요청을 최신순으로 반환합니다."""
        if not term or not term.strip():
            return []
        summaries = self.store.search(term.strip())
        actors = self.users.get_many(self._actor_ids_for_summaries(summaries))
        return [self._project_summary_base(summary, actors) for summary in summaries]

    # ------------------------------------------------------------------
    # 좋아요
    # ------------------------------------------------------------------
    def toggle_like(self, feature_id: str, actor_id: str) -> Tuple[bool, Dict[str, Any]]:
        """좋아요를 누르거나 취소합니다. 항상 저장하며, 토글 후 좋아요 상태를 함께 반환합니다."""
        outcome = {}

        def _toggle(feature: FeatureRequest) -> bool:
            outcome['liked'] = feature.toggle_like(actor_id)
            return True

        feature = self.store.mutate(feature_id, _toggle)
        logger.info(f"좋아요 토글 (feature_id: {feature_id}, user_id: {actor_id}, liked: {outcome['liked']})")
        return outcome['liked'], self._project_detail(feature)

    def like(self, feature_id: str, actor_id: str) -> Dict[str, Any]:
        """이미 좋아요 상태면 저장하지 않고 현재 상태를 반환합니다."""
        feature = self.store.mutate(feature_id, lambda f: f.like(actor_id))
        return self._project_detail(feature)

    def unlike(self, feature_id: str, actor_id: str) -> Dict[str, Any]:
        feature = self.store.mutate(feature_id, lambda f: f.unlike(actor_id))
        return self._project_detail(feature)

    # ------------------------------------------------------------------
    # 상태
    # ------------------------------------------------------------------
    def update_status(self, feature_id: str, status: str) -> Dict[str, Any]:
        if status not in self.statuses:
            raise FieldValidationError('status', f"허용되지 않는 상태 값입니다: {status}")
        feature = self.store.mutate(feature_id, lambda f: f.change_status(status))
        logger.info(f"기능 요청 상태 변경 (feature_id: {feature_id}, status: {status})")
        return self._project_detail(feature)

    # ------------------------------------------------------------------
    # 댓글
    # ------------------------------------------------------------------
    def add_comment(self, feature_id: str, actor_id: str, text: str) -> Dict[str, Any]:
        def _append(feature: FeatureRequest) -> bool:
            feature.add_comment(actor_id, text)
            return True

        feature = self.store.mutate(feature_id, _append)
        logger.info(f"댓글 추가 (feature_id: {feature_id}, user_id: {actor_id})")
        return self._project_detail(feature)

    def delete_comment(self, feature_id: str, comment_id: str, actor_id: str) -> Dict[str, Any]:
        """작성자 본인의 댓글만 삭제합니다."""
        def _remove(feature: FeatureRequest) -> bool:
            feature.delete_comment(comment_id, actor_id)
            return True

        feature = self.store.mutate(feature_id, _remove)
        logger.info(f"댓글 삭제 (feature_id: {feature_id}, comment_id: {comment_id}, user_id: {actor_id})")
        return self._project_detail(feature)

    # ------------------------------------------------------------------
    # 응답 데이터 구성
    # ------------------------------------------------------------------
    @staticmethod
    def _actor_ids_for_summaries(summaries: Iterable[FeatureSummary]) -> List[str]:
        ids = []
        for summary in summaries:
            ids.append(summary.created_by)
            ids.extend(summary.likes.users)
        return ids

    @staticmethod
    def _actor_ref(actor: Optional[Actor]) -> Optional[Dict[str, Any]]:
        if actor is None:
            return None
        return {
            "user_id": actor.user_id,
            "name": actor.name,
            "email": actor.email,
            "photo_url": actor.photo_url,
        }

    @staticmethod
    def _likes_ref(likes: Likes, actors: Dict[str, Actor]) -> Dict[str, Any]:
        # 조회되지 않는 사용자도 ID는 남겨 count == len(users)를 유지합니다.
        users = []
        for user_id in likes.users:
            actor = actors.get(user_id)
            users.append({"user_id": user_id, "email": actor.email if actor else None})
        return {"count": likes.count, "users": users}

    def _project_summary_base(self, summary: FeatureSummary, actors: Dict[str, Actor]) -> Dict[str, Any]:
        return {
            "feature_id": summary.feature_id,
            "title": summary.title,
            "description": summary.description,
            "status": summary.status,
            "created_by": self._actor_ref(actors.get(summary.created_by)),
            "created_at": summary.created_at,
            "likes": self._likes_ref(summary.likes, actors),
        }

    def _project_detail(self, feature: FeatureRequest) -> Dict[str, Any]:
        comments = feature.comments.data
        actors = self.users.get_many(
            [feature.created_by, *feature.likes.users, *(c.comments_by for c in comments)]
        )
        return {
            "feature_id": feature.feature_id,
            "title": feature.title,
            "description": feature.description,
            "status": feature.status,
            "created_by": self._actor_ref(actors.get(feature.created_by)),
            "created_at": feature.created_at,
            "likes": self._likes_ref(feature.likes, actors),
            "comments": {
                "count": feature.comments.count,
                "data": [
                    {
                        "comment_id": c.comment_id,
                        "comments_by": self._actor_ref(actors.get(c.comments_by)),
                        "comment": c.comment,
                        "created_at": c.created_at,
                    }
                    for c in comments
                ],
            },
        }
