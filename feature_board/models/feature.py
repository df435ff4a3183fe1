# feature_board/models/feature.py
"""
Firestore 'features' 컬렉션의 문서 구조와 불변식을 정의하는 모듈.

FeatureRequest 하나가 좋아요 집합(Likes)과 댓글 목록(CommentThread)을 내장하며,
두 값 객체의 count는 항상 실제 멤버 수에서 계산됩니다.
count를 직접 대입하는 경로는 없고, 아래 메서드들만이 상태를 바꿀 수 있습니다.
"""
import logging
import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, List, Dict, Any, Iterable

from feature_board.core.exceptions import CommentNotFoundError, FieldValidationError, ForbiddenError
from feature_board.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

DEFAULT_STATUS = 'Open'

# 목록/검색 조회 시 Firestore에서 읽어올 필드. 댓글 본문(comments.data)은 포함하지 않습니다.
SUMMARY_FIELDS = [
    'feature_id', 'title', 'description', 'status', 'created_by',
    'created_at', 'likes', 'comments.count', 'is_deleted',
]


def _require_text(value: Optional[str], field_name: str, message: str) -> str:
    if value is None or not str(value).strip():
        raise FieldValidationError(field_name, message)
    return value


class Likes:
    """좋아요를 누른 사용자 집합. 중복 없이 누른 순서를 유지합니다."""

    def __init__(self, users: Optional[Iterable[str]] = None):
        self._users: List[str] = []
        for user_id in users or []:
            if user_id not in self._users:
                self._users.append(user_id)

    @property
    def users(self) -> List[str]:
        return list(self._users)

    @property
    def count(self) -> int:
        return len(self._users)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._users

    def __eq__(self, other):
        return isinstance(other, Likes) and self._users == other._users

    def __repr__(self):
        return f"Likes(count={self.count}, users={self._users!r})"

    def add(self, user_id: str) -> bool:
        """이미 좋아요 상태면 아무것도 하지 않고 False를 반환합니다."""
        if user_id in self._users:
            return False
        self._users.append(user_id)
        return True

    def remove(self, user_id: str) -> bool:
        if user_id not in self._users:
            return False
        self._users.remove(user_id)
        return True

    def toggle(self, user_id: str) -> bool:
        """좋아요 상태를 뒤집고, 토글 후 좋아요 상태인지 여부를 반환합니다."""
        if self.remove(user_id):
            return False
        self.add(user_id)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "users": self.users}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], feature_id: Optional[str] = None) -> "Likes":
        data = data or {}
        likes = cls(data.get('users') or [])
        stored_count = data.get('count')
        if stored_count is not None and stored_count != likes.count:
            logger.warning(
                f"좋아요 수 불일치 복구 (feature_id: {feature_id}, 저장값: {stored_count}, 실제: {likes.count})"
            )
        return likes


@dataclass
class Comment:
    """FeatureRequest 문서 내부에 저장되는 댓글. 별도 컬렉션이 없습니다."""
    comment_id: str
    comments_by: str
    comment: str
    created_at: datetime = field(default_factory=DateTimeUtils.now)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        return cls(
            comment_id=data['comment_id'],
            comments_by=data['comments_by'],
            comment=data.get('comment', ''),
            created_at=DateTimeUtils.from_firestore(data.get('created_at')),
        )


class CommentThread:
    """댓글 목록 값 객체. count는 항상 len(data)입니다."""

    def __init__(self, data: Optional[Iterable[Comment]] = None):
        self._data: List[Comment] = list(data or [])

    @property
    def data(self) -> List[Comment]:
        return list(self._data)

    @property
    def count(self) -> int:
        return len(self._data)

    def __eq__(self, other):
        return isinstance(other, CommentThread) and self._data == other._data

    def __repr__(self):
        return f"CommentThread(count={self.count})"

    def find(self, comment_id: str) -> Optional[Comment]:
        return next((c for c in self._data if c.comment_id == comment_id), None)

    def append(self, author_id: str, text: str) -> Comment:
        _require_text(text, 'comment', "댓글 내용을 입력해 주세요.")
        comment = Comment(comment_id=uuid.uuid4().hex, comments_by=author_id, comment=text)
        self._data.append(comment)
        return comment

    def remove(self, comment_id: str, requester_id: str) -> Comment:
        """
        작성자 본인만 댓글을 삭제할 수 있습니다.
        - 댓글이 없으면 CommentNotFoundError, 작성자가 아니면 ForbiddenError
        """
        comment = self.find(comment_id)
        if comment is None:
            raise CommentNotFoundError(comment_id)
        if comment.comments_by != requester_id:
            raise ForbiddenError()
        self._data = [c for c in self._data if c.comment_id != comment_id]
        return comment

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "data": [c.to_dict() for c in self._data]}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], feature_id: Optional[str] = None) -> "CommentThread":
        data = data or {}
        thread = cls(Comment.from_dict(c) for c in data.get('data') or [])
        stored_count = data.get('count')
        if stored_count is not None and stored_count != thread.count:
            logger.warning(
                f"댓글 수 불일치 복구 (feature_id: {feature_id}, 저장값: {stored_count}, 실제: {thread.count})"
            )
        return thread


@dataclass
class FeatureSummary:
    """목록/검색 응답용 읽기 모델. 댓글 본문 없이 댓글 수만 가집니다."""
    feature_id: str
    title: str
    description: str
    status: str
    created_by: str
    created_at: datetime
    likes: Likes
    total_comments: int = 0
    is_deleted: bool = False

    def matches(self, term: str) -> bool:
        """제목 또는 설명에 검색어가 대소문자 구분 없이 포함되어 있는지 확인합니다."""
        needle = term.casefold()
        return needle in (self.title or '').casefold() or needle in (self.description or '').casefold()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FeatureSummary":
        return cls(
            feature_id=data['feature_id'],
            title=data.get('title', ''),
            description=data.get('description', ''),
            status=data.get('status', DEFAULT_STATUS),
            created_by=data.get('created_by'),
            created_at=DateTimeUtils.from_firestore(data.get('created_at')),
            likes=Likes.from_dict(data.get('likes'), data['feature_id']),
            total_comments=(data.get('comments') or {}).get('count', 0),
            is_deleted=data.get('is_deleted', False),
        )


@dataclass
class FeatureRequest:
    """
    기능 요청 애그리거트 루트.
    - likes, comments는 이 문서에만 속하며 문서와 함께 원자적으로 저장됩니다.
    - created_by, comments_by, likes.users에는 사용자 ID만 저장합니다.
    """
    feature_id: str
    title: str
    created_by: str
    description: str = ""
    status: str = DEFAULT_STATUS
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    likes: Likes = field(default_factory=Likes)
    comments: CommentThread = field(default_factory=CommentThread)
    is_deleted: bool = False

    @classmethod
    def new(cls, title: str, description: Optional[str], created_by: str,
            status: str = DEFAULT_STATUS) -> "FeatureRequest":
        _require_text(title, 'title', "제목은 필수 항목입니다.")
        return cls(
            feature_id=str(uuid.uuid4()),
            title=title,
            description=description or "",
            created_by=created_by,
            status=status,
        )

    # --- 좋아요 ---
    def like(self, user_id: str) -> bool:
        return self.likes.add(user_id)

    def unlike(self, user_id: str) -> bool:
        return self.likes.remove(user_id)

    def toggle_like(self, user_id: str) -> bool:
        return self.likes.toggle(user_id)

    # --- 상태 ---
    def change_status(self, status: str) -> bool:
        # 전이 제한 없음. 같은 값이어도 덮어씁니다.
        _require_text(status, 'status', "상태 값은 필수 항목입니다.")
        self.status = status
        return True

    # --- 댓글 ---
    def add_comment(self, author_id: str, text: str) -> Comment:
        return self.comments.append(author_id, text)

    def delete_comment(self, comment_id: str, requester_id: str) -> Comment:
        return self.comments.remove(comment_id, requester_id)

    def summary(self) -> FeatureSummary:
        return FeatureSummary(
            feature_id=self.feature_id,
            title=self.title,
            description=self.description,
            status=self.status,
            created_by=self.created_by,
            created_at=self.created_at,
            likes=Likes(self.likes.users),
            total_comments=self.comments.count,
            is_deleted=self.is_deleted,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Firestore에 저장할 문서 형태로 변환합니다."""
        return DateTimeUtils.for_firestore({
            "feature_id": self.feature_id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "likes": self.likes.to_dict(),
            "comments": self.comments.to_dict(),
            "is_deleted": self.is_deleted,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FeatureRequest":
        feature_id = data['feature_id']
        return cls(
            feature_id=feature_id,
            title=data.get('title', ''),
            created_by=data.get('created_by'),
            description=data.get('description', ''),
            status=data.get('status', DEFAULT_STATUS),
            created_at=DateTimeUtils.from_firestore(data.get('created_at')),
            likes=Likes.from_dict(data.get('likes'), feature_id),
            comments=CommentThread.from_dict(data.get('comments'), feature_id),
            is_deleted=data.get('is_deleted', False),
        )
