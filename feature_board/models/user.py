# feature_board/models/user.py
from dataclasses import dataclass
from typing import Optional, Dict, Any

@dataclass
class Actor:
    """
    Firestore 'users' 컬렉션의 문서 중 기능 요청 응답에 필요한 부분.
    계정 생성/인증은 외부 서비스가 담당하며, 여기서는 읽기만 합니다.
    """
    user_id: str
    name: str
    email: str
    photo_url: Optional[str] = None
    is_deleted: bool = False # 탈퇴(soft delete)한 사용자

    @classmethod
    def from_dict(cls, user_id: str, data: Dict[str, Any]) -> "Actor":
        return cls(
            user_id=user_id,
            name=data.get('name', ''),
            email=data.get('email', ''),
            photo_url=data.get('photo_url'),
            is_deleted=data.get('is_deleted', False),
        )
