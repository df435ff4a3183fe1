# feature_board/api/features/schemas.py
from typing import Sequence

from marshmallow import Schema, fields, validate

# --- 재사용을 위한 중첩 스키마 ---
class ActorSchema(Schema):
    """기능 요청 작성자/댓글 작성자 정보 스키마."""
    user_id = fields.Str(required=True)
    name = fields.Str(required=True)
    email = fields.Email(required=True)
    photo_url = fields.Str(allow_none=True)

class LikerSchema(Schema):
    """좋아요를 누른 사용자. 조회되지 않는 사용자는 email이 None입니다."""
    user_id = fields.Str(required=True)
    email = fields.Str(allow_none=True)

class LikesSchema(Schema):
    count = fields.Int(required=True)
    users = fields.List(fields.Nested(LikerSchema), required=True)

class CommentSchema(Schema):
    comment_id = fields.Str(required=True)
    comments_by = fields.Nested(ActorSchema, allow_none=True)
    comment = fields.Str(required=True)
    created_at = fields.DateTime(required=True)

class CommentsSchema(Schema):
    count = fields.Int(required=True)
    data = fields.List(fields.Nested(CommentSchema), required=True)

# --- API 요청 스키마 ---

class FeatureCreateSchema(Schema):
    """POST /api/v1/features 요청 본문의 유효성을 검사합니다."""
    title = fields.Str(required=True, validate=validate.Length(min=1, max=200, error="제목은 1~200자 사이여야 합니다."))
    description = fields.Str(load_default="", validate=validate.Length(max=5000))

class CommentCreateSchema(Schema):
    """PATCH /api/v1/features/{feature_id}/comments 요청 본문."""
    comment = fields.Str(required=True, validate=validate.Length(min=1, max=1000, error="댓글은 1~1000자 사이여야 합니다."))

def status_update_schema(statuses: Sequence[str]) -> Schema:
    """
    PATCH /api/v1/features/{feature_id}/status 요청 본문.
    허용 상태 목록이 배포 환경 설정(FEATURE_STATUSES)에 따라 달라지므로 요청 시점에 만듭니다.
    """
    schema_cls = Schema.from_dict(
        {"status": fields.Str(required=True, validate=validate.OneOf(list(statuses)))},
        name="StatusUpdateSchema",
    )
    return schema_cls()

# --- API 응답 스키마 ---

class FeatureSearchResultSchema(Schema):
    """검색 결과. 좋아요 정보는 포함하지만 댓글은 포함하지 않습니다."""
    feature_id = fields.Str(dump_only=True)
    title = fields.Str(required=True)
    description = fields.Str(required=True)
    status = fields.Str(required=True)
    created_by = fields.Nested(ActorSchema, allow_none=True)
    created_at = fields.DateTime(required=True)
    likes = fields.Nested(LikesSchema, required=True)

class FeatureSummarySchema(FeatureSearchResultSchema):
    """목록 응답. 댓글 본문 대신 댓글 수(total_comments)만 포함합니다."""
    total_comments = fields.Int(required=True)

class FeatureDetailSchema(FeatureSearchResultSchema):
    """상세 응답. 전체 댓글 목록을 포함합니다."""
    comments = fields.Nested(CommentsSchema, required=True)
