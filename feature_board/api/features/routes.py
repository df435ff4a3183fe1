# feature_board/api/features/routes.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from feature_board.api.features.schemas import (
    FeatureCreateSchema, CommentCreateSchema, status_update_schema,
    FeatureDetailSchema, FeatureSummarySchema, FeatureSearchResultSchema,
)

# 도메인 예외(FeatureBoardError)는 feature_board/__init__.py의 전역 에러 핸들러에서 상태 코드로 변환됩니다.
features_bp = Blueprint('features_bp', __name__)


def _validation_error(err: ValidationError):
    return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400


@features_bp.route('/', methods=['POST'])
@jwt_required()
def create_request():
    """
    새로운 기능 요청을 생성합니다.
    - 제목이 기존 기능 요청의 제목에 포함되면 400 DUPLICATE_TITLE
    - 성공 시 201 Created
    """
    feature_service = current_app.services['features']
    user_id = get_jwt_identity()
    try:
        data = FeatureCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return _validation_error(err)
    feature = feature_service.create_request(user_id, data['title'], data['description'])
    return jsonify({
        "message": "기능 요청이 생성되었습니다.",
        "feature": FeatureDetailSchema().dump(feature)
    }), 201


@features_bp.route('/', methods=['GET'])
@jwt_required(optional=True)
def get_all_requests():
    """삭제되지 않은 기능 요청 목록을 최신순으로 조회합니다. (페이지네이션 없음)"""
    feature_service = current_app.services['features']
    features = feature_service.get_all_requests()
    return jsonify({
        "message": "기능 요청 목록을 조회했습니다.",
        "features": FeatureSummarySchema(many=True).dump(features)
    }), 200


@features_bp.route('/search', methods=['GET'])
@jwt_required(optional=True)
def search_requests():
    """제목 또는 설명으로 기능 요청을 검색합니다. 결과가 없으면 빈 목록을 반환합니다."""
    feature_service = current_app.services['features']
    term = request.args.get('q', '', type=str)
    features = feature_service.search(term)
    return jsonify({
        "message": "검색 결과를 조회했습니다.",
        "features": FeatureSearchResultSchema(many=True).dump(features)
    }), 200


@features_bp.route('/<string:feature_id>', methods=['GET'])
@jwt_required(optional=True)
def get_request(feature_id: str):
    feature_service = current_app.services['features']
    feature = feature_service.get_request_by_id(feature_id)
    return jsonify({
        "message": "기능 요청을 조회했습니다.",
        "feature": FeatureDetailSchema().dump(feature)
    }), 200


@features_bp.route('/<string:feature_id>', methods=['PATCH'])
@jwt_required()
def toggle_like(feature_id: str):
    """기능 요청의 좋아요를 누르거나 취소합니다."""
    feature_service = current_app.services['features']
    user_id = get_jwt_identity()
    liked, feature = feature_service.toggle_like(feature_id, user_id)
    return jsonify({
        "message": "좋아요 상태가 변경되었습니다.",
        "liked": liked,
        "feature": FeatureDetailSchema().dump(feature)
    }), 200


@features_bp.route('/<string:feature_id>/like', methods=['POST'])
@jwt_required()
def like(feature_id: str):
    """좋아요를 누릅니다. 이미 누른 상태면 변경 없이 현재 상태를 반환합니다."""
    feature_service = current_app.services['features']
    feature = feature_service.like(feature_id, get_jwt_identity())
    return jsonify({
        "message": "좋아요를 눌렀습니다.",
        "feature": FeatureDetailSchema().dump(feature)
    }), 200


@features_bp.route('/<string:feature_id>/like', methods=['DELETE'])
@jwt_required()
def unlike(feature_id: str):
    feature_service = current_app.services['features']
    feature = feature_service.unlike(feature_id, get_jwt_identity())
    return jsonify({
        "message": "좋아요를 취소했습니다.",
        "feature": FeatureDetailSchema().dump(feature)
    }), 200


@features_bp.route('/<string:feature_id>/status', methods=['PATCH'])
@jwt_required()
def update_status(feature_id: str):
    """기능 요청의 상태를 변경합니다. 상태 간 전이 제한은 없습니다."""
    feature_service = current_app.services['features']
    try:
        data = status_update_schema(feature_service.statuses).load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return _validation_error(err)
    feature = feature_service.update_status(feature_id, data['status'])
    return jsonify({
        "message": "상태가 변경되었습니다.",
        "feature": FeatureDetailSchema().dump(feature)
    }), 200


@features_bp.route('/<string:feature_id>/comments', methods=['PATCH'])
@jwt_required()
def add_comment(feature_id: str):
    feature_service = current_app.services['features']
    user_id = get_jwt_identity()
    try:
        data = CommentCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return _validation_error(err)
    feature = feature_service.add_comment(feature_id, user_id, data['comment'])
    return jsonify({
        "message": "댓글이 등록되었습니다.",
        "feature": FeatureDetailSchema().dump(feature)
    }), 200


@features_bp.route('/<string:feature_id>/comments/<string:comment_id>', methods=['DELETE'])
@jwt_required()
def delete_comment(feature_id: str, comment_id: str):
    """
    댓글을 삭제합니다. (작성자 본인만 가능)
    - 기능 요청이 없으면 404 FEATURE_NOT_FOUND, 댓글이 없으면 404 COMMENT_NOT_FOUND
    - 작성자가 아니면 403 FORBIDDEN
    """
    feature_service = current_app.services['features']
    user_id = get_jwt_identity()
    feature = feature_service.delete_comment(feature_id, comment_id, user_id)
    return jsonify({
        "message": "댓글이 삭제되었습니다.",
        "feature": FeatureDetailSchema().dump(feature)
    }), 200
