# skigram/triggers/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from skigram.triggers.schemas import EventEnvelopeSchema

events_bp = Blueprint('events_bp', __name__)

@events_bp.route('', methods=['POST'])
def receive_event():
    """
    문서 변경 이벤트를 받아 트리거 핸들러로 전달합니다.
    - 봉투(envelope) 형식이 잘못된 경우에만 400을 반환합니다.
    - 핸들러의 실패는 부수 효과의 실패이므로 재전달을 유발하지 않도록 항상 200으로 응답합니다.
    """
    dispatcher = current_app.services['events']
    try:
        envelope = EventEnvelopeSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    try:
        handled = dispatcher.dispatch(**envelope)
    except ValidationError as err:
        logging.warning(
            f"문서 형식 오류로 이벤트를 무시합니다 ({envelope['collection']}/{envelope['document_id']}): {err.messages}"
        )
        return jsonify({"status": "ignored", "details": err.messages}), 200

    return jsonify({"status": "processed", "handlers": handled}), 200
