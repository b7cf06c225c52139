# skigram/triggers/dispatcher.py
import logging
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Any, Type

from marshmallow import Schema

from skigram.models.event import DocumentChange
from skigram.schemas.comment_schema import CommentDocumentSchema
from skigram.schemas.follow_schema import FollowDocumentSchema
from skigram.schemas.like_schema import LikeDocumentSchema
from skigram.schemas.post_schema import PostDocumentSchema

logger = logging.getLogger(__name__)

Handler = Callable[[DocumentChange], Any]

# 컬렉션별 문서 스키마와 문서 ID가 담기는 필드
DOCUMENT_SCHEMAS: Dict[str, Type[Schema]] = {
    'posts': PostDocumentSchema,
    'comments': CommentDocumentSchema,
    'follows': FollowDocumentSchema,
    'likes': LikeDocumentSchema,
}
ID_FIELDS = {
    'posts': 'post_id',
    'comments': 'comment_id',
    'follows': 'follow_id',
    'likes': 'like_id',
}

class EventDispatcher:
    """
    문서 변경(생성/수정/삭제) 이벤트를 컬렉션별로 등록된 핸들러에 전달합니다.

    - 전달은 최소 한 번, 문서 간 순서 보장 없음을 전제로 합니다.
    - before/after 문서는 스키마로 검증해 데이터클래스로 변환하며, 필수 필드가 빠진 문서는
      ValidationError로 거부되어 어떤 핸들러도 실행되지 않습니다.
    - 한 핸들러의 실패가 다른 핸들러 실행을 막지 않습니다.
    """
    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    def register(self, collection: str, handler: Handler):
        if collection not in DOCUMENT_SCHEMAS:
            raise ValueError(f"트리거를 지원하지 않는 컬렉션입니다: {collection}")
        self._handlers[collection].append(handler)

    def parse(self, collection: str, document_id: str, before: Optional[Dict[str, Any]],
              after: Optional[Dict[str, Any]], event_id: Optional[str] = None) -> DocumentChange:
        if before is None and after is None:
            raise ValueError(f"before/after가 모두 비어 있는 이벤트입니다: {collection}/{document_id}")
        schema = DOCUMENT_SCHEMAS[collection]()
        id_field = ID_FIELDS[collection]

        def _load(data):
            if data is None:
                return None
            data = dict(data)
            data.setdefault(id_field, document_id)
            return schema.load(data)

        return DocumentChange(
            collection=collection,
            document_id=document_id,
            before=_load(before),
            after=_load(after),
            event_id=event_id
        )

    def dispatch(self, collection: str, document_id: str, before: Optional[Dict[str, Any]] = None,
                 after: Optional[Dict[str, Any]] = None, event_id: Optional[str] = None) -> int:
        """
        이벤트 하나를 등록된 핸들러들에 순서대로 전달하고 실행한 핸들러 수를 반환합니다.

        :raises marshmallow.ValidationError: 문서 형식이 잘못된 경우
        :raises ValueError: 지원하지 않는 컬렉션이거나 before/after가 모두 없는 경우
        """
        if collection not in DOCUMENT_SCHEMAS:
            raise ValueError(f"트리거를 지원하지 않는 컬렉션입니다: {collection}")

        handlers = self._handlers.get(collection, [])
        if not handlers:
            logger.info(f"등록된 핸들러가 없는 이벤트입니다: {collection}/{document_id}")
            return 0

        change = self.parse(collection, document_id, before, after, event_id)
        logger.info(f"트리거 이벤트 수신: {collection}/{document_id} ({change.transition.value})")

        for handler in handlers:
            try:
                handler(change)
            except Exception as e:
                handler_name = getattr(handler, '__qualname__', repr(handler))
                logger.error(f"트리거 핸들러 실행 중 오류 발생 ({handler_name}, {collection}/{document_id}): {e}", exc_info=True)
        return len(handlers)

def register_default_handlers(dispatcher: EventDispatcher, counter_service, notification_service):
    """컬렉션별 기본 트리거 핸들러를 등록합니다."""
    dispatcher.register('comments', counter_service.handle_comment_change)
    dispatcher.register('comments', notification_service.handle_comment_change)
    dispatcher.register('likes', counter_service.handle_like_change)
    dispatcher.register('likes', notification_service.handle_like_change)
    # 팔로우 알림은 카운터와 같은 배치로 저장되므로 counter_service 안에서 처리됩니다.
    dispatcher.register('follows', counter_service.handle_follow_change)
    dispatcher.register('posts', counter_service.handle_post_change)
