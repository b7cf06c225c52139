# skigram/services/pagination.py
"""
목록 API(피드, 댓글, 팔로워, 팔로잉)가 공유하는 커서 페이지네이션 및 사용자 정보 병합(hydration) 모듈

- 정렬 키(기본 created_at) 내림차순으로 page_size개를 조회합니다.
- 커서는 직전 페이지 마지막 문서의 ID이며, 해당 문서 바로 다음부터 이어서 조회합니다.
  커서 문서가 삭제되었다면 커서를 무시하고 처음부터 조회합니다. (오류 아님)
- has_more는 (페이지 길이 == page_size)로 계산하는 근사값입니다.
  페이지가 가득 차면 다음 페이지가 비어 있더라도 True이므로 "한 번 더 시도해 볼 것"으로 해석해야 합니다.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Sequence, Tuple

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.field_path import FieldPath

from skigram.models.user import public_user_fields
from skigram.services.firestore_service import chunked, IN_QUERY_LIMIT

logger = logging.getLogger(__name__)

@dataclass
class Page:
    items: List[Dict[str, Any]] = field(default_factory=list)
    next_cursor: Optional[str] = None
    has_more: bool = False
    # 팔로잉 피드에서 'in' 필터 한도 때문에 일부 작성자만 조회한 경우 True
    partial: bool = False

def paginate(collection_ref, filters: Sequence[FieldFilter], page_size: int,
             cursor_id: Optional[str] = None, order_by: str = 'created_at') -> Page:
    """
    컬렉션에 필터를 적용해 order_by 내림차순으로 한 페이지를 조회합니다.

    :param collection_ref: 조회할 컬렉션 참조
    :param filters: 적용할 FieldFilter 목록 (예: post_id == ...)
    :param page_size: 페이지 크기
    :param cursor_id: 직전 페이지 마지막 문서 ID
    :param order_by: 정렬 기준 필드
    """
    query = collection_ref
    for field_filter in filters:
        query = query.where(filter=field_filter)
    query = query.order_by(order_by, direction=firestore.Query.DESCENDING)

    if cursor_id:
        cursor_doc = collection_ref.document(cursor_id).get()
        if cursor_doc.exists:
            query = query.start_after(cursor_doc)
        else:
            logger.info(f"커서 문서가 없어 처음부터 조회합니다 (cursor: {cursor_id})")

    items = []
    last_doc_id = None
    for doc in query.limit(page_size).stream():
        items.append(doc.to_dict())
        last_doc_id = doc.id

    return Page(items=items, next_cursor=last_doc_id, has_more=len(items) == page_size)

def hydrate_users(users_ref, items: List[Dict[str, Any]], id_field: str, target_field: str = 'user') -> List[Dict[str, Any]]:
    """
    items가 참조하는 사용자들을 'in' 조회로 한 번에 가져와 공개 정보만 target_field에 병합합니다.
    이메일, FCM 토큰 등 비공개 필드는 호출자와 관계없이 항상 제외됩니다.
    찾을 수 없는 사용자는 None으로 채웁니다.
    """
    user_ids = list(dict.fromkeys(item.get(id_field) for item in items if item.get(id_field)))

    users: Dict[str, Dict[str, Any]] = {}
    for chunk in chunked(user_ids, IN_QUERY_LIMIT):
        refs = [users_ref.document(user_id) for user_id in chunk]
        query = users_ref.where(filter=FieldFilter(FieldPath.document_id(), 'in', refs))
        for doc in query.stream():
            users[doc.id] = public_user_fields(doc.id, doc.to_dict())

    for item in items:
        item[target_field] = users.get(item.get(id_field))
    return items

def resolve_feed_author_ids(follows_ref, user_id: str) -> Tuple[List[str], bool]:
    """
    피드에 노출할 작성자 ID 목록(팔로잉 + 본인)과, 목록이 잘렸는지 여부를 반환합니다.
    팔로잉 목록은 페이지네이션 없이 전부 조회합니다.
    'in' 필터는 값 30개까지만 허용되므로, 그보다 많으면 최근에 팔로우한 순으로 잘라냅니다.
    """
    following_docs = (
        follows_ref
        .where(filter=FieldFilter('follower_id', '==', user_id))
        .order_by('created_at', direction=firestore.Query.DESCENDING)
        .stream()
    )
    following_ids = [doc.to_dict().get('following_id') for doc in following_docs]
    following_ids = [fid for fid in dict.fromkeys(following_ids) if fid and fid != user_id]

    if len(following_ids) > IN_QUERY_LIMIT - 1:
        logger.warning(
            f"팔로잉 수({len(following_ids)})가 피드 조회 한도를 넘어 최근 {IN_QUERY_LIMIT - 1}명만 사용합니다 (user_id: {user_id})"
        )
        return following_ids[:IN_QUERY_LIMIT - 1] + [user_id], True

    return following_ids + [user_id], False
