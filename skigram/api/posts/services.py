# skigram/api/posts/services.py
import logging
import uuid
from typing import Optional, Dict, Any

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from skigram.models.like import like_document_id
from skigram.services.cascade_service import CascadeDeletionService, CascadeResult
from skigram.services.pagination import Page, paginate, hydrate_users, resolve_feed_author_ids

class PostService:
    """
    게시글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    like_count, comment_count 같은 파생 카운터는 여기서 직접 바꾸지 않고 트리거에 맡깁니다.
    """
    def __init__(self, db, cascade_service: CascadeDeletionService):
        self.db = db
        self.cascade_service = cascade_service
        self.posts_ref = self.db.collection('posts')
        self.users_ref = self.db.collection('users')
        self.follows_ref = self.db.collection('follows')
        self.likes_ref = self.db.collection('likes')

    def create_post(self, user_id: str, post_data: Dict[str, Any]) -> Dict[str, Any]:
        """새로운 게시글을 생성하고 Firestore에 저장합니다."""
        if not self.users_ref.document(user_id).get().exists:
            raise ValueError("사용자를 찾을 수 없습니다.")

        post_id = str(uuid.uuid4())
        post_ref = self.posts_ref.document(post_id)
        post_ref.set({
            'post_id': post_id,
            'author_id': user_id,
            'image_urls': post_data['image_urls'],
            'caption': post_data.get('caption', ''),
            'location': post_data.get('location'),
            'tags': post_data.get('tags', []),
            'like_count': 0,
            'comment_count': 0,
            'created_at': firestore.SERVER_TIMESTAMP,
            'updated_at': firestore.SERVER_TIMESTAMP,
        })
        logging.info(f"게시글 생성 완료 (post_id: {post_id}, author_id: {user_id})")
        # 서버 타임스탬프가 채워진 값을 돌려주기 위해 다시 읽습니다.
        return post_ref.get().to_dict()

    def get_post_by_id(self, post_id: str) -> Optional[Dict[str, Any]]:
        doc = self.posts_ref.document(post_id).get()
        if not doc.exists:
            return None
        post = doc.to_dict()
        hydrate_users(self.users_ref, [post], id_field='author_id', target_field='author')
        return post

    def get_feed(self, user_id: Optional[str], limit: int, cursor: Optional[str]) -> Page:
        """
        게시글 피드를 최신순으로 조회합니다.
        user_id가 주어지면 본인과 팔로잉 중인 사용자의 게시물만 조회합니다.
        팔로잉이 29명을 넘으면 최근에 팔로우한 29명만 포함하고 page.partial을 True로 표시합니다.
        """
        filters = []
        partial = False
        if user_id:
            author_ids, partial = resolve_feed_author_ids(self.follows_ref, user_id)
            filters.append(FieldFilter('author_id', 'in', author_ids))

        page = paginate(self.posts_ref, filters, limit, cursor)
        page.partial = partial
        hydrate_users(self.users_ref, page.items, id_field='author_id', target_field='author')
        return page

    def delete_post(self, post_id: str, user_id: str) -> CascadeResult:
        """
        게시글과 관련 이미지, 댓글, 좋아요를 삭제합니다. (작성자 본인만 가능)

        :raises ValueError: 게시물이 없는 경우
        :raises PermissionError: 작성자가 아닌 경우
        """
        doc = self.posts_ref.document(post_id).get()
        if not doc.exists:
            raise ValueError("게시물을 찾을 수 없습니다.")
        post_data = doc.to_dict()
        if post_data.get('author_id') != user_id:
            raise PermissionError("게시물을 삭제할 권한이 없습니다.")

        return self.cascade_service.delete_post(post_id, post_data)

    def like_post(self, user_id: str, post_id: str) -> Dict[str, Any]:
        """
        게시글에 좋아요를 누릅니다. like_count 증가와 알림은 likes 트리거가 처리합니다.

        :raises ValueError: 게시물이 없는 경우
        :raises google.api_core.exceptions.AlreadyExists: 이미 좋아요를 누른 경우
        """
        if not self.posts_ref.document(post_id).get().exists:
            raise ValueError("게시물을 찾을 수 없습니다.")

        like_id = like_document_id(user_id, post_id)
        like_data = {
            'like_id': like_id,
            'user_id': user_id,
            'post_id': post_id,
            'created_at': firestore.SERVER_TIMESTAMP,
        }
        # create()는 같은 ID의 문서가 있으면 실패하므로 (user, post)당 좋아요는 하나뿐입니다.
        self.likes_ref.document(like_id).create(like_data)
        return {'like_id': like_id, 'user_id': user_id, 'post_id': post_id}

    def unlike_post(self, user_id: str, post_id: str) -> None:
        """좋아요를 취소합니다. like_count 감소는 likes 트리거가 처리합니다."""
        like_ref = self.likes_ref.document(like_document_id(user_id, post_id))
        if not like_ref.get().exists:
            raise ValueError("좋아요 기록이 없습니다.")
        like_ref.delete()
