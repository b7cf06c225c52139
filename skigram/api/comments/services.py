# skigram/api/comments/services.py

import logging
import uuid
from typing import Optional, Dict, Any

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from skigram.services.pagination import Page, paginate, hydrate_users

class CommentService:
    """
    댓글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - comment_count 증감과 댓글 알림은 comments 트리거가 처리하므로 여기서는 문서만 다룹니다.
    """
    def __init__(self, db):
        """Firestore 클라이언트를 주입받아 컬렉션 참조를 설정합니다."""
        self.db = db
        self.comments_ref = self.db.collection('comments')
        self.posts_ref = self.db.collection('posts')
        self.users_ref = self.db.collection('users')

    def create_comment(self, post_id: str, author_id: str, text: str) -> Dict[str, Any]:
        """새로운 댓글을 생성합니다."""
        if not self.posts_ref.document(post_id).get().exists:
            raise ValueError("댓글을 작성할 게시물이 존재하지 않습니다.")

        comment_id = str(uuid.uuid4())
        comment_ref = self.comments_ref.document(comment_id)
        comment_ref.set({
            'comment_id': comment_id,
            'post_id': post_id,
            'author_id': author_id,
            'text': text,
            'created_at': firestore.SERVER_TIMESTAMP,
        })
        logging.info(f"댓글 생성 완료 (comment_id: {comment_id}, post_id: {post_id})")
        return comment_ref.get().to_dict()

    def get_comments_for_post(self, post_id: str, limit: int, cursor: Optional[str]) -> Page:
        """특정 게시글의 댓글 목록을 최신순 페이지네이션으로 조회합니다."""
        page = paginate(self.comments_ref, [FieldFilter('post_id', '==', post_id)], limit, cursor)
        hydrate_users(self.users_ref, page.items, id_field='author_id', target_field='user')
        return page

    def delete_comment(self, post_id: str, comment_id: str, user_id: str) -> None:
        """
        댓글을 삭제합니다. 댓글 작성자 또는 게시물 작성자만 삭제할 수 있습니다.
        """
        comment_ref = self.comments_ref.document(comment_id)
        comment_doc = comment_ref.get()
        if not comment_doc.exists:
            raise ValueError("삭제할 댓글이 없습니다.")

        comment_data = comment_doc.to_dict()
        if comment_data.get('post_id') != post_id:
            raise ValueError("해당 게시물의 댓글이 아닙니다.")

        if comment_data.get('author_id') != user_id:
            post_doc = self.posts_ref.document(post_id).get()
            if not post_doc.exists or post_doc.to_dict().get('author_id') != user_id:
                raise PermissionError("댓글을 삭제할 권한이 없습니다.")

        comment_ref.delete()
        logging.info(f"댓글 삭제 완료 (comment_id: {comment_id}, by: {user_id})")
