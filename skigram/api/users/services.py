# skigram/api/users/services.py
import logging
from typing import Optional, Dict, Any

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from skigram.models.follow import follow_document_id
from skigram.models.user import strip_private_fields
from skigram.services.pagination import Page, paginate, hydrate_users

class UserService:
    """
    사용자 프로필 조회와 팔로우 관계를 담당하는 서비스 클래스.
    follower_count, following_count는 follows 트리거만 변경합니다.
    """
    def __init__(self, db):
        self.db = db
        self.users_ref = self.db.collection('users')
        self.follows_ref = self.db.collection('follows')

    def get_user_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        """사용자 공개 프로필을 조회합니다. 이메일, FCM 토큰은 제거됩니다."""
        doc = self.users_ref.document(user_id).get()
        if not doc.exists:
            return None
        profile = strip_private_fields(doc.to_dict())
        profile['user_id'] = doc.id
        return profile

    def get_followers(self, user_id: str, limit: int, cursor: Optional[str]) -> Page:
        """user_id를 팔로우하는 사용자 목록을 조회합니다."""
        page = paginate(self.follows_ref, [FieldFilter('following_id', '==', user_id)], limit, cursor)
        hydrate_users(self.users_ref, page.items, id_field='follower_id', target_field='user')
        return page

    def get_following(self, user_id: str, limit: int, cursor: Optional[str]) -> Page:
        """user_id가 팔로우하는 사용자 목록을 조회합니다."""
        page = paginate(self.follows_ref, [FieldFilter('follower_id', '==', user_id)], limit, cursor)
        hydrate_users(self.users_ref, page.items, id_field='following_id', target_field='user')
        return page

    def follow_user(self, follower_id: str, following_id: str) -> Dict[str, Any]:
        """
        팔로우 관계를 생성합니다. 카운터와 알림은 follows 트리거가 처리합니다.

        :raises ValueError: 자기 자신을 팔로우하는 경우
        :raises LookupError: 대상 사용자가 없는 경우
        :raises google.api_core.exceptions.AlreadyExists: 이미 팔로우 중인 경우
        """
        if follower_id == following_id:
            raise ValueError("자기 자신은 팔로우할 수 없습니다.")
        if not self.users_ref.document(following_id).get().exists:
            raise LookupError("팔로우할 사용자를 찾을 수 없습니다.")

        follow_id = follow_document_id(follower_id, following_id)
        # (follower, following) 쌍마다 문서 ID가 고정되므로 create()가 중복 팔로우를 막습니다.
        self.follows_ref.document(follow_id).create({
            'follow_id': follow_id,
            'follower_id': follower_id,
            'following_id': following_id,
            'created_at': firestore.SERVER_TIMESTAMP,
        })
        logging.info(f"팔로우 생성 완료: {follower_id} -> {following_id}")
        return {'follow_id': follow_id, 'follower_id': follower_id, 'following_id': following_id}

    def unfollow_user(self, follower_id: str, following_id: str) -> None:
        follow_ref = self.follows_ref.document(follow_document_id(follower_id, following_id))
        if not follow_ref.get().exists:
            raise LookupError("팔로우 중인 사용자가 아닙니다.")
        follow_ref.delete()
        logging.info(f"팔로우 취소 완료: {follower_id} -> {following_id}")
