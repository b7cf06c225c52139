# skigram/services/notification_service.py
import logging
import uuid
from typing import Optional, Tuple, Dict, Any

from firebase_admin import firestore
from google.api_core.exceptions import AlreadyExists
from marshmallow import ValidationError

from skigram.models.event import DocumentChange, Transition
from skigram.models.notification import Notification, NotificationType
from skigram.models.user import User
from skigram.schemas.user_schema import UserDocumentSchema
from skigram.services.event_ledger import EventLedger
from skigram.services.push_service import PushService
from skigram.utils.text_utils import truncate_preview

class NotificationService:
    """
    좋아요/댓글/팔로우 생성 시 알림 문서를 저장하고 푸시를 발송하는 팬아웃 서비스.

    - 자기 자신에게 보내는 알림은 생성하지 않습니다.
    - 알림 문서가 영구 기록이며, 푸시는 최선 노력(best-effort)으로만 발송합니다.
    - 팬아웃은 원본 쓰기의 부수 효과이므로 어떤 오류도 호출자에게 전파하지 않습니다.
    """
    def __init__(self, db, ledger: EventLedger, push_service: PushService):
        self.db = db
        self.ledger = ledger
        self.push_service = push_service
        self.notifications_ref = self.db.collection('notifications')
        self.users_ref = self.db.collection('users')
        self.posts_ref = self.db.collection('posts')

    # --- 트리거 핸들러 ---
    def handle_like_change(self, change: DocumentChange) -> Optional[str]:
        """likes 문서 생성 시 게시물 작성자에게 좋아요 알림을 보냅니다."""
        if change.transition is not Transition.CREATED:
            return None
        like = change.after
        return self._fan_out_post_event(change, NotificationType.LIKE, actor_id=like.user_id, post_id=like.post_id)

    def handle_comment_change(self, change: DocumentChange) -> Optional[str]:
        """comments 문서 생성 시 게시물 작성자에게 댓글 알림을 보냅니다."""
        if change.transition is not Transition.CREATED:
            return None
        comment = change.after
        return self._fan_out_post_event(
            change, NotificationType.COMMENT,
            actor_id=comment.author_id, post_id=comment.post_id,
            comment_id=comment.comment_id, comment_text=comment.text
        )

    def add_follow_notification(self, batch, change: DocumentChange) -> Optional[Notification]:
        """
        팔로우 알림 문서를 호출자의 배치에 추가합니다.
        팔로워 수 갱신과 같은 배치로 커밋되며, 푸시는 커밋 성공 후 dispatch_push로 보냅니다.

        :return: 배치에 추가된 알림. 알림을 만들 수 없으면 None
        """
        follow = change.after
        try:
            if follow.follower_id == follow.following_id:
                return None

            actor = self._load_user(follow.follower_id)
            if actor is None:
                logging.warning(f"팔로우 알림 생략: 팔로워를 찾을 수 없음 (ID: {follow.follower_id})")
                return None

            notification = Notification(
                notification_id=str(uuid.uuid4()),
                type=NotificationType.FOLLOW,
                recipient_id=follow.following_id,
                actor_id=actor.user_id,
                actor_username=actor.username,
                actor_profile_image_url=actor.profile_image_url or ''
            )
            batch.set(
                self.notifications_ref.document(notification.notification_id),
                notification.to_document(firestore.SERVER_TIMESTAMP)
            )
            return notification
        except Exception as e:
            logging.error(f"팔로우 알림 구성 중 오류 발생 ({follow.follower_id} -> {follow.following_id}): {e}", exc_info=True)
            return None

    # --- 공통 팬아웃 ---
    def _fan_out_post_event(self, change: DocumentChange, n_type: NotificationType, actor_id: str, post_id: str,
                            comment_id: Optional[str] = None, comment_text: Optional[str] = None) -> Optional[str]:
        handler = f"{n_type.value}_notification"
        try:
            if self.ledger.is_processed(handler, change):
                logging.info(f"이미 처리된 {n_type.value} 알림 이벤트입니다: {change.document_id}")
                return None

            # 1. 게시물 조회 -> 알림 수신자(게시물 작성자) 결정
            post_doc = self.posts_ref.document(post_id).get()
            if not post_doc.exists:
                logging.info(f"{n_type.value} 알림 생략: 게시물을 찾을 수 없음 (post_id: {post_id})")
                return None
            post_data = post_doc.to_dict()
            recipient_id = post_data.get('author_id')
            if not recipient_id:
                logging.warning(f"{n_type.value} 알림 생략: 게시물 작성자 정보 없음 (post_id: {post_id})")
                return None

            # 2. 자기 자신에게는 알림을 생성하지 않음
            if recipient_id == actor_id:
                return None

            # 3. 발신자 표시 정보 조회
            actor = self._load_user(actor_id)
            if actor is None:
                logging.warning(f"{n_type.value} 알림 생략: 발신자를 찾을 수 없음 (ID: {actor_id})")
                return None

            # 4. 알림 문서 저장 (멱등성 장부와 같은 배치)
            image_urls = post_data.get('image_urls') or []
            notification = Notification(
                notification_id=str(uuid.uuid4()),
                type=n_type,
                recipient_id=recipient_id,
                actor_id=actor.user_id,
                actor_username=actor.username,
                actor_profile_image_url=actor.profile_image_url or '',
                post_id=post_id,
                comment_id=comment_id,
                post_image_url=image_urls[0] if image_urls else '',
                comment_text=truncate_preview(comment_text) if comment_text is not None else None
            )
            batch = self.db.batch()
            self.ledger.claim(batch, handler, change)
            batch.set(
                self.notifications_ref.document(notification.notification_id),
                notification.to_document(firestore.SERVER_TIMESTAMP)
            )
            batch.commit()
            logging.info(f"{n_type.value} 알림 생성 완료: {actor_id} -> {recipient_id}")

            # 5-6. 푸시 발송 (실패해도 알림 문서는 유지)
            self.dispatch_push(notification)
            return notification.notification_id

        except AlreadyExists:
            logging.info(f"중복 전달된 {n_type.value} 알림 이벤트를 건너뜁니다: {change.document_id}")
            return None
        except Exception as e:
            logging.error(f"{n_type.value} 알림 처리 중 오류 발생 (document_id: {change.document_id}): {e}", exc_info=True)
            return None

    def dispatch_push(self, notification: Notification) -> bool:
        """수신자의 FCM 토큰이 있으면 푸시를 발송합니다. 실패는 로그만 남깁니다."""
        try:
            recipient_doc = self.users_ref.document(notification.recipient_id).get()
            if not recipient_doc.exists:
                logging.info(f"푸시 생략: 수신자를 찾을 수 없음 (ID: {notification.recipient_id})")
                return False

            fcm_token = recipient_doc.to_dict().get('fcm_token')
            if not fcm_token:
                return False

            title, body, data = self._compose_push(notification)
            sent = self.push_service.send(fcm_token, title, body, data)
            if not sent:
                logging.warning(f"푸시 발송 실패, 알림 문서는 유지됩니다 (notification_id: {notification.notification_id})")
            return sent
        except Exception as e:
            logging.error(f"푸시 처리 중 오류 발생 (notification_id: {notification.notification_id}): {e}", exc_info=True)
            return False

    @staticmethod
    def _compose_push(notification: Notification) -> Tuple[str, str, Dict[str, Any]]:
        username = notification.actor_username
        if notification.type is NotificationType.LIKE:
            return (
                "New Like",
                f"{username} liked your post",
                {"type": "like", "post_id": notification.post_id, "user_id": notification.actor_id},
            )
        if notification.type is NotificationType.COMMENT:
            return (
                "New Comment",
                f"{username}: {notification.comment_text}",
                {"type": "comment", "post_id": notification.post_id, "comment_id": notification.comment_id},
            )
        return (
            "New Follower",
            f"{username} started following you",
            {"type": "follow", "user_id": notification.actor_id},
        )

    def _load_user(self, user_id: str) -> Optional[User]:
        user_doc = self.users_ref.document(user_id).get()
        if not user_doc.exists:
            return None
        user_data = user_doc.to_dict()
        user_data['user_id'] = user_doc.id
        try:
            return UserDocumentSchema().load(user_data)
        except ValidationError as err:
            logging.warning(f"사용자 문서 형식 오류 (ID: {user_id}): {err.messages}")
            return None
