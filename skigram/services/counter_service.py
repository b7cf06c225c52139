# skigram/services/counter_service.py
import logging
from typing import Optional

from firebase_admin import firestore
from google.api_core.exceptions import AlreadyExists, NotFound
from google.cloud.firestore_v1.base_query import FieldFilter

from skigram.models.event import DocumentChange, Transition
from skigram.services.event_ledger import EventLedger
from skigram.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

class CounterService:
    """
    댓글/좋아요/팔로우 문서의 생성·삭제에 맞춰 부모 문서의 파생 카운터를 갱신하는 서비스.

    - 같은 문서에 대한 동시 증감은 firestore.Increment로 처리해 경쟁 없이 합산됩니다.
    - 여러 문서에 걸친 변경(팔로우의 두 카운터)은 하나의 배치로 묶어 함께 반영되거나 함께 실패합니다.
    - 부모 문서가 이미 삭제된 경우 등 모든 실패는 로그만 남기고 재시도하지 않습니다.
    - 음수 방지(clamp)는 하지 않습니다. 순서가 뒤바뀐 재전달로 일시적인 오차가 생길 수 있습니다.
    """
    def __init__(self, db, ledger: EventLedger, notification_service: Optional[NotificationService] = None):
        self.db = db
        self.ledger = ledger
        self.notification_service = notification_service
        self.posts_ref = self.db.collection('posts')
        self.users_ref = self.db.collection('users')

    @staticmethod
    def _delta(change: DocumentChange) -> Optional[int]:
        """생성이면 +1, 삭제면 -1. 수정 이벤트는 무시합니다(None)."""
        if change.transition is Transition.CREATED:
            return 1
        if change.transition is Transition.DELETED:
            return -1
        return None

    def handle_comment_change(self, change: DocumentChange) -> bool:
        """댓글 생성/삭제 시 게시물의 comment_count를 1 증가/감소시킵니다."""
        delta = self._delta(change)
        if delta is None:
            return False
        comment = change.document

        batch = self.db.batch()
        self.ledger.claim(batch, 'comment_count', change)
        batch.update(self.posts_ref.document(comment.post_id), {'comment_count': firestore.Increment(delta)})
        return self._commit(batch, change, f"comment_count({comment.post_id}) {delta:+d}")

    def handle_like_change(self, change: DocumentChange) -> bool:
        """좋아요 생성/삭제 시 게시물의 like_count를 1 증가/감소시킵니다."""
        delta = self._delta(change)
        if delta is None:
            return False
        like = change.document

        batch = self.db.batch()
        self.ledger.claim(batch, 'like_count', change)
        batch.update(self.posts_ref.document(like.post_id), {'like_count': firestore.Increment(delta)})
        return self._commit(batch, change, f"like_count({like.post_id}) {delta:+d}")

    def handle_follow_change(self, change: DocumentChange) -> bool:
        """
        팔로우 생성/삭제 시 대상의 follower_count와 팔로워의 following_count를 하나의 배치로 갱신합니다.
        생성 시에는 팔로우 알림 문서도 같은 배치에 담고, 커밋 성공 후 푸시를 보냅니다.
        """
        delta = self._delta(change)
        if delta is None:
            return False
        follow = change.document

        if follow.is_self_follow:
            logger.warning(f"자기 자신에 대한 팔로우 이벤트를 무시합니다 (user_id: {follow.follower_id})")
            return False

        batch = self.db.batch()
        self.ledger.claim(batch, 'follow_counts', change)
        batch.update(self.users_ref.document(follow.following_id), {'follower_count': firestore.Increment(delta)})
        batch.update(self.users_ref.document(follow.follower_id), {'following_count': firestore.Increment(delta)})

        notification = None
        if delta > 0 and self.notification_service is not None:
            notification = self.notification_service.add_follow_notification(batch, change)

        committed = self._commit(batch, change, f"follow_counts({follow.follower_id} -> {follow.following_id}) {delta:+d}")
        if committed and notification is not None:
            self.notification_service.dispatch_push(notification)
        return committed

    def handle_post_change(self, change: DocumentChange) -> bool:
        """
        게시물 생성 시, 해당 스키장에 올린 첫 게시물이면 작성자의 ski_stats.resort_count를 1 증가시킵니다.
        """
        if change.transition is not Transition.CREATED:
            return False
        post = change.after
        if post.location is None or not post.location.name:
            return False

        try:
            visits = (
                self.posts_ref
                .where(filter=FieldFilter('author_id', '==', post.author_id))
                .where(filter=FieldFilter('location.name', '==', post.location.name))
                .order_by('created_at', direction=firestore.Query.ASCENDING)
                .limit(2)
                .get()
            )
        except Exception as e:
            logger.error(f"스키장 방문 기록 조회 실패 (post_id: {post.post_id}): {e}", exc_info=True)
            return False

        if len(visits) != 1:
            return False

        batch = self.db.batch()
        self.ledger.claim(batch, 'resort_count', change)
        batch.update(self.users_ref.document(post.author_id), {'ski_stats.resort_count': firestore.Increment(1)})
        return self._commit(batch, change, f"resort_count({post.author_id}) +1")

    def _commit(self, batch, change: DocumentChange, description: str) -> bool:
        try:
            batch.commit()
            logger.info(f"카운터 갱신 완료: {description}")
            return True
        except AlreadyExists:
            logger.info(f"중복 전달된 이벤트라 카운터 갱신을 건너뜁니다: {description}")
        except NotFound:
            logger.warning(f"카운터 대상 문서가 없어 갱신하지 않습니다: {description}")
        except Exception as e:
            logger.error(f"카운터 갱신 실패 ({change.collection}/{change.document_id}): {description} - {e}", exc_info=True)
        return False
