# skigram/services/event_ledger.py
from datetime import datetime, timedelta, timezone

from firebase_admin import firestore

from skigram.models.event import DocumentChange


class EventLedger:
    """
    처리 완료된 트리거 이벤트를 'processed_events' 컬렉션에 기록하는 멱등성 장부.

    이벤트 디스패처는 최소 한 번(at-least-once) 전달하므로 같은 이벤트가 다시 올 수 있습니다.
    핸들러는 자신의 쓰기와 같은 배치에 claim()으로 장부 문서를 create 하고,
    이미 처리된 이벤트라면 배치 커밋이 AlreadyExists로 실패해 부수 효과가 두 번 적용되지 않습니다.
    (엔티티, 전이, 문서 생애) 조합이 키이므로 디스패처가 붙이는 event_id가 달라도 중복을 잡아냅니다.
    """

    def __init__(self, db, retention_days: int = 7):
        self.ledger_ref = db.collection('processed_events')
        self.retention = timedelta(days=retention_days)

    @staticmethod
    def entry_id(handler: str, change: DocumentChange) -> str:
        """
        (핸들러, 문서, 전이, 문서 생애) 조합의 장부 키.
        같은 ID로 다시 만든 팔로우/좋아요는 created_at이 달라 별개의 이벤트로 처리됩니다.
        """
        entry_id = f"{handler}:{change.collection}:{change.document_id}:{change.transition.value}"
        occurrence = change.occurrence
        if occurrence:
            entry_id = f"{entry_id}:{occurrence}"
        return entry_id

    def claim(self, batch, handler: str, change: DocumentChange) -> str:
        """배치에 장부 문서 생성을 추가합니다. 커밋 시점에 중복 여부가 판정됩니다."""
        entry_id = self.entry_id(handler, change)
        batch.create(self.ledger_ref.document(entry_id), {
            'handler': handler,
            'collection': change.collection,
            'document_id': change.document_id,
            'transition': change.transition.value,
            'occurrence': change.occurrence,
            'event_id': change.event_id,
            'processed_at': firestore.SERVER_TIMESTAMP,
            # Firestore TTL 정책 대상 필드
            'expires_at': datetime.now(timezone.utc) + self.retention,
        })
        return entry_id

    def is_processed(self, handler: str, change: DocumentChange) -> bool:
        return self.ledger_ref.document(self.entry_id(handler, change)).get().exists
