# skigram/models/event.py
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

class Transition(Enum):
    """문서 변경 종류"""
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"

@dataclass
class DocumentChange:
    """
    이벤트 디스패처가 전달하는 문서 변경 한 건.
    before는 생성 시, after는 삭제 시 None입니다.
    before/after는 컬렉션별 데이터클래스(Post, Comment, Follow, Like)로 변환된 값입니다.
    """
    collection: str
    document_id: str
    before: Optional[Any] = None
    after: Optional[Any] = None
    event_id: Optional[str] = None

    @property
    def transition(self) -> Transition:
        if self.before is None and self.after is not None:
            return Transition.CREATED
        if self.before is not None and self.after is None:
            return Transition.DELETED
        if self.before is not None and self.after is not None:
            return Transition.UPDATED
        raise ValueError(f"before/after가 모두 비어 있는 이벤트입니다: {self.collection}/{self.document_id}")

    @property
    def document(self) -> Any:
        """현재 상태(after)가 있으면 after, 삭제 이벤트면 before를 반환합니다."""
        return self.after if self.after is not None else self.before

    @property
    def occurrence(self) -> Optional[str]:
        """
        문서 한 번의 생애(생성~삭제)를 구분하는 값. 문서의 created_at을 사용합니다.
        팔로우/좋아요처럼 문서 ID가 고정된 경우에도 삭제 후 다시 만든 문서는 다른 값을 가집니다.
        생성 이벤트의 after와 삭제 이벤트의 before가 같은 created_at을 가지므로 한 생애 안에서는 동일합니다.
        """
        created_at = getattr(self.document, 'created_at', None)
        if created_at is None:
            return None
        if isinstance(created_at, datetime):
            created_at = created_at.isoformat()
        # 문서 ID에는 '/'를 쓸 수 없습니다.
        return str(created_at).replace('/', '_')
