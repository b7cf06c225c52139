# skigram/models/notification.py
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Any, Optional

class NotificationType(Enum):
    """알림 유형을 정의하는 Enum 클래스"""
    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"

@dataclass
class Notification:
    """
    Firestore 'notifications' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    생성 후에는 read 플래그 외에 변경되지 않습니다.
    """
    notification_id: str
    type: NotificationType
    recipient_id: str               # 알림을 받는 사용자 ID
    actor_id: str                   # 알림을 유발한 사용자 ID
    actor_username: str
    actor_profile_image_url: str = ""
    post_id: Optional[str] = None
    comment_id: Optional[str] = None
    post_image_url: Optional[str] = None
    comment_text: Optional[str] = None  # 최대 50자로 잘린 댓글 미리보기
    read: bool = False

    def to_document(self, created_at: Any) -> Dict[str, Any]:
        """Enum 값을 문자열로 바꾸고 비어 있는 대상 필드를 뺀 저장용 딕셔너리를 만듭니다."""
        data = asdict(self)
        data['type'] = self.type.value
        data = {k: v for k, v in data.items() if v is not None}
        data['created_at'] = created_at
        return data
