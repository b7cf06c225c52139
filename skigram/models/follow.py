# skigram/models/follow.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

def follow_document_id(follower_id: str, following_id: str) -> str:
    """(follower, following) 쌍마다 하나의 문서만 존재하도록 결정적인 문서 ID를 만듭니다."""
    return f"{follower_id}_{following_id}"

@dataclass
class Follow:
    """
    Firestore 'follows' 컬렉션의 문서 구조.
    follower_id -> following_id 방향의 팔로우 관계 하나를 나타냅니다.
    """
    follow_id: str
    follower_id: str
    following_id: str
    created_at: Optional[datetime] = None

    @property
    def is_self_follow(self) -> bool:
        return self.follower_id == self.following_id
