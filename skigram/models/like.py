# skigram/models/like.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

def like_document_id(user_id: str, post_id: str) -> str:
    return f"{user_id}_{post_id}"

@dataclass
class Like:
    """Firestore 'likes' 컬렉션의 문서 구조를 정의하는 데이터클래스."""
    like_id: str
    user_id: str
    post_id: str
    created_at: Optional[datetime] = None
