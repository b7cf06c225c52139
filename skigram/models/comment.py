# skigram/models/comment.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

@dataclass
class Comment:
    """
    Firestore 'comments' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    """
    comment_id: str
    post_id: str
    author_id: str
    text: str
    created_at: Optional[datetime] = None
