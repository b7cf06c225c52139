# skigram/models/post.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Any

@dataclass
class PostLocation:
    """Post 문서 내부에 저장될 위치(스키장) 정보."""
    name: str
    coords: Optional[Any] = None  # {'latitude', 'longitude'} 또는 GeoPoint

@dataclass
class Post:
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    like_count, comment_count는 트리거가 관리하는 파생 값입니다.
    """
    post_id: str
    author_id: str
    image_urls: List[str]
    caption: str = ""
    location: Optional[PostLocation] = None
    tags: List[str] = field(default_factory=list)
    like_count: int = 0
    comment_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
