# skigram/models/user.py
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

# 외부로 절대 노출되면 안 되는 필드
PRIVATE_USER_FIELDS = ('email', 'fcm_token')

@dataclass
class SkiStats:
    resort_count: int = 0

@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    follower_count, following_count, ski_stats.resort_count는 트리거만 변경합니다.
    """
    user_id: str
    username: str
    email: Optional[str] = None
    bio: str = ""
    profile_image_url: Optional[str] = None
    fcm_token: Optional[str] = None  # 푸시 알림을 위한 FCM 토큰
    follower_count: int = 0
    following_count: int = 0
    ski_stats: SkiStats = field(default_factory=SkiStats)

def public_user_fields(user_id: str, user_data: Dict[str, Any]) -> Dict[str, Any]:
    """목록 응답에 병합할 공개 표시 정보만 추려냅니다."""
    return {
        "user_id": user_id,
        "username": user_data.get('username'),
        "profile_image_url": user_data.get('profile_image_url') or '',
    }

def strip_private_fields(user_data: Dict[str, Any]) -> Dict[str, Any]:
    """사용자 문서에서 이메일, 푸시 토큰 등 민감한 필드를 제거한 사본을 반환합니다."""
    return {k: v for k, v in user_data.items() if k not in PRIVATE_USER_FIELDS}
