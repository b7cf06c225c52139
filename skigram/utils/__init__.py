# skigram/utils/__init__.py
"""
유틸리티 모듈 패키지

스토리지 경로 규칙, 알림 미리보기 텍스트 등 여러 서비스에서 공통으로 쓰는 함수들을 포함합니다.
"""

from .storage_paths import (
    DERIVATIVE_SUFFIXES,
    split_storage_path, derivative_paths, storage_path_from_url
)
from .text_utils import truncate_preview, PREVIEW_MAX_LENGTH, ELLIPSIS

__all__ = [
    'DERIVATIVE_SUFFIXES',
    'split_storage_path', 'derivative_paths', 'storage_path_from_url',
    'truncate_preview', 'PREVIEW_MAX_LENGTH', 'ELLIPSIS'
]
