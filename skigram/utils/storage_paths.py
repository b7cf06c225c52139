# skigram/utils/storage_paths.py
"""
게시물 이미지의 스토리지 경로 규칙을 한 곳에서 관리하는 모듈

썸네일 생성기는 원본 'posts/{uid}/{name}.{ext}' 옆에
'{name}_thumb_small.{ext}', '{name}_thumb_medium.{ext}' 두 파생 파일을 저장합니다.
게시물 삭제 시 같은 규칙으로 파생 경로를 계산해 함께 지웁니다.
"""

import re
from typing import Optional, Tuple, List
from urllib.parse import unquote

DERIVATIVE_SUFFIXES = ('_thumb_small', '_thumb_medium')

# Firebase Storage 다운로드 URL: https://firebasestorage.googleapis.com/v0/b/<bucket>/o/<encoded path>?alt=media&token=...
_DOWNLOAD_URL_PATTERN = re.compile(r'/o/([^?]+)(?:\?|$)')
# 공개 URL: https://storage.googleapis.com/<bucket>/<path>
_PUBLIC_URL_PATTERN = re.compile(r'^https?://storage\.googleapis\.com/[^/]+/(.+)$')


def split_storage_path(path: str) -> Tuple[str, str, str]:
    """
    스토리지 경로를 (디렉터리, 확장자를 뺀 파일명, 확장자)로 나눕니다.
    디렉터리는 마지막 '/'까지 포함하고, 확장자는 마지막 '.'부터 포함합니다.

    >>> split_storage_path('posts/u1/abc.jpg')
    ('posts/u1/', 'abc', '.jpg')
    """
    slash = path.rfind('/')
    directory, filename = path[:slash + 1], path[slash + 1:]
    dot = filename.rfind('.')
    if dot <= 0:
        # 확장자가 없거나 '.bashrc'처럼 점으로 시작하는 파일명
        return directory, filename, ''
    return directory, filename[:dot], filename[dot:]


def derivative_paths(path: str) -> List[str]:
    """원본 경로로부터 썸네일(small, medium) 경로 목록을 계산합니다."""
    directory, basename, ext = split_storage_path(path)
    return [f"{directory}{basename}{suffix}{ext}" for suffix in DERIVATIVE_SUFFIXES]


def storage_path_from_url(image_ref: str) -> Optional[str]:
    """
    게시물에 저장된 이미지 참조를 버킷 내부 경로로 변환합니다.
    - Firebase 다운로드 URL, gs:// URI, storage.googleapis.com 공개 URL, 경로 문자열을 지원합니다.
    - 경로를 알아낼 수 없는 참조는 None을 반환합니다.
    """
    if not image_ref:
        return None

    if image_ref.startswith('gs://'):
        _, _, path = image_ref[len('gs://'):].partition('/')
        return path or None

    if image_ref.startswith(('http://', 'https://')):
        public_match = _PUBLIC_URL_PATTERN.match(image_ref.split('?')[0])
        if public_match:
            return unquote(public_match.group(1))
        download_match = _DOWNLOAD_URL_PATTERN.search(image_ref)
        if download_match:
            return unquote(download_match.group(1))
        return None

    return image_ref.lstrip('/')
