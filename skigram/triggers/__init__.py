# skigram/triggers/__init__.py
"""
문서 변경 이벤트를 받아 카운터 갱신, 알림 팬아웃 핸들러로 전달하는 트리거 패키지
"""

from .dispatcher import EventDispatcher, register_default_handlers

__all__ = ['EventDispatcher', 'register_default_handlers']
