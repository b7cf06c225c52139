# skigram/services/test_gateways.py
"""
Storage 삭제, FCM 발송 게이트웨이 테스트

사용법: python -m pytest skigram/services/test_gateways.py -v
"""

import pytest
from google.api_core.exceptions import NotFound

from skigram.services.push_service import PushService
from skigram.services.storage_service import StorageService


def test_delete_file_reports_missing_files(bucket):
    bucket.files.add('posts/u1/a.jpg')
    storage_service = StorageService(bucket=bucket)

    assert storage_service.delete_file('posts/u1/a.jpg') is True
    assert storage_service.delete_file('posts/u1/a.jpg') is False
    with pytest.raises(NotFound):
        storage_service.delete_file('posts/u1/a.jpg', missing_ok=False)


def test_delete_file_requires_initialization():
    with pytest.raises(RuntimeError):
        StorageService().delete_file('posts/u1/a.jpg')


def test_push_payload_values_are_strings(push_sender):
    push_service = PushService(send_func=push_sender)

    assert push_service.send('token-1', '제목', '본문', {'type': 'like', 'post_id': 'p1', 'comment_id': None, 'count': 3})

    message = push_sender.messages[0]
    assert message.data == {'type': 'like', 'post_id': 'p1', 'count': '3'}
    assert message.android.notification.icon == 'ic_notification'
    assert message.apns.payload.aps.badge == 1


def test_push_failure_returns_false(push_sender):
    push_sender.fail = True
    assert PushService(send_func=push_sender).send('token-1', '제목', '본문', {'type': 'follow'}) is False
