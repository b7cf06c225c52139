# skigram/services/push_service.py
import logging
from typing import Dict, Any, Callable, Optional
from flask import Flask
from firebase_admin import messaging

class PushService:
    """
    FCM(Firebase Cloud Messaging) 푸시 발송을 담당하는 게이트웨이 서비스.
    발송 결과는 성공/실패 여부만 반환하며 재시도하지 않습니다.
    """

    def __init__(self, send_func: Optional[Callable[[messaging.Message], str]] = None):
        # 실제 발송 함수. 주입하지 않으면 firebase_admin.messaging.send를 사용합니다.
        self._send = send_func or messaging.send
        self.android_icon = 'ic_notification'
        self.android_color = '#0066CC'

    def init_app(self, app: Flask):
        self.android_icon = app.config.get('PUSH_ANDROID_ICON', self.android_icon)
        self.android_color = app.config.get('PUSH_ANDROID_COLOR', self.android_color)

    def build_message(self, token: str, title: str, body: str, data: Dict[str, Any]) -> messaging.Message:
        """FCM data 페이로드는 문자열 값만 허용하므로 None을 빼고 문자열로 변환합니다."""
        payload = {key: str(value) for key, value in data.items() if value is not None}
        return messaging.Message(
            token=token,
            notification=messaging.Notification(title=title, body=body),
            data=payload,
            android=messaging.AndroidConfig(
                notification=messaging.AndroidNotification(icon=self.android_icon, color=self.android_color)
            ),
            apns=messaging.APNSConfig(
                payload=messaging.APNSPayload(aps=messaging.Aps(badge=1))
            ),
        )

    def send(self, token: str, title: str, body: str, data: Dict[str, Any]) -> bool:
        """
        단일 기기로 푸시 메시지를 발송합니다.

        :param token: 수신 기기의 FCM 토큰
        :param title: 알림 제목
        :param body: 알림 본문
        :param data: 클라이언트 라우팅용 구조화 데이터 (type, post_id 등)
        :return: 발송 성공 여부
        """
        try:
            message_id = self._send(self.build_message(token, title, body, data))
            logging.info(f"푸시 발송 성공 (type: {data.get('type')}, message_id: {message_id})")
            return True
        except Exception as e:
            logging.error(f"푸시 발송 실패 (type: {data.get('type')}): {e}", exc_info=True)
            return False
