# skigram/core/config.py

import os # 환경 변수를 읽기 위해 사용합니다.

class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # 게시물 이미지와 썸네일이 저장된 Firebase Storage 버킷 이름
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

    # 목록 API(피드, 댓글, 팔로워, 팔로잉)의 페이지 크기
    DEFAULT_PAGE_SIZE = int(os.getenv('DEFAULT_PAGE_SIZE', 10))

    # 처리된 트리거 이벤트 기록(processed_events)의 보관 기간.
    # expires_at 필드에 Firestore TTL 정책을 걸어 자동으로 정리합니다.
    EVENT_LEDGER_RETENTION_DAYS = int(os.getenv('EVENT_LEDGER_RETENTION_DAYS', 7))

    # 안드로이드 푸시 알림 표시 옵션
    PUSH_ANDROID_ICON = os.getenv('PUSH_ANDROID_ICON', 'ic_notification')
    PUSH_ANDROID_COLOR = os.getenv('PUSH_ANDROID_COLOR', '#0066CC')

class DevelopmentConfig(Config):
    """개발 환경 설정. 코드 변경 시 자동 재시작, 상세한 디버그 정보를 제공합니다."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH', Config.FIREBASE_CREDENTIALS_PATH)

class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH', Config.FIREBASE_CREDENTIALS_PATH)
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET', 'skigram-test.appspot.com')

class ProductionConfig(Config):
    """운영 환경 설정. 디버그 모드를 끕니다."""
    DEBUG = False

# FLASK_ENV 값에 따라 create_app에서 적절한 설정을 선택하는 데 사용됩니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
