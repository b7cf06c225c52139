# skigram/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from flask import Flask, jsonify
from marshmallow import ValidationError
import firebase_admin
from firebase_admin import credentials, firestore

# - 설정
from skigram.core.config import config_by_name

# - API 블루프린트
from skigram.api.posts.routes import posts_bp
from skigram.api.comments.routes import comments_bp
from skigram.api.users.routes import users_bp
from skigram.triggers.routes import events_bp

# - 서비스 모듈
from skigram.services.storage_service import StorageService
from skigram.services.push_service import PushService
from skigram.services.event_ledger import EventLedger
from skigram.services.notification_service import NotificationService
from skigram.services.counter_service import CounterService
from skigram.services.cascade_service import CascadeDeletionService
from skigram.api.posts.services import PostService
from skigram.api.comments.services import CommentService
from skigram.api.users.services import UserService
from skigram.triggers import EventDispatcher, register_default_handlers

def create_app(config_name=None, db=None, bucket=None, push_sender=None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production'. 없으면 FLASK_ENV를 따릅니다.
    :param db: Firestore 클라이언트. 주입하면 firebase_admin 초기화를 건너뜁니다. (테스트 등)
    :param bucket: Storage 버킷 객체
    :param push_sender: FCM 메시지 발송 함수 (messaging.send 대체)
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 외부 서비스 초기화
    # =====================================================================================
    if db is None:
        if not firebase_admin._apps:
            cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
            if not cred_path or not os.path.exists(cred_path):
                raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
            cred = credentials.Certificate(cred_path)
            firebase_admin.initialize_app(cred, {
                'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
            })
        db = firestore.client()

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 다른 서비스의 기반이 되는 공용 서비스
    try:
        storage_instance = StorageService(bucket=bucket)
        storage_instance.init_app(app)
        app.services['storage'] = storage_instance
        logging.info("Storage service initialized successfully")
    except Exception as e:
        logging.error(f"Failed to initialize storage service: {e}")
        raise

    push_instance = PushService(send_func=push_sender)
    push_instance.init_app(app)
    app.services['push'] = push_instance
    app.services['ledger'] = EventLedger(db, retention_days=app.config['EVENT_LEDGER_RETENTION_DAYS'])

    # 5-2. 트리거 핸들러 (카운터, 알림, 연쇄 삭제)
    app.services['notifications'] = NotificationService(
        db,
        ledger=app.services['ledger'],
        push_service=app.services['push']
    )
    app.services['counters'] = CounterService(
        db,
        ledger=app.services['ledger'],
        notification_service=app.services['notifications']
    )
    app.services['cascade'] = CascadeDeletionService(db, storage_service=app.services['storage'])

    dispatcher = EventDispatcher()
    register_default_handlers(dispatcher, app.services['counters'], app.services['notifications'])
    app.services['events'] = dispatcher

    # 5-3. API 도메인 서비스
    app.services['posts'] = PostService(db, cascade_service=app.services['cascade'])
    app.services['comments'] = CommentService(db)
    app.services['users'] = UserService(db)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(posts_bp, url_prefix='/api/posts')
    app.register_blueprint(comments_bp, url_prefix='/api')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(events_bp, url_prefix='/api/events')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. CLI 명령어
    # =====================================================================================
    @app.cli.command('resume-post-deletions')
    def resume_post_deletions():
        """중단된 게시물 연쇄 삭제 작업을 남은 단계부터 다시 실행합니다."""
        results = app.services['cascade'].resume_pending()
        print(f"재개한 게시물 삭제 작업: {len(results)}건")

    # =====================================================================================
    # 9. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
