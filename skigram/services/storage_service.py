# skigram/services/storage_service.py
import logging
from flask import Flask
from firebase_admin import storage
from google.api_core.exceptions import NotFound

class StorageService:
    """
    Firebase Storage 관련 로직을 담당하는 서비스 클래스입니다.
    게시물 삭제 시 원본 이미지와 썸네일 파일 삭제를 담당합니다.
    """

    def __init__(self, bucket=None):
        """
        버킷 객체를 직접 주입받을 수 있습니다. (테스트 등)
        주입하지 않으면 init_app 메서드에서 설정됩니다.
        """
        self.bucket = bucket

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 Storage 버킷을 설정합니다.
        이 메서드는 create_app에서 단 한 번만 호출됩니다.

        :param app: Flask 애플리케이션 객체
        """
        if self.bucket is not None:
            return

        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET 설정이 .env 또는 설정 파일에 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("StorageService: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def delete_file(self, file_path: str, missing_ok: bool = True) -> bool:
        """
        지정된 경로의 파일을 삭제합니다.

        :param file_path: 버킷 내부 경로
        :param missing_ok: True이면 파일이 없어도 예외 없이 False를 반환합니다.
        :return: 실제로 파일을 삭제했으면 True
        """
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")

        try:
            self.bucket.blob(file_path).delete()
            return True
        except NotFound:
            if missing_ok:
                logging.info(f"삭제할 파일이 이미 없습니다: {file_path}")
                return False
            raise
