# skigram/services/cascade_service.py
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from skigram.services.firestore_service import delete_query_results
from skigram.services.storage_service import StorageService
from skigram.utils.storage_paths import derivative_paths, storage_path_from_url

logger = logging.getLogger(__name__)

class DeletionStep(Enum):
    """게시물 연쇄 삭제 작업의 단계. post_deletions 문서의 step 필드에 저장됩니다."""
    PURGE_STORAGE = "purge_storage"
    DELETE_CHILDREN = "delete_children"
    DELETE_ROOT = "delete_root"

STEP_ORDER = [DeletionStep.PURGE_STORAGE, DeletionStep.DELETE_CHILDREN, DeletionStep.DELETE_ROOT]

@dataclass
class CascadeResult:
    """연쇄 삭제 한 번의 결과 요약."""
    post_id: str
    original_paths: List[str] = field(default_factory=list)
    derivative_paths: List[str] = field(default_factory=list)
    failed_paths: List[str] = field(default_factory=list)
    deleted_comments: int = 0
    deleted_likes: int = 0
    root_deleted: bool = False

    @property
    def attempted_paths(self) -> List[str]:
        return self.original_paths + self.derivative_paths

class CascadeDeletionService:
    """
    게시물 삭제 시 스토리지 이미지(원본+썸네일), 댓글, 좋아요, 게시물 문서를 순서대로 정리합니다.

    트랜잭션이 아닌 최선 노력(best-effort) 연쇄 삭제입니다.
    진행 상황을 'post_deletions' 작업 문서에 기록하므로, 중간에 프로세스가 죽어도
    resume_pending()으로 남은 단계부터 다시 실행할 수 있습니다.
    한 단계가 실패해도 로그만 남기고 다음 단계로 진행합니다.
    """
    def __init__(self, db, storage_service: StorageService):
        self.db = db
        self.storage_service = storage_service
        self.posts_ref = self.db.collection('posts')
        self.comments_ref = self.db.collection('comments')
        self.likes_ref = self.db.collection('likes')
        self.deletions_ref = self.db.collection('post_deletions')

    def delete_post(self, post_id: str, post_data: Optional[Dict[str, Any]] = None) -> CascadeResult:
        """
        게시물과 관련 데이터를 모두 삭제합니다.

        :param post_id: 삭제할 게시물 ID
        :param post_data: 이미 조회한 게시물 데이터 (없으면 직접 조회)
        :raises ValueError: 게시물이 존재하지 않는 경우
        """
        if post_data is None:
            post_doc = self.posts_ref.document(post_id).get()
            if not post_doc.exists:
                raise ValueError("게시물을 찾을 수 없습니다.")
            post_data = post_doc.to_dict()

        image_paths = []
        for image_ref in post_data.get('image_urls') or []:
            path = storage_path_from_url(image_ref)
            if path:
                image_paths.append(path)
            else:
                logger.warning(f"이미지 참조에서 스토리지 경로를 찾을 수 없습니다 (post_id: {post_id}): {image_ref}")

        self.deletions_ref.document(post_id).set({
            'post_id': post_id,
            'author_id': post_data.get('author_id'),
            'image_paths': image_paths,
            'step': DeletionStep.PURGE_STORAGE.value,
            'created_at': firestore.SERVER_TIMESTAMP,
            'updated_at': firestore.SERVER_TIMESTAMP,
        })
        return self._run(post_id, image_paths, DeletionStep.PURGE_STORAGE)

    def resume_pending(self) -> List[CascadeResult]:
        """완료되지 못한 연쇄 삭제 작업을 기록된 단계부터 다시 실행합니다."""
        results = []
        for doc in self.deletions_ref.stream():
            data = doc.to_dict()
            try:
                step = DeletionStep(data.get('step'))
            except ValueError:
                logger.warning(f"알 수 없는 삭제 단계라 처음부터 다시 실행합니다 (post_id: {doc.id}): {data.get('step')}")
                step = DeletionStep.PURGE_STORAGE
            logger.info(f"게시물 연쇄 삭제 재개 (post_id: {doc.id}, step: {step.value})")
            results.append(self._run(doc.id, data.get('image_paths') or [], step))
        return results

    def _run(self, post_id: str, image_paths: List[str], start_step: DeletionStep) -> CascadeResult:
        result = CascadeResult(post_id=post_id)
        steps = STEP_ORDER[STEP_ORDER.index(start_step):]

        for index, step in enumerate(steps):
            try:
                if step is DeletionStep.PURGE_STORAGE:
                    self._purge_storage(image_paths, result)
                elif step is DeletionStep.DELETE_CHILDREN:
                    self._delete_children(post_id, result)
                else:
                    self.posts_ref.document(post_id).delete()
                    result.root_deleted = True
            except Exception as e:
                logger.error(f"게시물 연쇄 삭제 단계 실패 (post_id: {post_id}, step: {step.value}): {e}", exc_info=True)

            next_step = steps[index + 1] if index + 1 < len(steps) else None
            self._advance(post_id, next_step)

        logger.info(
            f"게시물 연쇄 삭제 완료 (post_id: {post_id}): 이미지 {len(result.original_paths)}개, "
            f"댓글 {result.deleted_comments}개, 좋아요 {result.deleted_likes}개, 실패 경로 {len(result.failed_paths)}개"
        )
        return result

    def _advance(self, post_id: str, next_step: Optional[DeletionStep]):
        """작업 문서의 단계를 갱신하고, 마지막 단계가 끝나면 작업 문서를 지웁니다."""
        work_ref = self.deletions_ref.document(post_id)
        try:
            if next_step is None:
                work_ref.delete()
            else:
                work_ref.update({'step': next_step.value, 'updated_at': firestore.SERVER_TIMESTAMP})
        except Exception as e:
            logger.error(f"삭제 작업 문서 갱신 실패 (post_id: {post_id}): {e}", exc_info=True)

    def _purge_storage(self, image_paths: List[str], result: CascadeResult):
        """원본과 썸네일을 삭제합니다. 썸네일은 없을 수 있으므로 실패를 무시합니다."""
        for path in image_paths:
            result.original_paths.append(path)
            try:
                self.storage_service.delete_file(path, missing_ok=True)
            except Exception as e:
                logger.error(f"Storage 이미지 삭제 실패 (path: {path}): {e}")
                result.failed_paths.append(path)

            for derivative in derivative_paths(path):
                result.derivative_paths.append(derivative)
                try:
                    self.storage_service.delete_file(derivative, missing_ok=True)
                except Exception as e:
                    logger.debug(f"썸네일 삭제 실패 무시 (path: {derivative}): {e}")

    def _delete_children(self, post_id: str, result: CascadeResult):
        """댓글과 좋아요는 서로 독립적이므로 두 삭제 작업을 동시에 실행합니다."""
        comments_query = self.comments_ref.where(filter=FieldFilter('post_id', '==', post_id))
        likes_query = self.likes_ref.where(filter=FieldFilter('post_id', '==', post_id))

        with ThreadPoolExecutor(max_workers=2) as executor:
            comments_future = executor.submit(delete_query_results, self.db, comments_query, f"comments(post_id={post_id})")
            likes_future = executor.submit(delete_query_results, self.db, likes_query, f"likes(post_id={post_id})")

            try:
                result.deleted_comments = comments_future.result()
            except Exception as e:
                logger.error(f"댓글 삭제 실패 (post_id: {post_id}): {e}", exc_info=True)
            try:
                result.deleted_likes = likes_future.result()
            except Exception as e:
                logger.error(f"좋아요 삭제 실패 (post_id: {post_id}): {e}", exc_info=True)
