# skigram/services/firestore_service.py
import logging
from typing import Iterable, Iterator, List, TypeVar

# Firestore 제약: 배치 하나당 최대 500개 쓰기, 'in' 필터 값 최대 30개
BATCH_WRITE_LIMIT = 500
IN_QUERY_LIMIT = 30

T = TypeVar('T')

def chunked(items: Iterable[T], size: int) -> Iterator[List[T]]:
    """리스트를 size 크기의 묶음으로 나눕니다."""
    chunk: List[T] = []
    for item in items:
        chunk.append(item)
        if len(chunk) == size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk

def delete_query_results(db, query, label: str) -> int:
    """
    쿼리에 걸리는 모든 문서를 500개 단위 배치로 삭제하고 삭제한 문서 수를 반환합니다.
    배치 하나가 실패해도 나머지 배치는 계속 시도합니다.

    :param db: Firestore 클라이언트
    :param query: 삭제 대상 문서를 찾는 쿼리
    :param label: 로그에 표시할 대상 이름 (예: 'comments(post_id=...)')
    """
    deleted = 0
    refs = [doc.reference for doc in query.stream()]
    for chunk in chunked(refs, BATCH_WRITE_LIMIT):
        batch = db.batch()
        for ref in chunk:
            batch.delete(ref)
        try:
            batch.commit()
            deleted += len(chunk)
        except Exception as e:
            logging.error(f"Firestore 배치 삭제 실패 ({label}, {len(chunk)}건): {e}", exc_info=True)
    logging.info(f"Firestore 배치 삭제 완료 ({label}): {deleted}/{len(refs)}건")
    return deleted
