# conftest.py
"""
테스트 공용 픽스처

실제 Firebase 프로젝트 없이 테스트할 수 있도록 Firestore/Storage/FCM을 메모리 구현으로 대체합니다.
서비스 코드가 사용하는 범위(문서 CRUD, where/order_by/start_after/limit 쿼리, 배치, Increment,
SERVER_TIMESTAMP)만 흉내 냅니다.
"""

import copy
import threading
from datetime import datetime, timedelta, timezone

import pytest
from google.api_core.exceptions import AlreadyExists, NotFound
from google.cloud.firestore_v1.transforms import Increment, SERVER_TIMESTAMP

from skigram import create_app

DOCUMENT_ID_FIELD = '__name__'


# =====================================================================================
# Firestore 메모리 구현
# =====================================================================================
class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = copy.deepcopy(data)

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)

    def get(self, field_path):
        return _get_field(self._data or {}, field_path)


class FakeDocumentReference:
    def __init__(self, db, collection_name, doc_id):
        self._db = db
        self.collection_name = collection_name
        self.id = doc_id

    @property
    def path(self):
        return f"{self.collection_name}/{self.id}"

    def __eq__(self, other):
        return isinstance(other, FakeDocumentReference) and other.path == self.path

    def __hash__(self):
        return hash(self.path)

    def get(self):
        with self._db.lock:
            return FakeSnapshot(self, self._db.read(self.path))

    def set(self, data, merge=False):
        batch = self._db.batch()
        batch.set(self, data, merge=merge)
        batch.commit()

    def create(self, data):
        batch = self._db.batch()
        batch.create(self, data)
        batch.commit()

    def update(self, data):
        batch = self._db.batch()
        batch.update(self, data)
        batch.commit()

    def delete(self):
        batch = self._db.batch()
        batch.delete(self)
        batch.commit()


class FakeQuery:
    def __init__(self, db, collection_name, filters=(), orders=(), cursor=None, limit_count=None):
        self._db = db
        self.collection_name = collection_name
        self._filters = list(filters)
        self._orders = list(orders)
        self._cursor = cursor
        self._limit = limit_count

    def _copy(self, **changes):
        params = dict(filters=self._filters, orders=self._orders, cursor=self._cursor, limit_count=self._limit)
        params.update(changes)
        return FakeQuery(self._db, self.collection_name, **params)

    def where(self, filter=None):
        return self._copy(filters=self._filters + [(filter.field_path, filter.op_string, filter.value)])

    def order_by(self, field_path, direction='ASCENDING'):
        return self._copy(orders=self._orders + [(field_path, direction)])

    def start_after(self, snapshot):
        return self._copy(cursor=snapshot)

    def limit(self, count):
        return self._copy(limit_count=count)

    def _sort_key(self, doc_id, data):
        return tuple(_get_field(data, field_path) for field_path, _ in self._orders) + (doc_id,)

    def stream(self):
        with self._db.lock:
            rows = self._db.rows(self.collection_name)

        rows = [(doc_id, data) for doc_id, data in rows if all(_matches(doc_id, data, f) for f in self._filters)]
        # order_by 필드가 없는 문서는 결과에서 빠집니다.
        rows = [(doc_id, data) for doc_id, data in rows
                if all(_get_field(data, field_path) is not None for field_path, _ in self._orders)]

        descending = bool(self._orders) and self._orders[0][1] == 'DESCENDING'
        rows.sort(key=lambda row: self._sort_key(*row), reverse=descending)

        if self._cursor is not None:
            cursor_key = self._sort_key(self._cursor.id, self._cursor.to_dict())
            if descending:
                rows = [row for row in rows if self._sort_key(*row) < cursor_key]
            else:
                rows = [row for row in rows if self._sort_key(*row) > cursor_key]

        if self._limit is not None:
            rows = rows[:self._limit]

        for doc_id, data in rows:
            yield FakeSnapshot(FakeDocumentReference(self._db, self.collection_name, doc_id), data)

    def get(self):
        return list(self.stream())


class FakeCollection(FakeQuery):
    def __init__(self, db, name):
        super().__init__(db, name)

    def document(self, doc_id):
        return FakeDocumentReference(self._db, self.collection_name, doc_id)


class FakeWriteBatch:
    """커밋 시 모든 쓰기를 한 번에 검증한 뒤 적용하므로, 하나라도 실패하면 아무것도 반영되지 않습니다."""

    def __init__(self, db):
        self._db = db
        self._writes = []

    def create(self, ref, data):
        self._writes.append(('create', ref, data, False))

    def set(self, ref, data, merge=False):
        self._writes.append(('set', ref, data, merge))

    def update(self, ref, data):
        self._writes.append(('update', ref, data, False))

    def delete(self, ref):
        self._writes.append(('delete', ref, None, False))

    def commit(self):
        with self._db.lock:
            if self._db.fail_next_commits:
                self._db.fail_next_commits -= 1
                raise RuntimeError("simulated commit failure")

            staged = {}
            for op, ref, data, merge in self._writes:
                current = staged[ref.path] if ref.path in staged else self._db.read(ref.path)
                if op == 'create':
                    if current is not None:
                        raise AlreadyExists(f"Document already exists: {ref.path}")
                    staged[ref.path] = _apply_fields({}, data, self._db.now)
                elif op == 'set':
                    base = copy.deepcopy(current) if (merge and current is not None) else {}
                    staged[ref.path] = _apply_fields(base, data, self._db.now)
                elif op == 'update':
                    if current is None:
                        raise NotFound(f"No document to update: {ref.path}")
                    staged[ref.path] = _apply_fields(copy.deepcopy(current), data, self._db.now, dotted=True)
                else:
                    staged[ref.path] = None

            for path, data in staged.items():
                self._db.write(path, data)
            self._writes = []


class FakeFirestore:
    def __init__(self):
        self.lock = threading.RLock()
        self._docs = {}
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self.fail_next_commits = 0

    def now(self):
        # SERVER_TIMESTAMP마다 단조 증가하는 시각을 부여합니다.
        self._clock += timedelta(milliseconds=1)
        return self._clock

    def collection(self, name):
        return FakeCollection(self, name)

    def batch(self):
        return FakeWriteBatch(self)

    def read(self, path):
        data = self._docs.get(path)
        return copy.deepcopy(data) if data is not None else None

    def write(self, path, data):
        if data is None:
            self._docs.pop(path, None)
        else:
            self._docs[path] = data

    def rows(self, collection_name):
        prefix = f"{collection_name}/"
        return [(path[len(prefix):], copy.deepcopy(data))
                for path, data in self._docs.items() if path.startswith(prefix)]

    # --- 테스트 편의 메서드 ---
    def seed(self, collection_name, doc_id, data):
        with self.lock:
            self._docs[f"{collection_name}/{doc_id}"] = _apply_fields({}, data, self.now)

    def data(self, collection_name, doc_id):
        with self.lock:
            return self.read(f"{collection_name}/{doc_id}")

    def all(self, collection_name):
        with self.lock:
            return dict(self.rows(collection_name))


def _get_field(data, field_path):
    value = data
    for part in field_path.split('.'):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def _resolve(value, old_value, now):
    if value is SERVER_TIMESTAMP:
        return now()
    if isinstance(value, Increment):
        return (old_value or 0) + value.value
    if isinstance(value, dict):
        return {k: _resolve(v, None, now) for k, v in value.items()}
    return copy.deepcopy(value)


def _apply_fields(base, data, now, dotted=False):
    for key, value in data.items():
        parts = key.split('.') if dotted else [key]
        target = base
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        target[parts[-1]] = _resolve(value, target.get(parts[-1]), now)
    return base


def _matches(doc_id, data, field_filter):
    field_path, op, expected = field_filter
    if field_path == DOCUMENT_ID_FIELD:
        actual = doc_id
        expected = [ref.id for ref in expected] if op == 'in' else expected.id
    else:
        actual = _get_field(data, field_path)

    if op == '==':
        return actual == expected
    if op == 'in':
        return actual in expected
    raise NotImplementedError(f"Unsupported operator in fake Firestore: {op}")


# =====================================================================================
# Storage / FCM 메모리 구현
# =====================================================================================
class FakeBlob:
    def __init__(self, bucket, name):
        self._bucket = bucket
        self.name = name

    def delete(self):
        self._bucket.delete_attempts.append(self.name)
        if self.name in self._bucket.broken_paths:
            raise RuntimeError(f"simulated storage failure: {self.name}")
        if self.name not in self._bucket.files:
            raise NotFound(f"No such object: {self.name}")
        self._bucket.files.discard(self.name)


class FakeBucket:
    def __init__(self):
        self.name = 'skigram-test.appspot.com'
        self.files = set()
        self.broken_paths = set()
        self.delete_attempts = []

    def blob(self, name):
        return FakeBlob(self, name)


class RecordingPushSender:
    """messaging.send 대체. 보낸 메시지를 기록하고, fail=True면 발송 오류를 흉내 냅니다."""

    def __init__(self):
        self.messages = []
        self.fail = False

    def __call__(self, message):
        if self.fail:
            raise RuntimeError("simulated FCM failure")
        self.messages.append(message)
        return f"projects/skigram-test/messages/{len(self.messages)}"


# =====================================================================================
# 픽스처
# =====================================================================================
@pytest.fixture()
def db():
    return FakeFirestore()


@pytest.fixture()
def bucket():
    return FakeBucket()


@pytest.fixture()
def push_sender():
    return RecordingPushSender()


@pytest.fixture()
def app(db, bucket, push_sender):
    return create_app('testing', db=db, bucket=bucket, push_sender=push_sender)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def services(app):
    return app.services


@pytest.fixture()
def deliver(app, db):
    """
    이벤트 디스패처의 트리거 전달을 흉내 냅니다.
    after만 주면 생성 이벤트, before만 주면 삭제 이벤트입니다.
    """
    def _deliver(collection, document_id, before=None, after=None, event_id=None):
        return app.services['events'].dispatch(collection, document_id, before=before, after=after, event_id=event_id)
    return _deliver


@pytest.fixture()
def make_user(db):
    def _make_user(user_id, username=None, fcm_token=None, **extra):
        data = {
            'user_id': user_id,
            'username': username or user_id,
            'email': f"{user_id}@skigram.test",
            'profile_image_url': f"https://cdn.skigram.test/{user_id}.jpg",
            'follower_count': 0,
            'following_count': 0,
            'ski_stats': {'resort_count': 0},
        }
        if fcm_token:
            data['fcm_token'] = fcm_token
        data.update(extra)
        db.seed('users', user_id, data)
        return db.data('users', user_id)
    return _make_user


@pytest.fixture()
def make_post(db):
    def _make_post(post_id, author_id, image_urls=None, **extra):
        data = {
            'post_id': post_id,
            'author_id': author_id,
            'image_urls': image_urls if image_urls is not None else [f"posts/{author_id}/{post_id}.jpg"],
            'caption': '',
            'tags': [],
            'like_count': 0,
            'comment_count': 0,
            'created_at': SERVER_TIMESTAMP,
        }
        data.update(extra)
        db.seed('posts', post_id, data)
        return db.data('posts', post_id)
    return _make_post
