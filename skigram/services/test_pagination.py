# skigram/services/test_pagination.py
"""
커서 페이지네이션과 사용자 정보 병합(hydration) 테스트

사용법: python -m pytest skigram/services/test_pagination.py -v
"""

import pytest
from google.cloud.firestore_v1.base_query import FieldFilter

from skigram.services.pagination import paginate, hydrate_users, resolve_feed_author_ids


@pytest.fixture()
def five_comments(db, make_user, make_post):
    make_user('alice', fcm_token='secret-token')
    make_post('p1', 'alice')
    # c1이 가장 오래된 댓글, c5가 가장 최신 댓글
    for i in range(1, 6):
        db.seed('comments', f"c{i}", {
            'comment_id': f"c{i}",
            'post_id': 'p1',
            'author_id': 'alice',
            'text': f"comment {i}",
            'created_at': db.now(),
        })
    return db.collection('comments')


def _ids(page):
    return [item['comment_id'] for item in page.items]


def test_pages_walk_newest_first(five_comments):
    """댓글 5개, 페이지 크기 2 -> 2/2/1개, has_more = True/True/False"""
    filters = [FieldFilter('post_id', '==', 'p1')]

    first = paginate(five_comments, filters, 2)
    assert _ids(first) == ['c5', 'c4']
    assert first.has_more is True
    assert first.next_cursor == 'c4'

    second = paginate(five_comments, filters, 2, first.next_cursor)
    assert _ids(second) == ['c3', 'c2']
    assert second.has_more is True

    third = paginate(five_comments, filters, 2, second.next_cursor)
    assert _ids(third) == ['c1']
    assert third.has_more is False


def test_full_last_page_still_reports_has_more(five_comments):
    """페이지가 가득 차면 다음 페이지가 비어 있어도 has_more는 True (근사값)"""
    filters = [FieldFilter('post_id', '==', 'p1')]
    page = paginate(five_comments, filters, 5)
    assert len(page.items) == 5
    assert page.has_more is True

    after = paginate(five_comments, filters, 5, page.next_cursor)
    assert after.items == []
    assert after.has_more is False
    assert after.next_cursor is None


def test_deleted_cursor_restarts_from_newest(five_comments):
    filters = [FieldFilter('post_id', '==', 'p1')]
    first = paginate(five_comments, filters, 2)
    five_comments.document(first.next_cursor).delete()

    restarted = paginate(five_comments, filters, 2, first.next_cursor)
    assert _ids(restarted) == ['c5', 'c3']


def test_hydrated_users_hide_private_fields(db, five_comments):
    page = paginate(five_comments, [FieldFilter('post_id', '==', 'p1')], 2)
    hydrate_users(db.collection('users'), page.items, id_field='author_id')

    for item in page.items:
        assert item['user'] == {
            'user_id': 'alice',
            'username': 'alice',
            'profile_image_url': 'https://cdn.skigram.test/alice.jpg',
        }
        assert 'email' not in item['user']
        assert 'fcm_token' not in item['user']


def test_hydrate_users_beyond_in_query_limit(db, make_user):
    """사용자가 30명을 넘으면 여러 번의 'in' 조회로 나눠서 가져와야 함"""
    items = []
    for i in range(35):
        make_user(f"u{i}")
        items.append({'author_id': f"u{i}"})
    items.append({'author_id': 'missing'})

    hydrate_users(db.collection('users'), items, id_field='author_id', target_field='author')

    assert [item['author']['user_id'] for item in items[:35]] == [f"u{i}" for i in range(35)]
    assert items[-1]['author'] is None


def test_feed_authors_include_self(db):
    for following_id in ('b', 'c'):
        db.seed('follows', f"a_{following_id}", {
            'follow_id': f"a_{following_id}", 'follower_id': 'a', 'following_id': following_id,
            'created_at': db.now(),
        })

    author_ids, partial = resolve_feed_author_ids(db.collection('follows'), 'a')
    assert author_ids == ['c', 'b', 'a']
    assert partial is False


def test_feed_authors_capped_to_most_recent_follows(db):
    for i in range(35):
        db.seed('follows', f"a_u{i}", {
            'follow_id': f"a_u{i}", 'follower_id': 'a', 'following_id': f"u{i}",
            'created_at': db.now(),
        })

    author_ids, partial = resolve_feed_author_ids(db.collection('follows'), 'a')

    assert partial is True
    assert len(author_ids) == 30
    assert author_ids[0] == 'u34'
    assert author_ids[-1] == 'a'
    assert 'u0' not in author_ids
