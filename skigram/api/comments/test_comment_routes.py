# skigram/api/comments/test_comment_routes.py
"""
댓글 API 테스트

사용법: python -m pytest skigram/api/comments/test_comment_routes.py -v
"""

import pytest


@pytest.fixture()
def alice_post(make_user, make_post):
    make_user('alice')
    make_user('bob', fcm_token='bob-token')
    make_user('carol')
    return make_post('p1', 'alice')


def test_create_and_list_comments(client, alice_post):
    for i in range(5):
        response = client.post('/api/posts/p1/comments', json={'user_id': 'bob', 'text': f"comment {i}"})
        assert response.status_code == 201

    first = client.get('/api/posts/p1/comments?limit=2').get_json()
    second = client.get(f"/api/posts/p1/comments?limit=2&cursor={first['next_cursor']}").get_json()
    third = client.get(f"/api/posts/p1/comments?limit=2&cursor={second['next_cursor']}").get_json()

    assert [len(page['comments']) for page in (first, second, third)] == [2, 2, 1]
    assert [page['has_more'] for page in (first, second, third)] == [True, True, False]
    assert first['comments'][0]['text'] == 'comment 4'
    assert first['comments'][0]['user'] == {
        'user_id': 'bob',
        'username': 'bob',
        'profile_image_url': 'https://cdn.skigram.test/bob.jpg',
    }


def test_create_comment_validation(client, alice_post):
    assert client.post('/api/posts/p1/comments', json={'user_id': 'bob', 'text': ''}).status_code == 400
    assert client.post('/api/posts/p1/comments', json={'user_id': 'bob', 'text': 'x' * 1001}).status_code == 400
    assert client.post('/api/posts/nope/comments', json={'user_id': 'bob', 'text': 'hi'}).status_code == 404


def test_delete_comment_permissions(client, db, alice_post):
    comment_id = client.post('/api/posts/p1/comments', json={'user_id': 'bob', 'text': 'hi'}).get_json()['comment_id']

    assert client.delete(f"/api/posts/p1/comments/{comment_id}", json={'user_id': 'carol'}).status_code == 403
    # 게시물 작성자는 다른 사람의 댓글도 지울 수 있음
    assert client.delete(f"/api/posts/p1/comments/{comment_id}", json={'user_id': 'alice'}).status_code == 204
    assert db.data('comments', comment_id) is None
    assert client.delete(f"/api/posts/p1/comments/{comment_id}", json={'user_id': 'alice'}).status_code == 404


def test_delete_comment_of_other_post(client, make_post, alice_post):
    make_post('p2', 'alice')
    comment_id = client.post('/api/posts/p1/comments', json={'user_id': 'bob', 'text': 'hi'}).get_json()['comment_id']

    response = client.delete(f"/api/posts/p2/comments/{comment_id}", json={'user_id': 'bob'})
    assert response.status_code == 404
