# skigram/api/users/test_user_routes.py
"""
사용자 프로필, 팔로우 API 테스트

사용법: python -m pytest skigram/api/users/test_user_routes.py -v
"""

import pytest


@pytest.fixture()
def users(make_user):
    make_user('a', fcm_token='a-token')
    make_user('b')
    make_user('c')


def test_profile_hides_private_fields(client, users):
    response = client.get('/api/users/a')

    assert response.status_code == 200
    body = response.get_json()
    assert body['user_id'] == 'a'
    assert body['ski_stats'] == {'resort_count': 0}
    assert 'email' not in body
    assert 'fcm_token' not in body

    assert client.get('/api/users/nobody').status_code == 404


def test_follow_and_unfollow(client, db, users):
    response = client.post('/api/users/b/follow', json={'user_id': 'a'})
    assert response.status_code == 201
    assert response.get_json()['follow_id'] == 'a_b'

    assert client.post('/api/users/b/follow', json={'user_id': 'a'}).status_code == 409
    assert client.post('/api/users/a/follow', json={'user_id': 'a'}).status_code == 400
    assert client.post('/api/users/nobody/follow', json={'user_id': 'a'}).status_code == 404

    assert client.delete('/api/users/b/follow', json={'user_id': 'a'}).status_code == 204
    assert db.all('follows') == {}
    assert client.delete('/api/users/b/follow', json={'user_id': 'a'}).status_code == 404


def test_follower_and_following_lists(client, users):
    client.post('/api/users/a/follow', json={'user_id': 'b'})
    client.post('/api/users/a/follow', json={'user_id': 'c'})
    client.post('/api/users/c/follow', json={'user_id': 'a'})

    followers = client.get('/api/users/a/followers?limit=1').get_json()
    assert [f['follower_id'] for f in followers['followers']] == ['c']
    assert followers['has_more'] is True
    assert followers['followers'][0]['user']['user_id'] == 'c'

    rest = client.get(f"/api/users/a/followers?limit=1&cursor={followers['next_cursor']}").get_json()
    assert [f['follower_id'] for f in rest['followers']] == ['b']

    following = client.get('/api/users/a/following').get_json()
    assert [f['following_id'] for f in following['following']] == ['c']
    assert following['has_more'] is False
