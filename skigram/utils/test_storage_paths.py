# skigram/utils/test_storage_paths.py
"""
스토리지 경로 규칙(썸네일 파생 경로, URL -> 경로 변환) 테스트

사용법: python -m pytest skigram/utils/test_storage_paths.py -v
"""

from skigram.utils.storage_paths import split_storage_path, derivative_paths, storage_path_from_url

def test_split_storage_path():
    """디렉터리/파일명/확장자 분리 테스트"""
    assert split_storage_path('posts/u1/abc.jpg') == ('posts/u1/', 'abc', '.jpg')
    assert split_storage_path('posts/u1/photo.final.png') == ('posts/u1/', 'photo.final', '.png')
    assert split_storage_path('posts/u1/noext') == ('posts/u1/', 'noext', '')
    assert split_storage_path('abc.jpg') == ('', 'abc', '.jpg')

def test_derivative_paths():
    """썸네일 경로는 확장자 앞에 접미사가 붙어야 함"""
    assert derivative_paths('posts/u1/abc.jpg') == [
        'posts/u1/abc_thumb_small.jpg',
        'posts/u1/abc_thumb_medium.jpg',
    ]

def test_derivative_paths_without_extension():
    assert derivative_paths('posts/u1/raw') == ['posts/u1/raw_thumb_small', 'posts/u1/raw_thumb_medium']

def test_storage_path_from_firebase_download_url():
    url = ('https://firebasestorage.googleapis.com/v0/b/skigram.appspot.com/o/'
           'posts%2Fu1%2Fabc.jpg?alt=media&token=1234')
    assert storage_path_from_url(url) == 'posts/u1/abc.jpg'

def test_storage_path_from_other_references():
    assert storage_path_from_url('gs://skigram.appspot.com/posts/u1/abc.jpg') == 'posts/u1/abc.jpg'
    assert storage_path_from_url('https://storage.googleapis.com/skigram.appspot.com/posts/u1/abc.jpg') == 'posts/u1/abc.jpg'
    assert storage_path_from_url('/posts/u1/abc.jpg') == 'posts/u1/abc.jpg'

def test_storage_path_unresolvable():
    """경로를 알 수 없는 참조는 None"""
    assert storage_path_from_url('') is None
    assert storage_path_from_url('https://example.com/picture.jpg') is None
    assert storage_path_from_url('gs://bucket-only') is None
