# skigram/utils/text_utils.py

PREVIEW_MAX_LENGTH = 50
ELLIPSIS = "..."


def truncate_preview(text: str, max_length: int = PREVIEW_MAX_LENGTH) -> str:
    """
    알림에 저장할 미리보기 텍스트를 만듭니다.
    max_length를 넘으면 말줄임표를 포함해 정확히 max_length 글자가 되도록 자릅니다.
    """
    if text is None:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length - len(ELLIPSIS)] + ELLIPSIS
