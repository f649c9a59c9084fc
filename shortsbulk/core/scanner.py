"""영상 파일 스캐너.

디렉토리 바로 아래(비재귀)의 영상 파일을 찾아 이름 순으로 반환한다.

지원 확장자:
    ``VIDEO_EXTENSIONS`` 에 정의된 컨테이너
    (``.mp4``, ``.mov``, ``.avi``, ``.mkv``), 대소문자 무시
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from shortsbulk.config import VIDEO_EXTENSIONS

logger = logging.getLogger(__name__)


def is_video_file(path: Path, extensions: Iterable[str] = VIDEO_EXTENSIONS) -> bool:
    """영상 파일 여부 확인."""
    return path.suffix.lower() in {ext.lower() for ext in extensions}


def find_video_files(
    directory: Path, extensions: Iterable[str] = VIDEO_EXTENSIONS
) -> list[Path]:
    """
    디렉토리의 영상 파일 목록.

    Args:
        directory: 스캔할 디렉토리
        extensions: 허용 확장자

    Returns:
        이름 순으로 정렬된 영상 경로 (읽기 실패 시 빈 리스트)
    """
    allowed = tuple(extensions)
    try:
        entries = list(directory.iterdir())
    except OSError as e:
        logger.error(f"Error reading directory {directory}: {e}")
        return []

    videos = [path for path in entries if path.is_file() and is_video_file(path, allowed)]
    videos.sort(key=lambda p: p.name)
    logger.debug(f"Found {len(videos)} videos in {directory}")
    return videos
