"""업로드 대상 영상과 게시 메타데이터 도메인 모델.

클래스:
    - :class:`VideoItem`: 업로드 후보 영상 (길이·크기는 최초 접근 시 계산)
    - :class:`PublishMetadata`: YouTube 게시용 제목·설명·태그·공개 설정
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Any

from shortsbulk.ffmpeg.probe import probe_duration


@dataclass(frozen=True)
class VideoItem:
    """업로드 후보 영상 파일.

    ``duration_seconds`` 와 ``size_bytes`` 는 처음 접근할 때 한 번만 계산된다.

    Attributes:
        path: 영상 파일 경로
        duration_probe: 길이 조회 함수 (기본: ffprobe)
    """

    path: Path
    duration_probe: Callable[[Path], float] = field(
        default=probe_duration, repr=False, compare=False
    )

    @property
    def name(self) -> str:
        """파일명."""
        return self.path.name

    @cached_property
    def duration_seconds(self) -> float:
        """영상 길이 (초). 조회 실패 시 ``ProbeError``."""
        return self.duration_probe(self.path)

    @cached_property
    def size_bytes(self) -> int:
        """파일 크기 (바이트)."""
        return self.path.stat().st_size


@dataclass(frozen=True)
class PublishMetadata:
    """YouTube 게시 메타데이터.

    Attributes:
        title: 영상 제목 (해석 후 항상 ``#shorts`` 계열 태그 포함)
        description: 영상 설명
        tags: 태그 목록 (순서 유지)
        category: YouTube 카테고리 ID (``"22"`` = People & Blogs)
        privacy: 공개 설정 (public, unlisted, private)
        made_for_kids: 아동용 콘텐츠 자체 선언 여부
    """

    title: str
    description: str
    tags: tuple[str, ...]
    category: str
    privacy: str
    made_for_kids: bool = False

    def to_request_body(self) -> dict[str, Any]:
        """``videos.insert`` 요청 body (snippet + status)."""
        return {
            "snippet": {
                "title": self.title,
                "description": self.description,
                "tags": list(self.tags),
                "categoryId": self.category,
            },
            "status": {
                "privacyStatus": self.privacy,
                "selfDeclaredMadeForKids": self.made_for_kids,
            },
        }
