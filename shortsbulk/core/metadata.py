"""사이드카 텍스트 파일 기반 게시 메타데이터 해석.

영상마다 다음 순서로 메타데이터 파일을 찾고, 처음으로 읽을 수 있는 파일의
``key: value`` 값을 기본값 위에 덮어쓴다.

1. 전역 메타데이터 파일 (``~/.shortsbulk/details.txt``)
2. 영상과 같은 디렉토리의 ``details.txt``
3. 영상 이름과 같은 ``<stem>.txt``

해석이 끝나면 제목에 ``#shorts`` 태그가 반드시 들어가도록 보정한다.
"""

import dataclasses
import logging
from pathlib import Path

from shortsbulk.models.video import PublishMetadata

logger = logging.getLogger(__name__)

METADATA_FILENAME = "details.txt"
SHORTS_TAG = "#shorts"
# "#short" 는 "#shorts" 도 포함한다
SHORTS_MARKERS = ("#shorts", "#short")
VALID_PRIVACY = frozenset({"public", "unlisted", "private"})

DEFAULT_METADATA = PublishMetadata(
    title="🔥 Amazing Short #shorts",
    description="Check out this Short!\n#shorts #shortvideo #trending",
    tags=("shorts", "shortvideo", "viral"),
    category="22",
    privacy="public",
    made_for_kids=False,
)


class MetadataParseError(Exception):
    """메타데이터 파일을 읽거나 해석할 수 없을 때 발생하는 예외."""

    pass


def has_shorts_marker(title: str) -> bool:
    """제목에 Shorts 태그(``#shorts`` / ``#short``)가 있는지 확인 (대소문자 구분)."""
    return any(marker in title for marker in SHORTS_MARKERS)


def ensure_shorts_tag(title: str) -> str:
    """
    제목에 Shorts 태그가 없으면 ``" #shorts"`` 를 덧붙인다.

    이미 태그가 있으면 그대로 반환하므로 여러 번 적용해도 결과가 같다.

    Args:
        title: 원본 제목

    Returns:
        Shorts 태그가 보장된 제목
    """
    if has_shorts_marker(title):
        return title
    if not title:
        return SHORTS_TAG
    return f"{title} {SHORTS_TAG}"


def parse_metadata_text(content: str) -> dict[str, object]:
    """
    ``key: value`` 형식 텍스트에서 인식 가능한 필드만 추출한다.

    키는 대소문자를 구분하지 않으며, 첫 번째 ``:`` 에서만 나눈다.
    ``:`` 가 없는 줄과 알 수 없는 키는 무시한다.

    Args:
        content: 메타데이터 파일 내용

    Returns:
        PublishMetadata 필드명 → 값 (발견된 필드만)
    """
    overrides: dict[str, object] = {}

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or ":" not in line:
            continue

        key, _, value = line.partition(":")
        key = key.strip().lower()
        value = value.strip()

        if key == "title":
            overrides["title"] = value
        elif key == "description":
            overrides["description"] = value
        elif key == "tags":
            overrides["tags"] = tuple(tag.strip() for tag in value.split(",") if tag.strip())
        elif key == "category":
            overrides["category"] = value
        elif key == "privacy":
            privacy = value.lower()
            if privacy in VALID_PRIVACY:
                overrides["privacy"] = privacy
            else:
                logger.warning(f"Ignoring unknown privacy value: {value!r}")
        elif key == "made for kids":
            overrides["made_for_kids"] = value.lower() == "true"

    return overrides


def read_metadata_file(path: Path) -> dict[str, object]:
    """
    메타데이터 파일을 UTF-8로 읽어 필드를 추출한다.

    Args:
        path: 메타데이터 파일 경로

    Returns:
        인식된 필드 딕셔너리

    Raises:
        MetadataParseError: 파일을 읽거나 디코딩할 수 없을 때
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MetadataParseError(f"Cannot read metadata file {path}: {e}") from e
    return parse_metadata_text(content)


class MetadataResolver:
    """영상별 게시 메타데이터 해석기.

    ``resolve`` 는 실패하지 않는다. 읽을 수 없는 파일은 경고를 남기고 건너뛰며,
    쓸 수 있는 파일이 없으면 기본 메타데이터를 사용한다.
    """

    def __init__(
        self,
        global_metadata_path: Path | None = None,
        defaults: PublishMetadata = DEFAULT_METADATA,
    ) -> None:
        """
        초기화.

        Args:
            global_metadata_path: 모든 영상에 공통으로 우선 적용할 파일
            defaults: 파일이 없을 때 사용할 기본 메타데이터
        """
        self.global_metadata_path = global_metadata_path
        self.defaults = defaults

    def candidates(self, video_path: Path) -> list[Path]:
        """우선순위 순 메타데이터 파일 후보."""
        paths: list[Path] = []
        if self.global_metadata_path is not None:
            paths.append(self.global_metadata_path)
        paths.append(video_path.parent / METADATA_FILENAME)
        paths.append(video_path.parent / f"{video_path.stem}.txt")
        return paths

    def resolve(self, video_path: Path) -> PublishMetadata:
        """
        영상의 게시 메타데이터 결정.

        Args:
            video_path: 영상 파일 경로

        Returns:
            기본값 < 사이드카 파일 < Shorts 태그 보정 순으로 합쳐진 메타데이터
        """
        metadata = self.defaults

        for candidate in self.candidates(video_path):
            try:
                if not candidate.is_file():
                    continue
                overrides = read_metadata_file(candidate)
            except OSError as e:
                logger.warning(f"Cannot access metadata file {candidate}: {e}; trying next")
                continue
            except MetadataParseError as e:
                logger.warning(f"{e}; trying next metadata source")
                continue

            logger.debug(f"Metadata for {video_path.name} from {candidate}")
            metadata = dataclasses.replace(self.defaults, **overrides)  # type: ignore[arg-type]
            break

        return dataclasses.replace(metadata, title=ensure_shorts_tag(metadata.title))
