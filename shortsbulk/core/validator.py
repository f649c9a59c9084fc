"""YouTube Shorts 업로드 전 검증.

파일 존재 여부와 영상 길이(기본 60초 이하)를 순서대로 확인한다.
길이 조회(ffprobe)는 워커 스레드에서 실행되어 다른 업로드를 막지 않는다.
"""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from shortsbulk.config import SHORTS_MAX_DURATION_SECONDS
from shortsbulk.ffmpeg.probe import ProbeError, probe_duration
from shortsbulk.models.video import VideoItem

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """업로드 전 검증 실패 시 발생하는 예외."""

    pass


class VideoNotFoundError(ValidationError):
    """영상 파일이 없음."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Video file not found at {path}")
        self.path = path


class DurationExceededError(ValidationError):
    """영상 길이가 Shorts 제한을 초과함."""

    def __init__(self, actual: float, limit: float) -> None:
        super().__init__(f"Video is {actual:.1f}s long (Shorts must be ≤{limit:g}s)")
        self.actual = actual
        self.limit = limit


class DurationProbeError(ValidationError):
    """영상 길이를 확인할 수 없음 (손상·미지원 파일, ffprobe 없음)."""

    pass


class Validator:
    """Shorts 업로드 조건 검증기."""

    def __init__(
        self,
        max_duration_seconds: float = SHORTS_MAX_DURATION_SECONDS,
        duration_probe: Callable[[Path], float] = probe_duration,
    ) -> None:
        self.max_duration_seconds = max_duration_seconds
        self.duration_probe = duration_probe

    async def validate(self, video_path: Path) -> VideoItem:
        """
        영상 파일 검증.

        Args:
            video_path: 검증할 영상 경로

        Returns:
            길이가 계산된 VideoItem

        Raises:
            VideoNotFoundError: 파일이 없을 때
            DurationProbeError: 길이 조회 실패 시
            DurationExceededError: 길이가 제한을 넘을 때
        """
        if not video_path.is_file():
            raise VideoNotFoundError(video_path)

        item = VideoItem(video_path, duration_probe=self.duration_probe)

        try:
            duration = await asyncio.to_thread(lambda: item.duration_seconds)
        except ProbeError as e:
            raise DurationProbeError(str(e)) from e
        except Exception as e:
            raise DurationProbeError(f"Unable to probe {video_path.name}: {e}") from e

        if duration > self.max_duration_seconds:
            raise DurationExceededError(duration, self.max_duration_seconds)

        logger.debug(f"Validated {video_path.name}: {duration:.1f}s")
        return item
