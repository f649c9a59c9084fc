"""영상 한 개의 업로드 파이프라인.

파이프라인 흐름::

    Validator.validate → MetadataResolver.resolve → YouTubeUploader.upload_async

모든 실패는 :class:`~shortsbulk.models.outcome.UploadFailure` 값으로 바뀌며
파이프라인 밖으로 예외가 나가지 않는다.
"""

import asyncio
import functools
import logging
from pathlib import Path
from typing import Protocol

from shortsbulk.core.metadata import MetadataResolver
from shortsbulk.core.validator import ValidationError, Validator
from shortsbulk.models.outcome import UploadFailure, UploadOutcome, UploadSuccess
from shortsbulk.models.video import PublishMetadata, VideoItem
from shortsbulk.utils.progress import UploadProgressDisplay, format_size
from shortsbulk.youtube.auth import AuthorizedClient
from shortsbulk.youtube.uploader import ProgressCallback, UploadResult, YouTubeUploadError

logger = logging.getLogger(__name__)


class Uploader(Protocol):
    """원격 업로드 기능 (완료 값 하나 + 진행률 콜백)."""

    async def upload_async(
        self,
        auth: AuthorizedClient,
        file_path: Path,
        metadata: PublishMetadata,
        on_progress: ProgressCallback | None = None,
    ) -> UploadResult: ...


class UploadPipeline:
    """검증 → 메타데이터 → 업로드를 한 영상 단위로 실행."""

    def __init__(
        self,
        validator: Validator,
        resolver: MetadataResolver,
        uploader: Uploader,
        display: UploadProgressDisplay | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        """
        초기화.

        Args:
            validator: Shorts 조건 검증기
            resolver: 게시 메타데이터 해석기
            uploader: 원격 업로드 기능
            display: 진행률 표시 (None이면 stdout)
            timeout_seconds: 영상별 업로드 제한 시간 (None이면 무제한)
        """
        self.validator = validator
        self.resolver = resolver
        self.uploader = uploader
        self.display = display or UploadProgressDisplay()
        self.timeout_seconds = timeout_seconds

    async def check(self, video_path: Path) -> VideoItem | UploadFailure:
        """
        Shorts 조건 검증 (실패 시 결과 줄 출력).

        Returns:
            검증된 VideoItem 또는 UploadFailure
        """
        try:
            return await self.validator.validate(video_path)
        except ValidationError as e:
            logger.warning(f"Shorts validation failed for {video_path.name}: {e}")
            return self._failed(video_path, str(e))

    async def run(
        self, auth: AuthorizedClient, video_path: Path, item: VideoItem | None = None
    ) -> UploadOutcome:
        """
        영상 하나 업로드.

        Args:
            auth: 공유 인증 핸들 (읽기 전용)
            video_path: 영상 경로
            item: 이미 검증된 항목 (None이면 여기서 검증)

        Returns:
            UploadSuccess 또는 UploadFailure
        """
        name = video_path.name

        if item is None:
            checked = await self.check(video_path)
            if isinstance(checked, UploadFailure):
                return checked
            item = checked

        try:
            logger.info(
                f"Validated {name}: {item.duration_seconds:.1f}s, {format_size(item.size_bytes)}"
            )
            metadata = self.resolver.resolve(video_path)
            result = await self._upload(auth, video_path, metadata)
        except TimeoutError as e:
            if self.timeout_seconds is None:
                logger.error(f"YouTube upload failed for {name}: {e}")
                return self._failed(video_path, f"timed out: {e}")
            logger.error(f"Upload of {name} timed out after {self.timeout_seconds}s")
            return self._failed(video_path, f"timed out after {self.timeout_seconds:g}s")
        except (YouTubeUploadError, OSError) as e:
            logger.error(f"YouTube upload failed for {name}: {e}")
            return self._failed(video_path, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error while uploading {name}: {e}")
            return self._failed(video_path, f"unexpected error: {e}")

        self.display.succeed(name, result.video_id)
        return UploadSuccess(path=video_path, video_id=result.video_id)

    async def _upload(
        self, auth: AuthorizedClient, video_path: Path, metadata: PublishMetadata
    ) -> UploadResult:
        """진행률 표시를 연결해 업로드 (제한 시간 적용)."""
        self.display.start(video_path.name)
        upload = self.uploader.upload_async(
            auth,
            video_path,
            metadata,
            functools.partial(self.display.update, video_path.name),
        )
        if self.timeout_seconds is None:
            return await upload
        return await asyncio.wait_for(upload, self.timeout_seconds)

    def _failed(self, video_path: Path, reason: str) -> UploadFailure:
        self.display.fail(video_path.name, reason)
        return UploadFailure(path=video_path, reason=reason)
