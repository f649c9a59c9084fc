"""YouTube Resumable Upload API를 통한 Shorts 업로드.

청크 단위 업로드(resumable upload)를 워커 스레드에서 실행하고,
결과는 awaitable 한 번의 완료 값으로, 진행률은 별도 콜백으로 전달한다.
"""

from __future__ import annotations

import asyncio
import logging
import re
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload

from shortsbulk.config import DEFAULT_CHUNK_MB, MAX_CHUNK_MB, MIN_CHUNK_MB
from shortsbulk.models.video import PublishMetadata
from shortsbulk.utils.progress import UploadProgress
from shortsbulk.youtube.auth import AuthorizedClient, build_youtube_service

if TYPE_CHECKING:
    from googleapiclient._apis.youtube.v3 import YouTubeResource

logger = logging.getLogger(__name__)

# YouTube description 제한
YOUTUBE_MAX_DESCRIPTION_LENGTH = 5000
# YouTube description에서 허용되지 않는 문자 패턴
_INVALID_DESCRIPTION_CHARS = re.compile(r"[<>]")

# 재시도 가능한 HTTP 상태 코드
RETRIABLE_STATUS_CODES = [500, 502, 503, 504]

# 최대 재시도 횟수
MAX_RETRIES = 10

ProgressCallback = Callable[[UploadProgress], None]


def sanitize_description(description: str) -> str:
    """YouTube description을 API 제한에 맞게 정제한다.

    - ``<`` / ``>`` 등 허용되지 않는 문자를 제거한다.
    - 5000자 초과 시 마지막 완전한 줄까지만 유지하고 말줄임 표시를 추가한다.

    Args:
        description: 원본 설명 문자열.

    Returns:
        정제된 설명 문자열.
    """
    cleaned = _INVALID_DESCRIPTION_CHARS.sub("", description)

    if len(cleaned) <= YOUTUBE_MAX_DESCRIPTION_LENGTH:
        return cleaned

    # 말줄임 표시를 위한 여유 확보
    truncation_marker = "\n\n..."
    budget = YOUTUBE_MAX_DESCRIPTION_LENGTH - len(truncation_marker)

    # 마지막 완전한 줄 경계에서 자르기
    truncated = cleaned[:budget]
    last_newline = truncated.rfind("\n")
    if last_newline > 0:
        truncated = truncated[:last_newline]

    logger.warning(
        "YouTube description truncated: %d -> %d chars",
        len(cleaned),
        len(truncated) + len(truncation_marker),
    )
    return truncated + truncation_marker


def get_chunk_size(chunk_mb: int = DEFAULT_CHUNK_MB) -> int:
    """
    청크 크기 결정 (바이트 단위, 1-256MB 범위로 제한).

    Args:
        chunk_mb: MB 단위 청크 크기

    Returns:
        바이트 단위 청크 크기
    """
    if chunk_mb < MIN_CHUNK_MB:
        logger.warning(f"Chunk size {chunk_mb}MB too small, using {MIN_CHUNK_MB}MB")
        chunk_mb = MIN_CHUNK_MB
    elif chunk_mb > MAX_CHUNK_MB:
        logger.warning(f"Chunk size {chunk_mb}MB too large, using {MAX_CHUNK_MB}MB")
        chunk_mb = MAX_CHUNK_MB

    return chunk_mb * 1024 * 1024


class YouTubeUploadError(Exception):
    """YouTube 업로드 실패 시 발생하는 예외."""

    pass


@dataclass
class UploadResult:
    """업로드 완료 결과 (YouTube 영상 ID, URL, 제목)."""

    video_id: str
    url: str
    title: str

    @classmethod
    def from_video_id(cls, video_id: str, title: str) -> UploadResult:
        """
        video_id로 UploadResult 생성.

        Args:
            video_id: YouTube 영상 ID
            title: 영상 제목

        Returns:
            UploadResult 인스턴스
        """
        return cls(video_id=video_id, url=f"https://youtube.com/shorts/{video_id}", title=title)


class YouTubeUploader:
    """YouTube Resumable Upload 클라이언트.

    업로드마다 새 API 서비스를 만든다 (httplib2 연결은 스레드 간 공유 불가).
    """

    def __init__(
        self,
        chunk_mb: int = DEFAULT_CHUNK_MB,
        service_factory: Callable[[AuthorizedClient], YouTubeResource] = build_youtube_service,
    ) -> None:
        """
        초기화.

        Args:
            chunk_mb: 업로드 청크 크기 (MB)
            service_factory: 인증 핸들 → YouTube API 서비스
        """
        self.chunk_size = get_chunk_size(chunk_mb)
        self.service_factory = service_factory

    def upload(
        self,
        auth: AuthorizedClient,
        file_path: Path,
        metadata: PublishMetadata,
        on_progress: ProgressCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> UploadResult:
        """
        영상 업로드 (블로킹).

        Args:
            auth: 인증 핸들
            file_path: 업로드할 영상 파일 경로
            metadata: 게시 메타데이터
            on_progress: 진행률 콜백 (전송 바이트 / 전체 바이트)
            cancel: 설정되면 다음 청크 전에 업로드 중단

        Returns:
            업로드 결과

        Raises:
            FileNotFoundError: 파일이 존재하지 않을 때
            YouTubeUploadError: 업로드 실패 또는 취소 시
        """
        if not file_path.exists():
            raise FileNotFoundError(f"Video file not found: {file_path}")

        logger.info(f"Uploading {file_path} to YouTube...")
        logger.info(f"  Title: {metadata.title}")
        logger.info(f"  Privacy: {metadata.privacy}")

        body = metadata.to_request_body()
        body["snippet"]["description"] = sanitize_description(metadata.description)

        total_bytes = file_path.stat().st_size
        media = MediaFileUpload(
            str(file_path),
            chunksize=self.chunk_size,
            resumable=True,
            mimetype="video/*",
        )

        service = self.service_factory(auth)
        request = service.videos().insert(
            part="snippet,status",
            body=body,
            media_body=media,
        )

        response = self._execute_upload(request, total_bytes, on_progress, cancel)

        video_id = response["id"]
        result = UploadResult.from_video_id(video_id, metadata.title)
        logger.info(f"Upload complete: {result.url}")
        return result

    async def upload_async(
        self,
        auth: AuthorizedClient,
        file_path: Path,
        metadata: PublishMetadata,
        on_progress: ProgressCallback | None = None,
    ) -> UploadResult:
        """
        영상 업로드 (awaitable).

        업로드는 워커 스레드에서 실행되고, 진행률 콜백은
        ``call_soon_threadsafe`` 로 이벤트 루프 스레드에서 호출된다.
        취소되면 워커 스레드가 현재 청크를 마치고 멈출 때까지 기다린 뒤
        ``CancelledError`` 를 다시 던진다.
        """
        loop = asyncio.get_running_loop()
        cancel = threading.Event()

        def forward(progress: UploadProgress) -> None:
            if on_progress is not None:
                loop.call_soon_threadsafe(on_progress, progress)

        worker = asyncio.ensure_future(
            asyncio.to_thread(self.upload, auth, file_path, metadata, forward, cancel)
        )
        try:
            return await asyncio.shield(worker)
        except asyncio.CancelledError:
            cancel.set()
            await asyncio.gather(worker, return_exceptions=True)
            raise

    def _execute_upload(
        self,
        request: Any,
        total_bytes: int,
        on_progress: ProgressCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> dict[str, Any]:
        """
        Resumable upload 실행.

        Args:
            request: 업로드 요청 객체
            total_bytes: 전체 파일 크기
            on_progress: 진행률 콜백
            cancel: 취소 신호 (청크 사이에서 확인)

        Returns:
            API 응답

        Raises:
            YouTubeUploadError: 업로드 실패 또는 취소 시
        """
        response: dict[str, Any] | None = None
        retries = 0

        # 시작 시 0% 표시
        if on_progress:
            on_progress(UploadProgress(0, total_bytes))

        while response is None:
            if cancel is not None and cancel.is_set():
                raise YouTubeUploadError("Upload cancelled")
            try:
                status, response = request.next_chunk()

                if status is not None:
                    progress = UploadProgress(
                        status.resumable_progress, status.total_size or total_bytes
                    )
                    logger.debug(f"Upload progress: {progress.percent}%")
                    if on_progress:
                        on_progress(progress)

            except HttpError as e:
                if e.resp.status in RETRIABLE_STATUS_CODES:
                    retries += 1
                    if retries > MAX_RETRIES:
                        raise YouTubeUploadError(
                            f"Max retries exceeded: {e.resp.status} {e.resp.reason}"
                        ) from e
                    logger.warning(
                        f"Retriable error {e.resp.status}, retry {retries}/{MAX_RETRIES}"
                    )
                    continue
                raise YouTubeUploadError(f"Upload failed: {e.resp.status} {e.resp.reason}") from e
            except OSError as e:
                raise YouTubeUploadError(f"Network error during upload: {e}") from e

        if "id" not in response:
            raise YouTubeUploadError(f"Unexpected upload response: {response}")

        # 완료 콜백
        if on_progress:
            on_progress(UploadProgress(total_bytes, total_bytes))

        return response
