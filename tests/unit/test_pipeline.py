"""영상 한 개 업로드 파이프라인 테스트."""

import asyncio
import io
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from shortsbulk.core.metadata import MetadataResolver
from shortsbulk.core.pipeline import UploadPipeline
from shortsbulk.core.validator import Validator
from shortsbulk.models.outcome import UploadFailure, UploadOutcome, UploadSuccess
from shortsbulk.models.video import PublishMetadata
from shortsbulk.utils.progress import UploadProgress, UploadProgressDisplay
from shortsbulk.youtube.auth import AuthorizedClient, AuthToken, ClientSecrets
from shortsbulk.youtube.uploader import ProgressCallback, UploadResult, YouTubeUploadError

AUTH = AuthorizedClient(
    token=AuthToken(access_token="access"),
    secrets=ClientSecrets(client_id="id", client_secret="secret"),
    scopes=("https://www.googleapis.com/auth/youtube.upload",),
)


class FakeUploader:
    """업로드 호출을 기록하는 가짜 업로더."""

    def __init__(self, error: Exception | None = None, delay: float = 0.0) -> None:
        self.error = error
        self.delay = delay
        self.calls: list[tuple[Path, PublishMetadata]] = []

    async def upload_async(
        self,
        auth: AuthorizedClient,
        file_path: Path,
        metadata: PublishMetadata,
        on_progress: ProgressCallback | None = None,
    ) -> UploadResult:
        self.calls.append((file_path, metadata))
        if on_progress is not None:
            on_progress(UploadProgress(50, 100))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return UploadResult.from_video_id(f"id-{file_path.stem}", metadata.title)


@pytest.fixture
def video(temp_video_dir: Path) -> Path:
    path = temp_video_dir / "beach.mp4"
    path.write_bytes(b"fake")
    return path


def _pipeline(
    uploader: FakeUploader,
    duration: float = 30.0,
    output: io.StringIO | None = None,
    timeout_seconds: float | None = None,
    resolver: MetadataResolver | None = None,
) -> UploadPipeline:
    return UploadPipeline(
        validator=Validator(duration_probe=lambda p: duration),
        resolver=resolver or MetadataResolver(),
        uploader=uploader,
        display=UploadProgressDisplay(file=output or io.StringIO()),
        timeout_seconds=timeout_seconds,
    )


class TestUploadPipeline:
    """UploadPipeline.run 테스트."""

    def test_success(self, video: Path) -> None:
        """검증 → 메타데이터 → 업로드 성공."""
        uploader = FakeUploader()
        output = io.StringIO()

        outcome = asyncio.run(_pipeline(uploader, output=output).run(AUTH, video))

        assert outcome == UploadSuccess(path=video, video_id="id-beach")
        assert uploader.calls[0][1].title == "🔥 Amazing Short #shorts"
        assert "✅ beach.mp4 업로드 완료! (ID: id-beach)" in output.getvalue()
        assert "beach.mp4  50%" in output.getvalue()

    def test_sidecar_metadata_is_uploaded(self, video: Path) -> None:
        """사이드카 메타데이터가 업로드에 전달됨."""
        (video.parent / "beach.txt").write_text("title: Waves\nprivacy: unlisted\n")
        uploader = FakeUploader()

        asyncio.run(_pipeline(uploader).run(AUTH, video))

        metadata = uploader.calls[0][1]
        assert metadata.title == "Waves #shorts"
        assert metadata.privacy == "unlisted"

    def test_too_long_video_never_uploads(self, video: Path) -> None:
        """60초 초과 영상은 메타데이터 해석·업로드 없이 실패."""
        uploader = FakeUploader()
        resolver = MagicMock(spec=MetadataResolver)
        output = io.StringIO()

        outcome = asyncio.run(
            _pipeline(uploader, duration=75.0, output=output, resolver=resolver).run(AUTH, video)
        )

        assert isinstance(outcome, UploadFailure)
        assert "75.0s" in outcome.reason
        assert uploader.calls == []
        resolver.resolve.assert_not_called()
        assert "❌ beach.mp4 업로드 실패" in output.getvalue()

    def test_missing_file_is_failure(self, tmp_path: Path) -> None:
        """파일이 없으면 실패 결과."""
        uploader = FakeUploader()
        missing = tmp_path / "missing.mp4"

        outcome = asyncio.run(_pipeline(uploader).run(AUTH, missing))

        assert outcome == UploadFailure(path=missing, reason=f"Video file not found at {missing}")
        assert uploader.calls == []

    def test_upload_error_is_failure(self, video: Path) -> None:
        """업로드 에러는 실패 결과."""
        uploader = FakeUploader(error=YouTubeUploadError("Upload failed: 403 Forbidden"))

        outcome = asyncio.run(_pipeline(uploader).run(AUTH, video))

        assert isinstance(outcome, UploadFailure)
        assert outcome.reason == "Upload failed: 403 Forbidden"

    def test_unexpected_error_is_failure(
        self, video: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """예상하지 못한 예외도 실패 결과로 변환."""
        uploader = FakeUploader(error=KeyError("id"))

        outcome = asyncio.run(_pipeline(uploader).run(AUTH, video))

        assert isinstance(outcome, UploadFailure)
        assert "unexpected error" in outcome.reason
        assert "Unexpected error while uploading beach.mp4" in caplog.text

    def test_timeout_is_failure(self, video: Path) -> None:
        """제한 시간 초과는 실패 결과."""
        uploader = FakeUploader(delay=1.0)

        outcome = asyncio.run(_pipeline(uploader, timeout_seconds=0.01).run(AUTH, video))

        assert isinstance(outcome, UploadFailure)
        assert "timed out" in outcome.reason

    def test_resolver_error_is_failure(self, video: Path) -> None:
        """검증 이후 메타데이터 단계 예외도 실패 결과로 변환."""
        uploader = FakeUploader()
        resolver = MagicMock(spec=MetadataResolver)
        resolver.resolve.side_effect = PermissionError("denied")

        outcome = asyncio.run(_pipeline(uploader, resolver=resolver).run(AUTH, video))

        assert outcome == UploadFailure(path=video, reason="denied")
        assert uploader.calls == []

    def test_uploader_timeout_without_limit_is_failure(self, video: Path) -> None:
        """제한 시간이 없을 때 업로더가 던진 TimeoutError도 실패 결과."""
        uploader = FakeUploader(error=TimeoutError("read timed out"))

        outcome = asyncio.run(_pipeline(uploader).run(AUTH, video))

        assert outcome == UploadFailure(path=video, reason="timed out: read timed out")

    def test_duration_permission_error_is_failure(self, video: Path) -> None:
        """길이 조회 권한 오류는 업로드 없이 실패 결과."""
        uploader = FakeUploader()
        output = io.StringIO()

        def denied_duration(path: Path) -> float:
            raise PermissionError("denied")

        pipeline = UploadPipeline(
            validator=Validator(duration_probe=denied_duration),
            resolver=MetadataResolver(),
            uploader=uploader,
            display=UploadProgressDisplay(file=output),
        )

        outcome = asyncio.run(pipeline.run(AUTH, video))

        assert isinstance(outcome, UploadFailure)
        assert "denied" in outcome.reason
        assert uploader.calls == []
        assert "❌ beach.mp4 업로드 실패" in output.getvalue()

    def test_prevalidated_item_is_not_measured_again(self, video: Path) -> None:
        """검증된 항목을 넘기면 다시 길이를 조회하지 않음."""
        uploader = FakeUploader()
        measure = MagicMock(return_value=30.0)
        pipeline = UploadPipeline(
            validator=Validator(duration_probe=measure),
            resolver=MetadataResolver(),
            uploader=uploader,
            display=UploadProgressDisplay(file=io.StringIO()),
        )

        async def run() -> UploadOutcome:
            checked = await pipeline.check(video)
            assert not isinstance(checked, UploadFailure)
            return await pipeline.run(AUTH, video, item=checked)

        outcome = asyncio.run(run())

        assert outcome == UploadSuccess(path=video, video_id="id-beach")
        measure.assert_called_once_with(video)
