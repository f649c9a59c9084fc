"""일괄 업로드 오케스트레이터.

한 번의 실행에서 인증은 한 번만 하고, 같은 인증 핸들을 모든 영상 파이프라인이
공유한다. 인증 실패(:class:`~shortsbulk.youtube.auth.YouTubeAuthError`)만
호출자에게 전달되며, 영상별 실패는 :class:`RunSummary` 에 모인다.
"""

import functools
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from shortsbulk.config import UploaderSettings
from shortsbulk.core.metadata import MetadataResolver
from shortsbulk.core.pipeline import UploadPipeline
from shortsbulk.core.scheduler import BatchScheduler
from shortsbulk.core.validator import Validator
from shortsbulk.models.outcome import UploadFailure, UploadOutcome, UploadSuccess
from shortsbulk.utils.progress import UploadProgressDisplay
from shortsbulk.youtube.auth import AuthManager
from shortsbulk.youtube.uploader import YouTubeUploader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunSummary:
    """한 번의 실행 결과 (입력 순서 유지)."""

    outcomes: tuple[UploadOutcome, ...]

    @property
    def succeeded(self) -> list[UploadSuccess]:
        return [o for o in self.outcomes if isinstance(o, UploadSuccess)]

    @property
    def failed(self) -> list[UploadFailure]:
        return [o for o in self.outcomes if isinstance(o, UploadFailure)]

    def format(self) -> str:
        """운영자용 요약 문자열."""
        lines = [f"✨ 일괄 업로드 완료: 성공 {len(self.succeeded)} / 실패 {len(self.failed)}"]
        for success in self.succeeded:
            lines.append(f"  ✅ {success.path.name} → {success.url}")
        for failure in self.failed:
            lines.append(f"  ❌ {failure.path.name}: {failure.reason}")
        return "\n".join(lines)


class Orchestrator:
    """인증 → 스케줄러 → 요약 흐름 담당."""

    def __init__(
        self,
        auth_manager: AuthManager,
        pipeline: UploadPipeline,
        scheduler: BatchScheduler,
    ) -> None:
        self.auth_manager = auth_manager
        self.pipeline = pipeline
        self.scheduler = scheduler

    async def upload_many(self, paths: Sequence[Path]) -> RunSummary:
        """
        여러 영상을 배치 단위로 업로드.

        Args:
            paths: 업로드할 영상 경로 (입력 순서 유지)

        Returns:
            실행 요약

        Raises:
            YouTubeAuthError: 인증 실패 시
        """
        print(f"\n🚀 {len(paths)}개 영상 일괄 업로드 시작...")
        auth = self.auth_manager.authorize()

        outcomes = await self.scheduler.run(paths, functools.partial(self.pipeline.run, auth))

        summary = RunSummary(outcomes=tuple(outcomes))
        logger.info(
            f"Bulk upload finished: {len(summary.succeeded)} succeeded, "
            f"{len(summary.failed)} failed"
        )
        print(f"\n{summary.format()}")
        return summary

    async def upload_one(self, path: Path) -> RunSummary:
        """
        영상 하나 업로드 (스케줄러 없이).

        인증 전에 먼저 검증해 Shorts가 아닌 파일로 인증 절차를 시작하지 않는다.

        Raises:
            YouTubeAuthError: 인증 실패 시
        """
        checked = await self.pipeline.check(path)
        if isinstance(checked, UploadFailure):
            return RunSummary(outcomes=(checked,))

        auth = self.auth_manager.authorize()
        outcome = await self.pipeline.run(auth, path, item=checked)
        if isinstance(outcome, UploadSuccess):
            print(f"🎬 URL: {outcome.url}")
        return RunSummary(outcomes=(outcome,))


def build_orchestrator(settings: UploaderSettings) -> Orchestrator:
    """
    설정으로 기본 구성 요소를 조립.

    Args:
        settings: 실행 설정

    Returns:
        Orchestrator
    """
    pipeline = UploadPipeline(
        validator=Validator(max_duration_seconds=settings.max_duration_seconds),
        resolver=MetadataResolver(global_metadata_path=settings.metadata_path),
        uploader=YouTubeUploader(chunk_mb=settings.chunk_mb),
        display=UploadProgressDisplay(),
        timeout_seconds=settings.item_timeout_seconds,
    )
    scheduler = BatchScheduler(
        batch_size=settings.batch_size,
        delay_seconds=settings.batch_delay_seconds,
    )
    return Orchestrator(AuthManager(settings), pipeline, scheduler)
