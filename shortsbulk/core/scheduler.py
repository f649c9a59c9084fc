"""고정 크기 배치 단위 업로드 스케줄러.

항목을 ``batch_size`` 개씩 연속된 그룹으로 나누고, 그룹 안에서는 동시에
실행한 뒤 모두 끝날 때까지 기다린다. 다음 그룹 전에는 고정 시간만큼 쉰다
(마지막 그룹 뒤에는 쉬지 않음). 한 항목의 실패는 다른 항목에 영향을 주지 않는다.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from shortsbulk.config import DEFAULT_BATCH_DELAY_SECONDS, DEFAULT_BATCH_SIZE
from shortsbulk.models.outcome import UploadFailure, UploadOutcome

logger = logging.getLogger(__name__)

PipelineFactory = Callable[[Path], Awaitable[UploadOutcome]]


@dataclass(frozen=True)
class BatchPlan:
    """입력 순서를 유지한 배치 분할 결과.

    Attributes:
        batches: 연속된 항목 그룹 (마지막 그룹은 더 작을 수 있음)
    """

    batches: tuple[tuple[Path, ...], ...]

    @classmethod
    def from_items(cls, items: Sequence[Path], batch_size: int) -> "BatchPlan":
        """
        항목 목록을 ``batch_size`` 개씩 분할.

        Args:
            items: 업로드할 항목 (입력 순서 유지)
            batch_size: 그룹 최대 크기

        Returns:
            BatchPlan

        Raises:
            ValueError: batch_size < 1
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1: {batch_size}")
        return cls(
            batches=tuple(
                tuple(items[i : i + batch_size]) for i in range(0, len(items), batch_size)
            )
        )

    @property
    def sizes(self) -> list[int]:
        """배치별 항목 수."""
        return [len(batch) for batch in self.batches]

    def __len__(self) -> int:
        return len(self.batches)

    def __iter__(self) -> Iterator[tuple[Path, ...]]:
        return iter(self.batches)


class BatchScheduler:
    """배치 단위 동시 실행기."""

    def __init__(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
        delay_seconds: float = DEFAULT_BATCH_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        초기화.

        Args:
            batch_size: 동시에 실행할 최대 항목 수
            delay_seconds: 배치 사이 대기 시간 (초)
            sleep: 대기 함수 (테스트 주입용)
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1: {batch_size}")
        self.batch_size = batch_size
        self.delay_seconds = delay_seconds
        self.sleep = sleep

    def plan(self, items: Sequence[Path]) -> BatchPlan:
        """항목 목록의 배치 분할."""
        return BatchPlan.from_items(items, self.batch_size)

    async def run(
        self, items: Sequence[Path], pipeline_factory: PipelineFactory
    ) -> list[UploadOutcome]:
        """
        모든 항목을 배치 단위로 정확히 한 번씩 실행.

        Args:
            items: 업로드할 항목
            pipeline_factory: 항목 → 결과 awaitable

        Returns:
            항목별 결과 (입력과 같은 개수)
        """
        plan = self.plan(items)
        outcomes: list[UploadOutcome] = []

        for index, batch in enumerate(plan, start=1):
            logger.info(f"Starting batch {index}/{len(plan)} ({len(batch)} videos)")

            results = await asyncio.gather(
                *(pipeline_factory(item) for item in batch),
                return_exceptions=True,
            )

            for item, result in zip(batch, results, strict=True):
                if isinstance(result, BaseException):
                    logger.error(f"Pipeline for {item.name} raised: {result!r}")
                    outcomes.append(UploadFailure(path=item, reason=str(result) or repr(result)))
                else:
                    outcomes.append(result)

            if index < len(plan):
                logger.info(f"Waiting {self.delay_seconds:g}s before next batch")
                await self.sleep(self.delay_seconds)

        return outcomes
