"""영상별 업로드 결과 모델.

업로드 시도는 예외 대신 항상 값으로 끝난다.

클래스:
    - :class:`UploadSuccess`: 업로드 완료 (YouTube 영상 ID 포함)
    - :class:`UploadFailure`: 검증·업로드 실패 (사유 포함)
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class UploadSuccess:
    """업로드 성공 결과.

    Attributes:
        path: 업로드한 영상 경로
        video_id: YouTube 영상 ID
    """

    path: Path
    video_id: str

    @property
    def ok(self) -> bool:
        """성공 여부."""
        return True

    @property
    def url(self) -> str:
        """Shorts 시청 URL."""
        return f"https://youtube.com/shorts/{self.video_id}"


@dataclass(frozen=True)
class UploadFailure:
    """업로드 실패 결과.

    Attributes:
        path: 실패한 영상 경로
        reason: 실패 사유 (운영자에게 그대로 표시)
    """

    path: Path
    reason: str

    @property
    def ok(self) -> bool:
        """성공 여부."""
        return False


UploadOutcome = UploadSuccess | UploadFailure
