"""업로드 진행률 표시 유틸리티."""

import sys
from dataclasses import dataclass
from typing import TextIO

from shortsbulk.utils import truncate_name


def format_size(bytes_: int) -> str:
    """
    바이트를 읽기 쉬운 형식으로 변환.

    Args:
        bytes_: 바이트 수

    Returns:
        포맷된 크기 문자열
    """
    size = float(bytes_)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024:
            if unit == "B":
                return f"{int(size)} {unit}"
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} PB"


@dataclass(frozen=True)
class UploadProgress:
    """업로드 진행 이벤트.

    Attributes:
        bytes_sent: 전송 완료 바이트
        total_bytes: 전체 바이트
    """

    bytes_sent: int
    total_bytes: int

    @property
    def percent(self) -> int:
        """진행률 (0-100)."""
        if self.total_bytes <= 0:
            return 100
        return min(100, round(self.bytes_sent / self.total_bytes * 100))


class UploadProgressDisplay:
    """동시 업로드 진행률을 한 줄로 표시.

    진행 중인 영상마다 ``이름 NN%`` 를 이어 붙여 같은 줄을 갱신하고,
    영상이 끝나면 줄을 지운 뒤 결과 한 줄을 남긴다.
    이벤트 루프 스레드에서만 호출한다.
    """

    def __init__(self, file: TextIO | None = None) -> None:
        """
        초기화.

        Args:
            file: 출력 파일 (기본: stdout)
        """
        self.file = file or sys.stdout
        self._active: dict[str, int] = {}

    def start(self, name: str) -> None:
        """업로드 시작."""
        self._active[name] = 0
        self._display()

    def update(self, name: str, progress: UploadProgress) -> None:
        """진행률 갱신 (같은 값이거나 이미 끝난 영상이면 무시)."""
        percent = progress.percent
        if name not in self._active or self._active[name] == percent:
            return
        self._active[name] = percent
        self._display()

    def succeed(self, name: str, video_id: str) -> None:
        """업로드 성공 한 줄 출력."""
        self._finish(name, f"✅ {name} 업로드 완료! (ID: {video_id})")

    def fail(self, name: str, reason: str) -> None:
        """업로드 실패 한 줄 출력."""
        self._finish(name, f"❌ {name} 업로드 실패: {reason}")

    def render(self) -> str:
        """
        진행 상태 문자열 생성.

        Returns:
            렌더링된 상태 (진행 중인 영상이 없으면 빈 문자열)
        """
        if not self._active:
            return ""
        parts = [f"{truncate_name(name)} {pct:3d}%" for name, pct in self._active.items()]
        return "📤 " + " | ".join(parts)

    def _finish(self, name: str, line: str) -> None:
        """진행 목록에서 제거하고 결과 줄을 남긴 뒤 진행 줄 복원."""
        self._active.pop(name, None)
        # 줄 전체를 지우고 다시 출력 (\033[K: 커서부터 줄 끝까지 지움)
        self.file.write(f"\r\033[K{line}\n")
        self._display()

    def _display(self) -> None:
        """화면에 출력."""
        self.file.write(f"\r\033[K{self.render()}")
        self.file.flush()
