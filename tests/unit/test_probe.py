"""ffprobe 길이 조회 테스트."""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from shortsbulk.ffmpeg.probe import PROBE_TIMEOUT_SECONDS, ProbeError, probe_duration


class TestProbeDuration:
    """probe_duration 단위 테스트."""

    @patch("shortsbulk.ffmpeg.probe.subprocess.run")
    def test_returns_duration_on_success(self, mock_run: MagicMock) -> None:
        """ffprobe 성공 시 올바른 duration을 반환한다."""
        mock_run.return_value = MagicMock(
            stdout=json.dumps({"format": {"duration": "42.125"}}),
        )

        result = probe_duration(Path("/fake/video.mp4"))

        assert result == pytest.approx(42.125)
        cmd = mock_run.call_args.args[0]
        assert cmd[0] == "ffprobe"
        assert "-show_format" in cmd
        assert cmd[-1] == "/fake/video.mp4"
        assert mock_run.call_args.kwargs["timeout"] == PROBE_TIMEOUT_SECONDS

    @patch("shortsbulk.ffmpeg.probe.subprocess.run")
    def test_raises_when_ffprobe_missing(self, mock_run: MagicMock) -> None:
        """ffprobe가 없으면 ProbeError."""
        mock_run.side_effect = FileNotFoundError("ffprobe")

        with pytest.raises(ProbeError, match="ffprobe not found"):
            probe_duration(Path("/fake/video.mp4"))

    @patch("shortsbulk.ffmpeg.probe.subprocess.run")
    def test_raises_on_ffprobe_failure(self, mock_run: MagicMock) -> None:
        """ffprobe 실패 시 ProbeError."""
        mock_run.side_effect = subprocess.CalledProcessError(1, "ffprobe")

        with pytest.raises(ProbeError):
            probe_duration(Path("/fake/video.mp4"))

    @patch("shortsbulk.ffmpeg.probe.subprocess.run")
    def test_raises_on_timeout(self, mock_run: MagicMock) -> None:
        """타임아웃 시 ProbeError."""
        mock_run.side_effect = subprocess.TimeoutExpired("ffprobe", PROBE_TIMEOUT_SECONDS)

        with pytest.raises(ProbeError, match="timed out"):
            probe_duration(Path("/fake/video.mp4"))

    @patch("shortsbulk.ffmpeg.probe.subprocess.run")
    def test_raises_on_invalid_json(self, mock_run: MagicMock) -> None:
        """유효하지 않은 JSON 출력은 ProbeError."""
        mock_run.return_value = MagicMock(stdout="not json")

        with pytest.raises(ProbeError):
            probe_duration(Path("/fake/video.mp4"))

    @patch("shortsbulk.ffmpeg.probe.subprocess.run")
    def test_raises_on_missing_duration(self, mock_run: MagicMock) -> None:
        """duration 필드가 없으면 ProbeError."""
        mock_run.return_value = MagicMock(
            stdout=json.dumps({"format": {"filename": "test.mp4"}}),
        )

        with pytest.raises(ProbeError):
            probe_duration(Path("/fake/video.mp4"))

    @patch("shortsbulk.ffmpeg.probe.subprocess.run")
    def test_raises_on_null_duration(self, mock_run: MagicMock) -> None:
        """duration이 null이면 ProbeError."""
        mock_run.return_value = MagicMock(stdout=json.dumps({"format": {"duration": None}}))

        with pytest.raises(ProbeError):
            probe_duration(Path("/fake/video.mp4"))

    @patch("shortsbulk.ffmpeg.probe.subprocess.run")
    def test_raises_on_non_dict_response(self, mock_run: MagicMock) -> None:
        """ffprobe 응답이 dict가 아니면 ProbeError."""
        mock_run.return_value = MagicMock(stdout=json.dumps([1, 2, 3]))

        with pytest.raises(ProbeError):
            probe_duration(Path("/fake/video.mp4"))

    @patch("shortsbulk.ffmpeg.probe.subprocess.run")
    def test_raises_when_ffprobe_not_executable(self, mock_run: MagicMock) -> None:
        """ffprobe 실행 권한이 없으면 ProbeError."""
        mock_run.side_effect = PermissionError("Permission denied: 'ffprobe'")

        with pytest.raises(ProbeError, match="Cannot run ffprobe"):
            probe_duration(Path("/fake/video.mp4"))

    @patch("shortsbulk.ffmpeg.probe.subprocess.run")
    def test_raises_on_undecodable_output(self, mock_run: MagicMock) -> None:
        """출력 디코딩 실패는 ProbeError."""
        mock_run.side_effect = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        with pytest.raises(ProbeError):
            probe_duration(Path("/fake/video.mp4"))

    @patch("shortsbulk.ffmpeg.probe.subprocess.run")
    def test_raises_on_invalid_path_argument(self, mock_run: MagicMock) -> None:
        """NUL 문자가 든 경로 등 인자 오류는 ProbeError."""
        mock_run.side_effect = ValueError("embedded null byte")

        with pytest.raises(ProbeError, match="embedded null byte"):
            probe_duration(Path("/fake/video.mp4"))
