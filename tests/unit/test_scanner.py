"""영상 파일 스캐너 테스트."""

from pathlib import Path
from unittest.mock import patch

import pytest

from shortsbulk.core.scanner import find_video_files, is_video_file


class TestScanner:
    """find_video_files 테스트."""

    def test_finds_supported_extensions(self, temp_video_dir: Path) -> None:
        """지원 확장자만 수집 (대소문자 무시)."""
        for name in ["a.mp4", "b.MOV", "c.avi", "d.mkv", "notes.txt", "e.webm"]:
            (temp_video_dir / name).write_bytes(b"x")

        videos = find_video_files(temp_video_dir)

        assert [v.name for v in videos] == ["a.mp4", "b.MOV", "c.avi", "d.mkv"]

    def test_sorted_by_name(self, temp_video_dir: Path) -> None:
        """이름 순 정렬."""
        for name in ["c.mp4", "a.mp4", "b.mp4"]:
            (temp_video_dir / name).write_bytes(b"x")

        assert [v.name for v in find_video_files(temp_video_dir)] == ["a.mp4", "b.mp4", "c.mp4"]

    def test_not_recursive(self, temp_video_dir: Path) -> None:
        """하위 디렉토리는 탐색하지 않음."""
        nested = temp_video_dir / "nested"
        nested.mkdir()
        (nested / "deep.mp4").write_bytes(b"x")
        (temp_video_dir / "top.mp4").write_bytes(b"x")

        assert [v.name for v in find_video_files(temp_video_dir)] == ["top.mp4"]

    def test_directory_named_like_video_is_skipped(self, temp_video_dir: Path) -> None:
        """확장자가 같은 디렉토리는 제외."""
        (temp_video_dir / "folder.mp4").mkdir()

        assert find_video_files(temp_video_dir) == []

    def test_unreadable_directory_returns_empty(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """읽기 실패 시 에러 로그 후 빈 리스트."""
        with patch.object(Path, "iterdir", side_effect=PermissionError("denied")):
            assert find_video_files(tmp_path) == []

        assert "Error reading directory" in caplog.text

    def test_custom_extensions(self, temp_video_dir: Path) -> None:
        """허용 확장자 지정."""
        (temp_video_dir / "a.mp4").write_bytes(b"x")
        (temp_video_dir / "b.webm").write_bytes(b"x")

        videos = find_video_files(temp_video_dir, extensions={".webm"})

        assert [v.name for v in videos] == ["b.webm"]


class TestIsVideoFile:
    """is_video_file 테스트."""

    def test_uppercase_extension(self) -> None:
        """대문자 확장자도 인식."""
        assert is_video_file(Path("CLIP.MP4"))

    def test_other_extension(self) -> None:
        """지원하지 않는 확장자."""
        assert not is_video_file(Path("photo.jpg"))
