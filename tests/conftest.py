"""pytest 설정 및 공통 fixture."""

import json
import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from shortsbulk.config import UploaderSettings

ENV_PREFIX = "SHORTSBULK_"


@pytest.fixture(autouse=True)
def isolate_environment(tmp_path: Path) -> Generator[None]:
    """
    테스트용 환경 변수 격리.

    실행 환경의 ``SHORTSBULK_*`` 값을 모두 지우고
    ``SHORTSBULK_HOME`` 을 임시 디렉토리로 지정한 뒤, 테스트 후 복원한다.
    """
    saved = {key: value for key, value in os.environ.items() if key.startswith(ENV_PREFIX)}
    for key in saved:
        del os.environ[key]
    os.environ["SHORTSBULK_HOME"] = str(tmp_path / "home")

    yield

    for key in [k for k in os.environ if k.startswith(ENV_PREFIX)]:
        del os.environ[key]
    os.environ.update(saved)


@pytest.fixture
def temp_video_dir(tmp_path: Path) -> Path:
    """
    테스트용 임시 비디오 디렉토리.

    테스트 비디오 파일을 생성할 디렉토리입니다.
    """
    video_dir = tmp_path / "videos"
    video_dir.mkdir()
    return video_dir


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """자격 증명·토큰 파일용 임시 설정 디렉토리."""
    path = tmp_path / "config"
    path.mkdir()
    return path


@pytest.fixture
def settings(config_dir: Path) -> UploaderSettings:
    """임시 설정 디렉토리 기반 실행 설정 (배치 대기 없음)."""
    return UploaderSettings.in_dir(config_dir, batch_delay_seconds=0.0)


@pytest.fixture
def client_secrets_file(config_dir: Path) -> Path:
    """installed 형식 credentials.json."""
    path = config_dir / "credentials.json"
    path.write_text(
        json.dumps(
            {
                "installed": {
                    "client_id": "test-client-id",
                    "client_secret": "test-client-secret",
                    "redirect_uris": ["http://localhost:8080"],
                    "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                    "token_uri": "https://oauth2.googleapis.com/token",
                }
            }
        )
    )
    return path


@pytest.fixture
def make_videos(temp_video_dir: Path) -> Callable[..., list[Path]]:
    """``clip_NN`` 이름의 가짜 영상 파일 생성 함수."""

    def _make(count: int, suffix: str = ".mp4") -> list[Path]:
        paths = []
        for i in range(count):
            path = temp_video_dir / f"clip_{i:02d}{suffix}"
            path.write_bytes(b"fake video content")
            paths.append(path)
        return paths

    return _make
