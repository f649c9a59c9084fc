"""TOML 설정 파일 및 환경변수 기반 실행 설정.

``~/.shortsbulk/config.toml`` 에서 사용자 설정을 로드하고,
환경변수와 기본값을 합쳐 불변 :class:`UploaderSettings` 를 만든다.
각 컴포넌트는 전역 상수 대신 이 값을 생성자로 주입받는다.

우선순위::

    CLI 옵션 > 환경변수 > config.toml > 기본값
"""

from __future__ import annotations

import logging
import math
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

# 환경변수 매핑
ENV_HOME = "SHORTSBULK_HOME"
ENV_VIDEO_DIR = "SHORTSBULK_VIDEO_DIR"
ENV_METADATA = "SHORTSBULK_METADATA"
ENV_CLIENT_SECRETS = "SHORTSBULK_CLIENT_SECRETS"
ENV_TOKEN = "SHORTSBULK_TOKEN"
ENV_TOKEN_TEXT = "SHORTSBULK_TOKEN_TEXT"
ENV_BATCH_SIZE = "SHORTSBULK_BATCH_SIZE"
ENV_BATCH_DELAY = "SHORTSBULK_BATCH_DELAY"
ENV_ITEM_TIMEOUT = "SHORTSBULK_ITEM_TIMEOUT"
ENV_UPLOAD_CHUNK_MB = "SHORTSBULK_UPLOAD_CHUNK_MB"

# Termux(Android) 기본 카메라 폴더
TERMUX_STORAGE = Path("/storage/emulated/0")
DEFAULT_VIDEO_DIR = TERMUX_STORAGE / "DCIM"

# YouTube Shorts 제한 및 업로드 기본값
SHORTS_MAX_DURATION_SECONDS = 60.0
DEFAULT_BATCH_SIZE = 3
DEFAULT_BATCH_DELAY_SECONDS = 5.0
DEFAULT_CHUNK_MB = 32
MIN_CHUNK_MB = 1
MAX_CHUNK_MB = 256

# 업로드 전용 OAuth 스코프
SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/youtube.upload",)

VIDEO_EXTENSIONS = frozenset({".mp4", ".mov", ".avi", ".mkv"})

CLIENT_SECRETS_FILENAME = "credentials.json"
TOKEN_JSON_FILENAME = "token.json"
TOKEN_TEXT_FILENAME = "token.txt"
METADATA_FILENAME = "details.txt"


@dataclass(frozen=True)
class GeneralConfig:
    """``config.toml`` 의 ``[general]`` 섹션.

    모든 필드가 ``None`` 이면 해당 옵션은 환경변수 또는 기본값을 사용한다.
    """

    video_dir: str | None = None
    metadata_file: str | None = None
    batch_size: int | None = None
    batch_delay: float | None = None
    item_timeout: float | None = None


@dataclass(frozen=True)
class YouTubeConfig:
    """``config.toml`` 의 ``[youtube]`` 섹션.

    OAuth 자격 증명 경로와 업로드 청크 크기를 관리한다.
    """

    client_secrets: str | None = None
    token: str | None = None
    token_text: str | None = None
    upload_chunk_mb: int | None = None


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 전체 설정 (``[general]`` + ``[youtube]`` 통합)."""

    general: GeneralConfig = field(default_factory=GeneralConfig)
    youtube: YouTubeConfig = field(default_factory=YouTubeConfig)


@dataclass(frozen=True)
class UploaderSettings:
    """한 번의 실행 동안 변하지 않는 업로더 설정.

    Attributes:
        config_dir: 자격 증명·메타데이터 기본 위치 (``~/.shortsbulk``)
        default_video_dir: 경로 인자가 없을 때 사용할 영상 폴더
        metadata_path: 모든 영상에 공통 적용되는 메타데이터 파일
        client_secrets_path: OAuth 클라이언트 설명 파일 (``credentials.json``)
        token_paths: 토큰 저장 위치 (구조화 JSON → 평문 순서)
        batch_size: 동시에 업로드할 최대 영상 수
        batch_delay_seconds: 배치 사이 대기 시간 (초)
        max_duration_seconds: Shorts 최대 길이 (초)
        item_timeout_seconds: 영상별 업로드 제한 시간 (None이면 무제한)
        chunk_mb: Resumable upload 청크 크기 (MB)
        scopes: OAuth 스코프
        video_extensions: 디렉토리 스캔 시 허용 확장자
    """

    config_dir: Path
    metadata_path: Path
    client_secrets_path: Path
    token_paths: tuple[Path, ...]
    default_video_dir: Path = DEFAULT_VIDEO_DIR
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_delay_seconds: float = DEFAULT_BATCH_DELAY_SECONDS
    max_duration_seconds: float = SHORTS_MAX_DURATION_SECONDS
    item_timeout_seconds: float | None = None
    chunk_mb: int = DEFAULT_CHUNK_MB
    scopes: tuple[str, ...] = SCOPES
    video_extensions: frozenset[str] = VIDEO_EXTENSIONS

    def __post_init__(self) -> None:
        """검증."""
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1: {self.batch_size}")
        if not math.isfinite(self.batch_delay_seconds) or self.batch_delay_seconds < 0:
            raise ValueError(
                f"batch_delay_seconds must be finite and >= 0: {self.batch_delay_seconds}"
            )

    @classmethod
    def in_dir(cls, config_dir: Path, **overrides: Any) -> UploaderSettings:
        """
        ``config_dir`` 아래 기본 파일 배치로 설정 생성.

        Args:
            config_dir: 자격 증명·메타데이터 디렉토리
            **overrides: 덮어쓸 필드

        Returns:
            UploaderSettings
        """
        values: dict[str, Any] = {
            "config_dir": config_dir,
            "metadata_path": config_dir / METADATA_FILENAME,
            "client_secrets_path": config_dir / CLIENT_SECRETS_FILENAME,
            "token_paths": (
                config_dir / TOKEN_JSON_FILENAME,
                config_dir / TOKEN_TEXT_FILENAME,
            ),
        }
        values.update(overrides)
        return cls(**values)


def _warn_type(field_name: str, expected: str, value: object) -> None:
    """타입 불일치 경고 출력."""
    logger.warning(
        "config: %s 타입 오류 (expected %s, got %s)",
        field_name,
        expected,
        type(value).__name__,
    )


def _parse_str(data: dict[str, object], key: str, section: str) -> str | None:
    """TOML dict에서 문자열 필드를 안전하게 파싱한다."""
    raw = data.get(key)
    if isinstance(raw, str):
        return raw
    if raw is not None:
        _warn_type(f"{section}.{key}", "str", raw)
    return None


def _parse_int(data: dict[str, object], key: str, section: str) -> int | None:
    """TOML dict에서 정수 필드를 안전하게 파싱한다 (bool 제외)."""
    raw = data.get(key)
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if raw is not None:
        _warn_type(f"{section}.{key}", "int", raw)
    return None


def _parse_float(data: dict[str, object], key: str, section: str) -> float | None:
    """TOML dict에서 실수 필드를 파싱한다 (int도 허용, bool 제외)."""
    raw = data.get(key)
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    if raw is not None:
        _warn_type(f"{section}.{key}", "float", raw)
    return None


def get_default_config_dir() -> Path:
    """기본 설정 디렉토리 (``~/.shortsbulk``) 반환."""
    return Path.home() / ".shortsbulk"


def get_default_config_path() -> Path:
    """기본 설정 파일 경로 반환."""
    return get_default_config_dir() / "config.toml"


def _parse_general(data: dict[str, object]) -> GeneralConfig:
    """[general] 섹션 파싱. 타입 오류 시 해당 필드 무시."""
    section = "general"

    batch_size = _parse_int(data, "batch_size", section)
    if batch_size is not None and batch_size < 1:
        logger.warning("config: general.batch_size 값 오류: %r", batch_size)
        batch_size = None

    batch_delay = _parse_float(data, "batch_delay", section)
    if batch_delay is not None and (batch_delay < 0 or not math.isfinite(batch_delay)):
        logger.warning("config: general.batch_delay 값 오류: %r", batch_delay)
        batch_delay = None

    item_timeout = _parse_float(data, "item_timeout", section)
    if item_timeout is not None and (item_timeout <= 0 or not math.isfinite(item_timeout)):
        logger.warning("config: general.item_timeout 값 오류: %r", item_timeout)
        item_timeout = None

    return GeneralConfig(
        video_dir=_parse_str(data, "video_dir", section),
        metadata_file=_parse_str(data, "metadata_file", section),
        batch_size=batch_size,
        batch_delay=batch_delay,
        item_timeout=item_timeout,
    )


def _parse_youtube(data: dict[str, object]) -> YouTubeConfig:
    """[youtube] 섹션 파싱. 타입 오류 시 해당 필드 무시."""
    section = "youtube"

    upload_chunk_mb = _parse_int(data, "upload_chunk_mb", section)
    if upload_chunk_mb is not None and not (MIN_CHUNK_MB <= upload_chunk_mb <= MAX_CHUNK_MB):
        logger.warning(
            "config: youtube.upload_chunk_mb 범위 초과: %d (%d-%d)",
            upload_chunk_mb,
            MIN_CHUNK_MB,
            MAX_CHUNK_MB,
        )
        upload_chunk_mb = None

    return YouTubeConfig(
        client_secrets=_parse_str(data, "client_secrets", section),
        token=_parse_str(data, "token", section),
        token_text=_parse_str(data, "token_text", section),
        upload_chunk_mb=upload_chunk_mb,
    )


def load_config(path: Path | None = None) -> AppConfig:
    """
    TOML 설정 파일 로드.

    Args:
        path: 설정 파일 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig (파일 없음/에러 시 빈 AppConfig)
    """
    config_path = path or get_default_config_path()

    if not config_path.is_file():
        return AppConfig()

    try:
        with config_path.open("rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        logger.warning(f"config: TOML 문법 오류 ({config_path}): {e}")
        return AppConfig()
    except OSError as e:
        logger.warning(f"config: 파일 읽기 실패 ({config_path}): {e}")
        return AppConfig()

    general_data = raw.get("general", {})
    youtube_data = raw.get("youtube", {})

    if isinstance(general_data, dict):
        general = _parse_general(general_data)
    else:
        logger.warning(
            "config: [general] 섹션이 테이블이 아닙니다 (got %s)",
            type(general_data).__name__,
        )
        general = GeneralConfig()

    if isinstance(youtube_data, dict):
        youtube = _parse_youtube(youtube_data)
    else:
        logger.warning(
            "config: [youtube] 섹션이 테이블이 아닙니다 (got %s)",
            type(youtube_data).__name__,
        )
        youtube = YouTubeConfig()

    return AppConfig(general=general, youtube=youtube)


# ---------------------------------------------------------------------------
# 환경변수 헬퍼
# ---------------------------------------------------------------------------


def _env_path(environ: Mapping[str, str], key: str) -> Path | None:
    """환경변수 경로 값 (``~`` 확장)."""
    value = environ.get(key)
    if value:
        return Path(value).expanduser()
    return None


def _env_int(environ: Mapping[str, str], key: str, *, minimum: int) -> int | None:
    """환경변수 정수 값. 유효하지 않으면 경고 후 None."""
    value = environ.get(key)
    if not value:
        return None
    try:
        parsed = int(value)
    except ValueError:
        logger.warning("%s=%s is not a valid number", key, value)
        return None
    if parsed < minimum:
        logger.warning("%s=%s must be >= %d", key, value, minimum)
        return None
    return parsed


def _env_float(environ: Mapping[str, str], key: str, *, allow_zero: bool) -> float | None:
    """환경변수 실수 값. 유효하지 않으면 경고 후 None."""
    value = environ.get(key)
    if not value:
        return None
    try:
        parsed = float(value)
    except ValueError:
        logger.warning("%s=%s is not a valid number", key, value)
        return None
    if not math.isfinite(parsed) or parsed < 0 or (parsed == 0 and not allow_zero):
        logger.warning("%s=%s is out of range", key, value)
        return None
    return parsed


def _config_path(value: str | None) -> Path | None:
    """config.toml 의 경로 문자열을 Path로 변환."""
    return Path(value).expanduser() if value else None


def _first(*values: _T | None, default: _T) -> _T:
    """None이 아닌 첫 값, 없으면 기본값."""
    for value in values:
        if value is not None:
            return value
    return default


def resolve_settings(
    config: AppConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> UploaderSettings:
    """
    환경변수 > config.toml > 기본값 순서로 실행 설정을 결정한다.

    Args:
        config: 로드된 설정 파일 (None이면 빈 설정)
        environ: 환경변수 매핑 (None이면 ``os.environ``)

    Returns:
        불변 UploaderSettings
    """
    config = config or AppConfig()
    env = os.environ if environ is None else environ
    general = config.general
    youtube = config.youtube

    config_dir = _env_path(env, ENV_HOME) or get_default_config_dir()

    json_token = _first(
        _env_path(env, ENV_TOKEN),
        _config_path(youtube.token),
        default=config_dir / TOKEN_JSON_FILENAME,
    )
    text_token = _first(
        _env_path(env, ENV_TOKEN_TEXT),
        _config_path(youtube.token_text),
        default=config_dir / TOKEN_TEXT_FILENAME,
    )

    return UploaderSettings.in_dir(
        config_dir,
        default_video_dir=_first(
            _env_path(env, ENV_VIDEO_DIR),
            _config_path(general.video_dir),
            default=DEFAULT_VIDEO_DIR,
        ),
        metadata_path=_first(
            _env_path(env, ENV_METADATA),
            _config_path(general.metadata_file),
            default=config_dir / METADATA_FILENAME,
        ),
        client_secrets_path=_first(
            _env_path(env, ENV_CLIENT_SECRETS),
            _config_path(youtube.client_secrets),
            default=config_dir / CLIENT_SECRETS_FILENAME,
        ),
        token_paths=(json_token, text_token),
        batch_size=_first(
            _env_int(env, ENV_BATCH_SIZE, minimum=1),
            general.batch_size,
            default=DEFAULT_BATCH_SIZE,
        ),
        batch_delay_seconds=_first(
            _env_float(env, ENV_BATCH_DELAY, allow_zero=True),
            general.batch_delay,
            default=DEFAULT_BATCH_DELAY_SECONDS,
        ),
        item_timeout_seconds=_first(
            _env_float(env, ENV_ITEM_TIMEOUT, allow_zero=False),
            general.item_timeout,
            default=None,
        ),
        chunk_mb=_first(
            _env_int(env, ENV_UPLOAD_CHUNK_MB, minimum=MIN_CHUNK_MB),
            youtube.upload_chunk_mb,
            default=DEFAULT_CHUNK_MB,
        ),
    )


def generate_default_config() -> str:
    """주석 포함 기본 설정 파일 템플릿 반환."""
    return """\
# shortsbulk 설정 파일
# 위치: ~/.shortsbulk/config.toml
#
# 우선순위: CLI 옵션 > 환경변수 > 이 파일 > 기본값
# 주석 해제 후 값을 수정하세요.

[general]
# video_dir = "/storage/emulated/0/DCIM"    # SHORTSBULK_VIDEO_DIR
# metadata_file = "~/.shortsbulk/details.txt" # SHORTSBULK_METADATA
# batch_size = 3                            # 동시 업로드 수 (SHORTSBULK_BATCH_SIZE)
# batch_delay = 5.0                         # 배치 사이 대기 초 (SHORTSBULK_BATCH_DELAY)
# item_timeout = 600.0                      # 영상별 제한 시간 초 (SHORTSBULK_ITEM_TIMEOUT)

[youtube]
# client_secrets = "~/.shortsbulk/credentials.json"  # SHORTSBULK_CLIENT_SECRETS
# token = "~/.shortsbulk/token.json"                 # SHORTSBULK_TOKEN
# token_text = "~/.shortsbulk/token.txt"             # SHORTSBULK_TOKEN_TEXT
# upload_chunk_mb = 32                      # 1-256 (SHORTSBULK_UPLOAD_CHUNK_MB)
"""
