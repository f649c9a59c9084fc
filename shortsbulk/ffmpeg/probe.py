"""ffprobe 기반 영상 길이 조회."""

import json
import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

PROBE_TIMEOUT_SECONDS = 30


class ProbeError(Exception):
    """ffprobe로 영상 길이를 확인할 수 없을 때 발생하는 예외."""

    pass


def probe_duration(file_path: Path) -> float:
    """ffprobe로 영상 길이(초)를 조회한다.

    읽을 수 없거나 지원하지 않는 파일은 0.0으로 뭉개지 않고
    :class:`ProbeError` 로 알린다.

    Args:
        file_path: 영상 파일 경로

    Returns:
        초 단위 영상 길이

    Raises:
        ProbeError: ffprobe 실행 실패, 타임아웃, 출력 파싱 실패
    """
    try:
        result = subprocess.run(
            [
                "ffprobe",
                "-v",
                "quiet",
                "-print_format",
                "json",
                "-show_format",
                str(file_path),
            ],
            capture_output=True,
            text=True,
            check=True,
            timeout=PROBE_TIMEOUT_SECONDS,
        )
    except FileNotFoundError as e:
        raise ProbeError("ffprobe not found. Please install FFmpeg") from e
    except subprocess.CalledProcessError as e:
        raise ProbeError(f"ffprobe failed for {file_path.name} (exit {e.returncode})") from e
    except subprocess.TimeoutExpired as e:
        raise ProbeError(f"ffprobe timed out after {PROBE_TIMEOUT_SECONDS}s") from e
    except OSError as e:
        raise ProbeError(f"Cannot run ffprobe for {file_path.name}: {e}") from e
    except (UnicodeDecodeError, ValueError) as e:
        raise ProbeError(f"ffprobe failed for {file_path.name}: {e}") from e

    try:
        data = json.loads(result.stdout)
        duration = float(data["format"]["duration"])
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise ProbeError(f"Unable to read duration of {file_path.name}") from e

    logger.debug(f"Probed {file_path.name}: {duration:.2f}s")
    return duration
