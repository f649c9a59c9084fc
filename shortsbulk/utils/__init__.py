"""공용 유틸리티 함수.

프로젝트 전반에서 사용되는 작은 헬퍼 함수들을 모아둔다.
"""

import subprocess
import sys


def safe_input(prompt: str) -> str:
    """
    터미널에서 안전하게 입력 받기.

    tmux 등 환경에서도 동작하도록 bash read 사용.

    Args:
        prompt: 입력 프롬프트

    Returns:
        사용자 입력 (strip 적용)
    """
    sys.stdout.write(prompt)
    sys.stdout.flush()

    try:
        # bash read 사용 (터미널 설정에 덜 민감)
        result = subprocess.run(
            ["bash", "-c", "read -r line </dev/tty && printf '%s' \"$line\""],
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except (OSError, subprocess.SubprocessError):
        pass

    # fallback: 기본 input
    try:
        return input().strip()
    except (EOFError, KeyboardInterrupt):
        return ""


def truncate_name(name: str, max_len: int = 24) -> str:
    """긴 파일명을 말줄임표로 줄여 표시한다.

    길이가 ``max_len`` 이하면 그대로 반환하고,
    초과하면 앞부분만 남기고 ``'...'`` 를 붙인다.

    Args:
        name: 원본 파일명.
        max_len: 최대 출력 길이 (기본 24자).

    Returns:
        잘린 파일명. 예: ``"very_long_video_name_..."``.
    """
    if len(name) <= max_len:
        return name
    return name[: max_len - 3] + "..."
