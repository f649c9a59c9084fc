"""shortsbulk CLI 진입점.

폴더의 세로 영상을 YouTube Shorts로 일괄 업로드한다.

파이프라인 흐름::

    find_video_files → [확인] → Orchestrator.upload_many
        → BatchScheduler.run → UploadPipeline.run (영상별)

사용법:
    - ``shortsbulk``: 기본 폴더(Termux DCIM) 일괄 업로드
    - ``shortsbulk DIR``: 폴더 일괄 업로드
    - ``shortsbulk FILE``: 영상 하나 업로드
    - ``shortsbulk --init-config``: 설정 파일 템플릿 생성
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from shortsbulk import __version__
from shortsbulk.config import (
    UploaderSettings,
    generate_default_config,
    get_default_config_path,
    load_config,
    resolve_settings,
)
from shortsbulk.core.orchestrator import Orchestrator, RunSummary, build_orchestrator
from shortsbulk.core.scanner import find_video_files
from shortsbulk.utils import safe_input
from shortsbulk.youtube.auth import GOOGLE_CLOUD_CONSOLE_URL, YouTubeAuthError

logger = logging.getLogger(__name__)

OrchestratorFactory = Callable[[UploaderSettings], Orchestrator]


def create_parser() -> argparse.ArgumentParser:
    """
    CLI 파서 생성.

    Returns:
        argparse.ArgumentParser 인스턴스
    """
    parser = argparse.ArgumentParser(
        prog="shortsbulk",
        description=f"세로 영상을 YouTube Shorts로 일괄 업로드합니다. (v{__version__})",
        epilog=(
            "예시:\n"
            "  shortsbulk                      # 기본 폴더(DCIM) 일괄 업로드\n"
            "  shortsbulk ~/Movies/shorts/     # 폴더 일괄 업로드\n"
            "  shortsbulk clip.mp4             # 영상 하나 업로드"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="영상 파일 또는 디렉토리 (기본: /storage/emulated/0/DCIM)",
    )

    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="일괄 업로드 확인 프롬프트 생략",
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        metavar="FILE",
        help="설정 파일 경로 (기본: ~/.shortsbulk/config.toml)",
    )

    parser.add_argument(
        "--init-config",
        action="store_true",
        help="기본 설정 파일(config.toml) 템플릿 생성",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="상세 로그 출력",
    )

    return parser


def setup_logging(verbose: bool = False) -> None:
    """
    로깅 설정.

    Args:
        verbose: 상세 로그 여부
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def cmd_init_config(config_path: Path | None = None) -> None:
    """
    --init-config 옵션 처리.

    기본 설정 파일(config.toml) 템플릿을 생성합니다.
    """
    config_path = config_path or get_default_config_path()

    if config_path.exists():
        response = safe_input(f"이미 존재합니다: {config_path}\n덮어쓰시겠습니까? (y/N): ")
        if response.lower() not in ("y", "yes"):
            print("취소됨")
            return

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(generate_default_config(), encoding="utf-8")
    print(f"설정 파일 생성됨: {config_path}")


def confirm_bulk_upload() -> bool:
    """일괄 업로드 진행 여부 확인."""
    answer = safe_input("\nProceed with bulk upload? (y/N) ")
    return answer.lower() in ("y", "yes")


def cmd_bulk_upload(
    directory: Path,
    settings: UploaderSettings,
    assume_yes: bool = False,
    orchestrator_factory: OrchestratorFactory = build_orchestrator,
) -> RunSummary | None:
    """
    폴더 일괄 업로드.

    Args:
        directory: 영상 폴더
        settings: 실행 설정
        assume_yes: 확인 프롬프트 생략 여부
        orchestrator_factory: 설정 → Orchestrator

    Returns:
        실행 요약 (영상이 없거나 취소 시 None)

    Raises:
        YouTubeAuthError: 인증 실패 시
    """
    videos = find_video_files(directory, settings.video_extensions)
    if not videos:
        print("폴더에 영상 파일이 없습니다.")
        return None

    print(f"업로드할 영상 {len(videos)}개:")
    for i, video in enumerate(videos, 1):
        print(f"{i}. {video.name}")

    if not assume_yes and not confirm_bulk_upload():
        print("일괄 업로드가 취소되었습니다.")
        return None

    orchestrator = orchestrator_factory(settings)
    return asyncio.run(orchestrator.upload_many(videos))


def cmd_single_upload(
    video_path: Path,
    settings: UploaderSettings,
    orchestrator_factory: OrchestratorFactory = build_orchestrator,
) -> RunSummary:
    """
    영상 하나 업로드 (배치 스케줄링 없음).

    Raises:
        YouTubeAuthError: 인증 실패 시
    """
    print(f"📹 파일: {video_path.name}")
    orchestrator = orchestrator_factory(settings)
    return asyncio.run(orchestrator.upload_one(video_path))


def main() -> None:
    """CLI 진입점.

    인자를 파싱하고 설정을 결정한 뒤, 경로가 폴더면 일괄 업로드,
    파일이면 단일 업로드를 실행한다.
    """
    parser = create_parser()
    args = parser.parse_args()

    config_path = Path(args.config).expanduser() if args.config else None

    # --init-config 처리 (가장 먼저, 로깅/설정 로드 전)
    if args.init_config:
        cmd_init_config(config_path)
        return

    setup_logging(args.verbose)

    settings = resolve_settings(load_config(config_path))
    target = Path(args.path).expanduser() if args.path else settings.default_video_dir

    print("\n📱 YouTube Shorts 일괄 업로더\n")

    try:
        if not target.exists():
            logger.error(f"Path not found: {target}")
            return

        if target.is_dir():
            cmd_bulk_upload(target, settings, assume_yes=args.yes)
        else:
            cmd_single_upload(target, settings)

    except YouTubeAuthError as e:
        logger.error(f"YouTube authentication failed: {e}")
        print(f"\n❌ YouTube 인증 실패: {e}")
        print(f"\nOAuth 클라이언트 파일 위치: {settings.client_secrets_path}")
        print(f"발급: {GOOGLE_CLOUD_CONSOLE_URL}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")


if __name__ == "__main__":
    main()
