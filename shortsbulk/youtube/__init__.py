"""YouTube 인증 및 업로드 모듈."""

from shortsbulk.youtube.auth import (
    AuthManager,
    AuthorizationProvider,
    AuthorizedClient,
    AuthToken,
    ClientSecrets,
    OAuthCodeProvider,
    TokenStore,
    YouTubeAuthError,
    build_youtube_service,
    load_client_secrets,
)
from shortsbulk.youtube.uploader import (
    UploadResult,
    YouTubeUploader,
    YouTubeUploadError,
)

__all__ = [
    "AuthManager",
    "AuthToken",
    "AuthorizationProvider",
    "AuthorizedClient",
    "ClientSecrets",
    "OAuthCodeProvider",
    "TokenStore",
    "UploadResult",
    "YouTubeAuthError",
    "YouTubeUploadError",
    "YouTubeUploader",
    "build_youtube_service",
    "load_client_secrets",
]
