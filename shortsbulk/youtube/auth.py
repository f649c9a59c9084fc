"""YouTube OAuth 2.0 인증.

한 번의 실행 동안 사용할 인증 핸들(:class:`AuthorizedClient`)을 만든다.

1. ``credentials.json`` (OAuth 클라이언트 설명) 로드 - 실패 시 치명적
2. 저장된 토큰을 후보 위치 순서대로 탐색 (JSON → 평문)
3. 없으면 인증 코드 교환 (URL 표시 → 코드 입력 → 토큰 교환)
4. 새 토큰을 모든 저장 위치에 기록

저장된 토큰은 만료 여부를 확인하지 않고 그대로 재사용한다.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build

from shortsbulk.config import UploaderSettings
from shortsbulk.utils import safe_input

if TYPE_CHECKING:
    from googleapiclient._apis.youtube.v3 import YouTubeResource

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_URI = "http://localhost:3000"
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"
DEFAULT_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"

# Google Cloud Console URL
GOOGLE_CLOUD_CONSOLE_URL = "https://console.cloud.google.com/apis/credentials"


class YouTubeAuthError(Exception):
    """YouTube 인증 에러. 발생 시 업로드를 시작하지 않고 종료한다."""

    pass


@dataclass(frozen=True)
class ClientSecrets:
    """OAuth 클라이언트 설명 (``credentials.json`` 의 installed/web 항목)."""

    client_id: str
    client_secret: str
    redirect_uri: str = DEFAULT_REDIRECT_URI
    auth_uri: str = DEFAULT_AUTH_URI
    token_uri: str = DEFAULT_TOKEN_URI

    def to_client_config(self) -> dict[str, Any]:
        """google_auth_oauthlib ``Flow`` 용 client config."""
        return {
            "installed": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uris": [self.redirect_uri],
                "auth_uri": self.auth_uri,
                "token_uri": self.token_uri,
            }
        }


def load_client_secrets(path: Path) -> ClientSecrets:
    """
    클라이언트 시크릿 파일 로드.

    Args:
        path: ``credentials.json`` 경로

    Returns:
        ClientSecrets

    Raises:
        YouTubeAuthError: 파일 없음, JSON 오류, 필수 키 누락
    """
    if not path.is_file():
        raise YouTubeAuthError(
            f"credentials.json not found at {path}\n"
            f"1. Google Cloud Console에서 OAuth 클라이언트 ID 생성: {GOOGLE_CLOUD_CONSOLE_URL}\n"
            f"2. JSON 다운로드 후 {path}에 저장"
        )

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise YouTubeAuthError(f"Error loading credentials from {path}: {e}") from e

    section = (data.get("installed") or data.get("web")) if isinstance(data, dict) else None
    if not isinstance(section, dict):
        raise YouTubeAuthError(f"{path.name} has neither an 'installed' nor a 'web' client")

    try:
        client_id = section["client_id"]
        client_secret = section["client_secret"]
    except KeyError as e:
        raise YouTubeAuthError(f"{path.name} is missing {e.args[0]}") from e

    redirect_uris = section.get("redirect_uris") or []
    return ClientSecrets(
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=redirect_uris[0] if redirect_uris else DEFAULT_REDIRECT_URI,
        auth_uri=section.get("auth_uri", DEFAULT_AUTH_URI),
        token_uri=section.get("token_uri", DEFAULT_TOKEN_URI),
    )


@dataclass(frozen=True)
class AuthToken:
    """OAuth 토큰.

    Attributes:
        access_token: 액세스 토큰
        refresh_token: 리프레시 토큰 (평문 저장소에서 읽으면 없음)
        scope: 허용된 스코프 (공백 구분)
        token_type: 토큰 종류 (보통 ``Bearer``)
        expiry_date: 만료 시각 (epoch 밀리초)
    """

    access_token: str
    refresh_token: str | None = None
    scope: str | None = None
    token_type: str | None = None
    expiry_date: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """값이 있는 필드만 담은 dict."""
        return {key: value for key, value in asdict(self).items() if value is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuthToken:
        """
        저장된 dict에서 토큰 생성.

        google-auth ``Credentials.to_json()`` 형식(``token`` 키)도 허용한다.

        Raises:
            ValueError: 액세스 토큰이 없을 때
        """
        access_token = data.get("access_token") or data.get("token")
        if not access_token:
            raise ValueError("token data has no access_token")

        scope = data.get("scope", data.get("scopes"))
        if isinstance(scope, list):
            scope = " ".join(scope)

        expiry_date = data.get("expiry_date")
        return cls(
            access_token=access_token,
            refresh_token=data.get("refresh_token"),
            scope=scope,
            token_type=data.get("token_type"),
            expiry_date=int(expiry_date) if expiry_date is not None else None,
        )


class TokenSerializer(Protocol):
    """토큰 ↔ 저장 텍스트 변환기."""

    def dumps(self, token: AuthToken) -> str: ...

    def loads(self, text: str) -> AuthToken: ...


class JsonTokenSerializer:
    """모든 필드를 보존하는 JSON 형식."""

    def dumps(self, token: AuthToken) -> str:
        return json.dumps(token.to_dict())

    def loads(self, text: str) -> AuthToken:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("token JSON is not an object")
        return AuthToken.from_dict(data)


class PlainTextTokenSerializer:
    """액세스 토큰만 담는 평문 형식."""

    def dumps(self, token: AuthToken) -> str:
        return token.access_token

    def loads(self, text: str) -> AuthToken:
        access_token = text.strip()
        if not access_token:
            raise ValueError("token file is empty")
        return AuthToken(access_token=access_token)


def serializer_for(path: Path) -> TokenSerializer:
    """확장자로 직렬화 형식 선택 (``.json`` → JSON, 그 외 평문)."""
    if path.suffix.lower() == ".json":
        return JsonTokenSerializer()
    return PlainTextTokenSerializer()


class TokenStore:
    """파일 하나에 토큰을 저장하는 저장소."""

    def __init__(self, path: Path, serializer: TokenSerializer | None = None) -> None:
        self.path = path
        self.serializer = serializer or serializer_for(path)

    def load(self) -> AuthToken | None:
        """
        저장된 토큰 로드.

        Returns:
            토큰 (파일이 없거나 읽을 수 없으면 None)
        """
        if not self.path.exists():
            return None

        try:
            return self.serializer.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning(f"Could not read token from {self.path.name}: {e}")
            return None

    def save(self, token: AuthToken) -> None:
        """토큰 저장 (부모 디렉토리 생성)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.serializer.dumps(token), encoding="utf-8")


@dataclass(frozen=True)
class AuthorizedClient:
    """실행 동안 모든 업로드가 읽기 전용으로 공유하는 인증 핸들."""

    token: AuthToken
    secrets: ClientSecrets
    scopes: tuple[str, ...]

    def credentials(self) -> Credentials:
        """google-auth 자격 증명 객체 생성."""
        return Credentials(  # type: ignore[no-untyped-call]
            token=self.token.access_token,
            refresh_token=self.token.refresh_token,
            token_uri=self.secrets.token_uri,
            client_id=self.secrets.client_id,
            client_secret=self.secrets.client_secret,
            scopes=list(self.scopes),
        )


def build_youtube_service(auth: AuthorizedClient) -> YouTubeResource:
    """인증된 YouTube Data API v3 서비스 생성."""
    service: YouTubeResource = build(
        "youtube", "v3", credentials=auth.credentials(), cache_discovery=False
    )
    return service


class AuthorizationProvider(Protocol):
    """인증 코드를 토큰으로 교환하는 방식.

    대화형 OAuth 외에 서비스 계정·리프레시 토큰 방식 등으로 교체할 수 있다.
    """

    def exchange(self, code: str) -> AuthToken: ...


class OAuthCodeProvider:
    """google_auth_oauthlib ``Flow`` 기반 인증 코드 교환."""

    def __init__(self, secrets: ClientSecrets, scopes: Sequence[str]) -> None:
        self.flow = Flow.from_client_config(
            secrets.to_client_config(),
            scopes=list(scopes),
            redirect_uri=secrets.redirect_uri,
        )

    def authorization_url(self) -> str:
        """오프라인 액세스(리프레시 토큰 포함) 인증 URL."""
        url: str
        url, _state = self.flow.authorization_url(access_type="offline", prompt="consent")
        return url

    def exchange(self, code: str) -> AuthToken:
        """
        인증 코드를 토큰으로 교환.

        Raises:
            YouTubeAuthError: 교환 실패 시
        """
        try:
            token = self.flow.fetch_token(code=code)
        except Exception as e:
            raise YouTubeAuthError(f"Failed to exchange authorization code: {e}") from e

        expires_at = token.get("expires_at")
        scope = token.get("scope")
        if isinstance(scope, list):
            scope = " ".join(scope)
        return AuthToken(
            access_token=token["access_token"],
            refresh_token=token.get("refresh_token"),
            scope=scope,
            token_type=token.get("token_type"),
            expiry_date=int(expires_at * 1000) if expires_at else None,
        )


def prompt_authorization_code(provider: AuthorizationProvider) -> str:
    """
    인증 URL을 안내하고 운영자가 붙여 넣은 코드를 읽는다.

    Args:
        provider: 인증 URL을 제공할 수 있는 provider

    Returns:
        입력된 인증 코드 (앞뒤 공백 제거)
    """
    url_factory = getattr(provider, "authorization_url", None)

    print("\n⚠️  YouTube 인증이 필요합니다:")
    if url_factory is not None:
        print(f"1. 브라우저에서 다음 URL 열기: {url_factory()}")
    print("2. YouTube 계정으로 로그인")
    print("3. 권한 승인")
    print("4. 리다이렉트된 URL의 code 값을 복사\n")

    return safe_input("인증 코드 붙여넣기: ")


class AuthManager:
    """인증 토큰 획득·보관 담당.

    저장 위치는 ``settings.token_paths`` 순서로 조회하며,
    새로 받은 토큰은 모든 위치에 기록한다.
    """

    def __init__(
        self,
        settings: UploaderSettings,
        provider_factory: Callable[[ClientSecrets], AuthorizationProvider] | None = None,
        code_reader: Callable[[AuthorizationProvider], str] = prompt_authorization_code,
    ) -> None:
        """
        초기화.

        Args:
            settings: 실행 설정 (클라이언트 시크릿·토큰 경로, 스코프)
            provider_factory: ClientSecrets → AuthorizationProvider
                (None이면 :class:`OAuthCodeProvider`)
            code_reader: 인증 코드 입력 함수 (블로킹)
        """
        self.settings = settings
        self.provider_factory = provider_factory or (
            lambda secrets: OAuthCodeProvider(secrets, settings.scopes)
        )
        self.code_reader = code_reader
        self.stores = [TokenStore(path) for path in settings.token_paths]

    def load_token(self) -> AuthToken | None:
        """저장 위치를 순서대로 확인해 처음 읽히는 토큰 반환."""
        for store in self.stores:
            token = store.load()
            if token is not None:
                logger.info(f"Using saved token from {store.path}")
                return token
        return None

    def save_token(self, token: AuthToken) -> None:
        """모든 저장 위치에 토큰 기록. 실패는 로그만 남긴다."""
        for store in self.stores:
            try:
                store.save(token)
            except OSError as e:
                logger.error(f"Error saving token to {store.path}: {e}")
                continue
            logger.info(f"Token saved to {store.path}")

    def authorize(self) -> AuthorizedClient:
        """
        인증 핸들 반환.

        Returns:
            AuthorizedClient

        Raises:
            YouTubeAuthError: 클라이언트 시크릿 오류, 인증 코드 교환 실패
        """
        secrets = load_client_secrets(self.settings.client_secrets_path)

        token = self.load_token()
        if token is None:
            token = self._exchange_new_token(secrets)
            self.save_token(token)

        return AuthorizedClient(token=token, secrets=secrets, scopes=self.settings.scopes)

    def _exchange_new_token(self, secrets: ClientSecrets) -> AuthToken:
        """대화형 인증 코드 교환."""
        logger.info("No saved token found, starting authorization exchange")
        provider = self.provider_factory(secrets)

        code = self.code_reader(provider)
        if not code:
            raise YouTubeAuthError("No authorization code entered")

        try:
            return provider.exchange(code)
        except YouTubeAuthError:
            raise
        except Exception as e:
            raise YouTubeAuthError(f"Authorization exchange failed: {e}") from e
