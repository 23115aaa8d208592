"""환경 변수 기반 설정. pydantic-settings 사용."""

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """앱 설정. 환경변수에서 로드. 시크릿은 SecretStr로 마스킹, 필수 시크릿은 기본값 없음(Fail-fast)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # 모니터링 (선택)
    sentry_dsn: SecretStr | None = None
    environment: str = "development"  # Sentry/로깅용. production, staging, development 등.

    # DB
    database_url: str | None = None
    db_connect_retries: int = Field(5, ge=1, le=20)  # 연결 실패 시 재시도 횟수.
    db_connect_retry_interval_sec: float = Field(2.0, ge=0.5, le=60.0)  # 재시도 간격(초).

    # Auth (필수: 기본값 없음 → 부팅 시점 Fail-fast)
    jwt_secret: SecretStr
    jwt_issuer: str = "campusnet"  # JWT iss 클레임 (발급자). 검증 시 사용.
    jwt_audience: str = "campusnet-api"  # JWT aud 클레임 (대상). 검증 시 사용.
    jwt_access_expire_seconds: int = Field(600, ge=60, le=86400)  # Access 토큰 만료(초). 1분~24시간.
    jwt_refresh_expire_days: int = Field(7, ge=1, le=90)  # Refresh 토큰 만료(일).
    google_client_id: str  # 필수. 기본값 없음.
    google_client_secret: SecretStr  # 필수. 기본값 없음.
    # 허용 redirect_uri 목록(쉼표 구분). 비어 있으면 검사 생략.
    google_redirect_uris: str = ""

    # Redis & Worker
    redis_url: str | None = None
    # Redis 소켓/연결 타임아웃(초). 풀 포화·장애 시 무한 대기 방지.
    redis_socket_timeout: float = Field(5.0, ge=1.0, le=60.0)
    redis_socket_connect_timeout: float = Field(2.0, ge=0.5, le=30.0)
    # Blocklist: Redis 장애 시 정책. True=Fail-Closed(인증 거부), False=Fail-Open(서명만 검증 후 통과).
    redis_blocklist_fail_closed: bool = True
    redis_blocklist_max_connections: int = Field(20, ge=1, le=100)
    # 내부 잡 락용 풀. 인증 풀과 분리.
    redis_job_lock_max_connections: int = Field(5, ge=1, le=50)
    # 내부 API(Cron 트리거·통계) 보안 키. 미설정 시 내부 API 503.
    internal_api_secret: SecretStr | None = None

    # 초대
    invitation_default_expire_days: int = Field(30, ge=1, le=365)
    invitation_max_expire_days: int = Field(365, ge=1, le=3650)
    invitation_reminder_max: int = Field(3, ge=0, le=10)
    invitation_reminder_window_days: int = Field(7, ge=1, le=60)  # 만료 N일 이내 초대만 리마인드.
    invitation_reminder_interval_hours: int = Field(24, ge=1, le=720)

    # 정리(cleanup) 보존 기간
    soft_delete_retention_days: int = Field(90, ge=1, le=3650)
    audit_log_retention_days: int = Field(365, ge=30, le=3650)
    read_notification_retention_days: int = Field(180, ge=7, le=3650)

    # 이벤트
    event_reminder_lead_hours: int = Field(24, ge=1, le=168)
    event_reminder_window_minutes: int = Field(60, ge=5, le=1440)  # 워커 주기와 맞춤.
    event_capacity_warning_ratio: float = Field(0.9, gt=0.0, le=1.0)

    # 페이지네이션
    default_page_size: int = Field(10, ge=1, le=100)
    max_page_size: int = Field(100, ge=1, le=500)

    # CORS
    allowed_origins: str = ""

    @model_validator(mode="after")
    def fail_fast_production(self: "Settings") -> "Settings":
        """프로덕션 환경 시 필수 변수 누락이면 부팅 거부(Fail-Fast)."""
        if (self.environment or "").strip().lower() != "production":
            return self
        missing: list[str] = []
        if not (self.database_url or "").strip():
            missing.append("DATABASE_URL")
        if not (self.redis_url or "").strip():
            missing.append("REDIS_URL")
        if not (self.jwt_secret.get_secret_value() or "").strip():
            missing.append("JWT_SECRET")
        if not (self.google_client_id or "").strip():
            missing.append("GOOGLE_CLIENT_ID")
        if not (self.google_client_secret.get_secret_value() or "").strip():
            missing.append("GOOGLE_CLIENT_SECRET")
        if self.internal_api_secret is None or not self.internal_api_secret.get_secret_value().strip():
            missing.append("INTERNAL_API_SECRET")
        if missing:
            raise ValueError(
                f"Production environment requires these variables to be set: {', '.join(missing)}. "
                "Set them in Secret Manager or environment before boot."
            )
        return self


settings = Settings()
