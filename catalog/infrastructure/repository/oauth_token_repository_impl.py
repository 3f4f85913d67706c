from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from config.database.session import SessionLocal
from catalog.application.port.credential_port import CredentialProviderPort
from catalog.domain.evergreen import to_utc
from catalog.infrastructure.orm.models import OAuthTokenORM, utcnow

TOKEN_ROW_ID = 1


class OAuthTokenRepositoryImpl(CredentialProviderPort):
    """
    채널 소유자의 OAuth 토큰(단일 행)을 보관한다. 토큰 발급/교환 자체는 이 서비스 밖에서 이루어진다.
    """

    def __init__(self, session_factory=SessionLocal):
        self.db = session_factory()

    def close(self) -> None:
        self.db.close()

    def has_valid_credential(self) -> bool:
        orm = self.db.get(OAuthTokenORM, TOKEN_ROW_ID)
        return bool(orm and orm.refresh_token)

    def get_token(self) -> Optional[OAuthTokenORM]:
        return self.db.get(OAuthTokenORM, TOKEN_ROW_ID)

    def save_tokens(
        self, access_token: Optional[str], refresh_token: Optional[str], expiry: Optional[datetime] = None
    ) -> None:
        orm = self.db.get(OAuthTokenORM, TOKEN_ROW_ID)
        if orm is None:
            orm = OAuthTokenORM(id=TOKEN_ROW_ID)
            self.db.add(orm)
        orm.access_token = access_token
        # 재발급 응답에는 refresh_token 이 빠질 수 있으므로 기존 값을 유지한다.
        orm.refresh_token = refresh_token or orm.refresh_token
        orm.expiry = to_utc(expiry)
        orm.updated_at = utcnow()
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def save_access_token(self, access_token: str, expiry: Optional[datetime]) -> None:
        self.save_tokens(access_token, None, expiry)
