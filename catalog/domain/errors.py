class SyncError(RuntimeError):
    """동기화 실행을 실패/저하시키는 오류의 공통 부모."""


class CredentialError(SyncError):
    pass


class CatalogFetchError(SyncError):
    pass


class AnalyticsFetchError(SyncError):
    """Analytics 수집 실패. 동기화는 기본 메타데이터만으로 계속 진행됩니다."""
