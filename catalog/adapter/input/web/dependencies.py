from catalog.application.usecase.catalog_query_usecase import CatalogQueryUseCase
from catalog.application.usecase.video_edit_usecase import VideoEditUseCase
from catalog.infrastructure.repository.catalog_repository_impl import CatalogRepositoryImpl
from catalog.infrastructure.repository.oauth_token_repository_impl import OAuthTokenRepositoryImpl


def get_query_usecase():
    repository = CatalogRepositoryImpl()
    credentials = OAuthTokenRepositoryImpl()
    try:
        yield CatalogQueryUseCase(repository, credentials)
    finally:
        repository.close()
        credentials.close()


def get_edit_usecase():
    repository = CatalogRepositoryImpl()
    try:
        yield VideoEditUseCase(repository)
    finally:
        repository.close()
