from catalog.application.port.catalog_repository_port import CatalogRepositoryPort

EDITABLE_LABELS = ("topic", "brand")


class VideoEditUseCase:
    def __init__(self, repository: CatalogRepositoryPort):
        self.repository = repository

    def update_labels(self, video_id: str, changes: dict) -> bool:
        """
        사람이 지정한 topic/brand 를 저장하고 해당 *_auto 플래그를 내린다.
        이후 동기화는 이 값을 덮어쓰지 않는다. 빈 문자열은 라벨 해제(None)로 취급한다.
        """
        updates: dict = {}
        for label in EDITABLE_LABELS:
            if label in changes:
                updates[label] = changes[label] or None
                updates[f"{label}_auto"] = False
        return self.repository.update_video_labels(video_id, updates)
