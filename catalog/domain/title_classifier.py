from typing import Iterable, Optional, Sequence

from catalog.domain.taxonomy import DEFAULT_BRAND_RULES, DEFAULT_TOPIC_RULES, ClassificationRule


class TitleClassifier:
    """
    제목 텍스트로 브랜드/주제 라벨을 추정한다.
    규칙은 선언 순서대로 평가하며 처음 매칭된 규칙의 라벨을 반환하고, 매칭이 없으면 None 을 반환한다.
    """

    def __init__(
        self,
        brand_rules: Sequence[ClassificationRule] = DEFAULT_BRAND_RULES,
        topic_rules: Sequence[ClassificationRule] = DEFAULT_TOPIC_RULES,
    ):
        self.brand_rules = tuple(brand_rules)
        self.topic_rules = tuple(topic_rules)

    def classify_brand(self, title: str) -> Optional[str]:
        return _first_match(self.brand_rules, title)

    def classify_topic(self, title: str) -> Optional[str]:
        return _first_match(self.topic_rules, title)


def _first_match(rules: Iterable[ClassificationRule], title: str) -> Optional[str]:
    if not title:
        return None
    for r in rules:
        if r.matches(title):
            return r.label
    return None
