import re
from dataclasses import dataclass
from typing import Pattern, Union


@dataclass(frozen=True)
class ClassificationRule:
    label: str
    patterns: tuple[Pattern[str], ...]

    def matches(self, title: str) -> bool:
        return any(pattern.search(title) for pattern in self.patterns)


def rule(label: str, *patterns: Union[str, Pattern[str]]) -> ClassificationRule:
    """문자열 패턴은 대소문자 무시로 컴파일하고, 이미 컴파일된 패턴은 그대로 사용한다."""
    compiled = tuple(p if isinstance(p, re.Pattern) else re.compile(p, re.IGNORECASE) for p in patterns)
    return ClassificationRule(label=label, patterns=compiled)


# 순서가 곧 우선순위다. 먼저 매칭된 규칙이 이긴다.
DEFAULT_BRAND_RULES: tuple[ClassificationRule, ...] = (
    rule(
        "Apple",
        r"\bapple\b", r"\biphone\b", r"\bipad\b", r"\bmacbook\b", r"\bimac\b",
        r"\bmac\b(?!\s*(and|cheese|address))", r"\bairpods?\b", r"\bapple\s*watch\b",
        r"\bios\b", r"\bmacos\b", r"\bmac\s*pro\b", r"\bmac\s*mini\b", r"\bmac\s*studio\b",
        r"\bvision\s*pro\b",
    ),
    rule("Samsung", r"\bsamsung\b", r"\bgalaxy\b"),
    rule("Google", r"\bgoogle\b", r"\bpixel\b", r"\bandroid\b", r"\bchromebook\b"),
    rule("Microsoft", r"\bmicrosoft\b", r"\bwindows\b", r"\bsurface\b", r"\bxbox\b", r"\bcopilot\b"),
    rule("Sony", r"\bsony\b", r"\bplaystation\b", r"\bps5\b", r"\bps4\b"),
    rule("Tesla", r"\btesla\b", r"\bmodel\s*[3ysx]\b", r"\bcybertruck\b"),
    rule("Amazon", r"\bamazon\b", r"\balexa\b", r"\bkindle\b", r"\bfire\s*tv\b", r"\becho\b"),
    rule("Meta", r"\bmeta\b", r"\boculus\b", r"\bquest\s*\d\b"),
    rule("Nintendo", r"\bnintendo\b", r"\bswitch\b"),
    rule("OpenAI", r"\bopenai\b", r"\bchatgpt\b", r"\bgpt[-\s]?\d", r"\bdall[-\s]?e\b"),
    rule("NVIDIA", r"\bnvidia\b", r"\bgeforce\b", r"\brtx\b"),
    rule("AMD", r"\bamd\b", r"\bryzen\b", r"\bradeon\b"),
    rule("Intel", r"\bintel\b", r"\bcore\s*i[3579]\b"),
    rule("DJI", r"\bdji\b", r"\bmavic\b"),
    rule("Xiaomi", r"\bxiaomi\b", r"\bredmi\b"),
    rule("OnePlus", r"\boneplus\b"),
    rule("Huawei", r"\bhuawei\b"),
    rule("LG", r"\blg\b"),
    rule("Spotify", r"\bspotify\b"),
    rule("Netflix", r"\bnetflix\b"),
    rule("YouTube", r"\byoutube\b"),
    rule("Notion", r"\bnotion\b"),
    rule("Figma", r"\bfigma\b"),
    rule("Adobe", r"\badobe\b", r"\bphotoshop\b", r"\bpremiere\b", r"\blightroom\b"),
    rule("Anthropic", r"\banthropic\b", r"\bclaude\b"),
)

DEFAULT_TOPIC_RULES: tuple[ClassificationRule, ...] = (
    rule("Review", r"\breview\b", r"\breseña\b", r"\banálisis\b", r"\banalisis\b"),
    rule("Unboxing", r"\bunboxing\b", r"\bdesempaquetado\b"),
    rule(
        "Tutorial",
        r"\btutorial\b", r"\bcómo\b", r"\bcomo\s+hacer\b", r"\bhow\s+to\b", r"\bguía\b", r"\bguia\b",
    ),
    rule("Comparison", r"\bvs\.?\b", r"\bcomparati", r"\bcomparison\b", r"\bversus\b", r"\bfrente\s+a\b"),
    rule("Top/List", r"\btop\s*\d+", r"\bmejores\b", r"\bbest\b", r"\bworst\b", r"\bpeores\b"),
    rule(
        "News",
        r"\bnoticias?\b", r"\bnews\b", r"\bfiltración\b", r"\bfiltracion\b", r"\brumor", r"\bleak",
    ),
    rule("Setup/Desk", r"\bsetup\b", r"\bdesk\b", r"\bescritorio\b", r"\bworkspace\b"),
    rule("Tips & Tricks", r"\btips?\b", r"\btricks?\b", r"\btrucos?\b", r"\bconsejos?\b", r"\bhacks?\b"),
    # 스페인어 약어 IA 는 대문자일 때만 인정한다.
    rule(
        "AI",
        r"\b(inteligencia\s*)?artificial\b", r"\bai\b", r"\bmachine\s*learning\b", re.compile(r"\bIA\b"),
    ),
    rule("Gaming", r"\bgaming\b", r"\bjuegos?\b", r"\bgame\b", r"\bvideojuegos?\b"),
    rule("Photography", r"\bfoto", r"\bphoto", r"\bcámara\b", r"\bcamera\b"),
    rule("Productivity", r"\bproductivid", r"\bproductiv", r"\borganizaci"),
    rule("Opinion", r"\bopinión\b", r"\bopinion\b", r"\bpienso\b", r"\bcreo\s+que\b"),
)
