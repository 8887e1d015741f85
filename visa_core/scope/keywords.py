"""关键词语料与范围判定规则表。

所有词条均为小写，只用于子串包含判断。判定前文本中的标点一律换成空格、
两侧再补空格，因此缩写类的短词（如 " uk "、" u s "）以两侧空格的形式存放：
"UK." 和 "U.S.A" 都能命中，而 "ukulele" 之类的单词不会。

正向词与负向词在构造时保证不相交（见 tests/test_keywords.py）。
"""

from dataclasses import dataclass, replace
from typing import FrozenSet


SCHENGEN_COUNTRIES = frozenset({
    "austria",
    "belgium",
    "bulgaria",
    "croatia",
    "czech",
    "czech republic",
    "czechia",
    "denmark",
    "estonia",
    "finland",
    "france",
    "germany",
    "greece",
    "holland",
    "hungary",
    "iceland",
    "italy",
    "latvia",
    "liechtenstein",
    "lithuania",
    "luxembourg",
    "malta",
    "netherlands",
    "norway",
    "poland",
    "portugal",
    "romania",
    "slovakia",
    "slovenia",
    "spain",
    "sweden",
    "switzerland",
})

SCHENGEN_CITIES = frozenset({
    "amsterdam",
    "athens",
    "barcelona",
    "berlin",
    "bratislava",
    "brussels",
    "budapest",
    "copenhagen",
    "frankfurt",
    "geneva",
    "hamburg",
    "helsinki",
    "lisbon",
    "ljubljana",
    "madrid",
    "milan",
    "munich",
    "oslo",
    "paris",
    "prague",
    "reykjavik",
    "stockholm",
    "tallinn",
    "valletta",
    "venice",
    "vienna",
    "vilnius",
    "warsaw",
    "zurich",
})

PROCESS_TERMS = frozenset({
    "visa",
    "vfs",
    "appointment",
    "embassy",
    "consulate",
    "short stay",
    "biometric",
    "fingerprint",
    "travel insurance",
    "itinerary",
    "cover letter",
    "invitation letter",
    "sponsor letter",
    "sponsorship",
    "bank statement",
    "salary slip",
    "hotel booking",
    "flight reservation",
    "residence permit",
})

# 明确不在服务范围内的司法辖区
EXCLUDED_JURISDICTIONS = frozenset({
    "united kingdom",
    "britain",
    "british",
    "england",
    "scotland",
    "london",
    " uk ",
    "united states",
    "america",
    " usa ",
    " u s ",
    "green card",
    "h1b",
    "canada",
    "canadian",
    "australia",
    "new zealand",
    "ireland",
    "cyprus",
    "turkey",
    "dubai",
    "emirates",
    " uae ",
    "singapore",
    "japan",
    "thailand",
})

GREETING_TOKENS = frozenset({
    "hi",
    "hii",
    "hiii",
    "hiya",
    "hi there",
    "hello",
    "helo",
    "hello there",
    "hallo",
    "hey",
    "heyy",
    "hey there",
    "hola",
    "namaste",
    "good morning",
    "good afternoon",
    "good evening",
})

CAPABILITY_PHRASES = frozenset({
    "what can you do",
    "what can you do for me",
    "what can you help with",
    "what can you help me with",
    "what are your capabilities",
    "who are you",
    "what are you",
    "what are you built for",
    "what do you do",
    "what is your purpose",
    "what is your role",
    "how can you help",
    "how can you help me",
})

# 能力类问题里常见的聊天缩写，逐词替换后再与 CAPABILITY_PHRASES 比较
CHAT_ABBREVIATIONS = {
    "u": "you",
    "r": "are",
    "ur": "your",
    "wat": "what",
    "wht": "what",
}


@dataclass(frozen=True)
class KeywordSet:
    positive_terms: FrozenSet[str]
    negative_terms: FrozenSet[str]


@dataclass(frozen=True)
class ScopeRules:
    """范围判定的规则表。

    不同部署之间的差异（例如能力类问题是否只在第一条消息生效）
    通过 with_overrides 表达为配置差量，而不是另一套判定代码。
    """

    keywords: KeywordSet
    domain_name: str = "schengen"
    greeting_tokens: FrozenSet[str] = GREETING_TOKENS
    capability_phrases: FrozenSet[str] = CAPABILITY_PHRASES
    capability_first_message_only: bool = True
    # 逐词比较：长度不足 4 的词必须完全一致，较长的词允许 difflib 比值不低于该阈值
    capability_token_ratio: float = 0.75

    def with_overrides(self, **changes) -> "ScopeRules":
        return replace(self, **changes)


DEFAULT_KEYWORDS = KeywordSet(
    positive_terms=SCHENGEN_COUNTRIES | SCHENGEN_CITIES | PROCESS_TERMS,
    negative_terms=EXCLUDED_JURISDICTIONS,
)

DEFAULT_RULES = ScopeRules(keywords=DEFAULT_KEYWORDS)
