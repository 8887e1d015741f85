"""消息范围判定。

ScopeClassifier 把一条用户消息映射为 Verdict，规则按以下优先级依次匹配，
先命中者生效：

1. 问候语（hi / hello / hey 及常见拼写变体）-> GREETING
2. 能力/身份类问题（"what can you do" 等，允许轻微拼写差异）-> CAPABILITY_QUERY
   若规则表要求只在第一条用户消息生效，则其余情况落到后续规则。
3. 包含明确排除的司法辖区 -> OUT_OF_SCOPE（优先于任何正向词）
4. 包含领域名称或任一正向词 -> IN_SCOPE
5. 其他 -> OUT_OF_SCOPE

判定是纯函数：不读写任何状态，同样的 (text, context) 永远得到同样的结果。
"""

import re
from dataclasses import dataclass
from difflib import SequenceMatcher
from enum import Enum
from typing import Optional

from visa_core.scope.keywords import CHAT_ABBREVIATIONS, DEFAULT_RULES, ScopeRules


_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


class Verdict(str, Enum):
    GREETING = "greeting"
    CAPABILITY_QUERY = "capability_query"
    IN_SCOPE = "in_scope"
    OUT_OF_SCOPE = "out_of_scope"


@dataclass(frozen=True)
class ClassificationContext:
    is_first_user_message: bool = False


def normalize(text: Optional[str]) -> str:
    """小写、去掉问号、合并连续空白并去除首尾空白。"""

    lowered = (text or "").lower().replace("?", "")
    return _WHITESPACE.sub(" ", lowered).strip()


def letters_only(normalized: str) -> str:
    kept = "".join(ch for ch in normalized if ch.isalpha() or ch == " ")
    return _WHITESPACE.sub(" ", kept).strip()


def spaced(normalized: str) -> str:
    """标点换成空格并在两侧补空格，供关键词子串匹配使用。"""

    return f" {_NON_ALNUM.sub(' ', normalized).strip()} "


class ScopeClassifier:
    def __init__(self, rules: ScopeRules = DEFAULT_RULES):
        self._rules = rules

    def classify(self, text: Optional[str], context: Optional[ClassificationContext] = None) -> Verdict:
        ctx = context or ClassificationContext()
        normalized = normalize(text)
        bare = letters_only(normalized)

        if bare in self._rules.greeting_tokens:
            return Verdict.GREETING

        if self._is_capability_query(bare):
            if ctx.is_first_user_message or not self._rules.capability_first_message_only:
                return Verdict.CAPABILITY_QUERY

        padded = spaced(normalized)
        if any(term in padded for term in self._rules.keywords.negative_terms):
            return Verdict.OUT_OF_SCOPE

        if self._rules.domain_name and self._rules.domain_name in normalized:
            return Verdict.IN_SCOPE
        if any(term in padded for term in self._rules.keywords.positive_terms):
            return Verdict.IN_SCOPE

        return Verdict.OUT_OF_SCOPE

    def _is_capability_query(self, bare: str) -> bool:
        if not bare:
            return False
        words = [CHAT_ABBREVIATIONS.get(w, w) for w in bare.split()]
        phrases = self._rules.capability_phrases
        if " ".join(words) in phrases:
            return True
        return any(self._words_match(words, phrase.split()) for phrase in phrases)

    def _words_match(self, words, phrase_words) -> bool:
        # 代词、助动词之类的短词决定句意（"what can i do" 不是在问助手），必须完全一致
        if len(words) != len(phrase_words):
            return False
        threshold = self._rules.capability_token_ratio
        for word, expected in zip(words, phrase_words):
            if word == expected:
                continue
            if len(expected) < 4 or SequenceMatcher(None, word, expected).ratio() < threshold:
                return False
        return True


_default_classifier = ScopeClassifier()


def classify(text: Optional[str], *, is_first_user_message: bool = False) -> Verdict:
    """使用默认规则表进行判定。"""

    return _default_classifier.classify(text, ClassificationContext(is_first_user_message=is_first_user_message))
