"""消息范围判定与本地固定回复。

- keywords: 关键词语料与规则表。
- classifier: Verdict 判定。
- responses: 非转发类判定的固定回复。
"""

from visa_core.scope.classifier import ClassificationContext, ScopeClassifier, Verdict, classify
from visa_core.scope.keywords import DEFAULT_RULES, KeywordSet, ScopeRules
from visa_core.scope.responses import response_for

__all__ = [
    "ClassificationContext",
    "ScopeClassifier",
    "Verdict",
    "classify",
    "DEFAULT_RULES",
    "KeywordSet",
    "ScopeRules",
    "response_for",
]
