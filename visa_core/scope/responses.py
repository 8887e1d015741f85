"""固定回复。

GREETING / CAPABILITY_QUERY / OUT_OF_SCOPE 三类判定在本地直接回复，
不经过模型；IN_SCOPE 交给后端，这里没有对应条目。
"""

from typing import Mapping

from visa_core.scope.classifier import Verdict


GREETING_RESPONSE = (
    "Hi! I can help you with Schengen visa guidance. Ask me about documents, proofs, "
    "accommodation, travel, sponsorship, insurance, or interview prep. "
    "Which country are you applying for?"
)

CAPABILITY_RESPONSE = """Here's what I can help you with as a Schengen Visa Assistant:

• Documents required
• Financial proofs
• Accommodation proofs
• Transport proofs
• Sponsorship
• Insurance
• Special-category documents
• Minor (under 18) requirements
• Signatures & declarations
• Interview preparation

Ask me anything related to a **Schengen visa**, including country-specific guidance for France, Germany, \
Italy, Spain, Netherlands, Finland, Belgium, Czech Republic, Austria, Switzerland, Norway, Denmark, Estonia, \
Latvia, Lithuania, Slovakia, Slovenia, Hungary, Poland, Malta, Luxembourg, Iceland and Liechtenstein."""

REFUSAL_RESPONSE = "Sorry, I'm not built for that. I can only help with Schengen visa-related questions."

CANNED_RESPONSES: Mapping[Verdict, str] = {
    Verdict.GREETING: GREETING_RESPONSE,
    Verdict.CAPABILITY_QUERY: CAPABILITY_RESPONSE,
    Verdict.OUT_OF_SCOPE: REFUSAL_RESPONSE,
}


def response_for(verdict: Verdict) -> str:
    try:
        return CANNED_RESPONSES[verdict]
    except KeyError:
        raise KeyError(f"No canned response for verdict: {verdict.value!r}") from None
