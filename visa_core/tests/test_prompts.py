from datetime import datetime, timezone

from visa_core.prompts import build_system_prompt


def test_build_system_prompt():
    now = datetime(2025, 6, 1, 9, 30, tzinfo=timezone.utc)
    prompt = build_system_prompt("Visa Buddy", "Acme Travel", now=now)
    assert prompt.startswith("You are Visa Buddy")
    assert "created by Acme Travel" in prompt
    assert "$ai_name" not in prompt
    for tag in ("tone_style", "guardrails", "capabilities", "scope", "date_time"):
        assert f"<{tag}>" in prompt
        assert f"</{tag}>" in prompt
    assert "Sunday, 01 June 2025 09:30 UTC" in prompt
