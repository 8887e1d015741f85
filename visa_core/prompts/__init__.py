"""系统提示词加载工具。

按语言(locale) 从 prompts/<locale> 目录读取各段提示词，
拼接成完整的 system prompt，用于构造 ChatMessage(role="system")。
"""

from datetime import datetime, timezone
from pathlib import Path
from string import Template
from typing import Optional


PROMPTS_DIR = Path(__file__).resolve().parent

# (标签, 文件名)；identity 段不加标签，直接放在最前面
SECTIONS = (
    ("", "identity.md"),
    ("tone_style", "tone_style.md"),
    ("guardrails", "guardrails.md"),
    ("capabilities", "capabilities.md"),
    ("scope", "scope.md"),
)


def load_section(fname: str, locale: str = "en") -> str:
    return (PROMPTS_DIR / locale / fname).read_text(encoding="utf-8").strip()


def build_system_prompt(
    ai_name: str,
    owner_name: str,
    now: Optional[datetime] = None,
    locale: str = "en",
) -> str:
    """拼接完整的系统提示词。

    各段内容使用 $ai_name / $owner_name 占位符，末尾追加当前日期时间，
    方便模型回答与办理时效相关的问题。
    """

    values = {"ai_name": ai_name, "owner_name": owner_name}
    blocks = []
    for tag, fname in SECTIONS:
        text = Template(load_section(fname, locale)).safe_substitute(values)
        blocks.append(f"<{tag}>\n{text}\n</{tag}>" if tag else text)
    stamp = (now or datetime.now(timezone.utc)).strftime("%A, %d %B %Y %H:%M %Z").strip()
    blocks.append(f"<date_time>\n{stamp}\n</date_time>")
    return "\n\n".join(blocks)
