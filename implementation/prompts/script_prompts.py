from implementation.classes.schemas import GenerationSubject


SCRIPT_REQUIRED_KEYS = ("title", "hook", "beats", "fact", "cta", "hashtags", "scenes", "captions")

SCRIPT_USER_PROMPT_TEMPLATE = """\
You are a shorts scriptwriter. Write a HIGH-RETENTION YouTube Shorts script in Hinglish for the movie "{display_title}".
Keep spoilers light. The video length should feel 60-75 seconds.

STYLE PROFILE
{style_text}

Return ONLY JSON with exactly these keys:
{required_keys}.

Rules:
- HOOK: <= 8 words, direct address (you/tum), curiosity gap, 0-1 emoji max. Never longer than 80 characters.
- LENGTH & FLOW:
  - Make overall pacing feel 60-75s.
  - EXACTLY 6 beats with mm:ss start markers (e.g., "00:00 - ...").
  - Beat plan:
    1) Tease the central conflict (no spoilers).
    2) Raise stakes with a vivid detail.
    3) Character/relationship tension in 1 crisp line.
    4) Visual set-piece tease (fast, cinematic).
    5) A twist / unexpected angle (no major spoiler).
    6) Payoff feeling + tease more, lead into CTA.
  - Each beat must be punchy and intriguing.
- FACT: 1 surprising production/behind-the-scenes tidbit.
- CTA: short, hype, imperative; ask to follow/subscribe for more Hinglish movie shorts.
- HASHTAGS: 7 items, all lowercase, no spaces (# optional), no duplicates, avoid movie title itself.
- SCENES (9:16): 8-10 shots, each a short creator-friendly line including VISUAL + ACTION + (optional) on-screen text + (optional) [SFX:], all in one string.
- CAPTIONS: 20-28 lines, SRT-style text (no timestamps), <= 40 chars per line, crisp Hinglish, readable on phone, natural line breaks.
- STYLE GUARDRAILS: keep slang natural (no cringe), avoid over-emoji.
- JSON STRICTNESS: Arrays MUST be valid JSON arrays like ["...","..."]. Do NOT join items into a single string.
- Output pure JSON with the keys above and nothing else: no prose before or after, no markdown.
"""

OVERVIEW_LINE_TEMPLATE = "\nOverview (for reference): {overview}"


def format_required_keys(keys: tuple[str, ...], separator: str = ", ") -> str:
    """Render keys as a quoted, comma-separated list: '"a", "b"'."""
    return separator.join(f'"{key}"' for key in keys)


def build_script_prompt(subject: GenerationSubject, style_text: str) -> str:
    """
    Render the Shorts script instruction prompt.

    Deterministic for identical inputs. The overview line is appended only when
    the subject has a non-blank overview.
    """
    prompt = SCRIPT_USER_PROMPT_TEMPLATE.format(
        display_title=subject.display_title,
        style_text=style_text,
        required_keys=format_required_keys(SCRIPT_REQUIRED_KEYS),
    )
    if subject.overview and subject.overview.strip():
        prompt += OVERVIEW_LINE_TEMPLATE.format(overview=subject.overview.strip())
    return prompt
