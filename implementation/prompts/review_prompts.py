from implementation.classes.schemas import GenerationSubject
from implementation.prompts.script_prompts import OVERVIEW_LINE_TEMPLATE, format_required_keys


DEFAULT_NARRATION_WORDS = 260

REVIEW_REQUIRED_KEYS = (
    "title",
    "oneLiner",
    "summary",
    "plotTheme",
    "whatWorks",
    "whatDoesnt",
    "bestScenes",
    "performances",
    "writingDirection",
    "actionTechnical",
    "musicVfx",
    "paceTone",
    "familyGuide",
    "whoShouldWatch",
    "whoShouldSkip",
    "ratings",
    "verdict",
    "narration",
)

REVIEW_USER_PROMPT_TEMPLATE = """\
Tu ek mast movie reviewer hai jo Hinglish me masti, style aur thoda masala dal ke review deta hai.
Movie: "{display_title}"

STYLE PROFILE
{style_text}

Return ONLY JSON with exactly these keys:
{required_keys}.

Rules:
- "narration": 3 short paras (total ~{narration_words} words).
  * Para 1: Seedha audience se baat karo, thoda story tease karo: "Scene aisa hai ki tumhe lagega wah kya premise hai!"
  * Para 2: Mast factor batao, kya dhamaka hai (acting, action, music, VFX, comedy, jo bhi movie ka spice ho). Energetic tone, thoda Hinglish slang.
  * Para 3: Waaoo factor + verdict line, ekdum catchy. CTA style line do, "subscribe karna mat bhoolna" jaisa ekdum bindass.
- Avoid boring critic tone. Zyada engaging aur hype build karne wala.
- Keep spoilers very light, bas feel dikhana hai.
- "whatWorks": 4-6 bullets (mast cheezein).
- "whatDoesnt": 2-3 polite bullets.
- "bestScenes": 3-5 teaser highlights (waoo moments).
- "ratings": object with numbers from 0 to 10 for "overall", "story", "acting", "direction", "action", "music", "vfx".
- Arrays must be JSON arrays. Pure JSON output with the keys above, no prose, no markdown.
"""


def build_review_prompt(
    subject: GenerationSubject,
    style_text: str,
    narration_words: int = DEFAULT_NARRATION_WORDS,
) -> str:
    """Render the review instruction prompt with a ~N word narration target."""
    prompt = REVIEW_USER_PROMPT_TEMPLATE.format(
        display_title=subject.display_title,
        style_text=style_text,
        required_keys=format_required_keys(REVIEW_REQUIRED_KEYS, separator=","),
        narration_words=narration_words,
    )
    if subject.overview and subject.overview.strip():
        prompt += OVERVIEW_LINE_TEMPLATE.format(overview=subject.overview.strip())
    return prompt
