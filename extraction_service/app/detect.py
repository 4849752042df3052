from bs4 import BeautifulSoup

CHALLENGE_FORM_SELECTORS = [
    "form[action*='validateCaptcha']",
    "form#challenge-form",
    "form[action*='captcha']",
]

# Matched against the start of the title only
BLOCK_TITLE_PREFIXES = (
    "robot check",
    "captcha",
    "whoa there, pardner",
    "just a moment",
    "attention required",
    "verify you are human",
)


def detect_block(html: str, title: str = "") -> bool:
    """
    True when the page is a challenge/verification page instead of content.

    Checks for a challenge form first, then whether the title starts with a
    known challenge title.
    A miss here surfaces later as an empty result.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    for selector in CHALLENGE_FORM_SELECTORS:
        if soup.select_one(selector) is not None:
            return True

    if not title and soup.title:
        title = soup.title.get_text(strip=True)
    lowered = (title or "").strip().lower()
    return lowered.startswith(BLOCK_TITLE_PREFIXES)
