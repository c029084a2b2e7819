"""Image captcha implementation of ChallengeGenerator.

Renders challenges to PNG with the ``captcha`` package and returns them as
data URIs the widget can drop straight into an ``<img>`` tag.

- text: random characters, visually ambiguous ones (``0oO1ilI``) excluded
- arithmetic: ``a+b=`` / ``a-b=`` with operands in a bounded range; the
  expected answer is the result as a decimal string and is compared as a
  string, not as a number

Content randomness comes from a private ``random.SystemRandom`` and is never
shared with challenge-id generation.
"""

from __future__ import annotations

import base64
import io
import random
import string
from typing import Optional

from captcha.image import ImageCaptcha
from PIL import ImageColor

from config import CaptchaSettings
from errors import ConfigurationError
from schemas.models.challenge import GeneratedChallenge
from schemas.models.provider import ChallengeMethod

_TEXT_ALPHABET = string.ascii_letters + string.digits
_INPUT_KIND = "text"


class ImageCaptchaGenerator:
    def __init__(
        self,
        settings: Optional[CaptchaSettings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._settings = settings or CaptchaSettings()
        self._rng = rng or random.SystemRandom()
        self._image = ImageCaptcha(
            width=self._settings.image_width,
            height=self._settings.image_height,
        )
        self._background = ImageColor.getrgb(self._settings.background)
        self._alphabet = "".join(
            ch for ch in _TEXT_ALPHABET if ch not in self._settings.ignore_chars
        )

    def generate(self, method: ChallengeMethod) -> GeneratedChallenge:
        try:
            method = ChallengeMethod(method)
        except ValueError:
            raise ConfigurationError(f"unsupported challenge method: {method!r}") from None

        if method is ChallengeMethod.TEXT:
            shown, answer = self._text_challenge()
        else:
            shown, answer = self._math_challenge()

        return GeneratedChallenge(
            image=self._render(shown),
            expected_answer=answer,
            input_kind=_INPUT_KIND,
            method=method,
        )

    def _text_challenge(self) -> tuple[str, str]:
        text = "".join(
            self._rng.choice(self._alphabet) for _ in range(self._settings.text_length)
        )
        return text, text

    def _math_challenge(self) -> tuple[str, str]:
        s = self._settings
        left = self._rng.randint(s.math_min, s.math_max)
        right = self._rng.randint(s.math_min, s.math_max)
        operator = self._rng.choice(s.math_operators)
        if operator == "-":
            # Keep results non-negative so the answer never needs a sign
            left, right = max(left, right), min(left, right)
            result = left - right
        else:
            result = left + right
        return f"{left}{operator}{right}=", str(result)

    def _foreground(self) -> tuple[int, int, int]:
        # Bright colours read well on the dark default background
        return tuple(self._rng.randint(140, 255) for _ in range(3))  # type: ignore[return-value]

    def _render(self, text: str) -> str:
        image = self._image.generate_image(
            text, bg_color=self._background, fg_color=self._foreground()
        )
        buf = io.BytesIO()
        image.save(buf, format="PNG")
        encoded = base64.b64encode(buf.getvalue()).decode("ascii")
        return f"data:image/png;base64,{encoded}"
