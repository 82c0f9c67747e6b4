# ==============================================================================
# Bot Classifier Abstract Base Class
# ==============================================================================
"""
Abstract interface for bot-signature classification.

The session reconstructor treats classification as a black box: it hands over
the session's browser, OS, device, city and referrer and stores whatever
BotInfo comes back.

Implementations: PatternBotClassifier
"""

from abc import ABC, abstractmethod

from insights.core.models import BotInfo


class BotClassifier(ABC):
    """Classifies a session's client signature as human or bot."""

    @abstractmethod
    def classify(
        self,
        browser: str | None,
        os: str | None,
        device: str | None,
        city: str | None,
        referrer: str | None,
    ) -> BotInfo:
        """
        Classify a client signature.

        Args:
            browser: Browser name or user-agent string
            os: Operating system name
            device: Device class (desktop, mobile, tablet)
            city: Resolved city
            referrer: Referrer URL

        Returns:
            BotInfo with is_bot, bot_name and bot_category
        """
        ...
