# ==============================================================================
# Pattern-Based Bot Classifier
# ==============================================================================
"""
Signature-table implementation of the BotClassifier interface.

Matches the browser string against known crawler, AI agent, social preview
and monitoring tool signatures. The first matching pattern wins, so the
generic patterns are kept at the end of the table.
"""

import logging
import re

from insights.base.classifier import BotClassifier
from insights.core.models import BotInfo

logger = logging.getLogger(__name__)


# (pattern, name, category)
BOT_PATTERNS: list[tuple[re.Pattern, str, str]] = [
    # Search engines
    (re.compile(r"googlebot", re.I), "Googlebot", "search"),
    (re.compile(r"google-inspectiontool", re.I), "Google Inspection", "search"),
    (re.compile(r"adsbot-google", re.I), "Google Ads Bot", "search"),
    (re.compile(r"storebot-google", re.I), "Google StoreBot", "search"),
    (re.compile(r"google-extended", re.I), "Google Extended", "ai"),
    (re.compile(r"bingbot|msnbot|bingpreview", re.I), "Bingbot", "search"),
    (re.compile(r"yandexbot", re.I), "YandexBot", "search"),
    (re.compile(r"baiduspider", re.I), "Baidu Spider", "search"),
    (re.compile(r"duckduckbot", re.I), "DuckDuckBot", "search"),
    (re.compile(r"slurp", re.I), "Yahoo Slurp", "search"),
    (re.compile(r"applebot", re.I), "AppleBot", "search"),
    # AI agents
    (re.compile(r"chatgpt-user", re.I), "ChatGPT", "ai"),
    (re.compile(r"gptbot", re.I), "GPTBot (OpenAI)", "ai"),
    (re.compile(r"oai-searchbot", re.I), "OpenAI Search", "ai"),
    (re.compile(r"claudebot|claude-web", re.I), "ClaudeBot", "ai"),
    (re.compile(r"anthropic-ai", re.I), "Anthropic AI", "ai"),
    (re.compile(r"perplexitybot", re.I), "PerplexityBot", "ai"),
    (re.compile(r"cohere-ai", re.I), "Cohere AI", "ai"),
    (re.compile(r"meta-externalagent", re.I), "Meta AI", "ai"),
    (re.compile(r"bytespider", re.I), "ByteSpider (TikTok)", "ai"),
    (re.compile(r"ccbot", re.I), "CCBot (Common Crawl)", "ai"),
    # Social previews
    (re.compile(r"facebookexternalhit|facebot", re.I), "Facebook Bot", "social"),
    (re.compile(r"twitterbot", re.I), "Twitter/X Bot", "social"),
    (re.compile(r"linkedinbot", re.I), "LinkedIn Bot", "social"),
    (re.compile(r"pinterest", re.I), "Pinterest Bot", "social"),
    (re.compile(r"telegrambot", re.I), "Telegram Bot", "social"),
    (re.compile(r"whatsapp", re.I), "WhatsApp Bot", "social"),
    (re.compile(r"slackbot", re.I), "Slack Bot", "social"),
    (re.compile(r"discordbot", re.I), "Discord Bot", "social"),
    # Monitoring and SEO tools
    (re.compile(r"semrushbot", re.I), "SEMrush Bot", "monitoring"),
    (re.compile(r"ahrefsbot", re.I), "Ahrefs Bot", "monitoring"),
    (re.compile(r"mj12bot", re.I), "Majestic Bot", "monitoring"),
    (re.compile(r"dotbot", re.I), "Moz DotBot", "monitoring"),
    (re.compile(r"screaming\s?frog", re.I), "Screaming Frog", "monitoring"),
    (re.compile(r"uptimerobot", re.I), "UptimeRobot", "monitoring"),
    (re.compile(r"pingdom", re.I), "Pingdom", "monitoring"),
    (re.compile(r"gtmetrix", re.I), "GTmetrix", "monitoring"),
    # Generic (keep last)
    (re.compile(r"bot[/\s;)]", re.I), "Generic Bot", "other"),
    (re.compile(r"crawler", re.I), "Generic Crawler", "other"),
    (re.compile(r"spider", re.I), "Generic Spider", "other"),
    (re.compile(r"headless", re.I), "Headless Browser", "other"),
    (re.compile(r"phantom", re.I), "PhantomJS", "other"),
    (re.compile(r"selenium", re.I), "Selenium", "other"),
    (re.compile(r"puppeteer", re.I), "Puppeteer", "other"),
    (re.compile(r"playwright", re.I), "Playwright", "other"),
]


class PatternBotClassifier(BotClassifier):
    """
    Bot classifier backed by a regex signature table.

    Only the browser string carries a user-agent signature; the other
    signature fields are accepted for interface compatibility.
    """

    def __init__(self, patterns: list[tuple[re.Pattern, str, str]] | None = None):
        self._patterns = patterns if patterns is not None else BOT_PATTERNS

    def classify(
        self,
        browser: str | None,
        os: str | None,
        device: str | None,
        city: str | None,
        referrer: str | None,
    ) -> BotInfo:
        haystack = (browser or "").strip()
        if not haystack:
            return BotInfo()

        for pattern, name, category in self._patterns:
            if pattern.search(haystack):
                logger.debug("Classified %r as %s (%s)", haystack, name, category)
                return BotInfo(is_bot=True, bot_name=name, bot_category=category)

        return BotInfo()
