"""
Claude API key must be defined in a .env file in the backend root:

ANTHROPIC_API_KEY=your_real_key_here

The app loads environment variables automatically using python-dotenv.
"""

import json
import logging
import os
from pathlib import Path

from anthropic import Anthropic
from dotenv import load_dotenv

from errors import UpstreamUnavailable
from models import CompetitorMetrics

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

logger = logging.getLogger(__name__)

CLAUDE_MODEL = os.getenv("CLAUDE_MODEL", "").strip() or "claude-3-5-haiku-latest"
TEMPERATURE = float(os.getenv("CLAUDE_TEMPERATURE", "0.7"))
MAX_TOKENS = int(os.getenv("CLAUDE_MAX_TOKENS", "1000"))
REQUEST_TIMEOUT_SECONDS = float(os.getenv("CLAUDE_TIMEOUT_SECONDS", "60"))

SYSTEM_MESSAGE = (
    'You are Aura, an expert SEO and digital marketing strategist. '
    "Provide brutally honest, data-driven competitive analysis in the exact format requested."
)

ANALYSIS_TEMPLATE = """You are an expert-level SEO and Digital Marketing Strategist. Your name is "Aura," and you provide brutally honest, data-driven competitive analysis.

Your primary task is to generate a "DEEP SCAN ANALYSIS" report. You will analyze a competitor's intelligence data to identify their strategy, threats, and opportunities for a user's brand. You must then formulate a recommended counter-strategy.

Your analysis must be sharp, insightful, and presented in the exact format specified below.

IMPORTANT: Your final output MUST follow this exact format, including all emojis and structure. Do not add any extra conversation or introductory text.

**User's Brand Name:** "{brand_name}"
**Competitor's Domain:** "{domain}"

**Competitor's Analyzed Data ({metric_count} Key Metrics):**
```json
{metrics_json}
```

Generate the DEEP SCAN ANALYSIS report in this exact format:

DEEP SCAN ANALYSIS: {domain}
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

📊 THREAT LEVEL: [RATING] ([SCORE]/100)
🎯 THEIR STRATEGY: [One concise sentence describing their main strategy]
⚡ KEYWORD FOCUS: "[keyword1]", "[keyword2]", "[keyword3]"

🚨 COMPETITIVE THREATS:
• [Threat based on their strengths from the data]
• [Threat based on their technical SEO]
• [Threat based on their content/authority]
• [Threat based on their market position]

💡 OPPORTUNITIES FOR "{brand_name}":
• [Gap they're not addressing that you can own]
• [Keyword opportunity they're missing]
• [Market positioning opportunity]
• [Technical or content opportunity]

🎯 RECOMMENDED STRATEGY:
• [Specific actionable recommendation]
• [Content/SEO recommendation]
• [Positioning recommendation]
• [Technical recommendation]"""


def build_analysis_prompt(metrics: CompetitorMetrics, brand_name: str, domain: str) -> str:
    return ANALYSIS_TEMPLATE.format(
        brand_name=brand_name,
        domain=domain,
        metric_count=len(metrics),
        metrics_json=json.dumps(metrics, indent=2, ensure_ascii=False),
    )


def _extract_response_text(response: object) -> str:
    content = ""
    for block in getattr(response, "content", []) or []:
        text = getattr(block, "text", None)
        if text:
            content += text
    return content.strip()


class ClaudeNarrativeProvider:
    """Single-shot Claude completion. Raises UpstreamUnavailable, no retries."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = CLAUDE_MODEL,
        max_tokens: int = MAX_TOKENS,
        temperature: float = TEMPERATURE,
        client: Anthropic | None = None,
    ) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._api_key = api_key if api_key is not None else os.getenv("ANTHROPIC_API_KEY", "").strip()
        self._client = client

    def _get_client(self) -> Anthropic:
        if self._client is None:
            if not self._api_key:
                raise UpstreamUnavailable("ANTHROPIC_API_KEY not found in environment.")
            self._client = Anthropic(api_key=self._api_key, timeout=REQUEST_TIMEOUT_SECONDS, max_retries=0)
        return self._client

    def complete(self, prompt: str) -> str:
        client = self._get_client()
        try:
            response = client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_MESSAGE,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
            )
        except Exception as exc:
            raise UpstreamUnavailable(f"Failed to generate AI analysis: {exc}") from exc

        if getattr(response, "stop_reason", None) == "max_tokens":
            logger.warning("CLAUDE WARNING: output hit max_tokens for model=%s.", self.model)

        content = _extract_response_text(response)
        if not content:
            raise UpstreamUnavailable("Empty Claude response content.")
        return content
