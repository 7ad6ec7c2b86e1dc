"""
/**
 * @file synthesis.py
 * @summary Optional plain-language synthesis of bills and biographies through
 *          an OpenAI-compatible chat endpoint.
 *
 * @details
 * - Entirely best effort: without an API key, or when the provider fails,
 *   the raw input text is passed through unchanged.
 * - Prompts ask for short, neutral, factual output.
 *
 * @dependencies
 * - openai (AsyncOpenAI client; base_url may point at any compatible server)
 */
"""

import logging
from typing import List, Optional

from openai import AsyncOpenAI, OpenAIError

from civiclens.utils.schemas import BillSummary

logger = logging.getLogger(__name__)

BILL_PROMPT = """Summarize this congressional bill in 1-2 plain-English sentences for a general audience. Be factual and neutral.

Title: {title}
Latest Action: {latest_action}
Policy Area: {policy_area}"""

BIOGRAPHY_PROMPT = """Write a brief, neutral 2-3 sentence biographical overview of this elected official for a civic information platform. Focus on facts, not opinions.

Name: {name}
Party: {party}
State: {state}
Chamber: {chamber}
Wikipedia excerpt: {wikipedia}
Education: {education}
Career before Congress: {career}"""


class SynthesisService:
    """
    /**
     * Generative-text helper.
     *
     * @param api_key: Provider key; None disables synthesis.
     * @param model: Chat model name.
     * @param base_url: Optional OpenAI-compatible endpoint.
     * @param client: Pre-built AsyncOpenAI client (tests inject a mock).
     */
    """

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o-mini",
                 base_url: Optional[str] = None, client: Optional[AsyncOpenAI] = None,
                 timeout: float = 30.0):
        self.model = model
        self._client = client
        self._owns_client = False
        if self._client is None and api_key:
            self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
            self._owns_client = True

    @property
    def is_available(self) -> bool:
        return self._client is not None

    async def _generate(self, prompt: str, fallback: str) -> str:
        try:
            resp = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.2,
                max_tokens=300,
            )
        except OpenAIError as e:
            logger.warning(f"Synthesis failed, returning source text: {type(e).__name__}")
            return fallback
        text = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        return text or fallback

    async def summarize_bill(self, bill: BillSummary) -> str:
        """
        /**
         * One or two sentence summary of a bill; the title when unavailable.
         */
        """
        if not self.is_available:
            return bill.title
        return await self._generate(
            BILL_PROMPT.format(title=bill.title, latest_action=bill.latest_action,
                               policy_area=bill.policy_area or "N/A"),
            fallback=bill.title,
        )

    async def generate_biography_context(self, name: str, party: str, state: str, chamber: str,
                                         wikipedia: Optional[str] = None,
                                         education: Optional[List[str]] = None,
                                         career_before: Optional[List[str]] = None) -> str:
        """
        /**
         * Short neutral overview; the Wikipedia extract when unavailable.
         */
        """
        fallback = wikipedia or ""
        if not self.is_available:
            return fallback
        return await self._generate(
            BIOGRAPHY_PROMPT.format(
                name=name, party=party, state=state, chamber=chamber,
                wikipedia=wikipedia or "N/A",
                education=", ".join(education) if education else "N/A",
                career=", ".join(career_before) if career_before else "N/A",
            ),
            fallback=fallback,
        )

    async def close(self):
        if self._owns_client:
            await self._client.close()
