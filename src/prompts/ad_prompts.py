"""Prompt templates for Meta ad copy generation"""

from src.graph.state import BrandInfo, ResearchResult

BASE_PROMPT = """You are an expert Meta Ads copywriter. Generate compelling ad copy for the following brand:

Brand Name: {name}
Product/Service: {product}
Target Audience: {target_audience}
Tone: {tone}
Key Benefits: {key_benefits}
{context_line}{research_block}
Generate a Meta (Facebook/Instagram) ad with the following structure:

1. HOOK (attention-grabbing first line, max 15 words)
2. BODY (compelling description, 2-3 sentences, max 100 words)
3. CTA (clear call-to-action, max 8 words)

Requirements:
- Hook must stop the scroll and create curiosity
- Body must highlight benefits, not just features
- Use the specified tone: {tone}
- CTA must be action-oriented and clear
- Focus on emotional triggers and value proposition
- Make it mobile-friendly (short, punchy){research_requirements}

Return ONLY a JSON object with this exact structure (no markdown, no code blocks):
{output_schema}"""

BASIC_SCHEMA = """{
  "hook": "your hook here",
  "body": "your body text here",
  "cta": "your cta here"
}"""

RESEARCH_SCHEMA = """{
  "hook": "your hook here",
  "body": "your body text here",
  "cta": "your cta here",
  "reasoning": "why this angle should work for this audience",
  "researchInsight": "the research finding this ad is built on",
  "competitorGap": "the competitor gap this ad exploits"
}"""

RESEARCH_REQUIREMENTS = """
- Build on the research insights above instead of generic claims
- Speak to at least one real customer pain point
- Avoid the messages competitors already use
- Use the audience's own language where it fits"""


def _bullets(items: list[str], limit: int = 5) -> str:
    if not items:
        return "- (none found)"
    return "\n".join(f"- {item}" for item in items[:limit])


def build_research_block(research: ResearchResult) -> str:
    """Research-powered context section appended to the brand details"""
    audience = research.audience.common_language
    trending = [trend.topic for trend in research.market.trends]

    return f"""
RESEARCH-POWERED INSIGHTS (data quality: {research.quality_score}/100)

Brand Differentiators:
{_bullets(research.brand.differentiators)}

Market Opportunities:
{_bullets(research.competitors.opportunities)}

Saturated Competitor Messages (avoid these):
{_bullets(research.competitors.common_messages)}

Customer Pain Points:
{_bullets(research.market.pain_points)}

Audience Keywords: {", ".join(audience.keywords) or "(none found)"}
Emotional Triggers: {", ".join(audience.emotional_triggers) or "(none found)"}

Trending Topics:
{_bullets(trending)}

Unique Angles:
{_bullets(research.competitors.unique_angles)}
"""


def create_ad_prompt(brand_info: BrandInfo, research: ResearchResult | None = None) -> str:
    """
    Build the copywriting prompt for a brand.

    With research attached the prompt carries the research block and asks
    for the extra reasoning/researchInsight/competitorGap fields.
    """
    context_line = (
        f"Additional Context: {brand_info.context}\n" if brand_info.context else ""
    )
    return BASE_PROMPT.format(
        name=brand_info.name,
        product=brand_info.product,
        target_audience=brand_info.target_audience,
        tone=brand_info.tone,
        key_benefits=brand_info.key_benefits,
        context_line=context_line,
        research_block=build_research_block(research) if research else "",
        research_requirements=RESEARCH_REQUIREMENTS if research else "",
        output_schema=RESEARCH_SCHEMA if research else BASIC_SCHEMA,
    )
