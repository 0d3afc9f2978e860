"""Prompt construction for article analysis.

The prompt embeds the article's metadata and a bounded content excerpt,
then mandates a JSON object with exactly two fields. Rendering is pure:
the same article snapshot always yields the same prompt.
"""

from models.article import Article

# Cap on content sent to the model, bounds token cost per call
MAX_PROMPT_CONTENT_CHARS = 3000

ANALYSIS_INSTRUCTIONS = """Analyze the following news article.

Write:
- summary: 2-3 concise sentences covering the key facts and main points.
- enhanced_content: an analysis with these sections:
  1. Key Points (3-5 bullet points)
  2. Main Entities (people, organizations, locations mentioned)
  3. Context and Background (1-2 paragraphs)
  4. Implications (what this means for readers)"""

OUTPUT_INSTRUCTIONS = """Return ONLY a JSON object with exactly these two fields and nothing else.
Do not wrap it in markdown code fences and do not add any explanation.
{"summary": "...", "enhanced_content": "..."}"""


def build_prompt(article: Article, max_content_chars: int = MAX_PROMPT_CONTENT_CHARS) -> str:
    """Render an article into a single analysis prompt.

    Args:
        article: Article to analyze
        max_content_chars: Maximum number of content characters to include

    Returns:
        Prompt string for the user turn
    """
    if article.content:
        content = article.content[:max_content_chars]
        if len(article.content) > max_content_chars:
            content += "\n[Content truncated]"
    else:
        content = "No content available"

    lines = [
        ANALYSIS_INSTRUCTIONS,
        "",
        f"Title: {article.title}",
        f"Source: {article.source}",
        f"Author: {article.author}",
        f"Published: {article.published_date or 'Unknown'}",
    ]
    if article.url:
        lines.append(f"URL: {article.url}")
    lines.extend([
        "Content:",
        content,
        "",
        OUTPUT_INSTRUCTIONS,
    ])
    return "\n".join(lines)
