"""Article data model for source documents.

Articles are owned by the source document store and are read-only to this
pipeline. Store documents use deployment-specific field names, so an Article
is built through an ArticleFields mapping rather than validated directly.
"""

from typing import Any

from pydantic import BaseModel, Field

from config import ArticleFields


def _text(value: Any, default: str = "") -> str:
    """Coerce a document value to a stripped string, using default for blanks."""
    if value is None:
        return default
    text = str(value).strip()
    return text or default


class Article(BaseModel):
    """An ingested article, the unit of enrichment.

    Attributes:
        id: Stable opaque identifier (join key to enrichment records)
        title: Article headline
        author: Byline, "Unknown" when absent
        source: Publishing outlet
        published_date: Publication timestamp as stored (not validated)
        content: Body text, may be empty or short
        url: Canonical URL, empty when absent

    Example:
        >>> doc = {"id": "a1", "title": "Rates held", "content": "..."}
        >>> article = Article.from_document(doc, ArticleFields())
        >>> article.author
        'Unknown'
    """

    id: str = Field(description="Stable article identifier")
    title: str = Field(default="Untitled", description="Article headline")
    author: str = Field(default="Unknown", description="Article author")
    source: str = Field(default="Unknown source", description="Publishing outlet")
    published_date: str = Field(default="", description="Publication timestamp (unvalidated)")
    content: str = Field(default="", description="Body text")
    url: str = Field(default="", description="Canonical article URL")

    @classmethod
    def from_document(
        cls,
        document: dict[str, Any],
        fields: ArticleFields,
        article_id: str | None = None,
    ) -> "Article":
        """Build an Article from a store document.

        Args:
            document: Raw document as returned by the store
            fields: Field-name mapping for this deployment
            article_id: Identifier to use when the document lacks an `id`

        Returns:
            Article with blanks replaced by defaults
        """
        return cls(
            id=_text(document.get("id"), article_id or ""),
            title=_text(document.get(fields.title), "Untitled"),
            author=_text(document.get(fields.author), "Unknown"),
            source=_text(document.get(fields.source), "Unknown source"),
            published_date=_text(document.get(fields.published)),
            content=_text(document.get(fields.content)),
            url=_text(document.get(fields.url)),
        )

    def has_content(self, min_chars: int) -> bool:
        """Check whether the body passes the content-quality gate."""
        return bool(self.content) and len(self.content) >= min_chars

    def __str__(self) -> str:
        """Human-readable representation for logging."""
        return f"Article({self.id}, '{self.title[:50]}')"
