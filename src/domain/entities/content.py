from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ContentKind(str, Enum):
    PRODUCTS = "products"
    HERO_SLIDES = "hero_slides"
    NEWS = "news"
    PAGES = "pages"


@dataclass(frozen=True)
class ContentSource:
    """Where a content kind keeps its image reference."""

    kind: ContentKind
    table: str
    image_column: str
    label_column: str | None
    id_column: str = "id"


CONTENT_SOURCES: dict[ContentKind, ContentSource] = {
    ContentKind.PRODUCTS: ContentSource(ContentKind.PRODUCTS, "product_images", "image_url", "alt_text"),
    ContentKind.HERO_SLIDES: ContentSource(ContentKind.HERO_SLIDES, "hero_slides", "background_image", "title"),
    ContentKind.NEWS: ContentSource(ContentKind.NEWS, "news_articles", "featured_image", "title"),
    ContentKind.PAGES: ContentSource(ContentKind.PAGES, "pages", "featured_image", "title"),
}


@dataclass(frozen=True)
class ContentImageRef:
    kind: ContentKind
    row_id: str
    url: str | None  # legacy or canonical reference; may be empty
    label: str | None = None  # title / alt text of the owning row

    def describe(self) -> str:
        suffix = f": {self.label}" if self.label else ""
        return f"{_ROW_NAMES[self.kind]} {self.row_id}{suffix}"


_ROW_NAMES = {
    ContentKind.PRODUCTS: "Product image",
    ContentKind.HERO_SLIDES: "Hero slide",
    ContentKind.NEWS: "News article",
    ContentKind.PAGES: "Page",
}
