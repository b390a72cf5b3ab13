from typing import Callable, Tuple

# Ordered: the first type whose keyword occurs in the filename wins.
SECTION_TYPE_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('hero', ('hero', 'banner', 'slideshow', 'slider', 'main-banner', 'image-banner')),
    ('product_grid', ('product-grid', 'collection-grid', 'featured-products', 'product-list', 'collection-template')),
    ('featured_collection', ('featured-collection', 'collection-list', 'collections-list')),
    ('announcement', ('announcement', 'notice', 'alert-bar', 'promo-bar', 'announcement-bar')),
    ('newsletter', ('newsletter', 'subscribe', 'email-signup', 'mailing', 'email-capture')),
    ('testimonials', ('testimonials', 'reviews', 'social-proof', 'customer-reviews')),
    ('image_with_text', ('image-with-text', 'image-text', 'media-text', 'text-with-image')),
    ('video', ('video', 'video-hero', 'background-video', 'video-section')),
    ('instagram', ('instagram', 'social-feed', 'ig-feed', 'social-media')),
    ('footer', ('footer',)),
    ('header', ('header', 'navigation', 'nav', 'main-menu')),
)


def _has_any(content: str, *markers: str) -> bool:
    return any(m in content for m in markers)


# Content fallbacks, checked in priority order when the filename says nothing.
CONTENT_HEURISTICS: Tuple[Tuple[str, Callable[[str], bool]], ...] = (
    ('video', lambda c: _has_any(c, 'video', '.mp4', 'youtube', 'vimeo')),
    ('product_grid', lambda c: _has_any(c, 'product.price', 'product.title', 'collection.products')),
    ('newsletter', lambda c: 'form' in c and _has_any(c, 'newsletter', 'email', 'subscribe')),
    ('instagram', lambda c: _has_any(c, 'instagram', 'social')),
)


def classify_by_name(name: str):
    normalized = name.lower()
    for section_type, keywords in SECTION_TYPE_KEYWORDS:
        if any(kw in normalized for kw in keywords):
            return section_type
    return None


def classify_section_type(name: str, content: str) -> str:
    by_name = classify_by_name(name)
    if by_name:
        return by_name
    for section_type, matches in CONTENT_HEURISTICS:
        if matches(content):
            return section_type
    return 'custom'
