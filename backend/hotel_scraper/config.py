"""
Site configurations for hotel search-results sources.

Each site has a SiteConfig that defines:
- The search URL template and pagination parameters
- The listing container selector and ordered field lookup rules
- Scraper type (static, javascript) and the polite delay between pages
"""

from .base import SiteConfig, ScraperType, FieldRule


# ============================================================
# FIELD LOOKUP RULES (booking.com)
# Primary selectors use data-testid attributes; the fallbacks are
# generated class names that change whenever the site is redeployed.
# ============================================================
BOOKING_FIELD_RULES = (
    FieldRule('name', 'div[data-testid="title"]'),
    FieldRule('name', 'div.a23c043802'),

    FieldRule('location', 'span[data-testid="address"]'),
    FieldRule('location', 'span.f4bd0794db'),

    FieldRule('price', 'span[data-testid="price-and-discounted-price"]'),
    FieldRule('price', 'span.fcab3ed991.fbd1d3018c'),
)

# Longest first so "US$" is stripped before "$"
CURRENCY_PREFIXES = ('US$', 'CA$', 'AU$', 'HK$', 'NZ$', 'R$', '€', '£', '¥', '$')


# ============================================================
# SITE CONFIGURATIONS
# ============================================================

SITES = {
    'booking': SiteConfig(
        name='Booking.com',
        short_name='Booking',
        search_url=(
            'https://www.booking.com/searchresults.html'
            '?ss={query}&dest_type=country&nflt=&order=popularity'
        ),
        listing_selector='div[data-testid="property-card"]',
        scraper_type=ScraperType.JAVASCRIPT,
        page_size=25,
        offset_param='offset',
        field_rules=BOOKING_FIELD_RULES,
        currency_prefixes=CURRENCY_PREFIXES,
        rate_limit_seconds=5.0,
        enabled=True,
    ),
}


# ============================================================
# HELPER FUNCTIONS
# ============================================================

def get_site_config(site_key: str) -> SiteConfig:
    """
    Get configuration for a site by its key.

    Args:
        site_key: Site identifier (e.g., 'booking')

    Returns:
        SiteConfig for the site

    Raises:
        ValueError: If site_key is not found
    """
    if site_key not in SITES:
        valid_keys = ', '.join(sorted(SITES.keys()))
        raise ValueError(f"Unknown site: '{site_key}'. Valid sites: {valid_keys}")
    return SITES[site_key]


def get_enabled_sites() -> dict:
    """Get all enabled sites."""
    return {k: v for k, v in SITES.items() if v.enabled}


def get_site_summary() -> list:
    """Get a summary of all sites for display."""
    summary = []
    for key, config in SITES.items():
        summary.append({
            'key': key,
            'name': config.name,
            'short_name': config.short_name,
            'type': config.scraper_type.value,
            'enabled': config.enabled,
            'page_size': config.page_size,
            'url': config.search_url,
        })
    return summary
