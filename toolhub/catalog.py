"""Default tool catalog shipped with the service."""

DEFAULT_TOOLS = [
    {
        "slug": "calculator",
        "name": "Calculator",
        "description": "Basic calculator for quick arithmetic.",
    },
    {
        "slug": "review-link-generator",
        "name": "Review Link Generator",
        "description": "Build shareable links that ask customers for a review.",
    },
    {
        "slug": "text-analyzer",
        "name": "Text Analyzer",
        "description": "Word, character and readability statistics for a block of text.",
    },
    {
        "slug": "pmu-revenue-calculator",
        "name": "PMU Revenue Calculator",
        "description": "Project permanent makeup revenue from services, pricing and booking volume.",
    },
]

DEFAULT_SLUGS = tuple(t["slug"] for t in DEFAULT_TOOLS)
