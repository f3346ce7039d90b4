"""Naming tables and taxonomy used when normalizing workflow listings.

These are hand-maintained data. Extend them here (or pass a custom
``Vocabulary`` to the normalizer) rather than touching the algorithm.
"""

from __future__ import annotations

from dataclasses import dataclass, field

ACRONYMS: frozenset[str] = frozenset({
    "HTTP", "HTTPS", "API", "URL", "JSON", "XML", "RSS", "AI", "ML", "SQL",
    "PDF", "CSV", "FTP", "SMTP", "IMAP", "OAUTH", "JWT", "REST", "SOAP",
    "AWS", "GCP",
})

# Acronyms whose canonical spelling is not all-caps
ACRONYM_SPELLINGS: dict[str, str] = {
    "OAUTH": "OAuth",
}

BRANDS: dict[str, str] = {
    "github": "GitHub",
    "gitlab": "GitLab",
    "linkedin": "LinkedIn",
    "youtube": "YouTube",
    "facebook": "Facebook",
    "instagram": "Instagram",
    "whatsapp": "WhatsApp",
    "telegram": "Telegram",
    "discord": "Discord",
    "slack": "Slack",
    "openai": "OpenAI",
    "anthropic": "Anthropic",
    "n8n": "n8n",
}

DEFAULT_CATEGORY = "Uncategorized"
DEFAULT_TRIGGER = "Unknown"
ROOT_FOLDER = "root"

CATEGORIES: tuple[str, ...] = (
    "AI Agent Development",
    "Business Process Automation",
    "CRM & Sales",
    "Cloud Storage & File Management",
    "Communication & Messaging",
    "Creative Content & Video Automation",
    "Creative Design Automation",
    "Data Processing & Analysis",
    "E-commerce & Retail",
    "Financial & Accounting",
    "Marketing & Advertising Automation",
    "Project Management",
    "Social Media Management",
    "Technical Infrastructure & DevOps",
    "Web Scraping & Data Extraction",
    DEFAULT_CATEGORY,
)

# JSON files that live in workflow repositories but are tooling, not workflows
EXCLUDED_FILENAMES: frozenset[str] = frozenset({
    "package.json",
    "package-lock.json",
    "tsconfig.json",
    "composer.json",
    "renovate.json",
    ".eslintrc.json",
    "vercel.json",
})


@dataclass(frozen=True)
class Vocabulary:
    """Word tables consulted by ``derive_name``."""

    acronyms: frozenset[str] = ACRONYMS
    acronym_spellings: dict[str, str] = field(default_factory=lambda: dict(ACRONYM_SPELLINGS))
    brands: dict[str, str] = field(default_factory=lambda: dict(BRANDS))

    def render(self, token: str) -> str:
        upper = token.upper()
        if upper in self.acronyms:
            return self.acronym_spellings.get(upper, upper)
        brand = self.brands.get(token.lower())
        if brand is not None:
            return brand
        return token[:1].upper() + token[1:].lower()

    def extend(
        self,
        acronyms: set[str] | None = None,
        brands: dict[str, str] | None = None,
    ) -> Vocabulary:
        """Return a copy with extra acronyms/brands added."""
        return Vocabulary(
            acronyms=self.acronyms | {a.upper() for a in (acronyms or set())},
            acronym_spellings=dict(self.acronym_spellings),
            brands={**self.brands, **{k.lower(): v for k, v in (brands or {}).items()}},
        )


DEFAULT_VOCABULARY = Vocabulary()
