"""
TSV formatting rules for TWL output.

Defaults follow the translation words list conventions; any of them can
be overridden from a YAML file:

    link_template: "rc://*/tw/dict/bible/{path}"
    category_tags:
      kt: keyterm
      names: name
    columns: [Book, Chapter, Verse, ID, Tags, OrigWords, Occurrence,
              GLQuote, OccurrenceNote, TWLink]
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import yaml

from logger import get_logger

logger = get_logger(__name__)

DEFAULT_COLUMNS = [
    "Book", "Chapter", "Verse", "ID", "Tags", "OrigWords",
    "Occurrence", "GLQuote", "OccurrenceNote", "TWLink",
]

DEFAULT_CATEGORY_TAGS = {
    "kt": "keyterm",
    "names": "name",
}


@dataclass
class TSVFormat:
    """How resolved matches are rendered into TSV columns"""
    link_template: str = "rc://*/tw/dict/bible/{path}"
    category_tags: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_CATEGORY_TAGS))
    columns: List[str] = field(default_factory=lambda: list(DEFAULT_COLUMNS))

    def __post_init__(self):
        if len(self.columns) != len(DEFAULT_COLUMNS):
            raise ValueError(
                f"TSV format needs {len(DEFAULT_COLUMNS)} column names, got {len(self.columns)}"
            )
        if "{path}" not in self.link_template:
            raise ValueError(f"Link template must contain '{{path}}': {self.link_template}")

    @property
    def header(self) -> str:
        return "\t".join(self.columns)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "TSVFormat":
        fmt = cls()
        if config.get('link_template'):
            fmt.link_template = str(config['link_template'])
        if config.get('category_tags'):
            fmt.category_tags = {str(k): str(v or "") for k, v in config['category_tags'].items()}
        if config.get('columns'):
            fmt.columns = [str(c) for c in config['columns']]
        fmt.__post_init__()
        return fmt


def load_tsv_format(config_file: Optional[Path]) -> TSVFormat:
    """Load TSV formatting rules from a YAML file, defaulting on any problem"""
    if config_file is None:
        return TSVFormat()

    config_file = Path(config_file)
    if not config_file.exists():
        logger.warning(f"TSV format file not found: {config_file}, using defaults")
        return TSVFormat()

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
        fmt = TSVFormat.from_dict(config)
        logger.info(f"Loaded TSV format from {config_file}")
        return fmt
    except (yaml.YAMLError, ValueError, AttributeError) as e:
        logger.error(f"Error loading TSV format from {config_file}: {e}")
        return TSVFormat()


def article_path(article: str) -> Tuple[str, str]:
    """Split an article reference into (category, slug)"""
    parts = [p for p in article.strip().split("/") if p and p != "*"]
    if not parts:
        return "", ""
    slug = parts[-1]
    if slug.endswith(".md"):
        slug = slug[:-3]
    category = parts[-2] if len(parts) > 1 else ""
    return category, slug


def short_article_name(article: str) -> str:
    category, slug = article_path(article)
    return f"{category}/{slug}" if category else slug


def article_link(article: str, fmt: TSVFormat) -> str:
    """Resource link for an article reference"""
    if article.startswith("rc://"):
        return article
    return fmt.link_template.format(path=short_article_name(article))


def article_tags(article: str, fmt: TSVFormat) -> str:
    category, _ = article_path(article)
    return fmt.category_tags.get(category, "")


def clean_cell(value: Any) -> str:
    """Make a value safe for a single TSV cell"""
    return str(value).replace("\t", " ").replace("\r", " ").replace("\n", " ")
