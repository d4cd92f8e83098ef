from .attribute_provider import AttributeProvider
from .website_crawler import WebsiteCrawler, extract_visible_text

__all__ = ["AttributeProvider", "WebsiteCrawler", "extract_visible_text"]
