# Infrastructure Layer
# ====================
# Contains all external service integrations:
# - llm/: OpenRouter client and the review text generator
# - scraper/: website crawl and attribute extraction
# - browser/: clipboard strategies and review-site navigation
# - persistence/: SQLite companies, employees and reviews
# - config/: Environment and settings management
#
# This layer can be replaced entirely without affecting the domain layer.
