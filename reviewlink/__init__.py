# ReviewLink - Employee Review Link Collection
# ============================================
# Customers open an employee's review link and get a guided wizard:
# experience -> attributes -> AI-drafted review -> copy and post to Google.
#
# ARCHITECTURE LAYERS:
# - Presentation:   FastAPI review page and wizard JSON API (web/)
# - Domain:         Wizard state machine and validation (no external dependencies)
# - Infrastructure: External services (LLM, website crawl, SQLite, browser)
#
# This design allows easy replacement of infrastructure components
# (e.g., swap SQLite for Postgres, or OpenRouter for another LLM).
