"""
ReviewLink - Web Server Entry Point
===================================

Run this to start the review link server:
    python main.py

Employee review pages are served at http://127.0.0.1:8000/review/<link id>.
Set SEED_DEMO_DATA=1 to create a demo company and print its link.
"""

import logging

import uvicorn


def main():
    """Start the web server."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    print("\n" + "=" * 50)
    print("   ReviewLink - Customer Review Wizard")
    print("=" * 50)
    print("\n   Starting server at http://127.0.0.1:8000")
    print("   Press Ctrl+C to stop\n")

    uvicorn.run(
        "reviewlink.web.app:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        log_level="info"
    )


if __name__ == "__main__":
    main()
