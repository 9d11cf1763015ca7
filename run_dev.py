#!/usr/bin/env python3
"""
GameShelf Development Server
Runs Flask on port 5000 with rate limiting off
"""
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from gameshelf_app import create_app

if __name__ == '__main__':
    app = create_app({'DISABLE_RATE_LIMITING': True})
    app.run(
        host='0.0.0.0',
        port=5000,
        debug=True,
        use_reloader=False
    )
