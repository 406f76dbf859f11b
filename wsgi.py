"""
WSGI entry point.
Run `python wsgi.py` for local development.
"""
import os
import sys

# Add app to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app import create_app

app = create_app(os.getenv('FLASK_ENV', 'production'))


if __name__ == '__main__':
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
