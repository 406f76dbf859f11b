"""
Docextract Application Factory
"""
import importlib.util
import logging
from datetime import datetime, timezone
from flask import Flask, jsonify
from config import config

from app.utils.config import ExtractionSettings

EXTRACTOR_MODULES = {
    "pdf": "PyPDF2",
    "word": "docx",
}


def extractors_ready():
    """Report which extraction libraries can be imported"""
    return {name: importlib.util.find_spec(mod) is not None for name, mod in EXTRACTOR_MODULES.items()}


def create_app(config_name='default', **overrides):
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    app.config.update(overrides)

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    level = str(app.config.get("LOG_LEVEL") or "INFO").upper()
    app.logger.setLevel(level)

    # Fails fast on bad EXTRACT_* values
    app.extensions["extraction_settings"] = ExtractionSettings.from_mapping(app.config)

    # Register blueprints
    from app.api import api_bp

    app.register_blueprint(api_bp)

    # Health check endpoint
    @app.route('/healthz')
    def healthz():
        """Health check for load balancers and monitoring"""
        ready = extractors_ready()
        return jsonify({
            "ok": all(ready.values()),
            "version": app.config["APP_VERSION"],
            "time_utc": datetime.now(timezone.utc).isoformat(),
            "extractors": ready,
        })

    # Version endpoint
    @app.route('/version')
    def version():
        """Version and build info"""
        return jsonify({
            "version": app.config["APP_VERSION"],
            "build_time": app.config["BUILD_TIME"],
            "git_commit": app.config["GIT_COMMIT"],
            "features": {
                "pdf": True,
                "word": True,
                "plain_text": True,
                "ocr": False,
            }
        })

    return app
