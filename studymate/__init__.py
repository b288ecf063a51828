from flask import Flask, jsonify
from openai import OpenAIError
from studymate.config import config as default_config
from studymate.errors import ProviderError, RequestValidationError, StudyMateError
from studymate.services.ai_service import AIService
from studymate.services.community_service import CommunityService
from studymate.services.data_service import DataService
from studymate.services.focus_service import FocusService
import logging
from logging.handlers import RotatingFileHandler
import os

def create_app(cfg=None, client=None):
    cfg = cfg or default_config
    app = Flask(__name__)

    # Configure Logging
    os.makedirs(cfg.LOG_DIR, exist_ok=True)
    file_handler = RotatingFileHandler(os.path.join(cfg.LOG_DIR, 'app.log'), maxBytes=10240, backupCount=10)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
    ))
    file_handler.setLevel(logging.INFO)
    app.logger.addHandler(file_handler)
    app.logger.setLevel(logging.INFO)
    app.logger.info('StudyMate startup')

    # Apply Config
    app.config['SECRET_KEY'] = cfg.SECRET_KEY
    app.config['MAX_CONTENT_LENGTH'] = cfg.MAX_CONTENT_LENGTH
    app.json.ensure_ascii = cfg.JSON_AS_ASCII

    # Services, one set per app
    store = DataService(cfg.DATA_DIR)
    ai = AIService(cfg, client=client)
    app.extensions['studymate'] = {
        'config': cfg,
        'store': store,
        'ai': ai,
        'community': CommunityService(store, ai),
        'focus': FocusService(store, ai),
    }

    # Register Blueprints
    from studymate.routes.main import main_bp
    from studymate.routes.auth import auth_bp
    from studymate.routes.api import api_bp
    from studymate.routes.focus import focus_bp
    from studymate.routes.community import community_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp)
    app.register_blueprint(focus_bp)
    app.register_blueprint(community_bp)

    # Error Handlers
    @app.errorhandler(RequestValidationError)
    def request_invalid(e):
        return jsonify({"error": e.message, "details": e.details}), e.status_code

    @app.errorhandler(ProviderError)
    def provider_failed(e):
        app.logger.error('Provider error: %s', e.message)
        return jsonify({"error": ProviderError.public_message}), e.status_code

    @app.errorhandler(StudyMateError)
    def studymate_error(e):
        if e.status_code >= 500:
            app.logger.error('%s: %s', type(e).__name__, e.message)
        return jsonify({"error": e.message}), e.status_code

    @app.errorhandler(OpenAIError)
    def openai_failed(e):
        app.logger.exception('Model provider call failed')
        return jsonify({"error": ProviderError.public_message}), 502

    @app.errorhandler(413)
    def request_entity_too_large(e):
        app.logger.warning('Request entity too large')
        return jsonify({"error": "The uploaded file is too large."}), 413

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found."}), 404

    @app.errorhandler(500)
    def internal_error(e):
        app.logger.error(f'Server Error: {e}')
        return jsonify({"error": "Internal Server Error"}), 500

    return app
