from flask import Flask, jsonify, request
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .errors import BreakfastError, RateLimited
from .logging_config import clear_request_id, configure_logging, get_logger, set_request_id
from .models import db
from .services import build_services
from .services.clock import Clock
from .services.rate_limit import build_rate_limit_store

logger = get_logger(__name__)


def create_app(config=None, clock=None, rate_limit_store=None):
    app = Flask(__name__)
    app.config.from_object(config or Config())
    configure_logging(app.config.get('LOG_LEVEL', 'info'))

    # Fail fast: a missing signing secret raises ConfigurationError here
    clock = clock or Clock(app.config['TIMEZONE'])
    store = rate_limit_store or build_rate_limit_store(app.config)
    app.extensions['breakfast'] = build_services(app.config, clock, store)

    db.init_app(app)
    Migrate(app, db)
    # Trust reverse proxy headers (Render/Heroku)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    with app.app_context():
        db.create_all()

    from .routes_auth import bp as auth_bp
    from .routes_api import bp as api_bp
    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(api_bp, url_prefix='/api')

    @app.before_request
    def _bind_request_id():
        set_request_id(request.headers.get('X-Request-ID'))

    @app.teardown_request
    def _unbind_request_id(exc=None):
        clear_request_id()

    @app.errorhandler(BreakfastError)
    def handle_breakfast_error(exc):
        if exc.status_code >= 500:
            logger.error('request.failed', error=exc.code, detail=exc.message, path=request.path)
        resp = jsonify(exc.to_dict())
        resp.status_code = exc.status_code
        if isinstance(exc, RateLimited):
            resp.headers['Retry-After'] = str(exc.retry_after_seconds)
        return resp

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        resp = jsonify({'ok': False, 'error': exc.name.lower().replace(' ', '_'), 'message': exc.description})
        resp.status_code = exc.code
        return resp

    @app.get('/health')
    def health():
        return {'ok': True}

    return app
