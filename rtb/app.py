import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from flask import Flask, jsonify, request

# Structured logging
from core.utils.logging_config import setup_logging, get_logger
logger = setup_logging(level=os.environ.get('LOG_LEVEL', 'INFO'))
app_logger = get_logger('rtb.app')
app_logger.info('RTB app module loading...')
from flask_compress import Compress
from flask_login import LoginManager
from core.auth.models import User
from core.auth.repositories import UserRepository
from database import init_db, ping_db
from navigation.config import get_config

_user_repo = UserRepository()


app = Flask(__name__)

# Secret key - required in production, dev fallback only when FLASK_DEBUG=true
_secret_key = os.environ.get('FLASK_SECRET_KEY', os.environ.get('SECRET_KEY'))
if not _secret_key:
    if os.environ.get('FLASK_DEBUG', 'false').lower() == 'true':
        _secret_key = 'dev-secret-key-for-local-only'
        app_logger.warning('Using development secret key - set FLASK_SECRET_KEY for production')
    else:
        raise RuntimeError('FLASK_SECRET_KEY environment variable is required')
app.secret_key = _secret_key

compress = Compress()
compress.init_app(app)

login_manager = LoginManager()
login_manager.init_app(app)

app.config['SESSION_COOKIE_SECURE'] = True
app.config['SESSION_COOKIE_HTTPONLY'] = True
app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'


@login_manager.user_loader
def load_user(user_id):
    row = _user_repo.get_by_id(user_id)
    return User(row) if row else None


@login_manager.unauthorized_handler
def handle_unauthorized():
    return jsonify({'success': False, 'error': 'Authentication required'}), 401


# Fail fast on a bad NAV_* environment
_nav_config = get_config()

# profiles backs load_user, so the schema is needed with any sidebar storage
init_db()

# ============== Blueprint Registrations ==============

from navigation import navigation_bp
app.register_blueprint(navigation_bp)

app_logger.info(f'RTB startup complete - {len(app.url_map._rules)} routes registered')

# ============== Global Error Handlers ==============

@app.errorhandler(404)
def handle_404(e):
    return jsonify({'success': False, 'error': 'Not found', 'path': request.path}), 404


@app.errorhandler(405)
def handle_405(e):
    return jsonify({'success': False, 'error': 'Method not allowed'}), 405


# ============== Health Check ==============

@app.route('/health')
def health_check():
    """Health check. The database holds user profiles, so it is always checked."""
    checks = {'storage': _nav_config.STORAGE_BACKEND}

    try:
        checks['database'] = ping_db()
    except Exception as e:
        checks['database'] = False
        app_logger.error(f'Health check - database failed: {e}')

    status = 'healthy' if checks['database'] else 'unhealthy'
    http_code = 200 if status == 'healthy' else 503

    return jsonify({
        'status': status,
        'checks': checks,
        'service': 'rtb-sidebar',
    }), http_code


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=os.environ.get('FLASK_DEBUG', 'false').lower() == 'true')
