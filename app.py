import logging
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect
from sqlalchemy.orm import DeclarativeBase
from werkzeug.middleware.proxy_fix import ProxyFix
from config import get_config

# Get configuration based on environment
config_class = get_config()

# Configure logging with centralized configuration
logging.basicConfig(level=getattr(logging, config_class.LOG_LEVEL),
                   format=config_class.LOG_FORMAT)

logger = logging.getLogger(__name__)

class Base(DeclarativeBase):
    pass

db = SQLAlchemy(model_class=Base)

# Create the app
app = Flask(__name__)
app.config.from_object(config_class)
app.secret_key = app.config['SECRET_KEY']
app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)

# Secure session cookie configuration
# SESSION_COOKIE_SECURE solo in produzione (HTTPS richiesto)
app.config['SESSION_COOKIE_SECURE'] = not (app.config.get('FLASK_DEBUG', False) or app.config.get('TESTING', False))
app.config['SESSION_COOKIE_HTTPONLY'] = True  # Previene accesso JavaScript ai cookie
app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'  # Protezione CSRF
app.config['PERMANENT_SESSION_LIFETIME'] = app.config['SESSION_TIMEOUT']
app.config['MAX_CONTENT_LENGTH'] = app.config['MAX_UPLOAD_SIZE']

# Initialize CSRF protection
csrf = CSRFProtect(app)

# Configure the database using centralized configuration
app.config["SQLALCHEMY_DATABASE_URI"] = app.config['DATABASE_URL']
if not app.config['DATABASE_URL'].startswith('sqlite'):
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {
        "pool_recycle": app.config['DATABASE_POOL_RECYCLE'],
        "pool_pre_ping": app.config['DATABASE_POOL_PRE_PING'],
    }

# Initialize the app with the extension
db.init_app(app)

# Initialize Flask-Login
login_manager = LoginManager()
login_manager.init_app(app)
login_manager.login_message = 'Effettua il login per accedere a questa pagina.'

@login_manager.user_loader
def load_user(user_id):
    from models import User
    return db.session.get(User, int(user_id))

@login_manager.unauthorized_handler
def unauthorized():
    """Sessione assente o scaduta: il client deve ripetere l'accesso"""
    return jsonify({'message': 'Non autorizzato'}), 401

@app.errorhandler(404)
def not_found(error):
    return jsonify({'message': 'Risorsa non trovata'}), 404

@app.errorhandler(413)
def payload_too_large(error):
    return jsonify({'message': 'File troppo grande'}), 413

@app.errorhandler(500)
def internal_error(error):
    db.session.rollback()
    logger.error(f"Errore interno: {error}")
    return jsonify({'message': 'Errore interno del server'}), 500

with app.app_context():
    # Import models to ensure tables are created
    import models  # noqa: F401
    db.create_all()

