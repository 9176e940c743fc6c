from app import app, csrf
from config import Config

# Register Flask Blueprints (must be at module level for gunicorn)
from blueprints import register_blueprints
register_blueprints(app, csrf)

# Import CLI commands
import cli_commands  # noqa: F401

if __name__ == '__main__':
    app.run(debug=Config.FLASK_DEBUG, host=Config.SERVER_HOST, port=Config.SERVER_PORT)
