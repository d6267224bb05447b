from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS

# Bound to the Flask app in create_app()
db = SQLAlchemy()
migrate = Migrate()
cors = CORS()
