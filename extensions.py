# extensions.py
# Extension instances shared across the application

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from scheduler import DeferredScheduler

db = SQLAlchemy()
migrate = Migrate()
scheduler = DeferredScheduler()
