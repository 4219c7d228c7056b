# config.py
# Flask application configuration

import os


class Config:
    # Absolute path to the database
    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL', f'sqlite:///{os.path.join(BASE_DIR, "instance", "judging.db")}'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.environ.get('SECRET_KEY', 'your-secret-key-change-me')  # Replace with a random key in production
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # --- Presentations ---
    PRESENTATION_DURATION_MINUTES = int(os.environ.get('PRESENTATION_DURATION_MINUTES', 5))
    # Added to every deferred completion so the elapsed-time check reads >= duration
    AUTO_COMPLETE_SLACK_SECONDS = 0.5
    # A presentation this close to its end is treated as due
    AUTO_COMPLETE_TOLERANCE_SECONDS = 2
    # 'thread' or 'manual'
    SCHEDULER_BACKEND = os.environ.get('SCHEDULER_BACKEND', 'thread')

    # --- Projects and scoring ---
    PROJECTS_FILE = os.environ.get('PROJECTS_FILE', os.path.join(BASE_DIR, 'instance', 'projects.json'))
    SCORING_CRITERIA = ('technicality', 'originality', 'design', 'impact', 'presentation')
    SCORE_MAX = 5


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SECRET_KEY = 'test'
    SCHEDULER_BACKEND = 'manual'
    LOG_LEVEL = 'DEBUG'
