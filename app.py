# app.py
# Flask application built with the application factory pattern

import click
from flask import Flask, jsonify
from config import Config
from extensions import db, migrate, scheduler
from timer import SystemClock

# Models must be imported here so that Alembic (Migrate) can see them
from models import User, Group, PresentationSlot, Project, Score, JudgingStatus


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # --- Bind extensions to this app instance ---
    db.init_app(app)
    migrate.init_app(app, db)
    scheduler.init_app(app)
    app.extensions['clock'] = SystemClock()

    # --- Blueprints ---
    # presentations registers the auto-completion callback on import
    from routes.auth import auth_bp
    from routes.main import main_bp
    from routes.admin import admin_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(admin_bp)

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'success': False, 'code': 'not_found', 'message': 'Not found.'}), 404

    @app.cli.command('reconcile-presentations')
    def reconcile_presentations_command():
        """Complete overdue presentations and reschedule running ones after a restart."""
        from presentations import reconcile_presentations

        completed, rescheduled = reconcile_presentations()
        click.echo(f'{completed} presentation(s) completed, {rescheduled} rescheduled.')

    return app
