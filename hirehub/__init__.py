from flask import Flask
from flask_migrate import Migrate
from .extensions import db, rq

migrate = Migrate()


def create_app(config_object='config.Config'):
    """App factory.

    The HTTP surface is only the provider webhooks; the reconciliation work
    itself runs from jobs (cron scripts or the RQ worker) inside an app context.
    """
    app = Flask(__name__)
    app.config.from_object(config_object)

    db.init_app(app)
    migrate.init_app(app, db)
    rq.init_app(app)

    from . import models  # noqa: F401  register every table on db.metadata
    from .api.webhooks import bp as webhooks_bp
    app.register_blueprint(webhooks_bp)

    @app.get('/healthz')
    def healthz():
        return {'ok': True}

    return app
