import os
import logging
from flask import Flask, redirect, url_for
from dotenv import load_dotenv

from .config import DevConfig, ProdConfig
from .api.products import ProductsApi
from .session import InventorySession, SessionRegistry
from .sync import ProductSync


def create_app(config_name: str | None = None, api_factory=None) -> Flask:
    """Application factory with environment based configuration.

    ``api_factory`` builds the products API client for each browser session;
    tests pass a fake here.
    """
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)

    # Pick configuration
    env = config_name or os.getenv('ENV') or os.getenv('FLASK_ENV') or 'production'
    cfg_cls = DevConfig if env == 'development' else ProdConfig
    app.config.from_object(cfg_cls)

    # Initialise logging
    logging.basicConfig(level=logging.DEBUG if app.debug else logging.INFO)

    if api_factory is None:
        def api_factory():
            return ProductsApi(
                base_url=app.config['INVENTORY_API_URL'],
                timeout=app.config['INVENTORY_API_TIMEOUT'],
            )

    def new_session() -> InventorySession:
        sync = ProductSync(api_factory(), page_size=app.config['INVENTORY_PAGE_SIZE'])
        return InventorySession(sync)

    app.extensions['inventory'] = SessionRegistry(
        new_session,
        max_sessions=app.config['INVENTORY_MAX_SESSIONS'],
        ttl=app.config['INVENTORY_SESSION_TTL'],
    )

    @app.route('/')
    def index():
        return redirect(url_for('inventory.inventory_page'))

    from stockroom.inventory.routes import bp as inventory_bp
    from stockroom.inventory.cli import inventory_cli

    app.register_blueprint(inventory_bp, url_prefix='/inventory')
    app.cli.add_command(inventory_cli)

    return app
