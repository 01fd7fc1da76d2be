"""
Main entry point for Bookshelf Sync.

Wires the catalog client, the user data store and the sync services into a
Flask app and serves it with waitress.
"""

import atexit
from datetime import datetime
from typing import Optional

from flask import Flask, send_from_directory, abort

from bookshelf.api.openlibrary import OpenLibraryClient
from bookshelf.auth.service import AccountAuthService
from bookshelf.config import AppConfig, get_config_from_env
from bookshelf.db.database import init_db, close_db
from bookshelf.store.base import StoreError, UserStore
from bookshelf.store.blobs import LocalBlobStorage
from bookshelf.store.documents import SqlDocumentStore
from bookshelf.sync.books import BooksSyncService
from bookshelf.sync.profile import ProfileSyncService
from bookshelf.sync.repository import BooksRepository, UserRepository
from bookshelf.utils.logging import get_logger, setup_logging
from bookshelf.web.services import Services, EXTENSION_KEY

logger = get_logger(__name__)


def create_app(
    config: Optional[AppConfig] = None,
    catalog: Optional[OpenLibraryClient] = None,
    store: Optional[UserStore] = None,
) -> Flask:
    """
    Create and configure the Flask application.

    The database must already be initialized (see ``init_db``).

    Args:
        config: Application configuration, read from the environment if omitted
        catalog: Catalog client, built from ``config`` if omitted
        store: User data store, the SQL document store if omitted

    Returns:
        Configured Flask app
    """
    config = config or get_config_from_env()

    app = Flask(__name__)
    app.secret_key = config.secret_key

    catalog = catalog or OpenLibraryClient(
        config.openlibrary_url,
        timeout=config.request_timeout,
        max_retries=config.catalog_max_retries,
        limit=config.search_limit,
    )
    store = store or SqlDocumentStore()
    blobs = LocalBlobStorage(config.blob_dir, config.blob_base_url)
    auth = AccountAuthService()

    app.extensions[EXTENSION_KEY] = Services(
        auth=auth,
        books=BooksSyncService(BooksRepository(catalog, store, auth)),
        profile=ProfileSyncService(UserRepository(store, blobs, auth)),
    )

    from bookshelf.web.routes.auth import auth_bp
    from bookshelf.web.routes.books import books_bp
    from bookshelf.web.routes.profile import profile_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(books_bp)
    app.register_blueprint(profile_bp)

    @app.route('/media/<path:path>')
    def media(path):
        try:
            target = blobs.resolve(path)
        except StoreError:
            abort(404)
        return send_from_directory(target.parent.resolve(), target.name)

    @app.route('/health')
    def health():
        return {'status': 'ok', 'timestamp': datetime.utcnow().isoformat()}

    return app


def main():
    """Main entry point."""
    config = get_config_from_env()
    setup_logging(config.log_level)

    init_db(config.database_url)
    atexit.register(close_db)

    logger.info(
        "Starting Bookshelf Sync",
        version="0.1.0",
        catalog=config.openlibrary_url,
        database=config.database_url,
    )

    app = create_app(config)

    from waitress import serve
    serve(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
