import logging

from flask import Flask, jsonify
from werkzeug.exceptions import RequestEntityTooLarge

from .config import Config
from .lister import DirectoryLister
from .mutator import FilesystemMutator
from .paths import normalize_root
from .routes import api_bp
from .transfer import TransferAssembler

logger = logging.getLogger(__name__)


def create_app(config=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    root = normalize_root(app.config['ROOT_DIR'])
    root.mkdir(exist_ok=True, parents=True)
    app.config['ROOT_DIR'] = root

    timeout = app.config.get('FS_CALL_TIMEOUT')
    app.extensions['filemanager'] = {
        'lister': DirectoryLister(root, timeout),
        'mutator': FilesystemMutator(root, timeout),
        'transfer': TransferAssembler(root, timeout, app.config.get('MAX_DOWNLOAD_SIZE')),
    }

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(e):
        limit = app.config.get('MAX_CONTENT_LENGTH')
        return jsonify({'success': False, 'error': f'Upload exceeds the {limit} byte limit'}), 413

    app.register_blueprint(api_bp, url_prefix=app.config['URL_PREFIX'])

    logger.info(f"File manager serving {root}")
    return app
