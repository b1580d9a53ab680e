import logging

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from .entries import FileEntry
from .errors import FileManagerError, InvalidRequest
from .mutator import IncomingFile
from .transfer import ArchiveManifest

logger = logging.getLogger(__name__)

api_bp = Blueprint('filemanager', __name__)

TRUE_VALUES = ('1', 'true', 'yes', 'on')


def _component(name):
    return current_app.extensions['filemanager'][name]


def error_response(e):
    return jsonify(e.to_dict()), e.status_code


def unexpected_error(action, e):
    logger.error(f"{action} error: {e}", exc_info=True)
    return jsonify({'success': False, 'error': f'Failed to {action.lower()}'}), 500


def parse_entries(files):
    """Turns the client's list of file objects into FileEntry instances."""
    if files is None:
        return []
    if not isinstance(files, list):
        raise InvalidRequest('files must be a list')
    try:
        return [FileEntry.from_dict(item) for item in files]
    except (AttributeError, TypeError, ValueError) as e:
        raise InvalidRequest(f"Invalid file entry: {e}")


def _flag(value):
    if isinstance(value, bool):
        return value
    return str(value or '').strip().lower() in TRUE_VALUES


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidRequest('Request body must be a JSON object')
    return data


@api_bp.route('/list')
def list_files():
    """Lists files and folders in a directory."""
    path = request.args.get('path') or '/'
    search = request.args.get('search', '')
    sort_by = request.args.get('sortBy') or 'name'
    sort_order = request.args.get('sortOrder') or 'asc'

    try:
        entries = _component('lister').list(path, search, sort_by, sort_order)
    except FileManagerError as e:
        return error_response(e)
    except Exception as e:
        return unexpected_error('Fetch files', e)

    return jsonify({
        'success': True,
        'data': [entry.to_dict() for entry in entries],
        'path': path,
        'total': len(entries),
    })


def _create_folder(data):
    entry = _component('mutator').create_folder(data.get('filePath') or '/', data.get('newName'))
    return jsonify({'success': True, 'message': 'Folder created successfully', 'data': entry.to_dict()})


def _delete(data):
    entries = parse_entries(data.get('files'))
    if not entries:
        raise InvalidRequest('No items to delete')

    result = _component('mutator').delete(entries)
    body = {
        'success': bool(result.succeeded) or not result.failed,
        'message': f'Deleted {len(result.succeeded)} item(s)',
        'data': [entry.to_dict() for entry in result.succeeded],
        'failed': [failure.to_dict() for failure in result.failed],
    }
    if not body['success']:
        body['error'] = 'Failed to delete files'
        return jsonify(body), 500
    return jsonify(body)


def _rename(data):
    entries = parse_entries(data.get('files'))
    if not entries:
        raise InvalidRequest('No file to rename')

    entry = _component('mutator').rename(entries[0], data.get('newName'))
    return jsonify({'success': True, 'message': 'Renamed successfully', 'data': entry.to_dict()})


def _upload(data):
    raise InvalidRequest('Uploads must be sent as multipart form data to /upload')


def _download(data):
    entries = parse_entries(data.get('files'))
    payload = _component('transfer').prepare(entries, _flag(data.get('downloadAsZip')))
    if isinstance(payload, ArchiveManifest):
        message = 'Ready to create ZIP archive'
    else:
        message = 'File downloaded successfully'
    return jsonify({'success': True, 'message': message, 'data': payload.to_dict()})


ACTIONS = {
    'create_folder': _create_folder,
    'delete': _delete,
    'rename': _rename,
    'upload': _upload,
    'download': _download,
}


@api_bp.route('/entries', methods=['POST'])
def handle_entries():
    """Dispatches a JSON file operation by its action name."""
    try:
        data = _json_body()
        handler = ACTIONS.get(data.get('action'))
        if handler is None:
            return jsonify({'success': False, 'error': 'Unknown action'}), 400
        return handler(data)
    except FileManagerError as e:
        return error_response(e)
    except HTTPException:
        raise
    except Exception as e:
        return unexpected_error('Handle file operation', e)


@api_bp.route('/upload', methods=['POST'])
def upload_files():
    """Handles multipart file uploads."""
    try:
        files = request.files.getlist('files') + request.files.getlist('files[]')
        uploads = [f for f in files if f.filename]
        if not uploads:
            raise InvalidRequest('No files provided')
        target_dir = request.form.get('filePath') or '/'
        overwrite = _flag(request.form.get('overwrite'))

        incoming = [IncomingFile(f.filename, f.read()) for f in uploads]
        result = _component('mutator').upload(target_dir, incoming, overwrite=overwrite)
    except FileManagerError as e:
        return error_response(e)
    except HTTPException:
        raise
    except Exception as e:
        return unexpected_error('Upload files', e)

    failed = [failure.to_dict() for failure in result.failed]
    if not result.succeeded:
        return jsonify({
            'success': False,
            'error': 'No files were successfully uploaded',
            'failed': failed,
        }), 500

    return jsonify({
        'success': True,
        'message': f'Successfully uploaded {len(result.succeeded)} file(s)',
        'data': [uploaded.to_dict() for uploaded in result.succeeded],
        'failed': failed,
        'total': len(result.succeeded),
    })


@api_bp.route('/download', methods=['POST'])
def download_files():
    """Returns one file as base64, or a manifest for client-side zipping."""
    try:
        data = _json_body()
        return _download(data)
    except FileManagerError as e:
        return error_response(e)
    except HTTPException:
        raise
    except Exception as e:
        return unexpected_error('Download files', e)
