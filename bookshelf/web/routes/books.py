"""
Book routes for Bookshelf Sync.
"""

from flask import Blueprint, jsonify, request

from bookshelf.sync.models import Book, ReadingState
from bookshelf.web.services import get_services, to_json

books_bp = Blueprint('books', __name__, url_prefix='/api/books')


def _missing(field: str):
    return jsonify({'error': f'{field} is required'}), 400


def _json_object():
    """The JSON request body when it is an object, else None."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _not_an_object():
    return jsonify({'error': 'request body must be a JSON object'}), 400


@books_bp.route('/search')
def search():
    """Search the catalog and record the query in the history."""
    books = get_services().books
    query = request.args.get('q', '')

    state = books.search(query)
    books.save_search_query(query)
    return jsonify(to_json(state))


@books_bp.route('/favorites')
def favorites():
    return jsonify(to_json(get_services().books.load_favorites()))


@books_bp.route('/favorites/toggle', methods=['POST'])
def toggle_favorite():
    books = get_services().books
    data = _json_object()
    if data is None:
        return _not_an_object()
    if not data.get('key'):
        return _missing('key')

    ok = books.toggle_favorite(Book.from_dict(data))
    return jsonify({
        'success': ok,
        'favorites': to_json(books.favorites_state.value),
    }), 200 if ok else 400


@books_bp.route('/notes', methods=['GET', 'PUT'])
def notes():
    books = get_services().books

    if request.method == 'GET':
        key = request.args.get('key', '')
        if not key:
            return _missing('key')
        return jsonify({'key': key, 'notes': books.load_book_notes(key)})

    data = _json_object()
    if data is None:
        return _not_an_object()
    key = data.get('key') or ''
    if not key:
        return _missing('key')

    ok = books.save_book_notes(key, str(data.get('notes') or ''))
    return jsonify({
        'key': key,
        'notes': books.book_notes.value,
        'save': to_json(books.save_notes_state.value),
    }), 200 if ok else 400


@books_bp.route('/reading-state', methods=['GET', 'PUT'])
def reading_state():
    books = get_services().books

    if request.method == 'GET':
        key = request.args.get('key', '')
        if not key:
            return _missing('key')
        return jsonify({'key': key, 'state': books.load_reading_state(key).value})

    data = _json_object()
    if data is None:
        return _not_an_object()
    key = data.get('key') or ''
    if not key:
        return _missing('key')
    try:
        state = ReadingState(data.get('state'))
    except ValueError:
        choices = ', '.join(s.value for s in ReadingState)
        return jsonify({'error': f'state must be one of: {choices}'}), 400

    ok = books.update_reading_state(key, state)
    return jsonify({
        'success': ok,
        'key': key,
        'state': books.reading_state.value.value,
    }), 200 if ok else 400


@books_bp.route('/history', methods=['GET', 'DELETE'])
def history():
    books = get_services().books

    if request.method == 'DELETE':
        ok = books.clear_search_history()
        return jsonify({
            'success': ok,
            'history': to_json(books.search_history_state.value),
        }), 200 if ok else 400

    return jsonify(to_json(books.load_search_history()))


@books_bp.route('/history/<search_id>', methods=['DELETE'])
def delete_history_item(search_id):
    books = get_services().books
    ok = books.delete_search_history_item(search_id)
    return jsonify({
        'success': ok,
        'history': to_json(books.search_history_state.value),
    }), 200 if ok else 400
