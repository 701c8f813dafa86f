from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import BadRequest
import logging

import config
from catalog import load_catalog
from drill_system import DrillSystem
from session_queue import FREE_STUDY
from storage import create_storage

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = Flask(__name__)

CORS(
    app,
    resources={r"/api/*": {"origins": config.FRONTEND_ORIGINS}},
    allow_headers=["Content-Type"],
    methods=["GET", "POST", "OPTIONS"]
)


def create_system():
    catalog = load_catalog(config.CATALOG_FILE)
    logger.info("Loaded %d words from %s", len(catalog), config.CATALOG_FILE)
    storage = create_storage(
        config.STORAGE_BACKEND,
        data_dir=config.DATA_DIR,
        mongo_uri=config.MONGO_URI,
        database=config.DB_NAME,
        collection=config.MONGO_COLLECTION
    )
    return DrillSystem(catalog, storage, chunk_size=config.CHUNK_SIZE)


system = create_system()


@app.errorhandler(BadRequest)
def handle_bad_request(e):
    return jsonify({'error': e.description}), 400


def _body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequest('Request body must be a JSON object')
    return data


def _word_id(data):
    """Read the word id from a request body; None means the word is not in the catalog"""
    item_id = data.get('id')
    if not isinstance(item_id, int) or isinstance(item_id, bool):
        raise BadRequest('Field "id" must be an integer')
    if item_id not in system.catalog:
        return None
    return item_id


def _flag(data, name, default=None):
    value = data.get(name, default)
    if not isinstance(value, bool):
        raise BadRequest(f'Field "{name}" must be true or false')
    return value


def _part(data):
    # -1 or null selects the whole catalog, like the part selector
    part = data.get('part')
    if part is None or part == -1:
        return None
    if not isinstance(part, int) or isinstance(part, bool):
        raise BadRequest('Field "part" must be an integer')
    if part < 0 or part >= system.catalog.parts_count(system.chunk_size):
        raise BadRequest('Part index out of range')
    return part


def _not_found():
    return jsonify({'error': 'Word not found'}), 404


# ==================== Health Check ====================

@app.route('/', methods=['GET'])
def index():
    return jsonify({
        'message': 'Vocabulary Drill API',
        'version': '1.0.0',
        'status': 'running'
    })

@app.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok'})

# ==================== Catalog APIs ====================

@app.route('/api/stats', methods=['GET'])
def get_statistics():
    return jsonify(system.stats())

@app.route('/api/parts', methods=['GET'])
def get_parts():
    ranges = system.catalog.part_ranges(system.chunk_size)
    return jsonify({
        'chunk_size': system.chunk_size,
        'count': len(ranges),
        'parts': [{'index': i, 'first': first, 'last': last} for i, first, last in ranges]
    })

@app.route('/api/words', methods=['GET'])
def get_words():
    query = request.args.get('q', '')
    unknown_only = request.args.get('unknown', '') in ('1', 'true')

    words = system.catalog.search(query)
    if unknown_only:
        words = [w for w in words if system.is_unknown(w.id)]

    return jsonify({'count': len(words), 'words': [system.describe(w) for w in words]})

@app.route('/api/due', methods=['GET'])
def get_due_words():
    due = system.due_items()
    return jsonify({'count': len(due), 'words': [system.describe(w) for w in due]})

# ==================== Rating APIs ====================

@app.route('/api/rate', methods=['POST'])
def rate_word():
    data = _body()
    item_id = _word_id(data)
    success = _flag(data, 'success')
    if item_id is None:
        return _not_found()

    with system.lock:
        saved = system.rate(item_id, success)
        word = system.describe(system.catalog.get(item_id))
    return jsonify({'saved': saved, 'word': word})

@app.route('/api/unknown/toggle', methods=['POST'])
def toggle_unknown():
    data = _body()
    item_id = _word_id(data)
    if item_id is None:
        return _not_found()

    with system.lock:
        saved = system.toggle_unknown(item_id)
        word = system.describe(system.catalog.get(item_id))
    return jsonify({'saved': saved, 'word': word})

# ==================== Session APIs ====================

@app.route('/api/study/start', methods=['POST'])
def start_study():
    data = _body()
    part = _part(data)
    unknown_only = _flag(data, 'unknown_only', False)
    shuffle = _flag(data, 'shuffle', True)

    with system.lock:
        system.start_study(part, unknown_only, shuffle)
        result = system.snapshot()
    return jsonify(result)

@app.route('/api/study/shuffle', methods=['POST'])
def shuffle_study():
    with system.lock:
        try:
            system.shuffle()
        except ValueError as e:
            raise BadRequest(str(e))
        result = system.snapshot()
    return jsonify(result)

@app.route('/api/review/start', methods=['POST'])
def start_review():
    with system.lock:
        system.start_review()
        result = system.snapshot()
    return jsonify(result)

@app.route('/api/session', methods=['GET'])
def get_session():
    return jsonify(system.snapshot())

@app.route('/api/session/next', methods=['POST'])
def next_word():
    with system.lock:
        signal = system.advance()
        result = system.snapshot()
    result['signal'] = signal
    return jsonify(result)

@app.route('/api/session/answer', methods=['POST'])
def answer_word():
    data = _body()
    success = _flag(data, 'success')

    with system.lock:
        mode = system.session.mode
        saved, signal = system.answer(success)
        result = system.snapshot()
    result['saved'] = saved
    result['signal'] = signal
    # free study keeps the answered card on screen briefly before moving on
    result['advance_delay_ms'] = config.ADVANCE_DELAY_MS if mode == FREE_STUDY else 0
    return jsonify(result)

# ==================== Entry Point ====================

if __name__ == '__main__':
    print("=" * 50)
    print("Vocabulary Drill Backend")
    print("Environment:", config.ENV)
    print("Port:", config.PORT)
    print("Storage:", config.STORAGE_BACKEND)
    print("=" * 50)
    app.run(host="0.0.0.0", port=config.PORT, debug=(config.ENV != "production"))
