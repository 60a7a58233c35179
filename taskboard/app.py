import logging
import secrets

from flask import Flask, jsonify, render_template, request

from . import auth
from .auth import current_user, login_required
from .config import Config
from .db import TaskRepository, create_pool, init_db
from .models import DEFAULT_COLUMNS, UPDATE_FIELDS, board_stats, is_column_id

logger = logging.getLogger(__name__)

RECENT_TASK_COUNT = 5


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _non_string_field(data):
    for name in UPDATE_FIELDS:
        value = data.get(name)
        if value is not None and not isinstance(value, str):
            return name
    return None


def create_app(config=None, repository=None):
    config = config or Config.from_env()

    # Configure logging
    logging.basicConfig(level=config.log_level)

    app = Flask(__name__)
    app.secret_key = config.secret_key or secrets.token_hex(32)
    if not config.secret_key:
        logger.warning("SECRET_KEY not set; sessions will not survive a restart")

    if repository is None:
        db_pool = create_pool(config)
        # Initialize database on startup
        init_db(db_pool)
        repository = TaskRepository(db_pool)

    app.config['TASKBOARD'] = config
    app.config['REPOSITORY'] = repository
    app.register_blueprint(auth.bp)

    @app.route('/')
    @login_required
    def index():
        return render_template('index.html', columns=DEFAULT_COLUMNS, user=current_user())

    @app.route('/dashboard')
    @login_required
    def dashboard():
        try:
            tasks = repository.list_tasks()
        except Exception as e:
            logger.error(f"Error loading dashboard: {e}")
            return render_template('dashboard.html', stats=None, recent_tasks=[],
                                   columns=DEFAULT_COLUMNS, user=current_user()), 500
        # list_tasks is newest first
        return render_template('dashboard.html', stats=board_stats(tasks),
                               recent_tasks=tasks[:RECENT_TASK_COUNT],
                               columns=DEFAULT_COLUMNS, user=current_user())

    @app.route('/api/health')
    def health_check():
        try:
            current_time = repository.ping()
            return jsonify({'status': 'healthy', 'database': 'connected',
                            'currentTime': str(current_time)})
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return jsonify({'status': 'unhealthy', 'database': 'disconnected'}), 500

    @app.route('/api/tasks', methods=['GET'])
    @login_required
    def get_tasks():
        try:
            tasks = repository.list_tasks()
            return jsonify({'tasks': [task.to_dict() for task in tasks]})
        except Exception as e:
            logger.error(f"Error fetching tasks: {e}")
            return jsonify({'error': 'Failed to fetch tasks'}), 500

    @app.route('/api/tasks', methods=['POST'])
    @login_required
    def add_task():
        data = _json_body()
        bad_field = _non_string_field(data)
        if bad_field:
            return jsonify({'error': f'{bad_field} must be a string'}), 400

        title = (data.get('title') or '').strip()
        column = data.get('column')

        # Validation
        if not title or not column:
            return jsonify({'error': 'Title and column are required'}), 400
        if not is_column_id(column):
            return jsonify({'error': f'Unknown column: {column}'}), 400

        user = current_user()
        try:
            task = repository.create_task(
                title,
                data.get('description') or '',
                column,
                user_id=user['id'] if user else None
            )
            return jsonify({'task': task.to_dict()}), 201
        except Exception as e:
            logger.error(f"Error adding task: {e}")
            return jsonify({'error': 'Failed to create task'}), 500

    @app.route('/api/tasks/<task_id>', methods=['GET'])
    @login_required
    def get_task(task_id):
        try:
            task = repository.get_task(task_id)
        except Exception as e:
            logger.error(f"Error fetching task: {e}")
            return jsonify({'error': 'Failed to fetch task'}), 500
        if task is None:
            return jsonify({'error': 'Task not found'}), 404
        return jsonify({'task': task.to_dict()})

    @app.route('/api/tasks/<task_id>', methods=['PUT'])
    @login_required
    def update_task(task_id):
        data = _json_body()
        bad_field = _non_string_field(data)
        if bad_field:
            return jsonify({'error': f'{bad_field} must be a string'}), 400

        fields = {name: data[name] for name in UPDATE_FIELDS if data.get(name) is not None}

        if not fields:
            return jsonify({'error': 'No fields to update'}), 400
        if 'column' in fields and not is_column_id(fields['column']):
            return jsonify({'error': f"Unknown column: {fields['column']}"}), 400
        if 'title' in fields:
            fields['title'] = fields['title'].strip()
            if not fields['title']:
                return jsonify({'error': 'Title cannot be empty'}), 400

        try:
            task = repository.update_task(task_id, fields)
        except Exception as e:
            logger.error(f"Error updating task: {e}")
            return jsonify({'error': 'Failed to update task'}), 500
        if task is None:
            return jsonify({'error': 'Task not found'}), 404
        return jsonify({'task': task.to_dict()})

    @app.route('/api/tasks/<task_id>', methods=['DELETE'])
    @login_required
    def delete_task(task_id):
        try:
            deleted = repository.delete_task(task_id)
        except Exception as e:
            logger.error(f"Error deleting task: {e}")
            return jsonify({'error': 'Failed to delete task'}), 500
        if not deleted:
            return jsonify({'error': 'Task not found'}), 404
        return jsonify({'message': 'Task deleted successfully'})

    @app.route('/api/stats')
    @login_required
    def get_stats():
        try:
            return jsonify(board_stats(repository.list_tasks()))
        except Exception as e:
            logger.error(f"Error computing stats: {e}")
            return jsonify({'error': 'Failed to compute stats'}), 500

    @app.route('/api/users')
    @login_required
    def get_users():
        try:
            users = repository.list_users()
            return jsonify({'success': True, 'count': len(users), 'users': users})
        except Exception as e:
            logger.error(f"Error fetching users: {e}")
            return jsonify({'success': False, 'error': 'Failed to fetch users'}), 500

    return app
