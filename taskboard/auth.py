from functools import wraps
import logging

from flask import Blueprint, current_app, jsonify, redirect, request, session, url_for
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from google_auth_oauthlib.flow import Flow

logger = logging.getLogger(__name__)

GOOGLE_SCOPES = [
    'openid',
    'https://www.googleapis.com/auth/userinfo.email',
    'https://www.googleapis.com/auth/userinfo.profile',
]

bp = Blueprint('auth', __name__)


def current_user():
    return session.get('user')


def login_required(f):
    """Reject requests without a signed-in user; API paths get 401, pages redirect."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if not current_app.config['TASKBOARD'].auth_enabled:
            return f(*args, **kwargs)
        if current_user() is None:
            if request.path.startswith('/api/'):
                return jsonify({'error': 'Authentication required'}), 401
            return redirect(url_for('auth.login'))
        return f(*args, **kwargs)
    return decorated


def _redirect_uri():
    config = current_app.config['TASKBOARD']
    return config.oauth_redirect_uri or url_for('auth.callback', _external=True)


def _build_flow(state=None):
    config = current_app.config['TASKBOARD']
    client_config = {
        'web': {
            'client_id': config.google_client_id,
            'client_secret': config.google_client_secret,
            'auth_uri': 'https://accounts.google.com/o/oauth2/auth',
            'token_uri': 'https://oauth2.googleapis.com/token',
            'redirect_uris': [_redirect_uri()],
        }
    }
    return Flow.from_client_config(
        client_config,
        scopes=GOOGLE_SCOPES,
        state=state,
        redirect_uri=_redirect_uri()
    )


@bp.route('/login')
def login():
    if not current_app.config['TASKBOARD'].auth_enabled:
        return redirect(url_for('index'))

    flow = _build_flow()
    auth_url, state = flow.authorization_url(
        include_granted_scopes='true',
        prompt='select_account'
    )
    session['oauth_state'] = state
    return redirect(auth_url)


@bp.route('/auth/callback')
def callback():
    error = request.args.get('error')
    if error:
        logger.warning(f"Google sign-in refused: {error}")
        return jsonify({'error': f'Sign-in failed: {error}'}), 401

    state = session.pop('oauth_state', None)
    if not state or state != request.args.get('state'):
        return jsonify({'error': 'Invalid OAuth state'}), 400

    config = current_app.config['TASKBOARD']
    try:
        flow = _build_flow(state=state)
        flow.fetch_token(authorization_response=request.url)
        claims = id_token.verify_oauth2_token(
            flow.credentials.id_token,
            google_requests.Request(),
            config.google_client_id
        )
    except Exception as e:
        logger.error(f"Error completing Google sign-in: {e}")
        return jsonify({'error': 'Sign-in failed'}), 401

    repository = current_app.config['REPOSITORY']
    try:
        user_id = repository.upsert_user(
            claims['email'], claims.get('name'), claims.get('picture')
        )
    except Exception as e:
        logger.error(f"Error saving user: {e}")
        return jsonify({'error': 'Failed to save user'}), 500

    session['user'] = {
        'id': user_id,
        'email': claims['email'],
        'name': claims.get('name'),
        'image': claims.get('picture'),
    }
    logger.info(f"User signed in: {claims['email']}")
    return redirect(url_for('index'))


@bp.route('/logout', methods=['GET', 'POST'])
def logout():
    session.pop('user', None)
    return redirect(url_for('auth.login'))
