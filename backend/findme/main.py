from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Find Me game server!'})

@main.route('/state')
def state():
    """Public snapshot of the lobby, same shape as the socket payloads."""
    handler = current_app.extensions['findme']
    return jsonify(handler.store.snapshot().to_dict())
