from flask import Blueprint, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the promptparty game server!'})

@main.route('/ping')
def ping():
    return jsonify({'message': 'pong'})
